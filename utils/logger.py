"""
Logging utilities for the Smart Calendar family planner
"""
import logging
import sys
import json
from datetime import datetime

class SmartCalendarLogger:
    """Custom logger for the Smart Calendar planner"""

    @staticmethod
    def setup_logging(log_level: str = "INFO", log_file: str = None):
        """Setup logging configuration"""

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, log_level.upper()))

        # Clear existing handlers
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

        # Suppress some noisy loggers
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('googleapiclient').setLevel(logging.WARNING)
        logging.getLogger('werkzeug').setLevel(logging.WARNING)

        return root_logger

    @staticmethod
    def log_request_response(endpoint: str, request_data: dict,
                             response_data: dict, processing_time: float):
        """Log a short summary of an API call for debugging"""
        logger = logging.getLogger(__name__)

        log_entry = {
            "timestamp": datetime.now().isoformat(),
            "endpoint": endpoint,
            "processing_time_seconds": round(processing_time, 4),
            "request_summary": {
                "events": len(request_data.get("events", request_data.get("ownerEvents", []))),
                "participants": len(request_data.get("members", request_data.get("participants", []))),
            },
            "response_keys": sorted(response_data.keys()),
        }

        logger.info(f"Request processed: {json.dumps(log_entry)}")
