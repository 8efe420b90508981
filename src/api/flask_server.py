"""
Flask API server exposing recurrence expansion and slot suggestions
"""
import logging
import time
import signal
import sys
from datetime import datetime
from threading import Thread
from flask import Flask, request, jsonify
from flask_cors import CORS

from config.settings import Config
from src.calendar.events import CalendarEvent, Participant, SlotSuggestion, local_wall_clock
from src.scheduler.smart_scheduler import SmartScheduler
from utils.logger import SmartCalendarLogger
from utils.validators import RequestValidator, DataSanitizer

logger = logging.getLogger(__name__)


class InvalidRequest(ValueError):
    """Raised when a payload fails validation; carries the individual errors"""

    def __init__(self, errors):
        super().__init__("; ".join(errors))
        self.errors = errors


# Request datetimes are normalized to naive local time so that "Z"-suffixed
# values from the browser compare with naive ones and with datetime.now().
def parse_events(data, field):
    return [
        CalendarEvent.from_dict(DataSanitizer.sanitize_event(event)).in_local_time()
        for event in data[field]
    ]


def parse_participants(data, field):
    return [Participant.from_dict(DataSanitizer.sanitize_participant(p)) for p in data[field]]


def parse_now(data):
    return local_wall_clock(data["now"]) if "now" in data else None


def parse_exclude_slot(data):
    if not data.get("excludeSlot"):
        return None
    slot = SlotSuggestion.from_dict(data["excludeSlot"])
    return SlotSuggestion(local_wall_clock(slot.start), local_wall_clock(slot.end), slot.reason, slot.conflicts)


class SmartCalendarAPI:
    """
    Flask API server for the planner's scheduling core
    """

    def __init__(self, scheduler: SmartScheduler = None):
        self.config = Config()
        self.app = Flask(__name__)
        CORS(self.app)  # Enable CORS for the web frontend

        self.scheduler = scheduler or SmartScheduler()
        self.requests_processed = 0
        self.start_time = time.time()

        self._setup_routes()

    def _payload(self, validate):
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            raise InvalidRequest(["No JSON object provided"])

        errors = validate(data)
        if errors:
            raise InvalidRequest(errors)

        self.requests_processed += 1
        return data

    def _respond(self, endpoint, data, response, started):
        SmartCalendarLogger.log_request_response(endpoint, data, response, time.time() - started)
        return jsonify(response)

    def _setup_routes(self):
        """Setup Flask routes"""

        @self.app.route('/health', methods=['GET'])
        def health_check():
            """Health check endpoint"""
            return jsonify({
                "status": "healthy",
                "timestamp": datetime.now().isoformat(),
                "scheduler_available": self.scheduler is not None
            })

        @self.app.route('/status', methods=['GET'])
        def get_status():
            """Get server status and statistics"""
            return jsonify({
                "status": "running",
                "requests_processed": self.requests_processed,
                "uptime": time.time() - self.start_time,
            })

        @self.app.route('/events/visible-range', methods=['POST'])
        def visible_range():
            started = time.time()
            data = self._payload(RequestValidator.validate_view_request)

            range_start, range_end = self.scheduler.visible_range(data["view"], local_wall_clock(data["anchor"]))
            response = {"start": range_start.isoformat(), "end": range_end.isoformat()}
            return self._respond('/events/visible-range', data, response, started)

        @self.app.route('/events/expand', methods=['POST'])
        def expand_events():
            started = time.time()
            data = self._payload(RequestValidator.validate_expand_request)
            events = parse_events(data, "events")

            if "view" in data:
                instances = self.scheduler.visible_events(data["view"], local_wall_clock(data["anchor"]), events)
            else:
                instances = self.scheduler.expand(
                    events, local_wall_clock(data["rangeStart"]), local_wall_clock(data["rangeEnd"])
                )

            response = {"events": [event.to_dict() for event in instances]}
            return self._respond('/events/expand', data, response, started)

        @self.app.route('/events/conflicts', methods=['POST'])
        def event_conflicts():
            started = time.time()
            data = self._payload(RequestValidator.validate_conflicts_request)

            conflicts = self.scheduler.find_conflicts(
                parse_events(data, "events"),
                local_wall_clock(data["start"]),
                local_wall_clock(data["end"]),
                exclude_id=data.get("excludeId"),
            )
            response = {"conflicts": [event.to_dict() for event in conflicts]}
            return self._respond('/events/conflicts', data, response, started)

        @self.app.route('/suggestions/group', methods=['POST'])
        def group_suggestion():
            started = time.time()
            data = self._payload(RequestValidator.validate_group_request)

            suggestion = self.scheduler.suggest_group_slot(
                parse_participants(data, "members"),
                parse_events(data, "ownerEvents"),
                now=parse_now(data),
                exclude_slot=parse_exclude_slot(data),
            )
            response = {"suggestion": suggestion.to_dict()}
            return self._respond('/suggestions/group', data, response, started)

        @self.app.route('/suggestions/personal', methods=['POST'])
        def personal_suggestions():
            started = time.time()
            data = self._payload(RequestValidator.validate_personal_request)

            suggestions = self.scheduler.suggest_personal_slots(
                parse_events(data, "ownerEvents"),
                parse_participants(data, "participants"),
                now=parse_now(data),
            )
            response = {"suggestions": [suggestion.to_dict() for suggestion in suggestions]}
            return self._respond('/suggestions/personal', data, response, started)

        @self.app.errorhandler(InvalidRequest)
        def invalid_request(error):
            logger.warning(f"❌ Rejected request: {error}")
            return jsonify({"error": "Invalid request", "details": error.errors}), 400

        @self.app.errorhandler(404)
        def not_found(error):
            return jsonify({"error": "Endpoint not found"}), 404

        @self.app.errorhandler(405)
        def method_not_allowed(error):
            return jsonify({"error": "Method not allowed"}), 405

        @self.app.errorhandler(500)
        def internal_error(error):
            logger.error(f"Unexpected error: {error}")
            return jsonify({"error": "Internal server error"}), 500

    def _setup_signal_handlers(self):
        """Setup graceful shutdown handlers"""
        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, shutting down gracefully...")
            self.shutdown()
            sys.exit(0)

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def run(self, host=None, port=None, debug=False):
        """Run the Flask server"""
        host = host or self.config.API_HOST
        port = port or self.config.API_PORT

        self.start_time = time.time()
        self._setup_signal_handlers()

        logger.info(f"Starting Smart Calendar API server on {host}:{port}")

        self.app.run(
            host=host,
            port=port,
            debug=debug,
            threaded=True,
            use_reloader=False
        )

    def run_background(self, host=None, port=None):
        """Run the Flask server in background thread"""
        def run_server():
            self.app.run(host=host or self.config.API_HOST, port=port or self.config.API_PORT,
                         threaded=True, use_reloader=False)

        server_thread = Thread(target=run_server, daemon=True)
        server_thread.start()
        logger.info("Flask server started in background")
        return server_thread

    def shutdown(self):
        """Graceful shutdown"""
        logger.info(f"Shutting down Smart Calendar API server after {self.requests_processed} requests")

def create_app(scheduler: SmartScheduler = None) -> Flask:
    """Factory function to create Flask app"""
    api = SmartCalendarAPI(scheduler)
    return api.app

def main():
    """Run the API server"""
    import argparse

    parser = argparse.ArgumentParser(description='Smart Calendar planner API server')
    parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')
    parser.add_argument('--debug', action='store_true', help='Enable debug mode')

    args = parser.parse_args()

    SmartCalendarLogger.setup_logging(log_level=Config.LOG_LEVEL)
    api = SmartCalendarAPI()
    api.run(host=args.host, port=args.port, debug=args.debug)

if __name__ == '__main__':
    main()
