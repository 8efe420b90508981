#!/usr/bin/env python3
"""
Main entry point for the Smart Calendar family planner

Runs the API server, or processes a single JSON request file against the
scheduling core without starting a server.
"""

import sys
import json
import logging
from pathlib import Path

# Add the project directory to the Python path
sys.path.insert(0, str(Path(__file__).parent))

from config.settings import Config
from src.api.flask_server import (
    SmartCalendarAPI,
    parse_events,
    parse_exclude_slot,
    parse_now,
    parse_participants,
)
from src.calendar.events import local_wall_clock
from src.scheduler.smart_scheduler import SmartScheduler
from utils.logger import SmartCalendarLogger
from utils.validators import RequestValidator

def expand_request(request_data, scheduler=None):
    """
    Expand the events of a request file.

    The request holds ``events`` plus either ``view``/``anchor`` or
    ``rangeStart``/``rangeEnd``, the same shape the /events/expand
    endpoint accepts.
    """
    errors = RequestValidator.validate_expand_request(request_data)
    if errors:
        raise ValueError(f"Invalid expand request: {'; '.join(errors)}")

    scheduler = scheduler or SmartScheduler()
    events = parse_events(request_data, "events")

    if "view" in request_data:
        instances = scheduler.visible_events(request_data["view"], local_wall_clock(request_data["anchor"]), events)
    else:
        instances = scheduler.expand(
            events, local_wall_clock(request_data["rangeStart"]), local_wall_clock(request_data["rangeEnd"])
        )

    return {"events": [event.to_dict() for event in instances]}

def suggest_request(request_data, scheduler=None):
    """
    Produce slot suggestions for a request file.

    A request with ``members`` gets a group suggestion, one with
    ``participants`` gets personal suggestions.
    """
    scheduler = scheduler or SmartScheduler()

    if "members" in request_data:
        errors = RequestValidator.validate_group_request(request_data)
        if errors:
            raise ValueError(f"Invalid group request: {'; '.join(errors)}")

        suggestion = scheduler.suggest_group_slot(
            parse_participants(request_data, "members"),
            parse_events(request_data, "ownerEvents"),
            now=parse_now(request_data),
            exclude_slot=parse_exclude_slot(request_data),
        )
        return {"suggestion": suggestion.to_dict()}

    errors = RequestValidator.validate_personal_request(request_data)
    if errors:
        raise ValueError(f"Invalid personal request: {'; '.join(errors)}")

    suggestions = scheduler.suggest_personal_slots(
        parse_events(request_data, "ownerEvents"),
        parse_participants(request_data, "participants"),
        now=parse_now(request_data),
    )
    return {"suggestions": [suggestion.to_dict() for suggestion in suggestions]}

def _build_scheduler(use_google):
    if not use_google:
        return SmartScheduler()

    from src.calendar.calendar_manager import CalendarManager
    return SmartScheduler(calendar_manager=CalendarManager())

def run_server(host=None, port=None, use_google=False):
    """Run the Flask API server"""
    SmartCalendarLogger.setup_logging(log_level=Config.LOG_LEVEL)
    logger = logging.getLogger(__name__)

    logger.info("Starting Smart Calendar planner...")

    try:
        api = SmartCalendarAPI(_build_scheduler(use_google))
        api.run(host=host, port=port)
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")

def run_tests(api_url="http://localhost:5000"):
    """Run smoke tests against a live server"""
    from tests.test_client import SmartCalendarTestClient

    SmartCalendarLogger.setup_logging(log_level="INFO")
    logger = logging.getLogger(__name__)

    logger.info(f"Running smoke tests against {api_url}")

    client = SmartCalendarTestClient(api_url)
    results = client.run_test_suite()

    summary = results["summary"]
    print("\nTest Results:")
    print(f"  Total: {summary['total']}")
    print(f"  Passed: {summary['passed']}")
    print(f"  Failed: {summary['failed']}")
    print(f"  Avg response time: {summary['avg_response_time']:.3f}s")

    return results

def _process_file(handler, args):
    with open(args.input_file, 'r') as f:
        request_data = json.load(f)

    result = handler(request_data, _build_scheduler(args.google))

    if args.output:
        with open(args.output, 'w') as f:
            json.dump(result, f, indent=2)
    else:
        print(json.dumps(result, indent=2))

def main():
    """Main CLI entry point"""
    import argparse

    parser = argparse.ArgumentParser(description='Smart Calendar family planner')
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    server_parser = subparsers.add_parser('server', help='Run API server')
    server_parser.add_argument('--host', default=Config.API_HOST, help='Host to bind to')
    server_parser.add_argument('--port', type=int, default=Config.API_PORT, help='Port to bind to')
    server_parser.add_argument('--google', action='store_true', help='Read busy events from Google Calendar')

    test_parser = subparsers.add_parser('test', help='Run smoke tests against a running server')
    test_parser.add_argument('--url', default='http://localhost:5000', help='API URL to test')

    for name, help_text in (('expand', 'Expand events from a JSON file'),
                            ('suggest', 'Suggest slots from a JSON file')):
        file_parser = subparsers.add_parser(name, help=help_text)
        file_parser.add_argument('input_file', help='Input JSON file')
        file_parser.add_argument('--output', help='Output JSON file')
        file_parser.add_argument('--google', action='store_true', help='Read busy events from Google Calendar')

    args = parser.parse_args()

    if args.command == 'server':
        run_server(host=args.host, port=args.port, use_google=args.google)

    elif args.command == 'test':
        run_tests(api_url=args.url)

    elif args.command in ('expand', 'suggest'):
        SmartCalendarLogger.setup_logging(log_level="WARNING")
        _process_file(expand_request if args.command == 'expand' else suggest_request, args)

    else:
        parser.print_help()

if __name__ == '__main__':
    main()
