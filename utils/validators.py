"""
Validation utilities for the Smart Calendar planner API
"""
import re
from typing import Dict, Any, List

from config.settings import Config
from src.calendar.events import RECURRING_RULES, local_wall_clock, parse_datetime
from src.scheduler.recurrence import is_instance_id

class RequestValidator:
    """Validator for incoming planner requests; every check returns a list of errors"""

    @staticmethod
    def validate_email(email: str) -> bool:
        """Validate email format"""
        email_pattern = r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$'
        return bool(re.match(email_pattern, email))

    @staticmethod
    def validate_datetime(value: Any) -> bool:
        """True if value is an ISO-8601 datetime string"""
        try:
            parse_datetime(value)
            return True
        except (TypeError, ValueError):
            return False

    @staticmethod
    def validate_event(event: Any, label: str) -> List[str]:
        """Validate one event record"""
        if not isinstance(event, dict):
            return [f"{label} must be an object"]

        errors = []
        if not event.get("id"):
            errors.append(f"{label} missing 'id' field")

        for field in ("start", "end"):
            if field not in event:
                errors.append(f"{label} missing '{field}' field")
            elif not RequestValidator.validate_datetime(event[field]):
                errors.append(f"{label} has invalid '{field}': {event[field]}")

        if not errors and local_wall_clock(event["end"]) < local_wall_clock(event["start"]):
            errors.append(f"{label} ends before it starts")

        return errors

    @staticmethod
    def validate_event_list(data: Dict[str, Any], field: str) -> List[str]:
        if field not in data:
            return [f"Missing required field: {field}"]
        if not isinstance(data[field], list):
            return [f"'{field}' must be a list"]

        errors = []
        for i, event in enumerate(data[field]):
            errors.extend(RequestValidator.validate_event(event, f"{field}[{i}]"))
        return errors

    @staticmethod
    def validate_participant_list(data: Dict[str, Any], field: str) -> List[str]:
        if field not in data:
            return [f"Missing required field: {field}"]
        if not isinstance(data[field], list):
            return [f"'{field}' must be a list"]

        errors = []
        for i, participant in enumerate(data[field]):
            label = f"{field}[{i}]"
            if not isinstance(participant, dict):
                errors.append(f"{label} must be an object")
                continue
            if not participant.get("id") or not participant.get("name"):
                errors.append(f"{label} must have 'id' and 'name' fields")
            elif not isinstance(participant["name"], str):
                errors.append(f"{label} 'name' must be a string")
            priority = participant.get("priority", 1)
            # bool is an int subclass
            if not isinstance(priority, int) or isinstance(priority, bool):
                errors.append(f"{label} 'priority' must be an integer")
            email = participant.get("email")
            if email and (not isinstance(email, str) or not RequestValidator.validate_email(email)):
                errors.append(f"Invalid email format in {label}: {email}")
        return errors

    @staticmethod
    def validate_view_request(data: Dict[str, Any]) -> List[str]:
        """Validate a {view, anchor} pair"""
        errors = []
        if data.get("view") not in Config.CALENDAR_VIEWS:
            errors.append(f"'view' must be one of {', '.join(Config.CALENDAR_VIEWS)}")
        if "anchor" not in data:
            errors.append("Missing required field: anchor")
        elif not RequestValidator.validate_datetime(data["anchor"]):
            errors.append(f"Invalid anchor datetime: {data['anchor']}")
        return errors

    @staticmethod
    def validate_expand_request(data: Dict[str, Any]) -> List[str]:
        """Events plus either an explicit range or a view/anchor pair"""
        errors = RequestValidator.validate_event_list(data, "events")
        if not errors:
            errors.extend(
                f"events[{i}] recurring definition id already ends in an occurrence suffix: {event['id']}"
                for i, event in enumerate(data["events"])
                if event.get("recurrence") in RECURRING_RULES and is_instance_id(str(event["id"]))
            )

        if "view" in data:
            errors.extend(RequestValidator.validate_view_request(data))
            return errors

        for field in ("rangeStart", "rangeEnd"):
            if field not in data:
                errors.append(f"Missing required field: {field}")
            elif not RequestValidator.validate_datetime(data[field]):
                errors.append(f"Invalid {field} datetime: {data[field]}")
        return errors

    @staticmethod
    def validate_conflicts_request(data: Dict[str, Any]) -> List[str]:
        errors = RequestValidator.validate_event_list(data, "events")
        for field in ("start", "end"):
            if field not in data:
                errors.append(f"Missing required field: {field}")
            elif not RequestValidator.validate_datetime(data[field]):
                errors.append(f"Invalid {field} datetime: {data[field]}")
        return errors

    @staticmethod
    def validate_optional_now(data: Dict[str, Any]) -> List[str]:
        if "now" in data and not RequestValidator.validate_datetime(data["now"]):
            return [f"Invalid now datetime: {data['now']}"]
        return []

    @staticmethod
    def validate_group_request(data: Dict[str, Any]) -> List[str]:
        errors = RequestValidator.validate_participant_list(data, "members")
        errors.extend(RequestValidator.validate_event_list(data, "ownerEvents"))
        errors.extend(RequestValidator.validate_optional_now(data))

        exclude_slot = data.get("excludeSlot")
        if exclude_slot is not None:
            if not isinstance(exclude_slot, dict) or not RequestValidator.validate_datetime(exclude_slot.get("start")):
                errors.append("'excludeSlot' must be an object with an ISO 'start'")
            elif "end" in exclude_slot and not RequestValidator.validate_datetime(exclude_slot["end"]):
                errors.append(f"Invalid excludeSlot end datetime: {exclude_slot['end']}")
        return errors

    @staticmethod
    def validate_personal_request(data: Dict[str, Any]) -> List[str]:
        errors = RequestValidator.validate_event_list(data, "ownerEvents")
        errors.extend(RequestValidator.validate_participant_list(data, "participants"))
        errors.extend(RequestValidator.validate_optional_now(data))
        return errors

class DataSanitizer:
    """Sanitize and clean input data"""

    @staticmethod
    def sanitize_email(email: str) -> str:
        """Sanitize email address"""
        return email.strip().lower()

    @staticmethod
    def sanitize_text(text: str) -> str:
        """Sanitize text content"""
        # Remove excessive whitespace
        text = re.sub(r'\s+', ' ', text.strip())
        # Remove potentially harmful characters
        text = re.sub(r'[<>"\']', '', text)
        return text

    @staticmethod
    def sanitize_participant(participant: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = participant.copy()
        if sanitized.get("email"):
            sanitized["email"] = DataSanitizer.sanitize_email(sanitized["email"])
        if isinstance(sanitized.get("name"), str):
            sanitized["name"] = DataSanitizer.sanitize_text(sanitized["name"])
        return sanitized

    @staticmethod
    def sanitize_event(event: Dict[str, Any]) -> Dict[str, Any]:
        sanitized = event.copy()
        for field in ("title", "description", "location"):
            if isinstance(sanitized.get(field), str):
                sanitized[field] = DataSanitizer.sanitize_text(sanitized[field])
        return sanitized
