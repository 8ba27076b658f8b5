"""Builders for API Gateway proxy responses."""
import json
from http import HTTPStatus
from typing import Any, Dict, Iterable

from processor.models import Event, ValidationError

JSON_HEADERS = {'Content-Type': 'application/json'}


def json_response(status: int, payload: Any) -> Dict[str, Any]:
    """
    Build a proxy response with a JSON body.

    Args:
        status: HTTP status code
        payload: JSON-serializable body

    Returns:
        Response dict with statusCode, headers and body
    """
    return {
        'statusCode': status,
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(payload)
    }


def status_response(status: int) -> Dict[str, Any]:
    """Build a detail-less response carrying only the reason phrase."""
    return json_response(status, {'message': HTTPStatus(status).phrase})


def validation_failure(errors: Iterable[ValidationError]) -> Dict[str, Any]:
    """
    Build the 400 response listing every validation error.

    Args:
        errors: Validation errors in emission order

    Returns:
        Response dict whose body is an array of {code, message} objects
    """
    return json_response(400, [error.to_dict() for error in errors])


def events_success(events: Iterable[Event]) -> Dict[str, Any]:
    """
    Build the 200 response carrying the ranked events.

    Args:
        events: Filtered and ranked events (possibly empty)

    Returns:
        Response dict whose body is an array of serialized events
    """
    return json_response(200, [event.to_dict() for event in events])
