"""Route handlers for the v1 events API."""
import logging
from typing import Any, Dict, Mapping, Optional

from api.responses import (
    events_success,
    json_response,
    status_response,
    validation_failure,
)
from processor.event_processor import EventProcessor
from processor.query_validator import QueryValidator
from storage.bucket_client import BucketClient, UpstreamError

logger = logging.getLogger(__name__)


def health(client: BucketClient) -> Dict[str, Any]:
    """Answer 200 if the bucket listing API is reachable, else 500."""
    try:
        client.ping()
    except UpstreamError:
        logger.warning("Health probe against the bucket failed", exc_info=True)
        return status_response(500)
    return status_response(200)


def get_event(client: BucketClient, event_id: str) -> Dict[str, Any]:
    """
    Proxy a single event file from the bucket.

    Args:
        client: Bucket client
        event_id: Object name of the event file

    Returns:
        200 with the file content, or 500 on any failure (unknown ids included)
    """
    try:
        document = client.get_object(event_id)
    except UpstreamError:
        logger.error(f"Failed to fetch event {event_id}", exc_info=True)
        return status_response(500)
    return json_response(200, document)


def list_events(
    client: BucketClient,
    params: Optional[Mapping[str, str]],
    validator: Optional[QueryValidator] = None,
    processor: Optional[EventProcessor] = None
) -> Dict[str, Any]:
    """
    Validate the query, list matching objects and return filtered events.

    Args:
        client: Bucket client
        params: Raw query string parameters
        validator: Query validator (default: new QueryValidator)
        processor: Event processor (default: new EventProcessor)

    Returns:
        400 with the validation errors, 200 with the events, or 500 if the
        bucket listing fails
    """
    validator = validator or QueryValidator()
    processor = processor or EventProcessor()

    result = validator.validate(params)
    if not result.is_valid:
        return validation_failure(result.errors)

    criteria = result.criteria
    try:
        raw_objects = client.list_objects(prefix=criteria.org)
    except UpstreamError:
        logger.error("Failed to list events from the bucket", exc_info=True)
        return status_response(500)

    events = processor.process(raw_objects, criteria)
    return events_success(events)
