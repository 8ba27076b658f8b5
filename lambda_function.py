"""AWS Lambda handler for the MALROT events API."""
import json
import logging
import os
import time
from typing import Dict, Any

from api import routes
from api.responses import status_response
from storage.bucket_client import BucketClient


EVENTS_PATH = '/v1/events'
HEALTH_PATH = '/v1/health'
DEFAULT_TIMEOUT_SECONDS = 10.0


# Configure JSON logging
class JsonFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data = {
            'timestamp': self.formatTime(record),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name
        }

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def setup_logging(log_level: str = 'INFO') -> None:
    """
    Configure logging with JSON formatter.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    root_logger = logging.getLogger()

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)

    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))


def dispatch(
    method: str,
    path: str,
    params: Dict[str, str],
    client: BucketClient
) -> Dict[str, Any]:
    """
    Route a request to its handler.

    Args:
        method: HTTP method
        path: Request path
        params: Query string parameters
        client: Bucket client passed to the route handlers

    Returns:
        Proxy response dict
    """
    if method.upper() != 'GET':
        return status_response(404)

    if len(path) > 1:
        path = path.rstrip('/')

    if path == HEALTH_PATH:
        return routes.health(client)
    if path == EVENTS_PATH:
        return routes.list_events(client, params)
    if path.startswith(EVENTS_PATH + '/'):
        return routes.get_event(client, path[len(EVENTS_PATH) + 1:])

    return status_response(404)


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Main Lambda handler for API Gateway proxy requests.

    Args:
        event: API Gateway proxy event
        context: Lambda context object

    Returns:
        Proxy response dict with statusCode, headers and body
    """
    log_level = os.environ.get('LOG_LEVEL', 'INFO')

    setup_logging(log_level)
    logger = logging.getLogger(__name__)

    start_time = time.time()
    method = event.get('httpMethod') or 'GET'
    path = event.get('path') or '/'
    params = event.get('queryStringParameters') or {}

    raw_timeout = os.environ.get('TIMEOUT_SECONDS', str(DEFAULT_TIMEOUT_SECONDS))
    try:
        timeout_seconds = float(raw_timeout)
    except ValueError:
        logger.warning(
            f"Invalid TIMEOUT_SECONDS {raw_timeout!r}, "
            f"using {DEFAULT_TIMEOUT_SECONDS}s"
        )
        timeout_seconds = DEFAULT_TIMEOUT_SECONDS

    logger.info(f"Handling {method} {path}")

    try:
        client = BucketClient(timeout=timeout_seconds)
        response = dispatch(method, path, params, client)
    except Exception as e:
        logger.error(
            f"Unhandled error for {method} {path}: {str(e)}",
            extra={'error_type': type(e).__name__},
            exc_info=True
        )
        response = status_response(500)

    duration = time.time() - start_time
    logger.info(
        f"Answered {method} {path} with {response['statusCode']} "
        f"in {round(duration, 3)}s"
    )
    return response
