"""Client for the Cloud Storage bucket holding event files."""
import logging
from typing import Any, Dict, List, Optional

import requests

logger = logging.getLogger(__name__)


class UpstreamError(Exception):
    """Raised when the bucket cannot be reached or answers with an error."""


class BucketClient:
    """Read-only client for the public event bucket."""

    LIST_URL = "https://storage.googleapis.com/storage/v1/b/malrot/o"
    DIRECT_URL = "https://storage.googleapis.com/malrot"
    # Listing this prefix matches nothing, so a probe transfers no objects
    PROBE_PREFIX = "AN_UNUSED_PREFIX"

    def __init__(self, timeout: float = 10, session: Optional[requests.Session] = None):
        """
        Initialize the bucket client.

        Args:
            timeout: HTTP request timeout in seconds (default: 10)
            session: Optional requests session to reuse connections
        """
        self.timeout = timeout
        self.session = session or requests.Session()

    def list_objects(self, prefix: Optional[str] = None) -> List[Dict[str, Any]]:
        """
        List object resources in the bucket.

        Args:
            prefix: Optional name prefix (an organization identifier)

        Returns:
            Object resources in listing order (empty if the bucket has none)

        Raises:
            UpstreamError: If the request fails or the body is not JSON
        """
        params = {'prefix': prefix} if prefix else None
        logger.info(f"Listing bucket objects (prefix={prefix!r})")

        payload = self._get_json(self.LIST_URL, params=params)
        if not isinstance(payload, dict):
            raise UpstreamError("Unexpected bucket listing payload")
        items = payload.get('items') or []

        logger.info(f"Bucket listing returned {len(items)} objects")
        return items

    def get_object(self, object_id: str) -> Any:
        """
        Download a single event file.

        Args:
            object_id: Object name within the bucket

        Returns:
            Decoded JSON content of the object

        Raises:
            UpstreamError: If the object is missing, the request fails or
                the body is not JSON
        """
        logger.info(f"Fetching bucket object {object_id}")
        return self._get_json(f"{self.DIRECT_URL}/{object_id}")

    def ping(self) -> None:
        """
        Check that the bucket listing API answers.

        Raises:
            UpstreamError: If the probe fails
        """
        self._get_json(self.LIST_URL, params={'prefix': self.PROBE_PREFIX})

    def _get_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.RequestException as e:
            logger.error(f"Bucket request to {url} failed: {e}")
            raise UpstreamError(str(e)) from e
        except ValueError as e:
            logger.error(f"Bucket response from {url} is not valid JSON: {e}")
            raise UpstreamError(str(e)) from e
