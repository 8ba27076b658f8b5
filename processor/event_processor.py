"""Event processor for projecting, filtering and ranking bucket objects."""
import logging
import math
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from processor.geo import distance_km
from processor.models import Event, QueryCriteria

logger = logging.getLogger(__name__)


class EventProcessor:
    """Processor turning raw bucket objects into a ranked list of events."""

    PUBLIC_BASE_URL = "https://api.malrot.org"

    def process(
        self,
        raw_objects: Iterable[Dict[str, Any]],
        criteria: QueryCriteria
    ) -> List[Event]:
        """
        Run the full pipeline over the objects returned by the bucket listing.

        Args:
            raw_objects: Object resources from the bucket listing, in listing order
            criteria: Validated query criteria

        Returns:
            Filtered events, nearest first when a proximity filter ran,
            otherwise in listing order
        """
        events = self.project_objects(raw_objects)
        total = len(events)
        events = self.filter_events(events, criteria)
        events = self.rank_events(events)

        logger.info(f"Kept {len(events)} events out of {total} listed objects")
        return events

    def project_objects(self, raw_objects: Iterable[Dict[str, Any]]) -> List[Event]:
        """
        Project bucket objects into events, keeping listing order.

        Args:
            raw_objects: Object resources from the bucket listing

        Returns:
            List of Event objects
        """
        return [self.project_object(raw_object) for raw_object in raw_objects]

    def project_object(self, raw_object: Dict[str, Any]) -> Event:
        """
        Project one bucket object resource into an Event.

        Args:
            raw_object: Object resource with `name`, `metadata`,
                `timeCreated` and `updated` keys

        Returns:
            Event object; missing metadata stays None and unparseable
            coordinates become nan
        """
        metadata = raw_object.get('metadata') or {}

        return Event(
            title=metadata.get('title'),
            endpoint=f"{self.PUBLIC_BASE_URL}/v1/events/{raw_object.get('name')}",
            created_at=self._parse_timestamp(raw_object.get('timeCreated')),
            updated_at=self._parse_timestamp(raw_object.get('updated')),
            country=metadata.get('country'),
            longitude=self._to_float(metadata.get('longitude')),
            latitude=self._to_float(metadata.get('latitude')),
        )

    def filter_events(self, events: List[Event], criteria: QueryCriteria) -> List[Event]:
        """
        Apply the country, recency and proximity filters, in that order.

        Args:
            events: Projected events
            criteria: Validated query criteria

        Returns:
            Events matching every supplied criterion
        """
        if criteria.country is not None:
            events = [event for event in events if event.country in criteria.country]

        if criteria.updated_after is not None:
            threshold = float(criteria.updated_after)
            events = [
                event for event in events
                if event.updated_at is not None and event.updated_at > threshold
            ]

        if criteria.around is not None:
            around = criteria.around
            for event in events:
                event.distance = distance_km(
                    around.longitude,
                    around.latitude,
                    event.longitude,
                    event.latitude
                )
            # nan distances never compare below the radius
            events = [event for event in events if event.distance < around.radius_km]

        return events

    def rank_events(self, events: List[Event]) -> List[Event]:
        """Sort events by distance; `sorted` is stable so ties keep listing order."""
        return sorted(
            events,
            key=lambda event: (event.distance is None, event.distance or 0.0)
        )

    def _parse_timestamp(self, value: Optional[str]) -> Optional[int]:
        """
        Parse an RFC 3339 timestamp to epoch seconds.

        Args:
            value: Timestamp such as `2021-04-02T10:11:12.345Z`

        Returns:
            Epoch seconds (UTC) or None if parsing fails
        """
        if not value:
            return None
        try:
            parsed = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
        except ValueError:
            logger.debug(f"Unparseable timestamp: {value}")
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return int(parsed.timestamp())

    def _to_float(self, value: Any) -> float:
        """
        Coerce a metadata coordinate to float.

        Args:
            value: Raw metadata value (string, number or None)

        Returns:
            Float value, or nan if the value is not numeric
        """
        try:
            return float(value)
        except (TypeError, ValueError):
            return math.nan
