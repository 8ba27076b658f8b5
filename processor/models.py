"""Data models for event querying."""
import math
from dataclasses import dataclass, field
from typing import FrozenSet, Optional


def _json_number(value: float) -> Optional[float]:
    """JSON has no nan; serialize it as null."""
    return None if math.isnan(value) else value


@dataclass
class Event:
    """Normalized event projected from a bucket object."""
    title: Optional[str]
    endpoint: str
    created_at: Optional[int]
    updated_at: Optional[int]
    country: Optional[str]
    longitude: float
    latitude: float
    distance: Optional[float] = None

    def to_dict(self) -> dict:
        data = {
            'title': self.title,
            'endpoint': self.endpoint,
            'created_at': self.created_at,
            'updated_at': self.updated_at,
            'country': self.country,
            'longitude': _json_number(self.longitude),
            'latitude': _json_number(self.latitude),
        }
        if self.distance is not None:
            data['distance'] = self.distance
        return data


@dataclass(frozen=True)
class Around:
    """Proximity query: origin point and radius in kilometers."""
    longitude: float
    latitude: float
    radius_km: float


@dataclass
class QueryCriteria:
    """Validated filters for an events query."""
    org: Optional[str] = None
    around: Optional[Around] = None
    country: Optional[FrozenSet[str]] = None
    updated_after: Optional[float] = None


@dataclass(frozen=True)
class ValidationError:
    """A single client-side parameter error."""
    code: str
    message: str

    def to_dict(self) -> dict:
        return {'code': self.code, 'message': self.message}


@dataclass
class ValidationResult:
    """Outcome of validating query parameters."""
    criteria: Optional[QueryCriteria] = None
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors
