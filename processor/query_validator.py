"""Validator turning raw query string parameters into query criteria."""
import logging
import math
import re
from typing import List, Mapping, Optional, Tuple

from processor.models import Around, QueryCriteria, ValidationError, ValidationResult

logger = logging.getLogger(__name__)

LETTER_PATTERN = re.compile(r'[a-zA-Z]')


def parse_number(value: Optional[str]) -> Optional[float]:
    """
    Parse a query token as a number.

    Args:
        value: Raw token (surrounding whitespace is ignored)

    Returns:
        Parsed float, or None if the token is missing, empty, grouped with
        underscores or not a number
    """
    # JS-style numbers have no digit grouping
    if value is None or not value.strip() or '_' in value:
        return None
    try:
        number = float(value)
    except ValueError:
        return None
    if math.isnan(number):
        return None
    return number


class QueryValidator:
    """
    Validator for the query parameters of the events listing.

    Every supplied parameter is checked independently and all violations
    are collected, so a single response can report every problem at once.
    """

    def validate(self, params: Optional[Mapping[str, str]]) -> ValidationResult:
        """
        Validate raw query parameters.

        Args:
            params: Query parameter names mapped to raw string values
                (None is treated as no parameters)

        Returns:
            ValidationResult holding either the criteria or the errors
        """
        params = params or {}
        errors: List[ValidationError] = []

        org = params.get('org') or None
        if org:
            errors.extend(self._check_org(org))

        around = None
        raw_around = params.get('around')
        if raw_around:
            around, around_errors = self._check_around(raw_around)
            errors.extend(around_errors)

        country = None
        raw_country = params.get('country')
        if raw_country:
            country = raw_country.split(',')
            errors.extend(self._check_country(country))

        thresholds = {}
        for name in ('updated_at', 'updated_after'):
            raw_threshold = params.get(name)
            if raw_threshold:
                thresholds[name], threshold_errors = self._check_timestamp(
                    name, raw_threshold
                )
                errors.extend(threshold_errors)

        if errors:
            logger.info(f"Rejected query with {len(errors)} validation errors")
            return ValidationResult(errors=errors)

        criteria = QueryCriteria(
            org=org,
            around=around,
            country=frozenset(country) if country is not None else None,
            updated_after=thresholds.get('updated_after'),
        )
        return ValidationResult(criteria=criteria)

    def _check_org(self, org: str) -> List[ValidationError]:
        errors = []
        if ',' in org:
            errors.append(ValidationError(
                'wrong_org_param', 'Org must be a unique value'
            ))
        if org != org.lower():
            errors.append(ValidationError(
                'wrong_org_param', 'Org must be in lowercase'
            ))
        return errors

    def _check_around(
        self, raw: str
    ) -> Tuple[Optional[Around], List[ValidationError]]:
        """
        Check the `around` parameter (`<lon>,<lat>,<radius_km>`).

        Range checks only look at tokens that parsed as numbers; a token
        that is not a number is reported once by the format check and is
        otherwise ignored by the range checks.

        Returns:
            Tuple of (Around or None, list of errors)
        """
        errors = []
        tokens = raw.split(',')
        numbers = [parse_number(token) for token in tokens]
        # Missing positions behave like non-numbers
        longitude, latitude, radius = (numbers + [None, None, None])[:3]

        if len(tokens) != 3 or None in (longitude, latitude, radius):
            errors.append(ValidationError(
                'wrong_around_param',
                'Around param must be a list of 3 numbers, separated by commas'
            ))
        if longitude is not None and (longitude <= -180 or longitude > 180):
            errors.append(ValidationError(
                'wrong_around_param',
                'Longitude must be between -180 (exclusive) and 180 (inclusive)'
            ))
        if latitude is not None and (latitude < -90 or latitude > 90):
            errors.append(ValidationError(
                'wrong_around_param', 'Latitude must be between -90 and 90'
            ))
        if radius is not None and radius <= 0:
            errors.append(ValidationError(
                'wrong_around_param', 'Distance must be greater than 0'
            ))

        if errors:
            return None, errors
        return Around(longitude, latitude, radius), errors

    def _check_country(self, codes: List[str]) -> List[ValidationError]:
        errors = []
        for code in codes:
            error_code = f'wrong_country_param/{code}'
            if code != code.upper():
                errors.append(ValidationError(
                    error_code,
                    'ISO 3166-1 alpha-2 country code must be in uppercase'
                ))
            if not LETTER_PATTERN.search(code):
                errors.append(ValidationError(
                    error_code,
                    'ISO 3166-1 alpha-2 country code must contain a letter'
                ))
            if len(code) != 2:
                errors.append(ValidationError(
                    error_code,
                    'ISO 3166-1 alpha-2 country code must be 2-letter long'
                ))
        return errors

    def _check_timestamp(
        self, name: str, raw: str
    ) -> Tuple[Optional[float], List[ValidationError]]:
        """
        Check an epoch-seconds threshold parameter.

        Args:
            name: Parameter name, used in the error code and message
            raw: Raw parameter value

        Returns:
            Tuple of (parsed threshold or None, list of errors)
        """
        errors = []
        label = name.capitalize()
        threshold = parse_number(raw)
        if threshold is None:
            errors.append(ValidationError(
                f'wrong_{name}_param', f'{label} must be a number'
            ))
        elif threshold < 0:
            errors.append(ValidationError(
                f'wrong_{name}_param', f'{label} must be greater than 0'
            ))
        return threshold, errors
