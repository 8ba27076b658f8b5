"""Unit tests for EventProcessor."""
import math

import pytest

from processor.event_processor import EventProcessor
from processor.geo import distance_km
from processor.models import Around, Event, QueryCriteria


def make_object(name, country='FR', longitude='2.3522', latitude='48.8566',
                updated='2021-04-02T10:11:12.345Z'):
    return {
        'name': name,
        'timeCreated': '2021-04-01T00:00:00.000Z',
        'updated': updated,
        'metadata': {
            'title': f'Event {name}',
            'country': country,
            'longitude': longitude,
            'latitude': latitude,
        }
    }


def make_event(name, updated_at=2000, country='FR', longitude=2.3522, latitude=48.8566):
    return Event(
        title=name,
        endpoint=f'https://api.malrot.org/v1/events/{name}',
        created_at=1000,
        updated_at=updated_at,
        country=country,
        longitude=longitude,
        latitude=latitude,
    )


class TestProjection:
    """Test cases for projecting bucket objects into events."""

    def test_project_object(self):
        """Test projecting a complete bucket object."""
        event = EventProcessor().project_object(make_object('louvre/mona-lisa.json'))

        assert event.title == 'Event louvre/mona-lisa.json'
        assert event.endpoint == (
            'https://api.malrot.org/v1/events/louvre/mona-lisa.json'
        )
        assert event.country == 'FR'
        assert event.longitude == 2.3522
        assert event.latitude == 48.8566
        assert event.created_at == 1617235200
        assert event.updated_at == 1617358272
        assert event.distance is None

    def test_project_object_missing_metadata(self):
        """Test that missing metadata is not defaulted."""
        event = EventProcessor().project_object({'name': 'orphan.json'})

        assert event.title is None
        assert event.country is None
        assert math.isnan(event.longitude)
        assert math.isnan(event.latitude)
        assert event.created_at is None
        assert event.updated_at is None

    def test_project_object_bad_timestamp(self):
        """Test that an unparseable timestamp projects to None."""
        event = EventProcessor().project_object(
            make_object('a.json', updated='last tuesday')
        )

        assert event.updated_at is None

    def test_to_dict_omits_distance_until_set(self):
        """Test that distance only appears once a proximity filter ran."""
        event = make_event('a')
        assert 'distance' not in event.to_dict()

        event.distance = 1.5
        assert event.to_dict()['distance'] == 1.5

    def test_to_dict_serializes_nan_as_none(self):
        """Test that unparseable coordinates serialize as null."""
        event = make_event('a', longitude=math.nan)

        assert event.to_dict()['longitude'] is None


class TestFilters:
    """Test cases for the filter pipeline."""

    def test_country_filter(self):
        """Test that only requested countries are kept."""
        events = [make_event('a', country='FR'), make_event('b', country='BE'),
                  make_event('c', country='DE')]
        criteria = QueryCriteria(country=frozenset({'FR', 'DE'}))

        kept = EventProcessor().filter_events(events, criteria)

        assert [event.title for event in kept] == ['a', 'c']

    def test_updated_after_is_strict(self):
        """Test that events updated at the threshold are excluded."""
        events = [make_event('old', updated_at=999), make_event('edge', updated_at=1000),
                  make_event('new', updated_at=1001)]
        criteria = QueryCriteria(updated_after=1000)

        kept = EventProcessor().filter_events(events, criteria)

        assert [event.title for event in kept] == ['new']

    def test_updated_after_compares_numerically(self):
        """Test that the threshold is compared as a number, not as text."""
        events = [make_event('a', updated_at=900), make_event('b', updated_at=10000)]
        criteria = QueryCriteria(updated_after='1000')

        kept = EventProcessor().filter_events(events, criteria)

        assert [event.title for event in kept] == ['b']

    def test_around_includes_event_at_origin(self):
        """Test that an event at the origin has zero distance and is kept."""
        events = [make_event('here')]
        criteria = QueryCriteria(around=Around(2.3522, 48.8566, 5))

        kept = EventProcessor().filter_events(events, criteria)

        assert len(kept) == 1
        assert kept[0].distance == pytest.approx(0.0)

    def test_around_excludes_far_event(self):
        """Test that an event far outside the radius is dropped."""
        events = [make_event('far', longitude=10, latitude=10)]
        criteria = QueryCriteria(around=Around(0, 0, 1))

        kept = EventProcessor().filter_events(events, criteria)

        assert kept == []
        assert events[0].distance > 1000

    def test_around_boundary_is_excluded(self):
        """Test that an event exactly at the radius is dropped."""
        event = make_event('edge', longitude=1, latitude=0)
        radius = distance_km(0, 0, 1, 0)
        criteria = QueryCriteria(around=Around(0, 0, radius))

        assert EventProcessor().filter_events([event], criteria) == []

    def test_around_drops_events_without_coordinates(self):
        """Test that events with unparseable coordinates never match."""
        events = [make_event('nowhere', longitude=math.nan, latitude=math.nan)]
        criteria = QueryCriteria(around=Around(0, 0, 20000))

        assert EventProcessor().filter_events(events, criteria) == []

    def test_filters_compose(self):
        """Test that all filters apply together."""
        events = [
            make_event('match'),
            make_event('wrong-country', country='BE'),
            make_event('stale', updated_at=10),
            make_event('far', longitude=-73.9857, latitude=40.7484),
        ]
        criteria = QueryCriteria(
            country=frozenset({'FR', 'US'}),
            updated_after=100,
            around=Around(2.35, 48.85, 50),
        )

        kept = EventProcessor().filter_events(events, criteria)

        assert [event.title for event in kept] == ['match']

    def test_no_criteria_keeps_everything(self):
        events = [make_event('a'), make_event('b')]

        assert EventProcessor().filter_events(events, QueryCriteria()) == events


class TestRanking:
    """Test cases for ranking and the full pipeline."""

    def test_rank_by_distance(self):
        """Test that events are sorted nearest first."""
        events = [make_event('c'), make_event('a'), make_event('b')]
        for event, distance in zip(events, [3.0, 1.0, 2.0]):
            event.distance = distance

        ranked = EventProcessor().rank_events(events)

        assert [event.title for event in ranked] == ['a', 'b', 'c']

    def test_rank_without_distance_keeps_listing_order(self):
        """Test that ranking is a no-op when no proximity filter ran."""
        events = [make_event(name) for name in ['z', 'a', 'm', 'b']]

        ranked = EventProcessor().rank_events(events)

        assert [event.title for event in ranked] == ['z', 'a', 'm', 'b']

    def test_rank_ties_keep_listing_order(self):
        events = [make_event('first'), make_event('second')]
        for event in events:
            event.distance = 1.0

        ranked = EventProcessor().rank_events(events)

        assert [event.title for event in ranked] == ['first', 'second']

    def test_process_ranks_filtered_events(self):
        """Test the pipeline from raw objects to ranked events."""
        raw_objects = [
            make_object('far.json', longitude='2.45', latitude='48.85'),
            make_object('near.json', longitude='2.36', latitude='48.86'),
            make_object('belgium.json', country='BE', longitude='4.35', latitude='50.85'),
        ]
        criteria = QueryCriteria(around=Around(2.3522, 48.8566, 20))

        events = EventProcessor().process(raw_objects, criteria)

        assert [event.title for event in events] == [
            'Event near.json', 'Event far.json'
        ]
        assert events[0].distance < events[1].distance

    def test_process_empty_result(self):
        """Test that filtering everything out yields an empty list."""
        events = EventProcessor().process(
            [make_object('a.json')], QueryCriteria(country=frozenset({'JP'}))
        )

        assert events == []
