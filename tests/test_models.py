# ==============================================================================
# Tests for Domain Models
# ==============================================================================
"""
Tests for timestamp normalization, the kind/details pairing of events,
camelCase serialization and external event construction.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from uxmoments.core.models import (
    CorrelatedMoment,
    ElementRef,
    EventKind,
    ExternalEvent,
    NavigateDetails,
    NormalizedEvent,
    Position,
    RageClickMoment,
    ScoredExternalEvent,
    ScrollDetails,
    to_epoch_ms,
)


# ==============================================================================
# to_epoch_ms
# ==============================================================================


class TestToEpochMs:
    def test_int_passthrough(self):
        assert to_epoch_ms(1_700_000_000_000) == 1_700_000_000_000

    def test_iso_with_offset(self):
        assert to_epoch_ms("2024-01-01T01:00:00+01:00") == 1_704_067_200_000

    def test_naive_datetime_is_utc(self):
        assert to_epoch_ms(datetime(2024, 1, 1)) == 1_704_067_200_000

    def test_aware_datetime(self):
        tz = timezone(timedelta(hours=-5))
        assert to_epoch_ms(datetime(2023, 12, 31, 19, 0, tzinfo=tz)) == 1_704_067_200_000

    @pytest.mark.parametrize("value", [None, True, float("nan"), float("inf"), "yesterday", [1]])
    def test_rejects_unusable_values(self, value):
        with pytest.raises(ValueError):
            to_epoch_ms(value)


# ==============================================================================
# NormalizedEvent
# ==============================================================================


class TestNormalizedEvent:
    def test_default_details_for_kind(self):
        event = NormalizedEvent(timestamp=1, kind=EventKind.SCROLL)
        assert isinstance(event.details, ScrollDetails)
        assert event.details.x == 0

    def test_dict_details_validated_for_kind(self):
        event = NormalizedEvent(timestamp=1, kind="Navigate", details={"href": "https://a.test/"})
        assert isinstance(event.details, NavigateDetails)
        assert event.details.href == "https://a.test/"

    def test_mismatched_details_rejected(self):
        with pytest.raises(ValidationError):
            NormalizedEvent(timestamp=1, kind=EventKind.SCROLL, details=NavigateDetails())

    def test_frozen(self):
        event = NormalizedEvent(timestamp=1, kind=EventKind.SCROLL)
        with pytest.raises(ValidationError):
            event.timestamp = 2

    def test_interaction_type_none_for_other_kinds(self):
        event = NormalizedEvent(timestamp=1, kind=EventKind.SCROLL)
        assert event.interaction_type is None
        assert not event.is_interaction("Click")


# ==============================================================================
# ElementRef
# ==============================================================================


class TestElementRef:
    def test_point_reads_missing_position_as_zero(self):
        assert ElementRef(tag="DIV").point == (0.0, 0.0)

    def test_point(self):
        element = ElementRef(tag="DIV", position=Position(x=3, y=4))
        assert element.point == (3, 4)

    def test_class_contains_substring(self):
        element = ElementRef(tag="DIV", class_name="primary-btn large")
        assert element.class_contains("btn")
        assert not element.class_contains("link")

    def test_attribute_missing(self):
        assert ElementRef(tag="DIV").attribute("role") is None


# ==============================================================================
# Serialization
# ==============================================================================


class TestSerialization:
    def test_moment_record_uses_camel_case(self):
        moment = RageClickMoment(
            timestamp=5, session_id="s1", url="https://a.test/", click_count=3
        )
        record = moment.to_record()
        assert record == {
            "type": "RageClick",
            "timestamp": 5,
            "sessionId": "s1",
            "url": "https://a.test/",
            "clickCount": 3,
        }

    def test_correlated_moment_flattens(self):
        moment = RageClickMoment(timestamp=5, session_id="s1", click_count=3)
        scored = ScoredExternalEvent(timestamp=6, kind="$autocapture", relevance_score=0.5)
        record = CorrelatedMoment(moment=moment, nearby_external_events=[scored]).to_record()

        assert record["clickCount"] == 3
        assert record["nearbyExternalEvents"] == [
            {"timestamp": 6, "kind": "$autocapture", "attributes": {}, "relevanceScore": 0.5}
        ]

    def test_relevance_score_bounds(self):
        with pytest.raises(ValidationError):
            ScoredExternalEvent(timestamp=1, kind="x", relevance_score=1.5)


# ==============================================================================
# ExternalEvent
# ==============================================================================


class TestExternalEvent:
    def test_iso_timestamp_converted(self):
        event = ExternalEvent(timestamp="2024-01-01T00:00:00Z", kind="$pageview")
        assert event.timestamp == 1_704_067_200_000

    def test_from_posthog(self):
        record = {
            "id": "evt-1",
            "event": "$pageview",
            "timestamp": "2024-01-01T00:00:00.250Z",
            "distinct_id": "user-1",
            "properties": {"$current_url": "https://a.test/"},
        }
        event = ExternalEvent.from_posthog(record)

        assert event.kind == "$pageview"
        assert event.timestamp == 1_704_067_200_250
        assert event.distinct_id == "user-1"
        assert event.attributes["id"] == "evt-1"
        assert event.attributes["$current_url"] == "https://a.test/"

    def test_from_posthog_missing_event_name(self):
        event = ExternalEvent.from_posthog({"timestamp": 1})
        assert event.kind == "unknown"
        assert event.distinct_id is None
