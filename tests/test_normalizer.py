# ==============================================================================
# Tests for the Event Normalizer
# ==============================================================================
"""
Tests for normalize() and normalize_record(): rrweb record mapping, ordering,
timestamp handling and recovery from malformed input.
"""

import logging

import pytest

from uxmoments.core.errors import InvalidInputError, MalformedRecordWarning
from uxmoments.core.models import EventKind
from uxmoments.core.normalizer import extract_page_defaults, normalize, normalize_record

T0 = 1_700_000_000_000


# ==============================================================================
# Ordering
# ==============================================================================


class TestOrdering:
    """Output is sorted by timestamp with ties kept in input order."""

    def test_sorted_ascending(self, rr):
        records = [rr.scroll(T0 + 300), rr.scroll(T0 + 100), rr.scroll(T0 + 200)]
        events = normalize(records)
        assert [e.timestamp for e in events] == [T0 + 100, T0 + 200, T0 + 300]

    def test_ties_keep_input_order(self, rr):
        records = [
            rr.scroll(T0 + 200, y=1),
            rr.scroll(T0 + 100, y=2),
            rr.scroll(T0 + 100, y=3),
            rr.scroll(T0 + 50, y=4),
        ]
        events = normalize(records)
        assert [e.details.y for e in events] == [4, 2, 3, 1]

    def test_input_not_mutated(self, rr):
        records = [rr.scroll(T0 + 200), rr.scroll(T0 + 100)]
        normalize(records)
        assert records[0]["timestamp"] == T0 + 200

    def test_empty_list(self):
        assert normalize([]) == []


# ==============================================================================
# Malformed Input
# ==============================================================================


class TestMalformedInput:
    """Bad records are skipped or mapped to Unknown; bad batches raise."""

    @pytest.mark.parametrize("value", [{"type": 4}, "records", None, 42])
    def test_non_list_raises(self, value):
        with pytest.raises(InvalidInputError):
            normalize(value)

    def test_invalid_input_is_value_error(self):
        with pytest.raises(ValueError):
            normalize("records")

    def test_unusable_records_skipped_and_logged(self, rr, caplog):
        caplog.set_level(logging.WARNING)
        records = [
            rr.meta(T0),
            "garbage",
            {"type": 3, "data": {"source": 3}},
            {"type": 3, "timestamp": "soon", "data": {"source": 3}},
        ]
        events = normalize(records)

        assert len(events) == 1
        assert events[0].kind == EventKind.PAGE_META
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 3
        assert all("Skipping malformed record" in r.getMessage() for r in warnings)

    def test_normalize_record_raises_warning_type(self):
        with pytest.raises(MalformedRecordWarning) as exc_info:
            normalize_record({"type": 3}, index=7)
        assert exc_info.value.index == 7
        assert "record 7" in str(exc_info.value)

    def test_invalid_json_payload_becomes_unknown(self):
        event = normalize_record({"type": 3, "timestamp": T0, "data": "{nope"})
        assert event.kind == EventKind.UNKNOWN
        assert event.details.record_type is None
        assert event.details.data == {}

    def test_non_mapping_payload_becomes_unknown(self):
        event = normalize_record({"type": 3, "timestamp": T0, "data": [1, 2, 3]})
        assert event.kind == EventKind.UNKNOWN

    def test_unrecognized_kind_name_becomes_unknown(self):
        event = normalize_record({"type": "Teleport", "timestamp": T0, "data": {}})
        assert event.kind == EventKind.UNKNOWN

    def test_json_string_payload_is_parsed(self):
        record = {"type": 3, "timestamp": T0, "data": '{"source": 3, "x": 5, "y": 7}'}
        event = normalize_record(record)
        assert event.kind == EventKind.SCROLL
        assert (event.details.x, event.details.y) == (5, 7)


# ==============================================================================
# Timestamps
# ==============================================================================


class TestTimestamps:
    """Timestamps are normalized to integer epoch milliseconds."""

    def test_numeric_string(self):
        event = normalize_record({"type": 3, "timestamp": "1700000000000", "data": {"source": 3}})
        assert event.timestamp == 1_700_000_000_000

    def test_float_rounded(self):
        event = normalize_record({"type": 3, "timestamp": 1000.6, "data": {"source": 3}})
        assert event.timestamp == 1001

    def test_iso_string(self):
        record = {"type": "Scroll", "timestamp": "2024-01-01T00:00:00Z", "data": {"x": 0, "y": 10}}
        event = normalize_record(record)
        assert event.timestamp == 1_704_067_200_000
        assert event.details.y == 10


# ==============================================================================
# rrweb Record Mapping
# ==============================================================================


class TestRecordMapping:
    """Mapping of rrweb record types and incremental sources."""

    def test_meta_becomes_page_meta(self, rr):
        event = normalize_record(rr.meta(T0, href="https://a.test/", width=375, height=667))
        assert event.kind == EventKind.PAGE_META
        assert event.url == "https://a.test/"
        assert event.details.width == 375
        assert event.details.user_agent == "Mozilla/5.0"

    def test_click_builds_element(self, rr):
        event = normalize_record(
            rr.click(T0, x=12, y=34, tag="button", element_id="buy", class_name="btn primary")
        )
        assert event.kind == EventKind.MOUSE_INTERACTION
        assert event.interaction_type == "Click"
        assert event.element.tag == "BUTTON"
        assert event.element.id == "buy"
        assert event.element.class_name == "btn primary"
        assert event.element.position.x == 12
        assert event.element.position.y == 34
        assert event.element.position.width == 80

    def test_mouse_down_interaction_type(self, rr):
        event = normalize_record(rr.mouse_down(T0))
        assert event.is_interaction("MouseDown")
        assert not event.is_interaction("Click")

    def test_input(self, rr):
        event = normalize_record(rr.input(T0, "alice@example.com"))
        assert event.kind == EventKind.INPUT
        assert event.details.value == "alice@example.com"
        assert event.element.tag == "INPUT"
        assert event.element.attribute("form") == "signup"

    def test_mouse_move_positions(self, rr):
        event = normalize_record(rr.move(T0, 10, 20))
        assert event.kind == EventKind.MOUSE_MOVE
        assert event.details.positions[0].x == 10
        assert event.details.positions[0].y == 20

    def test_viewport_resize(self, rr):
        event = normalize_record(rr.viewport(T0, 375, 667))
        assert event.kind == EventKind.VIEWPORT
        assert event.details.width == 375

    def test_incremental_error(self):
        event = normalize_record(
            {"type": 3, "timestamp": T0, "data": {"source": 9, "error": "TypeError: x is null"}}
        )
        assert event.kind == EventKind.ERROR
        assert event.details.error == "TypeError: x is null"

    def test_other_incremental_source_is_unknown(self):
        event = normalize_record({"type": 3, "timestamp": T0, "data": {"source": 0}})
        assert event.kind == EventKind.UNKNOWN
        assert event.details.record_type == "IncrementalSnapshot:Mutation"

    def test_full_snapshot_is_unknown(self):
        event = normalize_record({"type": 2, "timestamp": T0, "data": {"node": {}}})
        assert event.kind == EventKind.UNKNOWN
        assert event.details.record_type == "FullSnapshot"

    def test_custom_pageview_becomes_navigate(self):
        record = {
            "type": 5,
            "timestamp": T0,
            "data": {"tag": "$pageview", "payload": {"url": "https://a.test/cart"}},
        }
        event = normalize_record(record)
        assert event.kind == EventKind.NAVIGATE
        assert event.url == "https://a.test/cart"

    def test_custom_error_becomes_error(self, rr):
        event = normalize_record(rr.error(T0, "boom"))
        assert event.kind == EventKind.ERROR
        assert event.details.error == "boom"

    def test_other_custom_stays_custom(self):
        record = {"type": 5, "timestamp": T0, "data": {"tag": "cart", "payload": {"items": 2}}}
        event = normalize_record(record)
        assert event.kind == EventKind.CUSTOM
        assert event.details.tag == "cart"
        assert event.details.payload == {"items": 2}

    def test_named_navigate(self, rr):
        event = normalize_record(rr.navigate(T0, "https://a.test/next"))
        assert event.kind == EventKind.NAVIGATE
        assert event.url == "https://a.test/next"
        assert event.element is None


# ==============================================================================
# Page Defaults
# ==============================================================================


class TestExtractPageDefaults:
    def test_first_page_meta(self, rr):
        events = normalize(
            [rr.meta(T0, href="https://a.test/"), rr.meta(T0 + 1, href="https://b.test/")]
        )
        assert extract_page_defaults(events) == ("https://a.test/", "Mozilla/5.0")

    def test_no_page_meta(self, rr):
        events = normalize([rr.scroll(T0)])
        assert extract_page_defaults(events) == ("", "")
