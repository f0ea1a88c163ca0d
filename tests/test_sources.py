# ==============================================================================
# Tests for JSON File Sources
# ==============================================================================
"""
Tests for loading recorded sessions and analytics events from JSON exports.
"""

import json
import logging

import pytest

from uxmoments.core.errors import InvalidInputError
from uxmoments.infrastructure.files import JsonExternalEventSource, JsonRecordingSource, read_json


def _write(path, data):
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


# ==============================================================================
# read_json
# ==============================================================================


class TestReadJson:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="File not found"):
            read_json(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(InvalidInputError):
            read_json(path)

    def test_non_utf8_file(self, tmp_path):
        path = tmp_path / "latin1.json"
        path.write_bytes(b'{"sessions": [{"sessionId": "caf\xe9"}]}')
        with pytest.raises(InvalidInputError, match="not UTF-8"):
            read_json(path)


# ==============================================================================
# Recordings
# ==============================================================================


class TestJsonRecordingSource:
    def test_flattens_record_chunks(self, tmp_path):
        path = _write(
            tmp_path / "rec.json",
            {
                "sessions": [
                    {
                        "sessionId": "abc",
                        "records": [{"events": [{"type": 4}, {"type": 3}]}, {"events": [{"type": 2}]}],
                    }
                ]
            },
        )
        sessions = JsonRecordingSource(path).load_sessions()
        assert sessions == {"abc": [{"type": 4}, {"type": 3}, {"type": 2}]}

    def test_session_id_fallbacks(self, tmp_path):
        path = _write(
            tmp_path / "rec.json",
            {"sessions": [{"session_id": "snake", "records": []}, {"records": []}]},
        )
        sessions = JsonRecordingSource(path).load_sessions()
        assert list(sessions) == ["snake", "session_1"]

    def test_truncates_long_sessions(self, tmp_path, caplog):
        caplog.set_level(logging.WARNING)
        events = [{"type": 3, "timestamp": i} for i in range(5)]
        path = _write(tmp_path / "rec.json", {"sessions": [{"sessionId": "s", "records": [{"events": events}]}]})

        sessions = JsonRecordingSource(path, max_records_per_session=3).load_sessions()

        assert [e["timestamp"] for e in sessions["s"]] == [0, 1, 2]
        assert "keeping the first 3" in caplog.text

    def test_limit_applies_to_merged_entries(self, tmp_path):
        def entry(start):
            events = [{"type": 3, "timestamp": start + i} for i in range(2)]
            return {"sessionId": "s", "records": [{"events": events}]}

        path = _write(tmp_path / "rec.json", {"sessions": [entry(0), entry(10)]})
        sessions = JsonRecordingSource(path, max_records_per_session=3).load_sessions()

        assert [e["timestamp"] for e in sessions["s"]] == [0, 1, 10]

    def test_non_object_sessions_skipped(self, tmp_path, caplog):
        caplog.set_level(logging.WARNING)
        path = _write(tmp_path / "rec.json", {"sessions": ["oops", {"sessionId": "ok", "records": []}]})

        assert list(JsonRecordingSource(path).load_sessions()) == ["ok"]
        assert "Skipping session 0" in caplog.text

    @pytest.mark.parametrize("data", [[], {"sessions": {}}, {"other": []}])
    def test_wrong_shape(self, tmp_path, data):
        path = _write(tmp_path / "rec.json", data)
        with pytest.raises(InvalidInputError):
            JsonRecordingSource(path).load_sessions()


# ==============================================================================
# Analytics Events
# ==============================================================================


class TestJsonExternalEventSource:
    RECORD = {
        "event": "$pageview",
        "timestamp": "2024-01-01T00:00:00Z",
        "distinct_id": "u1",
        "properties": {"$current_url": "https://shop.test/"},
    }

    def test_list_form(self, tmp_path):
        path = _write(tmp_path / "events.json", [self.RECORD])
        [event] = JsonExternalEventSource(path).load_events()

        assert event.kind == "$pageview"
        assert event.timestamp == 1_704_067_200_000
        assert event.distinct_id == "u1"
        assert event.attributes["$current_url"] == "https://shop.test/"

    def test_results_form(self, tmp_path):
        path = _write(tmp_path / "events.json", {"results": [self.RECORD, self.RECORD]})
        assert len(JsonExternalEventSource(path).load_events()) == 2

    def test_wrong_shape(self, tmp_path):
        path = _write(tmp_path / "events.json", {"events": []})
        with pytest.raises(InvalidInputError):
            JsonExternalEventSource(path).load_events()
