# ==============================================================================
# Shared Test Fixtures
# ==============================================================================
"""
Pytest fixtures shared across all test modules.

Provides:
- RecordBuilder for raw rrweb-style interaction records
- A detect() helper running the default engine over raw records
"""

import pytest

from uxmoments.core.engine import MomentEngine
from uxmoments.core.metadata import build_session

T0 = 1_700_000_000_000
PAGE_URL = "https://shop.test/checkout"


class RecordBuilder:
    """Builds raw records in the rrweb export format."""

    def meta(self, ts, href=PAGE_URL, width=1280, height=800, user_agent="Mozilla/5.0"):
        return {
            "type": 4,
            "timestamp": ts,
            "data": {"href": href, "width": width, "height": height, "userAgent": user_agent},
        }

    def navigate(self, ts, href):
        return {"type": "Navigate", "timestamp": ts, "data": {"href": href}}

    def click(
        self,
        ts,
        x=100,
        y=100,
        tag="button",
        interaction=2,
        element_id=None,
        class_name=None,
        attributes=None,
        text=None,
    ):
        target = {"tagName": tag, "width": 80, "height": 30}
        if element_id is not None:
            target["id"] = element_id
        if class_name is not None:
            target["className"] = class_name
        if attributes is not None:
            target["attributes"] = attributes
        if text is not None:
            target["textContent"] = text
        return {
            "type": 3,
            "timestamp": ts,
            "data": {"source": 2, "type": interaction, "x": x, "y": y, "target": target},
        }

    def mouse_down(self, ts, **kwargs):
        return self.click(ts, interaction=0, **kwargs)

    def submit(self, ts, x=100, y=100):
        return self.click(ts, x=x, y=y, attributes={"type": "submit"})

    def input(self, ts, value, form="signup", tag="input"):
        target = {"tagName": tag}
        if form is not None:
            target["attributes"] = {"form": form}
        return {
            "type": 3,
            "timestamp": ts,
            "data": {"source": 5, "text": value, "target": target},
        }

    def scroll(self, ts, x=0, y=100):
        return {"type": 3, "timestamp": ts, "data": {"source": 3, "x": x, "y": y}}

    def move(self, ts, x, y):
        return {
            "type": 3,
            "timestamp": ts,
            "data": {"source": 1, "positions": [{"x": x, "y": y, "timeOffset": 0}]},
        }

    def viewport(self, ts, width, height):
        return {
            "type": 3,
            "timestamp": ts,
            "data": {"source": 4, "width": width, "height": height},
        }

    def error(self, ts, message):
        return {
            "type": 5,
            "timestamp": ts,
            "data": {"tag": "error", "payload": {"message": message}},
        }


@pytest.fixture()
def rr():
    """Raw record builder."""
    return RecordBuilder()


@pytest.fixture()
def detect():
    """Run the default engine over raw records and return its moments."""

    def _detect(records, session_id="s1"):
        return MomentEngine().detect(build_session(session_id, records))

    return _detect


def of_type(moments, pattern):
    """Moments of one pattern, in emission order."""
    return [m for m in moments if m.type == pattern]


@pytest.fixture()
def only():
    """Filter moments by pattern."""
    return of_type
