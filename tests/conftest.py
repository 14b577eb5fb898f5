import threading

import pytest

from hazards.models import HazardArea, HazardReport, Severity


class FakeRouter:
    """
    Stands in for OSRMClient.route: straight line of `points` samples between the ends.
    fail_when(start, end) -> True makes the call return None, raise_when(start, end) makes it raise.
    """
    def __init__(self, points=5, fail_when=None, raise_when=None):
        self.points = points
        self.fail_when = fail_when or (lambda start, end: False)
        self.raise_when = raise_when or (lambda start, end: False)
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, start, end):
        with self._lock:
            self.calls.append((start, end))
        if self.raise_when(start, end):
            raise ConnectionError("router unavailable")
        if self.fail_when(start, end):
            return None
        steps = self.points - 1
        return tuple(
            (start[0] + (end[0] - start[0]) * i / steps, start[1] + (end[1] - start[1]) * i / steps)
            for i in range(self.points)
        )


class FakeGeocoder:
    def __init__(self, places):
        self.places = places
        self.calls = []

    def __call__(self, address):
        self.calls.append(address)
        return self.places.get(address)


@pytest.fixture
def straight_route():
    # (17.30, 78.40) -> (17.40, 78.50), passes exactly through (17.35, 78.45)
    return ((17.30, 78.40), (17.35, 78.45), (17.40, 78.50))


@pytest.fixture
def origin(straight_route):
    return straight_route[0]


@pytest.fixture
def high_report_on_route():
    return HazardReport.new(17.35, 78.45, Severity.HIGH)


@pytest.fixture
def crossing_rectangle():
    return HazardArea.new(
        "rectangle",
        [[(17.34, 78.44), (17.34, 78.46), (17.36, 78.46), (17.36, 78.44)]],
    )


@pytest.fixture
def fake_router():
    return FakeRouter()


@pytest.fixture
def fake_geocoder():
    return FakeGeocoder({
        "Charminar": (17.30, 78.40),
        "Hitech City": (17.40, 78.50),
    })
