import pytest

from scripts import run_route_check

from conftest import FakeGeocoder, FakeRouter


@pytest.fixture
def offline(monkeypatch):
    """
    Swaps the live Nominatim / OSRM clients for fakes.
    """
    geocoder = FakeGeocoder({
        "Charminar": (17.30, 78.40),
        "Hitech City": (17.40, 78.50),
    })
    monkeypatch.setattr(run_route_check, "NominatimGeocoder", lambda: geocoder)
    monkeypatch.setattr(run_route_check, "OSRMClient", lambda profile: FakeRouter())
    return geocoder


def test_clear_route_exits_zero(offline, capsys):
    assert run_route_check.main(["Charminar", "Hitech City"]) == 0
    assert "[CLEAR]" in capsys.readouterr().out


def test_rectangle_on_route_exits_two(offline, capsys):
    code = run_route_check.main(["Charminar", "Hitech City", "--rectangle", "17.34,78.44,17.36,78.46"])

    out = capsys.readouterr().out
    assert code == 2
    assert "1 areas" in out
    assert "[HAZARD]" in out


def test_flat_rectangle_is_skipped(offline, capsys):
    code = run_route_check.main(["Charminar", "Hitech City", "--rectangle", "17.3,78.4,17.3,78.5"])

    out = capsys.readouterr().out
    assert code == 0
    assert "Skipping rectangle:" in out
    assert "0 areas" in out
