from __future__ import annotations

import json
from pathlib import Path

import pytest
from pydantic import ValidationError

from shecurity.catalog import load_catalog, parse_catalog
from shecurity.directions import directions_url, location_url
from shecurity.exceptions import CatalogError, MissingCredentialsError
from shecurity.models import AlertRequest, AssistancePoint, Contact, Position, SessionFlags


def test_bundled_catalog_loads_in_order() -> None:
    catalog = load_catalog()

    assert len(catalog) >= 5
    assert catalog[0].name == "Connaught Place Police Station"
    assert all(isinstance(point, AssistancePoint) for point in catalog)


def test_catalog_from_file(tmp_path: Path) -> None:
    path = tmp_path / "points.json"
    path.write_text(json.dumps([{"name": "Desk", "latitude": 1.5, "longitude": -2.5}]), encoding="utf-8")

    catalog = load_catalog(path)

    assert catalog == (AssistancePoint(name="Desk", latitude=1.5, longitude=-2.5),)


@pytest.mark.parametrize(
    "raw",
    [
        {"name": "x"},
        [{"name": "x", "latitude": 95, "longitude": 0}],
        [{"name": " ", "latitude": 0, "longitude": 0}],
        [{"latitude": 0, "longitude": 0}],
    ],
)
def test_invalid_catalog_rejected(raw: object) -> None:
    with pytest.raises(CatalogError):
        parse_catalog(raw)


def test_missing_catalog_file(tmp_path: Path) -> None:
    with pytest.raises(CatalogError, match="not found"):
        load_catalog(tmp_path / "nope.json")


def test_position_range_validated() -> None:
    with pytest.raises(ValidationError):
        Position(latitude=91, longitude=0)
    with pytest.raises(ValidationError):
        Position(latitude=0, longitude=-181)


def test_position_is_immutable() -> None:
    position = Position(latitude=1, longitude=2)
    with pytest.raises(ValidationError):
        position.latitude = 3  # type: ignore[misc]


def test_contact_trims_and_reports_missing_fields() -> None:
    contact = Contact(phone="  ", email=" friend@example.com ")

    assert contact.email == "friend@example.com"
    assert contact.is_complete is False
    with pytest.raises(MissingCredentialsError, match="phone"):
        contact.require_complete()


def test_alert_request_wire_format_omits_email_by_default() -> None:
    request = AlertRequest(phone="111", latitude=1.0, longitude=2.0)

    assert request.to_wire() == {"phone": "111", "latitude": 1.0, "longitude": 2.0}


def test_session_flags_serialize_camel_case() -> None:
    flags = SessionFlags(contact_entry_visible=True, stations_panel_visible=False)

    assert flags.to_wire() == {"contactEntryVisible": True, "stationsPanelVisible": False}


def test_location_url() -> None:
    assert location_url(Position(latitude=28.6315, longitude=77.2167)) == (
        "https://www.google.com/maps?q=28.631500%2C77.216700"
    )


def test_directions_url() -> None:
    url = directions_url(
        Position(latitude=28.6, longitude=77.2),
        AssistancePoint(name="Saket", latitude=28.5245, longitude=77.2066),
        travel_mode="walking",
    )

    assert url == (
        "https://www.google.com/maps/dir/?api=1"
        "&origin=28.600000%2C77.200000"
        "&destination=28.524500%2C77.206600"
        "&travelmode=walking"
    )


def test_directions_url_rejects_unknown_mode() -> None:
    with pytest.raises(ValueError):
        directions_url(Position(latitude=0, longitude=0), AssistancePoint(name="x", latitude=0, longitude=0), travel_mode="fly")
