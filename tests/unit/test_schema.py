import json
import re

import pytest

from event_navi.errors import EmptyResultError, ValidationError
from event_navi.pipeline.schema import EVENT_FIELDS, create_event, create_root_structure
from event_navi.pipeline.validate import validate_event, validate_events, validate_final_data


def test_create_event_fills_every_field_with_none():
    event = create_event({"title": "Concert", "date_from": "2026-02-10"})
    assert list(event.keys()) == EVENT_FIELDS + ["tags"]
    assert event["description"] is None
    assert event["image_url"] is None
    assert event["tags"] == {"type": "other", "genres": [], "flags": []}


def test_create_event_defaults_date_to_to_date_from():
    assert create_event({"date_from": "2026-02-10"})["date_to"] == "2026-02-10"
    assert create_event({"date_from": "2026-02-10", "date_to": "2026-02-12"})["date_to"] == "2026-02-12"


def test_create_event_folds_legacy_time_fields():
    event = create_event({"time_start": "10:00", "time_end": "12:00"})
    assert event["start_time"] == "10:00"
    assert event["end_time"] == "12:00"
    assert "time_start" not in event
    assert "time_end" not in event

    event = create_event({"start_time": "09:30", "time_start": "10:00"})
    assert event["start_time"] == "09:30"


def test_create_event_drops_unknown_fields_and_cleans_title():
    event = create_event({"title": "  <b>Tom &amp; Jerry</b>\n live ", "stray": "x"})
    assert event["title"] == "Tom & Jerry live"
    assert "stray" not in event


def test_create_event_decodes_numeric_and_named_entities():
    event = create_event({"title": "Rock &#8211; Night &#x3042; &yen;500&nbsp;!"})
    assert event["title"] == "Rock \u2013 Night \u3042 \u00a5500 !"


def test_create_event_tags_are_not_shared_between_events():
    template = {"title": "Event", "date_from": "2026-02-10", "tags": {"type": "sports", "genres": ["sports"], "flags": []}}
    first = create_event(template)
    second = create_event(template)

    first["tags"]["genres"].append("music")
    first["tags"]["flags"].append("free")

    assert first["tags"]["genres"] is not second["tags"]["genres"]
    assert first["tags"]["flags"] is not second["tags"]["flags"]
    assert second["tags"] == {"type": "sports", "genres": ["sports"], "flags": []}
    assert template["tags"]["genres"] == ["sports"]


def test_root_structure_round_trips_through_json():
    events = [create_event({"title": f"Event {i}", "date_from": f"2026-02-1{i}"}) for i in range(3)]
    validate_events(events)
    root = create_root_structure("venue-a", events, venue_name="Venue A", last_success_at="2026-02-01")

    decoded = json.loads(json.dumps(root))
    assert list(decoded.keys()) == ["venue_id", "venue_name", "last_success_at", "events"]
    assert len(decoded["events"]) == 3
    assert all(re.match(r"^\d{4}-\d{2}-\d{2}$", e["date_from"]) for e in decoded["events"])


def test_validate_events_floor():
    with pytest.raises(EmptyResultError):
        validate_events([])
    with pytest.raises(EmptyResultError):
        validate_events([{"title": "No date"}])
    validate_events([{"title": "No date"}], require_date_from=False)


def test_validate_final_data_strict():
    good = {"title": "Concert", "date_from": "2026-02-10"}
    assert validate_final_data([good]) is True

    with pytest.raises(EmptyResultError):
        validate_final_data([good], min_events=2)
    with pytest.raises(ValidationError, match=r"events\[1\]"):
        validate_final_data([good, {"title": "X", "date_from": "2026-02-10"}])
    with pytest.raises(ValidationError):
        validate_final_data([{"title": "Concert", "date_from": "2026/02/10"}])


def test_validate_event_predicate():
    assert validate_event({"title": "Concert", "date_from": "2026-02-10"}) is True
    assert validate_event({"title": "X", "date_from": "2026-02-10"}) is False
    assert validate_event({"title": "Concert", "date_from": None}) is False
    assert validate_event(None) is False
