"""
Tests for the pure event normalization pipeline. No database involved.
"""

import re
from datetime import date, datetime, timedelta, timezone

import pytest

from devevent.core.errors import InvalidDate, InvalidTime, MissingField
from devevent.services.event_normalizer import (
    derive_slug,
    normalize_date,
    normalize_event,
    normalize_time,
    validate_required_fields,
)

SLUG_SHAPE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


@pytest.mark.parametrize(
    "title, expected",
    [
        ("React Conf Europe!", "react-conf-europe"),
        ("  Global AI Summit 2024  ", "global-ai-summit-2024"),
        ("Café Rendez-vous à Montréal", "cafe-rendez-vous-a-montreal"),
        ("--Rust & Go :: Systems Day--", "rust-go-systems-day"),
        ("Open   Source\tHackathon", "open-source-hackathon"),
    ],
)
def test_derive_slug(title, expected):
    assert derive_slug(title) == expected


def test_derive_slug_is_deterministic_and_url_safe():
    titles = ["PyCon ÜS 2025!!", "Ünïcödé — Everywhere", "a", "  x  y  ", "Ñandú__Fest"]
    for title in titles:
        slug = derive_slug(title)
        assert slug == derive_slug(title)
        assert SLUG_SHAPE.match(slug), slug


def test_derive_slug_does_not_disambiguate_collisions():
    assert derive_slug("React Conf Europe!") == derive_slug("react conf   europe")


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("2024-10-05", "2024-10-05"),
        ("2024-10-05T10:00:00Z", "2024-10-05"),
        ("2024-10-05T23:30:00-05:00", "2024-10-06"),  # UTC calendar day
        ("2024-10-05T10:00", "2024-10-05"),
        ("October 5, 2024", "2024-10-05"),
        ("Oct 5, 2024", "2024-10-05"),
        ("5 October 2024", "2024-10-05"),
        ("10/05/2024", "2024-10-05"),
        ("2024/10/05", "2024-10-05"),
        ("  2024-10-05  ", "2024-10-05"),
    ],
)
def test_normalize_date(raw, expected):
    assert normalize_date(raw) == expected


def test_normalize_date_accepts_date_objects():
    assert normalize_date(date(2024, 9, 12)) == "2024-09-12"
    tz = timezone(timedelta(hours=9))
    assert normalize_date(datetime(2024, 9, 12, 3, 0, tzinfo=tz)) == "2024-09-11"


@pytest.mark.parametrize("raw", ["2024-10-05", "October 5, 2024", "2024-10-05T23:30:00-05:00"])
def test_normalize_date_is_idempotent(raw):
    once = normalize_date(raw)
    assert normalize_date(once) == once


@pytest.mark.parametrize("raw", ["", "not a date", "2024-13-40", "31/31/2024", None])
def test_normalize_date_rejects_garbage(raw):
    with pytest.raises(InvalidDate):
        normalize_date(raw)


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("12:00am", "00:00"),
        ("12:00pm", "12:00"),
        ("1:05pm", "13:05"),
        ("09:30", "09:30"),
        ("9:30", "09:30"),
        ("9:30 am", "09:30"),
        ("09:30PM", "21:30"),
        ("11:59 Pm", "23:59"),
        ("0:15", "00:15"),
        ("23:45", "23:45"),
    ],
)
def test_normalize_time(raw, expected):
    assert normalize_time(raw) == expected


@pytest.mark.parametrize("raw", ["24:00", "13:00pm", "9", "9:5", "9:60", "noon", "10:00 xm", ""])
def test_normalize_time_rejects_malformed(raw):
    with pytest.raises(InvalidTime):
        normalize_time(raw)


def test_required_fields_reports_first_offender(event_payload):
    event_payload["venue"] = "   "
    event_payload["mode"] = ""
    with pytest.raises(MissingField) as exc_info:
        validate_required_fields(event_payload)
    assert exc_info.value.field == "venue"


def test_required_fields_missing_agenda(event_payload):
    del event_payload["agenda"]
    with pytest.raises(MissingField) as exc_info:
        validate_required_fields(event_payload)
    assert exc_info.value.field == "agenda"


@pytest.mark.parametrize("tags", [[], ["react", "  "], [None], {"react": 1}])
def test_required_fields_rejects_bad_tags(event_payload, tags):
    event_payload["tags"] = tags
    with pytest.raises(MissingField) as exc_info:
        validate_required_fields(event_payload)
    assert exc_info.value.field == "tags"


def test_normalize_event_canonical_output(event_payload):
    normalized = normalize_event(event_payload)

    assert normalized.slug == "react-conf-europe"
    assert normalized.date == "2024-10-05"
    assert normalized.time == "10:00"
    assert normalized.description == "The biggest React gathering in Europe."
    assert normalized.agenda == ["Keynote", "Server Components deep dive"]


def test_normalize_event_single_string_agenda(event_payload):
    event_payload["agenda"] = "Keynote"
    assert normalize_event(event_payload).agenda == ["Keynote"]


def test_normalize_event_ignores_caller_slug(event_payload):
    event_payload["slug"] = "something-else"
    assert normalize_event(event_payload).slug == "react-conf-europe"


def test_normalize_event_keeps_slug_when_title_unchanged(event_payload):
    previous = {**event_payload, "slug": "react-conf-europe-2024"}
    normalized = normalize_event({**event_payload, "time": "2:00pm"}, previous=previous)
    assert normalized.slug == "react-conf-europe-2024"
    assert normalized.time == "14:00"


def test_normalize_event_regenerates_slug_on_title_change(event_payload):
    previous = {**event_payload, "slug": "react-conf-europe"}
    normalized = normalize_event({**event_payload, "title": "React Summit"}, previous=previous)
    assert normalized.slug == "react-summit"


def test_normalize_event_rejects_title_without_slug_characters(event_payload):
    event_payload["title"] = "!!!"
    with pytest.raises(MissingField) as exc_info:
        normalize_event(event_payload)
    assert exc_info.value.field == "slug"


def test_pipeline_stops_at_first_failing_stage(event_payload):
    # Both date and time are bad; the date stage runs first.
    event_payload["date"] = "someday"
    event_payload["time"] = "whenever"
    with pytest.raises(InvalidDate):
        normalize_event(event_payload)
