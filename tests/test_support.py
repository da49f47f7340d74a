"""
Tests for the pieces around the write path: image upload boundary, wiring,
logging setup, metrics and error formatting.
"""

import logging

import pytest

from devevent.core.errors import ErrorCode, ImageUploadFailed, MissingField
from devevent.core.logging import setup_logging
from devevent.core.metrics import record_booking_attempt, render_metrics
from devevent.services.factory import get_repositories
from devevent.services.interfaces import ImageUploader, attach_uploaded_image


class FakeUploader(ImageUploader):
    def __init__(self, url="https://images.example.com/devevent/abc.png", error=None):
        self.url = url
        self.error = error
        self.received = []

    async def upload(self, data: bytes) -> str:
        self.received.append(data)
        if self.error:
            raise self.error
        return self.url


@pytest.mark.asyncio
async def test_attach_uploaded_image(event_payload):
    uploader = FakeUploader()
    del event_payload["image"]

    candidate = await attach_uploaded_image(event_payload, uploader, b"\x89PNG...")

    assert candidate["image"] == "https://images.example.com/devevent/abc.png"
    assert "image" not in event_payload
    assert uploader.received == [b"\x89PNG..."]


@pytest.mark.asyncio
async def test_uploaded_image_feeds_event_creation(events, event_payload):
    del event_payload["image"]
    candidate = await attach_uploaded_image(event_payload, FakeUploader(), b"img")

    event = await events.create(candidate)
    assert event.image == "https://images.example.com/devevent/abc.png"


@pytest.mark.asyncio
async def test_upload_errors_are_wrapped(event_payload):
    uploader = FakeUploader(error=RuntimeError("bucket unreachable"))

    with pytest.raises(ImageUploadFailed) as exc_info:
        await attach_uploaded_image(event_payload, uploader, b"img")
    assert "bucket unreachable" in exc_info.value.message


@pytest.mark.asyncio
@pytest.mark.parametrize("data, url", [(b"", "https://x"), (b"img", "  ")])
async def test_upload_requires_data_and_url(event_payload, data, url):
    with pytest.raises(ImageUploadFailed):
        await attach_uploaded_image(event_payload, FakeUploader(url=url), data)


def test_repositories_share_one_manager():
    repositories = get_repositories()

    assert repositories is get_repositories()
    assert repositories.events._connections is repositories.bookings._connections


def test_setup_logging_does_not_stack_handlers():
    setup_logging(level="DEBUG", environment="production")
    setup_logging(level="INFO", environment="development")

    root = logging.getLogger()
    ours = [h for h in root.handlers if h.get_name() == "devevent"]
    assert len(ours) == 1
    assert root.level == logging.INFO


def test_render_metrics_includes_booking_counter():
    record_booking_attempt("success")
    payload, content_type = render_metrics()

    assert b"booking_attempts_total" in payload
    assert content_type.startswith("text/plain")


def test_domain_error_formatting():
    error = MissingField("agenda")

    assert error.code is ErrorCode.MISSING_FIELD
    assert error.message == "agenda is required"
    assert str(error) == "MISSING_FIELD: agenda is required"
