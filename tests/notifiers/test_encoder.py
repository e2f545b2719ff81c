"""Tests for webhook request body encoding."""

from __future__ import annotations

import io
import json
from typing import TYPE_CHECKING
from unittest.mock import MagicMock, patch

import pytest

from alert_notifier.notifiers.encoder import (
    ENCODING_REQUEST_URL,
    JSON_CONTENT_TYPE,
    DeliveryEncoder,
)
from alert_notifier.notifiers.errors import AttachmentError
from alert_notifier.notifiers.models import (
    EmbedField,
    EmbedFooter,
    RichEmbed,
    WebhookMessage,
)

if TYPE_CHECKING:
    from pathlib import Path

IMAGE_BYTES = b"\x89PNG\r\n\x1a\n" + bytes(range(256)) * 16

# ============================================================================
# Helpers
# ============================================================================


def parse_multipart(body: bytes, content_type: str) -> list[tuple[str, bytes]]:
    """Split a multipart body into (headers, data) pairs."""
    boundary = content_type.split("boundary=", 1)[1].strip('"').encode()
    delimiter = b"--" + boundary

    assert body.startswith(delimiter)
    assert body.endswith(delimiter + b"--\r\n")

    parts = []
    for chunk in body.split(delimiter)[1:-1]:
        headers, _, data = chunk[2:].partition(b"\r\n\r\n")
        assert data.endswith(b"\r\n")
        parts.append((headers.decode(), data[:-2]))
    return parts


class FailingImage(io.BytesIO):
    """Image file whose reads fail."""

    def read(self, size: int | None = -1) -> bytes:
        raise OSError("Input/output error")


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def encoder() -> DeliveryEncoder:
    """Create an encoder."""
    return DeliveryEncoder()


@pytest.fixture
def sample_message() -> WebhookMessage:
    """Create a message referencing a local attachment."""
    embed = RichEmbed(
        title="[Alerting] High CPU",
        color=0xD63232,
        url="http://localhost:3000/d/abc/hosts?tab=alert&editPanel=2&orgId=1",
        description="CPU above 90%",
        fields=(EmbedField(name="cpu", value="93.500000"),),
        footer=EmbedFooter(text="Grafana v9.5.2", icon_url="https://example.com/icon.png"),
        image_url="attachment://graph.png",
        attachment_required=True,
    )
    return WebhookMessage(username="Grafana", embeds=(embed,))


@pytest.fixture
def image_file(tmp_path: Path) -> Path:
    """Write a rendered image to disk."""
    path = tmp_path / "graph-7.png"
    path.write_bytes(IMAGE_BYTES)
    return path


# ============================================================================
# Plain JSON Tests
# ============================================================================


class TestPlainJson:
    """Tests for the plain JSON encoding path."""

    def test_no_attachment_required(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, image_file: Path
    ) -> None:
        """Test that JSON is used when no attachment is required."""
        delivery = encoder.encode(sample_message, False, str(image_file))

        assert delivery.content_type == JSON_CONTENT_TYPE
        assert delivery.body == sample_message.to_json()
        assert delivery.is_multipart is False

    def test_missing_file_degrades_to_json(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, tmp_path: Path
    ) -> None:
        """Test that a missing image falls back to JSON without error."""
        delivery = encoder.encode(sample_message, True, str(tmp_path / "missing.png"))

        assert delivery.content_type == "application/json"
        assert json.loads(delivery.body) == sample_message.to_dict()

    def test_empty_path_degrades_to_json(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage
    ) -> None:
        """Test that no image path at all falls back to JSON."""
        assert encoder.encode(sample_message, True, "").content_type == JSON_CONTENT_TYPE
        assert encoder.encode(sample_message, True, None).content_type == JSON_CONTENT_TYPE

    def test_missing_file_has_no_handle_to_close(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage
    ) -> None:
        """Test that a failed open does not close anything."""
        mock_open = MagicMock(side_effect=FileNotFoundError("missing.png"))

        with patch("alert_notifier.notifiers.encoder.open", mock_open, create=True):
            delivery = encoder.encode(sample_message, True, "/renders/missing.png")

        mock_open.assert_called_once_with("/renders/missing.png", "rb")
        assert delivery.content_type == JSON_CONTENT_TYPE


# ============================================================================
# Multipart Tests
# ============================================================================


class TestMultipart:
    """Tests for the multipart encoding path."""

    def test_content_type_carries_boundary(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, image_file: Path
    ) -> None:
        """Test the multipart content type."""
        delivery = encoder.encode(sample_message, True, str(image_file))

        assert delivery.content_type.startswith("multipart/form-data; boundary=")
        assert delivery.is_multipart is True

    def test_two_parts_in_order(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, image_file: Path
    ) -> None:
        """Test payload_json then file parts."""
        delivery = encoder.encode(sample_message, True, str(image_file))

        parts = parse_multipart(delivery.body, delivery.content_type)

        assert len(parts) == 2
        assert 'name="payload_json"' in parts[0][0]
        assert 'name="file"' in parts[1][0]
        assert 'filename="graph.png"' in parts[1][0]

    def test_payload_part_is_json_document(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, image_file: Path
    ) -> None:
        """Test that the payload part holds the serialized message."""
        delivery = encoder.encode(sample_message, True, str(image_file))

        payload = parse_multipart(delivery.body, delivery.content_type)[0][1]

        assert payload == sample_message.to_json()
        assert json.loads(payload)["embeds"][0]["image"]["url"] == "attachment://graph.png"

    def test_file_part_holds_whole_image(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, image_file: Path
    ) -> None:
        """Test that the file part contains every image byte."""
        delivery = encoder.encode(sample_message, True, str(image_file))

        data = parse_multipart(delivery.body, delivery.content_type)[1][1]

        assert len(data) == image_file.stat().st_size
        assert data == IMAGE_BYTES

    def test_empty_image(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, tmp_path: Path
    ) -> None:
        """Test that an empty file still produces a file part."""
        path = tmp_path / "empty.png"
        path.write_bytes(b"")

        delivery = encoder.encode(sample_message, True, str(path))

        parts = parse_multipart(delivery.body, delivery.content_type)
        assert parts[1][1] == b""

    def test_handle_closed_after_encode(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, image_file: Path
    ) -> None:
        """Test that the image handle is released."""
        opened = []

        def tracking_open(path: str, mode: str) -> io.BufferedReader:
            handle = open(path, mode)
            opened.append(handle)
            return handle

        with patch("alert_notifier.notifiers.encoder.open", tracking_open, create=True):
            encoder.encode(sample_message, True, str(image_file))

        assert len(opened) == 1
        assert opened[0].closed

    def test_body_independent_of_destination(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, image_file: Path
    ) -> None:
        """Test that the body carries no trace of the rendering request."""
        delivery = encoder.encode(sample_message, True, str(image_file))

        assert ENCODING_REQUEST_URL.encode() not in delivery.body
        assert not hasattr(encoder, "webhook_url")


# ============================================================================
# Error Tests
# ============================================================================


class TestAttachmentErrors:
    """Tests for unreadable attachments."""

    def test_unopenable_file_raises(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage, tmp_path: Path
    ) -> None:
        """Test that an existing but unopenable path fails the encode."""
        with pytest.raises(AttachmentError) as exc_info:
            encoder.encode(sample_message, True, str(tmp_path))

        assert exc_info.value.path == str(tmp_path)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_permission_error_raises(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage
    ) -> None:
        """Test that open errors other than not-found propagate."""
        mock_open = MagicMock(side_effect=PermissionError("denied"))

        with (
            patch("alert_notifier.notifiers.encoder.open", mock_open, create=True),
            pytest.raises(AttachmentError, match="Failed to open image"),
        ):
            encoder.encode(sample_message, True, "/renders/graph.png")

    def test_read_error_raises_and_closes(
        self, encoder: DeliveryEncoder, sample_message: WebhookMessage
    ) -> None:
        """Test that a failing read propagates and releases the handle."""
        image = FailingImage(IMAGE_BYTES)

        with (
            patch("alert_notifier.notifiers.encoder.open", return_value=image, create=True),
            pytest.raises(AttachmentError, match="Failed to read image"),
        ):
            encoder.encode(sample_message, True, "/renders/graph.png")

        assert image.closed
