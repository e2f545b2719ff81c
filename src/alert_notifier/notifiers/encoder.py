"""Request body encoding for webhook notifications.

A message is sent as a plain JSON document unless it references a local
image attachment, in which case it is sent as multipart/form-data with the
JSON document in a ``payload_json`` field and the image in a ``file`` part.
"""

from __future__ import annotations

import logging
from typing import BinaryIO

import httpx

from alert_notifier.notifiers.errors import AttachmentError
from alert_notifier.notifiers.formatter import ATTACHMENT_FILENAME
from alert_notifier.notifiers.models import DeliveryBody, WebhookMessage

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"
PAYLOAD_FIELD_NAME = "payload_json"
FILE_FIELD_NAME = "file"
FILE_CONTENT_TYPE = "application/octet-stream"

# Multipart bodies are rendered through an unsent request
ENCODING_REQUEST_URL = "http://localhost/"


class DeliveryEncoder:
    """Encodes webhook messages into request bodies."""

    def encode(
        self,
        message: WebhookMessage,
        attachment_required: bool,
        image_path: str | None,
    ) -> DeliveryBody:
        """Encode a message, attaching the image file when required.

        Args:
            message: The message to send.
            attachment_required: Whether the embed references a local file.
            image_path: Path of the rendered image on disk.

        Returns:
            DeliveryBody with a JSON or multipart body.

        Raises:
            AttachmentError: If the image exists but cannot be read.
        """
        payload = message.to_json()
        plain = DeliveryBody(body=payload, content_type=JSON_CONTENT_TYPE)

        if not attachment_required:
            return plain

        if not image_path:
            logger.warning("No image path for attachment, sending without image")
            return plain

        try:
            image = open(image_path, "rb")
        except FileNotFoundError:
            logger.warning(f"Image {image_path} not found, sending without image")
            return plain
        except OSError as e:
            raise AttachmentError(image_path, f"Failed to open image: {e}") from e

        with image:
            return self._encode_multipart(payload, image, image_path)

    def _encode_multipart(
        self, payload: bytes, image: BinaryIO, image_path: str
    ) -> DeliveryBody:
        """Build the two-part multipart body from an open image file."""
        request = httpx.Request(
            "POST",
            ENCODING_REQUEST_URL,
            data={PAYLOAD_FIELD_NAME: payload.decode("utf-8")},
            files={FILE_FIELD_NAME: (ATTACHMENT_FILENAME, image, FILE_CONTENT_TYPE)},
        )
        try:
            body = request.read()
        except OSError as e:
            raise AttachmentError(image_path, f"Failed to read image: {e}") from e

        return DeliveryBody(body=body, content_type=request.headers["Content-Type"])
