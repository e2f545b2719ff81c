"""Webhook message builder for chat notifiers.

This module transforms AlertEvaluation objects into rich embed messages
in the shape Discord-compatible webhooks expect.
"""

from __future__ import annotations

import logging
import re

from alert_notifier.notifiers.models import (
    AlertEvaluation,
    EmbedField,
    EmbedFooter,
    RichEmbed,
    WebhookMessage,
)

logger = logging.getLogger(__name__)

SENDER_USERNAME = "Grafana"
FOOTER_ICON_URL = "https://grafana.com/assets/img/fav32.png"
FOOTER_TEXT_FORMAT = "Grafana v{version}"

# Image reference for a file uploaded alongside the message
ATTACHMENT_FILENAME = "graph.png"
ATTACHMENT_IMAGE_URL = f"attachment://{ATTACHMENT_FILENAME}"

HEX_COLOR_PATTERN = re.compile(r"[+-]?[0-9A-Fa-f]+")


def parse_color(color: str) -> int:
    """Parse a hex color string like "#D63232" into an integer.

    Webhooks take integer colors. Unparseable input yields 0.
    """
    digits = color.lstrip("#")
    if not HEX_COLOR_PATTERN.fullmatch(digits):
        logger.debug(f"Could not parse embed color {color!r}, using 0")
        return 0
    value = int(digits, 16)
    if not 0 <= value <= 0xFFFFFF:
        return 0
    return value


def build_fields(evaluation: AlertEvaluation) -> tuple[EmbedField, ...]:
    """Build one inline field per matched metric, in evaluation order."""
    return tuple(
        EmbedField(name=match.metric, value=match.formatted_value, inline=True)
        for match in evaluation.matches
    )


class PayloadBuilder:
    """Builds webhook messages from alert evaluations.

    The build version is injected so the footer does not depend on
    process-wide state.
    """

    def __init__(self, build_version: str, *, username: str = SENDER_USERNAME) -> None:
        """Initialize the builder.

        Args:
            build_version: Version shown in the embed footer.
            username: Sender display name.
        """
        self.build_version = build_version
        self.username = username

    def build_embed(self, evaluation: AlertEvaluation, rule_url: str) -> RichEmbed:
        """Build the rich embed for an evaluation.

        Args:
            evaluation: The alert evaluation to render.
            rule_url: Resolved link back to the rule.

        Returns:
            RichEmbed referencing either the public image URL or the
            local attachment placeholder.
        """
        footer = EmbedFooter(
            text=FOOTER_TEXT_FORMAT.format(version=self.build_version),
            icon_url=FOOTER_ICON_URL,
        )

        if evaluation.image_public_url:
            image_url = evaluation.image_public_url
            attachment_required = False
        else:
            image_url = ATTACHMENT_IMAGE_URL
            attachment_required = True

        return RichEmbed(
            title=evaluation.title,
            color=parse_color(evaluation.color),
            url=rule_url,
            description=evaluation.message,
            fields=build_fields(evaluation),
            footer=footer,
            image_url=image_url,
            attachment_required=attachment_required,
        )

    def build(
        self, evaluation: AlertEvaluation, content: str, *, app_url: str
    ) -> WebhookMessage:
        """Build the full webhook message for an evaluation.

        Args:
            evaluation: The alert evaluation to render.
            content: Free-text message content, omitted when empty.
            app_url: Public root URL used to resolve the rule link.

        Returns:
            WebhookMessage with a single embed.

        Raises:
            RuleLinkError: If the rule link cannot be resolved.
        """
        rule_url = evaluation.get_rule_url(app_url)
        embed = self.build_embed(evaluation, rule_url)
        return WebhookMessage(username=self.username, embeds=(embed,), content=content)
