"""Data models for the notifiers module."""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from alert_notifier.notifiers.errors import RuleLinkError

RULE_URL_FORMAT = "{dashboard_url}?tab=alert&editPanel={panel_id}&orgId={org_id}"
DASHBOARD_URL_FORMAT = "{app_url}d/{uid}/{slug}"


class AlertState(str, Enum):
    """States an alert rule can be evaluated into."""

    OK = "ok"
    PENDING = "pending"
    ALERTING = "alerting"
    NO_DATA = "no_data"
    PAUSED = "paused"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class StateModel:
    """Display text and hex color for an alert state."""

    text: str
    color: str


STATE_MODELS: dict[AlertState, StateModel] = {
    AlertState.OK: StateModel(text="OK", color="#36a64f"),
    AlertState.PENDING: StateModel(text="Pending", color="#FFA500"),
    AlertState.ALERTING: StateModel(text="Alerting", color="#D63232"),
    AlertState.NO_DATA: StateModel(text="No Data", color="#888888"),
    AlertState.PAUSED: StateModel(text="Paused", color="#888888"),
    AlertState.UNKNOWN: StateModel(text="Unknown", color="#888888"),
}


def get_state_model(state: AlertState) -> StateModel:
    """Get the display model for an alert state."""
    return STATE_MODELS.get(state, STATE_MODELS[AlertState.UNKNOWN])


@dataclass(frozen=True)
class EvalMatch:
    """A single metric sample that matched the alert condition.

    Attributes:
        metric: Series name.
        value: Sampled value, None when the series had no data.
        tags: Series tags.
    """

    metric: str
    value: float | None
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def formatted_value(self) -> str:
        """Return the value with six decimal places, or "null"."""
        if self.value is None:
            return "null"
        return f"{self.value:f}"


@dataclass(frozen=True)
class RuleLink:
    """Location of the panel an alert rule belongs to."""

    dashboard_uid: str
    dashboard_slug: str
    panel_id: int
    org_id: int

    def resolve(self, app_url: str) -> str:
        """Build the absolute URL of the rule's panel editor.

        Args:
            app_url: Public root URL of the alerting application.

        Returns:
            Link to the alert tab of the panel.

        Raises:
            RuleLinkError: If the app URL or dashboard uid is missing.
        """
        if not app_url:
            raise RuleLinkError("Cannot build rule link without an app url")
        if not self.dashboard_uid:
            raise RuleLinkError("Cannot build rule link without a dashboard uid")

        if not app_url.endswith("/"):
            app_url = f"{app_url}/"
        dashboard_url = DASHBOARD_URL_FORMAT.format(
            app_url=app_url, uid=self.dashboard_uid, slug=self.dashboard_slug
        )
        return RULE_URL_FORMAT.format(
            dashboard_url=dashboard_url, panel_id=self.panel_id, org_id=self.org_id
        )


@dataclass(frozen=True)
class AlertEvaluation:
    """Result of evaluating an alert rule, as handed over for notification.

    Attributes:
        rule_id: Identifier of the evaluated rule.
        rule_name: Human-readable rule name.
        title: Notification title.
        color: Severity color as a hex string (e.g. "#D63232").
        message: Free-text rule message.
        matches: Metric samples that matched, in evaluation order.
        image_public_url: Public URL of the rendered graph, if uploaded.
        image_on_disk_path: Local path of the rendered graph, if any.
        rule_link: Location of the rule's panel.
        is_test_run: Whether this is a test notification.
    """

    rule_id: int
    rule_name: str
    title: str
    color: str
    message: str = ""
    matches: tuple[EvalMatch, ...] = ()
    image_public_url: str = ""
    image_on_disk_path: str = ""
    rule_link: RuleLink | None = None
    is_test_run: bool = False

    @classmethod
    def for_state(
        cls,
        state: AlertState,
        *,
        rule_id: int,
        rule_name: str,
        **kwargs: object,
    ) -> AlertEvaluation:
        """Create an evaluation whose title and color derive from its state."""
        state_model = get_state_model(state)
        return cls(
            rule_id=rule_id,
            rule_name=rule_name,
            title=f"[{state_model.text}] {rule_name}",
            color=state_model.color,
            **kwargs,  # type: ignore[arg-type]
        )

    def get_rule_url(self, app_url: str) -> str:
        """Get the link back to the originating rule.

        Raises:
            RuleLinkError: If the link cannot be resolved.
        """
        if self.is_test_run:
            return app_url
        if self.rule_link is None:
            raise RuleLinkError(f"Rule {self.rule_id} has no dashboard link")
        return self.rule_link.resolve(app_url)


@dataclass(frozen=True)
class AlertNotification:
    """Persisted notifier record supplied by the notifier registry."""

    name: str
    type: str
    uid: str = ""
    settings: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class EmbedField:
    """One inline name/value pair of an embed."""

    name: str
    value: str
    inline: bool = True

    def to_dict(self) -> dict[str, object]:
        """Serialize to the webhook wire format."""
        return {"name": self.name, "value": self.value, "inline": self.inline}


@dataclass(frozen=True)
class EmbedFooter:
    """Footer line of an embed."""

    text: str
    icon_url: str

    def to_dict(self) -> dict[str, object]:
        """Serialize to the webhook wire format."""
        return {"text": self.text, "icon_url": self.icon_url}


@dataclass(frozen=True)
class RichEmbed:
    """A rich embed block rendered by the chat provider.

    Attributes:
        title: Embed title.
        color: Integer color in 0..0xFFFFFF.
        url: Link attached to the title.
        description: Embed body text.
        fields: Inline metric fields, in evaluation order.
        footer: Footer text and icon.
        image_url: Public image URL or the local attachment placeholder.
        attachment_required: Whether the image must be sent as a file.
    """

    title: str
    color: int
    url: str
    description: str
    fields: tuple[EmbedField, ...]
    footer: EmbedFooter
    image_url: str
    attachment_required: bool = False
    type: str = "rich"

    def to_dict(self) -> dict[str, object]:
        """Serialize to the webhook wire format."""
        return {
            "title": self.title,
            "color": self.color,
            "url": self.url,
            "description": self.description,
            "type": self.type,
            "fields": [f.to_dict() for f in self.fields],
            "footer": self.footer.to_dict(),
            "image": {"url": self.image_url},
        }


@dataclass(frozen=True)
class WebhookMessage:
    """Envelope posted to the webhook: sender name, content and embeds."""

    username: str
    embeds: tuple[RichEmbed, ...]
    content: str = ""

    @property
    def attachment_required(self) -> bool:
        """Return True if any embed references a local attachment."""
        return any(embed.attachment_required for embed in self.embeds)

    def to_dict(self) -> dict[str, object]:
        """Serialize to the webhook wire format."""
        payload: dict[str, object] = {"username": self.username}
        if self.content:
            payload["content"] = self.content
        payload["embeds"] = [embed.to_dict() for embed in self.embeds]
        return payload

    def to_json(self) -> bytes:
        """Serialize to compact UTF-8 JSON."""
        return json.dumps(
            self.to_dict(), ensure_ascii=False, separators=(",", ":")
        ).encode("utf-8")


@dataclass(frozen=True)
class DeliveryBody:
    """Encoded request body and the content type that describes it."""

    body: bytes
    content_type: str

    @property
    def is_multipart(self) -> bool:
        """Return True for a multipart/form-data body."""
        return self.content_type.startswith("multipart/form-data")


@dataclass(frozen=True)
class WebhookRequest:
    """A request ready for the webhook sender."""

    url: str
    body: bytes
    content_type: str
    http_method: str = "POST"
