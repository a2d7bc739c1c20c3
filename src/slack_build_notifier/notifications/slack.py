"""Slack webhook notifier.

Processes one build per call: the event filter decides whether to notify,
param bindings are resolved, the MessageRenderer builds the webhook
message, and the payload is POSTed to the Slack incoming webhook.

Delivery is a single HTTP POST; there are no retries. Any failure aborts
only the current build's notification.

Example:
    >>> notifier = SlackNotifier.from_config(
    ...     config, block_template, EnvSecretGetter()
    ... )
    >>> outcome = await notifier.send_notification(build)

"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import httpx

from slack_build_notifier.core.config import (
    WEBHOOK_URL_SECRET_NAME,
    NotifierConfig,
    find_secret_resource_name,
    get_secret_ref,
)
from slack_build_notifier.core.exceptions import DeliveryError
from slack_build_notifier.notifications.base import Notifier
from slack_build_notifier.notifications.bindings import BindingResolver, ParamBindingResolver
from slack_build_notifier.notifications.filters import AcceptAllFilter, EventFilter, make_filter
from slack_build_notifier.notifications.renderer import MessageRenderer

if TYPE_CHECKING:
    from slack_build_notifier.notifications.blocks import WebhookMessage
    from slack_build_notifier.notifications.events import Build
    from slack_build_notifier.notifications.secrets import SecretGetter

logger = logging.getLogger(__name__)

# httpx logs every request URL at INFO and the URL is the webhook secret
for _http_logger in ("httpx", "httpcore"):
    logging.getLogger(_http_logger).setLevel(logging.WARNING)

_DEFAULT_TIMEOUT_SECONDS: float = 10.0


class SlackNotifier(Notifier):
    """Sends build notifications to a Slack incoming webhook.

    The notifier is immutable after construction and safe to share between
    concurrent send_notification() calls.

    Attributes:
        name: Notifier name from the config metadata, used in logs.

    """

    def __init__(
        self,
        renderer: MessageRenderer,
        webhook_url: str | None,
        event_filter: EventFilter | None = None,
        binding_resolver: BindingResolver | None = None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
        name: str = "slack",
    ) -> None:
        """Initialize the notifier.

        Args:
            renderer: Configured message renderer.
            webhook_url: Slack webhook URL. None builds a render-only
                notifier whose notify() fails at delivery.
            event_filter: Build filter; defaults to accepting every build.
            binding_resolver: Param resolver; defaults to no params.
            http_client: Optional shared httpx.AsyncClient. A client is
                created per request when not provided.
            timeout: HTTP timeout in seconds for per-request clients.
            name: Notifier name used in log messages.

        """
        self._renderer = renderer
        self._webhook_url = webhook_url
        self._filter = event_filter or AcceptAllFilter()
        self._binding_resolver = binding_resolver or ParamBindingResolver({})
        self._http_client = http_client
        self._timeout = timeout
        self.name = name

    @classmethod
    def from_config(
        cls,
        config: NotifierConfig,
        block_template: str,
        secret_getter: SecretGetter | None,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT_SECONDS,
    ) -> SlackNotifier:
        """Configure a notifier from a loaded config.

        Args:
            config: Notifier config.
            block_template: Block template source.
            secret_getter: Resolves the webhook URL secret. None skips
                webhook resolution (render-only use).
            http_client: Optional shared httpx.AsyncClient.
            timeout: HTTP timeout in seconds.

        Returns:
            Configured SlackNotifier.

        Raises:
            FilterError: If the filter expression does not compile.
            ConfigError: If the webhook secret reference is missing.
            SecretError: If the webhook secret cannot be retrieved.
            TemplateParseError: If a template has invalid syntax.

        """
        notification = config.spec.notification
        event_filter = make_filter(notification.filter)

        webhook_url: str | None = None
        if secret_getter is not None:
            ref = get_secret_ref(notification.delivery, WEBHOOK_URL_SECRET_NAME)
            resource = find_secret_resource_name(config.spec.secrets, ref)
            webhook_url = secret_getter.get_secret(resource)

        renderer = MessageRenderer(block_template, config.message_template)
        logger.info(
            "Configured Slack notifier %r (text template: %s)",
            config.metadata.name,
            "yes" if renderer.has_text_template else "no",
        )
        return cls(
            renderer=renderer,
            webhook_url=webhook_url,
            event_filter=event_filter,
            binding_resolver=ParamBindingResolver(notification.params),
            http_client=http_client,
            timeout=timeout,
            name=config.metadata.name,
        )

    def __repr__(self) -> str:
        """Mask the webhook URL to keep it out of logs and tracebacks."""
        return f"<{type(self).__name__} name={self.name!r}>"

    @property
    def notifier_name(self) -> str:
        return self.name

    def build_message(self, build: Build) -> WebhookMessage | None:
        """Filter, resolve bindings and render, without delivering.

        Returns:
            The rendered message, or None if the filter rejected the build.

        Raises:
            FilterEvaluationError, BindingError, TemplateRenderError,
            BlockParseError: On per-event failures.

        """
        if not self._filter.apply(build):
            logger.debug("Build %s (status: %s) filtered out", build.id, build.status)
            return None

        bindings = self._binding_resolver.resolve(build)
        return self._renderer.render(build, bindings)

    async def notify(self, build: Build) -> WebhookMessage | None:
        """Render and deliver the notification for one build.

        Raises:
            DeliveryError: If the webhook rejects the payload or cannot be
                reached.

        """
        message = self.build_message(build)
        if message is None:
            return None

        logger.info("sending Slack webhook for Build %r (status: %r)", build.id, build.status)
        await self._post(message)
        return message

    async def _post(self, message: WebhookMessage) -> None:
        if not self._webhook_url:
            raise DeliveryError("no webhook URL configured")

        payload = message.to_payload()
        try:
            if self._http_client is not None:
                response = await self._http_client.post(self._webhook_url, json=payload)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._webhook_url, json=payload)
        except httpx.HTTPError as e:
            # Exception text may embed the URL, so only the type is reported
            raise DeliveryError(f"webhook request failed: {type(e).__name__}") from e

        if response.is_error:
            raise DeliveryError(
                f"webhook returned HTTP {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
