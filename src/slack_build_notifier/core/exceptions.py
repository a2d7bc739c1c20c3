"""Exception hierarchy for slack-build-notifier.

Errors fall into two groups:

- Configuration errors are raised while the notifier is being set up
  (bad YAML, unknown secret, malformed template or filter). They prevent
  the notifier from activating at all.
- Per-event errors are raised while a single build event is processed
  (binding resolution, template execution, block parsing, delivery). They
  abort only that event's notification.

All exceptions derive from NotifierError so callers can catch the whole
family in one place.
"""


class NotifierError(Exception):
    """Base exception for slack-build-notifier."""

    pass


# === Configuration errors ===


class ConfigError(NotifierError):
    """Configuration could not be loaded or validated.

    Raised when:
    - Config file is missing, too large, or unreadable
    - YAML is malformed
    - Config does not match the expected schema
    - Block template cannot be loaded
    """

    pass


class FilterError(ConfigError):
    """Event filter expression could not be compiled."""

    pass


class SecretError(ConfigError):
    """A secret reference could not be resolved."""

    pass


class TemplateParseError(ConfigError):
    """A message template has invalid syntax.

    Attributes:
        template_name: Name of the template that failed ("blockkit_template"
            or "message_template").
        lineno: Line number reported by the template engine, if known.

    """

    def __init__(self, message: str, template_name: str, lineno: int | None = None) -> None:
        """Initialize TemplateParseError with template context.

        Args:
            message: Human-readable error message.
            template_name: Name of the failing template.
            lineno: Line number of the syntax error.

        """
        super().__init__(message)
        self.template_name = template_name
        self.lineno = lineno


# === Per-event errors ===


class EventError(NotifierError):
    """Base exception for failures that abort a single build notification."""

    pass


class EventDecodeError(EventError):
    """Incoming message is not a valid build record or Pub/Sub envelope."""

    pass


class FilterEvaluationError(EventError):
    """The event filter raised while being evaluated against a build."""

    pass


class BindingError(EventError):
    """A notification param binding could not be resolved against the build."""

    pass


class TemplateRenderError(EventError):
    """A template failed while executing against the build view."""

    def __init__(self, message: str, template_name: str) -> None:
        """Initialize TemplateRenderError.

        Args:
            message: Human-readable error message.
            template_name: Name of the failing template.

        """
        super().__init__(message)
        self.template_name = template_name


class BlockParseError(EventError):
    """Rendered block template is not a valid Block Kit array.

    Attributes:
        rendered_prefix: Leading part of the rendered text, bounded for logs.

    """

    def __init__(self, message: str, rendered_prefix: str) -> None:
        """Initialize BlockParseError.

        Args:
            message: Human-readable error message (includes the prefix).
            rendered_prefix: Bounded prefix of the offending rendered text.

        """
        super().__init__(message)
        self.rendered_prefix = rendered_prefix


class DeliveryError(EventError):
    """Webhook delivery failed.

    Attributes:
        status_code: HTTP status returned by the webhook, None on transport
            failure.

    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize DeliveryError.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code, if a response was received.

        """
        super().__init__(message)
        self.status_code = status_code
