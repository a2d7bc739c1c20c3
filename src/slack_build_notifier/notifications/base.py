"""Abstract base class for build notifiers.

This module defines the contract notifier implementations follow. A
notifier exposes two entry points:

- notify(): processes one build and raises NotifierError subclasses on
  failure. Returns the delivered message, or None when the event filter
  skipped the build.
- send_notification(): wraps notify() and NEVER raises. Failures are
  logged at ERROR level and reported as NotificationOutcome.FAILED, so one
  bad event never affects the next.

Example:
    >>> class ConsoleNotifier(Notifier):
    ...     @property
    ...     def notifier_name(self) -> str:
    ...         return "console"
    ...
    ...     async def notify(self, build: Build) -> WebhookMessage | None:
    ...         print(build.id)
    ...         return None

"""

import logging
from abc import ABC, abstractmethod
from enum import StrEnum

from slack_build_notifier.core.exceptions import NotifierError
from slack_build_notifier.notifications.blocks import WebhookMessage
from slack_build_notifier.notifications.events import Build

logger = logging.getLogger(__name__)


class NotificationOutcome(StrEnum):
    """Result of a single send_notification() call."""

    SENT = "sent"
    SKIPPED = "skipped"
    FAILED = "failed"


class Notifier(ABC):
    """Abstract base class for notifiers.

    Concrete implementations must implement:
        - notifier_name: Unique identifier for this notifier
        - notify(): Async method processing one build (may raise)
    """

    @property
    @abstractmethod
    def notifier_name(self) -> str:
        """Unique identifier for this notifier (e.g., 'slack')."""
        ...

    @abstractmethod
    async def notify(self, build: Build) -> WebhookMessage | None:
        """Process one build.

        Args:
            build: Build event view.

        Returns:
            The delivered message, or None if the build was filtered out.

        Raises:
            NotifierError: On any per-event failure.

        """
        ...

    async def send_notification(self, build: Build) -> NotificationOutcome:
        """Process one build without raising.

        Args:
            build: Build event view.

        Returns:
            SENT, SKIPPED (filtered out) or FAILED (error logged).

        """
        try:
            message = await self.notify(build)
        except NotifierError as e:
            logger.error(
                "Notification failed: build=%s, notifier=%s, error=%s",
                build.id,
                self.notifier_name,
                str(e),
            )
            return NotificationOutcome.FAILED
        except Exception as e:
            logger.exception(
                "Unexpected notification error: build=%s, notifier=%s, error=%s",
                build.id,
                self.notifier_name,
                str(e),
            )
            return NotificationOutcome.FAILED

        if message is None:
            return NotificationOutcome.SKIPPED
        return NotificationOutcome.SENT
