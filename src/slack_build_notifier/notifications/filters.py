"""Event filters deciding whether a build is notified.

Filter expressions are Jinja2 expressions compiled in the same sandbox as
message templates. They see ``build`` (the build's wire-form mapping) and
``Build.Status`` (the BuildStatus enum), so configs read naturally:

    build.status == Build.Status.SUCCESS
    build.status in [Build.Status.FAILURE, Build.Status.TIMEOUT]
    build.substitutions.BRANCH_NAME == "main" and build.status != Build.Status.QUEUED

An empty expression accepts every build.
"""

import logging
from types import SimpleNamespace
from typing import Protocol

from jinja2 import TemplateError, TemplateSyntaxError

from slack_build_notifier.core.exceptions import FilterError, FilterEvaluationError
from slack_build_notifier.notifications.events import Build, BuildStatus
from slack_build_notifier.notifications.templating import get_environment

logger = logging.getLogger(__name__)

_BUILD_NAMESPACE = SimpleNamespace(Status=BuildStatus)


class EventFilter(Protocol):
    """Predicate over builds."""

    def apply(self, build: Build) -> bool: ...


class AcceptAllFilter:
    """Filter that accepts every build."""

    def apply(self, build: Build) -> bool:
        return True


class ExpressionFilter:
    """Filter compiled from a sandboxed expression.

    Attributes:
        expression: Source expression, kept for logging.

    """

    def __init__(self, expression: str) -> None:
        """Compile the expression.

        Raises:
            FilterError: If the expression has invalid syntax.

        """
        self.expression = expression
        try:
            self._compiled = get_environment().compile_expression(
                expression, undefined_to_none=True
            )
        except TemplateSyntaxError as e:
            raise FilterError(f"failed to compile filter {expression!r}: {e.message}") from e

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.expression!r}>"

    def apply(self, build: Build) -> bool:
        """Evaluate the filter against a build.

        Raises:
            FilterEvaluationError: If evaluation fails.

        """
        try:
            result = self._compiled(build=build.to_view(), Build=_BUILD_NAMESPACE)
        except (TemplateError, TypeError, ValueError, ArithmeticError) as e:
            raise FilterEvaluationError(
                f"failed to evaluate filter {self.expression!r} for build {build.id}: {e}"
            ) from e
        return bool(result)


def make_filter(expression: str) -> EventFilter:
    """Build a filter from a config expression; blank means accept all."""
    if not expression.strip():
        logger.debug("No filter configured, notifying on every build")
        return AcceptAllFilter()
    return ExpressionFilter(expression)
