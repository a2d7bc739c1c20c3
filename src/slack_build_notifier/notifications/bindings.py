"""Param binding resolution.

Notification params are resolved per build before rendering. A value of the
form ``$(build.<path>)`` is looked up in the build's wire-form mapping, e.g.
``$(build.substitutions._PR_NUMBER)`` or ``$(build.status)``; any other
value is passed through literally.
"""

import json
import logging
import re
from collections.abc import Mapping
from typing import Any, Protocol

from slack_build_notifier.core.exceptions import BindingError
from slack_build_notifier.notifications.events import Build

logger = logging.getLogger(__name__)

_REFERENCE_PATTERN = re.compile(r"^\$\(\s*([A-Za-z_][\w.]*)\s*\)$")


class BindingResolver(Protocol):
    """Resolves param bindings for a build."""

    def resolve(self, build: Build) -> dict[str, str]: ...


def _lookup(view: Mapping[str, Any], path: str) -> Any:
    root, _, rest = path.partition(".")
    if root != "build":
        raise BindingError(f"unsupported binding root {root!r} in $({path})")

    value: Any = view
    for part in rest.split(".") if rest else []:
        if not isinstance(value, Mapping) or part not in value:
            raise BindingError(f"build has no field $({path})")
        value = value[part]
    return value


class ParamBindingResolver:
    """Resolves ``spec.notification.params`` against each build."""

    def __init__(self, params: Mapping[str, str]) -> None:
        self._params = dict(params)

    def resolve(self, build: Build) -> dict[str, str]:
        """Resolve all params for one build.

        Raises:
            BindingError: If a ``$(...)`` reference cannot be resolved.

        """
        view = build.to_view()
        resolved: dict[str, str] = {}
        for key, raw in self._params.items():
            match = _REFERENCE_PATTERN.match(raw)
            if match is None:
                resolved[key] = raw
                continue
            value = _lookup(view, match.group(1))
            resolved[key] = value if isinstance(value, str) else json.dumps(value)
        logger.debug("Resolved %d binding(s) for build %s", len(resolved), build.id)
        return resolved
