"""Secret retrieval for notifier setup.

A secret is referenced by resource name (the ``value`` of an entry in
``spec.secrets``). Resource names use a scheme prefix:

- ``env:NAME`` or ``env://NAME`` - read environment variable NAME

MappingSecretGetter resolves names from an in-memory mapping and is meant
for embedding the notifier in a host that already holds its secrets.
"""

import logging
import os
from collections.abc import Mapping
from typing import Protocol

from slack_build_notifier.core.exceptions import SecretError

logger = logging.getLogger(__name__)


class SecretGetter(Protocol):
    """Resolves secret resource names to secret values."""

    def get_secret(self, resource_name: str) -> str: ...


class EnvSecretGetter:
    """Reads secrets from environment variables."""

    def __init__(self, environ: Mapping[str, str] | None = None) -> None:
        self._environ = environ if environ is not None else os.environ

    def get_secret(self, resource_name: str) -> str:
        """Return the value of the referenced environment variable.

        Raises:
            SecretError: If the name has no ``env:`` scheme or the variable
                is unset or empty.

        """
        scheme, sep, name = resource_name.partition(":")
        if scheme != "env" or not sep:
            raise SecretError(
                f"unsupported secret resource {resource_name!r} (expected env:NAME)"
            )
        name = name.removeprefix("//")
        value = self._environ.get(name, "")
        if not value:
            raise SecretError(f"environment variable {name!r} for secret is not set")
        logger.debug("Resolved secret from environment variable %s", name)
        return value


class MappingSecretGetter:
    """Resolves secrets from a fixed mapping."""

    def __init__(self, secrets: Mapping[str, str]) -> None:
        self._secrets = dict(secrets)

    def get_secret(self, resource_name: str) -> str:
        try:
            return self._secrets[resource_name]
        except KeyError:
            raise SecretError(f"unknown secret resource {resource_name!r}") from None
