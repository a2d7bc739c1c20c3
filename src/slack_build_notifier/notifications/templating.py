"""Sandboxed template engine for notification messages.

Templates are Jinja2 templates evaluated in an immutable sandbox: they can
read fields of the build view, call the helper functions below, and nothing
else. Missing keys render as an empty string at any nesting depth, so
``{{ build.substitutions._COMMIT_MESSAGE }}`` never fails when the
substitution is absent.

Helpers available to template authors:

- ``replace(s, old, new)`` - replace every occurrence of ``old`` with ``new``
- ``jsonEscape(v)`` - make ``v`` safe to embed inside a JSON string literal

Both are also registered as filters (``|replace`` is Jinja's own, and
``|json_escape`` / ``|jsonEscape``).

Example:
    >>> tmpl = compile_template("{{ replace(url, '&', '%26') }}", "example")
    >>> render_template(tmpl, {"url": "a&b"}, "example")
    'a%26b'

"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from jinja2 import ChainableUndefined, Template, TemplateError, TemplateSyntaxError, Undefined
from jinja2.sandbox import ImmutableSandboxedEnvironment

from slack_build_notifier.core.exceptions import TemplateParseError, TemplateRenderError

logger = logging.getLogger(__name__)

BLOCK_TEMPLATE_NAME = "blockkit_template"
MESSAGE_TEMPLATE_NAME = "message_template"


def replace(s: Any, old: str, new: str) -> str:
    """Replace all occurrences of ``old`` in ``s`` with ``new``."""
    if s is None or isinstance(s, Undefined):
        return ""
    return str(s).replace(old, new)


def json_escape(value: Any) -> str:
    """Escape a value for embedding inside a JSON string literal.

    Non-string values are converted with str(). None and undefined template
    values escape to an empty string.

    If encoding fails the unescaped text is returned and a warning is
    logged, matching the behavior existing templates rely on.

    Args:
        value: Any template value.

    Returns:
        JSON-escaped text without the surrounding quotes.

    """
    if value is None or isinstance(value, Undefined):
        return ""
    text = value if isinstance(value, str) else str(value)
    try:
        encoded = json.dumps(text, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        logger.warning("jsonEscape could not encode value, using it unescaped: %s", e)
        return text
    return encoded[1:-1]


def create_environment() -> ImmutableSandboxedEnvironment:
    """Create the sandboxed environment shared by templates and filters."""
    env = ImmutableSandboxedEnvironment(
        undefined=ChainableUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    env.globals["replace"] = replace
    env.globals["jsonEscape"] = json_escape
    env.filters["json_escape"] = json_escape
    env.filters["jsonEscape"] = json_escape
    return env


_environment = create_environment()


def get_environment() -> ImmutableSandboxedEnvironment:
    """Return the module-wide sandboxed environment."""
    return _environment


def compile_template(source: str, name: str) -> Template:
    """Parse template source.

    Args:
        source: Template text.
        name: Template name used in error messages.

    Returns:
        Compiled template.

    Raises:
        TemplateParseError: If the template has invalid syntax.

    """
    try:
        return _environment.from_string(source)
    except TemplateSyntaxError as e:
        raise TemplateParseError(
            f"failed to parse {name} (line {e.lineno}): {e.message}",
            template_name=name,
            lineno=e.lineno,
        ) from e


def render_template(template: Template, view: Mapping[str, Any], name: str) -> str:
    """Execute a compiled template against a view.

    Raises:
        TemplateRenderError: If execution fails (e.g. calling an undefined
            name, a sandbox violation, arithmetic overflow or division by zero,
            or a helper called with bad args).

    """
    try:
        return template.render(view)
    except (TemplateError, TypeError, ValueError, ArithmeticError) as e:
        raise TemplateRenderError(f"failed to execute {name}: {e}", template_name=name) from e
