"""Template substitution for block fields.

Replaces ``{{name}}`` placeholders with values from the variable store:

- missing or ``None`` values leave the placeholder untouched;
- structured values (dicts, lists) render as indented JSON;
- anything else renders with :func:`stringify`.

Examples:
    >>> resolve("Hello {{ name }}", {"name": "Ana"})
    'Hello Ana'
    >>> resolve("Hello {{missing}}", {})
    'Hello {{missing}}'
"""

import json
import re
from collections.abc import Mapping
from typing import Any

PLACEHOLDER_PATTERN = re.compile(r"\{\{([^}]+)\}\}")


def stringify(value: Any) -> str:
    """Render a stored value as text.

    Booleans use JSON spelling so ``{{flag}}`` reads the same as in the editor.
    """
    if isinstance(value, (dict, list, tuple)):
        return json.dumps(value, indent=2, ensure_ascii=False, default=str)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def resolve(text: Any, variables: Mapping[str, Any]) -> str:
    """Substitute ``{{name}}`` placeholders in ``text``.

    Args:
        text: Template text. Non-string input is returned as ``str(text)``
            without substitution.
        variables: Variable store snapshot (never mutated).

    Returns:
        Text with every resolvable placeholder replaced.
    """
    if not isinstance(text, str):
        return str(text)

    if "{{" not in text:
        return text

    def _substitute(match: re.Match[str]) -> str:
        value = variables.get(match.group(1).strip())
        if value is None:
            return match.group(0)
        return stringify(value)

    return PLACEHOLDER_PATTERN.sub(_substitute, text)


def placeholders(text: str) -> list[str]:
    """Variable names referenced by ``text``, in order of appearance."""
    return [name.strip() for name in PLACEHOLDER_PATTERN.findall(text)]
