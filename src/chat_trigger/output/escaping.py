from typing import Any


def escape_braces(value: Any) -> Any:
    """Double every ``{`` and ``}`` in string values, recursing into dicts and lists.

    Keys and non-string scalars are left untouched. Not idempotent: escaping an
    already escaped string doubles the braces again.
    """
    if isinstance(value, str):
        return value.replace("{", "{{").replace("}", "}}")
    if isinstance(value, (list, tuple)):
        return [escape_braces(v) for v in value]
    if isinstance(value, dict):
        return {k: escape_braces(v) for k, v in value.items()}
    return value
