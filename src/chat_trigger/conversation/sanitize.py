import re

_PATTERNS = [
    re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL),
    re.compile(r"<iframe[^>]*>.*?</iframe>", re.IGNORECASE | re.DOTALL),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"on\w+\s*=", re.IGNORECASE),
]


def sanitize_message(message) -> str:
    """Trim and strip script, iframe, javascript: and inline event-handler patterns."""
    if not message or not isinstance(message, str):
        return ""
    cleaned = message.strip()
    for pattern in _PATTERNS:
        cleaned = pattern.sub("", cleaned)
    return cleaned
