import time
import uuid


def _identifier(prefix: str) -> str:
    return f"{prefix}_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def generate_session_id() -> str:
    return _identifier("session")


def generate_thread_id() -> str:
    return _identifier("thread")


def resolve_identifier(body: dict, *keys: str) -> str | None:
    """Return the first usable caller-supplied identifier under ``keys``."""
    for key in keys:
        value = body.get(key)
        if isinstance(value, bool):
            continue
        if isinstance(value, (str, int)) and str(value).strip():
            return str(value).strip()
    return None
