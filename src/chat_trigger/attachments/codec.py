"""Attachment decoding, validation and conversion to the binary side-channel.

Every file in a request is processed on its own and yields an
:class:`AttachmentOutcome`. A bad file never affects its siblings; the caller
decides from the outcomes whether a failure is fatal.
"""

import base64
import binascii
import logging
import mimetypes
import re
from dataclasses import dataclass
from typing import Any

from ..errors import AttachmentDecodeError, AttachmentInvalid, AttachmentValidationError

logger = logging.getLogger(__name__)

DEFAULT_MIME_TYPE = "application/octet-stream"
BINARY_KEY_PREFIX = "data"

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Attachment:
    name: str
    mime_type: str
    size_bytes: int
    raw_bytes: bytes


@dataclass
class AttachmentOutcome:
    index: int
    name: str
    attachment: Attachment | None = None
    error: AttachmentInvalid | None = None

    @property
    def ok(self) -> bool:
        return self.attachment is not None


@dataclass(frozen=True)
class BinaryEntry:
    data: bytes
    file_name: str
    mime_type: str
    file_size: int

    def to_transport(self) -> dict:
        """JSON-safe form used when the item leaves over HTTP."""
        return {
            "data": encode_payload(self.data),
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "fileSize": self.file_size,
        }


def encode_payload(raw: bytes) -> str:
    return base64.b64encode(raw).decode("ascii")


def decode_payload(payload: str) -> bytes:
    """Decode a base64 string, accepting an optional ``data:...,`` URL prefix.

    Raises ``ValueError`` when the payload is not valid base64.
    """
    if payload.startswith("data:"):
        _, sep, payload = payload.partition(",")
        if not sep:
            raise ValueError("data URL has no payload")
    payload = _WHITESPACE.sub("", payload)
    if not payload:
        raise ValueError("empty payload")
    try:
        return base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"invalid base64: {e}") from e


def validate_file_type(file_name: str, mime_type: str, allowed_types: str) -> bool:
    """Match against a comma list of extensions or MIME fragments; ``*`` allows all."""
    if not allowed_types or allowed_types.strip() == "*":
        return True

    allowed = [t.strip().lower() for t in allowed_types.split(",") if t.strip()]
    if "*" in allowed:
        return True

    name = file_name.lower()
    if "." in name:
        extension = name.rsplit(".", 1)[1]
        if any(t in (extension, f".{extension}") for t in allowed):
            return True

    mime_type = mime_type.lower()
    for t in allowed:
        fragment = t.replace(".", "").replace("*", "")
        if fragment and fragment in mime_type:
            return True
    return False


def validate_file_size(size_bytes: int, max_size_mb: float) -> bool:
    if not max_size_mb or max_size_mb <= 0:
        return True
    return size_bytes <= max_size_mb * 1024 * 1024


def extract_files(body: Any) -> list:
    if not isinstance(body, dict):
        return []
    files = body.get("files")
    return files if isinstance(files, list) else []


def strip_file_data(body: Any) -> Any:
    """Copy of ``body`` with file payloads removed, keeping name/type/size."""
    if not isinstance(body, dict):
        return body
    cleaned = dict(body)
    files = cleaned.get("files")
    if isinstance(files, list):
        cleaned["files"] = [
            {"name": f.get("name"), "type": f.get("type"), "size": f.get("size")}
            for f in files
            if isinstance(f, dict)
        ]
    return cleaned


def _guess_mime_type(name: str) -> str:
    guessed, _ = mimetypes.guess_type(name)
    return guessed or DEFAULT_MIME_TYPE


def decode_attachment(
    index: int,
    file: Any,
    allowed_types: str = "*",
    max_size_mb: float = 0,
) -> AttachmentOutcome:
    if not isinstance(file, dict):
        name = f"file_{index}"
        return AttachmentOutcome(
            index, name, error=AttachmentDecodeError(index, name, "not a file object")
        )

    name = file.get("name")
    if not isinstance(name, str) or not name:
        name = f"file_{index}"
    payload = file.get("data")
    if not isinstance(payload, str) or not payload:
        return AttachmentOutcome(
            index, name, error=AttachmentDecodeError(index, name, "missing payload")
        )

    try:
        raw = decode_payload(payload)
    except ValueError as e:
        return AttachmentOutcome(index, name, error=AttachmentDecodeError(index, name, str(e)))

    declared = file.get("type")
    mime_type = declared if isinstance(declared, str) and declared else _guess_mime_type(name)

    if not validate_file_type(name, mime_type, allowed_types):
        extension = name.rsplit(".", 1)[1] if "." in name else mime_type
        return AttachmentOutcome(
            index,
            name,
            error=AttachmentValidationError(index, name, f"file type {extension} is not allowed"),
        )
    if not validate_file_size(len(raw), max_size_mb):
        return AttachmentOutcome(
            index,
            name,
            error=AttachmentValidationError(
                index, name, f"exceeds maximum size of {max_size_mb:g}MB"
            ),
        )

    return AttachmentOutcome(
        index,
        name,
        attachment=Attachment(name=name, mime_type=mime_type, size_bytes=len(raw), raw_bytes=raw),
    )


def decode_attachments(
    files: list, allowed_types: str = "*", max_size_mb: float = 0
) -> list[AttachmentOutcome]:
    """Decode every file independently, logging each failure and carrying on."""
    outcomes = []
    for index, file in enumerate(files):
        outcome = decode_attachment(index, file, allowed_types, max_size_mb)
        if outcome.error is not None:
            logger.warning(
                "Attachment %d (%s) rejected: %s", index, outcome.name, outcome.error.reason
            )
        outcomes.append(outcome)
    return outcomes


def successful(outcomes: list[AttachmentOutcome]) -> list[Attachment]:
    return [o.attachment for o in outcomes if o.attachment is not None]


def to_binary(attachments: list[Attachment]) -> tuple[dict[str, BinaryEntry], list[str]]:
    """Key attachments ``data0, data1, ...`` in order."""
    binary: dict[str, BinaryEntry] = {}
    keys: list[str] = []
    for position, attachment in enumerate(attachments):
        key = f"{BINARY_KEY_PREFIX}{position}"
        binary[key] = BinaryEntry(
            data=attachment.raw_bytes,
            file_name=attachment.name,
            mime_type=attachment.mime_type,
            file_size=attachment.size_bytes,
        )
        keys.append(key)
    return binary, keys
