"""Reconciliation of stored-file references sent by the client.

A reference points at an object in the permit files bucket. Clients echo
references back when saving a document, so every reference is checked
against the caller's id before it is stored or reused: paths are always
``<userId>/...``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from permit_buddy.core.exceptions import InvalidSourceFileError
from permit_buddy.schemas.document import SOURCE_FILE_FIELDS, DocumentPayload
from permit_buddy.schemas.extraction import SourceFileMetadata
from permit_buddy.utils.normalization import parse_size

DEFAULT_CONTENT_TYPE = "application/octet-stream"
DEFAULT_FILE_NAME = "permit-file"


class SourceFileAction(str, Enum):
    IGNORE = "ignore"
    CLEAR = "clear"
    SET = "set"


@dataclass(frozen=True)
class SourceFileDecision:
    """What to do with a document's stored reference on save."""

    action: SourceFileAction
    value: Optional[SourceFileMetadata] = None

    def column_values(self) -> dict:
        """Column updates for this decision; IGNORE yields none."""
        if self.action is SourceFileAction.IGNORE:
            return {}
        value = self.value
        return {
            "source_file_bucket": value.bucket if value else None,
            "source_file_path": value.path if value else None,
            "source_file_content_type": value.content_type if value else None,
            "source_file_name": value.name if value else None,
            "source_file_size": value.size if value else None,
        }


def is_owned_reference(bucket: Any, path: Any, user_id: str, expected_bucket: str) -> bool:
    """Whether ``bucket/path`` lies in the designated bucket under the user's prefix."""
    return (
        isinstance(bucket, str)
        and isinstance(path, str)
        and bucket == expected_bucket
        and path.startswith(f"{user_id}/")
    )


def text_or_default(value: Any, default: str) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return default


def _validated_size(value: Any) -> int:
    size = parse_size(value)
    if size is None or size < 0:
        raise InvalidSourceFileError("Invalid source file size")
    return int(size)


def build_reference(
    payload: DocumentPayload,
    user_id: str,
    expected_bucket: str,
) -> SourceFileMetadata:
    """Validate the payload's bucket/path/size and fill in defaults.

    Raises:
        InvalidSourceFileError: On non-string, foreign or unowned references,
            or an unusable size
    """
    bucket = payload.source_file_bucket
    path = payload.source_file_path

    if not isinstance(bucket, str) or not isinstance(path, str):
        raise InvalidSourceFileError("Invalid source file metadata")

    if not is_owned_reference(bucket, path, user_id, expected_bucket):
        raise InvalidSourceFileError("Invalid source file reference")

    return SourceFileMetadata(
        bucket=bucket,
        path=path,
        content_type=text_or_default(payload.source_file_content_type, DEFAULT_CONTENT_TYPE),
        name=text_or_default(payload.source_file_name, DEFAULT_FILE_NAME),
        size=_validated_size(payload.source_file_size),
    )


def _sent_blank(payload: DocumentPayload, field: str) -> bool:
    value = getattr(payload, field)
    return payload.has_field(field) and (value is None or value == "")


def resolve_source_file_decision(
    payload: DocumentPayload,
    user_id: str,
    expected_bucket: str,
) -> SourceFileDecision:
    """Decide how a save request affects the stored file reference.

    - no source-file field present: IGNORE
    - bucket or path sent as null or empty string: CLEAR
    - otherwise: SET, after type, ownership and size validation

    Raises:
        InvalidSourceFileError: If a reference is supplied but invalid
    """
    if not any(payload.has_field(name) for name in SOURCE_FILE_FIELDS):
        return SourceFileDecision(SourceFileAction.IGNORE)

    if _sent_blank(payload, "source_file_bucket") or _sent_blank(payload, "source_file_path"):
        return SourceFileDecision(SourceFileAction.CLEAR)

    return SourceFileDecision(
        SourceFileAction.SET,
        build_reference(payload, user_id, expected_bucket),
    )
