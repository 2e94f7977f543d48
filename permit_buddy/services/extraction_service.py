"""Extraction gateway: turns an uploaded permit into normalized form fields.

Flow: resolve (or upload) the stored copy of the file, send the file to the
vision model with the extraction prompt, parse the JSON answer and
normalize it. Nothing is persisted as a document here; the client saves
the reviewed fields through the document endpoints.
"""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Callable, Dict, Optional
from uuid import uuid4

from permit_buddy.core.exceptions import ExtractionParseError, InvalidSourceFileError
from permit_buddy.core.llm_client import LLMClient
from permit_buddy.prompts.extraction_prompts import PERMIT_EXTRACTION_SYSTEM_PROMPT, build_extraction_prompt
from permit_buddy.schemas.extraction import ExtractionResponse, SourceFileMetadata
from permit_buddy.services.source_file import is_owned_reference, text_or_default
from permit_buddy.services.storage_service import StorageService
from permit_buddy.utils.json_parser import parse_json_object
from permit_buddy.utils.logging import get_logger
from permit_buddy.utils.normalization import (
    coerce_bool,
    format_date,
    infer_status_from_dates,
    normalize_category,
    normalize_status,
    parse_date,
    parse_size,
    pick_first,
    sanitize_ascii,
)

LOGGER = get_logger(__name__)

# Accepted key names per field, highest priority first.
FIELD_SYNONYMS: Dict[str, tuple] = {
    "title": ("title", "permit_title", "type"),
    "permit_number": ("permit_number", "number", "permitNumber"),
    "document_category": ("document_category", "category", "type"),
    "status": ("status",),
    "start_date": ("start_date", "startDate", "issued_date", "issue_date"),
    "end_date": ("end_date", "endDate", "expiration_date", "expiry_date"),
    "auto_renew": ("auto_renew", "autoRenew"),
    "jurisdiction": ("jurisdiction", "jurisdictionName"),
    "issuing_authority": ("issuing_authority", "issuingAuthority"),
}

TEXT_FIELDS = ("title", "permit_number", "jurisdiction", "issuing_authority")


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def infer_extension(file_name: Optional[str]) -> str:
    """Lower-cased ``.ext`` of a file name, or an empty string."""
    if not file_name or "." not in file_name:
        return ""
    extension = file_name.rsplit(".", 1)[1]
    return f".{extension.lower()}" if extension else ""


@dataclass
class UploadedFile:
    """The file sent for extraction, already read into memory."""

    content: bytes
    content_type: str
    name: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class ExistingReference:
    """Stored-file fields a client may send to skip re-uploading."""

    bucket: Optional[str] = None
    path: Optional[str] = None
    content_type: Optional[str] = None
    name: Optional[str] = None
    size: Optional[str] = None

    @property
    def supplied(self) -> bool:
        return self.bucket is not None and self.path is not None


def normalize_extraction(
    parsed: Dict[str, Any],
    source_file: SourceFileMetadata,
    today: date,
) -> ExtractionResponse:
    """Map a model JSON object onto normalized form fields.

    Args:
        parsed: Decoded model output
        source_file: Resolved stored-file reference to echo back
        today: Reference date for status inference when the model gave no status

    Returns:
        The normalized extraction result
    """
    text: Dict[str, str] = {}
    for field in TEXT_FIELDS:
        value = pick_first(parsed, FIELD_SYNONYMS[field], strings_only=True) or ""
        text[field] = sanitize_ascii(value).strip()

    start_date = format_date(pick_first(parsed, FIELD_SYNONYMS["start_date"]))
    end_date = format_date(pick_first(parsed, FIELD_SYNONYMS["end_date"]))

    raw_status = pick_first(parsed, FIELD_SYNONYMS["status"])
    if isinstance(raw_status, str) and raw_status.strip():
        status = normalize_status(raw_status)
    else:
        status = infer_status_from_dates(parse_date(start_date), parse_date(end_date), today)

    return ExtractionResponse(
        title=text["title"],
        permit_number=text["permit_number"],
        document_category=normalize_category(pick_first(parsed, FIELD_SYNONYMS["document_category"])),
        status=status,
        start_date=start_date,
        end_date=end_date,
        auto_renew=coerce_bool(pick_first(parsed, FIELD_SYNONYMS["auto_renew"])),
        jurisdiction=text["jurisdiction"],
        issuing_authority=text["issuing_authority"],
        raw_fields=parsed,
        source_file=source_file,
    )


class ExtractionService:
    """Runs permit extraction for one uploaded file."""

    def __init__(
        self,
        llm_client: LLMClient,
        storage: StorageService,
        bucket: str,
        clock: Callable[[], date] = utc_today,
    ):
        """Initialize the service.

        Args:
            llm_client: Vision model client
            storage: Object storage client for new uploads
            bucket: Bucket that holds permit files
            clock: Returns the current date (prompt reference and upload folder)
        """
        self.llm_client = llm_client
        self.storage = storage
        self.bucket = bucket
        self.clock = clock

    async def extract(
        self,
        user_id: str,
        upload: UploadedFile,
        existing: Optional[ExistingReference] = None,
    ) -> ExtractionResponse:
        """Extract permit fields from ``upload``.

        Raises:
            InvalidSourceFileError: If a supplied reference is not the caller's
            StorageError: If uploading the file fails
            APIClientError: If the model call fails
            ExtractionParseError: If the model answer is not a JSON object
        """
        today = self.clock()
        source_file = await self.resolve_source_file(user_id, upload, existing or ExistingReference(), today)

        raw_content = await self.llm_client.generate_content(
            [
                {"text": build_extraction_prompt(today)},
                {"inline_data": {"mime_type": upload.content_type, "data": upload.content}},
            ],
            system_instruction=PERMIT_EXTRACTION_SYSTEM_PROMPT,
            generation_config={"temperature": 0.0, "response_mime_type": "application/json"},
        )
        LOGGER.debug(f"Raw model content: {raw_content}")

        try:
            parsed = parse_json_object(raw_content)
        except ValueError as e:
            LOGGER.error(f"Unusable extraction response for user {user_id}: {e}")
            raise ExtractionParseError(str(e), raw_content=raw_content, original_error=e) from e

        return normalize_extraction(parsed, source_file, today)

    async def resolve_source_file(
        self,
        user_id: str,
        upload: UploadedFile,
        existing: ExistingReference,
        today: date,
    ) -> SourceFileMetadata:
        """Reuse the caller's stored copy of the file, or upload a new one."""
        if existing.supplied:
            if not is_owned_reference(existing.bucket, existing.path, user_id, self.bucket):
                raise InvalidSourceFileError("Invalid source file reference")

            size = parse_size(existing.size)
            return SourceFileMetadata(
                bucket=existing.bucket,
                path=existing.path,
                content_type=text_or_default(existing.content_type, upload.content_type),
                name=text_or_default(existing.name, upload.name),
                size=int(size) if size is not None and size >= 0 else upload.size,
            )

        path = f"{user_id}/{today.isoformat()}/{uuid4()}{infer_extension(upload.name)}"
        await self.storage.upload_bytes(upload.content, self.bucket, path, upload.content_type)
        return SourceFileMetadata(
            bucket=self.bucket,
            path=path,
            content_type=upload.content_type,
            name=upload.name,
            size=upload.size,
        )
