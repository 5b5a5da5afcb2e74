"""Client-side checks for document and receipt uploads."""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Sequence

from shopledger.domain.entities import DocumentType
from shopledger.domain.errors import ValidationError

MB = 1024 * 1024
MAX_FILES_PER_UPLOAD = 5

UPLOAD_RULES = {
    "document": (20 * MB, frozenset({"pdf", "jpg", "jpeg", "png", "docx", "doc"})),
    "receipt": (10 * MB, frozenset({"pdf", "jpg", "png"})),
}


@dataclass(frozen=True)
class Attachment:
    """File offered for upload."""

    filename: str
    size: int


def validate_attachments(files: Sequence[Attachment], kind: str) -> None:
    """Check file count, size and extension before anything is uploaded.

    Args:
        files: Files to attach in one operation
        kind: "document" or "receipt"

    Raises:
        ValidationError: On the first rule a file breaks
    """
    if kind not in UPLOAD_RULES:
        raise ValidationError(f"Unknown attachment kind '{kind}'")
    max_size, extensions = UPLOAD_RULES[kind]

    if len(files) > MAX_FILES_PER_UPLOAD:
        raise ValidationError(
            f"At most {MAX_FILES_PER_UPLOAD} files can be attached at once, got {len(files)}"
        )

    for f in files:
        ext = PurePath(f.filename).suffix.lower().lstrip(".")
        if ext not in extensions:
            raise ValidationError(
                f"'{f.filename}' has an unsupported type. Allowed: {', '.join(sorted(extensions))}"
            )
        if f.size > max_size:
            raise ValidationError(
                f"'{f.filename}' is larger than {max_size // MB}MB"
            )


def parse_document_type(value: str) -> DocumentType:
    """Parse a product document type."""
    try:
        return DocumentType(value.strip().lower())
    except ValueError:
        allowed = ", ".join(t.value for t in DocumentType)
        raise ValidationError(f"Unknown document type '{value}'. Supported: {allowed}")
