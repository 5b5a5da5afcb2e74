"""Tests for upload validation."""

import pytest

from shopledger.domain.attachments import (
    MB,
    Attachment,
    parse_document_type,
    validate_attachments,
)
from shopledger.domain.entities import DocumentType
from shopledger.domain.errors import ValidationError


def test_valid_documents():
    validate_attachments(
        [Attachment("certificate.PDF", 2 * MB), Attachment("photo.jpeg", 19 * MB)],
        "document",
    )


def test_receipt_rejects_docx():
    with pytest.raises(ValidationError, match="unsupported type"):
        validate_attachments([Attachment("receipt.docx", 100)], "receipt")


def test_receipt_size_limit():
    validate_attachments([Attachment("receipt.png", 10 * MB)], "receipt")
    with pytest.raises(ValidationError, match="larger than 10MB"):
        validate_attachments([Attachment("receipt.png", 10 * MB + 1)], "receipt")


def test_too_many_files():
    files = [Attachment(f"scan{i}.pdf", 100) for i in range(6)]
    with pytest.raises(ValidationError, match="At most 5"):
        validate_attachments(files, "document")


def test_unknown_kind():
    with pytest.raises(ValidationError):
        validate_attachments([], "invoice")


def test_parse_document_type():
    assert parse_document_type(" Consignment_Agreement ") == DocumentType.CONSIGNMENT_AGREEMENT
    with pytest.raises(ValidationError, match="Unknown document type"):
        parse_document_type("passport")
