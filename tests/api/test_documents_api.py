from datetime import date, datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import status

from permit_buddy.core.dependencies import get_document_service
from permit_buddy.core.exceptions import InvalidSourceFileError, NotFoundError, StorageError
from permit_buddy.database.enums import DocumentCategory, DocumentStatus
from permit_buddy.main import app
from permit_buddy.schemas.document import DocumentResponse
from permit_buddy.services.document_service import DocumentService, StoredFile

USER_ID = "5d1c7c1e-4b7a-4c57-9d0e-2f3a4b5c6d7e"
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_document(**overrides) -> DocumentResponse:
    values = dict(
        id=31,
        business_id=7,
        title="Mobile Food Vendor Permit",
        permit_number="MFV-2025-0042",
        document_category=DocumentCategory.PERMIT,
        status=DocumentStatus.ACTIVE,
        start_date=date(2025, 1, 15),
        end_date=date(2026, 1, 14),
        auto_renew=False,
        issuing_authority_name="Austin Public Health",
        jurisdiction_name="Austin, TX",
        source_file_bucket="permit-files",
        source_file_path=f"{USER_ID}/2025-03-01/abc.pdf",
        source_file_content_type="application/pdf",
        source_file_name="permit.pdf",
        source_file_size=1024,
        created_at=NOW,
        updated_at=NOW,
    )
    values.update(overrides)
    return DocumentResponse(**values)


@pytest.fixture
def mock_document_service():
    service = AsyncMock(spec=DocumentService)
    app.dependency_overrides[get_document_service] = lambda: service
    return service


def test_list_documents_wire_format(test_client, authenticated, mock_document_service, auth_headers):
    mock_document_service.list_documents.return_value = [make_document()]

    response = test_client.get("/api/businesses/7/documents", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    document = response.json()[0]
    assert document["startDate"] == "2025-01-15"
    assert document["endDate"] == "2026-01-14"
    assert document["documentCategory"] == "PERMIT"
    assert document["issuingAuthorityName"] == "Austin Public Health"
    assert document["sourceFileSize"] == 1024
    mock_document_service.list_documents.assert_awaited_once_with(USER_ID, 7)


def test_create_document_tracks_sent_fields(test_client, authenticated, mock_document_service, auth_headers):
    mock_document_service.create_document.return_value = make_document()

    response = test_client.post(
        "/api/businesses/7/documents",
        json={
            "title": "Mobile Food Vendor Permit",
            "documentCategory": "permit",
            "sourceFileBucket": "permit-files",
            "sourceFilePath": f"{USER_ID}/2025-03-01/abc.pdf",
            "sourceFileSize": "1024",
        },
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    user_id, business_id, payload = mock_document_service.create_document.call_args.args
    assert (user_id, business_id) == (USER_ID, 7)
    assert payload.has_field("source_file_bucket")
    assert not payload.has_field("raw_extraction")
    assert payload.source_file_size == "1024"


def test_update_document_rejects_foreign_reference(test_client, authenticated, mock_document_service, auth_headers):
    mock_document_service.update_document.side_effect = InvalidSourceFileError("Invalid source file reference")

    response = test_client.patch(
        "/api/businesses/7/documents/31",
        json={"title": "Permit", "sourceFileBucket": "permit-files", "sourceFilePath": "someone-else/x.pdf"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Invalid source file reference"}


def test_update_document_not_found(test_client, authenticated, mock_document_service, auth_headers):
    mock_document_service.update_document.side_effect = NotFoundError("Permit not found")

    response = test_client.patch("/api/businesses/7/documents/999", json={"title": "x"}, headers=auth_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "Permit not found"}


def test_file_relay_headers(test_client, authenticated, mock_document_service, auth_headers):
    mock_document_service.get_document_file.return_value = StoredFile(
        content=b"%PDF-1.7 fake",
        content_type="application/pdf",
        filename="food permit.pdf",
    )

    response = test_client.get("/api/businesses/7/documents/31/file", headers=auth_headers)

    assert response.status_code == status.HTTP_200_OK
    assert response.content == b"%PDF-1.7 fake"
    assert response.headers["Content-Type"] == "application/pdf"
    assert response.headers["Content-Length"] == str(len(b"%PDF-1.7 fake"))
    assert response.headers["Content-Disposition"] == 'inline; filename="food%20permit.pdf"'
    assert response.headers["Cache-Control"] == "private, max-age=0, must-revalidate"
    mock_document_service.get_document_file.assert_awaited_once_with(USER_ID, 7, 31)


def test_file_relay_without_stored_file(test_client, authenticated, mock_document_service, auth_headers):
    mock_document_service.get_document_file.side_effect = NotFoundError("No stored file for this permit")

    response = test_client.get("/api/businesses/7/documents/31/file", headers=auth_headers)

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"error": "No stored file for this permit"}


def test_file_relay_storage_failure(test_client, authenticated, mock_document_service, auth_headers):
    mock_document_service.get_document_file.side_effect = StorageError("Unable to load file")

    response = test_client.get("/api/businesses/7/documents/31/file", headers=auth_headers)

    assert response.status_code == status.HTTP_502_BAD_GATEWAY
    assert response.json() == {"error": "Unable to load file"}
