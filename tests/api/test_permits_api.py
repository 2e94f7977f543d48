from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi import status

from permit_buddy.core.dependencies import get_document_service, get_extraction_service
from permit_buddy.core.exceptions import APIClientError, ExtractionParseError, StorageError
from permit_buddy.database.enums import DocumentCategory, DocumentStatus
from permit_buddy.main import app
from permit_buddy.schemas.document import DocumentResponse
from permit_buddy.schemas.extraction import ExtractionResponse, SourceFileMetadata
from permit_buddy.services.document_service import DocumentService
from permit_buddy.services.extraction_service import ExtractionService

USER_ID = "5d1c7c1e-4b7a-4c57-9d0e-2f3a4b5c6d7e"


@pytest.fixture
def mock_extraction_service():
    service = AsyncMock(spec=ExtractionService)
    app.dependency_overrides[get_extraction_service] = lambda: service
    return service


@pytest.fixture
def extraction_result() -> ExtractionResponse:
    return ExtractionResponse(
        title="Food Handler Certificate",
        permit_number="FH-889",
        document_category=DocumentCategory.CERTIFICATION,
        status=DocumentStatus.ACTIVE,
        start_date="2025-01-01",
        end_date="2027-01-01",
        auto_renew=False,
        jurisdiction="Travis County",
        issuing_authority="Texas DSHS",
        raw_fields={"title": "Food Handler Certificate"},
        source_file=SourceFileMetadata(
            bucket="permit-files",
            path=f"{USER_ID}/2025-03-01/f00d.pdf",
            content_type="application/pdf",
            name="cert.pdf",
            size=11,
        ),
    )


def test_extract_permit(test_client, authenticated, mock_extraction_service, extraction_result, auth_headers):
    mock_extraction_service.extract.return_value = extraction_result

    response = test_client.post(
        "/api/permits",
        files={"file": ("cert.pdf", b"%PDF-1.7 ok", "application/pdf")},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    body = response.json()
    assert body["documentCategory"] == "CERTIFICATION"
    assert body["issuingAuthority"] == "Texas DSHS"
    assert body["rawFields"] == {"title": "Food Handler Certificate"}
    assert body["sourceFile"]["contentType"] == "application/pdf"

    user_id, upload, existing = mock_extraction_service.extract.call_args.args
    assert user_id == USER_ID
    assert upload.content == b"%PDF-1.7 ok"
    assert upload.name == "cert.pdf"
    assert upload.content_type == "application/pdf"
    assert not existing.supplied


def test_extract_permit_passes_existing_reference(
    test_client, authenticated, mock_extraction_service, extraction_result, auth_headers
):
    mock_extraction_service.extract.return_value = extraction_result

    response = test_client.post(
        "/api/permits",
        files={"file": ("cert.pdf", b"%PDF-1.7 ok", "application/pdf")},
        data={
            "sourceFileBucket": "permit-files",
            "sourceFilePath": f"{USER_ID}/2025-02-01/old.pdf",
            "sourceFileSize": "11",
        },
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_200_OK
    _, _, existing = mock_extraction_service.extract.call_args.args
    assert existing.supplied
    assert existing.path == f"{USER_ID}/2025-02-01/old.pdf"
    assert existing.size == "11"


def test_extract_permit_without_file(test_client, authenticated, mock_extraction_service, mock_user_service, auth_headers):
    response = test_client.post("/api/permits", data={"sourceFileBucket": "permit-files"}, headers=auth_headers)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "No file uploaded"}
    mock_extraction_service.extract.assert_not_called()
    mock_user_service.ensure_user.assert_not_called()


def test_extract_permit_requires_auth(test_client, mock_extraction_service):
    response = test_client.post("/api/permits", files={"file": ("cert.pdf", b"x", "application/pdf")})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    mock_extraction_service.extract.assert_not_called()


def test_missing_token_wins_over_missing_file(test_client, mock_extraction_service):
    response = test_client.post("/api/permits", data={"sourceFileBucket": "permit-files"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"error": "Unauthorized"}


@pytest.mark.parametrize(
    "error, expected_status",
    [
        (StorageError("Bucket not found"), status.HTTP_502_BAD_GATEWAY),
        (APIClientError("Upstream model unavailable"), status.HTTP_502_BAD_GATEWAY),
    ],
)
def test_extract_permit_upstream_failures(
    test_client, authenticated, mock_extraction_service, auth_headers, error, expected_status
):
    mock_extraction_service.extract.side_effect = error

    response = test_client.post(
        "/api/permits",
        files={"file": ("cert.pdf", b"x", "application/pdf")},
        headers=auth_headers,
    )

    assert response.status_code == expected_status
    assert response.json() == {"error": error.message}


def test_extract_permit_unparseable_model_output(test_client, authenticated, mock_extraction_service, auth_headers):
    mock_extraction_service.extract.side_effect = ExtractionParseError(
        "Model response was not an object", raw_content="[1, 2]"
    )

    response = test_client.post(
        "/api/permits",
        files={"file": ("cert.pdf", b"x", "application/pdf")},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    assert response.json() == {"error": "Model response was not an object", "rawContent": "[1, 2]"}


def test_submit_permit(test_client, authenticated, auth_headers):
    service = AsyncMock(spec=DocumentService)
    app.dependency_overrides[get_document_service] = lambda: service
    now = datetime(2025, 3, 1, tzinfo=timezone.utc)
    service.submit_document.return_value = DocumentResponse(
        id=5,
        business_id=2,
        title="Untitled document",
        document_category=DocumentCategory.PERMIT,
        status=DocumentStatus.ACTIVE,
        auto_renew=False,
        created_at=now,
        updated_at=now,
    )

    response = test_client.post(
        "/api/permits/submit",
        json={"businessName": "Rosa's Tacos", "permitTypeName": "Mobile Vendor"},
        headers=auth_headers,
    )

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["document"]["title"] == "Untitled document"
    user_id, payload = service.submit_document.call_args.args
    assert user_id == USER_ID
    assert payload.business_name == "Rosa's Tacos"
    assert payload.permit_type_name == "Mobile Vendor"
