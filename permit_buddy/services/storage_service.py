"""Storage service for Supabase Storage operations."""

from typing import Any, Dict
from urllib.parse import quote

import httpx

from permit_buddy.core.exceptions import StorageError
from permit_buddy.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StorageService:
    """Uploads and downloads objects through the Supabase Storage REST API.

    Requests are authenticated with the service role key, so callers are
    responsible for ownership checks on bucket/path.
    """

    def __init__(self, supabase_url: str, service_role_key: str, timeout: int = 60):
        """Initialize the storage client.

        Args:
            supabase_url: Supabase project URL
            service_role_key: Service role key used for storage requests
            timeout: Request timeout in seconds
        """
        self.url = supabase_url.rstrip("/")
        self.base_api_url = f"{self.url}/storage/v1"
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {service_role_key}",
            "apikey": service_role_key,
        }

    def object_url(self, bucket: str, path: str) -> str:
        return f"{self.base_api_url}/object/{quote(bucket)}/{quote(path)}"

    async def upload_bytes(
        self,
        content: bytes,
        bucket: str,
        path: str,
        content_type: str = "application/octet-stream",
    ) -> Dict[str, Any]:
        """Upload bytes to ``bucket/path`` without overwriting an existing object.

        Returns:
            Supabase's upload response

        Raises:
            StorageError: If the upload is rejected or the request fails
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    self.object_url(bucket, path),
                    headers={**self.headers, "Content-Type": content_type, "x-upsert": "false"},
                    content=content,
                )
        except httpx.HTTPError as e:
            LOGGER.error(f"Error uploading file to Supabase: {str(e)}", exc_info=True)
            raise StorageError(f"Storage upload error: {str(e)}", original_error=e) from e

        if response.status_code != 200:
            message = self._error_message(response, "Failed to store uploaded file")
            LOGGER.error(
                f"Failed to upload file to Supabase: {message}",
                extra={"bucket": bucket, "path": path, "status_code": response.status_code},
            )
            raise StorageError(message)

        LOGGER.info(f"Uploaded {len(content)} bytes to {bucket}/{path}")
        return response.json()

    async def download_file(self, bucket: str, path: str) -> bytes:
        """Download an object's bytes.

        Raises:
            StorageError: If the object cannot be read
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.object_url(bucket, path), headers=self.headers)
        except httpx.HTTPError as e:
            LOGGER.error(f"Error downloading {bucket}/{path}: {str(e)}", exc_info=True)
            raise StorageError(f"Storage download error: {str(e)}", original_error=e) from e

        if response.status_code != 200:
            message = self._error_message(response, "Unable to load file")
            LOGGER.error(
                f"Failed to download file from Supabase: {message}",
                extra={"bucket": bucket, "path": path, "status_code": response.status_code},
            )
            raise StorageError(message)

        return response.content

    @staticmethod
    def _error_message(response: httpx.Response, fallback: str) -> str:
        """Pull Supabase's error message out of a failed response."""
        try:
            body = response.json()
        except ValueError:
            return response.text or fallback
        if isinstance(body, dict):
            return str(body.get("message") or body.get("error") or fallback)
        return fallback
