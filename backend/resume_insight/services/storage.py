"""
Object storage for resume PDFs.

Uploads go to Supabase Storage (REST, explicit Content-Length) with a local
directory fallback served by the app under /uploads. Fetching understands both
kinds of reference.
"""
import asyncio
import logging
import os
import re
import time

import aiofiles
import httpx

from ..config import Settings
from ..exceptions import StorageFetchFailed, StorageUploadFailed

logger = logging.getLogger(__name__)

LOCAL_PREFIX = "/uploads/"


def sanitize_filename(filename: str) -> str:
    safe_filename = (filename or "resume.pdf").replace(" ", "_").replace("/", "_").replace("\\", "_")
    safe_filename = re.sub(r'[^\w\-_\.]', '', safe_filename)
    safe_filename = re.sub(r'_+', '_', safe_filename)
    safe_filename = safe_filename.lstrip("._")
    return safe_filename or "resume.pdf"


def storage_key(filename: str) -> str:
    """Generated object key: resumes/{epoch_ms}-{sanitized filename}"""
    return f"resumes/{int(time.time() * 1000)}-{sanitize_filename(filename)}"


class ObjectStoreGateway:
    def __init__(self, settings: Settings, client: httpx.AsyncClient):
        self.supabase_url = settings.supabase_url.rstrip("/")
        self.supabase_key = settings.supabase_service_role_key
        self.bucket = settings.supabase_bucket
        self.supabase_configured = settings.supabase_configured
        self.upload_dir = os.path.abspath(settings.upload_dir)
        self.upload_attempts = max(1, settings.storage_upload_attempts)
        self.retry_delay = 1.0
        self.timeout = settings.storage_timeout_seconds
        self.client = client

    # ------------------------------------------------------------------
    # Upload
    # ------------------------------------------------------------------

    async def upload(self, content: bytes, filename: str, content_type: str = "application/pdf") -> str:
        """
        Store a resume binary and return its durable reference.

        Args:
            content: Raw file bytes
            filename: Original filename, used to build the object key
            content_type: MIME type sent to the object store

        Returns:
            Supabase public URL, or a /uploads/... path for the local fallback

        Raises:
            StorageUploadFailed: neither Supabase nor local storage accepted the file
        """
        key = storage_key(filename)

        if self.supabase_configured:
            for attempt in range(self.upload_attempts):
                try:
                    url = await self._upload_to_supabase(content, key, content_type)
                    logger.info(f"✅ Resume uploaded to Supabase: {url}")
                    return url
                except StorageUploadFailed as e:
                    logger.warning(f"Supabase attempt {attempt + 1}/{self.upload_attempts} failed: {e}")
                    if attempt < self.upload_attempts - 1:
                        await asyncio.sleep(self.retry_delay * (attempt + 1))
            logger.warning("⚠️ Supabase failed, using local storage...")

        return await self._save_locally(content, key)

    async def _upload_to_supabase(self, content: bytes, key: str, content_type: str) -> str:
        try:
            response = await self.client.post(
                f"{self.supabase_url}/storage/v1/object/{self.bucket}/{key}",
                headers={
                    "Authorization": f"Bearer {self.supabase_key}",
                    "apikey": self.supabase_key,
                    "Content-Type": content_type,
                    "Content-Length": str(len(content)),
                },
                content=content,
                timeout=self.timeout,
            )
        except httpx.HTTPError as e:
            raise StorageUploadFailed(f"Supabase upload request failed: {e}") from e

        if response.status_code not in (200, 201):
            error_detail = response.text[:500] if response.text else "Unknown error"
            raise StorageUploadFailed(f"Supabase upload failed ({response.status_code}): {error_detail}")

        return f"{self.supabase_url}/storage/v1/object/public/{self.bucket}/{key}"

    async def _save_locally(self, content: bytes, key: str) -> str:
        local_path = os.path.join(self.upload_dir, *key.split("/"))
        try:
            os.makedirs(os.path.dirname(local_path), exist_ok=True)
            async with aiofiles.open(local_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            raise StorageUploadFailed(f"Local storage write failed: {e}") from e

        reference = f"{LOCAL_PREFIX}{key}"
        logger.info(f"✅ Resume saved to local storage: {reference}")
        return reference

    # ------------------------------------------------------------------
    # Fetch
    # ------------------------------------------------------------------

    async def fetch(self, reference: str) -> bytes:
        """
        Retrieve a stored binary by its reference.

        Raises:
            StorageFetchFailed: missing local file, transport error or non-2xx status
        """
        if reference.startswith(LOCAL_PREFIX):
            return await self._read_locally(reference)

        try:
            response = await self.client.get(reference, timeout=self.timeout)
        except httpx.TimeoutException as e:
            raise StorageFetchFailed(f"Storage fetch timed out after {self.timeout}s") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise StorageFetchFailed(f"Storage fetch failed: {e}") from e

        if not response.is_success:
            raise StorageFetchFailed(
                f"Storage fetch failed: {response.status_code} {response.reason_phrase}"
            )
        return response.content

    def local_path_for(self, reference: str) -> str:
        relative = reference[len(LOCAL_PREFIX):]
        local_path = os.path.abspath(os.path.join(self.upload_dir, relative))
        if os.path.commonpath([local_path, self.upload_dir]) != self.upload_dir:
            raise StorageFetchFailed(f"Storage reference escapes upload directory: {reference}")
        return local_path

    async def _read_locally(self, reference: str) -> bytes:
        local_path = self.local_path_for(reference)
        if not os.path.exists(local_path):
            raise StorageFetchFailed(f"Resume file not found in local storage: {reference}")
        try:
            async with aiofiles.open(local_path, "rb") as f:
                return await f.read()
        except OSError as e:
            raise StorageFetchFailed(f"Local storage read failed: {e}") from e
