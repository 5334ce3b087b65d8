"""Google Drive client wrapper."""

from __future__ import annotations

import asyncio
import io
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, List, Optional, Sequence, TYPE_CHECKING

from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from smartinvoice.models import DriveDocument, UploadedDocument

if TYPE_CHECKING:  # pragma: no cover - type hints only
    from google.oauth2.credentials import Credentials

    from smartinvoice.services.credential_store import GoogleCredentialStore

logger = logging.getLogger(__name__)

FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"
PDF_MIME_TYPE = "application/pdf"


class UploadError(Exception):
    """Raised when a document could not be stored and shared."""


def _build_drive_service(credentials: "Credentials") -> Any:
    return build("drive", "v3", credentials=credentials, cache_discovery=False)


def _quote(value: str) -> str:
    """Escape a literal for use inside a Drive ``q`` expression."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class GoogleDriveClient:
    """Store invoice PDFs in Drive and share them by link."""

    def __init__(
        self,
        credential_store: "GoogleCredentialStore",
        service_factory: Callable[["Credentials"], Any] = _build_drive_service,
    ) -> None:
        self._credentials = credential_store
        self._service_factory = service_factory

    async def ensure_folder(self, path: Sequence[str]) -> str:
        """Resolve a nested folder path, creating missing levels.

        The first segment is matched anywhere the app can see; each later one
        only under its parent. Returns the id of the deepest folder.
        """
        if not path:
            raise ValueError("Folder path must contain at least one segment.")
        credentials = await self._credentials.get_credentials()

        def _execute_resolve() -> str:
            service = self._service_factory(credentials)
            parent_id: Optional[str] = None
            for name in path:
                query = (
                    f"name='{_quote(name)}' and mimeType='{FOLDER_MIME_TYPE}' and trashed=false"
                )
                if parent_id:
                    query += f" and '{parent_id}' in parents"
                found = service.files().list(q=query, fields="files(id, name)").execute()
                matches = found.get("files") or []
                if matches:
                    folder_id = matches[0]["id"]
                    logger.info("Found existing folder %s (id=%s)", name, folder_id)
                else:
                    metadata: dict[str, Any] = {"name": name, "mimeType": FOLDER_MIME_TYPE}
                    if parent_id:
                        metadata["parents"] = [parent_id]
                    created = service.files().create(body=metadata, fields="id").execute()
                    folder_id = created["id"]
                    logger.info("Created folder %s (id=%s)", name, folder_id)
                parent_id = folder_id
            assert parent_id is not None
            return parent_id

        folder_id = await asyncio.to_thread(_execute_resolve)
        logger.info("Folder path ready: %s (id=%s)", "/".join(path), folder_id)
        return folder_id

    async def upload_document(
        self,
        *,
        file_bytes: bytes,
        file_name: str,
        folder_id: Optional[str],
        mime_type: str = PDF_MIME_TYPE,
    ) -> UploadedDocument:
        """Create a new file, make it readable by anyone and return its link.

        If sharing fails the freshly created file is removed again so a retry
        does not leave an unshared duplicate behind.
        """
        credentials = await self._credentials.get_credentials()

        def _execute_upload() -> UploadedDocument:
            service = self._service_factory(credentials)
            file_metadata: dict[str, Any] = {"name": file_name}
            if folder_id:
                file_metadata["parents"] = [folder_id]

            media = MediaIoBaseUpload(io.BytesIO(file_bytes), mimetype=mime_type, resumable=False)
            try:
                created = (
                    service.files()
                    .create(body=file_metadata, media_body=media, fields="id, webViewLink, mimeType")
                    .execute()
                )
            except HttpError as exc:
                raise UploadError(f"Upload of {file_name} failed: {exc}") from exc

            file_id = created["id"]
            try:
                service.permissions().create(
                    fileId=file_id,
                    body={"role": "reader", "type": "anyone"},
                ).execute()
            except Exception as exc:  # pylint: disable=broad-except
                self._discard(service, file_id)
                raise UploadError(f"Sharing {file_name} failed: {exc}") from exc

            shareable_link = created.get("webViewLink")
            if not shareable_link:
                shareable_link = f"https://drive.google.com/file/d/{file_id}/view"

            return UploadedDocument(
                drive_file_id=file_id,
                shareable_link=shareable_link,
                mime_type=created.get("mimeType", mime_type),
            )

        uploaded = await asyncio.to_thread(_execute_upload)
        logger.info("Uploaded %s to Drive: %s", file_name, uploaded.shareable_link)
        return uploaded

    async def list_documents(
        self, *, folder_id: str, mime_type: str = PDF_MIME_TYPE
    ) -> List[DriveDocument]:
        """List files of ``mime_type`` directly inside a folder, newest first."""
        credentials = await self._credentials.get_credentials()

        def _execute_list() -> List[DriveDocument]:
            service = self._service_factory(credentials)
            query = f"'{folder_id}' in parents and mimeType='{mime_type}' and trashed=false"
            documents: List[DriveDocument] = []
            page_token: Optional[str] = None
            while True:
                response = (
                    service.files()
                    .list(
                        q=query,
                        fields="nextPageToken, files(id, name, createdTime)",
                        orderBy="createdTime desc",
                        pageToken=page_token,
                    )
                    .execute()
                )
                documents.extend(
                    DriveDocument.model_validate(item) for item in response.get("files", [])
                )
                page_token = response.get("nextPageToken")
                if not page_token:
                    return documents

        return await asyncio.to_thread(_execute_list)

    async def delete_file(self, file_id: str) -> None:
        credentials = await self._credentials.get_credentials()

        def _execute_delete() -> None:
            service = self._service_factory(credentials)
            service.files().delete(fileId=file_id).execute()

        await asyncio.to_thread(_execute_delete)

    async def prune_older_than(
        self,
        *,
        folder_id: str,
        max_age: timedelta,
        now: datetime | None = None,
    ) -> int:
        """Delete PDFs in the folder created strictly before ``now - max_age``.

        Each deletion is attempted independently. Returns how many were deleted.
        """
        cutoff = (now or datetime.now(timezone.utc)) - max_age
        deleted = 0
        for document in await self.list_documents(folder_id=folder_id):
            created = document.created_time
            if created.tzinfo is None:
                created = created.replace(tzinfo=timezone.utc)
            if created >= cutoff:
                continue
            logger.info("Deleting %s (id=%s, created %s)", document.name, document.id, created)
            try:
                await self.delete_file(document.id)
            except Exception:  # pylint: disable=broad-except
                logger.exception("Failed to delete %s (id=%s)", document.name, document.id)
                continue
            deleted += 1
        return deleted

    @staticmethod
    def _discard(service: Any, file_id: str) -> None:
        try:
            service.files().delete(fileId=file_id).execute()
        except Exception:  # pylint: disable=broad-except
            logger.exception("Could not remove unshared file %s", file_id)


__all__ = ["FOLDER_MIME_TYPE", "GoogleDriveClient", "PDF_MIME_TYPE", "UploadError"]
