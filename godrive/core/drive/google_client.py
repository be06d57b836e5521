"""
Google Drive API Client
Reads and writes SGF files in the user's Drive
"""
import io
from typing import Any, Dict, List, Optional, Union

from googleapiclient.discovery import build
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload

from ...utils.config import ConfigDefaults
from ...utils.logger import setup_logger
from ..base import BaseGoogleAPIClient

logger = setup_logger(__name__)

# Constants
FILE_FIELDS = "id, name, mimeType, modifiedTime, parents, capabilities(canEdit)"
ABOUT_FIELDS = "user(displayName, emailAddress, photoLink), storageQuota"


class GoogleDriveClient(BaseGoogleAPIClient):
    """
    Google Drive API client

    Provides methods to interact with Google Drive:
    - Get file metadata
    - Download file content
    - Create files
    - Rename files and replace their content
    - About (user and storage quota)

    HttpError from the Drive API is logged and re-raised.
    """

    def _build_service(self) -> Any:
        """Build Google Drive API service"""
        return build('drive', 'v3', http=self._authorized_http(), cache_discovery=False)

    def _get_required_scopes(self) -> List[str]:
        """Get required Google Drive scopes"""
        return [
            'https://www.googleapis.com/auth/drive.file',
            'https://www.googleapis.com/auth/drive',
        ]

    def _get_service_name(self) -> str:
        """Get service name"""
        return "Google Drive"

    # =========================================================================
    # File Operations
    # =========================================================================

    def get_file(self, file_id: str, fields: str = FILE_FIELDS) -> Dict[str, Any]:
        """
        Get file metadata

        Args:
            file_id: File ID
            fields: Fields to return

        Returns:
            File metadata dictionary
        """
        service = self._require_service()
        try:
            return service.files().get(fileId=file_id, fields=fields).execute()
        except Exception as e:
            logger.error(f"[GoogleDriveClient] Failed to get file {file_id}: {e}")
            raise

    def get_file_content(self, file_id: str) -> bytes:
        """
        Download the content of a file

        Returns:
            File content as bytes
        """
        service = self._require_service()
        try:
            request = service.files().get_media(fileId=file_id)

            fh = io.BytesIO()
            downloader = MediaIoBaseDownload(fh, request)

            done = False
            while not done:
                status, done = downloader.next_chunk()
                if status:
                    logger.debug(f"[GoogleDriveClient] Download progress: {int(status.progress() * 100)}%")

            return fh.getvalue()
        except Exception as e:
            logger.error(f"[GoogleDriveClient] Failed to download content for {file_id}: {e}")
            raise

    def create_file(
        self,
        title: str,
        content: Union[str, bytes],
        mime_type: str = ConfigDefaults.DEFAULT_MIMETYPE,
        parents: Optional[List[str]] = None
    ) -> Dict[str, Any]:
        """
        Create a file

        Args:
            title: File name
            content: File content (str is UTF-8 encoded)
            mime_type: MIME type of the content
            parents: Parent folder IDs

        Returns:
            Metadata of the created file
        """
        service = self._require_service()
        body: Dict[str, Any] = {'name': title, 'mimeType': mime_type}
        if parents:
            body['parents'] = parents

        try:
            created = service.files().create(
                body=body,
                media_body=self._media(content, mime_type),
                fields=FILE_FIELDS
            ).execute()
            logger.info(f"[GoogleDriveClient] Created file {created.get('id')}")
            return created
        except Exception as e:
            logger.error(f"[GoogleDriveClient] Failed to create file {title!r}: {e}")
            raise

    def update_file(
        self,
        file_id: str,
        title: Optional[str] = None,
        content: Optional[Union[str, bytes]] = None,
        mime_type: str = ConfigDefaults.DEFAULT_MIMETYPE
    ) -> Dict[str, Any]:
        """
        Rename a file and/or replace its content

        Returns:
            Metadata of the updated file
        """
        service = self._require_service()
        body: Dict[str, Any] = {}
        if title is not None:
            body['name'] = title

        try:
            updated = service.files().update(
                fileId=file_id,
                body=body,
                media_body=self._media(content, mime_type) if content is not None else None,
                fields=FILE_FIELDS
            ).execute()
            logger.info(f"[GoogleDriveClient] Updated file {file_id}")
            return updated
        except Exception as e:
            logger.error(f"[GoogleDriveClient] Failed to update file {file_id}: {e}")
            raise

    def about(self) -> Dict[str, Any]:
        """Get the Drive user and storage quota"""
        service = self._require_service()
        try:
            return service.about().get(fields=ABOUT_FIELDS).execute()
        except Exception as e:
            logger.error(f"[GoogleDriveClient] Failed to get about info: {e}")
            raise

    # =========================================================================
    # Helper Methods
    # =========================================================================

    @staticmethod
    def _media(content: Union[str, bytes], mime_type: str) -> MediaIoBaseUpload:
        data = content.encode('utf-8') if isinstance(content, str) else content
        return MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type, resumable=False)
