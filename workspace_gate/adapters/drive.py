"""Google Drive folder graph.

Implements the two capabilities FolderHierarchy needs on top of the Drive v3
files API.
"""

import logging

from ..oauth.oauth_client import GoogleOAuthClient
from ..permissions.hierarchy import FolderHierarchy

logger = logging.getLogger(__name__)

DRIVE_FILES_URL = "https://www.googleapis.com/drive/v3/files"
FOLDER_MIME_TYPE = "application/vnd.google-apps.folder"


def escape_query_value(value: str) -> str:
    """Escape a value for use inside a single-quoted Drive query string."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


class DriveFolderGraph:
    """Folder/parent lookups against Google Drive."""

    def __init__(self, client: GoogleOAuthClient, page_size: int = 100):
        self.client = client
        self.page_size = page_size

    async def list_child_folders(self, folder_id: str) -> list[str]:
        """List the ids of non-trashed folders directly inside ``folder_id``."""
        query = (
            f"'{escape_query_value(folder_id)}' in parents "
            f"and mimeType = '{FOLDER_MIME_TYPE}' and trashed = false"
        )
        params: dict[str, str | int] = {
            "q": query,
            "fields": "nextPageToken, files(id)",
            "pageSize": self.page_size,
        }

        child_ids: list[str] = []
        while True:
            response = await self.client.request("GET", DRIVE_FILES_URL, params=params)
            data = response.json()
            child_ids.extend(f["id"] for f in data.get("files") or [] if f.get("id"))

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params["pageToken"] = page_token

        logger.debug(f"Drive folder {folder_id} has {len(child_ids)} child folders")
        return child_ids

    async def get_parents(self, file_id: str) -> list[str]:
        """Return the parent ids of a file or folder."""
        response = await self.client.request(
            "GET", f"{DRIVE_FILES_URL}/{file_id}", params={"fields": "parents"}
        )
        return list(response.json().get("parents") or [])

    def hierarchy(self) -> FolderHierarchy:
        return FolderHierarchy(self.list_child_folders, self.get_parents)
