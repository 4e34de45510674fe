"""
Azure Blob Storage service backing every persisted document and asset.
JSON collections, templates, images and generated reports share one container.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional
from azure.storage.blob import BlobServiceClient, ContentSettings
from azure.core.exceptions import AzureError, ResourceNotFoundError
import logging

from valuation_app.core.config import settings
from valuation_app.core.exceptions import NotFoundError, StorageError

logger = logging.getLogger(__name__)


@dataclass
class BlobEntry:
    """A listed blob with the metadata report listings need"""
    name: str
    path: str
    created_at: Optional[datetime]
    url: str


class AzureBlobService:
    """Handles Azure Blob Storage operations for JSON documents and binary assets"""

    def __init__(
        self,
        connection_string: Optional[str] = None,
        container_name: Optional[str] = None
    ):
        self.connection_string = connection_string or settings.AZURE_STORAGE_CONNECTION_STRING
        self.container_name = container_name or settings.AZURE_STORAGE_CONTAINER_NAME

        if not self.connection_string:
            raise ValueError("Azure Storage connection string not configured")

        try:
            self.blob_service_client = BlobServiceClient.from_connection_string(self.connection_string)
            self.container_client = self.blob_service_client.get_container_client(self.container_name)
            # Ensure container exists
            try:
                self.container_client.get_container_properties()
            except ResourceNotFoundError:
                logger.info(f"Container {self.container_name} does not exist, creating it...")
                self.container_client.create_container()
        except Exception as e:
            logger.error(f"Failed to initialize Azure Blob Service: {e}")
            raise

    def write(self, path: str, data: bytes, mime_type: str = "application/octet-stream") -> str:
        """
        Upload bytes to a blob, replacing any existing content

        Args:
            path: Blob name (key) where data will be stored
            data: Content to store
            mime_type: Content type recorded on the blob

        Returns:
            Blob name of uploaded content
        """
        try:
            blob_client = self.container_client.get_blob_client(path)
            blob_client.upload_blob(
                data,
                overwrite=True,
                content_settings=ContentSettings(content_type=mime_type),
            )
            logger.info(f"Uploaded {len(data)} bytes to {path}")
            return path
        except AzureError as e:
            logger.error(f"Failed to upload {path} to Azure Blob Storage: {e}")
            raise StorageError(f"Failed to upload {path} to Azure Blob Storage: {e}")

    def read(self, path: str) -> bytes:
        """
        Get blob content as bytes

        Args:
            path: Blob name (key) of the content

        Returns:
            Blob content as bytes

        Raises:
            NotFoundError: if the blob does not exist
        """
        try:
            blob_client = self.container_client.get_blob_client(path)
            return blob_client.download_blob().readall()
        except ResourceNotFoundError:
            raise NotFoundError(f"Blob not found: {path}")
        except AzureError as e:
            logger.error(f"Failed to read {path} from Azure Blob Storage: {e}")
            raise StorageError(f"Failed to read {path} from Azure Blob Storage: {e}")

    def exists(self, path: str) -> bool:
        try:
            self.container_client.get_blob_client(path).get_blob_properties()
            return True
        except ResourceNotFoundError:
            return False

    def list(self, prefix: str = "") -> List[str]:
        """
        List blob names under a prefix

        Args:
            prefix: Folder prefix, with or without a trailing slash

        Returns:
            Blob names relative to the prefix
        """
        return [entry.name for entry in self.list_entries(prefix)]

    def list_entries(self, prefix: str = "") -> List[BlobEntry]:
        """List blobs under a prefix along with creation time and URL"""
        folder = prefix.rstrip("/") + "/" if prefix else ""
        try:
            entries = []
            for blob in self.container_client.list_blobs(name_starts_with=folder):
                relative = blob.name[len(folder):]
                if not relative:
                    continue
                entries.append(
                    BlobEntry(
                        name=relative,
                        path=blob.name,
                        created_at=blob.creation_time or blob.last_modified,
                        url=self.url_for(blob.name),
                    )
                )
            return entries
        except AzureError as e:
            logger.error(f"Failed to list blobs under {folder}: {e}")
            raise StorageError(f"Failed to list blobs under {folder}: {e}")

    def delete(self, path: str) -> None:
        """Delete a blob. A missing blob is treated as already deleted."""
        try:
            self.container_client.get_blob_client(path).delete_blob()
            logger.info(f"Deleted blob {path}")
        except ResourceNotFoundError:
            logger.info(f"Blob {path} already absent, nothing to delete")
        except AzureError as e:
            logger.error(f"Failed to delete {path}: {e}")
            raise StorageError(f"Failed to delete {path}: {e}")

    def url_for(self, path: str) -> str:
        return self.container_client.get_blob_client(path).url
