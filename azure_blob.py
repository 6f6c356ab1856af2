import logging
import os
import uuid
from typing import Callable, Optional

from azure.core.exceptions import AzureError
from azure.storage.blob import BlobServiceClient

import config
from errors import ExternalServiceError

logger = logging.getLogger(__name__)

_blob_service: Optional[BlobServiceClient] = None


def get_blob_service() -> BlobServiceClient:
     global _blob_service
     if _blob_service is None:
          if not config.AZURE_STORAGE_ACCOUNT or not config.AZURE_STORAGE_KEY:
               raise ExternalServiceError("Azure storage is not configured")
          _blob_service = BlobServiceClient.from_connection_string(
               f"DefaultEndpointsProtocol=https;"
               f"AccountName={config.AZURE_STORAGE_ACCOUNT};"
               f"AccountKey={config.AZURE_STORAGE_KEY};"
               f"EndpointSuffix=core.windows.net"
          )
     return _blob_service


class ProgressForwarder:
     """
     Turns the SDK's (current, total) byte progress into whole percentages
     and calls the listener once per distinct value.
     """

     def __init__(self, callback: Callable[[int], None]):
          self.callback = callback
          self.last_percent = -1

     def __call__(self, current: Optional[int], total: Optional[int]) -> None:
          if current is None or not total:
               return
          percent = min(100, round(current * 100 / total))
          if percent != self.last_percent:
               self.last_percent = percent
               self.callback(percent)


def upload_to_blob(file, container: str, owner_id: str | int,
                   progress_callback: Optional[Callable[[int], None]] = None) -> str:
     ext = os.path.splitext(file.filename or "")[1]
     filename = f"{owner_id}/{uuid.uuid4()}{ext}"
     blob_client = get_blob_service().get_blob_client(container=container, blob=filename)
     kwargs = {"overwrite": True}
     if progress_callback is not None:
          kwargs["progress_hook"] = ProgressForwarder(progress_callback)
     try:
          blob_client.upload_blob(file.file, **kwargs)
     except AzureError as exc:
          logger.error("Blob upload to %s failed: %s", container, exc)
          raise ExternalServiceError("File upload failed") from exc
     logger.info("Uploaded %s to container %s", filename, container)
     return f"https://{config.AZURE_STORAGE_ACCOUNT}.blob.core.windows.net/{container}/{filename}"


def delete_from_blob(blob_url: str):
     """
     Deletes a file from Azure Blob Storage using its full URL
     """
     # https://<account>.blob.core.windows.net/<container>/<owner>/<name>
     path = blob_url.split(".blob.core.windows.net/", 1)[-1]
     container, _, blob_name = path.partition("/")
     blob_client = get_blob_service().get_blob_client(
          container=container,
          blob=blob_name
     )
     try:
          blob_client.delete_blob()
     except AzureError as exc:
          logger.error("Blob delete failed for %s: %s", blob_url, exc)
          raise ExternalServiceError("File delete failed") from exc
