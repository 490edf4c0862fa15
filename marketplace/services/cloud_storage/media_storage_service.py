"""
Media Storage Service for the Course Marketplace

S3-compatible (Wasabi/S3) storage for course thumbnails. Uploaded files are
stored under `<MEDIA_STORAGE_THUMBNAIL_PREFIX>/<uuid>.<ext>` and referenced by
their public URL.

Features:
- Upload of thumbnails from Django `UploadedFile` objects
- Deletion by public URL (used after a course is deleted)
- Public URL generation for path-style and virtual-host endpoints

Author: Course Marketplace Team
Version: 1.0.0
"""

import logging
import mimetypes
import os
import urllib.parse
import uuid
from typing import Optional

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from django.conf import settings

from marketplace.exceptions import UpstreamServiceError

logger = logging.getLogger(__name__)


class MediaStorageService:
    """
    Service for thumbnail storage operations.

    The boto3 client is created lazily so that constructing the service never
    touches the network.
    """

    def __init__(
        self,
        bucket: Optional[str] = None,
        endpoint_url: Optional[str] = None,
        region: Optional[str] = None,
        access_key: Optional[str] = None,
        secret_key: Optional[str] = None,
        public_base_url: Optional[str] = None,
        prefix: Optional[str] = None,
        client=None,
    ):
        self.bucket = bucket or settings.MEDIA_STORAGE_BUCKET
        self.endpoint_url = endpoint_url or settings.MEDIA_STORAGE_ENDPOINT_URL
        self.region = region or settings.MEDIA_STORAGE_REGION
        self.access_key = access_key or settings.MEDIA_STORAGE_ACCESS_KEY_ID
        self.secret_key = secret_key or settings.MEDIA_STORAGE_SECRET_ACCESS_KEY
        self.public_base_url = (
            public_base_url or settings.MEDIA_STORAGE_PUBLIC_BASE_URL or ""
        ).rstrip("/")
        self.prefix = (prefix or settings.MEDIA_STORAGE_THUMBNAIL_PREFIX).strip("/")
        self._client = client

    def get_s3_client(self):
        """Creates (once) a boto3 S3 client for the configured endpoint."""
        if self._client is None:
            self._client = boto3.client(
                "s3",
                endpoint_url=self.endpoint_url,
                region_name=self.region,
                aws_access_key_id=self.access_key,
                aws_secret_access_key=self.secret_key,
                config=Config(s3={"addressing_style": "virtual"}),
            )
        return self._client

    def public_url(self, key: str) -> str:
        """Public URL of an object key."""
        quoted = urllib.parse.quote(key)
        if self.public_base_url:
            return f"{self.public_base_url}/{quoted}"
        if self.endpoint_url:
            host = urllib.parse.urlparse(self.endpoint_url).netloc
            return f"https://{self.bucket}.{host}/{quoted}"
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{quoted}"

    def key_from_url(self, url: str) -> Optional[str]:
        """
        Object key of a public URL produced by `public_url`.

        Returns:
            The key, or None if the URL does not point into this bucket.
        """
        if not url:
            return None
        path = urllib.parse.unquote(urllib.parse.urlparse(url).path).lstrip("/")
        bucket_prefix = f"{self.bucket}/"
        if path.startswith(bucket_prefix):
            path = path[len(bucket_prefix):]
        if not path.startswith(f"{self.prefix}/"):
            return None
        return path

    def upload_thumbnail(self, file) -> str:
        """
        Upload a thumbnail and return its public URL.

        Args:
            file: Django UploadedFile (or any file object with `name`)

        Raises:
            UpstreamServiceError: If the storage provider rejects the upload.
        """
        extension = os.path.splitext(getattr(file, "name", "") or "")[1].lower()
        key = f"{self.prefix}/{uuid.uuid4().hex}{extension}"
        content_type = (
            getattr(file, "content_type", None)
            or mimetypes.guess_type(file.name)[0]
            or "application/octet-stream"
        )

        try:
            file.seek(0)
            self.get_s3_client().upload_fileobj(
                file,
                self.bucket,
                key,
                ExtraArgs={"ContentType": content_type, "ACL": "public-read"},
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error("Thumbnail upload to %s/%s failed: %s", self.bucket, key, exc)
            raise UpstreamServiceError(f"Thumbnail upload failed: {exc}", service="storage")

        url = self.public_url(key)
        logger.info("Uploaded thumbnail %s", url)
        return url

    def delete_by_url(self, url: str) -> bool:
        """
        Delete the object behind a public URL.

        Returns:
            True if a delete request was sent, False if the URL is not ours.

        Raises:
            UpstreamServiceError: If the storage provider call fails.
        """
        key = self.key_from_url(url)
        if key is None:
            logger.info("Skipping delete of foreign media URL %s", url)
            return False

        try:
            self.get_s3_client().delete_object(Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamServiceError(f"Thumbnail delete failed: {exc}", service="storage")

        logger.info("Deleted thumbnail %s", key)
        return True
