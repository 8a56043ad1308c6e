"""S3 archive for raw uploads implementing IFileStore."""

from __future__ import annotations

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from loanflow.core.exceptions import FileStoreError
from loanflow.core.logging import get_logger
from loanflow.persistence.upload_keys import content_type_for, session_prefix, upload_key

logger = get_logger(__name__)


class S3FileStore:
    """Keeps each upload's original bytes under its session id."""

    def __init__(self, bucket: str, region: str = "us-east-1",
                 endpoint_url: str | None = None) -> None:
        self._bucket = bucket
        kwargs: dict = {"region_name": region}
        if endpoint_url:
            kwargs["endpoint_url"] = endpoint_url
        self._client = boto3.client("s3", **kwargs)

    def archive_upload(self, session_id: str, filename: str, data: bytes) -> str:
        key = upload_key(session_id, filename)
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type_for(data),
                Metadata={"session-id": session_id},
            )
        except (BotoCoreError, ClientError) as exc:
            raise FileStoreError(f"Archiving {filename!r} to s3://{self._bucket}/{key} failed: {exc}") from exc
        logger.info("upload_archived", bucket=self._bucket, key=key, size=len(data))
        return key

    def read(self, key: str) -> bytes:
        try:
            return self._client.get_object(Bucket=self._bucket, Key=key)["Body"].read()
        except (BotoCoreError, ClientError) as exc:
            raise FileStoreError(f"Reading s3://{self._bucket}/{key} failed: {exc}") from exc

    def list_uploads(self, session_id: str) -> list[str]:
        """Archived object keys for one session."""
        keys: list[str] = []
        try:
            paginator = self._client.get_paginator("list_objects_v2")
            for page in paginator.paginate(Bucket=self._bucket, Prefix=session_prefix(session_id)):
                keys.extend(obj["Key"] for obj in page.get("Contents", []))
        except (BotoCoreError, ClientError) as exc:
            raise FileStoreError(f"Listing uploads for session {session_id!r} failed: {exc}") from exc
        return keys

    def close(self) -> None:
        self._client.close()
