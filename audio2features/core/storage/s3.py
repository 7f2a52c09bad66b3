"""S3 object store (boto3)."""

import asyncio
from typing import Any

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from audio2features.core.storage.base import ObjectStore, StorageError


class S3ObjectStore(ObjectStore):
    """Puts objects into a single bucket. boto3 is blocking, so calls run in a thread."""

    def __init__(
        self,
        bucket: str,
        region: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: Any = None,
    ):
        self._bucket = bucket
        if client is None:
            s3_kwargs: dict[str, Any] = {}
            if region:
                s3_kwargs["region_name"] = region
            client = boto3.client(
                "s3",
                aws_access_key_id=access_key_id or None,
                aws_secret_access_key=secret_access_key or None,
                config=Config(signature_version="s3v4"),
                **s3_kwargs,
            )
        self._client = client

    @property
    def name(self) -> str:
        return "s3"

    async def put(self, key: str, data: bytes, content_type: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=key,
                Body=data,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"S3 put of {key} failed: {e}") from e
