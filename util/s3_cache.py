"""S3-backed cache used as the durable fallback tier."""

import json
import logging
import os
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError

from util.cache import CacheClient
from util.s3 import get_s3_client

logger = logging.getLogger(__name__)

MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


class S3Cache(CacheClient):
    """
    Stores each key as a JSON object in S3.

    Values survive restarts of every process in the cluster, so the last
    successfully fetched value stays readable while its source is down.
    """

    def __init__(self, bucket: str | None = None, prefix: str | None = None):
        self.bucket = bucket or os.getenv("KMS_FALLBACK_BUCKET")
        self.prefix = prefix if prefix is not None else os.getenv("KMS_FALLBACK_PREFIX", "kms-cache/")
        if not self.bucket:
            logger.warning("KMS_FALLBACK_BUCKET not set. Fallback tier disabled.")

    def _object_key(self, key: str) -> str:
        return f"{self.prefix}{key}.json"

    def is_available(self) -> bool:
        return bool(self.bucket)

    def get(self, key: str) -> dict[str, Any] | None:
        if not self.is_available():
            return None

        try:
            response = get_s3_client().get_object(Bucket=self.bucket, Key=self._object_key(key))
            return json.loads(response["Body"].read())

        except ClientError as e:
            code = e.response.get("Error", {}).get("Code")
            if code in MISSING_OBJECT_CODES:
                logger.debug("No fallback value stored for key '%s'", key)
            else:
                logger.warning("Fallback read error for key '%s': %s", key, e)
            return None

        except (BotoCoreError, json.JSONDecodeError, KeyError, TypeError) as e:
            logger.warning("Fallback read error for key '%s': %s", key, e)
            return None

    def set(self, key: str, value: dict[str, Any], ttl: int | None = None) -> bool:
        """Write a value. S3 objects do not expire, so ttl is ignored."""
        if not self.is_available():
            return False

        try:
            get_s3_client().put_object(
                Bucket=self.bucket,
                Key=self._object_key(key),
                Body=json.dumps(value).encode("utf-8"),
                ContentType="application/json",
            )
            return True

        except (ClientError, BotoCoreError, TypeError, ValueError) as e:
            logger.warning("Fallback write error for key '%s': %s", key, e)
            return False
