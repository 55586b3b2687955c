"""Object storage for rendered report artifacts."""
from __future__ import annotations

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from branch_reports.core.config import Settings, get_settings
from branch_reports.services.errors import ArtifactUploadError, UpstreamFailureError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

_WHITESPACE = re.compile(r"\s+")


def build_file_name(period: str, branch_name: str) -> str:
    return f"{_WHITESPACE.sub('_', branch_name)}_{period}.pdf"


def build_artifact_key(period: str, branch_name: str) -> str:
    """Deterministic storage key; the same branch and period always collide."""
    return f"{period}/{build_file_name(period, branch_name)}"


@dataclass(slots=True, frozen=True)
class StoredArtifact:
    bucket: str
    key: str
    size: int

    @property
    def location(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


class ReportArtifactStore:
    """Writes report PDFs to the reports bucket, replacing earlier uploads."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        s3_client_factory: Callable[[], Any] | None = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._s3_client_factory = s3_client_factory or self._default_s3_client
        self._s3_client: Any | None = None
        self._bucket_ready = False

    @property
    def bucket(self) -> str:
        return self._settings.report_bucket

    @property
    def url_expiry_seconds(self) -> int:
        return self._settings.report_url_expiry_seconds

    def _default_s3_client(self) -> Any:
        return boto3.client(
            "s3",
            region_name=self._settings.aws_region,
            endpoint_url=self._settings.s3_endpoint_url,
            config=Config(
                connect_timeout=self._settings.s3_connect_timeout_seconds,
                read_timeout=self._settings.s3_read_timeout_seconds,
                retries={"total_max_attempts": 1, "mode": "standard"},
            ),
        )

    def _get_s3_client(self) -> Any:
        if self._s3_client is None:
            self._s3_client = self._s3_client_factory()
        return self._s3_client

    def _ensure_bucket(self, client: Any) -> None:
        if self._bucket_ready:
            return
        try:
            client.head_bucket(Bucket=self.bucket)
        except ClientError:
            create_params: dict[str, Any] = {"Bucket": self.bucket}
            if self._settings.aws_region != "us-east-1" and self._settings.s3_endpoint_url is None:
                create_params["CreateBucketConfiguration"] = {"LocationConstraint": self._settings.aws_region}
            client.create_bucket(**create_params)
        self._bucket_ready = True

    def store(self, key: str, content: bytes, content_type: str = PDF_CONTENT_TYPE) -> StoredArtifact:
        try:
            client = self._get_s3_client()
            self._ensure_bucket(client)
            client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            logger.error(
                "report upload failed",
                extra={"bucket": self.bucket, "key": key, "error": str(exc)},
            )
            raise ArtifactUploadError(f"Failed to upload report: {exc}") from exc

        artifact = StoredArtifact(bucket=self.bucket, key=key, size=len(content))
        logger.info("stored report artifact", extra={"location": artifact.location, "size": artifact.size})
        return artifact

    def presigned_url(self, key: str, *, expires_in: int | None = None) -> str:
        expiry = expires_in or self.url_expiry_seconds
        try:
            return self._get_s3_client().generate_presigned_url(
                "get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=expiry,
            )
        except (BotoCoreError, ClientError) as exc:
            raise UpstreamFailureError(f"Failed to sign report URL: {exc}") from exc


__all__ = [
    "PDF_CONTENT_TYPE",
    "ReportArtifactStore",
    "StoredArtifact",
    "build_artifact_key",
    "build_file_name",
]
