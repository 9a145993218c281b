"""Turn case file storage keys into URLs."""

from __future__ import annotations

from urllib.parse import quote, urlsplit

from oncoshare.core.config import settings

DEFAULT_S3_HOST = "s3.amazonaws.com"


def _quoted_key(storage_key: str) -> str:
    return quote(storage_key.lstrip("/"), safe="/")


def build_public_url(bucket: str, key: str) -> str:
    """
    Public object URL for ``bucket``/``key``.

    ``S3_PUBLIC_BASE_URL`` overrides the AWS host (e.g. a GCS or MinIO
    endpoint); ``S3_URL_STYLE=virtual`` puts the bucket in the host name.
    """
    split = urlsplit((settings.S3_PUBLIC_BASE_URL or "").rstrip("/"))
    scheme = split.scheme or "https"
    host = split.netloc or split.path or DEFAULT_S3_HOST

    if (settings.S3_URL_STYLE or "path").lower() == "virtual":
        return f"{scheme}://{bucket}.{host}/{_quoted_key(key)}"
    return f"{scheme}://{host}/{bucket}/{_quoted_key(key)}"


def build_file_url(storage_key: str) -> str:
    """URL for a case file under the configured storage backend."""
    if (settings.STORAGE_BACKEND or "local").lower() == "s3":
        return build_public_url(settings.S3_BUCKET, storage_key)
    prefix = settings.LOCAL_MEDIA_URL_PREFIX.rstrip("/")
    return f"{prefix}/{_quoted_key(storage_key)}"
