from oncoshare.core.config import settings
from oncoshare.services import storage_url_service


def test_build_public_url_default(monkeypatch):
    monkeypatch.setattr(settings, "S3_PUBLIC_BASE_URL", "")
    monkeypatch.setattr(settings, "S3_URL_STYLE", "path")

    url = storage_url_service.build_public_url("case-files", "cases/abc/scan 1.jpg")
    assert url == "https://s3.amazonaws.com/case-files/cases/abc/scan%201.jpg"


def test_build_public_url_custom_base_virtual(monkeypatch):
    monkeypatch.setattr(settings, "S3_PUBLIC_BASE_URL", "https://storage.googleapis.com")
    monkeypatch.setattr(settings, "S3_URL_STYLE", "virtual")

    url = storage_url_service.build_public_url("case-files", "/cases/abc/report.pdf")
    assert url == "https://case-files.storage.googleapis.com/cases/abc/report.pdf"


def test_build_file_url_local_backend(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "local")
    monkeypatch.setattr(settings, "LOCAL_MEDIA_URL_PREFIX", "/media/")

    assert storage_url_service.build_file_url("cases/abc/scan.jpg") == "/media/cases/abc/scan.jpg"


def test_build_file_url_s3_backend_uses_configured_bucket(monkeypatch):
    monkeypatch.setattr(settings, "STORAGE_BACKEND", "S3")
    monkeypatch.setattr(settings, "S3_BUCKET", "oncoshare-prod")
    monkeypatch.setattr(settings, "S3_PUBLIC_BASE_URL", "")
    monkeypatch.setattr(settings, "S3_URL_STYLE", "path")

    url = storage_url_service.build_file_url("cases/abc/scan.jpg")
    assert url == "https://s3.amazonaws.com/oncoshare-prod/cases/abc/scan.jpg"


def test_build_public_url_schemeless_base(monkeypatch):
    monkeypatch.setattr(settings, "S3_PUBLIC_BASE_URL", "minio.internal:9000/")
    monkeypatch.setattr(settings, "S3_URL_STYLE", "path")

    url = storage_url_service.build_public_url("case-files", "cases/abc/scan.jpg")
    assert url == "https://minio.internal:9000/case-files/cases/abc/scan.jpg"
