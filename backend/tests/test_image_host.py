import io

import cloudinary.uploader
import pytest
from fastapi import UploadFile
from starlette.datastructures import Headers

from order_splitter.config import Settings
from order_splitter.exceptions import UpstreamServiceError, ValidationError
from order_splitter.services.image_host import ImageHostService


@pytest.fixture()
def host(tmp_path):
    settings = Settings(
        UPLOAD_TMP_DIR=str(tmp_path / "uploads"),
        CLOUDINARY_CLOUD_NAME="demo",
        CLOUDINARY_API_KEY="key",
        CLOUDINARY_API_SECRET="secret",
        MAX_UPLOAD_BYTES=1024,
    )
    return ImageHostService(settings)


def make_upload(name="bill.png", content=b"\x89PNG data", content_type="image/png"):
    return UploadFile(
        file=io.BytesIO(content),
        filename=name,
        headers=Headers({"content-type": content_type}),
    )


def test_upload_returns_secure_url_and_removes_temp_file(host, monkeypatch):
    calls = {}

    def fake_upload(path, **options):
        calls["path"] = path
        calls["options"] = options
        return {"secure_url": "https://res.cloudinary.com/demo/bill.png"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)

    url = host.upload_file(make_upload())

    assert url == "https://res.cloudinary.com/demo/bill.png"
    assert calls["options"]["folder"] == "orderSplitterBills"
    assert calls["options"]["resource_type"] == "image"
    assert calls["options"]["cloud_name"] == "demo"
    assert calls["path"].endswith(".png")
    assert list(host.tmp_dir.iterdir()) == []


def test_failed_upload_still_removes_temp_file(host, monkeypatch):
    def boom(path, **options):
        raise RuntimeError("cloudinary down")

    monkeypatch.setattr(cloudinary.uploader, "upload", boom)

    with pytest.raises(UpstreamServiceError):
        host.upload_file(make_upload())
    assert list(host.tmp_dir.iterdir()) == []


def test_no_file_means_no_upload(host, monkeypatch):
    monkeypatch.setattr(cloudinary.uploader, "upload", lambda *a, **k: pytest.fail("should not upload"))
    assert host.upload_file(None) == ""


@pytest.mark.parametrize("content_type", ["application/pdf", "image/gif"])
def test_rejects_unsupported_types(host, content_type):
    with pytest.raises(ValidationError):
        host.save_upload(make_upload(name="bill.bin", content_type=content_type))


def test_rejects_oversized_file(host):
    with pytest.raises(ValidationError) as exc:
        host.save_upload(make_upload(content=b"x" * 2048))
    assert exc.value.details[0]["field"] == "billImage"
    assert list(host.tmp_dir.iterdir()) == []
