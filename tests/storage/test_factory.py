"""Tests for storage backend selection and upload reading."""

from unittest.mock import patch

import pytest

from crudkit.config import CrudKitConfig, get_config
from crudkit.exceptions import ConfigurationError
from crudkit.service import UploadOptions
from crudkit.storage import (
    S3StorageService,
    UploadedFile,
    file_extension,
    get_storage_service,
    read_upload,
)


class TestGetStorageService:
    """Test get_storage_service()."""

    def test_custom_service_returned_as_is(self):
        custom = object()
        upload = UploadOptions(fields=["image"], custom_service=custom)
        assert get_storage_service(upload, CrudKitConfig()) is custom

    def test_s3_from_options(self):
        upload = UploadOptions.model_validate(
            {
                "fields": ["image"],
                "s3": {"bucketName": "assets", "cdnUrl": "https://cdn.test"},
            }
        )
        with patch("crudkit.storage.interfaces.s3.boto3"):
            storage = get_storage_service(upload, CrudKitConfig())

        assert isinstance(storage, S3StorageService)
        assert storage.bucket_name == "assets"
        assert storage.acl == "public-read"

    def test_s3_falls_back_to_config(self):
        config = get_config(
            {
                "CRUDKIT_S3_BUCKET_NAME": "env-bucket",
                "CRUDKIT_S3_CDN_URL": "https://env.cdn",
                "CRUDKIT_S3_PREFIX": "up/",
                "OTHER": "ignored",
            }
        )
        upload = UploadOptions.model_validate({"fields": ["image"], "s3": {}})
        with patch("crudkit.storage.interfaces.s3.boto3"):
            storage = get_storage_service(upload, config)

        assert storage.bucket_name == "env-bucket"
        assert storage.cdn_url == "https://env.cdn"
        assert storage.prefix == "up/"

    def test_s3_without_bucket(self):
        upload = UploadOptions.model_validate({"fields": ["image"], "s3": {}})
        with pytest.raises(ConfigurationError):
            get_storage_service(upload, CrudKitConfig())


class TestReadUpload:
    """Test read_upload() on the supported upload shapes."""

    @pytest.mark.asyncio
    async def test_bytes(self):
        assert await read_upload(b"x") == (b"x", None)

    @pytest.mark.asyncio
    async def test_uploaded_file(self):
        assert await read_upload(UploadedFile(b"x", "a.png")) == (b"x", "a.png")

    @pytest.mark.asyncio
    async def test_tuple(self):
        assert await read_upload(("a.png", b"x")) == (b"x", "a.png")

    @pytest.mark.asyncio
    async def test_async_file_object(self):
        class AsyncFile:
            filename = "a.png"

            async def read(self):
                return b"x"

        assert await read_upload(AsyncFile()) == (b"x", "a.png")

    @pytest.mark.asyncio
    async def test_unsupported(self):
        with pytest.raises(TypeError):
            await read_upload(42)


@pytest.mark.parametrize(
    "filename,expected",
    [("a.PNG", ".png"), ("archive.tar.gz", ".gz"), ("noext", ""), (None, "")],
)
def test_file_extension(filename, expected):
    assert file_extension(filename) == expected

