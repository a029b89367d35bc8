"""Tests for the blob store and image upload helpers."""

from unittest.mock import MagicMock, patch

import pytest
from minio.error import S3Error

from src.services.errors import StorageError
from src.services.storage import ImageUpload, MinioBlobStore

BASE_URL = "http://localhost:9000/journal-images"


def s3_error(code: str = "InternalError") -> S3Error:
    return S3Error(
        code=code,
        message="boom",
        resource="/journal-images/journals/1-1.png",
        request_id="req",
        host_id="host",
        response=MagicMock(),
    )


@pytest.fixture
def minio_client():
    """Patched Minio SDK client."""
    with patch("src.services.storage.Minio") as minio_cls:
        client = minio_cls.return_value
        client.bucket_exists.return_value = True
        yield client


@pytest.fixture
def store(minio_client):
    return MinioBlobStore(
        "journal-images",
        endpoint="localhost:9000",
        access_key="key",
        secret_key="secret",
        base_url=BASE_URL,
        secure=False,
    )


def test_existing_bucket_is_not_recreated(store, minio_client):
    """Test that an existing bucket is left alone."""
    minio_client.bucket_exists.assert_called_once_with("journal-images")
    minio_client.make_bucket.assert_not_called()


def test_missing_bucket_is_created_public(minio_client):
    """Test that a new bucket gets an anonymous read policy."""
    minio_client.bucket_exists.return_value = False

    MinioBlobStore(
        "journal-images",
        endpoint="localhost:9000",
        access_key="key",
        secret_key="secret",
        base_url=BASE_URL,
    )

    minio_client.make_bucket.assert_called_once_with("journal-images")
    bucket, policy = minio_client.set_bucket_policy.call_args.args
    assert bucket == "journal-images"
    assert "s3:GetObject" in policy
    assert "arn:aws:s3:::journal-images/*" in policy


def test_bucket_check_failure_raises_storage_error(minio_client):
    """Test that an unreachable store surfaces as StorageError."""
    minio_client.bucket_exists.side_effect = s3_error()

    with pytest.raises(StorageError):
        MinioBlobStore(
            "journal-images",
            endpoint="localhost:9000",
            access_key="key",
            secret_key="secret",
            base_url=BASE_URL,
        )


def test_upload_returns_public_url(store, minio_client):
    """Test uploading puts the object and returns its public URL."""
    url = store.upload("journals/1-1700000000000.png", b"data", "image/png")

    assert url == f"{BASE_URL}/journals/1-1700000000000.png"
    args, kwargs = minio_client.put_object.call_args
    assert args[0] == "journal-images"
    assert args[1] == "journals/1-1700000000000.png"
    assert args[2].read() == b"data"
    assert args[3] == 4
    assert kwargs["content_type"] == "image/png"


def test_upload_failure_raises_storage_error(store, minio_client):
    """Test that SDK errors are wrapped."""
    minio_client.put_object.side_effect = s3_error()

    with pytest.raises(StorageError) as exc_info:
        store.upload("journals/1-1.png", b"data", "image/png")
    assert "journals/1-1.png" in str(exc_info.value)


def test_delete_removes_object(store, minio_client):
    """Test deleting by path."""
    store.delete("journals/1-1.png")
    minio_client.remove_object.assert_called_once_with("journal-images", "journals/1-1.png")


def test_delete_failure_raises_storage_error(store, minio_client):
    """Test that delete errors are wrapped."""
    minio_client.remove_object.side_effect = s3_error("AccessDenied")

    with pytest.raises(StorageError):
        store.delete("journals/1-1.png")


def test_path_from_url(store):
    """Test mapping public URLs back to object paths."""
    assert store.path_from_url(f"{BASE_URL}/journals/1-1.png") == "journals/1-1.png"
    assert store.path_from_url(f"{BASE_URL}/journals/a%20b.png") == "journals/a b.png"
    assert store.path_from_url(f"{BASE_URL}/journals/1-1.png?v=2") == "journals/1-1.png"


def test_path_from_foreign_url(store):
    """Test that URLs not issued by the store have no path."""
    assert store.path_from_url("https://elsewhere.example.com/journals/1-1.png") is None
    assert store.path_from_url(f"{BASE_URL}/") is None


def test_public_url_quotes_path(store):
    assert store.public_url("journals/a b.png") == f"{BASE_URL}/journals/a%20b.png"


@pytest.mark.parametrize(
    ("filename", "content_type", "expected"),
    [
        ("photo.JPG", "image/jpeg", "jpg"),
        ("archive.tar.png", "image/png", "png"),
        ("noext", "image/webp", "webp"),
        ("", "image/gif", "gif"),
        ("x.png/../../other/pic", "image/png", "png"),
        ("photo.p\\ng", "image/png", "png"),
        ("photo.averyverylongext", "image/jpeg", "jpg"),
        ("photo.\u00e9\u00e9", "image/webp", "webp"),
    ],
)
def test_image_extension(filename, content_type, expected):
    """Test extension from file name with MIME type fallback."""
    image = ImageUpload(filename=filename, content_type=content_type, data=b"")
    assert image.extension == expected
