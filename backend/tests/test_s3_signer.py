"""Tests for the S3 URL signer."""
from types import SimpleNamespace
from unittest.mock import MagicMock

from adventure_api.infra.storage.s3_signer import LOCAL_BASE_URL, S3Signer, build_base_url


def test_base_url_resolution():
    assert build_base_url(None, "us-east-1") == LOCAL_BASE_URL
    assert build_base_url("photos", "eu-west-1") == "https://photos.s3.eu-west-1.amazonaws.com"
    assert build_base_url("photos", "us-east-1", endpoint="http://minio:9000") == "http://minio:9000/photos"
    assert build_base_url(
        "photos", "us-east-1", endpoint="http://minio:9000", public_base_url="https://cdn.example/"
    ) == "https://cdn.example"


async def test_local_signing_without_bucket():
    signer = S3Signer(expires_in=120)

    put = await signer.sign_put_url("adventures/a1/k/run.jpg", "image/jpeg")
    get = await signer.sign_get_url("adventures/a1/k/run.jpg")

    assert signer.is_local
    assert put.photo_url == f"{LOCAL_BASE_URL}/adventures/a1/k/run.jpg"
    assert put.upload_url.startswith(put.photo_url + "?signature=")
    assert put.upload_url.endswith("&expires=120")
    assert put.expires_in == 120
    assert get.url.startswith(put.photo_url + "?signature=")
    assert get.key == "adventures/a1/k/run.jpg"


async def test_presigned_urls_use_client_params():
    client = MagicMock()
    client.generate_presigned_url.return_value = "https://signed.example/put"
    signer = S3Signer(bucket="photos", put_acl="public-read", client=client)

    put = await signer.sign_put_url("adventures/a1/k/run.png", "image/png")

    assert put.upload_url == "https://signed.example/put"
    assert put.photo_url == "https://photos.s3.us-east-1.amazonaws.com/adventures/a1/k/run.png"
    client.generate_presigned_url.assert_called_once_with(
        "put_object",
        Params={
            "Bucket": "photos",
            "Key": "adventures/a1/k/run.png",
            "ContentType": "image/png",
            "ACL": "public-read",
        },
        ExpiresIn=900,
    )

    client.generate_presigned_url.reset_mock()
    client.generate_presigned_url.return_value = "https://signed.example/get"
    get = await signer.sign_get_url("adventures/a1/k/run.png")

    assert get.url == "https://signed.example/get"
    client.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={"Bucket": "photos", "Key": "adventures/a1/k/run.png"},
        ExpiresIn=900,
    )


async def test_boto3_presigning_with_custom_endpoint():
    signer = S3Signer(
        bucket="photos",
        region="us-east-1",
        endpoint="http://localhost:9000",
        access_key="AKIAEXAMPLEKEY",
        secret_key="example-secret",
    )

    put = await signer.sign_put_url("adventures/a1/k/run.jpg", "image/jpeg")

    assert not signer.is_local
    assert put.photo_url == "http://localhost:9000/photos/adventures/a1/k/run.jpg"
    assert put.upload_url.startswith("http://localhost:9000/photos/adventures/a1/k/run.jpg?")
    assert "Signature" in put.upload_url


def test_key_for_url():
    signer = S3Signer(public_base_url="https://cdn.example")

    assert signer.key_for_url("https://cdn.example/adventures/a1/k/run.jpg") == "adventures/a1/k/run.jpg"
    assert signer.key_for_url("https://cdn.example/adventures/a1/k/run.jpg?v=2") == "adventures/a1/k/run.jpg"
    assert signer.key_for_url("https://placehold.co/800x600?text=abc") is None
    assert signer.key_for_url("https://cdn.example/") is None


def test_from_settings():
    settings = SimpleNamespace(
        s3_bucket="",
        s3_region="us-east-1",
        s3_endpoint="",
        s3_access_key="",
        s3_secret_key="",
        s3_public_base_url="https://cdn.example",
        s3_put_object_acl="",
        s3_url_expires_in=60,
    )

    signer = S3Signer.from_settings(settings)

    assert signer.is_local
    assert signer.base_url == "https://cdn.example"
    assert signer.expires_in == 60
