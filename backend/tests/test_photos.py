"""Tests for photo upload, signing and deletion through AdventureService."""
import re

import httpx
import pytest

from adventure_api.domain.adventure.models import AdventureCreate
from adventure_api.domain.adventure.services import AdventureService
from adventure_api.infra.storage.s3_signer import LOCAL_BASE_URL
from adventure_api.infra.storage.transfer import HttpPhotoTransfer

KEY_PATTERN = r"adventures/{adventure_id}/[0-9a-f-]{{36}}/{filename}"


class RecordingTransport:
    """httpx.MockTransport handler that records requests and answers with ``status``."""

    def __init__(self, status: int = 200):
        self.status = status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status)


def _service(store, users, cache, signer, now, transport=None) -> AdventureService:
    transfer = HttpPhotoTransfer(timeout=5.0, transport=httpx.MockTransport(transport)) if transport else None
    return AdventureService(store, users, cache, signer, transfer=transfer, now=now)


@pytest.fixture
async def adventure(service, alice):
    return await service.create_adventure(alice.id, AdventureCreate(title="Night run"))


async def test_photo_without_url_gets_placeholder(service, adventure, alice):
    photo = await service.upload_photo(adventure.id, alice.id, caption="finish")

    assert photo.url == f"https://placehold.co/800x600?text={adventure.id[:6]}"
    assert photo.uploader.id == alice.id
    assert photo.uploader.username == "alice"
    assert photo.caption == "finish"


async def test_photo_with_url_is_kept(service, adventure, alice):
    url = f"{LOCAL_BASE_URL}/adventures/{adventure.id}/abc/run.jpg"
    photo = await service.upload_photo(adventure.id, alice.id, photo_url=url)

    assert photo.url == url
    assert [p.id for p in await service.list_photos(adventure.id)] == [photo.id]


async def test_upload_requires_participant_and_adventure(service, adventure, alice, bob):
    assert await service.upload_photo(adventure.id, bob.id) is None
    assert await service.upload_photo("missing", alice.id) is None
    assert await service.list_photos(adventure.id) == []
    assert await service.list_photos("missing") is None


async def test_file_upload_puts_bytes_to_signed_url(store, users, cache, signer, now, alice):
    transport = RecordingTransport(200)
    service = _service(store, users, cache, signer, now, transport)
    adventure = await service.create_adventure(alice.id, AdventureCreate(title="Night run"))

    photo = await service.upload_photo(adventure.id, alice.id, file=b"jpeg-bytes", filename="run.jpg")

    assert photo is not None
    assert re.fullmatch(
        f"{re.escape(LOCAL_BASE_URL)}/" + KEY_PATTERN.format(adventure_id=adventure.id, filename=r"run\.jpg"),
        photo.url,
    )
    (request,) = transport.requests
    assert request.method == "PUT"
    assert request.content == b"jpeg-bytes"
    assert request.headers["content-type"] == "image/jpeg"
    assert str(request.url).startswith(photo.url + "?signature=")


async def test_file_upload_without_filename_uses_default_name(store, users, cache, signer, now, alice):
    service = _service(store, users, cache, signer, now, RecordingTransport(200))
    adventure = await service.create_adventure(alice.id, AdventureCreate(title="Night run"))

    photo = await service.upload_photo(adventure.id, alice.id, file=b"x")

    assert photo.url.endswith("/photo")


async def test_failed_transfer_persists_nothing(store, users, cache, signer, now, alice):
    service = _service(store, users, cache, signer, now, RecordingTransport(500))
    adventure = await service.create_adventure(alice.id, AdventureCreate(title="Night run"))

    photo = await service.upload_photo(adventure.id, alice.id, file=b"x", filename="run.png")

    assert photo is None
    assert await service.list_photos(adventure.id) == []


async def test_transport_error_persists_nothing(store, users, cache, signer, now, alice):
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    service = _service(store, users, cache, signer, now, refuse)
    adventure = await service.create_adventure(alice.id, AdventureCreate(title="Night run"))

    assert await service.upload_photo(adventure.id, alice.id, file=b"x", filename="run.png") is None
    assert await service.list_photos(adventure.id) == []


async def test_raw_upload_without_transfer_is_rejected(service, adventure, alice):
    assert await service.upload_photo(adventure.id, alice.id, file=b"x") is None


async def test_sign_photo_upload(service, adventure, alice, bob):
    signed = await service.sign_photo_upload(adventure.id, "beach.webp", alice.id)

    assert re.fullmatch(KEY_PATTERN.format(adventure_id=adventure.id, filename=r"beach\.webp"), signed.key)
    assert signed.photo_url == f"{LOCAL_BASE_URL}/{signed.key}"
    assert signed.upload_url.startswith(signed.photo_url + "?signature=")
    assert signed.expires_in == 900

    assert await service.sign_photo_upload(adventure.id, "beach.webp", bob.id) is None
    assert await service.sign_photo_upload("missing", "beach.webp") is None


async def test_sign_photo_view_for_participant(service, adventure, alice):
    signed = await service.sign_photo_upload(adventure.id, "run.jpg", alice.id)
    photo = await service.upload_photo(adventure.id, alice.id, photo_url=signed.photo_url)

    view = await service.sign_photo_view(adventure.id, photo.id, alice.id)

    assert view.key == signed.key
    assert view.url.startswith(signed.photo_url + "?signature=")


async def test_sign_photo_view_hides_photos_from_outsiders(service, adventure, alice, bob):
    signed = await service.sign_photo_upload(adventure.id, "run.jpg", alice.id)
    photo = await service.upload_photo(adventure.id, alice.id, photo_url=signed.photo_url)

    assert await service.sign_photo_view(adventure.id, photo.id, bob.id) is None
    assert await service.sign_photo_view(adventure.id, "missing", alice.id) is None
    assert await service.sign_photo_view("missing", photo.id, alice.id) is None


async def test_sign_photo_view_of_external_url(service, adventure, alice):
    photo = await service.upload_photo(adventure.id, alice.id)
    assert await service.sign_photo_view(adventure.id, photo.id, alice.id) is None


async def test_delete_photo(service, adventure, alice, bob):
    photo = await service.upload_photo(adventure.id, alice.id)

    assert await service.delete_photo(adventure.id, photo.id, bob.id) is False
    assert await service.delete_photo(adventure.id, photo.id, alice.id) is True
    assert await service.delete_photo(adventure.id, photo.id, alice.id) is False
    assert await service.list_photos(adventure.id) == []
