"""
Tests for blob storage uploads.

Tests: container URL configuration, blob naming, Put Blob request shape,
upload endpoint error mapping. Uses httpx.MockTransport; no network.
"""
import httpx
import pytest

from config import settings
from services import blob_service

ACCOUNT_URL = "https://shopacct.blob.core.windows.net"


@pytest.fixture
def blob_settings(monkeypatch):
    monkeypatch.setattr(settings, "blob_account_url", ACCOUNT_URL + "/")
    monkeypatch.setattr(settings, "blob_sas_token", "?sv=2021-08-06&sig=abc")
    monkeypatch.setattr(settings, "blob_container", "product-images")


@pytest.mark.unit
def test_container_url_requires_configuration(monkeypatch):
    monkeypatch.setattr(settings, "blob_account_url", "")
    monkeypatch.setattr(settings, "blob_sas_token", "")

    with pytest.raises(ValueError):
        blob_service._container_url()


@pytest.mark.unit
def test_make_blob_name(monkeypatch):
    monkeypatch.setattr(blob_service.time, "time", lambda: 1700000000.5)
    assert blob_service.make_blob_name("red shirt.png") == "1700000000500_red_shirt.png"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upload_image_puts_block_blob(blob_settings, monkeypatch):
    monkeypatch.setattr(blob_service.time, "time", lambda: 1.0)
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = request.content
        return httpx.Response(201)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        result = await blob_service.upload_image(b"pngbytes", "cat.png", "image/png", client=client)

    assert seen["method"] == "PUT"
    assert seen["url"] == f"{ACCOUNT_URL}/product-images/1000_cat.png?sv=2021-08-06&sig=abc"
    assert seen["headers"]["x-ms-blob-type"] == "BlockBlob"
    assert seen["headers"]["content-type"] == "image/png"
    assert seen["body"] == b"pngbytes"
    assert result == {
        "blob_name": "1000_cat.png",
        "url": f"{ACCOUNT_URL}/product-images/1000_cat.png",
        "size": 8,
    }


@pytest.mark.unit
@pytest.mark.asyncio
async def test_upload_image_raises_on_storage_error(blob_settings):
    transport = httpx.MockTransport(lambda request: httpx.Response(403))

    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(httpx.HTTPStatusError):
            await blob_service.upload_image(b"x", "a.png", "image/png", client=client)


@pytest.mark.api
@pytest.mark.asyncio
async def test_upload_endpoint_rejects_non_image(client):
    response = await client.post(
        "/api/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json()["error"]["code"] == "validation"


@pytest.mark.api
@pytest.mark.asyncio
async def test_upload_endpoint_returns_blob_url(client, monkeypatch):
    async def fake_upload(file_bytes, filename, content_type):
        return {"blob_name": f"1_{filename}", "url": f"{ACCOUNT_URL}/product-images/1_{filename}", "size": len(file_bytes)}

    monkeypatch.setattr(blob_service, "upload_image", fake_upload)

    response = await client.post(
        "/api/upload",
        files={"file": ("cat.png", b"pngbytes", "image/png")},
    )
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["file_name"] == "1_cat.png"
    assert data["size"] == 8


@pytest.mark.api
@pytest.mark.asyncio
async def test_upload_endpoint_maps_storage_failure_to_502(client, monkeypatch):
    async def failing_upload(file_bytes, filename, content_type):
        raise httpx.ConnectError("storage unreachable")

    monkeypatch.setattr(blob_service, "upload_image", failing_upload)

    response = await client.post(
        "/api/upload",
        files={"file": ("cat.png", b"pngbytes", "image/png")},
    )
    assert response.status_code == 502
