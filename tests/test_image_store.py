import hashlib

import pytest
import requests

from restopos.services.image_store import CloudinaryImageStore, ImageStoreError


class _FakeResponse:
    def __init__(self, payload: dict, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> dict:
        return self._payload


class _FakeSession:
    def __init__(self, response: _FakeResponse | None = None, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.calls: list[dict] = []

    def post(self, url: str, **kwargs):
        self.calls.append({"url": url, **kwargs})
        if self.error is not None:
            raise self.error
        return self.response


def _store(session: _FakeSession) -> CloudinaryImageStore:
    return CloudinaryImageStore(
        cloud_name="demo",
        api_key="key-123",
        api_secret="shh",
        http=session,
        clock=lambda: 1_700_000_000.7,
    )


def test_signature_is_sha1_of_sorted_params_and_secret() -> None:
    store = _store(_FakeSession())
    expected = hashlib.sha1(b"public_id=bills/a&timestamp=1700000000shh").hexdigest()

    assert store.sign({"timestamp": "1700000000", "public_id": "bills/a"}) == expected


def test_delete_posts_signed_form_to_destroy() -> None:
    session = _FakeSession(_FakeResponse({"result": "ok"}))

    assert _store(session).delete("bills/a") is True

    call = session.calls[0]
    assert call["url"] == "https://api.cloudinary.com/v1_1/demo/image/destroy"
    assert call["data"]["public_id"] == "bills/a"
    assert call["data"]["api_key"] == "key-123"
    assert call["data"]["timestamp"] == "1700000000"
    assert call["data"]["signature"] == hashlib.sha1(b"public_id=bills/a&timestamp=1700000000shh").hexdigest()


def test_delete_failures_are_reported_not_raised() -> None:
    assert _store(_FakeSession(error=requests.ConnectionError("down"))).delete("bills/a") is False
    assert _store(_FakeSession(_FakeResponse({}, status_code=500))).delete("bills/a") is False
    assert _store(_FakeSession(_FakeResponse({"result": "not found"}))).delete("bills/a") is False


def test_upload_returns_secure_url_and_public_id() -> None:
    session = _FakeSession(_FakeResponse({"secure_url": "https://img.test/x.pdf", "public_id": "bills/x"}))

    stored = _store(session).upload(b"%PDF-1.4", "x.pdf", folder="bills")

    assert stored.url == "https://img.test/x.pdf"
    assert stored.public_id == "bills/x"
    call = session.calls[0]
    assert call["url"].endswith("/demo/image/upload")
    assert call["files"] == {"file": ("x.pdf", b"%PDF-1.4")}
    assert call["data"]["folder"] == "bills"


def test_upload_failure_raises() -> None:
    with pytest.raises(ImageStoreError):
        _store(_FakeSession(error=requests.Timeout("slow"))).upload(b"data", "x.pdf")
    with pytest.raises(ImageStoreError):
        _store(_FakeSession(_FakeResponse({"public_id": "bills/x"}))).upload(b"data", "x.pdf")
