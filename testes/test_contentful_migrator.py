import json
import os
import sys

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest
import requests

from wp_contentful.migrators import contentful_migrator as cm

CFG = {
    "access_token": "tok",
    "space_id": "space1",
    "environment": "master",
    "base_url": "https://api.contentful.com",
    "upload_url": "https://upload.contentful.com",
}
ENV_URL = "https://api.contentful.com/spaces/space1/environments/master"


class FakeResponse:
    def __init__(self, payload=None, status_code=200, content=b""):
        self._payload = payload
        self.status_code = status_code
        self.text = json.dumps(payload) if payload is not None else ""
        self._content = content

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)

    def iter_content(self, chunk_size=1):
        yield self._content

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class Recorder:
    """Records calls and answers with queued responses."""

    def __init__(self, *responses):
        self.calls = []
        self.responses = list(responses)

    def __call__(self, url, **kwargs):
        self.calls.append((url, kwargs))
        return self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]


def test_contentful_headers_and_environment_url():
    headers = cm.contentful_headers(CFG, **{"X-Contentful-Version": "3"})
    assert headers["Authorization"] == "Bearer tok"
    assert headers["Content-Type"] == cm.CMA_CONTENT_TYPE
    assert headers["X-Contentful-Version"] == "3"
    assert cm.environment_url({**CFG, "base_url": "https://api.contentful.com/"}) == ENV_URL


def test_create_entry_sends_content_type_header(monkeypatch):
    post = Recorder(FakeResponse({"sys": {"id": "e1", "version": 1}}))
    monkeypatch.setattr(cm.requests, "post", post)

    entry = cm.create_entry(CFG, "author", {"name": {"en-GB": "Jane"}})
    assert entry["sys"]["id"] == "e1"
    url, kwargs = post.calls[0]
    assert url == f"{ENV_URL}/entries"
    assert kwargs["headers"]["X-Contentful-Content-Type"] == "author"
    assert kwargs["json"] == {"fields": {"name": {"en-GB": "Jane"}}}


def test_publish_entry_sends_version(monkeypatch):
    put = Recorder(FakeResponse({"sys": {"id": "e1", "version": 2, "publishedVersion": 1}}))
    monkeypatch.setattr(cm.requests, "put", put)

    cm.publish_entry(CFG, {"sys": {"id": "e1", "version": 1}})
    url, kwargs = put.calls[0]
    assert url == f"{ENV_URL}/entries/e1/published"
    assert kwargs["headers"]["X-Contentful-Version"] == "1"


def test_rejected_call_raises_http_error(monkeypatch):
    body = {"message": "Validation error", "details": {"errors": [{"name": "required"}]}}
    monkeypatch.setattr(cm.requests, "put", Recorder(FakeResponse(body, status_code=422)))

    with pytest.raises(requests.HTTPError) as exc_info:
        cm.publish_entry(CFG, {"sys": {"id": "e1", "version": 1}})
    details = cm.error_details(exc_info.value)
    assert details.startswith("Validation error")
    assert "required" in details


def test_error_details_without_response():
    assert cm.error_details(requests.ConnectionError("boom")) == "boom"


def test_create_upload_posts_binary(monkeypatch):
    post = Recorder(FakeResponse({"sys": {"id": "up1"}}))
    monkeypatch.setattr(cm.requests, "post", post)

    assert cm.create_upload(CFG, b"\x89PNG") == "up1"
    url, kwargs = post.calls[0]
    assert url == "https://upload.contentful.com/spaces/space1/uploads"
    assert kwargs["headers"]["Content-Type"] == "application/octet-stream"
    assert kwargs["data"] == b"\x89PNG"


def test_download_image_writes_file(monkeypatch, tmp_path):
    monkeypatch.setattr(cm.requests, "get", Recorder(FakeResponse(content=b"bytes")))
    path = cm.download_image("https://ex.com/pic.jpg", "pic.jpg", str(tmp_path / "imgs"))
    assert path == str(tmp_path / "imgs" / "pic.jpg")
    with open(path, "rb") as f:
        assert f.read() == b"bytes"


def test_download_image_removes_partial_file(monkeypatch, tmp_path):
    class BrokenStream(FakeResponse):
        def iter_content(self, chunk_size=1):
            yield b"half"
            raise requests.exceptions.ChunkedEncodingError("connection reset")

    monkeypatch.setattr(cm.requests, "get", Recorder(BrokenStream()))
    with pytest.raises(requests.RequestException):
        cm.download_image("https://ex.com/pic.jpg", "pic.jpg", str(tmp_path / "imgs"))
    assert not (tmp_path / "imgs" / "pic.jpg").exists()


def test_process_asset_polls_until_processed(monkeypatch):
    put = Recorder(FakeResponse(None, status_code=204))
    pending = {"sys": {"id": "a1", "version": 2}, "fields": {"file": {"en-GB": {"fileName": "pic.jpg"}}}}
    done = {"sys": {"id": "a1", "version": 3}, "fields": {"file": {"en-GB": {"fileName": "pic.jpg", "url": "//images/pic.jpg"}}}}
    get = Recorder(FakeResponse(pending), FakeResponse(done))
    monkeypatch.setattr(cm.requests, "put", put)
    monkeypatch.setattr(cm.requests, "get", get)

    sleeps = []
    latest = cm.process_asset(CFG, {"sys": {"id": "a1", "version": 1}}, "en-GB", delay=0.5, sleep_fn=sleeps.append)
    assert latest["sys"]["version"] == 3
    assert put.calls[0][0] == f"{ENV_URL}/assets/a1/files/en-GB/process"
    assert put.calls[0][1]["headers"]["X-Contentful-Version"] == "1"
    assert sleeps == [0.5, 0.5]


def test_list_published_assets_paginates(monkeypatch):
    def item(i, locale="en-GB"):
        return {"sys": {"id": f"a{i}"}, "fields": {"file": {locale: {"fileName": f"f{i}.jpg", "url": f"//img/f{i}.jpg"}}}}

    first = FakeResponse({"total": 3, "items": [item(1), item(2, locale="de")]})
    second = FakeResponse({"total": 3, "items": [item(3)]})
    get = Recorder(first, second)
    monkeypatch.setattr(cm.requests, "get", get)

    assets = cm.list_published_assets(CFG, "en-GB")
    assert assets == [
        {"id": "a1", "url": "//img/f1.jpg", "fileName": "f1.jpg"},
        {"id": "a3", "url": "//img/f3.jpg", "fileName": "f3.jpg"},
    ]
    assert [c[1]["params"]["skip"] for c in get.calls] == [0, 2]
    assert get.calls[0][0] == f"{ENV_URL}/public/assets"


def test_guess_content_type():
    assert cm.guess_content_type("a.png") == "image/png"
    assert cm.guess_content_type("noext") == "image/jpeg"
