import os

import pytest
import requests

from java_containers.cache import ApplicationCache
from java_containers.errors import StagingError


class _FakeResponse:
    def __init__(self, status_code=200, content=b"", headers=None) -> None:
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}

    def __enter__(self):
        return self

    def __exit__(self, *args) -> None:
        pass

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError("status %s" % self.status_code)

    def iter_content(self, chunk_size=1):
        for i in range(0, len(self.content), chunk_size):
            yield self.content[i:i + chunk_size]


class _FakeSession:
    def __init__(self, *responses) -> None:
        self.responses = list(responses)
        self.requests = []

    def get(self, uri, headers=None, stream=False, timeout=None):
        self.requests.append((uri, dict(headers or {})))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


URI = "http://example.com/karaf.tar.gz"


def test_downloads_and_stores_validators(tmp_path) -> None:
    session = _FakeSession(_FakeResponse(200, b"payload", {"ETag": '"abc"', "Last-Modified": "Mon"}))
    cache = ApplicationCache(str(tmp_path), session=session)
    with cache.get(URI) as f:
        assert f.read() == b"payload"
    names = sorted(os.listdir(tmp_path))
    assert len(names) == 3
    assert [n.split(".", 1)[1] for n in names] == ["cached", "etag", "last_modified"]
    assert session.requests == [(URI, {})]


def test_not_modified_reuses_cached_copy(tmp_path) -> None:
    session = _FakeSession(
        _FakeResponse(200, b"payload", {"ETag": '"abc"', "Last-Modified": "Mon"}),
        _FakeResponse(304),
    )
    cache = ApplicationCache(str(tmp_path), session=session)
    with cache.get(URI):
        pass
    with cache.get(URI) as f:
        assert f.read() == b"payload"
    assert session.requests[1] == (URI, {"If-None-Match": '"abc"', "If-Modified-Since": "Mon"})


def test_network_failure_uses_cached_copy(tmp_path) -> None:
    session = _FakeSession(
        _FakeResponse(200, b"payload"),
        requests.ConnectionError("unreachable"),
    )
    cache = ApplicationCache(str(tmp_path), session=session)
    with cache.get(URI):
        pass
    with cache.get(URI) as f:
        assert f.read() == b"payload"


def test_network_failure_without_copy_raises(tmp_path) -> None:
    session = _FakeSession(requests.ConnectionError("unreachable"))
    cache = ApplicationCache(str(tmp_path), session=session)
    with pytest.raises(StagingError):
        with cache.get(URI):
            pass


def test_http_error_without_copy_raises(tmp_path) -> None:
    session = _FakeSession(_FakeResponse(404))
    cache = ApplicationCache(str(tmp_path / "cache"), session=session)
    with pytest.raises(StagingError):
        with cache.get(URI):
            pass
    assert os.listdir(tmp_path / "cache") == []


def test_local_files_are_not_copied(tmp_path) -> None:
    archive = tmp_path / "karaf.tar.gz"
    archive.write_bytes(b"local")
    cache = ApplicationCache(str(tmp_path / "cache"), session=_FakeSession())
    with cache.get(str(archive)) as f:
        assert f.read() == b"local"
    with cache.get("file://" + str(archive)) as f:
        assert f.read() == b"local"
    assert os.listdir(tmp_path / "cache") == []


def test_unsupported_scheme(tmp_path) -> None:
    cache = ApplicationCache(str(tmp_path), session=_FakeSession())
    with pytest.raises(ValueError):
        cache.local_path("ftp://example.com/karaf.tar.gz")


def test_file_uri_is_percent_decoded(tmp_path) -> None:
    archive = tmp_path / "my app.tar.gz"
    archive.write_bytes(b"spaced")
    cache = ApplicationCache(str(tmp_path / "cache"), session=_FakeSession())
    with cache.get("file://" + str(tmp_path) + "/my%20app.tar.gz") as f:
        assert f.read() == b"spaced"
