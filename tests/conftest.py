"""Shared fixtures: a fake aiohttp transport that records every request."""

from dataclasses import dataclass, field
from typing import Any, Optional

import aiohttp
import pytest
from aiohttp import FormData as WireFormData


class RecordingForm:
    """Stands in for aiohttp.FormData and keeps the added fields in order."""

    def __init__(self, *args, default_to_multipart=False, **kwargs):
        self.fields = []
        self.default_to_multipart = default_to_multipart

    def add_field(self, name, value, content_type=None, filename=None):
        self.fields.append((name, value, filename))

    def names(self) -> list[str]:
        return [name for name, _, _ in self.fields]

    def value(self, name) -> Any:
        for field_name, value, _ in self.fields:
            if field_name == name:
                return value
        raise KeyError(name)

    def filename(self, name) -> Optional[str]:
        for field_name, _, filename in self.fields:
            if field_name == name:
                return filename
        raise KeyError(name)


@dataclass
class RecordedCall:
    method: str
    url: str
    data: Any
    headers: dict
    handles_open: list[bool] = field(default_factory=list)
    payload: Any = None


class FakeResponse:
    def __init__(self, status: int = 200, body: str = "", reason: str = "OK"):
        self.status = status
        self.reason = reason
        self._body = body

    async def text(self) -> str:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeClientSession:
    def __init__(self, transport: "FakeTransport", **kwargs):
        self.transport = transport
        self.kwargs = kwargs

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    def post(self, url, data=None, headers=None, **kwargs):
        return self._request("post", url, data, headers)

    def delete(self, url, data=None, headers=None, **kwargs):
        return self._request("delete", url, data, headers)

    def _request(self, method, url, data, headers):
        handles = []
        if isinstance(data, RecordingForm):
            handles = [not value.closed for _, value, _ in data.fields if hasattr(value, "closed")]
        call = RecordedCall(method, url, data, dict(headers or {}), handles)
        if isinstance(data, WireFormData):
            # render while any opened file is still open, as a real session would
            call.payload = data()
        self.transport.calls.append(call)

        if self.transport.error is not None:
            raise self.transport.error
        if not self.transport.responses:
            raise AssertionError(f"Unexpected {method.upper()} {url}")
        return self.transport.responses.pop(0)


class FakeTransport:
    def __init__(self):
        self.calls: list[RecordedCall] = []
        self.responses: list[FakeResponse] = []
        self.error: Optional[Exception] = None

    def queue(self, status: int = 200, body: str = "", reason: str = "OK") -> None:
        self.responses.append(FakeResponse(status, body, reason))

    def session(self, *args, **kwargs) -> FakeClientSession:
        return FakeClientSession(self, **kwargs)

    @property
    def last_call(self) -> RecordedCall:
        return self.calls[-1]


@pytest.fixture
def transport(monkeypatch):
    """Replace aiohttp's session and form classes for the duration of a test."""
    fake = FakeTransport()
    monkeypatch.setattr(aiohttp, "ClientSession", fake.session)
    monkeypatch.setattr(aiohttp, "FormData", RecordingForm)
    return fake


@pytest.fixture
def wire_transport(monkeypatch):
    """Fake session only; forms are real aiohttp.FormData and get rendered per request."""
    fake = FakeTransport()
    monkeypatch.setattr(aiohttp, "ClientSession", fake.session)
    return fake


def form_parts(payload) -> list[str]:
    """Content-Disposition header of every part of a rendered multipart form."""
    dispositions = []
    for item in payload:
        part = item[0] if isinstance(item, tuple) else item
        dispositions.append(part.headers["Content-Disposition"])
    return dispositions


# Minimal valid JPEG header bytes
MINIMAL_JPEG = bytes([
    0xFF, 0xD8, 0xFF, 0xE0, 0x00, 0x10, 0x4A, 0x46, 0x49, 0x46,
    0x00, 0x01, 0x01, 0x00, 0x00, 0x01, 0x00, 0x01, 0x00, 0x00,
    0xFF, 0xD9,
])


@pytest.fixture
def image_file(tmp_path):
    path = tmp_path / "cat.jpg"
    path.write_bytes(MINIMAL_JPEG)
    return path
