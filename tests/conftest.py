from __future__ import annotations

import json
from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"
TOKEN = "80d2255d-d4fb-4d50-a3d5-b86ae7e6aae8"
USER_ID = "abcuserid"


def read_fixture(name: str):
    return json.loads((FIXTURES / name).read_text(encoding="utf-8"))


class FakeResponse:
    def __init__(self, status_code: int, payload=None, *, headers=None, cookies=None, raises_json: bool = False):
        self.status_code = status_code
        self._payload = payload
        self._raises_json = raises_json
        self.headers = headers or {}
        self.cookies = cookies or {}

    def json(self):
        if self._raises_json:
            raise ValueError("bad json")
        return self._payload


class FakeService:
    """Stands in for ``requests.Session.request`` and answers like the account service."""

    def __init__(self):
        self.calls: list[dict] = []
        self.auth_status = 200
        self.auth_payload = read_fixture("sample_authentication_response.json")
        self.sources_payload = read_fixture("sample_sources_response.json")
        self.actuals_payload = read_fixture("sample_actuals_response.json")
        self.overrides: dict[str, FakeResponse] = {}

    def paths(self) -> list[str]:
        return [call["url"].split("/user/v2", 1)[1] for call in self.calls]

    def __call__(self, **kwargs):
        self.calls.append(kwargs)
        url = kwargs["url"]
        for suffix, response in self.overrides.items():
            if url.endswith(suffix):
                return response
        if url.endswith("/user/v2/authentication"):
            if self.auth_status != 200:
                return FakeResponse(self.auth_status, read_fixture("sample_authentication_failed_response.json"))
            return FakeResponse(200, self.auth_payload, headers={"Auth-Token": TOKEN})
        if url.endswith(f"/user/v2/users/{USER_ID}/sources"):
            return FakeResponse(200, self.sources_payload)
        if url.endswith(f"/user/v2/users/{USER_ID}/actuals"):
            return FakeResponse(200, self.actuals_payload)
        return FakeResponse(404, {"message": "Not Found"})


@pytest.fixture
def fake_service() -> FakeService:
    return FakeService()


@pytest.fixture
def load_fixture():
    return read_fixture
