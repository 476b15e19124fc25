"""HTTP client with JSON content negotiation, session headers and deadlines."""

from __future__ import annotations

import time
from dataclasses import dataclass, replace
from types import TracebackType
from typing import Any

import requests

from aurum_heat.common.constants import AUTH_TOKEN_HEADER, USER_AGENT
from aurum_heat.common.errors import TransportError


@dataclass(frozen=True)
class TimeoutConfig:
    connect: float = 10.0
    read: float = 30.0


@dataclass(frozen=True)
class TransportConfig:
    """Opaque TLS/transport settings handed to ``requests`` unmodified."""

    verify: bool | str = True
    cert: str | tuple[str, str] | None = None
    proxies: dict[str, str] | None = None


class Deadline:
    """Wall-clock budget shared by every call of one collection cycle."""

    def __init__(self, seconds: float | None) -> None:
        self.seconds = seconds
        self.expires_at = time.monotonic() + seconds if seconds else None

    def remaining(self) -> float | None:
        if self.expires_at is None:
            return None
        return self.expires_at - time.monotonic()

    def cap(self, timeout: TimeoutConfig) -> TimeoutConfig:
        remaining = self.remaining()
        if remaining is None:
            return timeout
        if remaining <= 0:
            raise TransportError(f"Cycle deadline of {self.seconds}s exceeded")
        return replace(
            timeout,
            connect=min(timeout.connect, remaining),
            read=min(timeout.read, remaining),
        )


class HttpClient:
    def __init__(
        self,
        *,
        timeout: TimeoutConfig | None = None,
        transport: TransportConfig | None = None,
    ) -> None:
        self.timeout = timeout or TimeoutConfig()
        self.transport = transport or TransportConfig()
        self.session = requests.Session()
        self.session.verify = self.transport.verify
        if self.transport.cert is not None:
            self.session.cert = self.transport.cert
        if self.transport.proxies:
            self.session.proxies.update(self.transport.proxies)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> "HttpClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def _headers(self, token: str | None, headers: dict[str, str] | None) -> dict[str, str]:
        out = {
            "User-Agent": USER_AGENT,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if token is not None:
            out[AUTH_TOKEN_HEADER] = token
        if headers:
            out.update(headers)
        return out

    def _send(
        self,
        method: str,
        url: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
        deadline: Deadline | None = None,
    ) -> requests.Response:
        req_timeout = timeout or self.timeout
        if deadline is not None:
            req_timeout = deadline.cap(req_timeout)

        try:
            return self.session.request(
                method=method,
                url=url,
                params=params,
                json=json_body,
                headers=self._headers(token, headers),
                timeout=(req_timeout.connect, req_timeout.read),
            )
        except requests.RequestException as exc:
            raise TransportError(f"{method} {url} failed: {exc.__class__.__name__}") from exc

    def post_json(
        self,
        url: str,
        payload: Any,
        *,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
        deadline: Deadline | None = None,
    ) -> requests.Response:
        """POST a JSON body and hand back the raw response; status is left to the caller."""
        return self._send(
            "POST",
            url,
            json_body=payload,
            headers=headers,
            timeout=timeout,
            deadline=deadline,
        )

    def get_json(
        self,
        url: str,
        *,
        token: str | None = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: TimeoutConfig | None = None,
        deadline: Deadline | None = None,
    ) -> Any:
        response = self._send(
            "GET",
            url,
            token=token,
            params=params,
            headers=headers,
            timeout=timeout,
            deadline=deadline,
        )
        status = response.status_code
        if status >= 400:
            raise TransportError(f"HTTP status {status} from {url}", status_code=status)

        try:
            return response.json()
        except ValueError as exc:
            raise TransportError(f"Invalid JSON payload from {url}") from exc
