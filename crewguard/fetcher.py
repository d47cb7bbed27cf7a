from __future__ import annotations

import logging
from dataclasses import dataclass, field

import httpx

from .settings import CrewGuardSettings

logger = logging.getLogger(__name__)

_BINARY_HINTS = ("json", "image/", "audio/", "video/", "font/", "octet-stream", "zip", "pdf", "protobuf")


@dataclass(frozen=True)
class FetchResult:
    requested_url: str
    final_url: str
    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    content_type: str | None = None
    # Decoded body; None when the payload is not text.
    text: str | None = None

    @property
    def redirected(self) -> bool:
        return not same_location(self.requested_url, self.final_url)

    @property
    def server(self) -> str:
        return self.headers.get("server", "")

    @property
    def x_robots_tag(self) -> str | None:
        return self.headers.get("x-robots-tag")


def same_location(a: str, b: str) -> bool:
    # "https://host" and "https://host/" name the same resource.
    return a.rstrip("/") == b.rstrip("/")


def _is_textual(content_type: str | None) -> bool:
    if not content_type:
        return True
    ct = content_type.lower()
    if ct.startswith("text/") or "html" in ct or "xml" in ct:
        return True
    return not any(hint in ct for hint in _BINARY_HINTS)


def _decode_body(res: httpx.Response, limit_bytes: int) -> str | None:
    content_type = res.headers.get("content-type")
    if not _is_textual(content_type):
        return None
    body = res.content[:limit_bytes]
    try:
        return body.decode(res.encoding or "utf-8", errors="replace")
    except LookupError:
        return body.decode("utf-8", errors="replace")


class Fetcher:
    """GET with a fixed identity; every status is a response, network errors are ``None``."""

    def __init__(self, settings: CrewGuardSettings | None = None, transport: httpx.BaseTransport | None = None):
        self.settings = settings or CrewGuardSettings()
        self._transport = transport

    def _client(self, timeout_ms: int, follow_redirects: bool, max_redirects: int) -> httpx.Client:
        kwargs: dict[str, object] = {
            "timeout": timeout_ms / 1000,
            "follow_redirects": follow_redirects,
            "max_redirects": max_redirects,
            "headers": self.settings.headers,
        }
        if self._transport is not None:
            kwargs["transport"] = self._transport
        return httpx.Client(**kwargs)

    def fetch(
        self,
        url: str,
        *,
        timeout_ms: int | None = None,
        follow_redirects: bool = True,
        max_redirects: int | None = None,
    ) -> FetchResult | None:
        timeout_ms = timeout_ms or self.settings.page_timeout_ms
        if max_redirects is None:
            max_redirects = self.settings.max_redirects
        try:
            with self._client(timeout_ms, follow_redirects, max_redirects) as client:
                res = client.get(url)
                return FetchResult(
                    requested_url=url,
                    final_url=str(res.url),
                    status_code=res.status_code,
                    headers={k.lower(): v for k, v in res.headers.items()},
                    content_type=res.headers.get("content-type"),
                    text=_decode_body(res, self.settings.max_body_kb * 1024),
                )
        except httpx.HTTPError as exc:
            logger.warning("fetch failed url=%s error=%s", url, exc.__class__.__name__)
            return None
