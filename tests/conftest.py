"""Shared fixtures: an in-memory website served through httpx.MockTransport."""
from __future__ import annotations

import httpx
import pytest

CLEAN_HTML = "<html><head><title>Hello</title></head><body><p>Welcome to our garden.</p></body></html>"
CLEAN_ROBOTS = "User-agent: *\nAllow: /\n"


def html(body: str, status: int = 200, **headers: str) -> httpx.Response:
    return httpx.Response(status, text=body, headers={"content-type": "text/html; charset=utf-8", **headers})


def plain(body: str, status: int = 200) -> httpx.Response:
    return httpx.Response(status, text=body, headers={"content-type": "text/plain; charset=utf-8"})


def site_transport(routes: dict[str, object]) -> httpx.MockTransport:
    """Serve ``routes`` keyed by path.

    A value may be an ``httpx.Response``, a callable returning one, or an
    exception class to raise. Unknown paths answer 404.
    """

    def handler(request: httpx.Request) -> httpx.Response:
        route = routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        if isinstance(route, type) and issubclass(route, Exception):
            raise route("simulated failure", request=request)
        if callable(route):
            return route(request)
        # Fresh copy each time; a Response body can only be consumed once.
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    return httpx.MockTransport(handler)


@pytest.fixture
def clean_routes() -> dict[str, object]:
    return {"/": html(CLEAN_HTML), "/robots.txt": plain(CLEAN_ROBOTS)}


def finding_kinds(report) -> list:
    return [f.kind for f in report.findings]
