from __future__ import annotations

import ipaddress
import logging
import re
from urllib.parse import urlparse

import httpx

from .extractors import (
    detect_copyright_terms,
    detect_js_challenge,
    detect_meta_robots,
    detect_privacy_sensitive_content,
    detect_x_robots_tag,
)
from .fetcher import Fetcher
from .models import CrewGuardReport, Finding, FindingKind, Severity
from .prober import ApiProber
from .risk import classify_risks, generate_suggestions
from .robots import check_robots
from .settings import CrewGuardSettings

logger = logging.getLogger(__name__)

_DEFAULT_PORTS = {"http": 80, "https": 443}

_HOST_RE = re.compile(r"^[a-z0-9_-]+(?:\.[a-z0-9_-]+)*\.?$")

_ANTI_BOT_VENDOR = "cloudflare"

_ROBOTS_RESTRICTIVE = frozenset({
    FindingKind.ROBOTS_DISALLOWED_HEADER,
    FindingKind.ROBOTS_DISALLOWED_PATH,
    FindingKind.ROBOTS_UNREACHABLE,
    FindingKind.ROBOTS_PARSE_FAILED,
})


def _ascii_host(host: str, raw: str) -> str:
    # Mirrors what goes on the wire: IDN hosts as punycode, IPv6 in brackets.
    if ":" in host:
        try:
            return f"[{ipaddress.IPv6Address(host).compressed}]"
        except ValueError as exc:
            raise ValueError(f"Invalid host in URL: {raw!r}") from exc
    try:
        ascii_host = httpx.URL(f"http://{host}/").raw_host.decode("ascii").lower()
    except (httpx.InvalidURL, UnicodeError) as exc:
        raise ValueError(f"Invalid host in URL: {raw!r}") from exc
    if not _HOST_RE.match(ascii_host):
        raise ValueError(f"Invalid host in URL: {raw!r}")
    return ascii_host


def base_url_of(raw: str) -> str:
    """Return ``scheme://host[:port]`` for an absolute http(s) URL.

    The host comes back in its ASCII (punycode) form. Raises ValueError for
    anything that is not a usable http(s) URL.
    """
    value = (raw or "").strip()
    if not value:
        raise ValueError("Please provide a URL.")
    parsed = urlparse(value)
    scheme = parsed.scheme.lower()
    if scheme not in _DEFAULT_PORTS:
        raise ValueError(f"Not an absolute http(s) URL: {raw!r}")
    host = parsed.hostname
    if not host:
        raise ValueError(f"URL has no host: {raw!r}")
    port = parsed.port  # raises ValueError on a malformed port
    host = _ascii_host(host, raw)
    if port is not None and port != _DEFAULT_PORTS[scheme]:
        return f"{scheme}://{host}:{port}"
    return f"{scheme}://{host}"


def check_site(
    url: str,
    settings: CrewGuardSettings | None = None,
    *,
    transport: httpx.BaseTransport | None = None,
    robots_user_agent: str | None = None,
) -> CrewGuardReport:
    settings = settings or CrewGuardSettings()
    base_url = base_url_of(url)
    fetcher = Fetcher(settings, transport=transport)

    findings: list[Finding] = []
    severity = Severity.ALLOWED

    response = fetcher.fetch(base_url, timeout_ms=settings.page_timeout_ms)
    if response is None:
        logger.info("assessment url=%s verdict=blocked reason=unreachable", base_url)
        return CrewGuardReport(
            url=url,
            base_url=base_url,
            verdict=Severity.BLOCKED.verdict,
            findings=(Finding.of(FindingKind.UNREACHABLE),),
        )

    findings.append(Finding.of(FindingKind.STATUS_CODE, status=response.status_code))
    if response.status_code == 200:
        findings.append(Finding.of(FindingKind.SITE_ACCESSIBLE))
    else:
        findings.append(Finding.of(FindingKind.ABNORMAL_STATUS))
        severity = severity.join(Severity.PARTIAL)

    if response.redirected:
        findings.append(Finding.of(FindingKind.REDIRECT, location=response.final_url))
        severity = severity.join(Severity.PARTIAL)

    if _ANTI_BOT_VENDOR in response.server.lower():
        findings.append(Finding.of(FindingKind.ANTI_BOT_HEADER, vendor="Cloudflare"))
        severity = severity.join(Severity.PARTIAL)

    challenge = detect_js_challenge(response.text)
    if challenge:
        findings.extend(challenge)
        severity = severity.join(Severity.BLOCKED)

    html = response.text
    if html:
        findings.extend(detect_meta_robots(html))
        findings.extend(detect_copyright_terms(html))
        findings.extend(detect_privacy_sensitive_content(html))
    findings.extend(detect_x_robots_tag(response.headers))

    robots_findings = check_robots(fetcher, base_url, robots_user_agent or settings.robots_user_agent)
    findings.extend(robots_findings)
    if any(f.kind in _ROBOTS_RESTRICTIVE for f in robots_findings):
        severity = severity.join(Severity.PARTIAL)

    api_findings = ApiProber(fetcher, settings).probe(base_url)
    if api_findings:
        findings.extend(api_findings)
        severity = severity.join(Severity.PARTIAL)
    else:
        findings.append(Finding.of(FindingKind.NO_API_ENDPOINTS))

    risks = classify_risks(findings)
    suggestions = generate_suggestions(risks)

    logger.info(
        "assessment url=%s verdict=%s findings=%d legal=%d social=%d technical=%d",
        base_url, severity.verdict, len(findings), len(risks.legal), len(risks.social), len(risks.technical),
    )
    return CrewGuardReport(
        url=url,
        base_url=base_url,
        verdict=severity.verdict,
        findings=tuple(findings),
        legal_risk=risks.legal,
        social_risk=risks.social,
        technical_risk=risks.technical,
        suggestions=suggestions,
    )
