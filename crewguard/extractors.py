"""Signal extractors.

Each function inspects a single artifact (page text or response headers) and
returns zero or more findings. They share no state and may run in any order.
Matching is heuristic: false positives are accepted, nothing is validated.
"""
from __future__ import annotations

import re
from typing import Mapping

from .models import Finding, FindingKind

_CHALLENGE_MARKERS = ("cloudflare", "js challenge", "checking your browser")
_CAPTCHA_SCRIPT_RE = re.compile(r"<script>[^<]+captcha", re.IGNORECASE)

_META_TAG_RE = re.compile(r"<meta\b([^>]*)>", re.IGNORECASE)
_ATTR_RE = re.compile(r"([a-zA-Z_:][-a-zA-Z0-9_:.]*)\s*=\s*(\"([^\"]*)\"|'([^']*)'|([^\s\"'>/]+(?:/[^\s\"'>/]+)*))")

_PHONE_RE = re.compile(r"\b\d{3,4}[- ]?\d{7,8}\b")
_EMAIL_RE = re.compile(r"[a-z0-9_.+-]+@[a-z0-9-]+\.[a-z]{2,}")
_ID_NUMBER_RE = re.compile(r"\b\d{15,18}\b")


def detect_js_challenge(text: str | None) -> list[Finding]:
    if not text:
        return []
    lower = text.lower()
    hit = (
        any(marker in lower for marker in _CHALLENGE_MARKERS)
        or ("setTimeout" in text and "location.href" in text)
        or bool(_CAPTCHA_SCRIPT_RE.search(text))
    )
    return [Finding.of(FindingKind.JS_CHALLENGE)] if hit else []


def _tag_attributes(raw: str) -> dict[str, str]:
    attrs: dict[str, str] = {}
    for m in _ATTR_RE.finditer(raw):
        name = m.group(1).lower()
        value = next((g for g in m.group(3, 4, 5) if g is not None), "")
        attrs.setdefault(name, value)
    return attrs


def detect_meta_robots(html: str | None) -> list[Finding]:
    if not html:
        return []
    for m in _META_TAG_RE.finditer(html):
        attrs = _tag_attributes(m.group(1))
        if attrs.get("name", "").strip().lower() != "robots":
            continue
        content = attrs.get("content", "").strip()
        if content:
            return [Finding.of(FindingKind.META_ROBOTS, content=content)]
        # First robots tag wins, even when its content is empty.
        return []
    return []


def detect_x_robots_tag(headers: Mapping[str, str]) -> list[Finding]:
    value = None
    for k, v in headers.items():
        if k.lower() == "x-robots-tag":
            value = v
            break
    if value:
        return [Finding.of(FindingKind.X_ROBOTS_TAG, value=value)]
    return []


def detect_copyright_terms(html: str | None) -> list[Finding]:
    if not html:
        return []
    lower = html.lower()
    matched: list[Finding] = []
    if "terms of service" in lower or "使用条款" in lower:
        matched.append(Finding.of(FindingKind.TERMS_OF_SERVICE))
    if "copyright" in lower or "©" in lower or "版权所有" in lower:
        matched.append(Finding.of(FindingKind.COPYRIGHT))
    return matched


def detect_privacy_sensitive_content(html: str | None) -> list[Finding]:
    if not html:
        return []
    lower = html.lower()
    flags: list[Finding] = []
    if _PHONE_RE.search(lower):
        flags.append(Finding.of(FindingKind.PHONE_NUMBER))
    if _EMAIL_RE.search(lower):
        flags.append(Finding.of(FindingKind.EMAIL_ADDRESS))
    if _ID_NUMBER_RE.search(lower):
        flags.append(Finding.of(FindingKind.ID_NUMBER))
    return flags
