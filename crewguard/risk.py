"""Risk categorisation and canned advice.

Rules match on finding kinds. A rule contributes its message once no matter
how many findings trigger it, so each category is at most as long as its
rule list.
"""
from __future__ import annotations

from typing import Iterable

from .models import Finding, FindingKind, RiskAssessment

K = FindingKind

_ANTI_BOT = frozenset({K.ANTI_BOT_HEADER, K.JS_CHALLENGE})

LEGAL_RULES: tuple[tuple[frozenset[FindingKind], str], ...] = (
    (frozenset({K.TERMS_OF_SERVICE}), "⚠️ Legal: The site may explicitly prohibit crawling in its terms."),
    (frozenset({K.COPYRIGHT}), "⚠️ Legal: Copyrighted content detected; scraping may lead to infringement."),
    (
        frozenset({K.EMAIL_ADDRESS, K.PHONE_NUMBER, K.ID_NUMBER}),
        "⚠️ Legal: Sensitive personal data detected, scraping may violate privacy laws.",
    ),
)

SOCIAL_RULES: tuple[tuple[frozenset[FindingKind], str], ...] = (
    (
        frozenset({K.ROBOTS_DISALLOWED_HEADER, K.ROBOTS_DISALLOWED_PATH}),
        "⚠️ Social: Disallowed paths in robots.txt indicate site owner's crawling restrictions.",
    ),
    (_ANTI_BOT, "⚠️ Social: Presence of anti-bot measures suggests site tries to protect user experience."),
    (frozenset({K.PHONE_NUMBER, K.EMAIL_ADDRESS}), "⚠️ Social: Collecting personal info impacts user privacy and trust."),
)

TECHNICAL_RULES: tuple[tuple[frozenset[FindingKind], str], ...] = (
    (_ANTI_BOT, "⚠️ Technical: Advanced anti-bot protection may cause crawler failure."),
    (frozenset({K.ROBOTS_UNREACHABLE}), "⚠️ Technical: Unable to verify crawling rules, may increase risk."),
    (frozenset({K.REDIRECT}), "⚠️ Technical: Redirects may cause crawler instability or unexpected target."),
)


def _apply(rules: tuple[tuple[frozenset[FindingKind], str], ...], present: set[FindingKind]) -> tuple[str, ...]:
    return tuple(message for kinds, message in rules if kinds & present)


def classify_risks(findings: Iterable[Finding]) -> RiskAssessment:
    present = {f.kind for f in findings}
    return RiskAssessment(
        legal=_apply(LEGAL_RULES, present),
        social=_apply(SOCIAL_RULES, present),
        technical=_apply(TECHNICAL_RULES, present),
    )


def generate_suggestions(risks: RiskAssessment) -> tuple[str, ...]:
    sug: list[str] = []
    if risks.legal:
        sug.append("📌 Suggestion: Consult legal counsel and avoid crawling prohibited or sensitive content.")
    else:
        sug.append("📌 Suggestion: Review site terms regularly to ensure ongoing compliance.")
    if risks.social:
        sug.append("📌 Suggestion: Control crawl rate, anonymize personal data, and respect user privacy.")
    else:
        sug.append("📌 Suggestion: Maintain ethical standards and transparent data use.")
    if risks.technical:
        sug.append("📌 Suggestion: Enhance crawler with JS rendering support and robust error handling.")
    else:
        sug.append("📌 Suggestion: Monitor crawler health and keep request handling resilient to site changes.")
    sug.append("📌 Suggestion: Always set appropriate User-Agent and obey robots.txt rules.")
    return tuple(sug)
