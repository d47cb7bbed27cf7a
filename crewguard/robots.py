"""robots.txt policy parsing and rendering.

The grammar is handled best-effort: anything that is not a ``user-agent``,
``allow`` or ``disallow`` line is skipped, so parsing never fails on odd
input. Rules are grouped by the literal agent token; a later
``User-agent`` line naming an existing token keeps appending to it.
"""
from __future__ import annotations

import logging

from .fetcher import Fetcher
from .models import Finding, FindingKind, RobotsRuleSet

logger = logging.getLogger(__name__)

WILDCARD_AGENT = "*"


def parse_robots_txt(text: str) -> dict[str, RobotsRuleSet]:
    buckets: dict[str, dict[str, list[str]]] = {}
    current: str | None = None

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith("#"):
            continue
        key, sep, value = trimmed.partition(":")
        if not sep:
            continue
        key = key.strip().lower()
        value = value.strip()

        if key == "user-agent":
            current = value
            buckets.setdefault(current, {"allow": [], "disallow": []})
        elif key in ("allow", "disallow"):
            if current is None:
                continue
            buckets[current][key].append(value)

    return {
        agent: RobotsRuleSet(allow=tuple(rules["allow"]), disallow=tuple(rules["disallow"]))
        for agent, rules in buckets.items()
    }


def select_rule_set(rules: dict[str, RobotsRuleSet], user_agent: str = WILDCARD_AGENT) -> RobotsRuleSet | None:
    if user_agent in rules:
        return rules[user_agent]
    return rules.get(WILDCARD_AGENT)


def render_rule_set(rule_set: RobotsRuleSet | None) -> list[Finding]:
    if rule_set is None:
        return [Finding.of(FindingKind.ROBOTS_NO_RULES)]

    out = [Finding.of(FindingKind.ROBOTS_PARSED)]
    if rule_set.disallow:
        out.append(Finding.of(FindingKind.ROBOTS_DISALLOWED_HEADER))
        out.extend(Finding.of(FindingKind.ROBOTS_DISALLOWED_PATH, path=p or "/") for p in rule_set.disallow)
    else:
        out.append(Finding.of(FindingKind.ROBOTS_NO_DISALLOWED))
    if rule_set.allow:
        out.append(Finding.of(FindingKind.ROBOTS_ALLOWED_HEADER))
        out.extend(Finding.of(FindingKind.ROBOTS_ALLOWED_PATH, path=p) for p in rule_set.allow)
    return out


def check_robots(fetcher: Fetcher, base_url: str, user_agent: str = WILDCARD_AGENT) -> list[Finding]:
    robots_url = f"{base_url}/robots.txt"
    res = fetcher.fetch(robots_url, timeout_ms=fetcher.settings.robots_timeout_ms)
    if res is None or res.status_code != 200:
        status = res.status_code if res is not None else None
        logger.info("robots.txt unavailable url=%s status=%s", robots_url, status)
        return [Finding.of(FindingKind.ROBOTS_UNREACHABLE)]
    if res.text is None:
        return [Finding.of(FindingKind.ROBOTS_PARSE_FAILED, reason=f"unexpected content type {res.content_type}")]

    rules = parse_robots_txt(res.text)
    return render_rule_set(select_rule_set(rules, user_agent))
