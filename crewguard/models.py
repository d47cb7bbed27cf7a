from __future__ import annotations

from enum import Enum, IntEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, computed_field

Verdict = Literal["allowed", "partial", "blocked"]


class Severity(IntEnum):
    ALLOWED = 1
    PARTIAL = 2
    BLOCKED = 3

    def join(self, other: "Severity") -> "Severity":
        return self if self >= other else other

    @property
    def verdict(self) -> Verdict:
        return _VERDICTS[self]


_VERDICTS: dict[Severity, Verdict] = {
    Severity.ALLOWED: "allowed",
    Severity.PARTIAL: "partial",
    Severity.BLOCKED: "blocked",
}


class FindingKind(str, Enum):
    UNREACHABLE = "unreachable"
    STATUS_CODE = "status_code"
    SITE_ACCESSIBLE = "site_accessible"
    ABNORMAL_STATUS = "abnormal_status"
    REDIRECT = "redirect"
    ANTI_BOT_HEADER = "anti_bot_header"
    JS_CHALLENGE = "js_challenge"
    META_ROBOTS = "meta_robots"
    X_ROBOTS_TAG = "x_robots_tag"
    TERMS_OF_SERVICE = "terms_of_service"
    COPYRIGHT = "copyright"
    PHONE_NUMBER = "phone_number"
    EMAIL_ADDRESS = "email_address"
    ID_NUMBER = "id_number"
    ROBOTS_UNREACHABLE = "robots_unreachable"
    ROBOTS_PARSE_FAILED = "robots_parse_failed"
    ROBOTS_PARSED = "robots_parsed"
    ROBOTS_DISALLOWED_HEADER = "robots_disallowed_header"
    ROBOTS_DISALLOWED_PATH = "robots_disallowed_path"
    ROBOTS_NO_DISALLOWED = "robots_no_disallowed"
    ROBOTS_ALLOWED_HEADER = "robots_allowed_header"
    ROBOTS_ALLOWED_PATH = "robots_allowed_path"
    ROBOTS_NO_RULES = "robots_no_rules"
    API_ENDPOINT = "api_endpoint"
    NO_API_ENDPOINTS = "no_api_endpoints"


# Presentation only: nothing downstream matches on these strings.
_TEMPLATES: dict[FindingKind, str] = {
    FindingKind.UNREACHABLE: "❌ Site unreachable",
    FindingKind.STATUS_CODE: "📶 Status Code: {status}",
    FindingKind.SITE_ACCESSIBLE: "✅ Site is accessible",
    FindingKind.ABNORMAL_STATUS: "⚠️ Abnormal status code",
    FindingKind.REDIRECT: "⚠️ Redirect detected ({location})",
    FindingKind.ANTI_BOT_HEADER: "⚠️ {vendor} protection detected",
    FindingKind.JS_CHALLENGE: "⚠️ JavaScript challenge detected (browser emulation may be required)",
    FindingKind.META_ROBOTS: '⚠️ Found <meta name="robots">: "{content}"',
    FindingKind.X_ROBOTS_TAG: '⚠️ Found X-Robots-Tag header: "{value}"',
    FindingKind.TERMS_OF_SERVICE: "⚠️ 'Terms of Service' mention found",
    FindingKind.COPYRIGHT: "⚠️ Copyright information found",
    FindingKind.PHONE_NUMBER: "🔒 Potential phone number pattern found",
    FindingKind.EMAIL_ADDRESS: "🔒 Email address pattern found",
    FindingKind.ID_NUMBER: "🔒 Potential ID number detected",
    FindingKind.ROBOTS_UNREACHABLE: "⚠️ Failed to access robots.txt",
    FindingKind.ROBOTS_PARSE_FAILED: "❌ Failed to parse robots.txt: {reason}",
    FindingKind.ROBOTS_PARSED: "✅ robots.txt file found and successfully parsed",
    FindingKind.ROBOTS_DISALLOWED_HEADER: "❌ Disallowed paths:",
    FindingKind.ROBOTS_DISALLOWED_PATH: "   - {path}",
    FindingKind.ROBOTS_NO_DISALLOWED: "✅ No disallowed paths found",
    FindingKind.ROBOTS_ALLOWED_HEADER: "✅ Allowed paths:",
    FindingKind.ROBOTS_ALLOWED_PATH: "   - {path}",
    FindingKind.ROBOTS_NO_RULES: "⚠️ No robots.txt rules found for this user-agent",
    FindingKind.API_ENDPOINT: "⚠️ Potential API endpoint detected: {url} (status {status})",
    FindingKind.NO_API_ENDPOINTS: "✅ No common API paths found",
}


class Finding(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: FindingKind
    detail: dict[str, str | int] = Field(default_factory=dict)

    @classmethod
    def of(cls, kind: FindingKind, **detail: str | int) -> "Finding":
        return cls(kind=kind, detail=detail)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def text(self) -> str:
        return _TEMPLATES[self.kind].format(**self.detail)


class RobotsRuleSet(BaseModel):
    model_config = ConfigDict(frozen=True)

    allow: tuple[str, ...] = ()
    disallow: tuple[str, ...] = ()


class RiskAssessment(BaseModel):
    model_config = ConfigDict(frozen=True)

    legal: tuple[str, ...] = ()
    social: tuple[str, ...] = ()
    technical: tuple[str, ...] = ()


class CheckRequest(BaseModel):
    url: str = Field(..., min_length=1)
    # Agent token used to select the robots.txt rule set; "*" when omitted.
    user_agent: str | None = Field(None, min_length=1)


class CrewGuardReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    base_url: str
    verdict: Verdict
    findings: tuple[Finding, ...]
    legal_risk: tuple[str, ...] = ()
    social_risk: tuple[str, ...] = ()
    technical_risk: tuple[str, ...] = ()
    suggestions: tuple[str, ...] = ()

    @computed_field  # type: ignore[prop-decorator]
    @property
    def report(self) -> list[str]:
        return [f.text for f in self.findings]
