from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_API_PATHS = ("/api/", "/v1/", "/rest/", "/data/", "/feed/")


class CrewGuardSettings(BaseModel):
    """Immutable knobs handed to the fetcher and prober.

    The engine never reads the environment on its own; wrappers build an
    instance with :meth:`from_env` and pass it down.
    """

    model_config = ConfigDict(frozen=True)

    user_agent: str = Field("CrewGuard/1.0 (+https://example.com/bot)", min_length=1)
    page_timeout_ms: int = Field(10000, ge=100, le=60000)
    robots_timeout_ms: int = Field(5000, ge=100, le=60000)
    probe_timeout_ms: int = Field(5000, ge=100, le=60000)
    max_redirects: int = Field(5, ge=0, le=20)
    # Textual bodies are truncated to this many KiB before inspection.
    max_body_kb: int = Field(512, ge=1, le=8192)
    api_paths: tuple[str, ...] = DEFAULT_API_PATHS
    api_evidence_statuses: frozenset[int] = frozenset({200, 401, 403})
    probe_workers: int = Field(5, ge=1, le=16)
    robots_user_agent: str = "*"

    @property
    def headers(self) -> dict[str, str]:
        return {"user-agent": self.user_agent}

    @classmethod
    def from_env(cls) -> "CrewGuardSettings":
        values: dict[str, object] = {}
        env_map = {
            "CREWGUARD_USER_AGENT": "user_agent",
            "CREWGUARD_PAGE_TIMEOUT_MS": "page_timeout_ms",
            "CREWGUARD_ROBOTS_TIMEOUT_MS": "robots_timeout_ms",
            "CREWGUARD_PROBE_TIMEOUT_MS": "probe_timeout_ms",
            "CREWGUARD_MAX_REDIRECTS": "max_redirects",
            "CREWGUARD_MAX_BODY_KB": "max_body_kb",
            "CREWGUARD_ROBOTS_USER_AGENT": "robots_user_agent",
        }
        for env_key, field_name in env_map.items():
            raw = os.getenv(env_key, "").strip()
            if raw:
                values[field_name] = raw
        return cls.model_validate(values)
