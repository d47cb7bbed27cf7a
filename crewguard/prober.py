from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

from .fetcher import Fetcher
from .models import Finding, FindingKind
from .settings import CrewGuardSettings

logger = logging.getLogger(__name__)


class ApiProber:
    """Speculative GETs against well-known API path suffixes.

    Probes run concurrently, each bounded by its own timeout. A failed probe
    is dropped without affecting the others, and findings always come back in
    the configured path order.
    """

    def __init__(self, fetcher: Fetcher, settings: CrewGuardSettings | None = None):
        self.fetcher = fetcher
        self.settings = settings or fetcher.settings

    def _probe_one(self, url: str) -> Finding | None:
        res = self.fetcher.fetch(url, timeout_ms=self.settings.probe_timeout_ms)
        if res is None:
            logger.debug("probe skipped url=%s", url)
            return None
        if res.status_code in self.settings.api_evidence_statuses:
            return Finding.of(FindingKind.API_ENDPOINT, url=res.final_url, status=res.status_code)
        return None

    def probe(self, base_url: str) -> list[Finding]:
        urls = [f"{base_url}{path}" for path in self.settings.api_paths]
        if not urls:
            return []
        workers = min(self.settings.probe_workers, len(urls))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            # map() yields in submission order regardless of completion order.
            results = list(pool.map(self._probe_one, urls))
        return [r for r in results if r is not None]
