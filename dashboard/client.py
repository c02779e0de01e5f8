"""HTTP client for the use-of-force API."""

from __future__ import annotations

import logging

import httpx

from api.models import AvailableYears, CaseWrapper
from shared.config import get_settings

logger = logging.getLogger(__name__)


class CaseClient:
    """Loads the year catalog and per-year case records.

    Errors are not handled here: any ``httpx.HTTPError`` reaches the caller.
    """

    def __init__(
        self,
        api_url: str | None = None,
        *,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.api_url = (api_url or settings.api_url).rstrip("/")
        self._client = httpx.Client(
            timeout=timeout if timeout is not None else settings.request_timeout,
            follow_redirects=True,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> CaseClient:
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _get_json(self, path: str):
        resp = self._client.get(f"{self.api_url}{path}")
        resp.raise_for_status()
        return resp.json()

    def load_available_years(self) -> list[str]:
        """Years with data, in the order the API lists them."""
        payload = AvailableYears.model_validate(self._get_json("/year"))
        logger.info("available years: %s", payload.available_years)
        return payload.available_years

    def load_cases_by_year(self, year: str | int) -> list[CaseWrapper]:
        cases = [CaseWrapper.model_validate(item) for item in self._get_json(f"/year/{year}")]
        logger.info("loaded %d cases for %s", len(cases), year)
        return cases
