from __future__ import annotations

from dataclasses import dataclass

import requests

SCRAPINGBEE_URL = "https://app.scrapingbee.com/api/v1/"

_BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-CA,en-US;q=0.9,en;q=0.8",
}


class ScrapingBeeError(RuntimeError):
    pass


@dataclass(frozen=True)
class ScrapingBeeClient:
    api_key: str
    timeout_s: float = 30.0
    base_url: str = SCRAPINGBEE_URL

    def fetch(
        self,
        url: str,
        *,
        render_js: bool = True,
        country_code: str = "ca",
        params: dict[str, str] | None = None,
    ) -> str:
        """Fetch *url* through ScrapingBee and return the page HTML."""
        if not self.api_key:
            raise ScrapingBeeError("SCRAPINGBEE_API_KEY is not set")
        if not url:
            raise ScrapingBeeError("URL is required")

        query = {
            "api_key": self.api_key,
            "url": url,
            "render_js": "true" if render_js else "false",
            "country_code": country_code or "ca",
        }
        if params:
            query.update(params)

        try:
            resp = requests.get(
                self.base_url,
                params=query,
                headers=_BROWSER_HEADERS,
                timeout=self.timeout_s,
            )
        except requests.RequestException as e:
            raise ScrapingBeeError(f"ScrapingBee request failed: {e}") from e

        if resp.status_code >= 400:
            raise ScrapingBeeError(
                f"ScrapingBee request failed with status {resp.status_code}: {resp.text[:500]}"
            )
        return resp.text
