"""HTTP utilities for fetching listing and article pages."""

from __future__ import annotations

import logging

import httpx

from .config import GeneratorConfig

LOGGER = logging.getLogger(__name__)


class HttpFetchError(RuntimeError):
    """Raised when a page cannot be fetched."""


class HttpFetcher:
    """Lightweight HTTP client identifying itself with the site's user agent."""

    def __init__(
        self,
        config: GeneratorConfig,
        *,
        client: httpx.Client | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._client = client or self._build_client()
        self._owns_client = client is None

    def _build_client(self) -> httpx.Client:
        kwargs: dict[str, object] = {
            "timeout": self._config.crawl.request_timeout,
            "headers": {"User-Agent": self._config.site.user_agent},
            "follow_redirects": True,
        }
        if self._transport:
            kwargs["transport"] = self._transport
        return httpx.Client(**kwargs)

    def fetch_html(self, url: str) -> str:
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise HttpFetchError(str(exc)) from exc

        if response.status_code != httpx.codes.OK:
            raise HttpFetchError(f"Unexpected status {response.status_code} for {url}")

        content_type = response.headers.get("content-type")
        if content_type and "html" not in content_type:
            raise HttpFetchError(f"Unsupported content type '{content_type}' for {url}")

        LOGGER.debug("Fetched %s (%d bytes)", url, len(response.content))
        return response.text

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *_exc_info) -> None:
        self.close()
