from __future__ import annotations

from typing import Any
from urllib.parse import quote

import httpx
import structlog

from provlock.core.errors import RegistryError

logger = structlog.get_logger()

DEFAULT_REGISTRY_URL = "https://registry.npmjs.org"
DEFAULT_USER_AGENT = "provlock/0.1.0"


class NpmRegistryClient:
    """Async client for an npm-compatible package registry.

    Lookups are single-shot: a failed request is reported, never retried.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_REGISTRY_URL,
        *,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._user_agent = user_agent

    def _headers(self) -> dict[str, str]:
        return {"Accept": "application/json", "User-Agent": self._user_agent}

    async def get(self, package: str, version: str) -> str | None:
        """Return the published package name for ``package@version``.

        ``None`` means the registry has no such package/version. Transport
        and non-404 HTTP failures raise ``RegistryError``.
        """
        path = f"/{quote(package, safe='@/')}/{quote(version, safe='')}"
        data = await self._request("GET", path)
        if data is None:
            return None
        if isinstance(data, dict) and data.get("name"):
            return data["name"]
        return package

    async def _request(self, method: str, path: str) -> dict[str, Any] | None:
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(method, url, headers=self._headers())
                if response.status_code == 404:
                    logger.debug("registry_not_found", url=url)
                    return None
                response.raise_for_status()
                return response.json() if response.content else {}
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "registry_http_error",
                status=exc.response.status_code,
                method=method,
                url=url,
            )
            raise RegistryError(str(exc), details={"url": url}) from exc
        except httpx.HTTPError as exc:
            logger.warning("registry_network_error", method=method, url=url, error=str(exc))
            raise RegistryError(str(exc), details={"url": url}) from exc
        except ValueError as exc:
            logger.warning("registry_invalid_payload", url=url, error=str(exc))
            raise RegistryError(f"Invalid registry response: {exc}", details={"url": url}) from exc
