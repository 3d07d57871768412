"""Outbound HTTP collaborator used by Integration blocks."""

import logging
from collections.abc import Mapping
from typing import Any, Protocol

import httpx

from chatflow.config.settings import HttpSettings
from chatflow.core.errors import IntegrationError

logger = logging.getLogger(__name__)


class HttpClient(Protocol):
    """Issues one request and returns the decoded response (DIP)."""

    async def request(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: Any | None = None,
    ) -> Any:
        """Return the JSON-decoded body, or the raw text if it is not JSON."""
        ...


def decode_response(response: httpx.Response) -> Any:
    """JSON body when it parses, raw text otherwise."""
    try:
        return response.json()
    except ValueError:
        return response.text


class HttpxClient:
    """HttpClient backed by ``httpx.AsyncClient``.

    A fresh client is opened per request so that independent runners never
    share connections.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        follow_redirects: bool = True,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self.follow_redirects = follow_redirects
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: HttpSettings) -> "HttpxClient":
        return cls(timeout=settings.timeout, follow_redirects=settings.follow_redirects)

    async def request(
        self,
        url: str,
        method: str,
        headers: Mapping[str, str],
        body: Any | None = None,
    ) -> Any:
        """Send the request.

        Raises:
            IntegrationError: On invalid URLs, transport errors and timeouts.
                Non-2xx responses are not errors: their body is returned.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=self.follow_redirects,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=dict(headers),
                    json=body,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise IntegrationError(f"{method} {url} failed: {e}") from e

        if response.is_error:
            logger.warning(f"{method} {url} - Status: {response.status_code}")
        else:
            logger.info(f"{method} {url} - Status: {response.status_code}")

        return decode_response(response)
