"""
Geo-IP enrichment of traceroute hop addresses.
"""

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

GEO_FIELDS = ("city", "country", "lat", "lon", "org")


class GeoLookupError(Exception):
    """A single address could not be geolocated."""


class GeoIPClient:
    """Async client for an ip-api.com compatible lookup service."""

    def __init__(
        self,
        url_template: str = "http://ip-api.com/json/{ip}",
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.url_template = url_template
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def __aenter__(self) -> "GeoIPClient":
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def lookup(self, ip: str) -> Dict[str, Any]:
        """
        Geolocate one address.

        Args:
            ip: IPv4 address

        Returns:
            Mapping with city, country, lat, lon and org (missing ones as None)

        Raises:
            GeoLookupError: On transport errors, bad responses or a "fail" status
        """
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout))
            self._owns_client = True

        try:
            response = await self._client.get(self.url_template.format(ip=ip))
            response.raise_for_status()
            payload = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise GeoLookupError(f"Lookup for {ip} failed: {e}") from e

        if not isinstance(payload, dict):
            raise GeoLookupError(f"Lookup for {ip} returned {type(payload).__name__}")
        if payload.get("status") == "fail":
            # Private and reserved ranges land here
            raise GeoLookupError(f"Lookup for {ip} failed: {payload.get('message', 'unknown')}")

        return {field: payload.get(field) for field in GEO_FIELDS}
