#Purpose: The Nominatim geocoding adapter.
#Sole responsibility: turn a free-text address into a single (lat, lon).
#Encapsulates Nominatim-specific details:
#/search URL + query params (format=json, limit=1)
#the User-Agent header Nominatim's usage policy requires
#string lat/lon parsing
#It should not contain routing or hazard logic.

from dotenv import load_dotenv
import logging
import os
from typing import Optional, Tuple
import requests

# Example in .env:
# NOMINATIM_BASE_URL=https://nominatim.openstreetmap.org
# NOMINATIM_USER_AGENT=hazard-route/0.1 (ops@example.com)
load_dotenv()
NOMINATIM_BASE_URL = os.getenv("NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org")
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "hazard-route/0.1")

logger = logging.getLogger(__name__)

LatLon = Tuple[float, float]


class LookupFailure(Exception):
    """The address could not be resolved (no match or transport failure)."""
    pass


class NominatimGeocoder:
    """
    Geocoding collaborator backed by Nominatim /search.
    """

    def __init__(self, timeout: float = 10, base_url: Optional[str] = None, user_agent: Optional[str] = None):
        self.base_url = (base_url or NOMINATIM_BASE_URL).rstrip("/")
        self.user_agent = user_agent or NOMINATIM_USER_AGENT
        self.timeout = timeout

    def lookup(self, address: str) -> LatLon:
        """
        Best match for address as (lat, lon).

        Raises:
            LookupFailure if nothing matched or the request failed.
        """
        if not address or not address.strip():
            raise LookupFailure("Empty address.")

        try:
            response = requests.get(
                f"{self.base_url}/search",
                params={"format": "json", "q": address, "limit": 1},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            response.raise_for_status()
            results = response.json()
        except requests.RequestException as e:
            raise LookupFailure(f"Geocoding request failed for {address!r}: {e}") from e
        except ValueError as e:
            raise LookupFailure(f"Geocoder returned invalid JSON for {address!r}") from e

        if not results:
            raise LookupFailure(f"No match for {address!r}")

        best = results[0]
        try:
            return (float(best["lat"]), float(best["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise LookupFailure(f"Geocoder result for {address!r} has no coordinates") from e

    def geocode(self, address: str) -> Optional[LatLon]:
        """
        Geocoding collaborator contract: (lat, lon) or None.
        """
        try:
            return self.lookup(address)
        except LookupFailure as e:
            logger.warning(f"Error geocoding address: {e}")
            return None

    __call__ = geocode
