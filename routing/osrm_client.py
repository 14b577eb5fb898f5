#Purpose: The OSRM "adapter/client".
#Sole responsibility: talk to OSRM via HTTP and return normalized outputs.
#Encapsulates OSRM-specific details:
#coordinate formatting (lon,lat)
#URL construction (/route)
#timeouts and error handling
#parsing the GeoJSON geometry back into (lat, lon) route points
#It should not contain hazard rules or detour logic.


from dotenv import load_dotenv
import logging
import os
from typing import List, Tuple, Dict, Any, Optional
import requests

# Read OSRM base URL from environment
# Example in .env:
# OSRM_BASE_URL=http://router.project-osrm.org
load_dotenv()
BASE_URL = os.getenv("OSRM_BASE_URL", "http://router.project-osrm.org")
DEFAULT_TIMEOUT_S = float(os.getenv("OSRM_TIMEOUT_S", "10"))

logger = logging.getLogger(__name__)

# Internal coordinate type: (lat, lon)
LatLon = Tuple[float, float]
Route = Tuple[LatLon, ...]

class RoutingFailure(Exception):
    """OSRM could not produce a route (transport error, bad payload, or zero routes)."""
    pass

class OSRMClient:
    """
    OSRM Adapter / Client

    Sole responsibility:
    - Talk to OSRM via HTTP
    - Convert internal (lat, lon) → OSRM (lon,lat) and back
    - Return normalized outputs

    Holds no per-request state, so route() can be called from two threads at once
    (the detour planner does exactly that for its two legs).
    """
    def __init__(self, profile: str = "driving", timeout: float = DEFAULT_TIMEOUT_S, base_url: Optional[str] = None):
        self.base_url = (base_url or BASE_URL).rstrip("/")
        self.timeout = timeout #the time to wait for a response from OSRM before giving up
        self.profile = profile #the mode of transportation (driving, walking, cycling)

        if not self.base_url:
            raise ValueError("OSRM base URL not set. Please set OSRM_BASE_URL in the .env file.")

    #----------------
    # Internal helpers
    #----------------
    def format_coordinates(self, coords: List[LatLon]) -> str:
        """Convert list of (lat, lon) to OSRM format 'lon,lat;lon,lat;...'"""
        return ';'.join([f"{lon},{lat}" for lat, lon in coords])

    @staticmethod
    def parse_geometry(geometry: Dict[str, Any]) -> Route:
        """GeoJSON LineString coordinates [[lon, lat], ...] -> ((lat, lon), ...)"""
        return tuple((float(lat), float(lon)) for lon, lat in geometry["coordinates"])

    #----------------
    # Public methods
    #----------------
    def compute_route(self, coordinates: List[LatLon]) -> Dict[str, Any]:
        """
        Calls the OSRM /route endpoint with the given coordinates and
        returns the first route's distance, duration and full geometry.

        Returns:
            {
                "distance": float, # in meters
                "duration": float, # in seconds
                "geometry": Route, # ((lat, lon), ...)
            }

        Raises:
            RoutingFailure on transport errors, non-Ok responses or zero routes.
        """
        if len(coordinates) < 2:
            raise ValueError("At least two coordinates are required to compute a route.")

        url = f"{self.base_url}/route/v1/{self.profile}/{self.format_coordinates(coordinates)}"
        logger.debug(f"OSRM route request: {url}")

        try:
            response = requests.get(
                url,
                params={
                    "overview": "full", # we need the whole polyline for the hazard check
                    "geometries": "geojson",
                },
                timeout=self.timeout,
            )
            data = response.json() #OSRM returns a JSON response with routes, each containing distance, duration and geometry
        except requests.RequestException as e:
            raise RoutingFailure(f"OSRM request failed: {e}") from e
        except ValueError as e:
            raise RoutingFailure(f"OSRM returned invalid JSON (HTTP {response.status_code})") from e

        #validating OSRM response
        if data.get("code") != "Ok":
            raise RoutingFailure(f"OSRM error: {data.get('message', data.get('code', 'Unknown error'))}")

        routes = data.get("routes") or []
        if not routes:
            raise RoutingFailure("OSRM returned no routes.")

        route = routes[0] #take the first route (OSRM may return alternatives)

        try:
            geometry = self.parse_geometry(route["geometry"])
        except (KeyError, TypeError, ValueError) as e:
            raise RoutingFailure("OSRM route has no usable geometry.") from e

        #Normalize output to internal format
        return {
            "distance": route.get("distance"),
            "duration": route.get("duration"),
            "geometry": geometry,
        }

    def route(self, origin: LatLon, destination: LatLon) -> Optional[Route]:
        """
        Routing collaborator contract: driving path from origin to destination,
        or None if OSRM found nothing or the call failed.
        """
        try:
            geometry = self.compute_route([origin, destination])["geometry"]
        except RoutingFailure as e:
            logger.warning(f"No route {origin} -> {destination}: {e}")
            return None

        if len(geometry) < 2:
            logger.warning(f"OSRM route {origin} -> {destination} has fewer than 2 points")
            return None
        return geometry

    __call__ = route
