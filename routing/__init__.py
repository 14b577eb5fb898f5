#Marks routing as a package.
#Re-exports the HTTP collaborators (OSRMClient, NominatimGeocoder) so other modules
#import from routing without knowing internal file names.
#No business logic.

from .osrm_client import OSRMClient, RoutingFailure
from .geocoding import NominatimGeocoder, LookupFailure

__all__ = [
           "OSRMClient",
           "RoutingFailure",
           "NominatimGeocoder",
           "LookupFailure",
           ]
