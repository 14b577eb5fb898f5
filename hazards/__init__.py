"""
Hazards domain package.

Public API:
- Domain models: HazardReport, HazardArea, HazardSet, Severity, AreaShape
- Session store: HazardRegistry
- Tunables: HazardPolicy, default_hazard_policy
- Errors: MalformedHazard
"""
from .models import AreaShape, HazardArea, HazardReport, HazardSet, LatLon, Route, Severity
from .geometry import MalformedHazard
from .policy import HazardPolicy, default_hazard_policy
from .registry import HazardRegistry

__all__ = ["AreaShape",
           "HazardArea",
           "HazardReport",
           "HazardSet",
           "LatLon",
           "Route",
           "Severity",
           "MalformedHazard",
           "HazardPolicy",
           "default_hazard_policy",
           "HazardRegistry",
           ]
