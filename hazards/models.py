"""
Purpose: Domain models for the Hazards capability.
What it does:
- Defines core data structures:
- HazardReport (id, point location, severity, timestamp)
- HazardArea (id, shape RECTANGLE/POLYGON, rings, timestamp)
- HazardSet (snapshot of every report and area at evaluation time)

Defines enums/constants:
- Severity = Low | Medium | High
- AreaShape = rectangle | polygon

Coordinates are always (lat, lon). Only hazards/geometry.py and the OSRM client flip them.

Rule: No HTTP calls, no geometry logic. Models only.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Sequence, Tuple
import uuid

LatLon = Tuple[float, float]

# ordered origin -> destination, at least 2 points
Route = Tuple[LatLon, ...]

Ring = Tuple[LatLon, ...]


class Severity(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def parse(cls, value: str | Severity) -> Severity:
        """Accepts 'high', 'HIGH', 'High' or a Severity."""
        if isinstance(value, Severity):
            return value
        for severity in cls:
            if severity.value.lower() == str(value).strip().lower():
                return severity
        raise ValueError(f"Unknown severity: {value!r} (expected Low, Medium or High)")


class AreaShape(str, Enum):
    RECTANGLE = "rectangle"
    POLYGON = "polygon"


@dataclass(frozen=True)
class HazardReport:
    """
    A user report of a hazard at a single point.
    """
    id: str
    location: LatLon
    severity: Severity
    created_at: datetime = field(default_factory=datetime.utcnow)

    @classmethod
    def new(cls, lat: float, lon: float, severity: str | Severity) -> HazardReport:
        return cls(
            id=str(uuid.uuid4()),
            location=(float(lat), float(lon)),
            severity=Severity.parse(severity),
        )


@dataclass(frozen=True)
class HazardArea:
    """
    A user-drawn hazard zone.
    rings[0] is the outer boundary, any further rings are holes.
    """
    id: str
    shape: AreaShape
    rings: Tuple[Ring, ...]
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def outer_ring(self) -> Ring:
        return self.rings[0] if self.rings else ()

    @classmethod
    def new(cls, shape: str | AreaShape, rings: Sequence[Sequence[LatLon]]) -> HazardArea:
        return cls(
            id=str(uuid.uuid4()),
            shape=AreaShape(shape),
            rings=tuple(tuple((float(lat), float(lon)) for lat, lon in ring) for ring in rings),
        )

    @classmethod
    def rectangle(cls, south: float, west: float, north: float, east: float) -> HazardArea:
        """Builds a rectangle area from its bounds."""
        ring = ((south, west), (north, west), (north, east), (south, east))
        return cls.new(AreaShape.RECTANGLE, [ring])


@dataclass(frozen=True)
class HazardSet:
    """
    Immutable snapshot of all hazards at evaluation time.
    The checker and the planner only ever see one of these, never live state.
    """
    reports: Tuple[HazardReport, ...] = ()
    areas: Tuple[HazardArea, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.reports and not self.areas

    def __len__(self) -> int:
        return len(self.reports) + len(self.areas)

    def with_report(self, report: HazardReport) -> HazardSet:
        return HazardSet(reports=self.reports + (report,), areas=self.areas)

    def with_area(self, area: HazardArea) -> HazardSet:
        return HazardSet(reports=self.reports, areas=self.areas + (area,))
