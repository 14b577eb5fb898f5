"""
Purpose: Central configuration for hazard geometry and detour planning.
What it does:

Stores all tunable thresholds used by the intersection check and the detour planner:

REPORT_BUFFER_M = 100

BUFFER_SEGMENTS = 64

DETOUR_OFFSET_DEG = 0.01

Rule: No logic here—just parameters so you can tune without rewriting code.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class HazardPolicy:
    """
    Central configuration for hazard evaluation.

    Notes:
    - a point report is treated as a circle of report_buffer_m around its location.
    - the bypass waypoint is the detour anchor shifted by detour_offset_deg
      on both latitude and longitude (roughly 1.1 km north and ~1 km east near the equator).
    """

    # --- Point report buffer ---
    # Radius of the circle drawn around every hazard report.
    report_buffer_m: float = 100.0

    # Vertices used to approximate the circle.
    buffer_segments: int = 64

    # --- Detour heuristic ---
    detour_offset_deg: float = 0.01

    # How long to wait for both detour legs. None = whatever the transport gives us.
    detour_leg_timeout_s: Optional[float] = None

    def validate(self) -> None:
        """
        Basic sanity checks.
        """
        if self.report_buffer_m <= 0:
            raise ValueError("report_buffer_m must be > 0")

        if self.buffer_segments < 8:
            raise ValueError("buffer_segments must be >= 8")

        if self.detour_offset_deg == 0:
            raise ValueError("detour_offset_deg must be non-zero")

        if self.detour_leg_timeout_s is not None and self.detour_leg_timeout_s <= 0:
            raise ValueError("detour_leg_timeout_s must be > 0 when set")


def default_hazard_policy() -> HazardPolicy:
    """
    Convenience factory for the default policy.
    """
    p = HazardPolicy()
    p.validate()
    return p
