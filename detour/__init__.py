#Expose the high-level pipeline pieces:
#Intersection check (is the route blocked?)
#Detour planning (single bypass around the nearest hazard)
#RouteEvaluator orchestrator (the "one call" entry point)

from .intersection import route_intersects_hazards
from .planner import plan_detour, select_nearest_hazard, bypass_waypoint, NearestHazard
from .evaluator import evaluate_route, RouteEvaluator, RouteEvaluation, RouteOutcome, OutcomeStatus

__all__ = [
    "route_intersects_hazards",
    "plan_detour",
    "select_nearest_hazard",
    "bypass_waypoint",
    "NearestHazard",
    "evaluate_route",
    "RouteEvaluator",
    "RouteEvaluation",
    "RouteOutcome",
    "OutcomeStatus",
]
