"""
Purpose: Orchestrator / evaluation pipeline (the "glue").
What it does:
Takes two addresses, geocodes them, fetches the primary route, checks it against a
snapshot of the session's hazards and, if blocked, asks the planner for a detour.

Failures at the network boundary turn into a status + user-facing message; nothing
here raises to the caller.

If a newer calculation starts before an older one finishes, the older result is
marked STALE and never replaces the current one.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Sequence

from hazards.models import HazardSet, LatLon, Route
from hazards.policy import HazardPolicy, default_hazard_policy
from hazards.registry import HazardRegistry

from .intersection import route_intersects_hazards
from .planner import RouteRequester, plan_detour

logger = logging.getLogger(__name__)

Geocoder = Callable[[str], Optional[LatLon]]

MISSING_INPUT_MESSAGE = "Please enter both start and end points."
LOOKUP_FAILED_MESSAGE = "Could not find one or both locations. Please try again."
ROUTING_FAILED_MESSAGE = "Could not find a route."
HAZARD_CHECK_FAILED_MESSAGE = "Route found, but it could not be checked for hazards."
HAZARD_WITH_ALTERNATE_MESSAGE = (
    "Warning: This route passes through a reported hazard zone. An alternative route has been provided."
)
HAZARD_WITHOUT_ALTERNATE_MESSAGE = (
    "Warning: This route passes through a reported hazard zone. No alternative route could be found."
)


class OutcomeStatus(str, Enum):
    OK = "ok"
    MISSING_INPUT = "missing_input"
    LOOKUP_FAILED = "lookup_failed"
    ROUTING_FAILED = "routing_failed"
    HAZARD_CHECK_FAILED = "hazard_check_failed"
    STALE = "stale"


@dataclass(frozen=True)
class RouteEvaluation:
    """
    What the display layer draws: the route, whether it is blocked, and the detour if any.
    """
    route: Route
    hazard_flag: bool
    alternate: Optional[Route] = None


@dataclass(frozen=True)
class RouteOutcome:
    status: OutcomeStatus
    request_id: int
    start: Optional[LatLon] = None
    end: Optional[LatLon] = None
    evaluation: Optional[RouteEvaluation] = None
    message: Optional[str] = None

    @property
    def hazard_flag(self) -> bool:
        return bool(self.evaluation and self.evaluation.hazard_flag)

    @property
    def alternate(self) -> Optional[Route]:
        return self.evaluation.alternate if self.evaluation else None


def evaluate_route(
    route: Sequence[LatLon],
    origin: LatLon,
    hazards: HazardSet,
    route_requester: RouteRequester,
    policy: Optional[HazardPolicy] = None,
) -> RouteEvaluation:
    """
    Intersection check, then a detour if the route is blocked.
    The hazard flag stays True even when no detour could be built.
    """
    policy = policy or default_hazard_policy()
    route = tuple(tuple(point) for point in route)

    if not route_intersects_hazards(route, hazards, policy):
        return RouteEvaluation(route=route, hazard_flag=False)

    try:
        alternate = plan_detour(route, origin, hazards, route_requester, policy)
    except Exception as e:
        # the route is still blocked, only the detour is lost
        logger.error(f"Detour planning failed: {e}")
        alternate = None
    return RouteEvaluation(route=route, hazard_flag=True, alternate=alternate)


class RouteEvaluator:
    """
    Session-level entry point: addresses in, RouteOutcome out.

    geocoder and router are the external collaborators (NominatimGeocoder / OSRMClient
    in production, fakes in tests). The registry is only read through snapshot().
    """

    def __init__(
        self,
        geocoder: Geocoder,
        router: RouteRequester,
        registry: Optional[HazardRegistry] = None,
        policy: Optional[HazardPolicy] = None,
        on_result: Optional[Callable[[RouteOutcome], None]] = None,
    ):
        self.geocoder = geocoder
        self.router = router
        self.registry = registry or HazardRegistry()
        self.policy = policy or default_hazard_policy()
        self.on_result = on_result

        self._lock = threading.Lock()
        # held across storing current and calling on_result, reentrant so on_result may calculate again
        self._publish_lock = threading.RLock()
        self._latest_request = 0
        self.current: Optional[RouteOutcome] = None

    def _next_request_id(self) -> int:
        with self._lock:
            self._latest_request += 1
            return self._latest_request

    def _publish(self, outcome: RouteOutcome) -> RouteOutcome:
        """
        Stores the outcome as current and hands it to on_result, unless a newer
        request has started since. Both happen under the publish lock, so an older
        result can never reach on_result after a newer one.
        """
        with self._publish_lock:
            with self._lock:
                is_latest = outcome.request_id == self._latest_request
            if is_latest:
                self.current = outcome
                if self.on_result:
                    self.on_result(outcome)
                return outcome

        logger.info(f"Discarding stale route result for request {outcome.request_id}")
        return RouteOutcome(
            status=OutcomeStatus.STALE,
            request_id=outcome.request_id,
            start=outcome.start,
            end=outcome.end,
            evaluation=outcome.evaluation,
            message=outcome.message,
        )

    def _geocode(self, address: str) -> Optional[LatLon]:
        try:
            return self.geocoder(address)
        except Exception as e:
            logger.warning(f"Error geocoding address {address!r}: {e}")
            return None

    def _primary_route(self, start: LatLon, end: LatLon) -> Optional[Route]:
        try:
            route = self.router(start, end)
        except Exception as e:
            logger.warning(f"Error fetching route {start} -> {end}: {e}")
            return None
        if not route or len(route) < 2:
            return None
        return tuple(tuple(point) for point in route)

    def calculate(self, start_address: str, end_address: str) -> RouteOutcome:
        """
        Full pipeline for one "Calculate Route" click.
        """
        request_id = self._next_request_id()
        # hazards drawn after this point belong to the next calculation
        hazards = self.registry.snapshot()

        if not start_address or not start_address.strip() or not end_address or not end_address.strip():
            return self._publish(RouteOutcome(
                status=OutcomeStatus.MISSING_INPUT,
                request_id=request_id,
                message=MISSING_INPUT_MESSAGE,
            ))

        start = self._geocode(start_address)
        end = self._geocode(end_address)
        if start is None or end is None:
            return self._publish(RouteOutcome(
                status=OutcomeStatus.LOOKUP_FAILED,
                request_id=request_id,
                start=start,
                end=end,
                message=LOOKUP_FAILED_MESSAGE,
            ))

        route = self._primary_route(start, end)
        if route is None:
            return self._publish(RouteOutcome(
                status=OutcomeStatus.ROUTING_FAILED,
                request_id=request_id,
                start=start,
                end=end,
                message=ROUTING_FAILED_MESSAGE,
            ))

        try:
            evaluation = evaluate_route(route, start, hazards, self.router, self.policy)
        except Exception as e:
            logger.error(f"Route request {request_id}: hazard check failed: {e}")
            return self._publish(RouteOutcome(
                status=OutcomeStatus.HAZARD_CHECK_FAILED,
                request_id=request_id,
                start=start,
                end=end,
                evaluation=RouteEvaluation(route=route, hazard_flag=False),
                message=HAZARD_CHECK_FAILED_MESSAGE,
            ))

        message = None
        if evaluation.hazard_flag:
            message = HAZARD_WITH_ALTERNATE_MESSAGE if evaluation.alternate else HAZARD_WITHOUT_ALTERNATE_MESSAGE

        logger.info(
            f"Route request {request_id}: {len(route)} points, hazard={evaluation.hazard_flag}, "
            f"alternate={'yes' if evaluation.alternate else 'no'}"
        )
        return self._publish(RouteOutcome(
            status=OutcomeStatus.OK,
            request_id=request_id,
            start=start,
            end=end,
            evaluation=evaluation,
            message=message,
        ))
