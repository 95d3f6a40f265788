"""HTTP endpoints driving the single game session."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Query, status
from fastapi.responses import JSONResponse

from tycooner_backend.api.dependencies import get_coordinator
from tycooner_backend.api.models import (
    ChallengeCheckResponse,
    DayTickResponse,
    GameActionRequest,
    GameStateResponse,
    NotificationsResponse,
    PriceLedgerResponse,
    SpeedRequest,
    TransactionErrorResponse,
    TransactionResponse,
    UnlockCostResponse,
)
from tycooner_backend.game_logic.orchestration import (
    GameCoordinator,  # noqa: TC001
)
from tycooner_backend.shared.enums import FacilityType

router = APIRouter(prefix="/game", tags=["game"])


def _state_response(coordinator: GameCoordinator) -> GameStateResponse:
    return GameStateResponse(
        state=coordinator.state,
        challenge_status=coordinator.challenge_status(),
        next_unlock_cost=coordinator.next_unlock_cost(),
    )


@router.get("/state", response_model=GameStateResponse)
def read_state(
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> GameStateResponse:
    """Return the current snapshot."""

    return _state_response(coordinator)


@router.get("/prices", response_model=PriceLedgerResponse)
def read_prices(
    facility_type: FacilityType = Query(default=FacilityType.FARM),  # noqa: B008
    descending: bool = Query(default=False),  # noqa: B008
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> PriceLedgerResponse:
    """Compare the local price of one facility type's good across countries."""

    return PriceLedgerResponse(
        facility_type=facility_type,
        descending=descending,
        entries=coordinator.price_ledger(facility_type, descending=descending),
    )


@router.get("/unlock-cost", response_model=UnlockCostResponse)
def read_unlock_cost(
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> UnlockCostResponse:
    return UnlockCostResponse(
        unlocked_count=len(coordinator.state.unlocked_countries),
        cost=coordinator.next_unlock_cost(),
    )


@router.get("/notifications", response_model=NotificationsResponse)
def read_notifications(
    limit: int = Query(default=50, ge=0),  # noqa: B008
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> NotificationsResponse:
    """Return the newest journal entries, oldest first."""

    return NotificationsResponse(events=list(coordinator.notifications(limit)))


@router.post(
    "/actions",
    response_model=TransactionResponse,
    responses={status.HTTP_409_CONFLICT: {"model": TransactionErrorResponse}},
)
def perform_action(
    action: GameActionRequest = Body(...),  # noqa: B008
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> TransactionResponse | JSONResponse:
    """Run one player action; rejections answer with 409."""

    result = action.apply(coordinator)
    if result.rejected:
        error = TransactionErrorResponse(
            action=result.action,
            reason=result.reason,
            message=result.message or "",
            detail=result.detail,
        )
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=error.model_dump(mode="json"),
        )
    return TransactionResponse(
        action=result.action,
        outcome=result.outcome,
        message=result.message,
        state=result.state,
    )


@router.post("/tick", response_model=DayTickResponse)
def advance_day(
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> DayTickResponse:
    """Simulate one day immediately."""

    result = coordinator.advance_day()
    state = coordinator.state
    if result is None:
        return DayTickResponse(advanced=False, day_index=state.current_day, state=state)
    return DayTickResponse(
        advanced=True,
        day_index=result.day_index,
        summaries=[phase.summary for phase in result.phase_results if phase.summary],
        state=state,
    )


@router.post("/challenge/check", response_model=ChallengeCheckResponse)
def check_challenge(
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> ChallengeCheckResponse:
    status_value = coordinator.check_challenge()
    state = coordinator.state
    return ChallengeCheckResponse(
        status=status_value,
        target_country_id=state.challenge.target_country_id,
        state=state,
    )


@router.post("/restart", response_model=GameStateResponse)
def restart(
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> GameStateResponse:
    """Discard the session and start again."""

    coordinator.restart()
    return _state_response(coordinator)


@router.post("/speed", response_model=GameStateResponse)
def set_speed(
    payload: SpeedRequest,
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> GameStateResponse:
    """Change the day tick interval."""

    if payload.speed is not None:
        coordinator.set_speed(payload.speed)
    elif payload.interval_ms is not None:
        coordinator.set_tick_interval(payload.interval_ms)
    return _state_response(coordinator)


@router.post("/pause", response_model=GameStateResponse)
def pause(
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> GameStateResponse:
    coordinator.pause()
    return _state_response(coordinator)


@router.post("/resume", response_model=GameStateResponse)
def resume(
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> GameStateResponse:
    coordinator.resume()
    return _state_response(coordinator)


@router.post("/facility-warning/dismiss", response_model=GameStateResponse)
def dismiss_facility_warning(
    coordinator: GameCoordinator = Depends(get_coordinator),  # noqa: B008
) -> GameStateResponse:
    coordinator.dismiss_facility_warning()
    return _state_response(coordinator)


__all__ = ["router"]
