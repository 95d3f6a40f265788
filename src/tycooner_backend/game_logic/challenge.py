"""Timed unlock challenges driving progression across the map.

After the first unlock, and each time the current target is unlocked, the
controller picks a new locked country bordering the player's territory and
gives the player a fixed time to unlock it. Missing the deadline ends the
session; unlocking every country ends it in victory.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from tycooner_backend.game_logic.state import ChallengeState
from tycooner_backend.shared.enums import ChallengeStatus

if TYPE_CHECKING:
    from datetime import datetime, timedelta

    from tycooner_backend.game_logic.state import GameState
    from tycooner_backend.shared.rng import DeterministicRandomService


def challenge_status(state: GameState) -> ChallengeStatus:
    """Derive the controller state from *state*."""
    challenge = state.challenge
    if challenge.game_over:
        if state.countries and not state.locked_countries():
            return ChallengeStatus.VICTORY
        return ChallengeStatus.EXPIRED
    if challenge.target_country_id is None:
        return ChallengeStatus.NO_TARGET
    return ChallengeStatus.ACTIVE


def candidate_targets(state: GameState) -> tuple[str, ...]:
    """Return eligible challenge targets in dataset order.

    Locked countries bordering the unlocked territory are eligible. When that
    territory has no locked neighbor, every locked country is.
    """
    locked = state.locked_countries()
    adjacent: set[str] = set()
    for country_id in state.unlocked_countries:
        country = state.countries.get(country_id)
        if country is not None:
            adjacent.update(country.neighbors)
    neighbors = tuple(country_id for country_id in locked if country_id in adjacent)
    return neighbors or locked


def start_next_challenge(
    state: GameState,
    rng: DeterministicRandomService,
    now: datetime,
    duration: timedelta,
) -> GameState:
    """Return *state* with a freshly selected target, or in victory when none is left."""
    candidates = candidate_targets(state)
    if not candidates:
        return state.with_challenge(
            ChallengeState(target_country_id=None, deadline=None, game_over=True)
        )
    target = rng.choice(candidates)
    return state.with_challenge(
        ChallengeState(
            target_country_id=target,
            deadline=now + duration,
            game_over=False,
        )
    )


def after_unlock(
    state: GameState,
    rng: DeterministicRandomService,
    now: datetime,
    duration: timedelta,
) -> GameState:
    """Advance the challenge after a country was appended to the unlocked list."""
    challenge = state.challenge
    if challenge.game_over:
        return state
    first_unlock = (
        len(state.unlocked_countries) == 1 and challenge.target_country_id is None
    )
    completed = challenge.target_country_id is not None and state.is_unlocked(
        challenge.target_country_id
    )
    if first_unlock or completed:
        return start_next_challenge(state, rng, now, duration)
    return state


def check_deadline(
    state: GameState,
    rng: DeterministicRandomService,
    now: datetime,
    duration: timedelta,
) -> GameState:
    """Periodic check: expire a missed deadline or roll over a completed target."""
    challenge = state.challenge
    if challenge.game_over:
        return state
    if challenge.deadline is not None and now > challenge.deadline:
        return state.with_challenge(challenge.model_copy(update={"game_over": True}))
    if challenge.target_country_id is not None and state.is_unlocked(
        challenge.target_country_id
    ):
        return start_next_challenge(state, rng, now, duration)
    return state


__all__ = [
    "after_unlock",
    "candidate_targets",
    "challenge_status",
    "check_deadline",
    "start_next_challenge",
]
