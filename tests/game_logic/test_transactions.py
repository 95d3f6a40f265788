from __future__ import annotations

from datetime import UTC, datetime, timedelta
from decimal import Decimal

from tycooner_backend.game_logic.configuration import EconomyConfiguration
from tycooner_backend.game_logic.logistics import build_road as make_road
from tycooner_backend.game_logic.production import new_facility
from tycooner_backend.game_logic.state import (
    ChallengeState,
    CountryProduction,
    GameState,
    Warehouse,
)
from tycooner_backend.game_logic.transactions import (
    RejectionReason,
    TransactionOutcome,
    build_facility,
    build_factory,
    build_road,
    build_warehouse,
    create_truck_line,
    destroy_facility,
    dismiss_facility_warning,
    sell_good,
    sell_production_output,
    transfer_goods,
    unlock_country,
    update_truck_line,
    upgrade_factory,
    upgrade_warehouse,
)
from tycooner_backend.shared.enums import FacilityType
from tycooner_backend.shared.rng import DeterministicRandomService
from tycooner_backend.shared.value_objects import Money

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=UTC)


def with_money(state: GameState, amount: int) -> GameState:
    return state.model_copy(update={"money": Money.of(amount)})


def unlock(
    state: GameState, configuration: EconomyConfiguration, country_id: str
) -> GameState:
    result = unlock_country(
        state,
        configuration,
        country_id,
        rng=DeterministicRandomService(7),
        now=NOW,
    )
    assert result.applied, result.message
    return result.state


def with_stock(
    state: GameState, country_id: str, storage: dict[str, int], capacity: int = 60
) -> GameState:
    return state.with_warehouse(
        Warehouse(country_id=country_id, capacity=capacity, storage=storage)
    )


def connected(state: GameState) -> GameState:
    """Alpha and Beta unlocked, stocked and joined by a road."""
    linked = state.with_unlocked("AA").with_unlocked("BB")
    linked = with_stock(linked, "AA", {"grain": 50})
    linked = with_stock(linked, "BB", {"meat": 50})
    return linked.with_road(
        make_road(linked.countries["AA"], linked.countries["BB"])
    )


def test_build_warehouse_debits_and_second_call_is_noop(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    unlocked = unlock(state, configuration, "AA")

    first = build_warehouse(unlocked, configuration, "AA")
    second = build_warehouse(first.state, configuration, "AA")

    assert first.outcome is TransactionOutcome.APPLIED
    assert first.state.money == Money.of(5000)
    warehouse = first.state.warehouses["AA"]
    assert (warehouse.level, warehouse.capacity, warehouse.storage) == (1, 60, {})
    assert second.outcome is TransactionOutcome.NOOP
    assert second.state == first.state


def test_build_warehouse_requires_unlocked_country(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    result = build_warehouse(state, configuration, "AA")

    assert result.rejected
    assert result.reason is RejectionReason.PRECONDITION_FAILED
    assert result.state is state


def test_rejected_transaction_leaves_state_untouched(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    poor = with_money(unlock(state, configuration, "AA"), 4000)

    result = build_warehouse(poor, configuration, "AA")

    assert result.reason is RejectionReason.INSUFFICIENT_FUNDS
    assert result.state is poor
    assert result.detail == {"required": "5000.00", "available": "4000.00"}


def test_upgrade_warehouse_price_grows_with_level(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    ready = with_money(with_stock(state.with_unlocked("AA"), "AA", {}), 10_000)

    first = upgrade_warehouse(ready, configuration, "AA")
    second = upgrade_warehouse(first.state, configuration, "AA")
    third = upgrade_warehouse(second.state, configuration, "AA")

    assert first.state.warehouses["AA"].capacity == 90
    assert second.state.warehouses["AA"].level == 3
    assert second.state.money == Money.of(1000)
    assert third.reason is RejectionReason.INSUFFICIENT_FUNDS


def test_upgrade_warehouse_requires_warehouse(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    result = upgrade_warehouse(state, configuration, "AA")
    assert result.reason is RejectionReason.PRECONDITION_FAILED


def test_build_facility_respects_population_limit(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    ready = with_money(with_stock(state.with_unlocked("AA"), "AA", {}), 100_000)

    first = build_facility(ready, configuration, "AA", FacilityType.FARM)
    second = build_facility(first.state, configuration, "AA", FacilityType.FARM)
    third = build_facility(second.state, configuration, "AA", FacilityType.FARM)

    assert first.applied
    assert first.state.money == Money.of(97_000)
    assert second.state.production["AA"].count(FacilityType.FARM) == 2
    assert third.reason is RejectionReason.CAPACITY_EXCEEDED
    assert third.detail == {"limit": 2}


def test_build_facility_needs_warehouse(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    result = build_facility(
        state.with_unlocked("AA"), configuration, "AA", FacilityType.RANCH
    )
    assert result.reason is RejectionReason.PRECONDITION_FAILED


def test_destroy_facility_removes_one_instance(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    production = (
        CountryProduction(country_id="AA")
        .add(new_facility(FacilityType.RANCH))
        .add(new_facility(FacilityType.RANCH))
    )
    built = state.with_production(production)

    destroyed = destroy_facility(built, configuration, "AA", FacilityType.RANCH)
    missing = destroy_facility(built, configuration, "AA", FacilityType.FARM)

    assert destroyed.state.production["AA"].count(FacilityType.RANCH) == 1
    assert destroyed.state.money == built.money
    assert missing.reason is RejectionReason.PRECONDITION_FAILED


def test_first_unlock_is_free_and_starts_challenge(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    unlocked = unlock(state, configuration, "AA")

    assert unlocked.unlocked_countries == ("AA",)
    assert unlocked.money == state.money
    assert unlocked.challenge.target_country_id == "BB"
    assert unlocked.challenge.deadline == NOW + timedelta(seconds=300)


def test_expanding_without_facilities_raises_facility_warning(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    unlocked = unlock(state, configuration, "AA")

    result = unlock_country(
        unlocked,
        configuration,
        "BB",
        rng=DeterministicRandomService(7),
        now=NOW,
    )

    assert result.reason is RejectionReason.FACILITY_WARNING
    assert result.state.facility_warning
    assert result.state.unlocked_countries == ("AA",)
    assert result.state.money == unlocked.money
    assert not dismiss_facility_warning(result.state).facility_warning


def test_unlocking_the_target_rolls_the_challenge_forward(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    unlocked = unlock(state, configuration, "AA")
    equipped = with_money(
        unlocked.with_production(
            CountryProduction(country_id="AA").add(new_facility(FacilityType.FARM))
        ),
        20_000,
    )

    expanded = unlock(equipped, configuration, "BB")

    assert expanded.money == Money.of(12_500)
    assert expanded.unlocked_countries == ("AA", "BB")
    assert expanded.challenge.target_country_id == "CC"


def test_unlock_noop_and_unknown(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    unlocked = unlock(state, configuration, "AA")
    rng = DeterministicRandomService(7)

    again = unlock_country(unlocked, configuration, "AA", rng=rng, now=NOW)
    unknown = unlock_country(unlocked, configuration, "ZZ", rng=rng, now=NOW)

    assert again.outcome is TransactionOutcome.NOOP
    assert again.state is unlocked
    assert unknown.reason is RejectionReason.PRECONDITION_FAILED


def test_unlock_cost_is_charged_from_second_country(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    equipped = with_money(
        unlock(state, configuration, "AA").with_production(
            CountryProduction(country_id="AA").add(new_facility(FacilityType.FARM))
        ),
        7499,
    )

    result = unlock_country(
        equipped, configuration, "BB", rng=DeterministicRandomService(7), now=NOW
    )
    free = unlock_country(
        equipped,
        configuration,
        "BB",
        rng=DeterministicRandomService(7),
        now=NOW,
        free=True,
    )

    assert result.reason is RejectionReason.INSUFFICIENT_FUNDS
    assert free.applied
    assert free.state.money == Money.of(7499)


def test_build_road_between_unlocked_neighbors(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    both = state.with_unlocked("AA").with_unlocked("BB")

    result = build_road(both, configuration, "AA", "BB")
    duplicate = build_road(result.state, configuration, "BB", "AA")

    road = result.state.roads["road-AA-BB"]
    assert road.distance == 5
    assert road.level == 1
    assert result.state.money == Money.of(8000)
    assert duplicate.reason is RejectionReason.PRECONDITION_FAILED


def test_build_road_rejects_locked_or_distant_countries(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    partial = state.with_unlocked("AA")

    locked = build_road(partial, configuration, "AA", "BB")
    distant = build_road(partial.with_unlocked("CC"), configuration, "AA", "CC")

    assert locked.reason is RejectionReason.PRECONDITION_FAILED
    assert distant.reason is RejectionReason.PRECONDITION_FAILED
    assert "neighboring" in (distant.message or "")


def test_transfer_is_clamped_to_destination_space(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    ready = with_stock(connected(state), "BB", {"meat": 50})

    result = transfer_goods(ready, configuration, "AA", "BB", "grain", 30)

    assert result.applied
    assert result.state.warehouses["AA"].quantity("grain") == 40
    assert result.state.warehouses["BB"].quantity("grain") == 10
    assert result.state.warehouses["BB"].is_full()
    assert result.state.money == ready.money


def test_transfer_rejections(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    ready = connected(state)
    full = with_stock(ready, "BB", {"meat": 60})

    zero = transfer_goods(ready, configuration, "AA", "BB", "grain", 0)
    short = transfer_goods(ready, configuration, "AA", "BB", "grain", 51)
    no_space = transfer_goods(full, configuration, "AA", "BB", "grain", 5)
    no_road = transfer_goods(
        ready.model_copy(update={"roads": {}}), configuration, "AA", "BB", "grain", 5
    )

    assert zero.reason is RejectionReason.PRECONDITION_FAILED
    assert short.reason is RejectionReason.PRECONDITION_FAILED
    assert no_space.reason is RejectionReason.CAPACITY_EXCEEDED
    assert no_road.reason is RejectionReason.PRECONDITION_FAILED


def test_sell_good_sells_whole_stock_at_market_price(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    ready = with_stock(state.with_unlocked("AA"), "AA", {"grain": 10})

    result = sell_good(ready, configuration, "AA", "grain")
    empty = sell_good(result.state, configuration, "AA", "grain")

    assert result.state.money == Money.of(11_000)
    assert result.state.warehouses["AA"].quantity("grain") == 0
    assert empty.reason is RejectionReason.PRECONDITION_FAILED


def test_sell_production_output_sells_one_days_output(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    production = (
        CountryProduction(country_id="BB")
        .add(new_facility(FacilityType.FARM))
        .add(new_facility(FacilityType.FARM))
    )
    ready = with_stock(state.with_unlocked("BB"), "BB", {"grain": 5}).with_production(
        production
    )

    result = sell_production_output(ready, configuration, "BB", FacilityType.FARM)
    none_built = sell_production_output(
        ready, configuration, "BB", FacilityType.RANCH
    )

    assert result.state.money == Money.of(10_300)
    assert result.state.warehouses["BB"].quantity("grain") == 3
    assert none_built.reason is RejectionReason.PRECONDITION_FAILED


def test_instant_policy_rejects_continuous_actions(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    ready = with_stock(state.with_unlocked("AA"), "AA", {})

    result = build_factory(ready, configuration, "AA", "electronics")

    assert result.reason is RejectionReason.PRECONDITION_FAILED
    assert result.detail == {"policy": "instant_transfer"}


def test_continuous_policy_rejects_instant_actions(
    state: GameState, continuous_configuration: EconomyConfiguration
) -> None:
    result = transfer_goods(
        connected(state), continuous_configuration, "AA", "BB", "grain", 5
    )
    assert result.reason is RejectionReason.PRECONDITION_FAILED


def test_factories_and_truck_lines_under_continuous_flow(
    state: GameState, continuous_configuration: EconomyConfiguration
) -> None:
    ready = with_money(connected(state), 20_000)

    built = build_factory(ready, continuous_configuration, "AA", "electronics")
    upgraded = upgrade_factory(built.state, continuous_configuration, "factory-1")
    line = create_truck_line(
        upgraded.state, continuous_configuration, "road-AA-BB", "grain", 2
    )
    parked = update_truck_line(line.state, continuous_configuration, "truckline-1", 0)

    factory = upgraded.state.factories["factory-1"]
    assert (factory.level, factory.output_per_day) == (2, 23)
    assert upgraded.state.money == Money.of(5000)
    truck_line = line.state.truck_lines["truckline-1"]
    assert truck_line.daily_capacity == 200
    assert (truck_line.from_country_id, truck_line.to_country_id) == ("AA", "BB")
    assert parked.state.truck_lines["truckline-1"].trucks_assigned == 0


def test_truck_line_rejections(
    state: GameState, continuous_configuration: EconomyConfiguration
) -> None:
    ready = connected(state)

    no_road = create_truck_line(ready, continuous_configuration, "road-X", "grain", 1)
    no_trucks = create_truck_line(
        ready, continuous_configuration, "road-AA-BB", "grain", 0
    )
    unknown = update_truck_line(ready, continuous_configuration, "truckline-9", 1)

    assert no_road.reason is RejectionReason.PRECONDITION_FAILED
    assert no_trucks.reason is RejectionReason.PRECONDITION_FAILED
    assert unknown.reason is RejectionReason.PRECONDITION_FAILED


def test_actions_are_refused_once_the_session_is_over(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    over = unlock(state, configuration, "AA").with_challenge(
        ChallengeState(target_country_id="BB", deadline=NOW, game_over=True)
    )

    result = build_warehouse(over, configuration, "AA")

    assert result.reason is RejectionReason.PRECONDITION_FAILED
    assert result.state is over


def test_result_event_describes_the_action(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    result = build_warehouse(unlock(state, configuration, "AA"), configuration, "AA")

    assert result.event.event_type == "build_warehouse_applied"
    assert result.event.country_id == "AA"
    assert result.event.payload["arguments"] == {"country_id": "AA"}
    assert result.event.phase is None


def test_sell_good_uses_current_price_after_repricing(
    state: GameState, configuration: EconomyConfiguration
) -> None:
    ready = with_stock(state.with_unlocked("AA"), "AA", {"grain": 4})
    markets = dict(ready.markets)
    markets["AA-grain"] = markets["AA-grain"].model_copy(
        update={"current_price": Decimal("87.5")}
    )

    result = sell_good(ready.with_markets(markets), configuration, "AA", "grain")

    assert result.state.money == Money.of(10_350)
