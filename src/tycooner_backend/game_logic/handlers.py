"""Concrete implementations for the daily phase handlers."""

from __future__ import annotations

from decimal import Decimal
from typing import TYPE_CHECKING

from pydantic import BaseModel
from pydantic.config import ConfigDict

from tycooner_backend.game_logic.logistics import (
    move_goods,
    transferable_amount,
    transport_cost,
)
from tycooner_backend.game_logic.markets import reprice
from tycooner_backend.game_logic.phases import PhaseInputBase, PhaseResultBase
from tycooner_backend.game_logic.production import produce
from tycooner_backend.shared.enums import SimulationPolicy
from tycooner_backend.shared.events import LoggedEvent, PhaseLog
from tycooner_backend.shared.value_objects import PhaseIdentifier

if TYPE_CHECKING:
    from collections.abc import Iterable

    from tycooner_backend.game_logic.state import LegacyFactory, Market, Warehouse


def _build_phase_log(
    phase: PhaseIdentifier,
    day_index: int,
    events: Iterable[LoggedEvent],
) -> PhaseLog:
    return PhaseLog(phase=phase, day_index=day_index, events=tuple(events))


class PhaseHandlerModel(BaseModel):
    """Base class for concrete phase handlers using Pydantic for validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)


class ProductionPhaseHandlerImpl(PhaseHandlerModel):
    """Add each country's daily facility output to its warehouse."""

    def handle(self, input_data: PhaseInputBase) -> PhaseResultBase:
        """Run production for every country that owns a warehouse."""
        state = input_data.state
        day_index = input_data.day_index
        events: list[LoggedEvent] = []
        warehouses: dict[str, Warehouse] = dict(state.warehouses)
        factories_by_country: dict[str, list[LegacyFactory]] = {}
        for factory in state.factories.values():
            factories_by_country.setdefault(factory.country_id, []).append(factory)

        total_produced = 0
        halted = 0
        for country_id, warehouse in state.warehouses.items():
            if warehouse.is_full():
                halted += 1
                events.append(
                    LoggedEvent(
                        day_index=day_index,
                        phase=PhaseIdentifier.PRODUCTION,
                        event_type="production_halted",
                        country_id=country_id,
                        message="Warehouse is full; no goods were produced.",
                        payload={"capacity": warehouse.capacity},
                    )
                )
                continue

            updated, produced = produce(
                warehouse,
                state.production.get(country_id),
                factories_by_country.get(country_id, ()),
            )
            warehouses[country_id] = updated
            if not produced:
                continue
            total_produced += sum(produced.values())
            events.append(
                LoggedEvent(
                    day_index=day_index,
                    phase=PhaseIdentifier.PRODUCTION,
                    event_type="goods_produced",
                    country_id=country_id,
                    payload={
                        "produced": produced,
                        "stored": updated.total_stored(),
                        "capacity": updated.capacity,
                    },
                )
            )

        return PhaseResultBase(
            phase=PhaseIdentifier.PRODUCTION,
            day_index=day_index,
            updated_state=state.with_warehouses(warehouses),
            log=_build_phase_log(PhaseIdentifier.PRODUCTION, day_index, events),
            summary=(
                f"Produced {total_produced} units across {len(warehouses)} "
                f"warehouses; {halted} halted at capacity."
            ),
            metrics={"units_produced": total_produced, "halted_warehouses": halted},
        )


class LogisticsPhaseHandlerImpl(PhaseHandlerModel):
    """Move goods along truck lines and charge transport costs."""

    def handle(self, input_data: PhaseInputBase) -> PhaseResultBase:
        """Resolve every truck line, then debit the combined cost once."""
        configuration = input_data.configuration
        state = input_data.state
        day_index = input_data.day_index
        events: list[LoggedEvent] = []

        if configuration.policy is not SimulationPolicy.CONTINUOUS_FLOW:
            return PhaseResultBase(
                phase=PhaseIdentifier.LOGISTICS,
                day_index=day_index,
                updated_state=state,
                log=_build_phase_log(PhaseIdentifier.LOGISTICS, day_index, events),
                summary="Goods move instantly under this policy; no truck lines run.",
                metrics={"units_moved": 0, "transport_cost": Decimal(0)},
            )

        warehouses: dict[str, Warehouse] = dict(state.warehouses)
        total_cost = Decimal(0)
        total_moved = 0
        for line in state.truck_lines.values():
            source = warehouses.get(line.from_country_id)
            destination = warehouses.get(line.to_country_id)
            road = state.roads.get(line.road_id)
            if source is None or destination is None or road is None:
                continue
            if road.distance <= 0:
                continue

            amount = transferable_amount(
                line.daily_capacity, source, destination, line.good_id
            )
            if amount == 0:
                continue

            source, destination = move_goods(source, destination, line.good_id, amount)
            warehouses[line.from_country_id] = source
            warehouses[line.to_country_id] = destination
            cost = transport_cost(
                amount, road.distance, configuration.logistics_cost_per_unit_per_100
            )
            total_cost += cost
            total_moved += amount
            events.append(
                LoggedEvent(
                    day_index=day_index,
                    phase=PhaseIdentifier.LOGISTICS,
                    event_type="goods_transported",
                    country_id=line.from_country_id,
                    payload={
                        "truck_line_id": line.id,
                        "destination": line.to_country_id,
                        "good_id": line.good_id,
                        "units": amount,
                        "cost": str(cost),
                    },
                )
            )

        updated_state = state.with_warehouses(warehouses)
        if total_cost > 0:
            updated_state = updated_state.debit_money(configuration.money(total_cost))

        return PhaseResultBase(
            phase=PhaseIdentifier.LOGISTICS,
            day_index=day_index,
            updated_state=updated_state,
            log=_build_phase_log(PhaseIdentifier.LOGISTICS, day_index, events),
            summary=(
                f"Moved {total_moved} units on {len(state.truck_lines)} truck lines "
                f"for {total_cost:,.2f}."
            ),
            metrics={"units_moved": total_moved, "transport_cost": total_cost},
        )


class MarketPhaseHandlerImpl(PhaseHandlerModel):
    """Reprice every market from current warehouse supply."""

    def handle(self, input_data: PhaseInputBase) -> PhaseResultBase:
        """Recompute prices and, under continuous flow, sell up to demand."""
        configuration = input_data.configuration
        state = input_data.state
        day_index = input_data.day_index
        events: list[LoggedEvent] = []

        markets: dict[str, Market] = {}
        for key, market in state.markets.items():
            warehouse = state.warehouses.get(market.country_id)
            supply = warehouse.quantity(market.good_id) if warehouse else 0
            markets[key] = reprice(market, supply)
        updated_state = state.with_markets(markets)

        units_sold = 0
        net_revenue = Decimal(0)
        if configuration.policy is SimulationPolicy.CONTINUOUS_FLOW:
            warehouses: dict[str, Warehouse] = dict(updated_state.warehouses)
            for market in markets.values():
                warehouse = warehouses.get(market.country_id)
                if warehouse is None:
                    continue
                sold = min(warehouse.quantity(market.good_id), market.max_daily_demand)
                if sold <= 0:
                    continue
                revenue = Decimal(sold) * market.current_price
                upkeep = (
                    Decimal(sold)
                    * market.production_cost
                    * configuration.production_cost_share
                )
                warehouses[market.country_id] = warehouse.withdraw(
                    market.good_id, sold
                )
                units_sold += sold
                net_revenue += revenue - upkeep
                events.append(
                    LoggedEvent(
                        day_index=day_index,
                        phase=PhaseIdentifier.MARKET,
                        event_type="goods_auto_sold",
                        country_id=market.country_id,
                        payload={
                            "good_id": market.good_id,
                            "units": sold,
                            "price": str(market.current_price),
                            "net": str(revenue - upkeep),
                        },
                    )
                )
            updated_state = updated_state.with_warehouses(warehouses)
            if units_sold:
                updated_state = updated_state.credit_money(
                    configuration.money(net_revenue)
                )

        return PhaseResultBase(
            phase=PhaseIdentifier.MARKET,
            day_index=day_index,
            updated_state=updated_state,
            log=_build_phase_log(PhaseIdentifier.MARKET, day_index, events),
            summary=(
                f"Repriced {len(markets)} markets; sold {units_sold} units "
                f"for a net {net_revenue:,.2f}."
            ),
            metrics={
                "markets_repriced": len(markets),
                "units_sold": units_sold,
                "net_revenue": net_revenue,
            },
        )


__all__ = [
    "LogisticsPhaseHandlerImpl",
    "MarketPhaseHandlerImpl",
    "ProductionPhaseHandlerImpl",
]
