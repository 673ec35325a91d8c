"""
What-if simulation over the billing core.

A SimulationSession is an immutable set of hypothetical overrides:
  removed         subscription ids dropped from the portfolio
  cost_override   id -> monthly cost replacing the normalized monthly cost
  split_override  id -> number of payers replacing shared_with

Sessions are never persisted. Every transition returns a new session and
simulate() recomputes from scratch.
"""
import logging
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Iterable

from app.domain.billing import ZERO, MONTHS_PER_YEAR, _split, normalized_monthly_cost, payer_share_cost
from app.domain.subscription import MAX_SHARED_WITH, InvalidInput, Subscription, to_decimal

logger = logging.getLogger(__name__)

MIN_SPLIT = 1
MAX_SPLIT = MAX_SHARED_WITH


@dataclass(frozen=True)
class SimulationSession:
    removed: frozenset = frozenset()
    cost_override: dict[Any, Decimal] = field(default_factory=dict)
    split_override: dict[Any, int] = field(default_factory=dict)

    def toggle_removal(self, sub_id: Any) -> "SimulationSession":
        return replace(self, removed=self.removed ^ {sub_id})

    def override_cost(self, sub_id: Any, monthly_cost: Decimal | None) -> "SimulationSession":
        """Set (or clear, with None) the monthly cost override for one subscription."""
        costs = dict(self.cost_override)
        if monthly_cost is None:
            costs.pop(sub_id, None)
        else:
            costs[sub_id] = to_decimal(monthly_cost)
        return replace(self, cost_override=costs)

    def adjust_split(self, sub: Subscription, delta: int) -> "SimulationSession":
        """Move the payer count by delta, clamped to 1..10."""
        current = self.effective_split(sub)
        splits = dict(self.split_override)
        splits[sub.id] = max(MIN_SPLIT, min(MAX_SPLIT, current + delta))
        return replace(self, split_override=splits)

    def reset(self) -> "SimulationSession":
        return SimulationSession()

    def effective_split(self, sub: Subscription) -> int:
        if sub.id in self.split_override:
            return self.split_override[sub.id]
        # an unshared record keeps a stale shared_with; it still has one payer
        if not sub.is_shared:
            return 1
        return sub.shared_with or 1

    def to_dict(self) -> dict:
        return {
            "removed": sorted(self.removed, key=str),
            "cost_override": {str(k): str(v) for k, v in self.cost_override.items()},
            "split_override": {str(k): v for k, v in self.split_override.items()},
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> "SimulationSession":
        """Inverse of to_dict: numeric string keys become integer ids again."""
        data = data or {}
        return cls(
            removed=frozenset(_id_key(k) for k in data.get("removed") or ()),
            cost_override={_id_key(k): to_decimal(v) for k, v in (data.get("cost_override") or {}).items()},
            split_override={_id_key(k): int(v) for k, v in (data.get("split_override") or {}).items()},
        )


def _id_key(key: Any) -> Any:
    if isinstance(key, str) and key.isdigit():
        return int(key)
    return key


@dataclass(frozen=True)
class SimulatedLine:
    subscription: Subscription
    removed: bool
    effective_split: int
    monthly_cost: Decimal


@dataclass(frozen=True)
class SimulationResult:
    current_monthly: Decimal
    simulated_monthly: Decimal
    lines: list[SimulatedLine]

    @property
    def savings(self) -> Decimal:
        return self.current_monthly - self.simulated_monthly

    @property
    def savings_percent(self) -> Decimal:
        if self.current_monthly > 0:
            return self.savings / self.current_monthly * 100
        return ZERO

    @property
    def yearly_savings(self) -> Decimal:
        return self.savings * MONTHS_PER_YEAR


def simulated_cost(sub: Subscription, session: SimulationSession) -> Decimal:
    """Monthly cost to one payer after applying the session's cost and split overrides."""
    if sub.id in session.cost_override:
        cost = session.cost_override[sub.id]
    else:
        cost = normalized_monthly_cost(sub)
    return _split(cost, session.effective_split(sub))


def simulate(subscriptions: Iterable[Subscription], session: SimulationSession | None = None) -> SimulationResult:
    """
    current_monthly ignores the session; simulated_monthly applies it.
    Records failing validation are skipped on both sides.
    """
    session = session or SimulationSession()
    current = ZERO
    simulated = ZERO
    lines: list[SimulatedLine] = []

    for sub in subscriptions:
        try:
            base = payer_share_cost(sub)
            cost = simulated_cost(sub, session)
        except InvalidInput as e:
            logger.warning("Skipping subscription id=%s in simulation: %s", sub.id, e)
            continue

        current += base
        removed = sub.id in session.removed
        if not removed:
            simulated += cost
        lines.append(SimulatedLine(sub, removed, session.effective_split(sub), cost))

    return SimulationResult(current, simulated, lines)
