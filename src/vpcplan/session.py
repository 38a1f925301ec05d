from dataclasses import dataclass
from enum import Enum

from vpcplan.network import Vpc, int_to_ip
from vpcplan.planner import BlockPlan
from vpcplan.result import AllocationResult, TierAllocation
from vpcplan.strategies import Strategy, TierSpec
from vpcplan.validation import PlacementError, check_overlaps, validate_start


class SessionError(Exception):
    pass


class SessionState(Enum):
    SELECTING_TIER = "selecting_tier"
    AWAITING_OVERRIDE = "awaiting_override"
    PREVIEWING = "previewing"
    RECONFIGURING = "reconfiguring"
    CONFIRMED = "confirmed"


@dataclass(frozen=True)
class Preview:
    allocations: tuple[TierAllocation, ...]
    plan: BlockPlan

    @property
    def usable_per_subnet(self) -> int:
        return self.plan.usable_per_subnet

    @property
    def subnets(self) -> tuple[str, ...]:
        return tuple(cidr for a in self.allocations for cidr in a.subnets)


class PlacementSession:
    """Tier-by-tier placement for one strategy, repeated until the operator confirms.

    Each tier is offered a default start one cushion block past the previous
    tier. The operator may accept it or supply an override, which is
    validated against the VPC and against every tier already placed. A
    placement error leaves the session waiting for another override.
    """

    def __init__(self, vpc: Vpc, strategy: Strategy, plan: BlockPlan):
        self.vpc = vpc
        self.strategy = strategy
        self.plan = plan
        self.allocations: dict = {}
        self.state = SessionState.SELECTING_TIER
        self.tier_index = 0
        self._offset = 0
        self._reset()

    def _reset(self) -> None:
        self.allocations = {spec.tier: None for spec in self.strategy.tiers}
        self.tier_index = 0
        self._offset = 0
        self.state = SessionState.SELECTING_TIER

    def _require(self, *states: SessionState) -> None:
        if self.state not in states:
            expected = " or ".join(s.value for s in states)
            raise SessionError(f"Session is {self.state.value}, expected {expected}")

    @property
    def block_size(self) -> int:
        return self.plan.block_size

    @property
    def confirmed(self) -> bool:
        return self.state == SessionState.CONFIRMED

    @property
    def current_tier(self) -> TierSpec:
        self._require(SessionState.SELECTING_TIER, SessionState.AWAITING_OVERRIDE)
        return self.strategy.tiers[self.tier_index]

    def placed(self) -> list[TierAllocation]:
        return [a for a in self.allocations.values() if a is not None]

    def default_start(self) -> int:
        self._require(SessionState.SELECTING_TIER, SessionState.AWAITING_OVERRIDE)
        return self.vpc.base + self._offset

    def default_start_ip(self) -> str:
        return int_to_ip(self.default_start())

    def accept_default(self) -> TierAllocation:
        """Place the current tier at its suggested start.

        If earlier overrides pushed the default out of bounds or into another
        tier, the error propagates and the session waits for an override.
        """
        self._require(SessionState.SELECTING_TIER)
        try:
            return self._place(self.default_start())
        except PlacementError:
            self.state = SessionState.AWAITING_OVERRIDE
            raise

    def decline_default(self) -> None:
        self._require(SessionState.SELECTING_TIER)
        self.state = SessionState.AWAITING_OVERRIDE

    def override(self, candidate: str | int) -> TierAllocation:
        """Place the current tier at an operator-supplied start address."""
        self._require(SessionState.AWAITING_OVERRIDE)
        return self._place(candidate)

    def _place(self, candidate: str | int) -> TierAllocation:
        spec = self.strategy.tiers[self.tier_index]
        start = validate_start(candidate, self.vpc, self.block_size, spec.subnet_count)
        allocation = TierAllocation(
            tier=spec.tier,
            start=start,
            subnet_count=spec.subnet_count,
            block_size=self.block_size,
            prefix_length=self.plan.new_prefix_length,
        )
        check_overlaps(allocation, self.placed(), self.block_size)

        self.allocations[spec.tier] = allocation
        # reserve exactly one cushion block after the tier
        self._offset = (start - self.vpc.base) + (spec.subnet_count + 1) * self.block_size
        self.tier_index += 1
        if self.tier_index == len(self.strategy.tiers):
            self.state = SessionState.PREVIEWING
        else:
            self.state = SessionState.SELECTING_TIER
        return allocation

    def preview(self) -> Preview:
        self._require(SessionState.PREVIEWING)
        return Preview(allocations=tuple(self.placed()), plan=self.plan)

    def confirm(self) -> AllocationResult:
        self._require(SessionState.PREVIEWING)
        result = AllocationResult(
            vpc=self.vpc,
            strategy=self.strategy,
            plan=self.plan,
            allocations=tuple(self.placed()),
        )
        self.state = SessionState.CONFIRMED
        return result

    def reconfigure(self) -> None:
        """Discard every placement and start again from the first tier."""
        self._require(SessionState.PREVIEWING)
        self.state = SessionState.RECONFIGURING
        self._reset()
