from dataclasses import dataclass
from enum import Enum
from typing import Iterator

from vpcplan.config import PlannerConfig
from vpcplan.network import Vpc
from vpcplan.planner import BlockPlan, NoViableStrategy, PlanningError, plan_blocks, required_bits


class Tier(Enum):
    PUBLIC = "public"
    PRIVATE = "private"
    DATABASE = "database"

    @property
    def short(self) -> str:
        return _SHORT_KEYS[self]

    @property
    def label(self) -> str:
        return self.value.upper()


_SHORT_KEYS = {
    Tier.PUBLIC: "pub",
    Tier.PRIVATE: "prv",
    Tier.DATABASE: "db",
}


@dataclass(frozen=True)
class TierSpec:
    tier: Tier
    subnet_count: int


@dataclass(frozen=True)
class Strategy:
    """An ordered set of tiers and how many subnets each one gets."""

    tiers: tuple[TierSpec, ...]
    use_case: str

    @property
    def total_subnets(self) -> int:
        return sum(spec.subnet_count for spec in self.tiers)

    @property
    def group_count(self) -> int:
        return len(self.tiers)

    @property
    def effective_blocks(self) -> int:
        # one cushion between each pair of adjacent groups
        return self.total_subnets + self.group_count - 1

    @property
    def counts(self) -> dict[Tier, int]:
        return {spec.tier: spec.subnet_count for spec in self.tiers}

    def count_for(self, tier: Tier) -> int:
        return self.counts.get(tier, 0)

    @property
    def label(self) -> str:
        return ", ".join(f"{spec.subnet_count} {spec.tier.value}" for spec in self.tiers)

    def describe(self, plan: BlockPlan) -> str:
        """Menu line for this strategy under a given block plan."""
        line = (
            f"{self.total_subnets} Subnets - {self.use_case} "
            f"({plan.mask} each - {plan.usable_per_subnet} usable IPs)"
        )
        if plan.compact:
            line += " [Compact]"
        return line


def _strategy(use_case: str, **counts: int) -> Strategy:
    keys = {t.short: t for t in Tier}
    tiers = tuple(
        TierSpec(keys[key], count) for key, count in counts.items() if count > 0
    )
    return Strategy(tiers=tiers, use_case=use_case)


STRATEGIES = (
    _strategy("Minimal setup", pub=1, prv=1),
    _strategy("Basic multi-tier", pub=1, prv=2),
    _strategy("Dev/staging environment", pub=1, prv=3),
    _strategy("3-tier application", pub=1, prv=2, db=1),
    _strategy("HA across 2 AZs", pub=2, prv=2),
    _strategy("Full 3-tier HA", pub=2, prv=2, db=2),
    _strategy("Enterprise setup", pub=4, prv=4),
    _strategy("Max HA across 3 AZs", pub=3, prv=3, db=3),
)


def available_strategies(
    vpc: Vpc, config: PlannerConfig | None = None
) -> Iterator[tuple[Strategy, BlockPlan]]:
    """Yield each canonical strategy that fits inside the VPC, with its block plan."""
    config = config or PlannerConfig()
    for strategy in sorted(STRATEGIES, key=lambda s: s.total_subnets):
        bits = required_bits(strategy.effective_blocks)
        try:
            plan = plan_blocks(vpc, bits, config)
        except PlanningError:
            continue
        yield strategy, plan


def viable_strategies(
    vpc: Vpc, config: PlannerConfig | None = None
) -> list[tuple[Strategy, BlockPlan]]:
    """Materialize the strategies that fit, failing when none does."""
    options = list(available_strategies(vpc, config))
    if not options:
        raise NoViableStrategy(
            f"VPC {vpc.cidr} is too small for any subnet strategy with cushions. "
            "Use a larger VPC or plan the subnets manually"
        )
    return options


def az_recommendation(total_subnets: int) -> str:
    if total_subnets <= 3:
        return "Deploy across 2 AZs for high availability"
    if total_subnets <= 6:
        return "Deploy across 2-3 AZs for balanced redundancy"
    return "Deploy across 3 AZs for maximum high availability"
