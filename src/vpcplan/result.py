from dataclasses import dataclass

from vpcplan.network import Vpc, int_to_ip
from vpcplan.planner import BlockPlan
from vpcplan.strategies import Strategy, Tier


RECORD_FORMAT = "format_v2"


@dataclass(frozen=True)
class TierAllocation:
    """Contiguous run of equally sized subnets for one tier."""

    tier: Tier
    start: int
    subnet_count: int
    block_size: int
    prefix_length: int

    @property
    def start_ip(self) -> str:
        return int_to_ip(self.start)

    @property
    def end(self) -> int:
        return self.start + self.subnet_count * self.block_size - 1

    @property
    def cushion_end(self) -> int:
        return self.end + self.block_size

    @property
    def subnets(self) -> tuple[str, ...]:
        return tuple(
            f"{int_to_ip(self.start + i * self.block_size)}/{self.prefix_length}"
            for i in range(self.subnet_count)
        )


@dataclass(frozen=True)
class AllocationResult:
    """Confirmed subnet layout for a VPC.

    Every serialized form is derived from the allocations held here.
    """

    vpc: Vpc
    strategy: Strategy
    plan: BlockPlan
    allocations: tuple[TierAllocation, ...]

    @property
    def total_subnets(self) -> int:
        return sum(a.subnet_count for a in self.allocations)

    @property
    def subnet_mask(self) -> str:
        return self.plan.mask

    @property
    def usable_per_subnet(self) -> int:
        return self.plan.usable_per_subnet

    @property
    def subnets(self) -> tuple[str, ...]:
        return tuple(cidr for a in self.allocations for cidr in a.subnets)

    def allocation_for(self, tier: Tier) -> TierAllocation | None:
        for allocation in self.allocations:
            if allocation.tier == tier:
                return allocation
        return None

    def subnets_for(self, tier: Tier) -> list[str]:
        allocation = self.allocation_for(tier)
        return list(allocation.subnets) if allocation else []

    def tier_lists(self) -> dict[str, list[str]]:
        """CIDR lists for every tier, empty for tiers the strategy leaves out."""
        return {tier.value: self.subnets_for(tier) for tier in Tier}

    def to_record_line(self) -> str:
        """Flat key:value;key:value line for shell consumers."""
        parts = [f"{RECORD_FORMAT}:Total_subnets:{self.total_subnets}"]
        for a in self.allocations:
            key = a.tier.short
            parts.append(f"{key}_subnets:{a.subnet_count}")
            parts.append(f"{key}_start:{a.start_ip}")
            parts.append(f"{key}_allocation:{','.join(a.subnets)}")
        parts.append(f"subnet_mask:{self.subnet_mask}")
        parts.append(f"usable_ips_per_subnet:{self.usable_per_subnet}")
        parts.append("confirmed:true")
        return ";".join(parts)

    def to_tfvars(self) -> dict[str, str]:
        """Terraform-style list literals and counts keyed by variable name."""
        out = {}
        for tier in Tier:
            cidrs = self.subnets_for(tier)
            name = tier.value.upper()
            out[f"{name}_SUBNETS"] = "[" + ",".join(f'"{c}"' for c in cidrs) + "]"
            out[f"{name}_SUBNET_COUNT"] = str(len(cidrs))
        return out

    def summary(self) -> dict:
        tiers = {}
        for a in self.allocations:
            tiers[a.tier.value] = {
                "count": a.subnet_count,
                "start": a.start_ip,
                "subnets": list(a.subnets),
            }
        return {
            "vpc": self.vpc.cidr,
            "strategy": self.strategy.use_case,
            "total_subnets": self.total_subnets,
            "subnet_mask": self.subnet_mask,
            "block_size": self.plan.block_size,
            "usable_ips_per_subnet": self.usable_per_subnet,
            "tiers": tiers,
        }
