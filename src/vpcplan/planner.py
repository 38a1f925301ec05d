from dataclasses import dataclass

from vpcplan.config import PlannerConfig
from vpcplan.network import Vpc


class PlanningError(Exception):
    pass


class PrefixOverflow(PlanningError):
    pass


class InsufficientAddressSpace(PlanningError):
    pass


class NoViableStrategy(PlanningError):
    pass


@dataclass(frozen=True)
class BlockPlan:
    """Subnet size chosen for a strategy inside a VPC."""

    required_bits: int
    new_prefix_length: int
    block_size: int
    usable_per_subnet: int
    compact: bool = False

    @property
    def mask(self) -> str:
        return f"/{self.new_prefix_length}"


def required_bits(effective_blocks: int) -> int:
    """Smallest number of extra prefix bits whose block count covers effective_blocks."""
    if effective_blocks <= 1:
        return 0
    return (effective_blocks - 1).bit_length()


def plan_blocks(vpc: Vpc, bits: int, config: PlannerConfig | None = None) -> BlockPlan:
    """Split a VPC by `bits` extra prefix bits, enforcing the split ceiling and usable floor."""
    config = config or PlannerConfig()
    new_prefix = vpc.prefix_length + bits
    if new_prefix > config.max_prefix:
        raise PrefixOverflow(
            f"Splitting {vpc.cidr} by {bits} bits gives /{new_prefix}, "
            f"deeper than the /{config.max_prefix} limit. Use a larger VPC or fewer subnets"
        )

    block_size = 2 ** (32 - new_prefix)
    usable = block_size - config.reserved_per_block
    if usable < config.min_usable:
        raise InsufficientAddressSpace(
            f"/{new_prefix} subnets leave {usable} usable IPs each, "
            f"below the minimum of {config.min_usable}. Use a larger VPC or fewer subnets"
        )

    return BlockPlan(
        required_bits=bits,
        new_prefix_length=new_prefix,
        block_size=block_size,
        usable_per_subnet=usable,
        compact=usable < config.compact_threshold,
    )
