from typing import Iterable

from vpcplan.network import Vpc, int_to_ip, ip_to_int
from vpcplan.result import TierAllocation


class PlacementError(Exception):
    pass


class OutOfRange(PlacementError):
    pass


class Misaligned(PlacementError):
    def __init__(self, message: str, below: int | None = None, above: int | None = None):
        super().__init__(message)
        self.below = below
        self.above = above


class InsufficientSpace(PlacementError):
    pass


class Overlap(PlacementError):
    def __init__(self, message: str, other: TierAllocation):
        super().__init__(message)
        self.other = other


def _as_int(candidate: str | int) -> int:
    if isinstance(candidate, int):
        return candidate
    return ip_to_int(candidate)


def last_valid_start(vpc: Vpc, block_size: int, subnet_count: int) -> int:
    return vpc.last_address - subnet_count * block_size + 1


def validate_start(candidate: str | int, vpc: Vpc, block_size: int, subnet_count: int) -> int:
    """Check a tier start address against VPC bounds, alignment, and trailing space.

    Returns the start as an integer. Raises OutOfRange, Misaligned, or
    InsufficientSpace, in that order of precedence.
    """
    start = _as_int(candidate)
    span = subnet_count * block_size
    ip = int_to_ip(start)

    if not vpc.contains(start):
        raise OutOfRange(
            f"IP {ip} is outside VPC range {vpc.range_label}. "
            f"Valid starts for this group: {int_to_ip(vpc.base)} to "
            f"{int_to_ip(last_valid_start(vpc, block_size, subnet_count))}"
        )

    remainder = (start - vpc.base) % block_size
    if remainder:
        below = start - remainder
        above = below + block_size
        if above + span - 1 > vpc.last_address:
            above = None
        nearby = [f"{int_to_ip(below)} (previous aligned)"]
        if above is not None:
            nearby.append(f"{int_to_ip(above)} (next aligned)")
        raise Misaligned(
            f"IP {ip} must align to {block_size}-address subnet boundaries "
            f"(offset {remainder}, must be 0). Valid aligned IPs nearby: {', '.join(nearby)}",
            below=below,
            above=above,
        )

    if start + span - 1 > vpc.last_address:
        raise InsufficientSpace(
            f"Not enough space from {ip}: {span} IPs required, "
            f"{vpc.last_address - start + 1} available. "
            f"Last valid starting IP: {int_to_ip(last_valid_start(vpc, block_size, subnet_count))}"
        )

    return start


def overlaps(a: TierAllocation, b: TierAllocation, block_size: int) -> bool:
    """Whether two tiers, each extended by one trailing cushion block, intersect."""
    a_end = a.start + a.subnet_count * block_size + block_size - 1
    b_end = b.start + b.subnet_count * block_size + block_size - 1
    return a.start < b_end and b.start < a_end


def check_overlaps(
    candidate: TierAllocation, placed: Iterable[TierAllocation], block_size: int
) -> None:
    """Raise Overlap for the first already-placed tier the candidate collides with."""
    for other in placed:
        if overlaps(candidate, other, block_size):
            raise Overlap(
                f"{candidate.tier.label} group overlaps with {other.tier.label} allocation: "
                f"{candidate.start_ip} - {int_to_ip(candidate.cushion_end)} vs "
                f"{other.start_ip} - {int_to_ip(other.cushion_end)} (with cushion). "
                f"Start {candidate.tier.label} at {int_to_ip(other.cushion_end + 1)} or later",
                other=other,
            )


def aligned_examples(vpc: Vpc, block_size: int, limit: int = 8) -> list[str]:
    """First few aligned start addresses inside the VPC."""
    examples = []
    offset = 0
    while offset < vpc.total_addresses and len(examples) < limit:
        examples.append(int_to_ip(vpc.base + offset))
        offset += block_size
    return examples
