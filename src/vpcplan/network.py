import ipaddress
import re
from dataclasses import dataclass

from vpcplan.config import PlannerConfig


MAX_ADDRESS = 2**32 - 1

PRIVATE_RANGES = (
    (ipaddress.IPv4Network("10.0.0.0/8"), "Class A Private (10.x.x.x)"),
    (ipaddress.IPv4Network("172.16.0.0/12"), "Class B Private (172.16-31.x.x)"),
    (ipaddress.IPv4Network("192.168.0.0/16"), "Class C Private (192.168.x.x)"),
)

_CIDR_RE = re.compile(r"^([^/\s]+)/(\d{1,2})$")


class NetworkError(Exception):
    pass


class FormatError(NetworkError):
    pass


class MaskTooSmall(NetworkError):
    pass


def ip_to_int(ip: str) -> int:
    """Convert a dotted-quad IPv4 address to its 32-bit integer value."""
    try:
        return int(ipaddress.IPv4Address(ip.strip()))
    except (AttributeError, ValueError):
        raise FormatError(
            f"'{ip}' is not a valid IPv4 address. Use four octets between 0 and 255, e.g. 10.0.0.0"
        )


def int_to_ip(value: int) -> str:
    """Convert a 32-bit integer to dotted-quad notation."""
    return str(ipaddress.IPv4Address(value & MAX_ADDRESS))


@dataclass(frozen=True)
class Vpc:
    base: int
    prefix_length: int

    @property
    def total_addresses(self) -> int:
        return 2 ** (32 - self.prefix_length)

    @property
    def last_address(self) -> int:
        return self.base + self.total_addresses - 1

    @property
    def available_bits(self) -> int:
        return 32 - self.prefix_length

    @property
    def cidr(self) -> str:
        return f"{int_to_ip(self.base)}/{self.prefix_length}"

    @property
    def range_label(self) -> str:
        return f"{int_to_ip(self.base)} - {int_to_ip(self.last_address)}"

    def contains(self, address: int) -> bool:
        return self.base <= address <= self.last_address

    def __str__(self) -> str:
        return self.cidr


def parse_vpc(cidr: str, config: PlannerConfig | None = None) -> Vpc:
    """Parse an 'a.b.c.d/n' VPC specification.

    Rejects prefixes at or past the planner's split ceiling before any
    planning happens, since no subnet layout could fit.
    """
    config = config or PlannerConfig()
    m = _CIDR_RE.match(cidr.strip())
    if not m:
        raise FormatError(f"'{cidr}' is not a valid CIDR. Expected a.b.c.d/n, e.g. 10.0.0.0/16")

    base = ip_to_int(m.group(1))
    prefix = int(m.group(2))
    if prefix > 32:
        raise FormatError(f"Prefix length /{prefix} in '{cidr}' must be between 0 and 32")

    network = ipaddress.IPv4Network((base, prefix), strict=False)
    if int(network.network_address) != base:
        raise FormatError(
            f"'{cidr}' has host bits set. Did you mean {network.network_address}/{prefix}?"
        )

    if prefix >= config.max_prefix:
        raise MaskTooSmall(
            f"VPC CIDR /{prefix} is too small for meaningful subnetting. "
            f"Use the VPC without subnetting, or expand it to /{config.max_prefix - 1} or larger"
        )

    return Vpc(base=base, prefix_length=prefix)


@dataclass(frozen=True)
class VpcInfo:
    cidr: str
    first: str
    last: str
    total_addresses: int
    usable_addresses: int
    available_bits: int
    range_type: str
    private: bool
    capacity: str


def classify_range(address: int) -> tuple[str, bool]:
    """Return (label, is_private) for the RFC 1918 range an address falls in."""
    ip = ipaddress.IPv4Address(address)
    for network, label in PRIVATE_RANGES:
        if ip in network:
            return label, True
    return "Public range", False


def capacity_label(usable: int) -> str:
    if usable > 1000:
        return "Enterprise-scale network"
    if usable > 200:
        return "Production-ready network"
    if usable > 50:
        return "Standard network"
    return "Development/testing network"


def describe_vpc(vpc: Vpc, config: PlannerConfig | None = None) -> VpcInfo:
    """Summarize a VPC's size, range type, and capacity."""
    config = config or PlannerConfig()
    usable = max(vpc.total_addresses - config.reserved_per_block, 0)
    range_type, private = classify_range(vpc.base)
    return VpcInfo(
        cidr=vpc.cidr,
        first=int_to_ip(vpc.base),
        last=int_to_ip(vpc.last_address),
        total_addresses=vpc.total_addresses,
        usable_addresses=usable,
        available_bits=vpc.available_bits,
        range_type=range_type,
        private=private,
        capacity=capacity_label(usable),
    )
