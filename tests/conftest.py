import pytest

from vpcplan.config import PlannerConfig
from vpcplan.network import parse_vpc
from vpcplan.planner import plan_blocks, required_bits
from vpcplan.session import PlacementSession
from vpcplan.strategies import STRATEGIES


def strategy_named(use_case: str):
    for strategy in STRATEGIES:
        if strategy.use_case == use_case:
            return strategy
    raise KeyError(use_case)


def make_session(cidr: str, use_case: str) -> PlacementSession:
    vpc = parse_vpc(cidr)
    strategy = strategy_named(use_case)
    plan = plan_blocks(vpc, required_bits(strategy.effective_blocks))
    return PlacementSession(vpc, strategy, plan)


@pytest.fixture
def config():
    return PlannerConfig()


@pytest.fixture
def vpc16():
    return parse_vpc("10.0.0.0/16")


@pytest.fixture
def vpc24():
    return parse_vpc("10.0.0.0/24")


@pytest.fixture
def minimal24():
    return make_session("10.0.0.0/24", "Minimal setup")


@pytest.fixture
def three_tier16():
    return make_session("10.0.0.0/16", "3-tier application")


@pytest.fixture
def session_for():
    return make_session
