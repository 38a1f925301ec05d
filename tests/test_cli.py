import pytest
from click.testing import CliRunner

from vpcplan import __version__
from vpcplan.cli import cli


MINIMAL_24_RECORD = (
    "format_v2:Total_subnets:2"
    ";pub_subnets:1;pub_start:10.0.0.0;pub_allocation:10.0.0.0/26"
    ";prv_subnets:1;prv_start:10.0.0.128;prv_allocation:10.0.0.128/26"
    ";subnet_mask:/26;usable_ips_per_subnet:59;confirmed:true"
)


@pytest.fixture
def invoke(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    runner = CliRunner()

    def _invoke(*args, input=None):
        return runner.invoke(cli, list(args), input=input, env={"COLUMNS": "250"})

    return _invoke


def test_version(invoke):
    result = invoke("--version")
    assert result.exit_code == 0
    assert __version__ in result.output


def test_info(invoke):
    result = invoke("info", "10.0.0.0/16")
    assert result.exit_code == 0
    assert "65536" in result.output
    assert "Class A Private" in result.output
    assert "Enterprise-scale network" in result.output


def test_info_public_range_note(invoke):
    result = invoke("info", "8.8.8.0/24")
    assert result.exit_code == 0
    assert "public IP range" in result.output


def test_strategies(invoke):
    result = invoke("strategies", "10.0.0.0/24")
    assert result.exit_code == 0
    assert "Minimal setup" in result.output
    assert "Full 3-tier HA" in result.output
    assert "Enterprise setup" not in result.output
    assert "compact" in result.output


def test_strategies_mask_too_small(invoke):
    result = invoke("strategies", "10.0.0.0/28")
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "/28 is too small" in result.output
    assert "Minimal setup" not in result.output


def test_strategies_none_viable(invoke):
    result = invoke("strategies", "10.0.0.0/26")
    assert result.exit_code == 1
    assert "too small for any subnet strategy" in result.output


def test_malformed_cidr(invoke):
    result = invoke("info", "10.0.0.300/16")
    assert result.exit_code == 1
    assert "not a valid IPv4 address" in result.output


def test_plan_accept_defaults(invoke):
    result = invoke("plan", "10.0.0.0/24", "-s", "1", "--accept-defaults")
    assert result.exit_code == 0, result.output
    assert MINIMAL_24_RECORD in result.output
    assert "Deploy across 2 AZs" in result.output


def test_plan_tfvars(invoke):
    result = invoke("plan", "10.0.0.0/16", "-s", "4", "-y", "-f", "tfvars")
    assert result.exit_code == 0, result.output
    assert 'PUBLIC_SUBNETS=["10.0.0.0/19"]' in result.output
    assert 'PRIVATE_SUBNETS=["10.0.64.0/19","10.0.96.0/19"]' in result.output
    assert 'DATABASE_SUBNETS=["10.0.160.0/19"]' in result.output
    assert "DATABASE_SUBNET_COUNT=1" in result.output


def test_plan_yaml_and_lists(invoke):
    result = invoke("plan", "10.0.0.0/24", "-s", "1", "-y", "-f", "yaml")
    assert result.exit_code == 0, result.output
    assert "subnet_mask: /26" in result.output
    assert "usable_ips_per_subnet: 59" in result.output

    result = invoke("plan", "10.0.0.0/24", "-s", "1", "-y", "-f", "lists")
    assert result.exit_code == 0, result.output
    assert "database: []" in result.output
    assert "- 10.0.0.128/26" in result.output


def test_plan_interactive_override_and_reconfigure(invoke):
    answers = [
        "1",          # strategy
        "n",          # decline public default
        "10.0.0.10",  # misaligned
        "10.0.0.64",  # public override
        "y",          # private default 10.0.0.192
        "n",          # reject preview
        "y",
        "y",
        "y",          # confirm
    ]
    result = invoke("plan", "10.0.0.0/24", input="\n".join(answers) + "\n")
    assert result.exit_code == 0, result.output
    assert "previous aligned" in result.output
    assert "10.0.0.192/26" in result.output
    assert "reconfigure" in result.output
    assert MINIMAL_24_RECORD in result.output


def test_plan_interactive_overlap_retry(invoke):
    answers = ["1", "y", "n", "10.0.0.64", "10.0.0.192", "y"]
    result = invoke("plan", "10.0.0.0/24", input="\n".join(answers) + "\n")
    assert result.exit_code == 0, result.output
    assert "PRIVATE group overlaps with PUBLIC" in result.output
    assert "prv_start:10.0.0.192;prv_allocation:10.0.0.192/26" in result.output


def test_plan_abort_emits_nothing(invoke):
    result = invoke("plan", "10.0.0.0/24", "-s", "1", input="n\n")
    assert result.exit_code == 1
    assert "format_v2" not in result.output


def test_plan_strategy_out_of_range(invoke):
    result = invoke("plan", "10.0.0.0/24", "-s", "9", "-y")
    assert result.exit_code == 2
    assert "not between 1 and 6" in result.output


def test_override_option(invoke):
    result = invoke("--override", "max_prefix=26", "strategies", "10.0.0.0/24")
    assert result.exit_code == 0, result.output
    assert "Basic multi-tier" in result.output
    assert "Dev/staging environment" not in result.output


def test_bad_override(invoke):
    result = invoke("--override", "max_prefix", "settings")
    assert result.exit_code == 1
    assert "expected KEY=VAL" in result.output


def test_config_file(invoke, tmp_path):
    (tmp_path / "vpcplan.yml").write_text("planner:\n  reserved_per_block: 10\n")
    result = invoke("settings")
    assert result.exit_code == 0
    assert "reserved_per_block" in result.output
    assert "10" in result.output

    result = invoke("plan", "10.0.0.0/24", "-s", "1", "-y")
    assert "usable_ips_per_subnet:54" in result.output
