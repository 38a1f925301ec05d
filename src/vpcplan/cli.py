import click
from rich.console import Console
from rich.table import Table

from vpcplan import __version__
from vpcplan.config import ConfigError, get_config
from vpcplan.controller import OUTPUT_FORMATS, PlanController
from vpcplan.network import NetworkError
from vpcplan.planner import PlanningError
from vpcplan.session import SessionError
from vpcplan.validation import PlacementError

console = Console()


def handle_errors(fn):
    """Decorator to catch and display common errors."""
    import functools

    @functools.wraps(fn)
    def wrapper(*args, **kwargs):
        try:
            return fn(*args, **kwargs)
        except (ConfigError, NetworkError, PlanningError, PlacementError, SessionError) as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise SystemExit(1)

    return wrapper


@click.group()
@click.version_option(version=__version__, prog_name="vpcplan")
@click.option("-c", "--config", "config_path", default=None, help="Path to a planner YAML file")
@click.option("--override", multiple=True, help="Override planner settings as KEY=VAL")
@click.pass_context
@handle_errors
def cli(ctx, config_path, override):
    """vpcplan - Plan public, private and database subnet tiers inside a VPC."""
    ctx.obj = PlanController(get_config(config_path, override))


@cli.command()
@click.argument("cidr")
@click.pass_obj
@handle_errors
def info(controller, cidr):
    """Show size and range details for a VPC CIDR."""
    controller.info(cidr)


@cli.command()
@click.argument("cidr")
@click.pass_obj
@handle_errors
def strategies(controller, cidr):
    """List the subnetting strategies that fit a VPC."""
    controller.strategies(cidr)


@cli.command()
@click.argument("cidr")
@click.option("-s", "--strategy", "strategy_index", type=int, default=None, help="Strategy number from 'vpcplan strategies'")
@click.option("-y", "--accept-defaults", is_flag=True, help="Accept every suggested start and confirm without prompting")
@click.option(
    "-f",
    "--format",
    "output_format",
    type=click.Choice(OUTPUT_FORMATS),
    default="record",
    show_default=True,
    help="Result format",
)
@click.pass_obj
@handle_errors
def plan(controller, cidr, strategy_index, accept_defaults, output_format):
    """Place subnet tiers inside a VPC and print the confirmed allocation."""
    controller.plan(
        cidr,
        strategy_index=strategy_index,
        accept_defaults=accept_defaults,
        output_format=output_format,
    )


@cli.command()
@click.pass_obj
@handle_errors
def settings(controller):
    """Show the planner settings in effect."""
    table = Table(title="Planner Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    for key, value in controller.config.to_dict().items():
        table.add_row(key, str(value))

    console.print(table)
