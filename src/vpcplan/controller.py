import click
import yaml
from rich.console import Console
from rich.table import Table

from vpcplan.config import PlannerConfig
from vpcplan.network import FormatError, describe_vpc, parse_vpc
from vpcplan.planner import BlockPlan
from vpcplan.result import AllocationResult
from vpcplan.session import PlacementSession, Preview, SessionState
from vpcplan.strategies import Strategy, Tier, az_recommendation, viable_strategies
from vpcplan.validation import PlacementError, aligned_examples

console = Console()

TIER_STYLES = {
    Tier.PUBLIC: "green",
    Tier.PRIVATE: "blue",
    Tier.DATABASE: "magenta",
}

OUTPUT_FORMATS = ("record", "lists", "tfvars", "yaml")


class PlanController:
    """Drives a planning run: VPC summary, strategy choice, placement, confirmation."""

    def __init__(self, config: PlannerConfig | None = None):
        self.config = config or PlannerConfig()

    def info(self, cidr: str) -> None:
        """Print the size and range type of a VPC."""
        vpc = parse_vpc(cidr, self.config)
        info = describe_vpc(vpc, self.config)

        table = Table(title=f"VPC {info.cidr}")
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="green")
        table.add_row("Range", f"{info.first} - {info.last}")
        table.add_row("Total IPs", str(info.total_addresses))
        table.add_row("Usable IPs", str(info.usable_addresses))
        table.add_row("Bits for subnetting", str(info.available_bits))
        table.add_row("Range type", info.range_type)
        table.add_row("Capacity", info.capacity)
        console.print(table)

        if not info.private:
            console.print("[yellow]Note:[/yellow] this is a public IP range - ensure this is intentional")

    def strategies(self, cidr: str) -> list[tuple[Strategy, BlockPlan]]:
        """Print the strategies that fit a VPC."""
        vpc = parse_vpc(cidr, self.config)
        options = viable_strategies(vpc, self.config)
        self._print_strategies(vpc.cidr, options)
        return options

    def plan(
        self,
        cidr: str,
        strategy_index: int | None = None,
        accept_defaults: bool = False,
        output_format: str = "record",
    ) -> AllocationResult:
        """Run placement for a VPC and print the confirmed result."""
        vpc = parse_vpc(cidr, self.config)
        info = describe_vpc(vpc, self.config)
        console.print(f"[bold]VPC:[/bold] {vpc.cidr} ({info.total_addresses} IPs, {info.range_type})")
        console.print(f"[bold]Bits available for subnetting:[/bold] {info.available_bits}")

        options = viable_strategies(vpc, self.config)
        if strategy_index is None:
            self._print_strategies(vpc.cidr, options)
            strategy_index = click.prompt(
                "Choose a subnetting strategy", type=click.IntRange(1, len(options))
            )
        elif not 1 <= strategy_index <= len(options):
            raise click.BadParameter(
                f"{strategy_index} is not between 1 and {len(options)}. "
                f"Run 'vpcplan strategies {vpc.cidr}' to list them.",
                param_hint="'--strategy'",
            )

        strategy, plan = options[strategy_index - 1]
        console.print(f"[bold]Strategy:[/bold] {strategy.describe(plan)}")

        session = PlacementSession(vpc, strategy, plan)
        while not session.confirmed:
            console.print("\n[bold cyan]=== SUBNET PLACEMENT CONFIGURATION ===[/bold cyan]")
            while session.state != SessionState.PREVIEWING:
                self._place_tier(session, accept_defaults)

            preview = session.preview()
            self._print_preview(preview)

            if accept_defaults or click.confirm("Confirm this allocation?", default=True):
                result = session.confirm()
            else:
                console.print("\n[blue]Let's reconfigure the placement...[/blue]")
                session.reconfigure()

        console.print(f"\n[bold green]Generated subnets:[/bold green] {', '.join(result.subnets)}")
        console.print(f"[bold]AZ recommendation:[/bold] {az_recommendation(result.total_subnets)}\n")
        self.emit(result, output_format)
        return result

    def emit(self, result: AllocationResult, output_format: str = "record") -> None:
        """Write the machine-readable result to stdout."""
        if output_format == "record":
            click.echo(result.to_record_line())
        elif output_format == "lists":
            click.echo(yaml.safe_dump(result.tier_lists(), default_flow_style=False, sort_keys=False), nl=False)
        elif output_format == "tfvars":
            for key, value in result.to_tfvars().items():
                click.echo(f"{key}={value}")
        elif output_format == "yaml":
            click.echo(yaml.safe_dump(result.summary(), default_flow_style=False, sort_keys=False), nl=False)
        else:
            raise click.BadParameter(f"Unknown output format '{output_format}'")

    def _place_tier(self, session: PlacementSession, accept_defaults: bool) -> None:
        spec = session.current_tier
        style = TIER_STYLES[spec.tier]
        default = session.default_start_ip()
        console.print(f"\n[{style}][{spec.tier.label} GROUP][/{style}] {spec.subnet_count} subnet(s)")
        console.print(f"Suggested start for {spec.tier.label} group: [yellow]{default}[/yellow]")

        if accept_defaults or click.confirm("Accept this default?", default=True):
            try:
                session.accept_default()
                return
            except PlacementError as e:
                console.print(f"[bold red]Default start unavailable:[/bold red] {e}")
                if accept_defaults:
                    raise
        else:
            session.decline_default()

        self._print_requirements(session)
        while True:
            candidate = click.prompt(f"Enter starting IP for {spec.tier.label} group")
            try:
                session.override(candidate)
            except (PlacementError, FormatError) as e:
                console.print(f"[bold red]Error:[/bold red] {e}")
                console.print("[yellow]Please try again with a valid, non-overlapping IP.[/yellow]")
                continue
            console.print(f"[green]Valid IP: {candidate}[/green]")
            return

    def _print_requirements(self, session: PlacementSession) -> None:
        spec = session.current_tier
        console.print(f"\n[bold cyan]=== CUSTOM IP FOR {spec.tier.label} GROUP ===[/bold cyan]")
        console.print(f"  Must be within VPC range: {session.vpc.range_label}")
        console.print(
            f"  Must align to {session.plan.mask} boundaries (every {session.block_size} IPs)"
        )
        if session.placed():
            console.print("  Must not overlap with groups already placed")
        examples = aligned_examples(session.vpc, session.block_size, self.config.example_count)
        if examples:
            console.print(f"  Examples of valid aligned IPs: {', '.join(examples)}")

    def _print_strategies(self, cidr: str, options: list[tuple[Strategy, BlockPlan]]) -> None:
        table = Table(title=f"Subnetting Strategies for {cidr}")
        table.add_column("#", style="cyan")
        table.add_column("Tiers", style="green")
        table.add_column("Use case")
        table.add_column("Mask")
        table.add_column("Usable IPs")

        for i, (strategy, plan) in enumerate(options, start=1):
            usable = str(plan.usable_per_subnet)
            if plan.compact:
                usable += " [yellow](compact)[/yellow]"
            table.add_row(str(i), strategy.label, strategy.use_case, plan.mask, usable)

        console.print(table)
        console.print("[dim]One cushion block is reserved between subnet groups.[/dim]")

    def _print_preview(self, preview: Preview) -> None:
        table = Table(title="Proposed Allocation")
        table.add_column("Tier")
        table.add_column("Subnet", style="cyan")
        table.add_column("Usable IPs")

        for allocation in preview.allocations:
            style = TIER_STYLES[allocation.tier]
            for cidr in allocation.subnets:
                table.add_row(
                    f"[{style}]{allocation.tier.label}[/{style}]",
                    cidr,
                    str(preview.usable_per_subnet),
                )

        console.print(table)
        console.print(
            f"Subnet mask: {preview.plan.mask} ({preview.plan.block_size} IPs per subnet), "
            f"{preview.usable_per_subnet} usable after {self.config.reserved_per_block} reserved"
        )
