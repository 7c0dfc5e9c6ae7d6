"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.json_store import JsonStore
from ..config import AppConfig, get_default_config_path
from ..domain.availability import AvailabilityResolver
from ..domain.booking_validator import BookingValidator, ValidationResult
from ..domain.exceptions import CronosError
from ..domain.intervals import format_time, parse_date
from ..domain.models import AppointmentStatus
from ..domain.slot_generator import SlotGenerator
from ..services.booking_service import BookingService

app = typer.Typer(
    name="cronos",
    help="Resolve professional availability and book appointment slots",
    add_completion=False
)

console = Console()

logger = logging.getLogger(__name__)

WEEKDAY_NAMES = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
TenantOption = Annotated[Optional[str], typer.Option("--tenant", help="Tenant id (overrides the configured tenant)")]
DateOption = Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD), defaults to today")]
ServiceOption = Annotated[Optional[str], typer.Option("--service", "-s", help="Service id; its duration sets the slot length")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging")]


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path], tenant: Optional[str], verbose: bool):
    """Load the configuration and wire up the booking service."""
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    _setup_logging("DEBUG" if verbose else config.log_level)
    logger.debug("Loaded %s, store %s", config_path, config.data_file)

    store = JsonStore.from_file(
        config.data_file,
        default_slot_interval=config.scheduling.default_slot_interval,
    )
    resolver = AvailabilityResolver(fallback_window=config.scheduling.fallback_window.to_interval())
    service = BookingService(
        store=store,
        slot_generator=SlotGenerator(resolver),
        booking_validator=BookingValidator(resolver),
    )
    return service, config.context(tenant)


def _resolve_date(value: Optional[str]):
    if value:
        return parse_date(value)
    return pendulum.today().date()


def _print_rejection(result: ValidationResult) -> None:
    console.print(f"[bold red]✗ Rejected ({result.reason.value}):[/bold red] {result.reason.message}")
    if result.conflicting_ids:
        console.print(f"   Conflicts with: {', '.join(result.conflicting_ids)}")


def _fail(exc: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {exc}")
    raise typer.Exit(1)


@app.command()
def slots(
    professional: Annotated[str, typer.Argument(help="Professional id")],
    date: DateOption = None,
    service_id: ServiceOption = None,
    config_file: ConfigOption = None,
    tenant: TenantOption = None,
    verbose: VerboseOption = False,
):
    """
    List open slots of a professional on a date.

    Examples:

        cronos slots p1 --date 2024-11-25
        cronos slots p1 --date 2024-11-25 --service s1
    """
    try:
        service, ctx = _load(config_file, tenant, verbose)
        day = _resolve_date(date)

        found = asyncio.run(service.available_slots(
            ctx,
            professional_id=professional,
            day=day,
            service_id=service_id,
        ))
    except (CronosError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not found:
        console.print(f"[yellow]⚠ No open slots for {professional} on {day.isoformat()}.[/yellow]")
        return

    console.print(f"[bold green]✓ {len(found)} open slot(s) for {professional} on {day.isoformat()}:[/bold green]\n")
    for slot in found:
        console.print(f"  {slot.format_display()}")


@app.command()
def check(
    professional: Annotated[str, typer.Argument(help="Professional id")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    date: DateOption = None,
    service_id: ServiceOption = None,
    config_file: ConfigOption = None,
    tenant: TenantOption = None,
    verbose: VerboseOption = False,
):
    """
    Check whether a start time can be booked, without booking it.
    """
    try:
        service, ctx = _load(config_file, tenant, verbose)
        day = _resolve_date(date)

        result = asyncio.run(service.check_availability(
            ctx,
            professional_id=professional,
            day=day,
            start=start,
            service_id=service_id,
        ))
    except (CronosError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if result.ok:
        console.print(f"[bold green]✓ {start} on {day.isoformat()} is available.[/bold green]")
    else:
        _print_rejection(result)
        raise typer.Exit(2)


@app.command()
def book(
    professional: Annotated[str, typer.Argument(help="Professional id")],
    start: Annotated[str, typer.Argument(help="Start time (HH:MM)")],
    client: Annotated[str, typer.Option("--client", help="Client id")],
    date: DateOption = None,
    service_id: ServiceOption = None,
    notes: Annotated[str, typer.Option("--notes", help="Free-text notes")] = "",
    config_file: ConfigOption = None,
    tenant: TenantOption = None,
    verbose: VerboseOption = False,
):
    """
    Validate and store a new appointment.
    """
    try:
        service, ctx = _load(config_file, tenant, verbose)
        day = _resolve_date(date)

        outcome = asyncio.run(service.book(
            ctx,
            professional_id=professional,
            day=day,
            start=start,
            client_id=client,
            service_id=service_id,
            notes=notes,
        ))
    except (CronosError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not outcome.ok:
        _print_rejection(outcome.result)
        raise typer.Exit(2)

    appointment = outcome.appointment
    console.print(
        f"[bold green]✓ Booked {appointment.id}:[/bold green] "
        f"{appointment.date.isoformat()} {appointment.start_time}-{appointment.end_time}"
    )


@app.command()
def cancel(
    appointment_id: Annotated[str, typer.Argument(help="Appointment id")],
    config_file: ConfigOption = None,
    tenant: TenantOption = None,
    verbose: VerboseOption = False,
):
    """
    Cancel an appointment, freeing its time.
    """
    try:
        service, ctx = _load(config_file, tenant, verbose)
        asyncio.run(service.update_status(
            ctx,
            appointment_id=appointment_id,
            status=AppointmentStatus.CANCELLED,
        ))
    except (CronosError, FileNotFoundError, ValueError) as e:
        _fail(e)

    console.print(f"[green]✓ Appointment {appointment_id} cancelled.[/green]")


@app.command()
def professionals(
    config_file: ConfigOption = None,
    tenant: TenantOption = None,
    verbose: VerboseOption = False,
):
    """
    List the tenant's professionals and their weekly hours.
    """
    try:
        service, ctx = _load(config_file, tenant, verbose)
        found = asyncio.run(service.list_professionals(ctx))
    except (CronosError, FileNotFoundError, ValueError) as e:
        _fail(e)

    if not found:
        console.print(f"[yellow]No professionals for tenant {ctx.tenant_id}.[/yellow]")
        return

    table = Table(
        title="Professionals",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Id", style="bold yellow")
    table.add_column("Name")
    table.add_column("Slot", justify="right")
    table.add_column("Weekly hours", style="dim")

    for professional in found:
        hours = ", ".join(
            f"{WEEKDAY_NAMES[rule.day_of_week]} "
            + " ".join(f"{format_time(i.start)}-{format_time(i.end)}" for i in rule.intervals)
            for rule in professional.weekly_rules if rule.active
        )
        table.add_row(professional.id, professional.name, f"{professional.slot_interval} min", hours)

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]cronos[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
