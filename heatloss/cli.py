"""
heatloss CLI.

Room heat-loss breakdowns, postcode climate lookup and the default U-value
tables from the command line.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError as ModelValidationError
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .core.config import settings
from .core.models import RoomModel
from .climate.reference_table import ClimateTable
from .climate.resolver import ClimateResolver
from .fabric.u_value_tables import wall_lookup_rows
from .heat.aggregator import compute_room_loss
from .heat.ventilation import CombinationPolicy, RoomType, infer_age_band, tier_for_age_band
from .utils.logging_config import ensure_logging
from .utils.validation import ValidationError, validate_postcode

app = typer.Typer(
    name="heatloss",
    help="Room-by-room design heat loss for UK dwellings",
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write JSON-lines log records to this file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log at DEBUG level"),
):
    """Room-by-room design heat loss for UK dwellings."""
    ensure_logging("DEBUG" if verbose else settings.log_level, log_file or settings.log_file)


def _load_room(path: Path) -> RoomModel:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return RoomModel.model_validate(data)
    except (OSError, json.JSONDecodeError, ModelValidationError) as e:
        console.print(f"[red]Could not load room from {path}:[/red] {e}")
        raise typer.Exit(1)


@app.command()
def room(
    input_file: Path = typer.Argument(..., help="Room JSON file"),
    indoor: float = typer.Option(settings.default_indoor_temp, "--indoor", "-i", help="Indoor design temperature (°C)"),
    outdoor: float = typer.Option(-3.0, "--outdoor", "-o", help="External design temperature (°C)"),
    age_band: str = typer.Option("2012-present", "--age-band", "-a", help="Property age band or year"),
    room_type: RoomType = typer.Option(RoomType.HABITABLE, "--room-type", "-t", help="Ventilation room type"),
    policy: CombinationPolicy = typer.Option(
        CombinationPolicy(settings.default_policy), "--policy", "-p", help="Combine base and device flows"
    ),
    volume: Optional[float] = typer.Option(None, "--volume", help="Fallback room volume (m³)"),
    as_json: bool = typer.Option(False, "--json", help="Print the breakdown as JSON"),
):
    """
    Compute the design heat loss of one room.
    """
    model = _load_room(input_file)
    band = infer_age_band(age_band)
    tier = tier_for_age_band(age_band)

    breakdown = compute_room_loss(
        model,
        indoor,
        outdoor,
        volume_m3=volume,
        age_band=age_band,
        room_type=room_type,
        policy=policy,
    )

    if as_json:
        console.print_json(json.dumps(breakdown.to_dict()))
        return

    console.print(Panel.fit(
        f"[bold blue]{model.name or model.id}[/bold blue]\n"
        f"ΔT {indoor - outdoor:.1f} K | {band or tier.value} | {room_type.value} | policy {policy.value}",
        border_style="blue",
    ))

    table = Table(title="Heat Loss")
    table.add_column("Component", style="cyan")
    table.add_column("Value", justify="right", style="white")
    table.add_row("Walls", f"{breakdown.q_walls_w:,.0f} W")
    table.add_row("Floors", f"{breakdown.q_floors_w:,.0f} W")
    table.add_row("Ceilings", f"{breakdown.q_ceilings_w:,.0f} W")
    table.add_row("Openings", f"{breakdown.q_openings_w:,.0f} W")
    table.add_row("[bold]Transmission[/bold]", f"[bold]{breakdown.q_transmission_w:,.0f} W[/bold]")
    table.add_row("Ventilation", f"{breakdown.q_vent_w:,.0f} W")
    table.add_row("[bold green]Total[/bold green]", f"[bold green]{breakdown.q_total_w:,.0f} W[/bold green]")
    table.add_row("Flow (base / devices)", f"{breakdown.flow_base_lps:g} / {breakdown.flow_devices_lps:g} l/s")
    table.add_row("Flow", f"{breakdown.flow_m3h:.1f} m³/h")
    table.add_row("Air changes", f"{breakdown.ach:.2f} /h")
    console.print(table)


@app.command()
def climate(
    postcode: str = typer.Argument(..., help="UK postcode (full or partial)"),
    lat_lon: Optional[str] = typer.Option(None, "--lat-lon", help='Location override, e.g. "51.5,-0.12"'),
    altitude: Optional[float] = typer.Option(None, "--altitude", help="Site altitude (m)"),
    table_path: Optional[Path] = typer.Option(None, "--table", help="Climate reference table (JSON or CSV)"),
):
    """
    Resolve design external temperature and heating degree days for a postcode.
    """
    try:
        label = validate_postcode(postcode)
    except ValidationError as e:
        if not postcode.strip() and not lat_lon:
            console.print(f"[red]{e}[/red]")
            for hint in e.suggestions:
                console.print(f"  {hint}")
            raise typer.Exit(1)
        # Partial postcodes still match outcode and area rows
        label = postcode.strip().upper()

    table = ClimateTable.load(table_path) if table_path else None
    resolver = ClimateResolver(table=table)

    console.print(f"[cyan]Resolving climate for {label or lat_lon}...[/cyan]")
    result = resolver.resolve_sync(postcode, lat_lon=lat_lon, altitude_m=altitude)

    out = Table(title=f"Climate: {label or lat_lon}")
    out.add_column("Field", style="cyan")
    out.add_column("Value", style="white")
    out.add_row("Design temperature", "N/A" if result.design_temp is None else f"{result.design_temp:g} °C")
    out.add_row("Heating degree days", "N/A" if result.hdd is None else f"{result.hdd:g}")
    if result.lat is not None and result.lon is not None:
        out.add_row("Location", f"{result.lat:.4f}, {result.lon:.4f}")
    if result.altitude_m is not None:
        out.add_row("Altitude", f"{result.altitude_m:.0f} m")
    out.add_row("Sources", ", ".join(result.sources) or "none")
    console.print(out)

    if not result.complete:
        console.print("[yellow]Some values could not be determined; enter them manually.[/yellow]")


@app.command("u-values")
def u_values():
    """Show the default wall U-values by age band and construction."""
    table = Table(title="Default Wall U-values (W/m²K)")
    table.add_column("Age band", style="cyan")
    table.add_column("Construction", style="white")
    table.add_column("U", justify="right", style="green")
    for band, construction, u in wall_lookup_rows():
        table.add_row(band, construction, f"{u:.2f}")
    console.print(table)


@app.command()
def version():
    """Show version information."""
    from . import __version__
    console.print(f"heatloss v{__version__}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
