"""Command-line entry point: ``intervalalert`` / ``python -m intervalalert``."""

from __future__ import annotations

import logging
from typing import Optional

import typer

from .formatting import format_time
from .settings import load_settings
from .timer.models import (
    MIN_TOTAL_DURATION,
    FixedInterval,
    IntervalMode,
    Percentage,
    TimerConfiguration,
)
from .timer.schedule import alert_levels, derive_offsets, normalized_offsets

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    context_settings={"help_option_names": ["--help", "-h"]},
)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
    )


def _build_config(
    duration: Optional[float],
    percent: Optional[int],
    every: Optional[float],
) -> Optional[TimerConfiguration]:
    """Configuration from CLI options, or None if none were given."""
    if duration is None and percent is None and every is None:
        return None
    if percent is not None and every is not None:
        raise typer.BadParameter("use either --percent or --every, not both")

    settings = load_settings()
    total = duration if duration is not None else float(settings.default_duration)
    if total < MIN_TOTAL_DURATION:
        raise typer.BadParameter(
            f"duration must be at least {MIN_TOTAL_DURATION} seconds",
            param_hint="--duration",
        )

    mode: IntervalMode
    if percent is not None:
        mode = Percentage(percent)
    elif every is not None:
        mode = FixedInterval(every)
    else:
        mode = settings.default_interval_mode()
    return TimerConfiguration(total_duration=total, interval_mode=mode)


DurationOpt = typer.Option(None, "--duration", "-d", help="Total duration in seconds.")
PercentOpt = typer.Option(None, "--percent", "-p", min=1, max=100, help="Alert every N% of the total.")
EveryOpt = typer.Option(None, "--every", "-e", help="Alert every T seconds.")
VerboseOpt = typer.Option(False, "--verbose", "-v", help="Enable debug logging.")


@app.command()
def run(
    duration: Optional[float] = DurationOpt,
    percent: Optional[int] = PercentOpt,
    every: Optional[float] = EveryOpt,
    preset: Optional[str] = typer.Option(None, "--preset", help="Start a saved preset by name."),
    verbose: bool = VerboseOpt,
) -> None:
    """Start the tray timer (or resume an interrupted one)."""
    _configure_logging(verbose)
    from .app import run_app

    config = _build_config(duration, percent, every)
    if preset is not None:
        if config is not None:
            raise typer.BadParameter("--preset cannot be combined with other timer options")
        from .database.db import init_db
        from .database.presets import get_preset

        init_db()
        found = get_preset(preset)
        if found is None:
            typer.echo(f"No preset named {preset!r}", err=True)
            raise typer.Exit(code=1)
        config = found.configuration

    raise typer.Exit(code=run_app(config))


@app.command()
def presets(verbose: bool = VerboseOpt) -> None:
    """List stored presets."""
    _configure_logging(verbose)
    from .database.db import init_db
    from .database.presets import list_presets

    init_db()
    for p in list_presets():
        tag = "built-in" if p.is_built_in else "custom"
        typer.echo(
            f"{p.name:<20} {format_time(p.configuration.total_duration):>8}  "
            f"{p.configuration.interval_mode.display_label:<16} [{tag}]"
        )


@app.command()
def schedule(
    duration: Optional[float] = DurationOpt,
    percent: Optional[int] = PercentOpt,
    every: Optional[float] = EveryOpt,
) -> None:
    """Print the alert schedule a configuration produces."""
    config = _build_config(duration, percent, every) or load_settings().default_configuration()
    rows = zip(derive_offsets(config), normalized_offsets(config), alert_levels(config))
    for index, (offset, position, level) in enumerate(rows, start=1):
        typer.echo(f"{index:>3}  {format_time(offset):>8}  {position:6.1%}  {level.label}")


def main() -> None:
    app()


if __name__ == "__main__":
    main()
