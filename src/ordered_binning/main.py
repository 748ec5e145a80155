"""
Application Entry Point.

This module serves as the Command Line Interface (CLI) for the ordered binning
library. Bins are defined either by a YAML file or inline options, and the
commands classify values, describe the configuration, or prepare boundaries.
"""

import json
import logging
import sys

import click

from ordered_binning.core.config import load_ordered_bins
from ordered_binning.core.exceptions import ConfigurationError, OutOfRangeError
from ordered_binning.core.ordered_bins import (
    EdgePolicy,
    OrderedBins,
    describe,
    make_increasing,
    ordered_bins,
)
from ordered_binning.core.version import __version__

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    force=True,
)

logger = logging.getLogger(__name__)


def _parse_number(text: str) -> int | float:
    """Parse integers exactly and everything else as float."""
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        return float(text)


def _parse_numbers(ctx, param, value):
    """Click callback turning "0,1,2" or a tuple of arguments into numbers."""
    if value is None:
        return None
    items = value.split(",") if isinstance(value, str) else value
    try:
        return [_parse_number(item) for item in items if item.strip()]
    except ValueError as e:
        raise click.BadParameter(f"not a number: {e}") from e


def _resolve_bins(ctx) -> OrderedBins:
    """
    Build the bins requested on the command line, or exit on failure.

    Args:
        ctx (click.Context): Context holding the group options.

    Returns:
        OrderedBins: The validated configuration.
    """
    options = ctx.obj
    if options["config"] and options["boundaries"]:
        raise click.UsageError("Illegal Usage: Provide --config OR --boundaries, not both.")
    if not options["config"] and not options["boundaries"]:
        raise click.UsageError("Missing Input: Must provide --config or --boundaries.")

    try:
        if options["config"]:
            return load_ordered_bins(options["config"])
        return ordered_bins(
            options["boundaries"],
            options["edge"],
            halo_below=options["halo_below"],
            halo_above=options["halo_above"],
            error_below=options["error_below"],
            error_above=options["error_above"],
            bin_below=options["bin_below"],
            bin_above=options["bin_above"],
        )
    except ConfigurationError as e:
        logger.error(f"Startup Failed: {e}", exc_info=options["verbose"])
        sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="ordered-binning")
@click.option("--config", default=None, help="YAML file defining the bins.")
@click.option(
    "--boundaries",
    default=None,
    callback=_parse_numbers,
    help='Comma-separated, strictly increasing boundaries, e.g. "0,1,2,3".',
)
@click.option(
    "--edge",
    type=click.Choice([p.value for p in EdgePolicy], case_sensitive=False),
    default=EdgePolicy.RIGHT.value,
    show_default=True,
    help="Bin owning values equal to an interior boundary.",
)
@click.option("--halo-below", type=float, default=None, help="Tolerance below the lowest boundary.")
@click.option("--halo-above", type=float, default=None, help="Tolerance above the highest boundary.")
@click.option(
    "--error-below/--no-error-below", default=True, help="Fail on values below the halo."
)
@click.option(
    "--error-above/--no-error-above", default=True, help="Fail on values above the halo."
)
@click.option("--bin-below", type=int, default=None, help="Sentinel bin for low values.")
@click.option("--bin-above", type=int, default=None, help="Sentinel bin for high values.")
@click.option("--verbose", is_flag=True, help="Enable debug-level logging.")
@click.pass_context
def cli(
    ctx,
    config: str | None,
    boundaries: list | None,
    edge: str,
    halo_below: float | None,
    halo_above: float | None,
    error_below: bool,
    error_above: bool,
    bin_below: int | None,
    bin_above: int | None,
    verbose: bool,
) -> None:
    """
    Ordered Binning CLI.

    Root command group that collects the bin definition shared by all
    subcommands.
    """
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    ctx.ensure_object(dict)
    ctx.obj.update(
        config=config,
        boundaries=boundaries,
        edge=edge,
        halo_below=halo_below,
        halo_above=halo_above,
        error_below=error_below,
        error_above=error_above,
        bin_below=bin_below,
        bin_above=bin_above,
        verbose=verbose,
    )


# =============================================================================
# CLASSIFY COMMAND
# =============================================================================


@cli.command(context_settings={"ignore_unknown_options": True})
@click.argument("values", nargs=-1, required=True, callback=_parse_numbers)
@click.option("--output-json", is_flag=True, help="Output bin indices as a JSON list.")
@click.pass_context
def classify(ctx, values: list, output_json: bool = False) -> None:
    """
    Print the bin index of each value, one per line.
    """
    bins = _resolve_bins(ctx)

    try:
        indices = [bins.classify(value) for value in values]
    except (OutOfRangeError, ValueError) as e:
        logger.error("Classification failed: %s", e)
        sys.exit(1)

    if output_json:
        click.echo(json.dumps(indices))
    else:
        for index in indices:
            click.echo(index)


# =============================================================================
# DESCRIBE COMMAND
# =============================================================================


@cli.command("describe")
@click.pass_context
def describe_command(ctx) -> None:
    """Print the bin configuration and the range of returned indices."""
    bins = _resolve_bins(ctx)
    low, high = bins.bin_range()
    click.echo(describe(bins))
    click.echo(f"  bin range: {low}..{high}")


# =============================================================================
# MAKE-INCREASING COMMAND
# =============================================================================


@cli.command("make-increasing", context_settings={"ignore_unknown_options": True})
@click.argument("values", nargs=-1, required=True, callback=_parse_numbers)
def make_increasing_command(values: list) -> None:
    """Drop values that do not increase, keeping first occurrences."""
    click.echo(",".join(str(v) for v in make_increasing(values)))


if __name__ == "__main__":
    cli()
