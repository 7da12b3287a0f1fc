"""
Command line interface for the techshare package.
"""

import argparse
import sys
from pathlib import Path
from typing import Optional, Sequence

import pandas as pd
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..adapters.economy import ConstantGDP
from ..adapters.repositories.json_repository import dump_debug
from ..bootstrap import bootstrap_scenario, bootstrap_subsector
from ..domain import ContractViolationError
from ..domain.constants import Year
from ..logging_config import LoggingConfig
from ..simulation import SimulationConfig


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Evaluate the technologies of one subsector for one period.")
    parser.add_argument("--technologies", type=Path, required=True, help="Path to the technologies JSON file")
    parser.add_argument("--prices", type=Path, default=None, help="Path to the market prices JSON file")
    parser.add_argument(
        "--global-technologies",
        type=Path,
        default=None,
        help="Path to the global technology templates JSON file",
    )
    parser.add_argument("--region", type=str, default="USA", help="Region name (default: USA)")
    parser.add_argument("--sector", type=str, default="electricity", help="Sector name (default: electricity)")
    parser.add_argument("--demand", type=float, required=True, help="Subsector demand for the period")
    parser.add_argument("--period", type=int, default=0, help="Model period (default: 0)")
    parser.add_argument(
        "--gdp-per-capita",
        type=float,
        default=None,
        help="Regional GDP per capita scaled to the base period, used by fuel preference elasticities",
    )
    parser.add_argument("--config", type=Path, default=None, help="Simulation config YAML file")
    parser.add_argument("--start-year", type=int, default=2005, help="First model year (default: 2005)")
    parser.add_argument("--end-year", type=int, default=2050, help="Last model year (default: 2050)")
    parser.add_argument("--time-step", type=int, default=5, help="Years per period (default: 5)")
    parser.add_argument("--calibrate", action="store_true", help="Calibrate share weights before producing")
    parser.add_argument("--debug-checking", action="store_true", help="Report implausibly large share weights")
    parser.add_argument(
        "--log-level",
        type=str,
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: WARNING)",
    )
    parser.add_argument("--output-csv", type=Path, default=None, help="Write the results table to this CSV file")
    parser.add_argument("--debug-json", type=Path, default=None, help="Write the per-technology diagnostic JSON")
    return parser


def _display_results_table(console: Console, results: pd.DataFrame, region: str, sector: str, period: int) -> None:
    """Display one row per technology."""
    table = Table(title=f"{sector} in {region}, period {period}")
    table.add_column("Technology", style="cyan")
    table.add_column("Year", justify="right")
    table.add_column("Fuel")
    table.add_column("Cost", justify="right", style="magenta")
    table.add_column("Share", justify="right", style="green")
    table.add_column("Output", justify="right")
    table.add_column("Input", justify="right")
    table.add_column("CO2", justify="right", style="yellow")

    output_column = f"output:{sector}"
    for record in results.to_dict("records"):
        output = record.get(output_column)
        co2 = record.get("emission:CO2")
        table.add_row(
            str(record["technology"]),
            str(record["year"]),
            record["fuel"] or "-",
            f"{record['tech_cost']:.4g}",
            f"{record['share']:.4f}",
            "-" if output is None else f"{output:.4g}",
            f"{record['input']:.4g}",
            "-" if co2 is None else f"{co2:.4g}",
        )

    console.print(table)


def run_technology_period(argv: Optional[Sequence[str]] = None) -> None:
    """
    Evaluate one subsector for one period with the configuration provided via command line arguments.
    """
    console = Console()
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        if args.config is not None:
            config = SimulationConfig.from_yaml(args.config)
        else:
            config = SimulationConfig(
                start_year=Year(args.start_year),
                end_year=Year(args.end_year),
                time_step=args.time_step,
                debug_checking=args.debug_checking,
                log_level=args.log_level,
            )

        scenario = bootstrap_scenario(config, prices_path=args.prices)
        runner = bootstrap_subsector(
            scenario,
            args.technologies,
            args.region,
            args.sector,
            global_technologies_path=args.global_technologies,
        )
        gdp = ConstantGDP(args.gdp_per_capita) if args.gdp_per_capita is not None else None
        runner.init_calc(args.period)
        results = runner.run_period(args.demand, gdp, args.period, calibrate=args.calibrate)
    except (ContractViolationError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]Period evaluation failed: {escape(str(e))}[/red]")
        sys.exit(1)

    _display_results_table(console, results, args.region, args.sector, args.period)

    if args.output_csv is not None:
        args.output_csv.parent.mkdir(parents=True, exist_ok=True)
        results.to_csv(args.output_csv, index=False)
        console.print(f"[green]Results written to:[/green] {args.output_csv}")

    debug_json = args.debug_json
    if debug_json is None and LoggingConfig.DEBUG_DUMP and config.output_dir is not None:
        debug_json = config.output_dir / f"technologies_debug_period_{args.period}.json"
    if debug_json is not None:
        debug_json.parent.mkdir(parents=True, exist_ok=True)
        debug_json.write_text(dump_debug(runner.technologies, args.period), encoding="utf-8")
        console.print(f"[green]Diagnostics written to:[/green] {debug_json}")
