"""Command-line interface for MACSForge using argparse."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from macsforge import __version__
from macsforge.core.config import MACSConfig, QUADRATURE_METHODS, parse_temperatures
from macsforge.core.errors import InvalidInputError, MACSError
from macsforge.data.crosssections import ENERGY_UNITS, XS_UNITS
from macsforge.data.elements import parse_nucleus
from macsforge.data.exfor import ExforClient
from macsforge.reporting import TABLE_FORMATS, MACSTable
from macsforge.workflows.macs_pipeline import MACSPipeline

logger = logging.getLogger("macsforge")


def _temperatures(text: str):
    try:
        return parse_temperatures(text)
    except InvalidInputError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def _load_config(args: argparse.Namespace) -> MACSConfig:
    config = MACSConfig.from_json(args.config) if args.config else MACSConfig()
    return config.with_overrides(
        temperatures_keV=getattr(args, "temperatures", None),
        method=getattr(args, "method", None),
        panels_per_kt=getattr(args, "panels_per_kt", None),
        decimals=getattr(args, "decimals", None),
        workers=getattr(args, "workers", None),
        base_url=args.base_url,
        timeout_s=args.timeout,
        reduced_mass=False if getattr(args, "no_reduced_mass", False) else None,
    ).validate()


def cmd_compute(args: argparse.Namespace) -> None:
    config = _load_config(args)
    target = parse_nucleus(args.target).name

    if args.input:
        pipeline = MACSPipeline(config=config)
        report = pipeline.run(target, args.library, args.reaction, input_path=args.input,
                              energy_units=args.energy_units, xs_units=args.xs_units)
    else:
        with ExforClient(base_url=config.base_url, timeout_s=config.timeout_s) as client:
            pipeline = MACSPipeline(client=client, config=config)
            print(f"Downloading {args.library} data for {target}({args.reaction})...",
                  file=sys.stderr)
            report = pipeline.run(target, args.library, args.reaction, save_data=args.save_data)

    if args.plot:
        _save_plot(report, args.plot)

    table = MACSTable.from_report(report, decimals=config.decimals)
    text = table.to_text(args.format)
    if args.output:
        table.save(args.output, fmt=args.format)
        print(f"Wrote MACS table to {args.output}", file=sys.stderr)
    else:
        print(text)


def _save_plot(report, path: Path) -> None:
    from macsforge.plots import plot_cross_section_weighting

    try:
        plot_cross_section_weighting(report.curve, report.temperatures_keV,
                                     reduced_mass_factor=report.reduced_mass_factor,
                                     title=report.title, save_path=path)
    except ImportError as exc:
        raise InvalidInputError(f"Plotting needs matplotlib: {exc}") from exc
    print(f"Wrote plot to {path}", file=sys.stderr)


def cmd_libraries(args: argparse.Namespace) -> None:
    config = _load_config(args)
    target = parse_nucleus(args.target).name
    with ExforClient(base_url=config.base_url, timeout_s=config.timeout_s) as client:
        libraries = client.list_libraries(target, args.reaction)
    if not libraries:
        print(f"No evaluated data for {target}({args.reaction})")
        return
    for name in libraries:
        print(name)


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", type=Path, help="JSON file with MACSConfig fields")
    parser.add_argument("--base-url", help="EXFOR web service root")
    parser.add_argument("--timeout", type=float, help="Network timeout in seconds")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="macsforge",
        description="Maxwellian-Averaged Cross Sections from evaluated nuclear data libraries",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="-v for progress, -vv for debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    compute = subparsers.add_parser("compute", help="Compute MACS at one or more temperatures")
    compute.add_argument("target", help="Target nucleus, e.g. Mo-94")
    compute.add_argument("--library", "-l", default="JEFF-4.0", help="Library name, e.g. JEFF-4.0")
    compute.add_argument("--reaction", "-r", default="n,g", help="Reaction, e.g. n,g")
    compute.add_argument("--temperatures", "-t", type=_temperatures,
                         help="Comma-separated kT values in keV (default 8,25,30,90)")
    compute.add_argument("--method", choices=QUADRATURE_METHODS,
                         help="gauss (default): Gauss-Legendre on the interpolated curve; "
                              "trapezoid: raw samples over the whole range, as used for "
                              "published MACS tables")
    compute.add_argument("--panels-per-kt", type=int)
    compute.add_argument("--decimals", type=int)
    compute.add_argument("--workers", type=int, help="Threads for the temperature loop")
    compute.add_argument("--no-reduced-mass", action="store_true",
                         help="Treat energies as centre-of-mass (skip A/(1+A) scaling)")
    compute.add_argument("--input", type=Path, help="Local CSV table instead of downloading")
    compute.add_argument("--energy-units", choices=sorted(ENERGY_UNITS), default="keV")
    compute.add_argument("--xs-units", choices=sorted(XS_UNITS), default="mb")
    compute.add_argument("--save-data", type=Path, help="Write downloaded points as CSV")
    compute.add_argument("--format", "-f", choices=TABLE_FORMATS, default="table")
    compute.add_argument("--output", "-o", type=Path)
    compute.add_argument("--plot", type=Path,
                         help="Save the cross section with Maxwellian weights as an image")
    _add_common(compute)
    compute.set_defaults(func=cmd_compute)

    libraries = subparsers.add_parser("libraries", help="List libraries with data for a target")
    libraries.add_argument("target", help="Target nucleus, e.g. Mo-94")
    libraries.add_argument("--reaction", "-r", default="n,g")
    _add_common(libraries)
    libraries.set_defaults(func=cmd_libraries)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    try:
        args.func(args)
    except MACSError as exc:
        logger.debug("Aborted", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
