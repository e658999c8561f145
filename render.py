"""Render a gnuplot script to an image file.

Usage:
    python render.py plot.gp --output plot.svg
    python render.py plot.gp --data points=points.csv --data fit=fit.csv
    python render.py plot.gp --data points=points.tsv --separator "\t" --print-script

Each ``--data LABEL=FILE`` is read with pandas and embedded ahead of the
script body as a ``$LABEL`` data block, so the script can ``plot $LABEL ...``.
The script should set its own terminal (e.g. ``set terminal svg``).
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

import config as cfg
from gnuplot_script import GnuplotScript, GnuplotUnavailable

logger = logging.getLogger(__name__)


def _parse_data_arg(value: str) -> tuple[str, Path]:
    label, sep, path = value.partition("=")
    if not sep or not label or not path:
        raise argparse.ArgumentTypeError(f"expected LABEL=FILE, got {value!r}")
    return label, Path(path)


_SEPARATOR_ESCAPES = {"\\t": "\t", "\\s": " ", "\\\\": "\\"}


def _unescape(separator: str) -> str:
    """Turn shell-friendly escapes like ``\\t`` into the real separator."""
    return _SEPARATOR_ESCAPES.get(separator, separator)


def build_script(
    script_path: Path,
    data: list[tuple[str, Path]],
    separator: str = ",",
    precision: int = cfg.CSV_PRECISION,
    print_script: bool = False,
    save_script: bool = False,
) -> GnuplotScript:
    gp = GnuplotScript(print_script=print_script, save_script=save_script)
    for label, csv_path in data:
        # pandas' C parser only takes single-byte separators
        engine = "c" if separator.isascii() else "python"
        df = pd.read_csv(csv_path, sep=separator, engine=engine)
        columns = gp.add_data(label, df, separator=separator, precision=precision)
        logger.debug("Embedded $%s from %s: %s", label, csv_path, columns)
    gp.add_command(script_path.read_text(encoding="utf-8"))
    return gp


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Render a gnuplot script, with optional CSV data blocks, to an image.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("script", type=Path, help="gnuplot script file.")
    parser.add_argument(
        "--data",
        action="append",
        type=_parse_data_arg,
        default=[],
        metavar="LABEL=FILE",
        help="Delimited data file to embed as $LABEL (repeatable).",
    )
    parser.add_argument("--separator", default=",", help="Data file separator (default: ',').")
    parser.add_argument(
        "--precision",
        type=int,
        default=cfg.CSV_PRECISION,
        metavar="N",
        help=f"Significant digits for numbers (default: {cfg.CSV_PRECISION}).",
    )
    parser.add_argument(
        "--format",
        default=cfg.DEFAULT_IMAGE_FORMAT,
        help=f"Image file extension gnuplot writes (default: {cfg.DEFAULT_IMAGE_FORMAT}).",
    )
    parser.add_argument(
        "--output",
        type=Path,
        metavar="FILENAME",
        help="Output file (default: output/<script name>.<format>).",
    )
    parser.add_argument("--print-script", action="store_true", help="Echo the final script.")
    parser.add_argument("--save-script", action="store_true", help="Keep a copy of the final script in the working directory.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging.")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    gp = build_script(
        args.script,
        args.data,
        separator=_unescape(args.separator),
        precision=args.precision,
        print_script=args.print_script or cfg.PRINT_SCRIPT,
        save_script=args.save_script or cfg.SAVE_SCRIPT,
    )

    try:
        image = gp.execute(image_format=args.format)
    except GnuplotUnavailable as exc:
        print(f"[render] {exc}", file=sys.stderr)
        sys.exit(1)

    output = args.output or cfg.OUTPUT_DIR / f"{args.script.stem}.{args.format}"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(image)
    print(output)


if __name__ == "__main__":
    main()
