"""Stateful gnuplot script builder.

A ``GnuplotScript`` accumulates gnuplot commands line by line. Data is
embedded inline as named here-document blocks, so the whole plot lives in
one script file. ``execute()`` hands the script to gnuplot and returns the
bytes of the image it wrote to stdout.

Usage::

    gp = GnuplotScript()
    gp.add_command("set terminal svg")
    gp.add_data("points", df)
    gp.add_plot_for_label("points", ["using 1:2 with lines", "using 1:3 with points"])
    svg = gp.execute()
"""
from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

import config as cfg
from backends import make_stem, render_gnuplot
from backends.gnuplot import SCRIPT_SUFFIX
from tabular import header_columns, to_csv_string

logger = logging.getLogger(__name__)

_ENHANCED_CONTROL_CHARS = "^_@&~"
_CONTINUATION = ",\\\n"


class GnuplotError(Exception):
    pass


class ExternalToolUnavailable(GnuplotError):
    """The external renderer could not be run or produced no output."""

    def __init__(self, message: str, stderr: str = "") -> None:
        super().__init__(message)
        self.stderr = stderr


class GnuplotUnavailable(ExternalToolUnavailable):
    pass


class ScriptConsumedError(GnuplotError):
    pass


def escape_enhanced(text: str) -> str:
    """For enhanced mode text, escape all enhancement control characters."""
    for ch in _ENHANCED_CONTROL_CHARS:
        text = text.replace(ch, "\\" + ch)
    return text


class GnuplotScript:
    def __init__(
        self,
        script: Sequence[str] | None = None,
        print_script: bool | None = None,
        save_script: bool | None = None,
    ) -> None:
        self._script: list[str] = list(script) if script is not None else ["set encoding utf8"]
        self.print_script = cfg.PRINT_SCRIPT if print_script is None else print_script
        self.save_script = cfg.SAVE_SCRIPT if save_script is None else save_script
        self._executed = False

    # ── Introspection ─────────────────────────────────────────────────────────

    @property
    def lines(self) -> tuple[str, ...]:
        return tuple(self._script)

    @property
    def text(self) -> str:
        return "\n".join(self._script)

    @property
    def executed(self) -> bool:
        return self._executed

    # ── Builder ───────────────────────────────────────────────────────────────

    def add_command(self, commands: str) -> None:
        """Add a single command, or a multiline series of commands."""
        self._ensure_building()
        for line in commands.strip().split("\n"):
            self._script.append(line.strip())

    def add_data(
        self,
        label: str,
        data: Any,
        separator: str = ",",
        precision: int = cfg.CSV_PRECISION,
    ) -> list[str]:
        """Embed ``data`` as a ``$label`` here-document and return its column names.

        ``data`` is anything ``tabular.to_csv_string`` accepts: a DataFrame,
        a list of DataFrames (concatenated side by side), a mapping of
        prefix -> DataFrame, pre-formatted delimited text, or a ``TabularData``.
        """
        self._ensure_building()
        data_csv = to_csv_string(data, separator=separator, precision=precision)
        self.add_command(f'set datafile separator "{separator}"')
        # Data lines go in verbatim; stripping would eat whitespace separators.
        self._script.append(f"${label} << EOD")
        if data_csv:
            self._script.extend(data_csv.split("\n"))
        self._script.append("EOD")
        return header_columns(data_csv, separator)

    def add_data_indexed(
        self,
        prefix: str,
        datasets: Sequence[Any],
        separator: str = ",",
        precision: int = cfg.CSV_PRECISION,
    ) -> list[list[str]]:
        """Add each dataset under the label ``<prefix>_<index>``."""
        return [
            self.add_data(f"{prefix}_{i}", data, separator=separator, precision=precision)
            for i, data in enumerate(datasets)
        ]

    def add_plot(self, elements: str | Sequence[str], command: str = "plot") -> None:
        """Add a plot command with one or more plot elements."""
        if isinstance(elements, str):
            elements = [elements]
        self._add_plot_command(command, list(elements))

    def add_plot_for_label(
        self,
        label_or_pairs: str | Sequence[tuple[str, str]],
        elements: str | Sequence[str] | None = None,
        command: str = "plot",
    ) -> None:
        """Add a plot command whose elements read from data labels.

        Either one label with several elements::

            gp.add_plot_for_label("points", ["using 1:2", "using 1:3"])

        or explicit ``(label, element)`` pairs::

            gp.add_plot_for_label([("a", "using 1:2"), ("b", "using 1:2")])
        """
        if isinstance(label_or_pairs, str):
            if elements is None:
                raise TypeError("elements are required when a single data label is given")
            if isinstance(elements, str):
                elements = [elements]
            pairs = [(label_or_pairs, element) for element in elements]
        else:
            if elements is not None:
                raise TypeError("elements must not be given together with (label, element) pairs")
            pairs = list(label_or_pairs)
        self._add_plot_command(command, [f"${label} {element}" for label, element in pairs])

    def add_iteration(self, bounds: str, commands: str | Sequence[str]) -> None:
        """Add a ``do for [...] { ... }`` block around ``commands``."""
        if isinstance(commands, str):
            commands = [commands]
        self.add_command(f"do {bounds} {{")
        for c in commands:
            self.add_command(c)
        self.add_command("}")

    # ── Execution ─────────────────────────────────────────────────────────────

    def execute(self, image_format: str = cfg.DEFAULT_IMAGE_FORMAT) -> bytes:
        """Run gnuplot on the accumulated script and return the image bytes.

        The script is consumed: the builder cannot be used afterwards.
        Raises ``GnuplotUnavailable`` when gnuplot can't be run or writes nothing.
        """
        self.add_command("exit")
        self._executed = True
        final_script = self.text

        now = datetime.now()
        stem = make_stem(now)

        if self.print_script:
            clock = now.strftime("%I:%M:%S %p").lstrip("0")
            print(f"[Start gnuplot script for {clock}]")
            print(final_script)
            print(f"[End gnuplot script for {clock}]")
        if self.save_script:
            saved = Path.cwd() / f"{stem}{SCRIPT_SUFFIX}"
            saved.write_text(final_script, encoding="utf-8")
            logger.info("Saved gnuplot script to %s", saved)

        result = render_gnuplot(final_script, image_format=image_format, stem=stem)
        if not result.success:
            raise GnuplotUnavailable(result.error, stderr=result.stderr)
        return result.image_bytes

    def _add_plot_command(self, command: str, descriptions: list[str]) -> None:
        plot_command = command + " " + _CONTINUATION.join(descriptions)
        self.add_command(plot_command)

    def _ensure_building(self) -> None:
        if self._executed:
            raise ScriptConsumedError("this gnuplot script has already been executed")
