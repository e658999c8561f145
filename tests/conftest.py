"""Shared fixtures; also makes the project root importable.

``fake_gnuplot`` installs a tiny shell script as ``GNUPLOT_EXE`` so the
executor can be exercised without a real gnuplot.
"""

import os
import stat
import sys

import pandas as pd
import pytest

# Project root = parent directory of this tests/ folder
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

# Writes an svg header, then echoes the script it was given; reports its
# script path on stderr so tests can check cleanup.
ECHO_GNUPLOT = """#!/bin/sh
printf '<svg xmlns="http://www.w3.org/2000/svg">\\n'
cat "$1"
echo "$1" >&2
"""

FAILING_GNUPLOT = """#!/bin/sh
echo "line 1: undefined variable" >&2
exit 1
"""


@pytest.fixture
def fake_gnuplot(tmp_path, monkeypatch):
    """Factory: install a shell script body as the gnuplot executable."""
    if sys.platform.startswith("win"):
        pytest.skip("fake gnuplot is a POSIX shell script")

    def _install(body: str = ECHO_GNUPLOT) -> str:
        exe = tmp_path / "fake-gnuplot"
        exe.write_text(body)
        exe.chmod(exe.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        monkeypatch.setenv("GNUPLOT_EXE", str(exe))
        return str(exe)

    return _install


@pytest.fixture
def missing_gnuplot(tmp_path, monkeypatch):
    path = tmp_path / "no-such-gnuplot"
    monkeypatch.setenv("GNUPLOT_EXE", str(path))
    return str(path)


@pytest.fixture
def short_df():
    return pd.DataFrame({"x": [1, 2], "y": [0.5, 1.5]})


@pytest.fixture
def long_df():
    return pd.DataFrame({"t": [10, 20, 30, 40]})


# Valid image, but stderr that is not UTF-8.
BINARY_STDERR_GNUPLOT = """#!/bin/sh
printf '<svg/>'
printf 'warning \\377\\376\\n' >&2
"""

BINARY_STDERR_FAILING_GNUPLOT = """#!/bin/sh
printf 'error \\377\\n' >&2
exit 1
"""
