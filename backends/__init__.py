from backends.base import RenderResult
from backends.gnuplot import make_stem, render_gnuplot

__all__ = ["RenderResult", "make_stem", "render_gnuplot"]
