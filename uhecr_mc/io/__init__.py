"""IO module: table loading."""

from uhecr_mc.io.tables import load_grid, load_columns

__all__ = ["load_grid", "load_columns"]
