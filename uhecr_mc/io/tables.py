"""
Plain-text table loading.

Tables are newline-delimited numeric sequences. Lines starting with '#'
are comments. A binary .npy copy next to the text file (same stem) is
preferred when present; see scripts/convert_tables.py.
"""

import logging
import os
from pathlib import Path
from typing import Optional, Union

import numpy as np

from uhecr_mc.errors import TableLoadError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def _read(path: PathLike, ndmin: int) -> np.ndarray:
    path = Path(path)

    npy_file = path.with_suffix('.npy')
    if npy_file.exists():
        logger.debug("Loading binary table %s", npy_file)
        return np.load(npy_file)

    if not path.exists():
        raise TableLoadError(f"Table file not found: {path}")

    try:
        data = np.loadtxt(path, comments='#', dtype=np.float64, ndmin=ndmin)
    except ValueError as exc:
        raise TableLoadError(f"Malformed table file {path}: {exc}") from exc

    if data.size == 0:
        raise TableLoadError(f"Table file is empty: {path}")

    if not np.all(np.isfinite(data)):
        raise TableLoadError(f"Table file contains non-finite values: {path}")

    logger.debug("Loaded %s (%d values)", path.name, data.size)
    return data


def load_grid(path: PathLike) -> np.ndarray:
    """
    Load a single-column table.

    Parameters:
        path: Text file with one number per line

    Returns:
        1D float64 array

    Raises:
        TableLoadError: File missing, empty or not numeric
    """
    data = _read(path, ndmin=1)
    return np.ravel(data)


def load_columns(path: PathLike, n_columns: int) -> np.ndarray:
    """
    Load a whitespace-separated multi-column table.

    Parameters:
        path: Text file
        n_columns: Expected number of columns

    Returns:
        2D array of shape (n_rows, n_columns)
    """
    data = _read(path, ndmin=2)
    if data.ndim != 2 or data.shape[1] != n_columns:
        raise TableLoadError(
            f"Expected {n_columns} columns in {Path(path).name}, got shape {data.shape}"
        )
    return data


def is_strictly_increasing(values: np.ndarray) -> bool:
    """Check that a grid is strictly increasing."""
    return bool(np.all(np.diff(values) > 0))


DATA_ENV_VAR = "UHECR_MC_DATA"
PACKAGE_DATA_DIR = Path(__file__).resolve().parent.parent / 'data'


def get_data_path(filename: str, data_dir: Optional[PathLike] = None) -> Path:
    """
    Resolve a data file.

    Lookup order: explicit data_dir, the UHECR_MC_DATA environment
    variable, the packaged data/ directory. The path is returned even if
    the file does not exist; loaders report missing files.
    """
    if data_dir is not None:
        return Path(data_dir) / filename

    env_dir = os.environ.get(DATA_ENV_VAR)
    if env_dir:
        return Path(env_dir) / filename

    return PACKAGE_DATA_DIR / filename
