"""
Derived datasets computed from two loaded grids.

The globe shows two "excess" grids next to the loaded ones: for every cell,
how much one density exceeds the other.
"""

import logging
from typing import Callable, Tuple

import numpy as np

from src.globe.grid_data import GridDataset

logger = logging.getLogger(__name__)


class IncompatibleDatasetsError(ValueError):
    """Raised when two datasets cannot be compared cell by cell."""


def amount_greater_than(a, b):
    """Amount by which ``a`` exceeds ``b``, never negative."""
    return np.maximum(a - b, 0)


def check_compatible(base: GridDataset, other: GridDataset) -> None:
    """
    Make sure two datasets share the same grid shape.

    Raises:
        IncompatibleDatasetsError: If the shapes differ
    """
    if base.shape != other.shape:
        raise IncompatibleDatasetsError(
            f"Incompatible datasets: shape {base.shape} vs {other.shape}"
        )


def make_diff_dataset(
    base: GridDataset,
    other: GridDataset,
    compare_fn: Callable[[np.ndarray, np.ndarray], np.ndarray],
) -> GridDataset:
    """
    Build a dataset whose cells are ``compare_fn(base, other)``.

    A cell is missing in the output when it is missing in either input. The
    output min/max only consider defined cells; metadata is copied from base.

    Args:
        base: First dataset
        other: Second dataset with the same shape
        compare_fn: Vectorized binary function applied to defined cells

    Returns:
        New GridDataset

    Raises:
        IncompatibleDatasetsError: If the shapes differ
    """
    check_compatible(base, other)

    defined = base.valid_mask & other.valid_mask
    data = np.full(base.shape, np.nan, dtype=np.float64)
    data[defined] = compare_fn(base.data[defined], other.data[defined])

    if defined.any():
        lo, hi = float(data[defined].min()), float(data[defined].max())
    else:
        lo = hi = None

    logger.debug(f"Derived dataset: {int(defined.sum())} defined cells, range {lo} to {hi}")
    return GridDataset(data=data, metadata=dict(base.metadata), min=lo, max=hi)


def derive_excess_datasets(
    first: GridDataset, second: GridDataset
) -> Tuple[GridDataset, GridDataset]:
    """Return (excess of first over second, excess of second over first)."""
    check_compatible(first, second)
    return (
        make_diff_dataset(first, second, amount_greater_than),
        make_diff_dataset(second, first, amount_greater_than),
    )
