"""
Grid dataset parsing for the density globe.

This module reads the plain-text ESRI-style grid format used by the density
files. Metadata lines are ``key value`` pairs; data lines are whitespace
separated numbers forming one row of the grid. Cells equal to ``NODATA_value``
become NaN so a missing cell is never confused with a zero sample.
"""

import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import numpy as np
import rasterio

logger = logging.getLogger(__name__)


class MalformedDatasetError(ValueError):
    """Raised when a grid file contains a token that is not a finite number."""


@dataclass
class GridDataset:
    """Rectangular grid of samples plus placement metadata.

    Attributes:
        data: 2D float array (rows x cols), NaN marks a missing cell
        metadata: Header values (xllcorner, yllcorner, cellsize, NODATA_value, ...)
        min: Minimum over defined cells, None when no cell is defined
        max: Maximum over defined cells, None when no cell is defined
    """

    data: np.ndarray
    metadata: Dict[str, float] = field(default_factory=dict)
    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def shape(self):
        return self.data.shape

    @property
    def nrows(self) -> int:
        return self.data.shape[0]

    @property
    def ncols(self) -> int:
        return self.data.shape[1]

    @property
    def xllcorner(self) -> float:
        return self.metadata.get("xllcorner", 0.0)

    @property
    def yllcorner(self) -> float:
        return self.metadata.get("yllcorner", 0.0)

    @property
    def cellsize(self) -> float:
        return self.metadata.get("cellsize", 1.0)

    @property
    def nodata_value(self) -> Optional[float]:
        return self.metadata.get("NODATA_value")

    @property
    def valid_mask(self) -> np.ndarray:
        """Boolean mask, True where the cell holds a sample."""
        return ~np.isnan(self.data)

    def is_missing(self, lat_ndx: int, lon_ndx: int) -> bool:
        return bool(np.isnan(self.data[lat_ndx, lon_ndx]))


def _parse_number(token: str, line_number: int, source: str) -> float:
    try:
        value = float(token)
    except ValueError:
        raise MalformedDatasetError(
            f"Malformed dataset {source}: line {line_number} has non-numeric token '{token}'"
        ) from None
    if not math.isfinite(value):
        raise MalformedDatasetError(
            f"Malformed dataset {source}: line {line_number} has non-finite token '{token}'"
        )
    return value


def _is_number(token: str) -> bool:
    try:
        float(token)
    except ValueError:
        return False
    return True


def check_rectangular(rows: List[List[float]], source: str = "<text>") -> None:
    """
    Verify that every data row has the same number of columns.

    Args:
        rows: Parsed data rows
        source: Name used in error messages

    Raises:
        MalformedDatasetError: If row lengths differ
    """
    if not rows:
        return
    expected = len(rows[0])
    for row_ndx, row in enumerate(rows):
        if len(row) != expected:
            raise MalformedDatasetError(
                f"Malformed dataset {source}: data row {row_ndx} has {len(row)} columns, "
                f"expected {expected}"
            )


def parse_grid_text(text: str, source: str = "<text>") -> GridDataset:
    """
    Parse the text of one grid file into a GridDataset.

    Each line is split on whitespace. Two tokens led by a key make a metadata
    pair, any other line of two or more numbers makes a data row, anything
    shorter is ignored. A data value equal to the NODATA_value parsed so far
    is stored as NaN and excluded from the running min/max.

    Args:
        text: Raw file contents
        source: Name of the file or URL, used in log and error messages

    Returns:
        GridDataset with data, metadata and min/max over defined cells

    Raises:
        MalformedDatasetError: If a token is not a finite number or rows are ragged
    """
    metadata: Dict[str, float] = {}
    rows: List[List[float]] = []
    lo = None
    hi = None

    for line_number, line in enumerate(text.splitlines(), start=1):
        parts = line.split()
        if len(parts) == 2 and not _is_number(parts[0]):
            metadata[parts[0]] = _parse_number(parts[1], line_number, source)
        elif len(parts) >= 2:
            nodata = metadata.get("NODATA_value")
            row = []
            for token in parts:
                value = _parse_number(token, line_number, source)
                if value == nodata:
                    row.append(np.nan)
                    continue
                lo = value if lo is None else min(lo, value)
                hi = value if hi is None else max(hi, value)
                row.append(value)
            rows.append(row)

    check_rectangular(rows, source)

    data = np.array(rows, dtype=np.float64).reshape(len(rows), len(rows[0]) if rows else 0)

    for key, actual in (("nrows", data.shape[0]), ("ncols", data.shape[1])):
        declared = metadata.get(key)
        if declared is not None and int(declared) != actual:
            logger.warning(f"{source}: header {key}={int(declared)} but data has {actual}")

    logger.debug(f"Parsed {source}: shape {data.shape}, range {lo} to {hi}")
    return GridDataset(data=data, metadata=metadata, min=lo, max=hi)


def load_grid_file(path) -> GridDataset:
    """Read and parse a grid file from disk."""
    path = Path(path)
    logger.info(f"Loading grid file: {path}")
    return parse_grid_text(path.read_text(), source=str(path))


def read_grid_raster(path) -> GridDataset:
    """
    Load an ESRI ASCII grid through rasterio.

    Produces the same GridDataset as parse_grid_text for well-formed files,
    using GDAL's AAIGrid driver instead of the text tokenizer.

    Args:
        path: Path to an .asc grid file

    Returns:
        GridDataset built from the first raster band
    """
    path = Path(path)
    logger.info(f"Reading grid raster: {path}")

    with rasterio.open(path) as src:
        band = src.read(1, masked=True)
        transform = src.transform
        height = src.height
        width = src.width
        nodata = src.nodata

    data = band.astype(np.float64).filled(np.nan)
    valid = ~np.isnan(data)

    metadata = {
        "ncols": float(width),
        "nrows": float(height),
        "xllcorner": float(transform.c),
        "yllcorner": float(transform.f + transform.e * height),
        "cellsize": float(transform.a),
    }
    if nodata is not None:
        metadata["NODATA_value"] = float(nodata)

    lo = float(data[valid].min()) if valid.any() else None
    hi = float(data[valid].max()) if valid.any() else None
    return GridDataset(data=data, metadata=metadata, min=lo, max=hi)
