"""
Data loading operations for the density globe.

Fetches the base density grids (local files or URLs) concurrently, then
derives the excess datasets. Loading is all-or-nothing: if any base dataset
fails, no dataset is returned.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import requests

from src.config import DATA_DIR, FETCH_TIMEOUT
from src.globe.diff_datasets import check_compatible, derive_excess_datasets
from src.globe.grid_data import GridDataset, parse_grid_text

logger = logging.getLogger(__name__)


class DatasetLoadError(RuntimeError):
    """Raised when one or more base datasets could not be loaded."""


@dataclass
class DatasetDescriptor:
    """A displayable dataset: name, hue range and the grid itself.

    ``source`` is a path or URL for loaded datasets and None for derived ones.
    """

    name: str
    hue_range: Tuple[float, float]
    source: Optional[str] = None
    dataset: Optional[GridDataset] = None


# Names and hue ranges of the excess datasets derived from the two bases
DERIVED_DATASETS = [
    (">50% men", (0.6, 1.1)),
    (">50% women", (0.0, 0.4)),
]


def default_base_descriptors(data_dir=DATA_DIR) -> List[DatasetDescriptor]:
    """Descriptors for the two population density grids shipped with the project."""
    data_dir = Path(data_dir)
    return [
        DatasetDescriptor("men", (0.7, 0.3), str(data_dir / "male.asc")),
        DatasetDescriptor("women", (0.9, 1.1), str(data_dir / "female.asc")),
    ]


def is_url(source: str) -> bool:
    return str(source).startswith(("http://", "https://"))


def fetch_text(source: str, timeout: float = FETCH_TIMEOUT) -> str:
    """
    Read the text of a grid from a URL or a local path.

    Raises:
        requests.RequestException: If the HTTP request fails
        OSError: If the file cannot be read
    """
    if is_url(source):
        logger.info(f"Fetching {source}")
        response = requests.get(source, timeout=timeout)
        response.raise_for_status()
        return response.text
    return Path(source).read_text()


def _load_one(descriptor: DatasetDescriptor, timeout: float) -> GridDataset:
    text = fetch_text(descriptor.source, timeout=timeout)
    return parse_grid_text(text, source=str(descriptor.source))


def load_base_datasets(
    descriptors: Sequence[DatasetDescriptor], timeout: float = FETCH_TIMEOUT
) -> List[DatasetDescriptor]:
    """
    Load every base dataset concurrently and wait for all of them.

    Args:
        descriptors: Descriptors with a ``source``
        timeout: Per-request timeout for URLs

    Returns:
        list: Copies of the descriptors with ``dataset`` filled in, same order

    Raises:
        DatasetLoadError: If any dataset fails; none are returned in that case
    """
    for descriptor in descriptors:
        if descriptor.source is None:
            raise DatasetLoadError(f"Dataset '{descriptor.name}' has no source")

    logger.info(f"Loading {len(descriptors)} base datasets")
    results = {}
    failures = []

    with ThreadPoolExecutor(max_workers=max(len(descriptors), 1)) as executor:
        future_map = {
            executor.submit(_load_one, descriptor, timeout): ndx
            for ndx, descriptor in enumerate(descriptors)
        }
        for future in as_completed(future_map):
            ndx = future_map[future]
            try:
                results[ndx] = future.result()
            except Exception as e:
                logger.error(f"Failed to load '{descriptors[ndx].name}': {e}")
                failures.append((descriptors[ndx].name, e))

    if failures:
        names = ", ".join(name for name, _ in failures)
        raise DatasetLoadError(f"Could not load base datasets: {names}") from failures[0][1]

    loaded = [replace(d, dataset=results[ndx]) for ndx, d in enumerate(descriptors)]
    for descriptor in loaded:
        logger.info(
            f"  {descriptor.name}: shape {descriptor.dataset.shape}, "
            f"range {descriptor.dataset.min} to {descriptor.dataset.max}"
        )
    return loaded


def build_displayable_datasets(
    bases: Sequence[DatasetDescriptor], derived=DERIVED_DATASETS
) -> List[DatasetDescriptor]:
    """
    Append the two excess datasets to the two loaded bases.

    Raises:
        IncompatibleDatasetsError: If the base grids differ in shape
    """
    if len(bases) != 2:
        raise ValueError(f"Expected two base datasets, got {len(bases)}")
    first, second = bases
    check_compatible(first.dataset, second.dataset)

    excess_first, excess_second = derive_excess_datasets(first.dataset, second.dataset)
    (first_name, first_hues), (second_name, second_hues) = derived
    return list(bases) + [
        DatasetDescriptor(first_name, first_hues, dataset=excess_first),
        DatasetDescriptor(second_name, second_hues, dataset=excess_second),
    ]
