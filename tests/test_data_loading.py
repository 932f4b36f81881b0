"""
Tests for data loading operations.

Tests concurrent base dataset loading and the derived dataset set.
"""

import numpy as np
import pytest
import requests


class FakeResponse:
    def __init__(self, text, status_code=200):
        self.text = text
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")


class TestFetchText:
    """Tests for fetch_text function."""

    def test_reads_local_file(self, grid_files):
        """Test that paths are read from disk."""
        from src.globe.data_loading import fetch_text

        assert fetch_text(str(grid_files[0])).startswith("ncols 4")

    def test_fetches_url(self, monkeypatch):
        """Test that URLs go through requests."""
        from src.globe.data_loading import fetch_text

        calls = []

        def mock_get(url, timeout):
            calls.append((url, timeout))
            return FakeResponse("1 2 3\n")

        monkeypatch.setattr("requests.get", mock_get)

        assert fetch_text("https://example.com/male.asc", timeout=5) == "1 2 3\n"
        assert calls == [("https://example.com/male.asc", 5)]

    def test_http_error_raises(self, monkeypatch):
        """Test that HTTP errors propagate."""
        from src.globe.data_loading import fetch_text

        monkeypatch.setattr("requests.get", lambda url, timeout: FakeResponse("", 404))

        with pytest.raises(requests.HTTPError):
            fetch_text("http://example.com/missing.asc")


class TestLoadBaseDatasets:
    """Tests for load_base_datasets function."""

    def test_loads_all_in_order(self, grid_files):
        """Test that every descriptor gets its dataset, order preserved."""
        from src.globe.data_loading import DatasetDescriptor, load_base_datasets

        descriptors = [
            DatasetDescriptor("men", (0.7, 0.3), str(grid_files[0])),
            DatasetDescriptor("women", (0.9, 1.1), str(grid_files[1])),
        ]

        loaded = load_base_datasets(descriptors)

        assert [d.name for d in loaded] == ["men", "women"]
        assert loaded[0].dataset.is_missing(1, 1)
        assert loaded[1].dataset.is_missing(1, 3)
        assert descriptors[0].dataset is None

    def test_failure_aborts_everything(self, grid_files, tmp_path):
        """Test that one failed fetch fails the whole load."""
        from src.globe.data_loading import (
            DatasetDescriptor,
            DatasetLoadError,
            load_base_datasets,
        )

        descriptors = [
            DatasetDescriptor("men", (0.7, 0.3), str(grid_files[0])),
            DatasetDescriptor("women", (0.9, 1.1), str(tmp_path / "missing.asc")),
        ]

        with pytest.raises(DatasetLoadError, match="women"):
            load_base_datasets(descriptors)

    def test_malformed_file_aborts(self, grid_files, tmp_path):
        """Test that a malformed grid is a load failure."""
        from src.globe.data_loading import (
            DatasetDescriptor,
            DatasetLoadError,
            load_base_datasets,
        )
        from src.globe.grid_data import MalformedDatasetError

        bad = tmp_path / "bad.asc"
        bad.write_text("1 2 3\n4 oops 6\n")
        descriptors = [
            DatasetDescriptor("men", (0.7, 0.3), str(grid_files[0])),
            DatasetDescriptor("women", (0.9, 1.1), str(bad)),
        ]

        with pytest.raises(DatasetLoadError) as excinfo:
            load_base_datasets(descriptors)
        assert isinstance(excinfo.value.__cause__, MalformedDatasetError)

    def test_missing_source_raises(self):
        """Test that derived descriptors cannot be loaded."""
        from src.globe.data_loading import (
            DatasetDescriptor,
            DatasetLoadError,
            load_base_datasets,
        )

        with pytest.raises(DatasetLoadError, match="no source"):
            load_base_datasets([DatasetDescriptor("derived", (0.0, 0.4))])


class TestBuildDisplayableDatasets:
    """Tests for build_displayable_datasets function."""

    def test_four_datasets(self, displayable):
        """Test names, hue ranges and derived values."""
        names = [d.name for d in displayable]

        assert names == ["men", "women", ">50% men", ">50% women"]
        assert displayable[2].hue_range == (0.6, 1.1)
        assert displayable[3].hue_range == (0.0, 0.4)
        assert np.array_equal(displayable[2].dataset.data, [[0, 0], [1, 3]])
        assert displayable[2].source is None

    def test_incompatible_bases_raise(self, grid_a, grid_text_factory):
        """Test that mismatched base shapes are fatal before diffing."""
        from src.globe.data_loading import DatasetDescriptor, build_displayable_datasets
        from src.globe.diff_datasets import IncompatibleDatasetsError
        from src.globe.grid_data import parse_grid_text

        other = parse_grid_text(grid_text_factory([[1, 2, 3]]))
        bases = [
            DatasetDescriptor("men", (0.7, 0.3), "a", grid_a),
            DatasetDescriptor("women", (0.9, 1.1), "b", other),
        ]

        with pytest.raises(IncompatibleDatasetsError):
            build_displayable_datasets(bases)

    def test_default_descriptors(self, tmp_path):
        """Test the default male/female sources."""
        from src.globe.data_loading import default_base_descriptors

        bases = default_base_descriptors(tmp_path)

        assert [d.name for d in bases] == ["men", "women"]
        assert bases[0].source.endswith("male.asc")
        assert bases[1].source.endswith("female.asc")
