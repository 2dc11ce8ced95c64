"""Tests for the native bundle reader."""

from pathlib import Path
from typing import Callable

import pytest

from gdalffm.natives.exceptions import InvalidBundleError
from gdalffm.natives.models import BundleConfig
from gdalffm.natives.packaging.assembler import BundleAssembler
from gdalffm.natives.packaging.reader import BundleReader


def test_reader_file_not_found() -> None:
    """Tests that the reader raises FileNotFoundError for a non-existent file."""
    with pytest.raises(FileNotFoundError):
        BundleReader(Path("/tmp/non-existent-native-bundle.jar"))


def test_reader_invalid_archive(tmp_path: Path) -> None:
    """Tests that the reader raises InvalidBundleError for a non-zip file."""
    bad_file = tmp_path / "bad.jar"
    bad_file.write_bytes(b"this is not a valid file")
    with pytest.raises(InvalidBundleError, match="Not a valid bundle archive"):
        BundleReader(bad_file)


def test_reader_lists_swiss_bundle_contents(
    stage_classifier: Callable[..., Path], make_config: Callable[..., BundleConfig]
) -> None:
    stage_classifier("osx-aarch64")
    archive = BundleAssembler(make_config()).assemble_reduced("osx-aarch64")

    reader = BundleReader(archive)

    assert reader.classifiers() == ["osx-aarch64"]
    assert reader.has_manifest("osx-aarch64")
    assert reader.data_files("osx-aarch64") == sorted(
        [
            "CHENyx06a.gsb",
            "ch_swisstopo_CHENyx06_ETRS.tif",
            "proj.db",
            "us_nga_egm96_15.tif",
        ]
    )
    info = reader.get_info()
    assert "Classifier: osx-aarch64" in info
    assert "Manifest: present" in info
    assert "PROJ data files: 4" in info
