"""Pytest fixtures for the entire gdal-natives-builder test suite."""

import json
from pathlib import Path
from typing import Callable

import pytest

from gdalffm.natives.models import BundleConfig

SWISS_PROJ_FILES = (
    "proj.db",
    "CHENyx06a.gsb",
    "ch_swisstopo_CHENyx06_ETRS.tif",
    "us_nga_egm96_15.tif",
)
OTHER_PROJ_FILES = ("nz_linz_nzgd2kgrid0005.tif", "proj.ini", "world")


@pytest.fixture
def staging_root(tmp_path: Path) -> Path:
    root = tmp_path / "staging"
    root.mkdir()
    return root


@pytest.fixture
def stage_classifier(staging_root: Path) -> Callable[..., Path]:
    """
    A factory fixture that stages a fake native resource tree for a classifier:
    a manifest, a couple of libraries and a share/proj data directory.
    """

    def _stage(
        classifier: str,
        proj_files: tuple[str, ...] = SWISS_PROJ_FILES + OTHER_PROJ_FILES,
        manifest: bool = True,
    ) -> Path:
        root = staging_root / classifier
        (root / "lib").mkdir(parents=True)
        (root / "lib" / "libgdal.so").write_bytes(f"gdal-{classifier}".encode())
        (root / "lib" / "libproj.so").write_bytes(f"proj-{classifier}".encode())
        (root / "share" / "gdal").mkdir(parents=True)
        (root / "share" / "gdal" / "gdalvrt.xsd").write_text("<xs:schema/>")
        proj_dir = root / "share" / "proj"
        proj_dir.mkdir(parents=True)
        for name in proj_files:
            (proj_dir / name).write_text(f"{classifier}:{name}")
        if manifest:
            (root / "manifest.json").write_text(
                json.dumps({"bundleVersion": "3.10.0", "entryLibrary": "lib/libgdal.so"})
            )
        return root

    return _stage


@pytest.fixture
def make_config(staging_root: Path, tmp_path: Path) -> Callable[..., BundleConfig]:
    def _make(**kwargs) -> BundleConfig:
        kwargs.setdefault("classifiers", ("linux-x86_64", "osx-aarch64"))
        return BundleConfig(
            staging_root=staging_root, output_dir=tmp_path / "dist", **kwargs
        )

    return _make
