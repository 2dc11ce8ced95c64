"""Tests for the BuildOrchestrator class."""

from pathlib import Path
from typing import Callable

import pytest

from gdalffm.natives.models import BundleConfig
from gdalffm.natives.packaging.orchestrator import BuildOrchestrator


def test_build_produces_both_variants_per_classifier(
    stage_classifier: Callable[..., Path], make_config: Callable[..., BundleConfig]
) -> None:
    stage_classifier("linux-x86_64")
    stage_classifier("osx-aarch64")

    report = BuildOrchestrator(make_config()).build()

    assert not report.failed
    assert [r.classifier for r in report.results] == ["linux-x86_64", "osx-aarch64"]
    for result in report.results:
        assert result.full_bundle is not None and result.full_bundle.is_file()
        assert result.reduced_bundle is not None and result.reduced_bundle.is_file()
    assert len(report.archives()) == 4


def test_swiss_failure_is_local_to_its_classifier(
    stage_classifier: Callable[..., Path], make_config: Callable[..., BundleConfig]
) -> None:
    stage_classifier("linux-x86_64", proj_files=("proj.db",))
    stage_classifier("osx-aarch64")

    report = BuildOrchestrator(make_config()).build()

    assert report.failed
    linux, osx = report.results
    assert linux.full_bundle is not None and linux.full_bundle.is_file()
    assert linux.reduced_bundle is None
    assert len(linux.errors) == 1
    assert "swiss bundle" in linux.errors[0]
    assert "CHENyx06a" in linux.errors[0]
    assert osx.ok
    assert osx.reduced_bundle is not None
    assert [r.classifier for r in report.failures] == ["linux-x86_64"]


def test_swiss_disabled_builds_only_full_bundles(
    stage_classifier: Callable[..., Path], make_config: Callable[..., BundleConfig]
) -> None:
    stage_classifier("linux-x86_64", proj_files=("proj.db",))
    stage_classifier("osx-aarch64")

    report = BuildOrchestrator(make_config(swiss_enabled=False)).build()

    assert not report.failed
    assert all(r.reduced_bundle is None for r in report.results)
    assert sorted(p.name for p in report.archives()) == [
        "gdal-ffm-natives-natives-linux-x86_64.jar",
        "gdal-ffm-natives-natives-osx-aarch64.jar",
    ]


def test_missing_staged_classifier_is_reported(
    stage_classifier: Callable[..., Path], make_config: Callable[..., BundleConfig]
) -> None:
    stage_classifier("linux-x86_64")

    report = BuildOrchestrator(make_config()).build()

    assert [r.classifier for r in report.failures] == ["osx-aarch64"]
    assert any("not found" in error for error in report.failures[0].errors)
    assert report.results[0].ok


def test_check_reports_layout_and_subset_problems(
    stage_classifier: Callable[..., Path], make_config: Callable[..., BundleConfig]
) -> None:
    stage_classifier("linux-x86_64", manifest=False)
    stage_classifier("osx-aarch64", proj_files=("proj.db",))
    config = make_config()

    report = BuildOrchestrator(config).check()

    linux, osx = report.results
    assert "Missing manifest.json for classifier: linux-x86_64" in linux.errors[0]
    assert "Swiss PROJ subset for classifier 'osx-aarch64' is incomplete" in osx.errors[0]
    assert not config.output_dir.exists()


@pytest.mark.parametrize(("jobs", "expected"), [(None, None), (3, 3)])
def test_max_workers(
    make_config: Callable[..., BundleConfig], jobs: int | None, expected: int | None
) -> None:
    orchestrator = BuildOrchestrator(make_config(jobs=jobs))
    if expected is None:
        assert 1 <= orchestrator.max_workers <= 2
    else:
        assert orchestrator.max_workers == expected
