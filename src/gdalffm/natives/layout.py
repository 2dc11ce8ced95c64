"""
Fixed layout of a staged native resource tree and of the produced bundles.

Each classifier owns a subtree below the staging root::

    <staging_root>/<classifier>/manifest.json
    <staging_root>/<classifier>/share/proj/...

Inside an archive the same subtree is rooted at
``META-INF/gdal-native/<classifier>/``.
"""

from pathlib import Path, PurePosixPath

from pyvider.telemetry import logger

from .exceptions import MissingManifestError

ARCHIVE_NAMESPACE = PurePosixPath("META-INF/gdal-native")
MANIFEST_NAME = "manifest.json"
PROJ_DATA_DIR = PurePosixPath("share/proj")


def classifier_root(staging_root: Path, classifier: str) -> Path:
    return staging_root / classifier


def manifest_path(staging_root: Path, classifier: str) -> Path:
    return classifier_root(staging_root, classifier) / MANIFEST_NAME


def proj_data_dir(staging_root: Path, classifier: str) -> Path:
    return classifier_root(staging_root, classifier).joinpath(*PROJ_DATA_DIR.parts)


def archive_prefix(classifier: str) -> PurePosixPath:
    return ARCHIVE_NAMESPACE / classifier


def verify_layout(staging_root: Path, classifiers: tuple[str, ...]) -> None:
    """Checks that every classifier's staged root carries a manifest file."""
    missing: dict[str, Path] = {}
    for classifier in classifiers:
        expected = manifest_path(staging_root, classifier)
        if expected.is_file():
            logger.debug("Manifest present", classifier=classifier, path=str(expected))
        else:
            missing[classifier] = expected

    if missing:
        details = "; ".join(
            f"Missing {MANIFEST_NAME} for classifier: {classifier} (expected {path})"
            for classifier, path in missing.items()
        )
        raise MissingManifestError(details, missing=missing)
