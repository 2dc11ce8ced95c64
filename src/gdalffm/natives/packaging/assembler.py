"""Composes per-classifier native bundle archives from the staged tree."""

from collections.abc import Callable
import os
from pathlib import Path, PurePosixPath
import shutil
import stat
import tempfile
import zipfile

from pyvider.telemetry import logger

from ..exceptions import StagingError
from ..layout import PROJ_DATA_DIR, archive_prefix, classifier_root, proj_data_dir
from ..models import FULL_BUNDLE_BASE_NAME, SWISS_BUNDLE_BASE_NAME, BundleConfig
from .validator import validate_subset

# Earliest timestamp that is valid in every zip reader, as used by Gradle
# for reproducible archives.
REPRODUCIBLE_TIMESTAMP = (1980, 2, 1, 0, 0, 0)
ARCHIVE_EXTENSION = "jar"
_COPY_CHUNK_SIZE = 1024 * 1024

EntryFilter = Callable[[PurePosixPath], bool]


def create_subset_filter(allowed_names: tuple[str, ...]) -> EntryFilter:
    """
    Creates a predicate over staged relative paths that keeps everything
    outside share/proj and only allowlisted top-level files inside it.
    """
    allowed = frozenset(allowed_names)

    def keep(rel_path: PurePosixPath) -> bool:
        if not rel_path.is_relative_to(PROJ_DATA_DIR):
            return True
        return rel_path.parent == PROJ_DATA_DIR and rel_path.name in allowed

    return keep


def _keep_everything(rel_path: PurePosixPath) -> bool:
    return True


def archive_name(base_name: str, classifier: str, version: str | None = None) -> str:
    parts = [base_name]
    if version:
        parts.append(version)
    parts.append(f"natives-{classifier}")
    return f"{'-'.join(parts)}.{ARCHIVE_EXTENSION}"


def _raise_walk_error(error: OSError) -> None:
    raise StagingError(
        f"Cannot read staged directory {error.filename}: {error.strerror}"
    ) from error


def collect_entries(
    root: Path, classifier: str, keep: EntryFilter = _keep_everything
) -> list[tuple[str, Path]]:
    """
    Lists (archive name, source file) pairs below `root`, sorted by name.
    Symlinked directories are followed; a link back into its own ancestry
    is a `StagingError`.
    """
    prefix = archive_prefix(classifier)
    entries = []
    walk = os.walk(root, onerror=_raise_walk_error, followlinks=True)
    for dir_path_str, dir_names, file_names in walk:
        dir_names.sort()
        dir_path = Path(dir_path_str)
        real_dir = dir_path.resolve()
        for name in dir_names:
            link = dir_path / name
            if link.is_symlink() and real_dir.is_relative_to(link.resolve()):
                raise StagingError(
                    f"Symlink loop in staged tree for classifier '{classifier}': {link}"
                )
        for name in file_names:
            source = dir_path / name
            if not source.is_file():
                continue
            rel_path = PurePosixPath(source.relative_to(root).as_posix())
            if keep(rel_path):
                entries.append((str(prefix / rel_path), source))
            else:
                logger.debug("Excluding staged file", classifier=classifier, path=str(rel_path))
    entries.sort(key=lambda entry: entry[0])
    return entries


def write_archive(target: Path, entries: list[tuple[str, Path]]) -> Path:
    """
    Writes a deterministic zip archive and moves it into place atomically.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{target.name}.", suffix=".tmp", dir=target.parent
    )
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        with zipfile.ZipFile(tmp_path, "w", compression=zipfile.ZIP_DEFLATED) as zf:
            for arcname, source in entries:
                source_stat = source.stat()
                info = zipfile.ZipInfo(arcname, date_time=REPRODUCIBLE_TIMESTAMP)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.create_system = 3
                info.external_attr = (
                    stat.S_IFREG | stat.S_IMODE(source_stat.st_mode)
                ) << 16
                force_zip64 = source_stat.st_size >= zipfile.ZIP64_LIMIT
                with source.open("rb") as src, zf.open(
                    info, "w", force_zip64=force_zip64
                ) as dst:
                    shutil.copyfileobj(src, dst, _COPY_CHUNK_SIZE)
        os.replace(tmp_path, target)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    return target


class BundleAssembler:
    """Builds the full and swiss archives for single classifiers."""

    def __init__(self, config: BundleConfig) -> None:
        self.config = config

    def _staged_root(self, classifier: str) -> Path:
        root = classifier_root(self.config.staging_root, classifier)
        if not root.is_dir():
            raise StagingError(
                f"Staged native resources for classifier '{classifier}' not found at {root}"
            )
        return root

    def full_bundle_path(self, classifier: str) -> Path:
        return self.config.output_dir / archive_name(
            FULL_BUNDLE_BASE_NAME, classifier, self.config.version
        )

    def reduced_bundle_path(self, classifier: str) -> Path:
        return self.config.output_dir / archive_name(
            SWISS_BUNDLE_BASE_NAME, classifier, self.config.version
        )

    def assemble_full(self, classifier: str) -> Path:
        root = self._staged_root(classifier)
        entries = collect_entries(root, classifier)
        target = write_archive(self.full_bundle_path(classifier), entries)
        logger.info(
            f"Wrote full native bundle {target.name}",
            classifier=classifier,
            entries=len(entries),
        )
        return target

    def assemble_reduced(self, classifier: str) -> Path:
        root = self._staged_root(classifier)
        target = self.reduced_bundle_path(classifier)
        try:
            validate_subset(
                classifier,
                proj_data_dir(self.config.staging_root, classifier),
                self.config.requirements,
            )
        except Exception:
            # A bundle from an earlier run must not be mistaken for this one.
            target.unlink(missing_ok=True)
            raise

        keep = create_subset_filter(self.config.allowlist)
        entries = collect_entries(root, classifier, keep)
        write_archive(target, entries)
        logger.info(
            f"Wrote swiss native bundle {target.name}",
            classifier=classifier,
            entries=len(entries),
        )
        return target
