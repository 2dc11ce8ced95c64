"""Python-based reader for produced native bundle archives."""

from pathlib import Path, PurePosixPath
import zipfile

from ..exceptions import InvalidBundleError
from ..layout import ARCHIVE_NAMESPACE, MANIFEST_NAME, PROJ_DATA_DIR, archive_prefix


class BundleReader:
    """Lists the contents of a native bundle archive."""

    def __init__(self, bundle_path: Path) -> None:
        if not bundle_path.is_file():
            raise FileNotFoundError(f"Bundle not found at: {bundle_path}")
        self.bundle_path = bundle_path
        self._entries = self._read_entries()

    def _read_entries(self) -> tuple[str, ...]:
        try:
            with zipfile.ZipFile(self.bundle_path) as zf:
                return tuple(
                    info.filename for info in zf.infolist() if not info.is_dir()
                )
        except zipfile.BadZipFile as e:
            raise InvalidBundleError(
                f"Not a valid bundle archive: {self.bundle_path.name} ({e})"
            ) from e

    def entries(self) -> tuple[str, ...]:
        return self._entries

    def classifiers(self) -> list[str]:
        found = set()
        for name in self._entries:
            path = PurePosixPath(name)
            if path.is_relative_to(ARCHIVE_NAMESPACE) and len(path.parts) > len(
                ARCHIVE_NAMESPACE.parts
            ) + 1:
                found.add(path.parts[len(ARCHIVE_NAMESPACE.parts)])
        return sorted(found)

    def data_files(self, classifier: str) -> list[str]:
        """Returns the top-level file names under the classifier's share/proj."""
        data_prefix = archive_prefix(classifier) / PROJ_DATA_DIR
        return sorted(
            PurePosixPath(name).name
            for name in self._entries
            if PurePosixPath(name).parent == data_prefix
        )

    def has_manifest(self, classifier: str) -> bool:
        return str(archive_prefix(classifier) / MANIFEST_NAME) in self._entries

    def get_info(self) -> str:
        """Returns a human-readable string of the bundle contents."""
        lines = [
            f"Native Bundle Information: {self.bundle_path.name}",
            f"  Entries: {len(self._entries)}",
        ]
        for classifier in self.classifiers():
            lines.append(f"  Classifier: {classifier}")
            lines.append(
                f"    Manifest: {'present' if self.has_manifest(classifier) else 'missing'}"
            )
            lines.append(f"    PROJ data files: {len(self.data_files(classifier))}")
        return "\n".join(lines)
