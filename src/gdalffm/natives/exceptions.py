from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Requirement


class BuildError(Exception):
    pass


class ConfigurationError(BuildError):
    pass


class StagingError(BuildError):
    pass


class VerificationError(Exception):
    pass


class IncompleteSubsetError(VerificationError):
    def __init__(
        self,
        message: str,
        classifier: str,
        missing: tuple["Requirement", ...] = (),
        found: tuple[str, ...] = (),
    ) -> None:
        super().__init__(message)
        self.classifier = classifier
        self.missing = missing
        self.found = found


class MissingManifestError(VerificationError):
    def __init__(self, message: str, missing: dict[str, Path]) -> None:
        super().__init__(message)
        self.missing = missing


class InvalidBundleError(VerificationError):
    pass
