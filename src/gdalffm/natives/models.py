from pathlib import Path
from typing import Self

from attrs import define, evolve, field

from pyvider.telemetry import logger

from .exceptions import ConfigurationError

DEFAULT_CLASSIFIERS: tuple[str, ...] = (
    "linux-x86_64",
    "linux-aarch64",
    "osx-x86_64",
    "osx-aarch64",
    "windows-x86_64",
)

FULL_BUNDLE_BASE_NAME = "gdal-ffm-natives"
SWISS_BUNDLE_BASE_NAME = "gdal-ffm-natives-swiss"


def _candidate_tuple(value: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    if isinstance(value, str):
        raise ConfigurationError(
            f"Candidates must be a sequence of file names, not the string '{value}'."
        )
    return tuple(value)


@define(frozen=True, slots=True)
class Requirement:
    """A logical data file satisfied by any one of its candidate names."""

    label: str
    candidates: tuple[str, ...] = field(converter=_candidate_tuple)

    def __attrs_post_init__(self) -> None:
        if not self.label:
            raise ConfigurationError("Requirement label must not be empty.")
        if not self.candidates:
            raise ConfigurationError(
                f"Requirement '{self.label}' must name at least one candidate file."
            )
        for candidate in self.candidates:
            if not isinstance(candidate, str) or not candidate:
                raise ConfigurationError(
                    f"Requirement '{self.label}' has an invalid candidate: {candidate!r}"
                )

    def is_satisfied_by(self, staged: frozenset[str] | set[str]) -> bool:
        return any(candidate in staged for candidate in self.candidates)

    def describe(self) -> str:
        return f"{self.label} [{' | '.join(self.candidates)}]"


DEFAULT_SWISS_REQUIREMENTS: tuple[Requirement, ...] = (
    Requirement("proj.db", ("proj.db",)),
    Requirement("CHENyx06a", ("CHENyx06a.gsb", "ch_swisstopo_CHENyx06a.tif")),
    Requirement(
        "CHENyx06_ETRS", ("CHENyx06_ETRS.gsb", "ch_swisstopo_CHENyx06_ETRS.tif")
    ),
    Requirement("egm96_15", ("egm96_15.gtx", "us_nga_egm96_15.tif")),
)


def allowlist(requirements: tuple[Requirement, ...]) -> tuple[str, ...]:
    """Flattens all candidates into one ordered tuple without duplicates."""
    seen: dict[str, None] = {}
    for requirement in requirements:
        for candidate in requirement.candidates:
            seen.setdefault(candidate, None)
    return tuple(seen)


def _unique_classifiers(values: tuple[str, ...] | list[str]) -> tuple[str, ...]:
    unique: list[str] = []
    for value in values:
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"Invalid classifier: {value!r}")
        if "/" in value or "\\" in value:
            raise ConfigurationError(
                f"Classifier must not contain a path separator: '{value}'"
            )
        if value in unique:
            logger.warning("Dropping duplicate classifier", classifier=value)
            continue
        unique.append(value)
    if not unique:
        raise ConfigurationError("At least one native classifier must be configured.")
    return tuple(unique)


@define(frozen=True, slots=True)
class BundleConfig:
    staging_root: Path = field(converter=Path)
    output_dir: Path = field(converter=Path)
    classifiers: tuple[str, ...] = field(
        default=DEFAULT_CLASSIFIERS, converter=_unique_classifiers
    )
    requirements: tuple[Requirement, ...] = field(
        default=DEFAULT_SWISS_REQUIREMENTS, converter=tuple
    )
    swiss_enabled: bool = True
    version: str | None = None
    jobs: int | None = None

    def __attrs_post_init__(self) -> None:
        if self.jobs is not None and self.jobs < 1:
            raise ConfigurationError(f"jobs must be a positive integer, got {self.jobs}")

    @property
    def allowlist(self) -> tuple[str, ...]:
        return allowlist(self.requirements)

    def select(self, names: list[str] | tuple[str, ...]) -> Self:
        """Returns a copy restricted to `names`, keeping registry order."""
        unknown = [name for name in names if name not in self.classifiers]
        if unknown:
            raise ConfigurationError(
                f"Unknown classifier(s): {', '.join(unknown)}. "
                f"Configured: {', '.join(self.classifiers)}"
            )
        wanted = set(names)
        return evolve(
            self, classifiers=tuple(c for c in self.classifiers if c in wanted)
        )


@define(frozen=True, slots=True)
class ClassifierResult:
    classifier: str
    full_bundle: Path | None = None
    reduced_bundle: Path | None = None
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


@define(frozen=True, slots=True)
class BuildReport:
    results: tuple[ClassifierResult, ...] = ()

    @property
    def failed(self) -> bool:
        return any(not result.ok for result in self.results)

    @property
    def failures(self) -> tuple[ClassifierResult, ...]:
        return tuple(result for result in self.results if not result.ok)

    def archives(self) -> list[Path]:
        paths: list[Path] = []
        for result in self.results:
            if result.full_bundle is not None:
                paths.append(result.full_bundle)
            if result.reduced_bundle is not None:
                paths.append(result.reduced_bundle)
        return paths
