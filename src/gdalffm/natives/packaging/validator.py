"""Checks that a staged PROJ data directory can satisfy the swiss subset."""

from pathlib import Path

from pyvider.telemetry import logger

from ..exceptions import IncompleteSubsetError
from ..models import Requirement


def list_staged_files(data_dir: Path) -> frozenset[str]:
    """Returns the non-hidden regular file names directly inside `data_dir`."""
    if not data_dir.is_dir():
        return frozenset()
    return frozenset(
        entry.name
        for entry in data_dir.iterdir()
        if entry.is_file() and not entry.name.startswith(".")
    )


def find_missing(
    requirements: tuple[Requirement, ...], staged: frozenset[str]
) -> list[Requirement]:
    return [
        requirement
        for requirement in requirements
        if not requirement.is_satisfied_by(staged)
    ]


def validate_subset(
    classifier: str, data_dir: Path, requirements: tuple[Requirement, ...]
) -> None:
    """
    Raises `IncompleteSubsetError` when staged files leave any requirement
    unsatisfied. An empty data directory passes, so partially staged
    fixtures can still be packaged.
    """
    staged = list_staged_files(data_dir)
    if not staged:
        logger.warning(
            "No PROJ data staged, skipping swiss subset validation",
            classifier=classifier,
            data_dir=str(data_dir),
        )
        return

    missing = find_missing(requirements, staged)
    if missing:
        found = tuple(sorted(staged))
        missing_labels = ", ".join(requirement.describe() for requirement in missing)
        raise IncompleteSubsetError(
            f"Swiss PROJ subset for classifier '{classifier}' is incomplete. "
            f"Missing groups: {missing_labels}. "
            f"Available files in share/proj: {', '.join(found)}",
            classifier=classifier,
            missing=tuple(missing),
            found=found,
        )

    logger.debug(
        "Swiss PROJ subset complete", classifier=classifier, files=len(staged)
    )
