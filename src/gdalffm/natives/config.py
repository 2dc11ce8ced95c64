"""Loads the bundle configuration from the `[tool.gdal-natives]` table."""

import os
from pathlib import Path
import tomllib
from typing import Any

from pyvider.telemetry import logger

from .exceptions import ConfigurationError
from .models import (
    DEFAULT_CLASSIFIERS,
    DEFAULT_SWISS_REQUIREMENTS,
    BundleConfig,
    Requirement,
)

CONFIG_TABLE = "gdal-natives"
SWISS_TOGGLE_ENV = "GDAL_SWISS_NATIVES_ENABLED"
DEFAULT_STAGING_ROOT = "src/main/resources/META-INF/gdal-native"
DEFAULT_OUTPUT_DIR = "build/libs"


def parse_toggle(raw: Any, name: str = "swiss_enabled") -> bool:
    """Accepts only true/false, as a TOML boolean or a case-insensitive string."""
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        lowered = raw.lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
    raise ConfigurationError(
        f"Invalid value for {name}: '{raw}' (expected true or false)"
    )


def _parse_requirements(raw: Any) -> tuple[Requirement, ...]:
    if not isinstance(raw, list) or not raw:
        raise ConfigurationError(
            "[tool.gdal-natives.swiss] requirements must be a non-empty list of tables."
        )
    requirements = []
    for index, entry in enumerate(raw):
        if not isinstance(entry, dict):
            raise ConfigurationError(f"Requirement #{index} must be a table.")
        label = entry.get("label")
        candidates = entry.get("candidates")
        if not isinstance(label, str):
            raise ConfigurationError(f"Requirement #{index} is missing a 'label'.")
        if not isinstance(candidates, list):
            raise ConfigurationError(
                f"Requirement '{label}' must define 'candidates' as a list."
            )
        requirements.append(Requirement(label, tuple(candidates)))
    return tuple(requirements)


def read_tool_table(manifest_path: Path) -> dict[str, Any]:
    with manifest_path.open("rb") as f:
        try:
            pyproject_data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Could not parse {manifest_path}: {e}") from e
    return pyproject_data.get("tool", {}).get(CONFIG_TABLE, {})


def load_config(
    manifest_path: Path | None = None,
    *,
    swiss_override: str | bool | None = None,
    output_dir: Path | str | None = None,
    jobs: int | None = None,
    environ: dict[str, str] | None = None,
) -> BundleConfig:
    """
    Builds a `BundleConfig` from an optional pyproject.toml manifest.

    The swiss toggle is resolved from the manifest, then the
    GDAL_SWISS_NATIVES_ENABLED environment variable, then `swiss_override`,
    with later sources taking precedence.
    """
    environ = os.environ if environ is None else environ
    conf: dict[str, Any] = {}
    base_dir = Path.cwd()
    if manifest_path is not None:
        conf = read_tool_table(manifest_path)
        base_dir = manifest_path.parent
        if not conf:
            logger.info(
                f"No [tool.{CONFIG_TABLE}] table in {manifest_path.name}, using defaults."
            )

    swiss_enabled = parse_toggle(conf.get("swiss_enabled", True))
    if SWISS_TOGGLE_ENV in environ:
        swiss_enabled = parse_toggle(environ[SWISS_TOGGLE_ENV], SWISS_TOGGLE_ENV)
    if swiss_override is not None:
        swiss_enabled = parse_toggle(swiss_override)

    classifiers = conf.get("classifiers", list(DEFAULT_CLASSIFIERS))
    if not isinstance(classifiers, list):
        raise ConfigurationError("'classifiers' must be a list of strings.")

    swiss_conf = conf.get("swiss", {})
    if not isinstance(swiss_conf, dict):
        raise ConfigurationError(f"[tool.{CONFIG_TABLE}.swiss] must be a table.")
    if "requirements" in swiss_conf:
        requirements = _parse_requirements(swiss_conf["requirements"])
    else:
        requirements = DEFAULT_SWISS_REQUIREMENTS

    version = conf.get("version")
    if version is not None and not isinstance(version, str):
        raise ConfigurationError("'version' must be a string.")

    final_jobs = jobs if jobs is not None else conf.get("jobs")
    if final_jobs is not None and (
        isinstance(final_jobs, bool) or not isinstance(final_jobs, int)
    ):
        raise ConfigurationError("'jobs' must be a positive integer.")

    for key in ("staging_root", "output_dir"):
        if key in conf and not isinstance(conf[key], str):
            raise ConfigurationError(f"'{key}' must be a path string.")

    staging_root = base_dir / conf.get("staging_root", DEFAULT_STAGING_ROOT)
    final_out = Path(output_dir) if output_dir else base_dir / conf.get(
        "output_dir", DEFAULT_OUTPUT_DIR
    )

    return BundleConfig(
        staging_root=staging_root,
        output_dir=final_out,
        classifiers=tuple(classifiers),
        requirements=requirements,
        swiss_enabled=swiss_enabled,
        version=version,
        jobs=final_jobs,
    )
