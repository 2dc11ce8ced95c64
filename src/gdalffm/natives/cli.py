"""The `gdalnatives` command-line interface."""

import importlib.metadata
from pathlib import Path

import click

from .config import load_config
from .exceptions import ConfigurationError, InvalidBundleError, MissingManifestError
from .host import host_classifier
from .layout import verify_layout
from .models import BuildReport, BundleConfig
from .packaging.orchestrator import BuildOrchestrator
from .packaging.reader import BundleReader

try:
    __version__ = importlib.metadata.version("gdal-natives-builder")
except importlib.metadata.PackageNotFoundError:
    __version__ = "0.0.0-dev"

HOST_ALIAS = "host"


def _manifest_option(func):
    return click.option(
        "--manifest",
        "pyproject_toml_path",
        default=None,
        type=click.Path(exists=True, dir_okay=False, resolve_path=True),
        help="Path to the pyproject.toml holding [tool.gdal-natives]. "
        "Defaults to ./pyproject.toml when present.",
    )(func)


def _classifier_option(func):
    return click.option(
        "--classifier",
        "classifiers",
        multiple=True,
        help="Restrict the run to this classifier ('host' for the current machine). Repeatable.",
    )(func)


def _swiss_option(func):
    return click.option(
        "--swiss-natives",
        "swiss_natives",
        default=None,
        metavar="true|false",
        help="Enable or disable the swiss bundles, overriding configuration.",
    )(func)


def _resolve_config(
    pyproject_toml_path: str | None,
    classifiers: tuple[str, ...] = (),
    **overrides,
) -> BundleConfig:
    manifest_path = Path(pyproject_toml_path) if pyproject_toml_path else None
    if manifest_path is None and Path("pyproject.toml").is_file():
        manifest_path = Path("pyproject.toml").resolve()
    try:
        config = load_config(manifest_path, **overrides)
        if classifiers:
            names = [host_classifier() if c == HOST_ALIAS else c for c in classifiers]
            config = config.select(names)
    except ConfigurationError as e:
        raise click.UsageError(str(e)) from e
    return config


def _report_failures(report: BuildReport, action: str) -> None:
    if not report.failed:
        return
    for result in report.failures:
        for error in result.errors:
            click.secho(f"❌ [{result.classifier}] {error}", fg="red", err=True)
    failed = ", ".join(result.classifier for result in report.failures)
    click.secho(f"❌ {action} failed for: {failed}", fg="red", err=True)
    raise click.Abort()


@click.group(context_settings=dict(help_option_names=["-h", "--help"]))
@click.version_option(
    __version__,
    "-V",
    "--version",
    prog_name="gdalnatives",
    message="%(prog)s version %(version)s",
)
def cli() -> None:
    """GDAL native bundle packaging tool."""
    pass


@cli.command("assemble")
@_manifest_option
@_classifier_option
@_swiss_option
@click.option(
    "--out-dir",
    default=None,
    type=click.Path(file_okay=False, writable=True, resolve_path=True),
    help="Override the output directory from pyproject.toml.",
)
@click.option("--jobs", "-j", type=click.IntRange(min=1), default=None, help="Worker threads.")
def assemble_command(
    pyproject_toml_path: str | None,
    classifiers: tuple[str, ...],
    swiss_natives: str | None,
    out_dir: str | None,
    jobs: int | None,
) -> None:
    """Builds the full and swiss native bundles for every classifier."""
    config = _resolve_config(
        pyproject_toml_path,
        classifiers,
        swiss_override=swiss_natives,
        output_dir=out_dir,
        jobs=jobs,
    )
    click.echo(f"🚀 Assembling native bundles into {config.output_dir}...")
    report = BuildOrchestrator(config).build()
    for archive in report.archives():
        click.secho(f"✅ {archive.name}", fg="green")
    _report_failures(report, "Assembly")
    click.secho("✅ All native bundles assembled.", fg="green")


@cli.command("check")
@_manifest_option
@_classifier_option
@_swiss_option
def check_command(
    pyproject_toml_path: str | None,
    classifiers: tuple[str, ...],
    swiss_natives: str | None,
) -> None:
    """Verifies manifests and swiss PROJ subsets without building archives."""
    config = _resolve_config(pyproject_toml_path, classifiers, swiss_override=swiss_natives)
    click.echo(f"🔍 Checking staged native resources in {config.staging_root}...")
    report = BuildOrchestrator(config).check()
    _report_failures(report, "Check")
    click.secho(
        f"✅ {len(report.results)} classifier(s) passed all checks.", fg="green"
    )


@cli.command("verify-layout")
@_manifest_option
@_classifier_option
def verify_layout_command(
    pyproject_toml_path: str | None, classifiers: tuple[str, ...]
) -> None:
    """Checks that each classifier bundle has a manifest.json file."""
    config = _resolve_config(pyproject_toml_path, classifiers)
    try:
        verify_layout(config.staging_root, config.classifiers)
    except MissingManifestError as e:
        for classifier, path in e.missing.items():
            click.secho(
                f"❌ Missing manifest.json for classifier: {classifier} (expected {path})",
                fg="red",
                err=True,
            )
        raise click.Abort() from e
    click.secho("✅ Native bundle layout verified.", fg="green")


@cli.command("classifiers")
@_manifest_option
@click.option("--host", "show_host", is_flag=True, help="Print the current machine's classifier.")
def classifiers_command(pyproject_toml_path: str | None, show_host: bool) -> None:
    """Lists the configured native classifiers."""
    if show_host:
        try:
            click.echo(host_classifier())
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e
        return
    config = _resolve_config(pyproject_toml_path)
    for classifier in config.classifiers:
        click.echo(classifier)


@cli.command("inspect")
@click.argument(
    "bundle_file",
    type=click.Path(exists=True, dir_okay=False, resolve_path=True),
)
def inspect_command(bundle_file: str) -> None:
    """Prints a summary of a native bundle archive."""
    try:
        reader = BundleReader(Path(bundle_file))
    except InvalidBundleError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        raise click.Abort() from e
    click.echo(reader.get_info())


main = cli
