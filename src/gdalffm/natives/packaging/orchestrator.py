"""Runs bundle assembly and validation across all configured classifiers."""

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
import os
from pathlib import Path

from pyvider.telemetry import logger

from ..exceptions import BuildError, VerificationError
from ..layout import proj_data_dir, verify_layout
from ..models import BuildReport, BundleConfig, ClassifierResult
from .assembler import BundleAssembler
from .validator import validate_subset

# Failures that belong to one classifier. Anything else is a bug and propagates.
RECORDED_ERRORS = (BuildError, VerificationError, OSError)


class BuildOrchestrator:
    def __init__(self, config: BundleConfig) -> None:
        self.config = config
        self.assembler = BundleAssembler(config)

    @property
    def max_workers(self) -> int:
        if self.config.jobs is not None:
            return self.config.jobs
        return max(1, min(len(self.config.classifiers), os.cpu_count() or 1))

    def _run_variant(
        self, classifier: str, variant: str, step: Callable[[str], Path], errors: list[str]
    ) -> Path | None:
        try:
            return step(classifier)
        except RECORDED_ERRORS as e:
            logger.error(
                f"{variant} bundle failed", classifier=classifier, error=str(e)
            )
            errors.append(f"{variant} bundle: {e}")
            return None

    def _build_classifier(self, classifier: str) -> ClassifierResult:
        logger.info(f"Assembling native bundles for {classifier}")
        errors: list[str] = []
        full = self._run_variant(
            classifier, "full", self.assembler.assemble_full, errors
        )
        reduced = None
        if self.config.swiss_enabled:
            reduced = self._run_variant(
                classifier, "swiss", self.assembler.assemble_reduced, errors
            )
        return ClassifierResult(
            classifier=classifier,
            full_bundle=full,
            reduced_bundle=reduced,
            errors=tuple(errors),
        )

    def _check_classifier(self, classifier: str) -> ClassifierResult:
        errors: list[str] = []
        try:
            verify_layout(self.config.staging_root, (classifier,))
        except VerificationError as e:
            errors.append(str(e))
        if self.config.swiss_enabled:
            try:
                validate_subset(
                    classifier,
                    proj_data_dir(self.config.staging_root, classifier),
                    self.config.requirements,
                )
            except RECORDED_ERRORS as e:
                errors.append(str(e))
        for error in errors:
            logger.error("Check failed", classifier=classifier, error=error)
        return ClassifierResult(classifier=classifier, errors=tuple(errors))

    def _fan_out(self, task: Callable[[str], ClassifierResult]) -> BuildReport:
        with ThreadPoolExecutor(
            max_workers=self.max_workers, thread_name_prefix="gdal-natives"
        ) as pool:
            futures = [pool.submit(task, c) for c in self.config.classifiers]
            results = tuple(future.result() for future in futures)
        return BuildReport(results=results)

    def build(self) -> BuildReport:
        """Assembles every configured bundle variant for every classifier."""
        logger.info(
            "Orchestrator starting native bundle assembly...",
            classifiers=len(self.config.classifiers),
            swiss_enabled=self.config.swiss_enabled,
        )
        self.config.output_dir.mkdir(parents=True, exist_ok=True)
        return self._fan_out(self._build_classifier)

    def check(self) -> BuildReport:
        """Verifies layout and swiss subsets without writing archives."""
        logger.info("Orchestrator checking staged native resources...")
        return self._fan_out(self._check_classifier)
