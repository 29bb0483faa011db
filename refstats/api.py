"""Composable API functions for the reference statistics pipeline.

Each function corresponds to a stage of the ``paper-analyze`` command but is
callable programmatically without argparse.
"""

from __future__ import annotations

import logging
import time
from typing import Iterable, Sequence

from .bytecode import CompiledUnit
from .counts import Counts
from .provider import SerializedUnitProvider, UnitProvider, VerificationError
from .run_types import AnalysisRun
from .walker import count_units

logger = logging.getLogger(__name__)


def _elapsed_millis(start: float) -> float:
    return (time.perf_counter() - start) * 1000.0


def compile_units(
    sources: Sequence[str],
    dependencies: Sequence[str] = (),
    provider: UnitProvider | None = None,
) -> list[CompiledUnit]:
    """Compile source files into units via *provider*.

    Args:
        sources: Paths of the files to analyze.
        dependencies: Paths of library files needed to compile the sources.
        provider: The compiler+verifier; defaults to ``SerializedUnitProvider``.

    Returns:
        The compiled, not yet verified, units.

    Raises:
        CompilationError: If the provider reports any compile error.
    """
    provider = provider or SerializedUnitProvider()
    logger.info(
        "Compiling %d source(s) with %d dependency file(s)",
        len(sources),
        len(dependencies),
    )
    return provider.compile(sources, dependencies)


def verify_units(
    units: Sequence[CompiledUnit], provider: UnitProvider | None = None
) -> list[CompiledUnit]:
    """Verify *units*; analysis may only proceed on a clean verification.

    Raises:
        VerificationError: If the verifier reports any error.
    """
    provider = provider or SerializedUnitProvider()
    verified, errors = provider.verify(units)
    if errors:
        raise VerificationError("Verification failed", errors)
    return verified


def analyze_units(units: Iterable[CompiledUnit]) -> Counts:
    """Fold verified units into reference statistics."""
    return count_units(units)


def analyze_files(
    sources: Sequence[str],
    dependencies: Sequence[str] = (),
    provider: UnitProvider | None = None,
) -> AnalysisRun:
    """Compile, verify and analyze, timing each stage.

    Args:
        sources: Paths of the files to analyze.
        dependencies: Paths of library files needed to compile the sources.
        provider: The compiler+verifier; defaults to ``SerializedUnitProvider``.

    Returns:
        An AnalysisRun with the final Counts and stage timings.
    """
    provider = provider or SerializedUnitProvider()

    start = time.perf_counter()
    units = compile_units(sources, dependencies, provider)
    compile_millis = _elapsed_millis(start)

    start = time.perf_counter()
    units = verify_units(units, provider)
    verify_millis = _elapsed_millis(start)
    logger.info("Verified %d unit(s) in %.1fms", len(units), verify_millis)

    start = time.perf_counter()
    counts = analyze_units(units)
    analyze_millis = _elapsed_millis(start)

    return AnalysisRun(
        counts=counts,
        unit_count=len(units),
        compile_millis=compile_millis,
        verify_millis=verify_millis,
        analyze_millis=analyze_millis,
    )


def report_files(
    sources: Sequence[str],
    dependencies: Sequence[str] = (),
    provider: UnitProvider | None = None,
) -> str:
    """Analyze files and return the plain-text report."""
    return analyze_files(sources, dependencies, provider).counts.report()
