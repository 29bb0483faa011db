"""Run pipeline data types (pure data, no business logic)."""

from __future__ import annotations

from dataclasses import dataclass, field

from .counts import Counts
from . import constants


@dataclass(frozen=True)
class AnalysisConfig:
    """Groups the options of one analysis run."""

    sources: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    output_format: str = constants.FORMAT_TEXT
    verbose: bool = False


@dataclass
class AnalysisRun:
    """Final counts of a run plus the size and timing of each stage."""

    counts: Counts = field(default_factory=Counts)
    unit_count: int = 0

    # Stage timings (milliseconds)
    compile_millis: float = 0.0
    verify_millis: float = 0.0
    analyze_millis: float = 0.0

    def to_dict(self) -> dict:
        return {
            "units": self.unit_count,
            "timings_ms": {
                "compile": round(self.compile_millis, 3),
                "verify": round(self.verify_millis, 3),
                "analyze": round(self.analyze_millis, 3),
            },
            "counts": self.counts.to_dict(),
        }
