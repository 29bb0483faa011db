"""Reference-usage statistics over compiled bytecode modules and scripts."""

from .api import (  # noqa: F401
    compile_units,
    verify_units,
    analyze_units,
    analyze_files,
    report_files,
)
from .counts import Counts, ReferenceOperation  # noqa: F401
