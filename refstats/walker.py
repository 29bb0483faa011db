"""Unit walkers — fold compiled modules and scripts into a Counts accumulator."""

from __future__ import annotations

import logging
from typing import Iterable

from .bytecode import CompiledModule, CompiledScript, CompiledUnit, format_signature
from .classify import count_function_signature, count_instructions
from .counts import Counts

logger = logging.getLogger(__name__)


def count_module(counts: Counts, module: CompiledModule) -> None:
    counts.total_modules += 1
    before_acquires = counts.acquires_annotations
    for fdef in module.function_defs:
        parameters = module.parameters_of(fdef)
        returns = module.returns_of(fdef)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Function %s::%s%s: %s",
                module.name,
                module.handle_of(fdef).name,
                format_signature(parameters),
                format_signature(returns),
            )
        count_function_signature(
            counts, parameters, returns, fdef.acquires_global_resources
        )
        if fdef.code is not None:
            count_instructions(counts, fdef.code.code)
    if counts.acquires_annotations > before_acquires:
        counts.modules_with_acquires += 1
    logger.debug(
        "Counted module %s: %d function(s)", module.name, len(module.function_defs)
    )


def count_script(counts: Counts, script: CompiledScript) -> None:
    """Count a script as a single function; scripts are never modules."""
    count_function_signature(counts, script.parameter_types(), [], [])
    count_instructions(counts, script.code.code)
    logger.debug(
        "Counted script %s: %d instruction(s)", script.name, len(script.code.code)
    )


def count_unit(counts: Counts, unit: CompiledUnit) -> None:
    if isinstance(unit, CompiledScript):
        count_script(counts, unit)
    else:
        count_module(counts, unit)


def count_units(units: Iterable[CompiledUnit]) -> Counts:
    """Walk every unit into a fresh accumulator and return it."""
    counts = Counts()
    for unit in units:
        count_unit(counts, unit)
    return counts
