"""Unit providers — the compiler+verifier collaborator that yields compiled units."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Sequence

from pydantic import ValidationError

from .bytecode import CompiledModule, CompiledScript, CompiledUnit, parse_units
from . import constants

logger = logging.getLogger(__name__)


class UnitProviderError(Exception):
    """Raised when the upstream compiler or verifier reports errors."""

    def __init__(self, message: str, errors: Sequence[str]):
        super().__init__(f"{message}: {len(errors)} error(s)")
        self.errors: list[str] = list(errors)


class CompilationError(UnitProviderError):
    pass


class VerificationError(UnitProviderError):
    pass


class UnitProvider(ABC):
    """Abstract compiler+verifier producing compiled units."""

    @abstractmethod
    def compile(self, sources: Sequence[str], dependencies: Sequence[str]) -> list[CompiledUnit]:
        """Compile *sources* against *dependencies*.

        Raises:
            CompilationError: If compilation produced any error.
        """
        ...

    @abstractmethod
    def verify(self, units: Sequence[CompiledUnit]) -> tuple[list[CompiledUnit], list[str]]:
        """Return the units that passed verification plus every error found."""
        ...


class SerializedUnitProvider(UnitProvider):
    """Provider for compiler output already serialized to JSON files.

    Each file holds one unit object or an array of units. Dependency files
    are loaded so their errors surface, but only source files yield units.
    """

    def __init__(self, encoding: str = constants.SERIALIZED_UNIT_ENCODING):
        self._encoding = encoding

    def _load(self, path: str, errors: list[str]) -> list[CompiledUnit]:
        try:
            text = Path(path).read_text(encoding=self._encoding)
        except OSError as exc:
            errors.append(f"{path}: {exc.strerror or exc}")
            return []
        except UnicodeDecodeError as exc:
            errors.append(f"{path}: {exc}")
            return []
        try:
            return parse_units(text)
        except ValidationError as exc:
            errors.extend(_format_validation_error(path, err) for err in exc.errors())
            return []

    def compile(self, sources: Sequence[str], dependencies: Sequence[str]) -> list[CompiledUnit]:
        errors: list[str] = []
        for dep in dependencies:
            self._load(dep, errors)
        units = [unit for src in sources for unit in self._load(src, errors)]
        if errors:
            raise CompilationError("Compilation failed", errors)
        logger.info(
            "Loaded %d unit(s) from %d source file(s), %d dependency file(s)",
            len(units),
            len(sources),
            len(dependencies),
        )
        return units

    def verify(self, units: Sequence[CompiledUnit]) -> tuple[list[CompiledUnit], list[str]]:
        verified: list[CompiledUnit] = []
        errors: list[str] = []
        for unit in units:
            unit_errors = (
                _check_script(unit)
                if isinstance(unit, CompiledScript)
                else _check_module(unit)
            )
            if unit_errors:
                errors.extend(f"{unit.kind} {unit.name}: {e}" for e in unit_errors)
            else:
                verified.append(unit)
        return verified, errors


def _format_validation_error(path: str, err: dict) -> str:
    loc = ".".join(str(p) for p in err["loc"])
    if loc:
        return f"{path}: {loc}: {err['msg']}"
    return f"{path}: {err['msg']}"


def _check_index(errors: list[str], what: str, index: int, pool_size: int) -> bool:
    if 0 <= index < pool_size:
        return True
    errors.append(f"{what} index {index} out of bounds (pool size {pool_size})")
    return False


def _check_module(module: CompiledModule) -> list[str]:
    """Bounds-check every index a function definition refers to."""
    errors: list[str] = []
    n_signatures = len(module.signatures)
    for handle in module.function_handles:
        _check_index(errors, f"{handle.name} parameters", handle.parameters, n_signatures)
        _check_index(errors, f"{handle.name} returns", handle.returns, n_signatures)
    for i, fdef in enumerate(module.function_defs):
        _check_index(
            errors, f"function_defs[{i}] handle", fdef.function, len(module.function_handles)
        )
        for struct_index in fdef.acquires_global_resources:
            _check_index(
                errors,
                f"function_defs[{i}] acquires",
                struct_index,
                len(module.struct_defs),
            )
    return errors


def _check_script(script: CompiledScript) -> list[str]:
    errors: list[str] = []
    _check_index(errors, "parameters", script.parameters, len(script.signatures))
    return errors
