"""Corpus-wide reference statistics accumulator and its text report."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from enum import Enum


class ReferenceOperation(Enum):
    """The reference-operation buckets an instruction can fall into.

    Each value is the name of the matching ``Counts`` field.
    """

    IMM_BORROW_LOC = "imm_borrow_loc"
    MUT_BORROW_LOC = "mut_borrow_loc"
    IMM_BORROW_FIELD = "imm_borrow_field"
    MUT_BORROW_FIELD = "mut_borrow_field"
    IMM_BORROW_GLOBAL = "imm_borrow_global"
    MUT_BORROW_GLOBAL = "mut_borrow_global"
    FREEZE = "freeze"


def format_percent(x: int, y: int) -> str:
    """Render ``x/y (p.pp%)``.

    An empty denominator renders as ``0/0 (0.00%)`` instead of NaN.
    """
    ratio = x / y * 100.0 if y else 0.0
    return f"{x}/{y} ({ratio:.2f}%)"


@dataclass
class Counts:
    """Counters accumulated over every unit in one analysis run."""

    imm_borrow_loc: int = 0
    mut_borrow_loc: int = 0
    imm_borrow_field: int = 0
    mut_borrow_field: int = 0
    imm_borrow_global: int = 0
    mut_borrow_global: int = 0
    freeze: int = 0
    total_instructions: int = 0

    reference_parameters: int = 0
    reference_return_values: int = 0
    acquires_annotations: int = 0

    total_functions: int = 0
    functions_with_reference_operations: int = 0
    functions_with_reference_signatures: int = 0
    functions_with_acquires: int = 0

    total_modules: int = 0
    modules_with_acquires: int = 0

    def record_reference_operation(self, kind: ReferenceOperation) -> None:
        setattr(self, kind.value, getattr(self, kind.value) + 1)

    def total_reference_operations(self) -> int:
        return (
            self.imm_borrow_loc
            + self.mut_borrow_loc
            + self.imm_borrow_field
            + self.mut_borrow_field
            + self.imm_borrow_global
            + self.mut_borrow_global
            + self.freeze
        )

    def total_signature_annotations(self) -> int:
        return self.reference_parameters + self.reference_return_values

    def total_annotations(self) -> int:
        return self.total_signature_annotations() + self.acquires_annotations

    def merge(self, other: Counts) -> Counts:
        """Field-wise sum of two accumulators, e.g. from separate workers."""
        return Counts(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    def to_dict(self) -> dict[str, int]:
        d = asdict(self)
        d["total_reference_operations"] = self.total_reference_operations()
        d["total_signature_annotations"] = self.total_signature_annotations()
        d["total_annotations"] = self.total_annotations()
        return d

    def report(self) -> str:
        total_reference_operations = self.total_reference_operations()
        lines = [
            "Total reference operations (not including move/copy/pop): "
            f"{total_reference_operations}",
            f"  Total borrow local: {self.imm_borrow_loc + self.mut_borrow_loc}",
            f"    Imm borrow local: {self.imm_borrow_loc}",
            f"    Mut borrow local: {self.mut_borrow_loc}",
            f"  Total borrow field: {self.imm_borrow_field + self.mut_borrow_field}",
            f"    Imm borrow field: {self.imm_borrow_field}",
            f"    Mut borrow field: {self.mut_borrow_field}",
            f"  Total borrow global: {self.imm_borrow_global + self.mut_borrow_global}",
            f"    Imm borrow global: {self.imm_borrow_global}",
            f"    Mut borrow global: {self.mut_borrow_global}",
            f"  Freeze: {self.freeze}",
            "Fraction of instructions that are reference instructions: "
            + format_percent(total_reference_operations, self.total_instructions),
            "",
            f"Total reference related annotations: {self.total_annotations()}",
            "  Total reference function type annotations: "
            f"{self.total_signature_annotations()}",
            f"    Reference parameters: {self.reference_parameters}",
            f"    Reference return values: {self.reference_return_values}",
            f"  Acquire annotations: {self.acquires_annotations}",
            "",
            "Functions with reference operations: "
            + format_percent(
                self.functions_with_reference_operations, self.total_functions
            ),
            "Functions with reference signatures: "
            + format_percent(
                self.functions_with_reference_signatures, self.total_functions
            ),
            "Functions with acquires: "
            + format_percent(self.functions_with_acquires, self.total_functions),
            "Modules with acquires: "
            + format_percent(self.modules_with_acquires, self.total_modules),
        ]
        return "\n".join(lines)
