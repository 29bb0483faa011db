"""Classification of function signatures and instructions into reference statistics."""

from __future__ import annotations

from typing import Iterable, Sequence

from .bytecode import Bytecode, Opcode, SignatureToken
from .counts import Counts, ReferenceOperation

# Generic field/global borrows land in the same bucket as their
# non-generic counterparts.
_REFERENCE_OPCODES: dict[Opcode, ReferenceOperation] = {
    Opcode.IMM_BORROW_LOC: ReferenceOperation.IMM_BORROW_LOC,
    Opcode.MUT_BORROW_LOC: ReferenceOperation.MUT_BORROW_LOC,
    Opcode.IMM_BORROW_FIELD: ReferenceOperation.IMM_BORROW_FIELD,
    Opcode.IMM_BORROW_FIELD_GENERIC: ReferenceOperation.IMM_BORROW_FIELD,
    Opcode.MUT_BORROW_FIELD: ReferenceOperation.MUT_BORROW_FIELD,
    Opcode.MUT_BORROW_FIELD_GENERIC: ReferenceOperation.MUT_BORROW_FIELD,
    Opcode.IMM_BORROW_GLOBAL: ReferenceOperation.IMM_BORROW_GLOBAL,
    Opcode.IMM_BORROW_GLOBAL_GENERIC: ReferenceOperation.IMM_BORROW_GLOBAL,
    Opcode.MUT_BORROW_GLOBAL: ReferenceOperation.MUT_BORROW_GLOBAL,
    Opcode.MUT_BORROW_GLOBAL_GENERIC: ReferenceOperation.MUT_BORROW_GLOBAL,
    Opcode.FREEZE_REF: ReferenceOperation.FREEZE,
}


def classify_instruction(instruction: Bytecode) -> ReferenceOperation | None:
    """Return the reference-operation bucket for *instruction*.

    Returns ``None`` for every instruction that is not a reference operation.
    """
    return _REFERENCE_OPCODES.get(instruction.opcode)


def count_instruction(counts: Counts, instruction: Bytecode) -> None:
    counts.total_instructions += 1
    kind = classify_instruction(instruction)
    if kind is not None:
        counts.record_reference_operation(kind)


def count_instructions(counts: Counts, code: Iterable[Bytecode]) -> None:
    """Count every instruction of one function body.

    The function is counted as having reference operations when at least
    one instruction of the body was a reference operation.
    """
    before = counts.total_reference_operations()
    for instruction in code:
        count_instruction(counts, instruction)
    if counts.total_reference_operations() > before:
        counts.functions_with_reference_operations += 1


def count_function_signature(
    counts: Counts,
    parameters: Sequence[SignatureToken],
    return_types: Sequence[SignatureToken],
    acquires: Sequence[int],
) -> None:
    """Count one function's reference-typed signature slots and acquires."""
    counts.total_functions += 1
    has_reference = False
    for parameter in parameters:
        if parameter.is_reference():
            has_reference = True
            counts.reference_parameters += 1
    for return_type in return_types:
        if return_type.is_reference():
            has_reference = True
            counts.reference_return_values += 1
    if has_reference:
        counts.functions_with_reference_signatures += 1
    if acquires:
        counts.functions_with_acquires += 1
    counts.acquires_annotations += len(acquires)
