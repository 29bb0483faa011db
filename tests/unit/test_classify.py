"""Tests for signature and instruction classification."""

import pytest

from refstats.bytecode import Bytecode, Opcode, SignatureToken, TokenKind
from refstats.classify import (
    classify_instruction,
    count_function_signature,
    count_instruction,
    count_instructions,
)
from refstats.counts import Counts, ReferenceOperation

U64 = SignatureToken(kind=TokenKind.U64)
BOOL = SignatureToken(kind=TokenKind.BOOL)
REF = SignatureToken(kind=TokenKind.REFERENCE, inner=U64)
MUT_REF = SignatureToken(kind=TokenKind.MUTABLE_REFERENCE, inner=U64)

REFERENCE_OPCODES = {
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


def _code(*opcodes):
    return [Bytecode(opcode=op) for op in opcodes]


class TestClassifyInstruction:
    @pytest.mark.parametrize("opcode,expected", list(REFERENCE_OPCODES.items()))
    def test_reference_opcodes(self, opcode, expected):
        assert classify_instruction(Bytecode(opcode=opcode)) == expected

    @pytest.mark.parametrize(
        "opcode", [op for op in Opcode if op not in REFERENCE_OPCODES]
    )
    def test_other_opcodes_are_unclassified(self, opcode):
        assert classify_instruction(Bytecode(opcode=opcode)) is None

    def test_read_and_write_ref_are_not_reference_operations(self):
        assert classify_instruction(Bytecode(opcode=Opcode.READ_REF)) is None
        assert classify_instruction(Bytecode(opcode=Opcode.WRITE_REF)) is None


class TestCountInstruction:
    def test_generic_field_borrow_counts_like_non_generic(self):
        generic, plain = Counts(), Counts()
        count_instruction(generic, Bytecode(opcode=Opcode.MUT_BORROW_FIELD_GENERIC))
        count_instruction(plain, Bytecode(opcode=Opcode.MUT_BORROW_FIELD))
        assert generic == plain

    def test_generic_global_borrow_counts_like_non_generic(self):
        generic, plain = Counts(), Counts()
        count_instruction(generic, Bytecode(opcode=Opcode.IMM_BORROW_GLOBAL_GENERIC))
        count_instruction(plain, Bytecode(opcode=Opcode.IMM_BORROW_GLOBAL))
        assert generic == plain
        assert plain.imm_borrow_global == 1

    def test_other_instruction_only_bumps_total(self):
        counts = Counts()
        count_instruction(counts, Bytecode(opcode=Opcode.ADD))
        assert counts == Counts(total_instructions=1)

    def test_every_opcode_bumps_total_once(self):
        counts = Counts()
        for op in Opcode:
            count_instruction(counts, Bytecode(opcode=op))
        assert counts.total_instructions == len(Opcode)
        assert counts.total_reference_operations() == len(REFERENCE_OPCODES)


class TestCountInstructions:
    def test_function_with_reference_operation(self):
        counts = Counts()
        count_instructions(counts, _code(Opcode.COPY_LOC, Opcode.FREEZE_REF, Opcode.RET))
        assert counts.freeze == 1
        assert counts.total_instructions == 3
        assert counts.functions_with_reference_operations == 1

    def test_function_without_reference_operation(self):
        counts = Counts()
        count_instructions(counts, _code(Opcode.LD_U64, Opcode.POP, Opcode.RET))
        assert counts.total_instructions == 3
        assert counts.functions_with_reference_operations == 0

    def test_many_reference_operations_count_function_once(self):
        counts = Counts()
        count_instructions(
            counts, _code(Opcode.IMM_BORROW_LOC, Opcode.IMM_BORROW_LOC, Opcode.MUT_BORROW_LOC)
        )
        assert counts.imm_borrow_loc == 2
        assert counts.mut_borrow_loc == 1
        assert counts.functions_with_reference_operations == 1

    def test_earlier_functions_do_not_leak_into_delta(self):
        counts = Counts()
        count_instructions(counts, _code(Opcode.IMM_BORROW_LOC))
        count_instructions(counts, _code(Opcode.RET))
        assert counts.functions_with_reference_operations == 1

    def test_empty_body(self):
        counts = Counts()
        count_instructions(counts, [])
        assert counts == Counts()

    def test_total_is_reference_plus_other(self):
        code = _code(
            Opcode.IMM_BORROW_FIELD_GENERIC,
            Opcode.ADD,
            Opcode.MUT_BORROW_GLOBAL,
            Opcode.READ_REF,
            Opcode.FREEZE_REF,
            Opcode.RET,
        )
        counts = Counts()
        count_instructions(counts, code)
        others = sum(1 for inst in code if classify_instruction(inst) is None)
        assert counts.total_instructions == counts.total_reference_operations() + others

    def test_order_does_not_matter(self):
        code = _code(Opcode.MUT_BORROW_FIELD, Opcode.ADD, Opcode.FREEZE_REF, Opcode.RET)
        forward, backward = Counts(), Counts()
        count_instructions(forward, code)
        count_instructions(backward, list(reversed(code)))
        assert forward == backward


class TestCountFunctionSignature:
    def test_counts_function(self):
        counts = Counts()
        count_function_signature(counts, [], [], [])
        assert counts == Counts(total_functions=1)

    def test_reference_parameters(self):
        counts = Counts()
        count_function_signature(counts, [REF, U64, MUT_REF], [], [])
        assert counts.reference_parameters == 2
        assert counts.functions_with_reference_signatures == 1

    def test_reference_return_values(self):
        counts = Counts()
        count_function_signature(counts, [U64], [MUT_REF, BOOL], [])
        assert counts.reference_parameters == 0
        assert counts.reference_return_values == 1
        assert counts.functions_with_reference_signatures == 1

    def test_parameter_and_return_references_count_function_once(self):
        counts = Counts()
        count_function_signature(counts, [REF], [REF], [])
        assert counts.functions_with_reference_signatures == 1

    def test_non_reference_signature(self):
        counts = Counts()
        count_function_signature(counts, [U64, BOOL], [U64], [])
        assert counts.functions_with_reference_signatures == 0

    def test_multiple_acquires(self):
        counts = Counts()
        count_function_signature(counts, [], [], [0, 3])
        assert counts.acquires_annotations == 2
        assert counts.functions_with_acquires == 1

    def test_no_acquires(self):
        counts = Counts()
        count_function_signature(counts, [REF], [], [])
        assert counts.acquires_annotations == 0
        assert counts.functions_with_acquires == 0
