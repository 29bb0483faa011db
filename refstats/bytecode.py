"""Compiled unit model — modules, scripts, signatures and bytecode."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from . import constants


class Opcode(str, Enum):
    # Stack / control flow
    POP = "Pop"
    RET = "Ret"
    BR_TRUE = "BrTrue"
    BR_FALSE = "BrFalse"
    BRANCH = "Branch"
    ABORT = "Abort"
    NOP = "Nop"
    # Constants and casts
    LD_U8 = "LdU8"
    LD_U64 = "LdU64"
    LD_U128 = "LdU128"
    LD_CONST = "LdConst"
    LD_TRUE = "LdTrue"
    LD_FALSE = "LdFalse"
    CAST_U8 = "CastU8"
    CAST_U64 = "CastU64"
    CAST_U128 = "CastU128"
    # Locals
    COPY_LOC = "CopyLoc"
    MOVE_LOC = "MoveLoc"
    ST_LOC = "StLoc"
    # Calls and structs
    CALL = "Call"
    CALL_GENERIC = "CallGeneric"
    PACK = "Pack"
    PACK_GENERIC = "PackGeneric"
    UNPACK = "Unpack"
    UNPACK_GENERIC = "UnpackGeneric"
    # References
    READ_REF = "ReadRef"
    WRITE_REF = "WriteRef"
    FREEZE_REF = "FreezeRef"
    MUT_BORROW_LOC = "MutBorrowLoc"
    IMM_BORROW_LOC = "ImmBorrowLoc"
    MUT_BORROW_FIELD = "MutBorrowField"
    MUT_BORROW_FIELD_GENERIC = "MutBorrowFieldGeneric"
    IMM_BORROW_FIELD = "ImmBorrowField"
    IMM_BORROW_FIELD_GENERIC = "ImmBorrowFieldGeneric"
    MUT_BORROW_GLOBAL = "MutBorrowGlobal"
    MUT_BORROW_GLOBAL_GENERIC = "MutBorrowGlobalGeneric"
    IMM_BORROW_GLOBAL = "ImmBorrowGlobal"
    IMM_BORROW_GLOBAL_GENERIC = "ImmBorrowGlobalGeneric"
    # Arithmetic / logic
    ADD = "Add"
    SUB = "Sub"
    MUL = "Mul"
    MOD = "Mod"
    DIV = "Div"
    BIT_OR = "BitOr"
    BIT_AND = "BitAnd"
    XOR = "Xor"
    SHL = "Shl"
    SHR = "Shr"
    OR = "Or"
    AND = "And"
    NOT = "Not"
    EQ = "Eq"
    NEQ = "Neq"
    LT = "Lt"
    GT = "Gt"
    LE = "Le"
    GE = "Ge"
    # Global storage
    GET_TXN_SENDER_ADDRESS = "GetTxnSenderAddress"
    EXISTS = "Exists"
    EXISTS_GENERIC = "ExistsGeneric"
    MOVE_FROM = "MoveFrom"
    MOVE_FROM_GENERIC = "MoveFromGeneric"
    MOVE_TO_SENDER = "MoveToSender"
    MOVE_TO_SENDER_GENERIC = "MoveToSenderGeneric"


class Bytecode(BaseModel):
    opcode: Opcode
    operands: list[Any] = []


class TokenKind(str, Enum):
    BOOL = "Bool"
    U8 = "U8"
    U64 = "U64"
    U128 = "U128"
    ADDRESS = "Address"
    SIGNER = "Signer"
    VECTOR = "Vector"
    STRUCT = "Struct"
    STRUCT_INSTANTIATION = "StructInstantiation"
    REFERENCE = "Reference"
    MUTABLE_REFERENCE = "MutableReference"
    TYPE_PARAMETER = "TypeParameter"


REFERENCE_KINDS: frozenset[TokenKind] = frozenset(
    {TokenKind.REFERENCE, TokenKind.MUTABLE_REFERENCE}
)


class SignatureToken(BaseModel):
    """A single type in a signature.

    ``inner`` is set for Vector, Reference and MutableReference. ``index``
    holds the struct definition index for Struct / StructInstantiation and
    the position for TypeParameter.
    """

    kind: TokenKind
    inner: SignatureToken | None = None
    index: int | None = None
    type_arguments: list[SignatureToken] = []

    def is_reference(self) -> bool:
        return self.kind in REFERENCE_KINDS

    def __str__(self) -> str:
        if self.kind == TokenKind.REFERENCE:
            return f"&{self.inner}"
        if self.kind == TokenKind.MUTABLE_REFERENCE:
            return f"&mut {self.inner}"
        if self.kind == TokenKind.VECTOR:
            return f"vector<{self.inner}>"
        if self.kind == TokenKind.TYPE_PARAMETER:
            return f"T{self.index}"
        if self.kind == TokenKind.STRUCT:
            return f"S{self.index}"
        if self.kind == TokenKind.STRUCT_INSTANTIATION:
            args = ", ".join(str(t) for t in self.type_arguments)
            return f"S{self.index}<{args}>"
        return self.kind.value.lower()


def format_signature(tokens: list[SignatureToken]) -> str:
    return "(" + ", ".join(str(t) for t in tokens) + ")"


class FunctionHandle(BaseModel):
    name: str
    parameters: int  # signature pool index
    returns: int  # signature pool index


class CodeUnit(BaseModel):
    code: list[Bytecode] = []


class FunctionDefinition(BaseModel):
    function: int  # function handle index
    acquires_global_resources: list[int] = []  # struct definition indices
    code: CodeUnit | None = None  # None for native functions


class StructDefinition(BaseModel):
    name: str


class CompiledModule(BaseModel):
    kind: Literal["module"] = constants.UNIT_KIND_MODULE
    name: str
    signatures: list[list[SignatureToken]] = []
    function_handles: list[FunctionHandle] = []
    function_defs: list[FunctionDefinition] = []
    struct_defs: list[StructDefinition] = []

    def handle_of(self, fdef: FunctionDefinition) -> FunctionHandle:
        return self.function_handles[fdef.function]

    def parameters_of(self, fdef: FunctionDefinition) -> list[SignatureToken]:
        return self.signatures[self.handle_of(fdef).parameters]

    def returns_of(self, fdef: FunctionDefinition) -> list[SignatureToken]:
        return self.signatures[self.handle_of(fdef).returns]


class CompiledScript(BaseModel):
    kind: Literal["script"] = constants.UNIT_KIND_SCRIPT
    name: str = constants.MAIN_SCRIPT_NAME
    signatures: list[list[SignatureToken]] = []
    parameters: int = 0  # signature pool index
    code: CodeUnit

    def parameter_types(self) -> list[SignatureToken]:
        return self.signatures[self.parameters]


CompiledUnit = Annotated[
    Union[CompiledModule, CompiledScript], Field(discriminator="kind")
]

_UNIT_ADAPTER: TypeAdapter = TypeAdapter(CompiledUnit)
_UNIT_LIST_ADAPTER: TypeAdapter = TypeAdapter(list[CompiledUnit])


def parse_units(text: str) -> list[CompiledUnit]:
    """Parse serialized compiler output into compiled units.

    Accepts either a single unit object or a JSON array of units.

    Raises:
        pydantic.ValidationError: If the text is not valid unit JSON.
    """
    if text.lstrip().startswith("["):
        return _UNIT_LIST_ADAPTER.validate_json(text)
    return [_UNIT_ADAPTER.validate_json(text)]
