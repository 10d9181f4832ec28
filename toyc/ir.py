"""In-memory LLVM-style IR: operands, instructions, blocks, functions and modules."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional


class Opcode(enum.Enum):
    """Instruction kinds understood by the IR."""

    ALLOCA = enum.auto()
    LOAD = enum.auto()
    STORE = enum.auto()
    ADD = enum.auto()
    SUB = enum.auto()
    MUL = enum.auto()
    SDIV = enum.auto()
    SREM = enum.auto()
    ICMP = enum.auto()
    BR = enum.auto()
    COND_BR = enum.auto()
    RET = enum.auto()
    RET_VOID = enum.auto()
    CALL = enum.auto()


_OPCODE_TEXT = {
    Opcode.ALLOCA: "alloca",
    Opcode.LOAD: "load",
    Opcode.STORE: "store",
    Opcode.ADD: "add",
    Opcode.SUB: "sub",
    Opcode.MUL: "mul",
    Opcode.SDIV: "sdiv",
    Opcode.SREM: "srem",
    Opcode.ICMP: "icmp",
    Opcode.BR: "br",
    Opcode.COND_BR: "br",
    Opcode.RET: "ret",
    Opcode.RET_VOID: "ret",
    Opcode.CALL: "call",
}

_ARITH_OPCODES = {
    "add": Opcode.ADD,
    "sub": Opcode.SUB,
    "mul": Opcode.MUL,
    "sdiv": Opcode.SDIV,
    "srem": Opcode.SREM,
}

_TERMINATORS = frozenset({Opcode.BR, Opcode.COND_BR, Opcode.RET, Opcode.RET_VOID})

# Opcodes whose every register operand is read.
_READS_ALL_OPS = frozenset(
    {
        Opcode.STORE,
        Opcode.ADD,
        Opcode.SUB,
        Opcode.MUL,
        Opcode.SDIV,
        Opcode.SREM,
        Opcode.ICMP,
        Opcode.CALL,
    }
)

# Opcodes that read only their first operand.
_READS_FIRST_OP = frozenset({Opcode.LOAD, Opcode.COND_BR, Opcode.RET})


def opcode_to_string(op: Opcode) -> str:
    """Return the IR keyword of an opcode."""
    return _OPCODE_TEXT[op]


def string_to_arith_opcode(s: str) -> Opcode:
    """Return the arithmetic opcode named by ``s``; raise ValueError otherwise."""
    try:
        return _ARITH_OPCODES[s]
    except KeyError:
        raise ValueError(f"Unknown arithmetic opcode: {s}") from None


class CmpPred(enum.Enum):
    """Signed integer comparison predicates."""

    EQ = "eq"
    NE = "ne"
    SLT = "slt"
    SGT = "sgt"
    SLE = "sle"
    SGE = "sge"


def cmp_pred_to_string(pred: CmpPred) -> str:
    """Return the IR text of a comparison predicate."""
    return pred.value


def string_to_cmp_pred(s: str) -> CmpPred:
    """Parse a predicate name; unknown names fall back to ``eq``."""
    try:
        return CmpPred(s)
    except ValueError:
        return CmpPred.EQ


class OperandKind(enum.Enum):
    """What an operand denotes."""

    NONE = enum.auto()
    VREG = enum.auto()
    IMM = enum.auto()
    LABEL = enum.auto()
    BOOL_LIT = enum.auto()


@dataclass(frozen=True)
class Operand:
    """A virtual register, immediate, block label, boolean literal or nothing."""

    kind: OperandKind = OperandKind.NONE
    value: int = 0
    name: str = ""

    @staticmethod
    def vreg(reg_id: int) -> Operand:
        return Operand(OperandKind.VREG, reg_id)

    @staticmethod
    def imm(value: int) -> Operand:
        return Operand(OperandKind.IMM, value)

    @staticmethod
    def label(name: str) -> Operand:
        return Operand(OperandKind.LABEL, 0, name)

    @staticmethod
    def bool_lit(value: bool) -> Operand:
        return Operand(OperandKind.BOOL_LIT, int(bool(value)))

    @staticmethod
    def none() -> Operand:
        return Operand()

    def __str__(self) -> str:
        if self.kind is OperandKind.VREG:
            return f"%{self.value}"
        if self.kind is OperandKind.IMM:
            return str(self.value)
        if self.kind is OperandKind.LABEL:
            return f"%{self.name}"
        if self.kind is OperandKind.BOOL_LIT:
            return "true" if self.value else "false"
        return ""


@dataclass
class Instruction:
    """A single IR instruction."""

    opcode: Opcode
    dest: Operand = field(default_factory=Operand.none)
    type: str = ""
    ops: list[Operand] = field(default_factory=list)
    align: int = 4
    nsw: bool = False
    cmp_pred: CmpPred = CmpPred.EQ
    callee: str = ""
    block_id: int = -1

    @staticmethod
    def alloca(dest: Operand, type_: str, align: int = 4) -> Instruction:
        return Instruction(Opcode.ALLOCA, dest=dest, type=type_, align=align)

    @staticmethod
    def load(dest: Operand, type_: str, ptr: Operand, align: int = 4) -> Instruction:
        return Instruction(Opcode.LOAD, dest=dest, type=type_, ops=[ptr], align=align)

    @staticmethod
    def store(type_: str, value: Operand, ptr: Operand, align: int = 4) -> Instruction:
        return Instruction(Opcode.STORE, type=type_, ops=[value, ptr], align=align)

    @staticmethod
    def binop(op: Opcode, dest: Operand, type_: str, lhs: Operand, rhs: Operand) -> Instruction:
        return Instruction(op, dest=dest, type=type_, ops=[lhs, rhs], nsw=True)

    @staticmethod
    def icmp(pred: CmpPred, dest: Operand, type_: str, lhs: Operand, rhs: Operand) -> Instruction:
        return Instruction(Opcode.ICMP, dest=dest, type=type_, ops=[lhs, rhs], cmp_pred=pred)

    @staticmethod
    def br(target: Operand) -> Instruction:
        return Instruction(Opcode.BR, ops=[target])

    @staticmethod
    def cond_br(cond: Operand, true_target: Operand, false_target: Operand) -> Instruction:
        return Instruction(Opcode.COND_BR, ops=[cond, true_target, false_target])

    @staticmethod
    def ret(type_: str, value: Operand) -> Instruction:
        return Instruction(Opcode.RET, type=type_, ops=[value])

    @staticmethod
    def ret_void() -> Instruction:
        return Instruction(Opcode.RET_VOID, type="void")

    @staticmethod
    def call(dest: Operand, ret_type: str, callee: str, args) -> Instruction:
        return Instruction(Opcode.CALL, dest=dest, type=ret_type, callee=callee, ops=list(args))

    def def_reg(self) -> Optional[int]:
        """Return the register written by this instruction, or None."""
        return self.dest.value if self.dest.kind is OperandKind.VREG else None

    def use_regs(self) -> list[int]:
        """Return the registers read by this instruction, in operand order."""
        if self.opcode in _READS_ALL_OPS:
            candidates = self.ops
        elif self.opcode in _READS_FIRST_OP:
            candidates = self.ops[:1]
        else:
            candidates = []
        return [op.value for op in candidates if op.kind is OperandKind.VREG]

    def is_terminator(self) -> bool:
        return self.opcode in _TERMINATORS

    def is_call(self) -> bool:
        return self.opcode is Opcode.CALL

    def branch_targets(self) -> list[str]:
        """Return the labels this instruction may branch to."""
        if self.opcode is Opcode.BR:
            candidates = self.ops[:1]
        elif self.opcode is Opcode.COND_BR:
            candidates = self.ops[1:3]
        else:
            candidates = []
        return [op.name for op in candidates if op.kind is OperandKind.LABEL]

    def branch_cond_reg(self) -> Optional[int]:
        """Return the condition register of a conditional branch, or None."""
        if self.opcode is Opcode.COND_BR and self.ops and self.ops[0].kind is OperandKind.VREG:
            return self.ops[0].value
        return None

    def __str__(self) -> str:
        op = self.opcode
        ops = self.ops
        if op is Opcode.ALLOCA:
            return f"{self.dest} = alloca {self.type}, align {self.align}"
        if op is Opcode.LOAD:
            return f"{self.dest} = load {self.type}, ptr {ops[0]}, align {self.align}"
        if op is Opcode.STORE:
            return f"store {self.type} {ops[0]}, ptr {ops[1]}, align {self.align}"
        if op in _ARITH_OPCODES.values():
            nsw = " nsw" if self.nsw else ""
            return f"{self.dest} = {opcode_to_string(op)}{nsw} {self.type} {ops[0]}, {ops[1]}"
        if op is Opcode.ICMP:
            pred = cmp_pred_to_string(self.cmp_pred)
            return f"{self.dest} = icmp {pred} {self.type} {ops[0]}, {ops[1]}"
        if op is Opcode.BR:
            return f"br label {ops[0]}"
        if op is Opcode.COND_BR:
            return f"br i1 {ops[0]}, label {ops[1]}, label {ops[2]}"
        if op is Opcode.RET:
            return f"ret {self.type} {ops[0]}"
        if op is Opcode.RET_VOID:
            return "ret void"
        args = ", ".join(f"i32 noundef {arg}" for arg in ops)
        return f"{self.dest} = call {self.type} @{self.callee}({args})"


@dataclass(eq=False)
class BasicBlock:
    """A labelled straight-line run of instructions with CFG edges."""

    id: int
    name: str
    insts: list[Instruction] = field(default_factory=list)
    succs: list[BasicBlock] = field(default_factory=list, repr=False)
    preds: list[BasicBlock] = field(default_factory=list, repr=False)


@dataclass
class IRParam:
    """A function parameter as it appears in the IR signature."""

    name: str
    type: str = "i32"


@dataclass(eq=False)
class Function:
    """An IR function: signature, basic blocks and a label index."""

    name: str = ""
    return_type: str = "int"
    params: list[IRParam] = field(default_factory=list)
    param_vregs: list[int] = field(default_factory=list)
    blocks: list[BasicBlock] = field(default_factory=list)
    block_map: dict[str, BasicBlock] = field(default_factory=dict, repr=False)
    max_vreg_id: int = -1

    def entry_block(self) -> Optional[BasicBlock]:
        return self.blocks[0] if self.blocks else None

    def build_cfg(self) -> None:
        """Recompute successor and predecessor lists of every block."""
        for block in self.blocks:
            block.succs.clear()
            block.preds.clear()
        following = self.blocks[1:] + [None]
        for block, next_block in zip(self.blocks, following):
            if not block.insts:
                continue
            last = block.insts[-1]
            if last.is_terminator():
                targets = (self.block_map.get(name) for name in last.branch_targets())
                successors = [t for t in targets if t is not None]
            else:
                successors = [next_block] if next_block is not None else []
            for succ in successors:
                block.succs.append(succ)
                succ.preds.append(block)

    def __str__(self) -> str:
        ret_ty = "void" if self.return_type == "void" else "i32"
        params = ", ".join(f"i32 noundef %{p.name}" for p in self.params)
        parts = [f"define dso_local {ret_ty} @{self.name}({params}) #0 {{\n"]
        for position, block in enumerate(self.blocks):
            if position > 0:
                parts.append(f"\n{block.name}:\n")
            parts.extend(f"  {inst}\n" for inst in block.insts)
        parts.append("}\n")
        return "".join(parts)


@dataclass(eq=False)
class Module:
    """A translation unit: header metadata and a list of functions."""

    name: str = "toyc"
    source_file: str = "toyc"
    target_triple: str = "riscv32-unknown-elf"
    functions: list[Function] = field(default_factory=list)

    def __str__(self) -> str:
        header = (
            f"; ModuleID = '{self.name}'\n"
            f'source_filename = "{self.source_file}"\n'
            f'target triple = "{self.target_triple}"\n\n\n'
        )
        return header + "".join(f"{func}\n" for func in self.functions)