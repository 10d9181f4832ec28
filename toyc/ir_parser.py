"""Reading LLVM-style IR text back into the in-memory IR."""

from __future__ import annotations

import re
from typing import Optional

from toyc.ir import (
    BasicBlock,
    Function,
    Instruction,
    IRParam,
    Module,
    Operand,
    string_to_arith_opcode,
    string_to_cmp_pred,
)

_TRIM_CHARS = " \t\r\n"
_DIGITS = "0123456789"
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1

_NAME_RE = re.compile(r"@(\w+)", re.ASCII)
_PARAM_RE = re.compile(r"%(\d+)", re.ASCII)
_RET_RE = re.compile(r"ret\s+(\w+)\s+(.+)", re.ASCII)
_BR_RE = re.compile(r"br\s+label\s+%(\S+)", re.ASCII)
_COND_BR_RE = re.compile(
    r"br\s+i1\s+(%\d+|true|false),\s*label\s+%(\S+),\s*label\s+%(\S+)", re.ASCII
)
_STORE_RE = re.compile(
    r"store\s+(\w+)\s+(%\d+|-?\d+|true|false),\s*ptr\s+(%\d+)(?:,\s*align\s+(\d+))?",
    re.ASCII,
)
_DEF_RE = re.compile(r"(%\d+)\s*=\s*(.*)", re.ASCII)
_ALLOCA_RE = re.compile(r"alloca\s+(\w+)(?:,\s*align\s+(\d+))?", re.ASCII)
_LOAD_RE = re.compile(r"load\s+(\w+),\s*ptr\s+(%\d+)(?:,\s*align\s+(\d+))?", re.ASCII)
_CALL_RE = re.compile(r"call\s+(\w+)\s+@(\w+)\((.*)\)", re.ASCII)
_CALL_ARG_RE = re.compile(r"(?:i32\s+(?:noundef\s+)?)(%\d+|-?\d+)", re.ASCII)
_ICMP_RE = re.compile(r"icmp\s+(\w+)\s+(\w+)\s+(%\d+|-?\d+),\s*(%\d+|-?\d+)", re.ASCII)
_ARITH_RE = re.compile(
    r"(add|sub|mul|sdiv|srem)\s+(?:nsw\s+)?(\w+)\s+(%\d+|-?\d+),\s*(%\d+|-?\d+)", re.ASCII
)
_LEADING_INT_RE = re.compile(r"[+-]?[0-9]+")


def _trim(s: str) -> str:
    return s.strip(_TRIM_CHARS)


def _is_number(s: str) -> bool:
    return bool(s) and all(c in _DIGITS for c in s)


def _align(text: Optional[str]) -> int:
    return int(text) if text is not None else 4


def parse_module(text: str) -> Module:
    """Parse IR text into a module holding every ``define``d function."""
    module = Module()
    def_line = ""
    body: list[str] = []
    in_func = False
    for line in text.splitlines():
        trimmed = _trim(line)
        if trimmed.startswith("define "):
            in_func = True
            def_line = trimmed
            body = []
            continue
        if not in_func:
            continue
        if trimmed == "}":
            module.functions.append(_parse_function_body(def_line, body))
            in_func = False
        else:
            body.append(line)
    return module


def parse_function(text: str, func_name: str = "") -> Optional[Function]:
    """Return the named function from IR text, the first one if no name is given."""
    functions = parse_module(text).functions
    if not functions:
        return None
    if not func_name:
        return functions[0]
    return next((f for f in functions if f.name == func_name), None)


def _parse_function_body(def_line: str, body: list[str]) -> Function:
    func = Function()

    match = _NAME_RE.search(def_line)
    if match:
        func.name = match.group(1)

    void_pos = def_line.find("void")
    at_pos = def_line.find("@")
    if at_pos == -1:
        at_pos = len(def_line)
    func.return_type = "void" if void_pos != -1 and void_pos < at_pos else "int"

    func.param_vregs = parse_parameters(def_line)
    func.params = [IRParam(str(v), "i32") for v in func.param_vregs]

    current = BasicBlock(id=0, name="entry")
    func.block_map["entry"] = current
    func.blocks.append(current)

    max_vreg = max(func.param_vregs, default=-1)

    for line in body:
        trimmed = _trim(line)
        if not trimmed or trimmed.startswith(";"):
            continue
        if trimmed.endswith(":"):
            label = _trim(trimmed[:-1])
            current = BasicBlock(id=len(func.blocks), name=label)
            func.block_map[label] = current
            func.blocks.append(current)
            continue
        inst = parse_instruction(trimmed)
        dest = inst.def_reg()
        if dest is not None:
            max_vreg = max(max_vreg, dest)
        max_vreg = max([max_vreg, *inst.use_regs()])
        inst.block_id = current.id
        current.insts.append(inst)

    func.max_vreg_id = max_vreg
    return func


def parse_parameters(def_line: str) -> list[int]:
    """Return the register numbers of the parameters in a ``define`` line."""
    left = def_line.find("(")
    right = def_line.find(")")
    if left == -1 or right == -1:
        return []
    inside = def_line[left + 1:right]
    return [int(m.group(1)) for m in _PARAM_RE.finditer(inside)]


def parse_instruction(line: str) -> Instruction:
    """Parse one instruction line; unrecognised lines become ``ret void``."""
    s = _trim(line)

    if s == "ret void":
        return Instruction.ret_void()

    if s.startswith("ret "):
        m = _RET_RE.fullmatch(s)
        if m:
            return Instruction.ret(m.group(1), parse_operand(_trim(m.group(2))))
        return Instruction.ret_void()

    if s.startswith("br label "):
        m = _BR_RE.fullmatch(s)
        if m:
            return Instruction.br(Operand.label(m.group(1)))

    if s.startswith("br i1 "):
        m = _COND_BR_RE.fullmatch(s)
        if m:
            return Instruction.cond_br(
                parse_operand(m.group(1)), Operand.label(m.group(2)), Operand.label(m.group(3))
            )

    if s.startswith("store "):
        m = _STORE_RE.fullmatch(s)
        if m:
            return Instruction.store(
                m.group(1), parse_operand(m.group(2)), parse_operand(m.group(3)), _align(m.group(4))
            )

    dm = _DEF_RE.fullmatch(s)
    if dm:
        instruction = _parse_definition(parse_operand(dm.group(1)), _trim(dm.group(2)))
        if instruction is not None:
            return instruction

    return Instruction.ret_void()


def _parse_definition(dest: Operand, rhs: str) -> Optional[Instruction]:
    if rhs.startswith("alloca "):
        m = _ALLOCA_RE.fullmatch(rhs)
        if m:
            return Instruction.alloca(dest, m.group(1), _align(m.group(2)))

    if rhs.startswith("load "):
        m = _LOAD_RE.fullmatch(rhs)
        if m:
            return Instruction.load(dest, m.group(1), parse_operand(m.group(2)), _align(m.group(3)))

    if rhs.startswith("call "):
        m = _CALL_RE.fullmatch(rhs)
        if m:
            args = [parse_operand(a.group(1)) for a in _CALL_ARG_RE.finditer(m.group(3))]
            return Instruction.call(dest, m.group(1), m.group(2), args)

    if rhs.startswith("icmp "):
        m = _ICMP_RE.fullmatch(rhs)
        if m:
            return Instruction.icmp(
                string_to_cmp_pred(m.group(1)),
                dest,
                m.group(2),
                parse_operand(m.group(3)),
                parse_operand(m.group(4)),
            )

    m = _ARITH_RE.fullmatch(rhs)
    if m:
        return Instruction.binop(
            string_to_arith_opcode(m.group(1)),
            dest,
            m.group(2),
            parse_operand(m.group(3)),
            parse_operand(m.group(4)),
        )
    return None


def parse_operand(text: str) -> Operand:
    """Parse ``%N`` (register), ``%name`` (label), an integer or ``true``/``false``."""
    s = _trim(text)
    if not s:
        return Operand.none()
    if s == "true":
        return Operand.bool_lit(True)
    if s == "false":
        return Operand.bool_lit(False)
    if s.startswith("%"):
        rest = s[1:]
        if _is_number(rest):
            return Operand.vreg(int(rest))
        return Operand.label(rest)
    m = _LEADING_INT_RE.match(s)
    if m:
        value = int(m.group(0))
        if _INT32_MIN <= value <= _INT32_MAX:
            return Operand.imm(value)
    return Operand.none()