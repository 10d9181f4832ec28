"""Lowering of ToyC syntax trees into the in-memory IR."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Iterable, Iterator, Optional

from toyc.ast import (
    AssignStmt,
    BinaryExpr,
    BlockStmt,
    BreakStmt,
    CallExpr,
    ContinueStmt,
    DeclStmt,
    FuncDef,
    IdentifierExpr,
    IfStmt,
    Node,
    NumberExpr,
    ReturnStmt,
    UnaryExpr,
    WhileStmt,
)
from toyc.ir import (
    BasicBlock,
    CmpPred,
    Function,
    Instruction,
    IRParam,
    Module,
    Opcode,
    Operand,
    OperandKind,
)

_ARITH = {
    "+": Opcode.ADD,
    "-": Opcode.SUB,
    "*": Opcode.MUL,
    "/": Opcode.SDIV,
    "%": Opcode.SREM,
}

_COMPARE = {
    "==": CmpPred.EQ,
    "!=": CmpPred.NE,
    "<": CmpPred.SLT,
    ">": CmpPred.SGT,
    "<=": CmpPred.SLE,
    ">=": CmpPred.SGE,
}


class IRBuilder:
    """Builds IR functions from function definitions, one alloca per variable."""

    def __init__(self) -> None:
        self._vreg_counter = 0
        self._label_counter = 0
        self._scopes: list[dict[str, Operand]] = []
        self._loaded: dict[str, Operand] = {}
        self._break_labels: list[str] = []
        self._continue_labels: list[str] = []
        self._module: Optional[Module] = None
        self._func: Optional[Function] = None
        self._block: Optional[BasicBlock] = None
        self._has_return = False
        self._scopes.append({})

    # -- helpers -----------------------------------------------------------

    def _new_vreg(self) -> Operand:
        self._vreg_counter += 1
        return Operand.vreg(self._vreg_counter)

    def _new_label(self, base: str) -> str:
        return f"{base}_{self._label_counter}"

    def _create_block(self, name: str) -> BasicBlock:
        block = BasicBlock(id=len(self._func.blocks), name=name)
        self._func.block_map[name] = block
        self._func.blocks.append(block)
        return block

    def _start_block(self, name: str) -> BasicBlock:
        self._block = self._create_block(name)
        return self._block

    def _emit(self, inst: Instruction) -> None:
        inst.block_id = self._block.id
        self._block.insts.append(inst)

    @contextmanager
    def _scope(self) -> Iterator[None]:
        self._scopes.append({})
        try:
            yield
        finally:
            self._scopes.pop()

    def _add_variable(self, name: str, slot: Operand) -> None:
        if self._scopes:
            self._scopes[-1][name] = slot

    def _find_variable(self, name: str) -> Optional[Operand]:
        for scope in reversed(self._scopes):
            if name in scope:
                return scope[name]
        return None

    # -- module and functions ----------------------------------------------

    def build_module(self, funcs: Iterable[FuncDef]) -> Module:
        """Lower every function definition into a fresh module."""
        self._module = Module()
        for func_def in funcs:
            self.build_function(func_def)
        return self._module

    def build_function(self, func_def: FuncDef) -> Function:
        """Lower one function definition and append it to the current module."""
        if self._module is None:
            self._module = Module()
        self._label_counter = 0
        self._vreg_counter = len(func_def.params)
        self._scopes = [{}]
        self._loaded.clear()
        self._break_labels.clear()
        self._continue_labels.clear()
        self._has_return = False

        func = Function(name=func_def.name, return_type=func_def.ret_type)
        self._func = func
        for index, _ in enumerate(func_def.params):
            func.params.append(IRParam(str(index), "i32"))
            func.param_vregs.append(index)

        self._start_block("entry")

        if func_def.name == "main":
            ret_slot = self._new_vreg()
            self._add_variable(f"{func_def.name}_ret", ret_slot)
            self._emit(Instruction.alloca(ret_slot, "i32"))
            self._emit(Instruction.store("i32", Operand.imm(0), ret_slot))

        for index, param in enumerate(func_def.params):
            slot = self._new_vreg()
            self._emit(Instruction.alloca(slot, "i32"))
            self._emit(Instruction.store("i32", Operand.vreg(index), slot))
            self._add_variable(str(index), slot)
            self._add_variable(param.name, slot)

        self._build_block(func_def.body)

        if not self._has_return:
            if func_def.ret_type == "int":
                self._emit(Instruction.ret("i32", Operand.imm(0)))
            else:
                self._emit(Instruction.ret_void())

        func.max_vreg_id = self._vreg_counter
        self._module.functions.append(func)
        return func

    # -- statements ----------------------------------------------------------

    def _build_block(self, block: BlockStmt) -> None:
        with self._scope():
            for stmt in block.stmts:
                self._build_stmt(stmt)

    def _build_stmt(self, stmt: Optional[Node]) -> None:
        match stmt:
            case None:
                return
            case AssignStmt():
                self._build_assign(stmt)
            case DeclStmt():
                self._build_decl(stmt)
            case IfStmt():
                self._build_if(stmt)
            case WhileStmt():
                self._build_while(stmt)
            case ReturnStmt():
                self._build_return(stmt)
            case BreakStmt():
                if self._break_labels:
                    self._emit(Instruction.br(Operand.label(self._break_labels[-1])))
            case ContinueStmt():
                if self._continue_labels:
                    self._emit(Instruction.br(Operand.label(self._continue_labels[-1])))
            case BlockStmt():
                self._build_block(stmt)
            case _:
                self._build_expr(stmt)

    def _build_assign(self, stmt: AssignStmt) -> None:
        value = self._build_expr(stmt.expr)
        slot = self._find_variable(stmt.name)
        if slot is not None:
            self._emit(Instruction.store("i32", value, slot))
            self._loaded.pop(stmt.name, None)

    def _build_decl(self, stmt: DeclStmt) -> None:
        value = self._build_expr(stmt.expr)
        slot = self._new_vreg()
        self._emit(Instruction.alloca(slot, "i32"))
        self._add_variable(stmt.name, slot)
        self._emit(Instruction.store("i32", value, slot))
        self._loaded.pop(stmt.name, None)

    def _build_if(self, stmt: IfStmt) -> None:
        self._loaded.clear()
        cond = self._build_expr(stmt.cond)

        then_name = self._new_label("then")
        else_name = self._new_label("else")
        end_name = self._new_label("endif")
        self._label_counter += 1

        self._emit(Instruction.cond_br(cond, Operand.label(then_name), Operand.label(else_name)))

        self._start_block(then_name)
        self._loaded.clear()
        self._build_stmt(stmt.then_stmt)
        self._emit(Instruction.br(Operand.label(end_name)))

        self._start_block(else_name)
        self._loaded.clear()
        self._build_stmt(stmt.else_stmt)
        self._emit(Instruction.br(Operand.label(end_name)))

        self._start_block(end_name)
        self._loaded.clear()

    def _build_while(self, stmt: WhileStmt) -> None:
        cond_name = self._new_label("while_cond")
        body_name = self._new_label("while_body")
        end_name = self._new_label("while_end")
        self._label_counter += 1

        self._break_labels.append(end_name)
        self._continue_labels.append(cond_name)

        self._emit(Instruction.br(Operand.label(cond_name)))

        self._start_block(cond_name)
        self._loaded.clear()
        cond = self._build_expr(stmt.cond)
        self._emit(Instruction.cond_br(cond, Operand.label(body_name), Operand.label(end_name)))

        self._start_block(body_name)
        self._loaded.clear()
        self._build_stmt(stmt.body)
        self._emit(Instruction.br(Operand.label(cond_name)))

        self._start_block(end_name)

        self._break_labels.pop()
        self._continue_labels.pop()

    def _build_return(self, stmt: ReturnStmt) -> None:
        if stmt.expr is not None:
            value = self._build_expr(stmt.expr)
            self._emit(Instruction.ret("i32", value))
        else:
            self._emit(Instruction.ret_void())
        self._has_return = True

    # -- expressions ---------------------------------------------------------

    def _build_expr(self, expr: Node) -> Operand:
        match expr:
            case NumberExpr(value=value):
                return Operand.imm(value)
            case IdentifierExpr(name=name):
                return self._build_identifier(name)
            case BinaryExpr(op=op, lhs=lhs, rhs=rhs):
                return self._build_binary(op, lhs, rhs)
            case UnaryExpr(op=op, expr=inner):
                return self._build_unary(op, inner)
            case CallExpr():
                return self._build_call(expr)
        return Operand.imm(0)

    def _build_identifier(self, name: str) -> Operand:
        slot = self._find_variable(name)
        if slot is not None:
            cached = self._loaded.get(name)
            if cached is not None:
                return cached
            temp = self._new_vreg()
            self._emit(Instruction.load(temp, "i32", slot))
            self._loaded[name] = temp
            return temp
        if name.isdigit():
            return Operand.vreg(int(name))
        print(f"Error: undefined variable '{name}'", file=sys.stderr)
        return Operand.imm(0)

    def _build_binary(self, op: str, lhs: Node, rhs: Node) -> Operand:
        if op in ("&&", "||"):
            return self._build_logical(op, lhs, rhs)
        if op in _COMPARE:
            lhs_op = self._build_expr(lhs)
            rhs_op = self._build_expr(rhs)
            result = self._new_vreg()
            self._emit(Instruction.icmp(_COMPARE[op], result, "i32", lhs_op, rhs_op))
            return result
        lhs_op = self._build_expr(lhs)
        rhs_op = self._build_expr(rhs)
        result = self._new_vreg()
        opcode = _ARITH.get(op, Opcode.SREM)
        self._emit(Instruction.binop(opcode, result, "i32", lhs_op, rhs_op))
        return result

    def _build_unary(self, op: str, inner: Node) -> Operand:
        if op == "-":
            if isinstance(inner, NumberExpr):
                return Operand.imm(-inner.value)
            value = self._build_expr(inner)
            result = self._new_vreg()
            self._emit(Instruction.binop(Opcode.SUB, result, "i32", Operand.imm(0), value))
            return result
        if op == "!":
            value = self._build_expr(inner)
            result = self._new_vreg()
            self._emit(Instruction.icmp(CmpPred.EQ, result, "i32", value, Operand.imm(0)))
            return result
        return self._build_expr(inner)

    def _build_logical(self, op: str, lhs: Node, rhs: Node) -> Operand:
        result_slot = self._new_vreg()
        self._emit(Instruction.alloca(result_slot, "i1", 1))

        lhs_op = self._build_expr(lhs)

        if op == "&&":
            rhs_name = self._new_label("land_rhs")
            short_name = self._new_label("land_false")
            end_name = self._new_label("land_end")
            short_value = False
            branch = Instruction.cond_br(lhs_op, Operand.label(rhs_name), Operand.label(short_name))
        else:
            short_name = self._new_label("lor_true")
            rhs_name = self._new_label("lor_rhs")
            end_name = self._new_label("lor_end")
            short_value = True
            branch = Instruction.cond_br(lhs_op, Operand.label(short_name), Operand.label(rhs_name))
        self._label_counter += 1

        self._emit(branch)

        self._start_block(short_name)
        self._emit(Instruction.store("i1", Operand.bool_lit(short_value), result_slot, 1))
        self._emit(Instruction.br(Operand.label(end_name)))

        self._start_block(rhs_name)
        rhs_op = self._build_expr(rhs)
        self._emit(Instruction.store("i1", rhs_op, result_slot, 1))
        self._emit(Instruction.br(Operand.label(end_name)))

        self._start_block(end_name)

        result = self._new_vreg()
        self._emit(Instruction.load(result, "i1", result_slot, 1))
        return result

    def _build_call(self, call: CallExpr) -> Operand:
        args = [self._build_expr(arg) for arg in call.args]
        result = self._new_vreg()
        self._emit(Instruction.call(result, "i32", call.callee, args))
        return result


def generate_llvm_ir(funcs: Iterable[FuncDef]) -> str:
    """Lower function definitions and return the module's IR text."""
    return str(IRBuilder().build_module(funcs))