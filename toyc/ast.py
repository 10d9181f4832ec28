"""Syntax tree nodes for ToyC programs and their indented text dump."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

_INDENT = "  "


class Node(ABC):
    """Base class of every syntax tree node."""

    @abstractmethod
    def _lines(self, level: int) -> Iterator[str]:
        """Yield the node's dump lines, each ending with a newline."""

    def format(self, level: int = 0) -> str:
        """Return the indented dump of this node at the given depth."""
        return "".join(self._lines(level))

    def __str__(self) -> str:
        return self.format(0)


def _line(level: int, text: str) -> str:
    return f"{_INDENT * level}{text}\n"


@dataclass
class NumberExpr(Node):
    value: int

    def _lines(self, level):
        yield _line(level, f"Number({self.value})")


@dataclass
class IdentifierExpr(Node):
    name: str

    def _lines(self, level):
        yield _line(level, f"Identifier({self.name})")


@dataclass
class BinaryExpr(Node):
    op: str
    lhs: Node
    rhs: Node

    def _lines(self, level):
        yield _line(level, f"Binary({self.op})")
        yield from self.lhs._lines(level + 1)
        yield from self.rhs._lines(level + 1)


@dataclass
class UnaryExpr(Node):
    op: str
    expr: Node

    def _lines(self, level):
        yield _line(level, f"Unary({self.op})")
        yield from self.expr._lines(level + 1)


@dataclass
class CallExpr(Node):
    callee: str
    args: list[Node] = field(default_factory=list)

    def _lines(self, level):
        yield _line(level, f"Call({self.callee})")
        for arg in self.args:
            yield from arg._lines(level + 1)


@dataclass
class AssignStmt(Node):
    name: str
    expr: Node

    def _lines(self, level):
        yield _line(level, f"Assign({self.name})")
        yield from self.expr._lines(level + 1)


@dataclass
class DeclStmt(Node):
    name: str
    expr: Node

    def _lines(self, level):
        yield _line(level, f"Decl({self.name})")
        yield from self.expr._lines(level + 1)


@dataclass
class IfStmt(Node):
    cond: Node
    then_stmt: Optional[Node]
    else_stmt: Optional[Node] = None

    def _lines(self, level):
        yield _line(level, "If")
        yield from self.cond._lines(level + 1)
        if self.then_stmt is not None:
            yield from self.then_stmt._lines(level + 1)
        if self.else_stmt is not None:
            yield _line(level, "Else")
            yield from self.else_stmt._lines(level + 1)


@dataclass
class WhileStmt(Node):
    cond: Node
    body: Optional[Node]

    def _lines(self, level):
        yield _line(level, "While")
        yield from self.cond._lines(level + 1)
        if self.body is not None:
            yield from self.body._lines(level + 1)


@dataclass
class BreakStmt(Node):
    def _lines(self, level):
        yield _line(level, "Break")


@dataclass
class ContinueStmt(Node):
    def _lines(self, level):
        yield _line(level, "Continue")


@dataclass
class ReturnStmt(Node):
    expr: Optional[Node] = None

    def _lines(self, level):
        yield _line(level, "Return")
        if self.expr is not None:
            yield from self.expr._lines(level + 1)


@dataclass
class BlockStmt(Node):
    """A braced statement list; ``None`` entries stand for empty statements."""

    stmts: list[Optional[Node]] = field(default_factory=list)

    def _lines(self, level):
        yield _line(level, "Block")
        for stmt in self.stmts:
            if stmt is not None:
                yield from stmt._lines(level + 1)


@dataclass
class Param:
    """A function parameter."""

    name: str
    type: str = "int"


@dataclass
class FuncDef(Node):
    """A function definition; the dump lists parameters by position."""

    ret_type: str
    name: str
    params: list[Param]
    body: BlockStmt

    def _lines(self, level):
        indices = ", ".join(str(i) for i in range(len(self.params)))
        yield _line(level, f"Function {self.ret_type} {self.name}({indices})")
        yield from self.body._lines(level + 1)


def dump_ast(funcs: Iterable[FuncDef]) -> str:
    """Return the concatenated dumps of all function definitions."""
    return "".join(func.format(0) for func in funcs)