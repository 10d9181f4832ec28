# toyc

Building blocks of a compiler for ToyC, a small C-like language with `int`
and `void` functions, local variables with block scoping, `if`/`else`,
`while` with `break`/`continue`, short-circuit `&&`/`||`, and the usual
arithmetic and comparison operators.

The package has no runtime dependencies and consists of five modules:

- **`toyc.lexer`** – `Lexer` and `tokenize()` turn source text into
  `Token`s (`type`, `lexeme`, `line`). Whitespace, `//` comments and
  `/* ... */` comments are skipped, and line numbers are tracked. The token
  list from `tokenize()` always ends with a `TokenType.END` token;
  unrecognised characters come out as `TokenType.UNKNOWN`.
- **`toyc.ast`** – syntax tree nodes (`NumberExpr`, `IdentifierExpr`,
  `BinaryExpr`, `UnaryExpr`, `CallExpr`, `AssignStmt`, `DeclStmt`,
  `IfStmt`, `WhileStmt`, `BreakStmt`, `ContinueStmt`, `ReturnStmt`,
  `BlockStmt`, `FuncDef`, `Param`). Every node has `format(level)`, an
  indented text dump; `dump_ast(funcs)` dumps a list of function
  definitions. In a `BlockStmt`, `None` entries stand for empty statements
  and are left out of the dump; a function's parameters are dumped by
  position.
- **`toyc.ir`** – `Operand`, `Instruction`, `BasicBlock`, `Function` and
  `Module`. `str()` of any of them gives LLVM IR text. Instructions answer
  `def_reg()`, `use_regs()`, `is_terminator()`, `is_call()`,
  `branch_targets()` and `branch_cond_reg()`; `Function.build_cfg()` fills
  in each block's `succs` and `preds`.
- **`toyc.ir_builder`** – `IRBuilder` lowers function definitions to IR,
  giving every variable and parameter an `alloca` slot accessed with
  `load`/`store`, and turning `if`, `while` and `&&`/`||` into branches
  between basic blocks. Functions without an explicit `return` get
  `ret i32 0` (for `int`) or `ret void`. `generate_llvm_ir(funcs)` returns
  the text of the whole module. A reference to an undefined variable
  writes an error line to standard error and is treated as `0`.
- **`toyc.ir_parser`** – `parse_module()`, `parse_function()`,
  `parse_parameters()`, `parse_instruction()` and `parse_operand()` read
  the IR text back into the same structures, so generated IR round-trips.
  Lines it does not recognise become `ret void`.

## Installation

Install the package with pip from a checkout of this project. The `test`
extra pulls in pytest.

## Usage

Tokenizing source text:

```python
from toyc.lexer import tokenize

for token in tokenize("int main() { return 0; }"):
    print(token.type, token.lexeme, token.line)
```

Building a syntax tree by hand, dumping it, and lowering it to IR:

```python
from toyc.ast import BlockStmt, FuncDef, NumberExpr, ReturnStmt, dump_ast
from toyc.ir_builder import generate_llvm_ir

main = FuncDef(
    ret_type="int",
    name="main",
    params=[],
    body=BlockStmt([ReturnStmt(NumberExpr(0))]),
)

print(dump_ast([main]))
print(generate_llvm_ir([main]))
```

Working with the IR directly:

```python
from toyc.ir_builder import IRBuilder
from toyc.ir_parser import parse_module

module = IRBuilder().build_module([main])
text = str(module)

reparsed = parse_module(text)
for function in reparsed.functions:
    function.build_cfg()
    for block in function.blocks:
        print(block.name, [succ.name for succ in block.succs])
```

Single instructions and operands can be parsed too:

```python
from toyc.ir_parser import parse_instruction, parse_operand

inst = parse_instruction("%3 = add nsw i32 %1, 5")
print(inst.def_reg(), inst.use_regs())   # 3 [1]
print(parse_operand("%while_cond_0"))     # a label operand, prints %while_cond_0
```

## What the package does not do

- There is no parser from tokens to a syntax tree: trees are built from
  the `toyc.ast` classes directly.
- There is no register allocation and no machine-code or assembly output;
  the furthest stage is LLVM-style IR text.
- There is no command-line program; everything is used from Python.