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
    NumberExpr,
    Param,
    ReturnStmt,
    UnaryExpr,
    WhileStmt,
    dump_ast,
)


def indent_of(line):
    return (len(line) - len(line.lstrip(" "))) // 2


def test_break_and_continue():
    assert BreakStmt().format(0) == "Break\n"
    assert ContinueStmt().format(0) == "Continue\n"


def test_binary_exact():
    node = BinaryExpr("+", NumberExpr(1), IdentifierExpr("x"))
    assert node.format(0) == "Binary(+)\n  Number(1)\n  Identifier(x)\n"


def test_level_shifts_every_line():
    node = UnaryExpr("-", CallExpr("f", [NumberExpr(3), IdentifierExpr("y")]))
    base = node.format(0).splitlines()
    shifted = node.format(2).splitlines()
    assert len(base) == len(shifted)
    for a, b in zip(base, shifted):
        assert b == "    " + a


def test_func_def_lists_param_indices():
    func = FuncDef("int", "add", [Param("a"), Param("b")], BlockStmt([]))
    lines = func.format(0).splitlines()
    assert lines[0] == "Function int add(0, 1)"
    assert lines[1].strip() == "Block"
    assert indent_of(lines[1]) == 1
    assert "a" not in lines[0].split("(")[1]


def test_block_skips_empty_statements():
    block = BlockStmt([None, BreakStmt(), None, ContinueStmt()])
    lines = block.format(0).splitlines()
    assert [line.strip() for line in lines] == ["Block", "Break", "Continue"]
    assert [indent_of(line) for line in lines] == [0, 1, 1]


def test_if_else_layout():
    node = IfStmt(
        BinaryExpr(">", IdentifierExpr("x"), NumberExpr(2)),
        AssignStmt("x", NumberExpr(1)),
        AssignStmt("x", NumberExpr(0)),
    )
    lines = node.format(1).splitlines()
    words = [line.strip() for line in lines]
    assert words[0] == "If"
    assert "Else" in words
    else_line = lines[words.index("Else")]
    assert indent_of(else_line) == indent_of(lines[0])
    assert words.count("Number(0)") == 1


def test_if_without_else():
    node = IfStmt(IdentifierExpr("c"), BreakStmt())
    words = [line.strip() for line in node.format(0).splitlines()]
    assert "Else" not in words
    assert words == ["If", "Identifier(c)", "Break"]


def test_while_and_decl():
    node = WhileStmt(
        IdentifierExpr("c"),
        BlockStmt([DeclStmt("y", NumberExpr(7)), ContinueStmt()]),
    )
    lines = node.format(0).splitlines()
    assert lines[0] == "While"
    depths = {line.strip(): indent_of(line) for line in lines}
    assert depths["Identifier(c)"] == 1
    assert depths["Block"] == 1
    assert depths["Decl(y)"] == 2
    assert depths["Number(7)"] == 3


def test_return_with_and_without_value():
    assert ReturnStmt().format(0) == "Return\n"
    lines = ReturnStmt(NumberExpr(0)).format(0).splitlines()
    assert [line.strip() for line in lines] == ["Return", "Number(0)"]
    assert indent_of(lines[1]) == 1


def test_dump_ast_concatenates_functions():
    f1 = FuncDef("void", "g", [], BlockStmt([ReturnStmt()]))
    f2 = FuncDef("int", "main", [], BlockStmt([ReturnStmt(NumberExpr(0))]))
    assert dump_ast([f1, f2]) == f1.format(0) + f2.format(0)
    assert dump_ast([]) == ""
    assert str(f1) == f1.format(0)


def test_children_are_one_level_deeper():
    tree = BlockStmt(
        [
            DeclStmt("x", BinaryExpr("*", NumberExpr(2), UnaryExpr("!", IdentifierExpr("z")))),
            IfStmt(IdentifierExpr("x"), BlockStmt([BreakStmt()]), BlockStmt([])),
        ]
    )
    depths = [indent_of(line) for line in tree.format(0).splitlines()]
    assert depths[0] == 0
    for prev, cur in zip(depths, depths[1:]):
        assert cur <= prev + 1