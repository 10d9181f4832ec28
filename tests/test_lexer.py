import pytest

from toyc.lexer import Lexer, Token, TokenType, tokenize


def types(source):
    return [t.type for t in tokenize(source)]


def test_keywords_and_identifiers():
    toks = tokenize("int void if else while return break continue integer _x1")
    assert [t.type for t in toks] == [
        TokenType.INT,
        TokenType.VOID,
        TokenType.IF,
        TokenType.ELSE,
        TokenType.WHILE,
        TokenType.RETURN,
        TokenType.BREAK,
        TokenType.CONTINUE,
        TokenType.ID,
        TokenType.ID,
        TokenType.END,
    ]
    assert toks[8].lexeme == "integer"
    assert toks[9].lexeme == "_x1"


def test_operators_round_trip():
    src = "== != <= >= && || = < > ! + - * / % ( ) { } ; ,"
    toks = tokenize(src)
    assert " ".join(t.lexeme for t in toks[:-1]) == src
    assert [t.type for t in toks[:-1]] == [
        TokenType.EQ,
        TokenType.NE,
        TokenType.LE,
        TokenType.GE,
        TokenType.AND,
        TokenType.OR,
        TokenType.ASSIGN,
        TokenType.LT,
        TokenType.GT,
        TokenType.NOT,
        TokenType.PLUS,
        TokenType.MINUS,
        TokenType.TIMES,
        TokenType.DIV,
        TokenType.MOD,
        TokenType.LPAREN,
        TokenType.RPAREN,
        TokenType.LBRACE,
        TokenType.RBRACE,
        TokenType.SEMI,
        TokenType.COMMA,
    ]


def test_number_followed_by_identifier():
    toks = tokenize("123abc")
    assert [(t.type, t.lexeme) for t in toks[:-1]] == [
        (TokenType.NUMBER, "123"),
        (TokenType.ID, "abc"),
    ]


@pytest.mark.parametrize("src", ["&", "|", "@", "$"])
def test_unknown_characters(src):
    toks = tokenize(src)
    assert toks[0].type is TokenType.UNKNOWN
    assert toks[0].lexeme == src
    assert toks[1].type is TokenType.END


def test_single_ampersand_then_identifier():
    assert types("a & b") == [
        TokenType.ID,
        TokenType.UNKNOWN,
        TokenType.ID,
        TokenType.END,
    ]


def test_line_comment_skipped():
    toks = tokenize("a // b c d\nc")
    assert [t.lexeme for t in toks[:-1]] == ["a", "c"]
    assert toks[1].line > toks[0].line


def test_division_not_comment():
    assert types("a / b") == [TokenType.ID, TokenType.DIV, TokenType.ID, TokenType.END]


def test_block_comments_skipped():
    assert types("int/*c*/x") == [TokenType.INT, TokenType.ID, TokenType.END]
    assert types("/**/x") == [TokenType.ID, TokenType.END]


def test_block_comment_counts_lines():
    toks = tokenize("a /* one\ntwo\n */ b")
    assert toks[1].line == toks[0].line + 2


def test_unclosed_block_comment_ends_input():
    toks = tokenize("x /* never closed")
    assert [t.type for t in toks] == [TokenType.ID, TokenType.END]


def test_line_numbers():
    assert [t.line for t in tokenize("a\nb\n\nc")[:-1]] == [1, 2, 4]


def test_end_is_repeated():
    lexer = Lexer("x")
    assert lexer.next_token().type is TokenType.ID
    first = lexer.next_token()
    second = lexer.next_token()
    assert first.type is TokenType.END
    assert second.type is TokenType.END
    assert first.lexeme == ""


def test_iteration_stops_after_end():
    toks = list(Lexer("int main() { return 0; }"))
    assert toks[-1].type is TokenType.END
    assert sum(t.type is TokenType.END for t in toks) == 1
    assert toks == tokenize("int main() { return 0; }")


def test_empty_source():
    assert tokenize("") == [Token(TokenType.END, "", 1)]


def test_tricky_comments_from_sample():
    src = (
        "int/*Multi-line comment with /*\n"
        "   * and some tricky symbols: (){};\n"
        "   // Comment inside multi-line\n"
        "   */factorial(int/*comment*/n\n"
        "    // Parameter declaration with comment\n"
        "/*Another comment*/\n"
        "   ){ return/*-*/\n"
        "      z/***\n*\ndivision operator*//factorial(4)/*}\n    * //\n    */;\n}"
    )
    toks = tokenize(src)
    assert all(t.type is not TokenType.UNKNOWN for t in toks)
    lexemes = [t.lexeme for t in toks[:-1]]
    assert lexemes[:6] == ["int", "factorial", "(", "int", "n", ")"]
    assert lexemes[-7:] == ["/", "factorial", "(", "4", ")", ";", "}"]
    lines = [t.line for t in toks]
    assert lines == sorted(lines)