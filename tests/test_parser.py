import pytest

from ghaflow.expr.parser import (
    ArrayDerefNode,
    BoolNode,
    CompareKind,
    CompareOpNode,
    ExprSyntaxError,
    FloatNode,
    FuncCallNode,
    IndexAccessNode,
    IntNode,
    LogicalKind,
    LogicalOpNode,
    NotOpNode,
    NullNode,
    ObjectDerefNode,
    StringNode,
    TokenKind,
    VariableNode,
    parse_expression,
    tokenize,
    walk,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("true", BoolNode(True)),
        ("false", BoolNode(False)),
        ("null", NullNode()),
        ("123", IntNode(123)),
        ("-9.7", FloatNode(-9.7)),
        ("0xff", IntNode(255)),
        ("-2.99e-2", FloatNode(-2.99e-2)),
        ("'foo'", StringNode("foo")),
        ("'it''s foo'", StringNode("it's foo")),
        ("-10", IntNode(-10)),
        ("0.0", FloatNode(0.0)),
    ],
)
def test_literals(text, expected):
    assert parse_expression(text) == expected


def test_int_literal_keeps_int_type():
    node = parse_expression("123")
    assert isinstance(node.value, int) and node.value == 123


def test_property_dereference():
    assert parse_expression("github.action") == ObjectDerefNode(
        VariableNode("github"), "action"
    )


def test_index_access_with_string():
    assert parse_expression("github['action']") == IndexAccessNode(
        VariableNode("github"), StringNode("action")
    )


def test_identifiers_may_contain_dashes():
    assert parse_expression("steps.step-id.outcome") == ObjectDerefNode(
        ObjectDerefNode(VariableNode("steps"), "step-id"), "outcome"
    )


def test_array_dereference_and_index():
    node = parse_expression("(github.event.commits.*.author.username)[0]")
    commits = ObjectDerefNode(
        ObjectDerefNode(VariableNode("github"), "event"), "commits"
    )
    expected = IndexAccessNode(
        ObjectDerefNode(
            ObjectDerefNode(ArrayDerefNode(commits), "author"), "username"
        ),
        IntNode(0),
    )
    assert node == expected


def test_bracket_star_is_array_dereference():
    assert parse_expression("steps[*]") == ArrayDerefNode(VariableNode("steps"))


def test_function_call_with_index():
    node = parse_expression("fromJSON('[0,1]')[1.1]")
    assert node == IndexAccessNode(
        FuncCallNode("fromJSON", (StringNode("[0,1]"),)), FloatNode(1.1)
    )


def test_function_call_without_arguments():
    assert parse_expression("success()") == FuncCallNode("success", ())


def test_not_operator():
    assert parse_expression("!true") == NotOpNode(BoolNode(True))


def test_compare_operator():
    assert parse_expression("1 < 2") == CompareOpNode(
        CompareKind.LESS, IntNode(1), IntNode(2)
    )


def test_not_binds_tighter_than_compare():
    assert parse_expression("!a == b") == CompareOpNode(
        CompareKind.EQ, NotOpNode(VariableNode("a")), VariableNode("b")
    )


def test_and_binds_tighter_than_or():
    node = parse_expression("true && false || true")
    assert node == LogicalOpNode(
        LogicalKind.OR,
        LogicalOpNode(LogicalKind.AND, BoolNode(True), BoolNode(False)),
        BoolNode(True),
    )


def test_compare_binds_tighter_than_and():
    node = parse_expression("1 == 2 && 3")
    assert node == LogicalOpNode(
        LogicalKind.AND,
        CompareOpNode(CompareKind.EQ, IntNode(1), IntNode(2)),
        IntNode(3),
    )


def test_grouping():
    node = parse_expression("(false || (false || true))")
    assert node == LogicalOpNode(
        LogicalKind.OR,
        BoolNode(False),
        LogicalOpNode(LogicalKind.OR, BoolNode(False), BoolNode(True)),
    )


def test_parsing_stops_at_closing_braces():
    node = parse_expression("contains('search', 'item') }} trailing ( text")
    assert node == FuncCallNode(
        "contains", (StringNode("search"), StringNode("item"))
    )


def test_braces_inside_strings_are_kept():
    node = parse_expression("format('echo {0} ${{Test}}', x)")
    assert node.args[0] == StringNode("echo {0} ${{Test}}")


def test_tokenize_kinds():
    kinds = [t.kind for t in tokenize("a.b[0] != 'x'")]
    assert kinds == [
        TokenKind.IDENT,
        TokenKind.DOT,
        TokenKind.IDENT,
        TokenKind.LBRACKET,
        TokenKind.INT,
        TokenKind.RBRACKET,
        TokenKind.NOT_EQ,
        TokenKind.STRING,
        TokenKind.END,
    ]


def test_tokenize_stops_at_end_marker():
    tokens = tokenize("1 }} 2")
    assert [t.kind for t in tokens] == [TokenKind.INT, TokenKind.END]
    assert tokens[1].offset == 2


@pytest.mark.parametrize(
    "text",
    ["", "'unterminated", "1 +", "foo(", "a.", "123abc", "(1", "a[1", "1 2", "}"],
)
def test_syntax_errors(text):
    with pytest.raises(ExprSyntaxError):
        parse_expression(text)


def test_syntax_error_is_value_error_with_offset():
    with pytest.raises(ValueError) as info:
        parse_expression("1 2")
    assert info.value.offset == 2


def test_walk_preorder():
    names = [
        type(n).__name__ for n in walk(parse_expression("contains(a.b, !c)"))
    ]
    assert names == [
        "FuncCallNode",
        "ObjectDerefNode",
        "VariableNode",
        "NotOpNode",
        "VariableNode",
    ]


def test_walk_single_node():
    node = parse_expression("'foo'")
    assert list(walk(node)) == [node]