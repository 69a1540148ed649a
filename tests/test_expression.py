import json

import pytest

from colmena.expression import (
    NixExpression,
    SerializedNixExpression,
    expression_text,
    nix_quote,
)


@pytest.mark.parametrize(
    "orig, quoted",
    [
        (r'["a", "b"]', r'"[\"a\", \"b\"]"'),
        (r'["\"a\"", "\"b\""]', r'"[\"\\\"a\\\"\", \"\\\"b\\\"\"]"'),
        (r"${dontExpandMe}", r'"\${dontExpandMe}"'),
        (r"\${dontExpandMe}", r'"\\\${dontExpandMe}"'),
    ],
)
def test_nix_quote(orig, quoted):
    assert nix_quote(orig) == quoted


def test_serialized_expression_wraps_from_json():
    expr = SerializedNixExpression(["a", "b"])
    assert expr.expression() == r'(builtins.fromJSON "[\"a\",\"b\"]")'
    assert expr.requires_flakes() is False


def _unquote(literal):
    body = literal[1:-1]
    return body.replace("\\${", "${").replace('\\"', '"').replace("\\\\", "\\")


def test_serialized_expression_round_trip():
    data = {"nodes": ["alpha", "beta"], "weird": 'x"${y}\\z'}
    text = SerializedNixExpression(data).expression()
    prefix = "(builtins.fromJSON "
    assert text.startswith(prefix) and text.endswith(")")
    literal = text[len(prefix):-1]
    assert json.loads(_unquote(literal)) == data


def test_expression_text_accepts_string_and_expression():
    assert expression_text("1 + 1") == "1 + 1"
    expr = SerializedNixExpression(5)
    assert expression_text(expr) == expr.expression()


def test_base_expression_does_not_require_flakes():
    class Custom(NixExpression):
        def expression(self):
            return "{ }"

    assert Custom().requires_flakes() is False
    assert expression_text(Custom()) == "{ }"