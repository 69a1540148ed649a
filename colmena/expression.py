"""Nix expressions and serialisation of data into them."""

from __future__ import annotations

import json
from typing import Any


class NixExpression:
    """A Nix expression to be evaluated."""

    def expression(self) -> str:
        raise NotImplementedError

    def requires_flakes(self) -> bool:
        """Whether evaluating this expression needs flakes."""
        return False


class SerializedNixExpression(NixExpression):
    """Arbitrary JSON-serialisable data embedded as a Nix expression."""

    def __init__(self, data: Any) -> None:
        encoded = json.dumps(data, separators=(",", ":"), ensure_ascii=False)
        self._quoted = nix_quote(encoded)

    def expression(self) -> str:
        return f"(builtins.fromJSON {self._quoted})"


def nix_quote(s: str) -> str:
    """Turn a string into a quoted Nix string literal."""
    inner = s.replace("\\", "\\\\").replace('"', '\\"').replace("${", "\\${")
    return f'"{inner}"'


def expression_text(expression: str | NixExpression) -> str:
    """Return the text of a plain string or a NixExpression."""
    if isinstance(expression, str):
        return expression
    return expression.expression()