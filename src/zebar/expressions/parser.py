"""Precedence-climbing parser for expression text.

Grammar (lowest to highest precedence):
    ternary         coalesce ('?' ternary ':' ternary)?
    coalesce        or ('??' or)*
    or              and ('||' and)*
    and             equality ('&&' equality)*
    equality        relational (('==' | '!=' | '===' | '!==') relational)*
    relational      additive (('<' | '<=' | '>' | '>=') additive)*
    additive        multiplicative (('+' | '-') multiplicative)*
    multiplicative  unary (('*' | '/' | '%') unary)*
    unary           ('!' | '-' | '+') unary | postfix
    postfix         primary ('.' NAME | '?.' NAME | '?.' '[' ternary ']'
                             | '[' ternary ']' | '(' args ')')*
    primary         NAME | NUMBER | STRING | true | false | null | undefined
                    | '(' ternary ')' | '[' items ']' | '{' entries '}'

Loop headers (``item of items``, ``item, i of items``) are parsed by
:meth:`ExpressionParser.parse_loop_header`.
"""

from __future__ import annotations

from zebar.environment.exceptions import ExpressionSyntaxError
from zebar.expressions.lexer import ExprToken, ExprTokenType, tokenize_expression
from zebar.nodes.expressions import (
    BinOp,
    BoolOp,
    Compare,
    CondExpr,
    Const,
    Dict,
    Expr,
    FuncCall,
    Getattr,
    Getitem,
    List,
    Name,
    NullCoalesce,
    UnaryOp,
)

_CONSTANTS: dict[str, bool | None] = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
}

_EQUALITY_OPS = frozenset({"==", "!=", "===", "!=="})
_RELATIONAL_OPS = frozenset({"<", "<=", ">", ">="})
_ADDITIVE_OPS = frozenset({"+", "-"})
_MULTIPLICATIVE_OPS = frozenset({"*", "/", "%"})
_UNARY_OPS = frozenset({"!", "-", "+"})

LOOP_KEYWORDS = frozenset({"of", "in"})


class ExpressionParser:
    """Parse one expression text into an expression tree.

    Example:
        >>> ExpressionParser("cpu.usage > 80").parse()
        Compare(start=10, op='>', left=Getattr(...), right=Const(...))
    """

    __slots__ = ("_pos", "_text", "_tokens")

    def __init__(self, text: str) -> None:
        self._text = text
        self._tokens = tokenize_expression(text)
        self._pos = 0

    # ─────────────────────────────────────────────────────────────────────
    # Token navigation
    # ─────────────────────────────────────────────────────────────────────

    @property
    def _current(self) -> ExprToken:
        return self._tokens[self._pos]

    def _peek(self, offset: int = 1) -> ExprToken:
        index = min(self._pos + offset, len(self._tokens) - 1)
        return self._tokens[index]

    def _advance(self) -> ExprToken:
        token = self._tokens[self._pos]
        if token.type is not ExprTokenType.EOF:
            self._pos += 1
        return token

    def _match(self, *operators: str) -> bool:
        token = self._current
        return token.type is ExprTokenType.OPERATOR and token.value in operators

    def _expect(self, operator: str) -> ExprToken:
        if not self._match(operator):
            raise self._error(f"Expected '{operator}'")
        return self._advance()

    def _error(self, message: str, token: ExprToken | None = None) -> ExpressionSyntaxError:
        token = token or self._current
        if token.type is ExprTokenType.EOF:
            message += " but reached end of expression"
        else:
            message += f", found {token.value!r}"
        return ExpressionSyntaxError(message, token.start, self._text)

    # ─────────────────────────────────────────────────────────────────────
    # Entry points
    # ─────────────────────────────────────────────────────────────────────

    def parse(self) -> Expr:
        """Parse the whole text as a single expression."""
        expr = self._parse_ternary()
        if self._current.type is not ExprTokenType.EOF:
            raise self._error("Unexpected token")
        return expr

    def parse_loop_header(self) -> tuple[tuple[str, ...], Expr]:
        """Parse ``target of iterable`` or ``target, index of iterable``.

        ``in`` is accepted in place of ``of``.
        """
        targets = [self._expect_name("Expected loop variable")]
        if self._match(","):
            self._advance()
            targets.append(self._expect_name("Expected index variable"))

        keyword = self._current
        if keyword.type is not ExprTokenType.NAME or keyword.value not in LOOP_KEYWORDS:
            raise self._error("Expected 'of' after loop variable")
        self._advance()

        iterable = self.parse()
        return tuple(targets), iterable

    def _expect_name(self, message: str) -> str:
        token = self._current
        if token.type is not ExprTokenType.NAME or token.value in _CONSTANTS:
            raise self._error(message)
        self._advance()
        return str(token.value)

    # ─────────────────────────────────────────────────────────────────────
    # Operators, lowest precedence first
    # ─────────────────────────────────────────────────────────────────────

    def _parse_ternary(self) -> Expr:
        test = self._parse_coalesce()
        if not self._match("?"):
            return test
        self._advance()
        if_true = self._parse_ternary()
        self._expect(":")
        if_false = self._parse_ternary()
        return CondExpr(start=test.start, test=test, if_true=if_true, if_false=if_false)

    def _parse_coalesce(self) -> Expr:
        left = self._parse_or()
        while self._match("??"):
            self._advance()
            left = NullCoalesce(start=left.start, left=left, right=self._parse_or())
        return left

    def _parse_or(self) -> Expr:
        first = self._parse_and()
        values = [first]
        while self._match("||"):
            self._advance()
            values.append(self._parse_and())
        if len(values) == 1:
            return first
        return BoolOp(start=first.start, op="||", values=tuple(values))

    def _parse_and(self) -> Expr:
        first = self._parse_equality()
        values = [first]
        while self._match("&&"):
            self._advance()
            values.append(self._parse_equality())
        if len(values) == 1:
            return first
        return BoolOp(start=first.start, op="&&", values=tuple(values))

    def _parse_equality(self) -> Expr:
        left = self._parse_relational()
        while self._match(*_EQUALITY_OPS):
            op = str(self._advance().value)
            left = Compare(start=left.start, op=op, left=left, right=self._parse_relational())
        return left

    def _parse_relational(self) -> Expr:
        left = self._parse_additive()
        while self._match(*_RELATIONAL_OPS):
            op = str(self._advance().value)
            left = Compare(start=left.start, op=op, left=left, right=self._parse_additive())
        return left

    def _parse_additive(self) -> Expr:
        left = self._parse_multiplicative()
        while self._match(*_ADDITIVE_OPS):
            op = str(self._advance().value)
            left = BinOp(start=left.start, op=op, left=left, right=self._parse_multiplicative())
        return left

    def _parse_multiplicative(self) -> Expr:
        left = self._parse_unary()
        while self._match(*_MULTIPLICATIVE_OPS):
            op = str(self._advance().value)
            left = BinOp(start=left.start, op=op, left=left, right=self._parse_unary())
        return left

    def _parse_unary(self) -> Expr:
        if self._match(*_UNARY_OPS):
            token = self._advance()
            return UnaryOp(start=token.start, op=str(token.value), operand=self._parse_unary())
        return self._parse_postfix()

    # ─────────────────────────────────────────────────────────────────────
    # Postfix and primary
    # ─────────────────────────────────────────────────────────────────────

    def _parse_postfix(self) -> Expr:
        node = self._parse_primary()
        while True:
            if self._match("."):
                self._advance()
                node = Getattr(start=node.start, obj=node, attr=self._expect_member())
            elif self._match("?."):
                self._advance()
                if self._match("["):
                    self._advance()
                    key = self._parse_ternary()
                    self._expect("]")
                    node = Getitem(start=node.start, obj=node, key=key, optional=True)
                else:
                    node = Getattr(
                        start=node.start, obj=node, attr=self._expect_member(), optional=True
                    )
            elif self._match("["):
                self._advance()
                key = self._parse_ternary()
                self._expect("]")
                node = Getitem(start=node.start, obj=node, key=key)
            elif self._match("("):
                self._advance()
                args = self._parse_sequence(")")
                node = FuncCall(start=node.start, func=node, args=args)
            else:
                return node

    def _expect_member(self) -> str:
        token = self._current
        if token.type is not ExprTokenType.NAME:
            raise self._error("Expected property name")
        self._advance()
        return str(token.value)

    def _parse_sequence(self, closer: str) -> tuple[Expr, ...]:
        """Comma-separated expressions up to ``closer``; trailing comma allowed."""
        items: list[Expr] = []
        while not self._match(closer):
            items.append(self._parse_ternary())
            if not self._match(","):
                break
            self._advance()
        self._expect(closer)
        return tuple(items)

    def _parse_primary(self) -> Expr:
        token = self._current

        if token.type is ExprTokenType.NUMBER or token.type is ExprTokenType.STRING:
            self._advance()
            return Const(start=token.start, value=token.value)

        if token.type is ExprTokenType.NAME:
            self._advance()
            if token.value in _CONSTANTS:
                return Const(start=token.start, value=_CONSTANTS[str(token.value)])
            return Name(start=token.start, name=str(token.value))

        if self._match("("):
            self._advance()
            expr = self._parse_ternary()
            self._expect(")")
            return expr

        if self._match("["):
            self._advance()
            return List(start=token.start, items=self._parse_sequence("]"))

        if self._match("{"):
            self._advance()
            return self._parse_object(token)

        raise self._error("Expected expression")

    def _parse_object(self, opener: ExprToken) -> Dict:
        """Object literal entries after ``{``: ``key: value``, ``[expr]: value``
        or shorthand ``key``."""
        keys: list[Expr] = []
        values: list[Expr] = []
        while not self._match("}"):
            token = self._current
            if self._match("["):
                self._advance()
                key: Expr = self._parse_ternary()
                self._expect("]")
            elif token.type in (ExprTokenType.NAME, ExprTokenType.STRING, ExprTokenType.NUMBER):
                self._advance()
                key = Const(start=token.start, value=token.value)
            else:
                raise self._error("Expected property key")

            if self._match(":"):
                self._advance()
                value = self._parse_ternary()
            elif token.type is ExprTokenType.NAME:
                value = Name(start=token.start, name=str(token.value))
            else:
                raise self._error("Expected ':'")

            keys.append(key)
            values.append(value)
            if not self._match(","):
                break
            self._advance()
        self._expect("}")
        return Dict(start=opener.start, keys=tuple(keys), values=tuple(values))
