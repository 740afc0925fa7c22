"""Route conditions — small boolean expressions evaluated at match time.

A condition is parsed once, at registration, into a tree of closures.
Matching then only calls functions; nothing is re-parsed per request.

The grammar is a safe subset of Python expressions::

    request.method in ("GET", "HEAD") and "firefox" in request.headers.get("user-agent", "").lower()
    params["id"] != "0" and matches(request.host, r"^api\\.")
    env.get("APP_ENV") == "dev" or request.client_ip == "127.0.0.1"

Names in scope: ``request`` (the RequestDescriptor), ``params`` (parameters
extracted so far), ``env`` (the request's environment mapping), and the
functions ``matches``, ``len``, ``int``, ``str``. Attributes starting with
``_`` are never reachable.
"""

import ast
import logging
import operator
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from signpost.errors import InvalidCondition

logger = logging.getLogger("signpost.routing")

Scope: TypeAlias = Mapping[str, Any]
Evaluator: TypeAlias = Callable[[Scope], Any]

SCOPE_NAMES = frozenset({"request", "params", "env"})

ALLOWED_METHODS = frozenset(
    {"get", "get_list", "startswith", "endswith", "lower", "upper", "strip", "keys", "values"}
)


def matches(value: object, pattern: str) -> bool:
    """True if *pattern* is found anywhere in ``str(value)``."""
    return re.search(pattern, str(value)) is not None


FUNCTIONS: dict[str, Callable[..., Any]] = {
    "matches": matches,
    "len": len,
    "int": int,
    "str": str,
}

_BINARY: dict[type[ast.operator], Callable[[Any, Any], Any]] = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.Div: operator.truediv,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_UNARY: dict[type[ast.unaryop], Callable[[Any], Any]] = {
    ast.Not: operator.not_,
    ast.USub: operator.neg,
    ast.UAdd: operator.pos,
}

_COMPARE: dict[type[ast.cmpop], Callable[[Any, Any], bool]] = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
    ast.In: lambda a, b: a in b,
    ast.NotIn: lambda a, b: a not in b,
    ast.Is: operator.is_,
    ast.IsNot: operator.is_not,
}

# Failures that make a condition false instead of failing the request.
EVALUATION_ERRORS = (LookupError, TypeError, ValueError, AttributeError, ArithmeticError, re.error)


@dataclass(frozen=True, slots=True)
class Condition:
    """A compiled condition. Call it with the request and current params."""

    source: str
    evaluate: Evaluator

    def __call__(self, request: Any, params: Mapping[str, Any]) -> bool:
        scope = {
            "request": request,
            "params": params,
            "env": getattr(request, "environment", {}),
        }
        try:
            return bool(self.evaluate(scope))
        except EVALUATION_ERRORS as exc:
            logger.debug("condition %r failed: %s", self.source, exc)
            return False


def compile_condition(source: str, route: str = "") -> Condition:
    """Parse *source* into a ``Condition``.

    Raises ``InvalidCondition`` for syntax errors and for any construct
    outside the grammar.
    """
    if not isinstance(source, str) or not source.strip():
        msg = "condition must be a non-empty string"
        raise InvalidCondition(route, msg)
    try:
        tree = ast.parse(source.strip(), mode="eval")
    except SyntaxError as exc:
        msg = f"condition {source!r} does not parse: {exc.msg}"
        raise InvalidCondition(route, msg) from exc
    return Condition(source=source, evaluate=_Compiler(source, route).visit(tree.body))


class _Compiler:
    """Turns an expression AST into nested closures."""

    __slots__ = ("route", "source")

    def __init__(self, source: str, route: str) -> None:
        self.source = source
        self.route = route

    def reject(self, node: ast.AST, reason: str = "") -> InvalidCondition:
        what = reason or f"{type(node).__name__} is not allowed"
        return InvalidCondition(self.route, f"condition {self.source!r}: {what}")

    def visit(self, node: ast.AST) -> Evaluator:
        method = getattr(self, f"visit_{type(node).__name__}", None)
        if method is None:
            raise self.reject(node)
        return method(node)

    def visit_Constant(self, node: ast.Constant) -> Evaluator:
        value = node.value
        if not isinstance(value, (str, int, float, bool, type(None))):
            raise self.reject(node, f"literal {value!r} is not allowed")
        return lambda scope: value

    def visit_Name(self, node: ast.Name) -> Evaluator:
        name = node.id
        if name in SCOPE_NAMES:
            return lambda scope: scope[name]
        if name in FUNCTIONS:
            func = FUNCTIONS[name]
            return lambda scope: func
        raise self.reject(node, f"unknown name {name!r}")

    def visit_Attribute(self, node: ast.Attribute) -> Evaluator:
        attr = node.attr
        if attr.startswith("_"):
            raise self.reject(node, f"private attribute {attr!r}")
        target = self.visit(node.value)
        return lambda scope: getattr(target(scope), attr)

    def visit_Subscript(self, node: ast.Subscript) -> Evaluator:
        if isinstance(node.slice, ast.Slice):
            raise self.reject(node, "slices are not allowed")
        target = self.visit(node.value)
        key = self.visit(node.slice)
        return lambda scope: target(scope)[key(scope)]

    def visit_Call(self, node: ast.Call) -> Evaluator:
        if node.keywords:
            raise self.reject(node, "keyword arguments are not allowed")
        if any(isinstance(arg, ast.Starred) for arg in node.args):
            raise self.reject(node, "star arguments are not allowed")
        func = node.func
        if isinstance(func, ast.Name):
            if func.id not in FUNCTIONS:
                raise self.reject(node, f"unknown function {func.id!r}")
        elif isinstance(func, ast.Attribute):
            if func.attr not in ALLOWED_METHODS:
                raise self.reject(node, f"method {func.attr!r} is not allowed")
        else:
            raise self.reject(node, "only named functions and methods can be called")
        callee = self.visit(func)
        args = [self.visit(arg) for arg in node.args]
        return lambda scope: callee(scope)(*(arg(scope) for arg in args))

    def visit_BoolOp(self, node: ast.BoolOp) -> Evaluator:
        values = [self.visit(v) for v in node.values]
        if isinstance(node.op, ast.And):

            def _and(scope: Scope) -> bool:
                return all(value(scope) for value in values)

            return _and

        def _or(scope: Scope) -> bool:
            return any(value(scope) for value in values)

        return _or

    def visit_UnaryOp(self, node: ast.UnaryOp) -> Evaluator:
        op = _UNARY.get(type(node.op))
        if op is None:
            raise self.reject(node.op)
        operand = self.visit(node.operand)
        return lambda scope: op(operand(scope))

    def visit_BinOp(self, node: ast.BinOp) -> Evaluator:
        op = _BINARY.get(type(node.op))
        if op is None:
            raise self.reject(node.op)
        left = self.visit(node.left)
        right = self.visit(node.right)
        return lambda scope: op(left(scope), right(scope))

    def visit_Compare(self, node: ast.Compare) -> Evaluator:
        ops = []
        for cmp in node.ops:
            fn = _COMPARE.get(type(cmp))
            if fn is None:
                raise self.reject(cmp)
            ops.append(fn)
        left = self.visit(node.left)
        comparators = [self.visit(c) for c in node.comparators]

        def _compare(scope: Scope) -> bool:
            current = left(scope)
            for fn, comparator in zip(ops, comparators, strict=True):
                value = comparator(scope)
                if not fn(current, value):
                    return False
                current = value
            return True

        return _compare

    def visit_IfExp(self, node: ast.IfExp) -> Evaluator:
        test = self.visit(node.test)
        body = self.visit(node.body)
        orelse = self.visit(node.orelse)
        return lambda scope: body(scope) if test(scope) else orelse(scope)

    def visit_Tuple(self, node: ast.Tuple) -> Evaluator:
        items = [self.visit(e) for e in node.elts]
        return lambda scope: tuple(item(scope) for item in items)

    def visit_List(self, node: ast.List) -> Evaluator:
        items = [self.visit(e) for e in node.elts]
        return lambda scope: [item(scope) for item in items]

    def visit_Set(self, node: ast.Set) -> Evaluator:
        items = [self.visit(e) for e in node.elts]
        return lambda scope: {item(scope) for item in items}
