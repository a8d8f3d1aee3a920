"""
Tests for the expression compiler.
"""

import pytest

from mtpl.errors import ExpressionRuntimeError, ExpressionSyntaxError
from mtpl.expressions.compiler import (
    CompiledExpression,
    ExpressionCompiler,
    compile_expression,
    is_falsy,
)
from mtpl.globals import TemplateGlobals
from mtpl.scope import RenderScope


class User:
    def __init__(self, name, manager=None):
        self.name = name
        self.manager = manager


class TestExpressionCompiler:

    def setup_method(self):
        self.compiler = ExpressionCompiler()

    def evaluate(self, source, context=None, globals_values=None):
        expr = self.compiler.compile(source)
        scope = RenderScope(context or {}, TemplateGlobals(globals_values))
        return expr(scope)

    def test_literals(self):
        """String, integer and float literals"""
        assert self.evaluate('"hello"') == "hello"
        assert self.evaluate("42") == 42
        assert self.evaluate("1e3") == 1000.0
        assert self.evaluate("(2.5 * 2)") == 5.0

    def test_string_without_escape_processing(self):
        assert self.evaluate('"a\\n"') == "a\\n"

    def test_name_resolved_at_call_time(self):
        """Names are resolved against the scope given to each call"""
        expr = compile_expression("count")
        globals_ = TemplateGlobals()

        assert expr(RenderScope({"count": 1}, globals_)) == 1
        assert expr(RenderScope({"count": 2}, globals_)) == 2

    def test_arithmetic(self):
        ctx = {"a": 7, "b": 2}
        test_cases = [
            ("(a + b)", 9),
            ("(a - b)", 5),
            ("(a * b)", 14),
            ("(a / b)", 3.5),
            ("-a", -7),
            ("((a + b) * 2)", 18),
        ]
        for source, expected in test_cases:
            assert self.evaluate(source, ctx) == expected, source

    def test_comparisons(self):
        ctx = {"a": 3, "b": 5}
        test_cases = [
            ("(a > b)", False),
            ("(a < b)", True),
            ("(a >= 3)", True),
            ("(b <= 4)", False),
            ("(a == 3)", True),
            ("(a != 3)", False),
            ('("x" == "x")', True),
        ]
        for source, expected in test_cases:
            assert self.evaluate(source, ctx) is expected, source

    def test_boolean_operators(self):
        ctx = {"t": True, "f": False}
        assert self.evaluate("(t && f)", ctx) is False
        assert self.evaluate("(t || f)", ctx) is True
        assert self.evaluate("(f || f)", ctx) is False

    def test_boolean_operators_evaluate_both_sides(self):
        """No short-circuit: the right operand is always evaluated"""
        seen = []

        class Probe:
            def has(self, key):
                return True

            def get(self, key):
                seen.append(key)
                return False

        self.evaluate("(left && right)", Probe())
        assert seen == ["left", "right"]

    def test_negation_truthiness(self):
        """Only None and False are falsy"""
        ctx = {"zero": 0, "empty": "", "no": False, "nothing": None}
        assert self.evaluate("!missing", ctx) is True
        assert self.evaluate("!nothing", ctx) is True
        assert self.evaluate("!no", ctx) is True
        assert self.evaluate("!zero", ctx) is False
        assert self.evaluate("!empty", ctx) is False

    def test_field_path(self):
        ctx = {
            "user": {"address": {"city": "Oslo"}},
            "obj": User("ann", manager=User("bob")),
        }
        assert self.evaluate("user.address.city", ctx) == "Oslo"
        assert self.evaluate("obj.manager.name", ctx) == "bob"
        assert self.evaluate("(obj.name == \"ann\")", ctx) is True

    def test_field_path_absent_propagates_none(self):
        ctx = {"user": {"name": "x"}, "obj": User("ann")}
        assert self.evaluate("user.missing", ctx) is None
        assert self.evaluate("user.missing.deeper", ctx) is None
        assert self.evaluate("nobody.name", ctx) is None
        assert self.evaluate("obj.manager.name", ctx) is None

    def test_field_path_does_not_use_context_chain(self):
        """Fields are looked up on the value only, never in context or globals"""
        ctx = {"user": {}, "name": "outer"}
        assert self.evaluate("user.name", ctx, {"name": "global"}) is None

    def test_grouping(self):
        assert self.evaluate("(a)", {"a": 1}) == 1

    def test_collected_names(self):
        expr = self.compiler.compile('((a + b.c) == "d")')
        assert expr.names == frozenset({"a", "b"})

    def test_compiled_expression_repr(self):
        expr = compile_expression("(a + 1)")
        assert isinstance(expr, CompiledExpression)
        assert "(a + 1)" in repr(expr)


class TestExpressionErrors:

    def setup_method(self):
        self.compiler = ExpressionCompiler()

    @pytest.mark.parametrize("source,token", [
        ("", "<eof>"),
        ("(a +", "<eof>"),
        ("(a + b", "<eof>"),
        ("(a b)", "a b"),
        ("(a + b c)", "b c"),
        ("a)", ")"),
        ("(a + b]", "<eof>"),
        ("user.", "<eof>"),
        ("user.(", "("),
        ("*", "*"),
        ("(a 1)", "a 1"),
    ])
    def test_syntax_errors(self, source, token):
        with pytest.raises(ExpressionSyntaxError) as exc_info:
            self.compiler.compile(source)
        assert exc_info.value.token == token
        assert exc_info.value.source == source

    def test_unknown_operation(self):
        with pytest.raises(ExpressionSyntaxError, match="Unknown operation =>"):
            self.compiler.compile("(a => b)")

    def test_error_message_names_source(self):
        with pytest.raises(ExpressionSyntaxError, match=r"Unexpected '\)' in a\)"):
            self.compiler.compile("a)")

    def test_runtime_error_wraps_cause(self):
        expr = self.compiler.compile("(a / b)")
        scope = RenderScope({"a": 1, "b": 0}, TemplateGlobals())

        with pytest.raises(ExpressionRuntimeError) as exc_info:
            expr(scope)

        err = exc_info.value
        assert err.source == "(a / b)"
        assert isinstance(err.cause, ZeroDivisionError)
        assert err.__cause__ is err.cause
        assert "(a / b)" in str(err)

    def test_runtime_type_error(self):
        expr = self.compiler.compile('(a + "x")')
        with pytest.raises(ExpressionRuntimeError):
            expr(RenderScope({"a": 1}, TemplateGlobals()))


def test_is_falsy():
    assert is_falsy(None)
    assert is_falsy(False)
    assert not is_falsy(0)
    assert not is_falsy("")
    assert not is_falsy([])
