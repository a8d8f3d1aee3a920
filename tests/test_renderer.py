"""
Tests for the template renderer.
"""

import threading

import pytest

from mtpl import TemplateGlobals, parse
from mtpl.errors import ExpressionRuntimeError, NotIterableError
from mtpl.nodes import TemplateNode
from mtpl.renderer import TemplateRenderer, stringify

from tests.infrastructure import render, render_with


class Item:
    def __init__(self, name, price):
        self.name = name
        self.price = price


class TestStringify:

    def test_values(self):
        test_cases = [
            (None, "null"),
            (True, "true"),
            (False, "false"),
            (3, "3"),
            (2.0, "2"),
            (1.5, "1.5"),
            ("text", "text"),
            ([1, "a", None], "[1,a,null]"),
            ((True,), "[true]"),
        ]
        for value, expected in test_cases:
            assert stringify(value) == expected, value


class TestVariables:

    def test_text_only(self):
        assert render("plain text") == "plain text"

    def test_variable(self):
        assert render("Hello ::name::!", {"name": "Ann"}) == "Hello Ann!"

    def test_missing_variable_renders_null(self):
        assert render("[::missing::]") == "[null]"

    def test_object_context(self):
        assert render("::name:: costs ::price::", Item("pen", 3)) == "pen costs 3"

    def test_globals_fallback(self):
        assert render_with("::site::", {"site": "Example"}) == "Example"

    def test_context_overrides_globals(self):
        assert render_with("::site::", {"site": "global"}, {"site": "local"}) == "local"

    def test_current_outside_loop(self):
        """__current__ is the context itself when no key shadows it"""
        assert render("::__current__::", "scalar") == "scalar"

    def test_current_shadowed_by_context_key(self):
        assert render("::__current__::", {"__current__": "key"}) == "key"

    def test_expression(self):
        assert render("::(price * 2)::", {"price": 4}) == "8"
        assert render("::(price / 2)::", {"price": 4}) == "2"

    def test_expression_runtime_error(self):
        with pytest.raises(ExpressionRuntimeError) as exc_info:
            render("::(a / b)::", {"a": 1, "b": 0})
        assert exc_info.value.source == "(a / b)"


class TestConditionals:

    def test_if_without_else(self):
        template = parse("a::if show::b::end::c")
        assert template.render({"show": True}) == "abc"
        assert template.render({"show": False}) == "ac"
        assert template.render({}) == "ac"

    def test_zero_and_empty_string_are_truthy(self):
        template = parse("::if v::yes::else::no::end::")
        assert template.render({"v": 0}) == "yes"
        assert template.render({"v": ""}) == "yes"
        assert template.render({"v": None}) == "no"

    def test_elseif(self):
        template = parse("::if (n > 10)::big::elseif (n > 5)::medium::else::small::end::")
        assert template.render({"n": 20}) == "big"
        assert template.render({"n": 7}) == "medium"
        assert template.render({"n": 1}) == "small"

    def test_elseif_without_else(self):
        template = parse("::if a::A::elseif b::B::end::")
        assert template.render({"b": True}) == "B"
        assert template.render({}) == ""

    def test_negated_condition(self):
        template = parse("::if !user::anonymous::else::::user.name::::end::")
        assert template.render({}) == "anonymous"
        assert template.render({"user": {"name": "ann"}}) == "ann"


class TestLoops:

    def test_foreach_records(self):
        template = parse("::foreach items::[::name::]::end::")
        assert template.render({"items": [{"name": "a"}, {"name": "b"}]}) == "[a][b]"

    def test_foreach_objects(self):
        template = parse("::foreach items::::name::=::price:: ::end::")
        assert template.render({"items": [Item("x", 1), Item("y", 2)]}) == "x=1 y=2 "

    def test_outer_context_fallback(self):
        """Names missing from the element resolve in the enclosing context"""
        template = parse("::foreach items::::name::::sep::::end::")
        ctx = {"sep": ",", "items": [{"name": "a"}, {"name": "b", "sep": ";"}]}
        assert template.render(ctx) == "a,b;"

    def test_nested_loops(self):
        template = parse("::foreach rows::::foreach cells::(::v::::mark::)::end::/::end::")
        ctx = {
            "mark": "!",
            "rows": [
                {"cells": [{"v": 1}, {"v": 2}]},
                {"cells": [{"v": 3}], "mark": "?"},
            ],
        }
        assert template.render(ctx) == "(1!)(2!)/(3?)/"

    def test_current_inside_loop(self):
        template = parse("::foreach names::<::__current__::>::end::")
        assert template.render({"names": ["a", "b"]}) == "<a><b>"

    def test_iterates_any_iterable(self):
        template = parse("::foreach values::::__current__::::end::")
        assert template.render({"values": (n for n in range(3))}) == "012"
        assert template.render({"values": range(2)}) == "01"

    def test_empty_iterable(self):
        assert render("a::foreach items::x::end::b", {"items": []}) == "ab"

    def test_not_iterable(self):
        with pytest.raises(NotIterableError) as exc_info:
            render("::foreach n::x::end::", {"n": 5})
        assert exc_info.value.value == 5

    def test_missing_source_not_iterable(self):
        with pytest.raises(NotIterableError):
            render("::foreach missing::x::end::")

    def test_string_not_iterable(self):
        with pytest.raises(NotIterableError, match="Cannot iter on 'abc'"):
            render("::foreach s::x::end::", {"s": "abc"})

    def test_loop_over_field_path(self):
        template = parse("::foreach order.lines::::sku::;::end::")
        assert template.render({"order": {"lines": [{"sku": "A"}, {"sku": "B"}]}}) == "A;B;"


class TestRendererState:

    def test_stack_empty_after_render(self):
        renderer = TemplateRenderer(globals=TemplateGlobals())
        root = parse("::foreach items::::name::::end::").root

        assert renderer.render(root, {"items": [{"name": "a"}]}) == "a"
        assert renderer._scope is None

    def test_error_in_loop_body_propagates(self):
        """Outer names stay resolvable in the body until the failure propagates"""
        seen = []

        def probe(resolve, *args):
            seen.append(resolve("outer"))
            return ""

        template = parse("::foreach items::$$probe()::(1 / zero)::::end::")
        with pytest.raises(ExpressionRuntimeError):
            template.render({"items": [{}], "outer": "o", "zero": 0}, {"probe": probe})
        assert seen == ["o"]

    def test_unknown_node_type(self):
        class Strange(TemplateNode):
            pass

        with pytest.raises(TypeError, match="Strange"):
            TemplateRenderer().render(Strange(), {})

    def test_reuse_across_renders(self):
        template = parse("::a::-::(b + 1)::")
        assert template.render({"a": 1, "b": 1}) == "1-2"
        assert template.render({"a": "x", "b": 10}) == "x-11"

    def test_concurrent_renders(self):
        template = parse("::foreach items::::__current__::::end::")
        results = {}

        def worker(n):
            results[n] = template.render({"items": list(range(n))})

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(1, 9)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for n in range(1, 9):
            assert results[n] == "".join(str(i) for i in range(n))
