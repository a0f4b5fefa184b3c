from __future__ import annotations

import math
from collections import OrderedDict
from types import SimpleNamespace
from typing import Any, List

import pytest

from quill import (
    Engine,
    MapContext,
    NamespaceContext,
    QuillError,
    QuillInvocationError,
    QuillMethodNotFound,
)
from quill.uberspect import MethodHandle
from tests.support.harness import find_nodes, run_runtime_case


class Doubler:
    def take(self, n: int) -> int:
        return n * 2

    def fail(self) -> None:
        raise RuntimeError("boom")


class Point:
    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y


class Util:
    @staticmethod
    def add(a, b):
        return a + b


class Scaled:
    created = 0

    def __init__(self, context) -> None:
        Scaled.created += 1
        self.factor = context.get("factor")

    def scale(self, n):
        return n * self.factor


SCENARIOS = [
    pytest.param("s.upper()", {"s": "abc"}, ("string", "ABC"), None, id="method-on-string"),
    pytest.param("s.replace('a', 'b')", {"s": "aa"}, ("string", "bb"), None, id="method-with-arguments"),
    pytest.param("d.take(2.0)", {"d": Doubler()}, ("int", 4), None, id="method-narrowed-retry"),
    pytest.param("[3, 1, 2].index(2)", None, ("int", 2), None, id="method-on-literal"),
    pytest.param("new(Point, 1, 2).y", {"Point": Point}, ("int", 2), None, id="constructor-class"),
    pytest.param("size(new('collections.OrderedDict'))", None, ("int", 0), None, id="constructor-dotted-name"),
    pytest.param("tick(20)", {"tick": lambda n: n + 1}, ("int", 21), None, id="context-callable"),
    pytest.param("obj.cb(2)", {"obj": {"cb": lambda n: n * 10}}, ("int", 20), None, id="property-functor"),
    pytest.param("d.fail()", {"d": Doubler()}, ("null", None), None, id="invocation-failure-lenient"),
    pytest.param("'abc'.nosuch()", None, None, QuillMethodNotFound, id="method-not-found"),
    pytest.param("nosuch()", None, None, QuillMethodNotFound, id="function-not-found"),
    pytest.param("new(Point)", {"Point": Point}, None, QuillMethodNotFound, id="constructor-not-found"),
    pytest.param("ns:f()", None, None, QuillError, id="unknown-namespace"),
    pytest.param(
        "var f = function(x) { x / 4 }; f(2.0)", None, ("float", 0.5), None, id="closure-gets-unnarrowed-arguments"
    ),
    pytest.param("kind(2.0)", {"kind": lambda v: type(v).__name__}, ("string", "float"), None, id="callable-gets-unnarrowed-arguments"),
]


@pytest.mark.parametrize("source, variables, expectation, expected_exc", SCENARIOS)
def test_calls(source: str, variables, expectation, expected_exc) -> None:
    run_runtime_case(source, variables, expectation, expected_exc)


def test_invocation_failure_strict(strict_engine: Engine) -> None:
    with pytest.raises(QuillInvocationError) as info:
        strict_engine.create_expression("d.fail()").execute({"d": Doubler()})

    assert isinstance(info.value.cause, RuntimeError)


def test_method_not_found_escalates_in_lenient_mode() -> None:
    with pytest.raises(QuillMethodNotFound):
        Engine(strict=False).create_expression("x.nothing()").execute({"x": 1})


def test_namespace_module() -> None:
    engine = Engine(functions={"m": math})
    assert engine.create_expression("m:sqrt(16)").execute() == 4.0


def test_namespace_static_class() -> None:
    engine = Engine(functions={"util": Util})
    assert engine.create_expression("util:add(1, 2)").execute() == 3


def test_namespace_instantiated_once_per_evaluation() -> None:
    Scaled.created = 0
    engine = Engine(functions={"sc": Scaled})
    script = engine.create_script("sc:scale(1) + sc:scale(2)")

    assert script.execute({"factor": 10}) == 30
    assert Scaled.created == 1

    assert script.execute({"factor": 2}) == 6
    assert Scaled.created == 2


def test_global_namespace() -> None:
    engine = Engine(functions={None: Util})
    assert engine.create_expression("add(2, 3)").execute() == 5


def test_context_namespace_resolver() -> None:
    context = NamespaceContext({"factor": 3}, namespaces={"sc": Scaled})
    assert Engine().create_expression("sc:scale(5)").execute(context) == 15


def test_call_site_cache_is_transparent() -> None:
    cached = Engine(cache=True).create_expression("x.upper()")
    uncached = Engine(cache=False).create_expression("x.upper()")

    for value in ["ab", "cd", "ef"]:
        assert cached.execute({"x": value}) == uncached.execute({"x": value})

    assert uncached.cache is None
    method = find_nodes(cached.tree, "method")[0]
    assert isinstance(cached.cache.get(method), MethodHandle)


CACHE_SCENARIOS = [
    pytest.param(
        "items[i]",
        [{"items": [1, 2, 3], "i": 1}, {"items": [1], "i": 5}],
        [2, None],
        id="index-read-out-of-range",
    ),
    pytest.param(
        "o.name",
        [{"o": SimpleNamespace(name=1)}, {"o": SimpleNamespace()}],
        [1, None],
        id="attribute-read-missing",
    ),
    pytest.param(
        "m.k",
        [{"m": {"k": "v"}}, {"m": {}}],
        ["v", None],
        id="map-read-missing-key",
    ),
    pytest.param(
        "items[1] = 9",
        [{"items": [1, 2, 3]}, {"items": [1]}],
        [9, 9],
        id="index-write-out-of-range",
    ),
]


@pytest.mark.parametrize("cache", [True, False], ids=["cached", "uncached"])
@pytest.mark.parametrize("source, contexts, expected", CACHE_SCENARIOS)
def test_cache_does_not_change_results(cache: bool, source: str, contexts, expected) -> None:
    script = Engine(cache=cache).create_script(source)

    assert [script.execute(context) for context in contexts] == expected


def test_cached_index_write_leaves_short_list_alone() -> None:
    script = Engine().create_script("items[1] = 9")
    long_items, short_items = [1, 2, 3], [1]

    script.execute({"items": long_items})
    script.execute({"items": short_items})

    assert long_items == [1, 9, 3]
    assert short_items == [1]


def test_cached_read_failure_is_silenced() -> None:
    script = Engine(strict=True, silent=True).create_expression("o.name")

    assert script.execute({"o": SimpleNamespace(name=1)}) == 1
    assert script.execute({"o": SimpleNamespace()}) is None


def test_functor_table_released_after_error() -> None:
    Scaled.created = 0
    engine = Engine(functions={"sc": Scaled})
    script = engine.create_script("sc:scale(1) + sc:missing()")
    interp = engine.create_interpreter({"factor": 2}, cache=script.cache)

    with pytest.raises(QuillMethodNotFound):
        interp.interpret(script.tree)

    assert interp.functors is None
    assert Scaled.created == 1

    assert engine.create_expression("sc:scale(4)").execute({"factor": 2}) == 8
    assert Scaled.created == 2


def test_stale_cache_entry_is_revalidated() -> None:
    script = Engine().create_expression("x.count(1)")

    assert script.execute({"x": [1, 1, 2]}) == 2
    assert script.execute({"x": (1, 2, 1, 1)}) == 3


def test_functor_called_with_context_arguments() -> None:
    calls: List[Any] = []
    context = MapContext({"record": lambda *args: calls.append(args)})

    Engine().create_script("record(1, 'two', [3])").execute(context)
    assert calls == [(1, "two", [3])]


def test_script_functor() -> None:
    engine = Engine()
    inc = engine.create_script("x + 1", "x")
    assert engine.create_expression("inc(41)").execute({"inc": inc}) == 42


def test_ordered_dict_constructor_is_cached() -> None:
    script = Engine().create_expression("new('collections.OrderedDict')")
    assert isinstance(script.execute(), OrderedDict)
    assert isinstance(script.execute(), OrderedDict)
    assert len(script.cache) == 1
