from __future__ import annotations

from collections import OrderedDict

import pytest

from quill.uberspect import (
    TRY_FAILED,
    AttributeGetter,
    ConstructorHandle,
    IndexGetter,
    MapGetter,
    MethodHandle,
    Uberspect,
    accepts_arguments,
)

UBER = Uberspect()


class Greeter:
    greeting: str

    def __init__(self, greeting: str = "hi") -> None:
        self.greeting = greeting

    def greet(self, name: str) -> str:
        return f"{self.greeting} {name}"


class Plain:
    pass


def test_accepts_arguments_checks_arity_and_hints() -> None:
    greet = Greeter().greet

    assert accepts_arguments(greet, ["bob"])
    assert not accepts_arguments(greet, [])
    assert not accepts_arguments(greet, [1])
    assert accepts_arguments(greet, [None])


def test_find_method_and_try_invoke() -> None:
    handle = UBER.find_method(Greeter(), "greet", ["ann"])

    assert isinstance(handle, MethodHandle)
    assert handle.invoke(Greeter("yo"), ["ann"]) == "yo ann"
    assert handle.try_invoke("greet", Greeter(), ["bo"]) == "hi bo"
    assert handle.try_invoke("other", Greeter(), ["bo"]) is TRY_FAILED
    assert handle.try_invoke("greet", "not a greeter", ["bo"]) is TRY_FAILED
    assert handle.try_invoke("greet", Greeter(), [3]) is TRY_FAILED


def test_find_method_rejects_mismatch() -> None:
    assert UBER.find_method(Greeter(), "greet", [1, 2]) is None
    assert UBER.find_method(Greeter(), "missing", []) is None
    assert UBER.find_method(None, "greet", []) is None


def test_constructors() -> None:
    handle = UBER.find_constructor(Greeter, ["hey"])

    assert isinstance(handle, ConstructorHandle)
    assert handle.invoke(["hey"]).greeting == "hey"
    assert handle.try_invoke(Plain, []) is TRY_FAILED
    assert UBER.find_constructor(Plain, [1]) is None
    assert UBER.find_constructor(Plain, []) is not None
    assert isinstance(UBER.find_constructor("collections.OrderedDict", []).invoke([]), OrderedDict)
    assert UBER.find_constructor("no.such.Thing", []) is None


def test_create_namespace() -> None:
    class Ns:
        def __init__(self, context) -> None:
            self.context = context

    context = object()

    assert UBER.create_namespace(Ns, context).context is context
    assert UBER.create_namespace(Plain, context) is None
    assert UBER.create_namespace(Ns(context), context) is None


def test_property_getters() -> None:
    assert isinstance(UBER.find_property_get({"a": 1}, "a"), MapGetter)
    assert isinstance(UBER.find_property_get([1], 0), IndexGetter)
    assert isinstance(UBER.find_property_get(Greeter(), "greeting"), AttributeGetter)
    assert UBER.find_property_get(3, "nothing") is None
    assert UBER.find_property_get([1], "nothing") is None


def test_getter_try_invoke_revalidates() -> None:
    getter = UBER.find_property_get({"a": 1}, "a")

    assert getter.try_invoke({"b": 2}, "b") == 2
    assert getter.try_invoke({1: 2}, 1) is TRY_FAILED
    assert getter.try_invoke([1], "a") is TRY_FAILED

    index = UBER.find_property_get([5, 6], 0)
    assert index.try_invoke([7, 8], 1) == 8
    assert index.try_invoke((7, 8), 1) is TRY_FAILED
    assert index.try_invoke([7], 4) is TRY_FAILED

    attr = UBER.find_property_get(Greeter(), "greeting")
    assert attr.try_invoke(Greeter(), "greeting") == "hi"
    broken = Greeter()
    del broken.greeting
    assert attr.try_invoke(broken, "greeting") is TRY_FAILED


def test_property_setters() -> None:
    data = {"a": 1}
    UBER.find_property_set(data, "a", 2).invoke(data, 2)
    assert data == {"a": 2}

    items = [1, 2]
    assert UBER.find_property_set(items, 5, 0) is None
    UBER.find_property_set(items, -1, 9).invoke(items, 9)
    assert items == [1, 9]

    setter = UBER.find_property_set(items, 1, 0)
    assert setter.try_invoke([5], 1, 0) is TRY_FAILED

    greeter = Greeter()
    assert UBER.find_property_set(greeter, "greeting", 3) is None
    setter = UBER.find_property_set(greeter, "greeting", "yo")
    assert setter.try_invoke(greeter, "greeting", "hey") == "hey"
    assert greeter.greeting == "hey"
    assert setter.try_invoke(greeter, "greeting", 1) is TRY_FAILED


def test_iterators() -> None:
    assert list(UBER.get_iterator({"a": 1, "b": 2})) == [1, 2]
    assert list(UBER.get_iterator("ab")) == ["a", "b"]
    assert UBER.get_iterator(None) is None
    assert UBER.get_iterator(3) is None

    gen = iter([1])
    assert UBER.get_iterator(gen) is gen

    class Legacy:
        def iterator(self):
            return iter([4, 5])

    assert list(UBER.get_iterator(Legacy())) == [4, 5]


@pytest.mark.parametrize(
    "handle_factory",
    [
        pytest.param(lambda: UBER.find_method("s", "upper", []), id="cacheable-method"),
        pytest.param(lambda: UBER.find_property_get({"a": 1}, "a"), id="cacheable-getter"),
        pytest.param(lambda: UBER.find_constructor(Plain, []), id="cacheable-constructor"),
    ],
)
def test_handles_are_cacheable(handle_factory) -> None:
    assert handle_factory().is_cacheable()
