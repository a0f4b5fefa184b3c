from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

import pytest

from quill import Engine, MapContext, QuillUnknownProperty, QuillUnknownVariable
from tests.support.harness import run_runtime_case


@dataclass
class Profile:
    name: str = "Ada"
    tags: List[str] = field(default_factory=lambda: ["x", "y"])
    extra: Dict[str, Any] = field(default_factory=dict)


SCENARIOS = [
    pytest.param("list[1]", {"list": [1, 2, 3]}, ("int", 2), None, id="index-literal"),
    pytest.param("list[1+1]", {"list": [1, 2, 3]}, ("int", 3), None, id="index-expression"),
    pytest.param("list.0", {"list": [7, 8]}, ("int", 7), None, id="dotted-integer-index"),
    pytest.param("m['k']", {"m": {"k": "v"}}, ("string", "v"), None, id="map-string-key"),
    pytest.param("m.k", {"m": {"k": "v"}}, ("string", "v"), None, id="map-dotted-key"),
    pytest.param("grid[1][0]", {"grid": [[1, 2], [3, 4]]}, ("int", 3), None, id="nested-index"),
    pytest.param("p.name", {"p": Profile()}, ("string", "Ada"), None, id="attribute"),
    pytest.param("p.tags[1]", {"p": Profile()}, ("string", "y"), None, id="attribute-then-index"),
    pytest.param("p.name.upper()", {"p": Profile()}, ("string", "ADA"), None, id="attribute-then-method"),
    pytest.param("([1, 2, 3])[2]", None, ("int", 3), None, id="reference-expression-index"),
    pytest.param("a.b.c", {"a.b.c": 5}, ("int", 5), None, id="dotted-flat-key"),
    pytest.param("a.b.c", {"a.b": {"c": 6}}, ("int", 6), None, id="dotted-prefix-then-property"),
    pytest.param("a.b.c", {"a": {"b": None}, "a.b.c": 5}, ("null", None), None, id="dotted-fallback-stops-at-bean"),
    pytest.param("a.b.0", {"a.b.0": "zero"}, ("string", "zero"), None, id="dotted-integer-continuation"),
    pytest.param("missing", None, ("null", None), None, id="unknown-variable-lenient"),
    pytest.param("empty nullthing", None, ("bool", True), None, id="empty-unknown-variable"),
    pytest.param("m.nope", {"m": {}}, ("null", None), None, id="unknown-map-key-lenient"),
    pytest.param("x.missing_attr", {"x": 3}, ("null", None), None, id="unknown-attribute-lenient"),
]

STRICT_SCENARIOS = [
    pytest.param("missing", None, None, QuillUnknownVariable, id="strict-unknown-variable"),
    pytest.param("missing.deeper", None, None, QuillUnknownVariable, id="strict-unknown-dotted"),
    pytest.param("m.nope", {"m": {}}, None, QuillUnknownProperty, id="strict-unknown-property"),
    pytest.param("x", {"x": None}, ("null", None), None, id="strict-null-valued-variable"),
    pytest.param("a.b", {"a.b": None}, ("null", None), None, id="strict-null-valued-dotted"),
    pytest.param("missing ? 1 : 2", None, ("int", 2), None, id="strict-ternary-protected"),
    pytest.param("missing.deep ?: 'd'", None, ("string", "d"), None, id="strict-elvis-protected"),
    pytest.param("missing[0] ? 1 : 2", None, ("int", 2), None, id="strict-ternary-protected-index"),
    pytest.param("var x; x", None, ("null", None), None, id="strict-register-not-context"),
]


@pytest.mark.parametrize("source, variables, expectation, expected_exc", SCENARIOS)
def test_references(source: str, variables, expectation, expected_exc) -> None:
    run_runtime_case(source, variables, expectation, expected_exc)


@pytest.mark.parametrize("source, variables, expectation, expected_exc", STRICT_SCENARIOS)
def test_references_strict(source: str, variables, expectation, expected_exc) -> None:
    run_runtime_case(source, variables, expectation, expected_exc, strict=True)


def test_dotted_fallback_not_tried_after_bean() -> None:
    seen: List[str] = []

    class Spy(MapContext):
        def get(self, name: str) -> Any:
            seen.append(name)
            return super().get(name)

    context = Spy({"a": {"b": None}})
    assert Engine().create_expression("a.b.c.d").execute(context) is None
    assert seen == ["a"]


def test_unknown_variable_is_attributed(strict_engine: Engine) -> None:
    with pytest.raises(QuillUnknownVariable) as info:
        strict_engine.create_expression("1 + missing").execute()

    assert info.value.name == "missing"
    assert "line 1" in str(info.value)


def test_lenient_unknown_variable_logs(engine: Engine, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level("WARNING", logger="quill"):
        assert engine.create_expression("missing").execute() is None

    assert "undefined variable missing" in caplog.text
