from __future__ import annotations

import pytest

from quill import QuillError
from tests.support.harness import run_runtime_case


class Bag:
    def __init__(self, n: int) -> None:
        self.n = n

    def size(self) -> int:
        return self.n


SCENARIOS = [
    pytest.param("empty nullthing", None, ("bool", True), None, id="empty-unknown"),
    pytest.param("empty('')", None, ("bool", True), None, id="empty-string"),
    pytest.param("empty([])", None, ("bool", True), None, id="empty-list"),
    pytest.param("empty({:})", None, ("bool", True), None, id="empty-map"),
    pytest.param("empty(x)", {"x": [1]}, ("bool", False), None, id="empty-non-empty-list"),
    pytest.param("empty(x)", {"x": 0}, ("bool", False), None, id="empty-number"),
    pytest.param("empty(b)", {"b": Bag(0)}, ("bool", True), None, id="empty-size-method"),
    pytest.param("size(string)", {"string": "five!"}, ("int", 5), None, id="size-string"),
    pytest.param("size([1, 2])", None, ("int", 2), None, id="size-list"),
    pytest.param("size(m)", {"m": {"a": 1}}, ("int", 1), None, id="size-map"),
    pytest.param("size(b)", {"b": Bag(7)}, ("int", 7), None, id="size-duck-method"),
    pytest.param("[1, 2, 3].size()", None, ("int", 3), None, id="size-method-on-chain"),
    pytest.param("s.size()", {"s": "abcd"}, ("int", 4), None, id="size-method-on-string"),
    pytest.param("size(x)", {"x": None}, None, QuillError, id="size-null"),
    pytest.param("size(3)", None, None, QuillError, id="size-unsupported"),
]


@pytest.mark.parametrize("source, variables, expectation, expected_exc", SCENARIOS)
def test_empty_size(source: str, variables, expectation, expected_exc) -> None:
    run_runtime_case(source, variables, expectation, expected_exc)
