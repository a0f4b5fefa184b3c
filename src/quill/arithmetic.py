"""Default arithmetic and coercion strategy.

Integral operands stay integral (division truncates toward zero), any
floating point operand (or a string spelled like one) promotes the operation
to float, and any `Decimal` operand promotes it to `Decimal`. In lenient mode
`None` operands behave like zero / empty string / false; in strict mode they
raise `NullOperandError`.
"""
from __future__ import annotations

import copy
import math
import re
from decimal import Decimal, InvalidOperation
from typing import Any, List, Optional, Pattern

NULL_OPERAND = "null operand"


class NullOperandError(ArithmeticError):
    """A `None` operand reached an operator under strict arithmetic."""

    def __init__(self, message: str = NULL_OPERAND):
        super().__init__(message)


class NumberCoercionError(ArithmeticError, ValueError):
    """A value could not be coerced to a number."""


class Arithmetic:
    def __init__(self, strict: bool = False):
        self.strict = strict

    def is_strict(self) -> bool:
        return self.strict

    def options(self, strict: Optional[bool]) -> 'Arithmetic':
        """Return this strategy, or a copy with a different strictness."""
        if strict is None or strict == self.strict:
            return self

        other = copy.copy(self)
        other.strict = strict
        return other

    # ---------------- null control ----------------

    def control_null_null_operands(self) -> int:
        if self.strict:
            raise NullOperandError()
        return 0

    def control_null_operand(self) -> None:
        if self.strict:
            raise NullOperandError()

    # ---------------- type probes ----------------

    @staticmethod
    def is_number(value: Any) -> bool:
        return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)

    @staticmethod
    def is_floating_point(value: Any) -> bool:
        if isinstance(value, float):
            return True

        if isinstance(value, str):
            return any(ch in value for ch in '.eE') and not value.lower().lstrip('+-').startswith(('inf', 'nan'))

        return False

    @staticmethod
    def is_decimal(value: Any) -> bool:
        return isinstance(value, Decimal)

    # ---------------- coercions ----------------

    def to_integer(self, value: Any) -> int:
        if value is None:
            self.control_null_operand()
            return 0

        match value:
            case bool():
                return int(value)
            case int():
                return value
            case float() | Decimal():
                if not math.isfinite(value):
                    raise NumberCoercionError(f"integer coercion: {value!r}")
                return int(value)
            case str():
                if value == "":
                    return 0
                try:
                    return int(value.strip())
                except ValueError:
                    raise NumberCoercionError(f"integer coercion: {value!r}") from None

        raise NumberCoercionError(f"integer coercion: {type(value).__name__}")

    def to_float(self, value: Any) -> float:
        if value is None:
            self.control_null_operand()
            return 0.0

        match value:
            case bool():
                return 1.0 if value else 0.0
            case int() | float() | Decimal():
                return float(value)
            case str():
                if value == "":
                    return 0.0
                try:
                    return float(value.strip())
                except ValueError:
                    raise NumberCoercionError(f"float coercion: {value!r}") from None

        raise NumberCoercionError(f"float coercion: {type(value).__name__}")

    def to_decimal(self, value: Any) -> Decimal:
        if value is None:
            self.control_null_operand()
            return Decimal(0)

        if isinstance(value, Decimal):
            return value

        if isinstance(value, bool):
            return Decimal(int(value))

        try:
            return Decimal(value.strip() if isinstance(value, str) else value)
        except (InvalidOperation, TypeError, ValueError):
            raise NumberCoercionError(f"decimal coercion: {value!r}") from None

    def to_string(self, value: Any) -> str:
        if value is None:
            self.control_null_operand()
            return ""

        if isinstance(value, bool):
            return "true" if value else "false"

        return str(value)

    def to_boolean(self, value: Any) -> bool:
        match value:
            case None:
                self.control_null_operand()
                return False
            case bool():
                return value
            case int() | float() | Decimal():
                return value != 0
            case str():
                return len(value) > 0 and value != "false"
            case _:
                return True

    # ---------------- operators ----------------

    def add(self, left: Any, right: Any) -> Any:
        if left is None and right is None:
            return self.control_null_null_operands()

        try:
            return self._numeric(left, right, lambda l, r: l + r)
        except NumberCoercionError:
            return self.to_string(left) + self.to_string(right)

    def subtract(self, left: Any, right: Any) -> Any:
        if left is None and right is None:
            return self.control_null_null_operands()

        return self._numeric(left, right, lambda l, r: l - r)

    def multiply(self, left: Any, right: Any) -> Any:
        if left is None and right is None:
            return self.control_null_null_operands()

        return self._numeric(left, right, lambda l, r: l * r)

    def divide(self, left: Any, right: Any) -> Any:
        if left is None and right is None:
            if self.strict:
                raise NullOperandError()
            return 0.0

        if self.is_decimal(left) or self.is_decimal(right):
            divisor = self.to_decimal(right)
            if divisor == 0:
                raise ZeroDivisionError("decimal division by zero")
            return self.to_decimal(left) / divisor

        if self.is_floating_point(left) or self.is_floating_point(right):
            divisor = self.to_float(right)
            if divisor == 0.0:
                raise ZeroDivisionError("float division by zero")
            return self.to_float(left) / divisor

        return _truncating_div(self.to_integer(left), self.to_integer(right))

    def mod(self, left: Any, right: Any) -> Any:
        if left is None and right is None:
            if self.strict:
                raise NullOperandError()
            return 0.0

        if self.is_decimal(left) or self.is_decimal(right):
            divisor = self.to_decimal(right)
            if divisor == 0:
                raise ZeroDivisionError("decimal modulo by zero")
            return self.to_decimal(left) % divisor

        if self.is_floating_point(left) or self.is_floating_point(right):
            divisor = self.to_float(right)
            if divisor == 0.0:
                raise ZeroDivisionError("float modulo by zero")
            return math.fmod(self.to_float(left), divisor)

        dividend = self.to_integer(left)
        divisor = self.to_integer(right)
        return dividend - divisor * _truncating_div(dividend, divisor)

    def negate(self, value: Any) -> Any:
        match value:
            case None:
                self.control_null_operand()
                return 0
            case bool():
                return not value
            case int() | float() | Decimal():
                return -value
            case str():
                if self.is_floating_point(value):
                    return -self.to_float(value)
                return -self.to_integer(value)

        raise ArithmeticError(f"object could not be negated: {type(value).__name__}")

    def bitwise_and(self, left: Any, right: Any) -> int:
        return self.to_integer(left) & self.to_integer(right)

    def bitwise_or(self, left: Any, right: Any) -> int:
        return self.to_integer(left) | self.to_integer(right)

    def bitwise_xor(self, left: Any, right: Any) -> int:
        return self.to_integer(left) ^ self.to_integer(right)

    def bitwise_complement(self, value: Any) -> int:
        return ~self.to_integer(value)

    # ---------------- comparisons ----------------

    def equals(self, left: Any, right: Any) -> bool:
        if left is right:
            return True

        if left is None or right is None:
            return False

        if isinstance(left, float) or isinstance(right, float):
            try:
                return self.to_float(left) == self.to_float(right)
            except NumberCoercionError:
                return left == right

        if self.is_number(left) or self.is_number(right):
            try:
                return self._numeric(left, right, lambda l, r: l == r)
            except NumberCoercionError:
                return left == right

        if isinstance(left, bool) or isinstance(right, bool):
            return self.to_boolean(left) == self.to_boolean(right)

        if isinstance(left, str) or isinstance(right, str):
            return self.to_string(left) == self.to_string(right)

        return left == right

    def less_than(self, left: Any, right: Any) -> bool:
        return self._compare(left, right, "<") < 0

    def less_than_or_equal(self, left: Any, right: Any) -> bool:
        return self._compare(left, right, "<=") <= 0

    def greater_than(self, left: Any, right: Any) -> bool:
        return self._compare(left, right, ">") > 0

    def greater_than_or_equal(self, left: Any, right: Any) -> bool:
        return self._compare(left, right, ">=") >= 0

    def matches(self, left: Any, right: Any) -> bool:
        if left is None and right is None:
            return True

        if left is None or right is None:
            return False

        subject = self.to_string(left)

        if isinstance(right, Pattern):
            return right.fullmatch(subject) is not None

        if isinstance(right, str):
            try:
                return re.fullmatch(right, subject) is not None
            except re.error as exc:
                raise ArithmeticError(f"bad pattern {right!r} : {exc}") from exc

        raise ArithmeticError(f"bad right argument to =~ : {type(right).__name__}")

    # ---------------- narrowing ----------------

    def narrow_arguments(self, args: List[Any]) -> bool:
        """Narrow integral floats/decimals to int in place; True if any changed."""
        narrowed = False

        for index, value in enumerate(args):
            if isinstance(value, (float, Decimal)) and not isinstance(value, bool):
                if math.isfinite(value) and value == int(value):
                    args[index] = int(value)
                    narrowed = True

        return narrowed

    def narrow_number(self, number: Any, literal_class: Optional[type]) -> Any:
        if literal_class is None or isinstance(number, literal_class):
            return number

        if literal_class is int and isinstance(number, (float, Decimal)) and number == int(number):
            return int(number)

        if literal_class is float and self.is_number(number):
            return float(number)

        if literal_class is Decimal and self.is_number(number):
            return Decimal(number)

        return number

    # ---------------- internals ----------------

    def _numeric(self, left: Any, right: Any, op):
        if self.is_decimal(left) or self.is_decimal(right):
            return op(self.to_decimal(left), self.to_decimal(right))

        if self.is_floating_point(left) or self.is_floating_point(right):
            return op(self.to_float(left), self.to_float(right))

        return op(self.to_integer(left), self.to_integer(right))

    def _compare(self, left: Any, right: Any, operator: str) -> int:
        if left is None or right is None:
            if self.strict:
                raise NullOperandError()
            # lenient: make every ordering test false
            return {"<": 0, "<=": 1, ">": 0, ">=": -1}[operator]

        if self.is_number(left) or self.is_number(right) or isinstance(left, bool) or isinstance(right, bool):
            try:
                return self._numeric(left, right, _cmp)
            except NumberCoercionError:
                pass

        if isinstance(left, str) or isinstance(right, str):
            return _cmp(self.to_string(left), self.to_string(right))

        try:
            return _cmp(left, right)
        except TypeError:
            raise ArithmeticError(
                f"invalid comparison: {type(left).__name__} {operator} {type(right).__name__}"
            ) from None


def _cmp(left: Any, right: Any) -> int:
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def _truncating_div(dividend: int, divisor: int) -> int:
    if divisor == 0:
        raise ZeroDivisionError("integer division by zero")

    quotient = dividend // divisor
    if quotient < 0 and quotient * divisor != dividend:
        quotient += 1

    return quotient
