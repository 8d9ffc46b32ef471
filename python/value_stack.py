"""
The value stack and its coercion rule.

Popping never fails: an exhausted stack yields EmptyValue, which arithmetic
treats as zero.
"""

from __future__ import annotations

from typing import Iterator

from grid_types import CharValue, EmptyValue, IntValue, StackValue


def coerce_to_int(value: StackValue) -> IntValue:
    """Empty -> Int(0), Char(c) -> Int(ord(c)), Int unchanged."""
    match value:
        case EmptyValue():
            return IntValue(0)
        case CharValue():
            return IntValue(value.code)
        case IntValue():
            return value


def is_truthy(value: StackValue) -> bool:
    """
    Branch test used by the conditional instructions.

    An Int is truthy when nonzero. A Char is truthy when the low 8 bits of its
    codepoint are nonzero, so e.g. U+0100 counts as false. Empty is false.
    """
    match value:
        case IntValue(value=n):
            return n != 0
        case CharValue():
            return (value.code & 0xFF) != 0
        case EmptyValue():
            return False


class ValueStack:
    """Last-in-first-out sequence of stack values."""

    def __init__(self, values: list[StackValue] | None = None) -> None:
        self._values: list[StackValue] = list(values) if values else []

    def push(self, value: StackValue) -> None:
        self._values.append(value)

    def pop(self) -> StackValue:
        if not self._values:
            return EmptyValue()
        return self._values.pop()

    def pop_pair(self) -> tuple[StackValue, StackValue]:
        """Pop twice. Returns (top, second); missing slots are EmptyValue."""
        top = self.pop()
        second = self.pop()
        return top, second

    def peek(self) -> StackValue:
        return self._values[-1] if self._values else EmptyValue()

    def snapshot(self) -> tuple[StackValue, ...]:
        """Current contents, bottom first."""
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[StackValue]:
        return iter(self._values)

    def __repr__(self) -> str:
        return f"ValueStack({self._values!r})"
