"""Node evaluators for the Quill interpreter, grouped by concern."""

__all__ = [
    "bind",
    "calls",
    "chains",
    "common",
    "expr",
    "fn",
    "helpers",
    "literals",
    "loops",
]
