"""
prefstore.preferences.paths

Dotted preference paths.

A path such as ``"theme.colors.primary"`` names a storage record (``theme``) and a
sub-path navigated inside that record's JSON value (``colors.primary``).
"""

from __future__ import annotations

from dataclasses import dataclass

SEPARATOR = "."


@dataclass(frozen=True, slots=True)
class PathExpression:
    root_key: str
    sub_path: str

    @classmethod
    def parse(cls, path: str) -> PathExpression:
        # Any string is accepted; existence is checked during resolution.
        root_key, _, sub_path = path.partition(SEPARATOR)
        return cls(root_key=root_key, sub_path=sub_path)

    @property
    def full_path(self) -> str:
        if not self.sub_path:
            return self.root_key
        return f"{self.root_key}{SEPARATOR}{self.sub_path}"


def split_path(path: str) -> tuple[str, str]:
    expr = PathExpression.parse(path)
    return expr.root_key, expr.sub_path
