"""
Grammar rule identities.

Values follow the declaration order of the rules in grammar.lark. New rules
are always appended at the end of the grammar and of this enum; the engine
refuses to build if the two disagree.
"""

from __future__ import annotations

from enum import IntEnum
from typing import Optional

from lark import Token, Tree


class RuleKind(IntEnum):
    PROGRAM = 0
    EXP = 1
    VAREXP = 2
    NUMEXP = 3
    ADDEXP = 4
    SUBEXP = 5
    MULTEXP = 6
    DIVEXP = 7
    LETEXP = 8

    @property
    def rule_name(self) -> str:
        return self.name.lower()

    @classmethod
    def from_rule_name(cls, name: str) -> Optional["RuleKind"]:
        return _BY_NAME.get(name)


_BY_NAME = {kind.rule_name: kind for kind in RuleKind}

START_RULE = RuleKind.PROGRAM.rule_name


def rule_name(tree: Tree) -> str:
    data = tree.data
    if isinstance(data, Token):
        return data.value
    return str(data)


def rule_kind(tree: Tree) -> Optional[RuleKind]:
    return RuleKind.from_rule_name(rule_name(tree))


__all__ = ["RuleKind", "START_RULE", "rule_kind", "rule_name"]
