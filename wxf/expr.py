#  Copyright 2025 Hathor Labs
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#  http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.

"""
Plain Python types for the expressions that have no direct builtin counterpart.

Integers, reals, strings, byte strings, lists and numpy arrays are represented by the builtin types, everything else
uses the frozen dataclasses below.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(slots=True, frozen=True)
class Symbol:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(slots=True, frozen=True)
class BigInteger:
    """An integer kept in its decimal textual form."""
    digits: str

    def __int__(self) -> int:
        return int(self.digits)


@dataclass(slots=True, frozen=True)
class BigReal:
    """An arbitrary precision real in its textual form, for instance `3.14159265358979323846`20.`."""
    text: str


@dataclass(slots=True, frozen=True)
class Function:
    head: Symbol
    args: tuple[Any, ...] = ()

    def __str__(self) -> str:
        return f'{self.head}[{", ".join(map(str, self.args))}]'


@dataclass(slots=True, frozen=True)
class Rule:
    lhs: Any
    rhs: Any


@dataclass(slots=True, frozen=True)
class RuleDelayed:
    lhs: Any
    rhs: Any


@dataclass(slots=True, frozen=True)
class Association:
    rules: tuple[Any, ...] = ()

    def to_dict(self) -> dict[Any, Any]:
        """Map each rule's left side to its right side, later rules win over earlier ones with the same key."""
        result = {}
        for rule in self.rules:
            if not isinstance(rule, (Rule, RuleDelayed)):
                raise TypeError(f'association entry is not a rule: {rule!r}')
            result[rule.lhs] = rule.rhs
        return result
