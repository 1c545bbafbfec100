# ============================================================================
# Copyright (c) 2007 Jason Evans <jasone@canonware.com>
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in
# all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.
# ============================================================================
"""
This module contains classes that are used in the specification of grammars:
productions (rules), LR items, operator precedence, and the actions that make
up a transition table.
"""

from __future__ import annotations
from typing import (
    Any,
    Callable,
    Dict,
    Optional,
    Sequence,
    Tuple,
)

import operator
import re

from lrgen.errors import MalformedRuleError, SpecError


# <$>.
EOI = "$"

# <e>.  Not a legal symbol name, so it can never clash with user symbols.
EPSILON = "<e>"

symbol_re = re.compile(r"^[A-Za-z_][A-Za-z_']*$")
prec_re = re.compile(r"%prec\s+(\S+)\s*$")

Routine = Callable[..., Any]


def is_symbol(name: str) -> bool:
    return symbol_re.match(name) is not None


class Rule:
    """
    A production rule such as:

        A -> a B c

    Symbols are separated by whitespace and are composed of letters and the
    underscore character, optionally followed by quotes (``exp'``).  Symbols
    are case-sensitive.  An empty right-hand side denotes an epsilon
    production.

    The routine is the rule's semantic action.  It is called at reduction
    time with the values of the right-hand side symbols, and whatever it
    returns becomes the value of the reduced node.

    Two rules are equal when their lhs, rhs and lookahead are equal; the
    routine does not take part in comparisons.
    """

    __slots__ = ("lhs", "rhs", "routine", "lookahead", "prec", "_hash")

    def __init__(
        self,
        lhs: str,
        rhs: Sequence[str],
        routine: Optional[Routine] = None,
        lookahead: Optional[str] = None,
        prec: Optional[str] = None,
    ) -> None:
        self.lhs = lhs
        self.rhs: Tuple[str, ...] = tuple(rhs)
        self.routine = routine
        self.lookahead = lookahead
        # Terminal whose precedence this rule takes, overriding the default
        # of its last terminal.
        self.prec = prec
        self._hash = hash((self.lhs, self.rhs, self.lookahead))

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Rule):
            return (
                self.lhs == other.lhs
                and self.rhs == other.rhs
                and self.lookahead == other.lookahead
            )
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return "Rule(%r)" % str(self)

    def __str__(self) -> str:
        s = "%s -> %s" % (self.lhs, " ".join(self.rhs))
        if self.lookahead is not None:
            s += ", %s" % self.lookahead
        return s

    def core(self) -> Rule:
        if self.lookahead is None:
            return self
        return Rule(self.lhs, self.rhs, self.routine, None, self.prec)

    def item(self, dotPos: int, lookahead: Optional[str] = None) -> Item:
        return Item(self, dotPos, lookahead)


def parse_rule(
    text: str, routine: Optional[Routine] = None, prec: Optional[str] = None
) -> Rule:
    """
    Build a Rule from its textual form, ``"A -> b C"``.  A trailing
    ``%prec NAME`` gives the rule the precedence of terminal NAME.
    """
    if not isinstance(text, str) or "->" not in text:
        raise MalformedRuleError('The rule "%s" is invalid.' % (text,))
    lhs, _, rhs = text.partition("->")
    m = prec_re.search(rhs)
    if m:
        if prec is not None or not is_symbol(m.group(1)):
            raise MalformedRuleError('The rule "%s" is invalid.' % text)
        prec = m.group(1)
        rhs = rhs[: m.start()]

    lhs = lhs.strip()
    syms = rhs.split()
    if not is_symbol(lhs):
        raise MalformedRuleError(
            'The rule "%s" has an invalid left-hand side.' % text
        )
    for sym in syms:
        if not is_symbol(sym):
            raise MalformedRuleError(
                'The rule "%s" contains the invalid symbol "%s".' % (text, sym)
            )
    return Rule(lhs, syms, routine, prec=prec)


class Item:
    """
    A rule with a dot marking how much of its right-hand side has been
    matched, plus (LR(1) only) a lookahead terminal.
    """

    __slots__ = ("rule", "dotPos", "lookahead", "_hash")

    def __init__(
        self, rule: Rule, dotPos: int, lookahead: Optional[str] = None
    ) -> None:
        assert 0 <= dotPos <= len(rule.rhs)
        self.rule = rule
        self.dotPos = dotPos
        self.lookahead = lookahead
        self._hash = hash((rule.lhs, rule.rhs, dotPos, lookahead))

    def __hash__(self) -> int:
        return self._hash

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Item):
            return (
                self.dotPos == other.dotPos
                and self.lookahead == other.lookahead
                and self.rule.lhs == other.rule.lhs
                and self.rule.rhs == other.rule.rhs
            )
        else:
            return NotImplemented

    def __repr__(self) -> str:
        if self.lookahead is None:
            return "[%s]" % self.lr0__repr__()
        return "[%s, %s]" % (self.lr0__repr__(), self.lookahead)

    def lr0__repr__(self) -> str:
        rhs = list(self.rule.rhs)
        rhs.insert(self.dotPos, ".")
        return "%s -> %s" % (self.rule.lhs, " ".join(rhs))

    @property
    def symbol(self) -> Optional[str]:
        """The symbol immediately after the dot, or None at the end."""
        if self.dotPos < len(self.rule.rhs):
            return self.rule.rhs[self.dotPos]
        return None

    @property
    def complete(self) -> bool:
        return self.dotPos == len(self.rule.rhs)

    @property
    def rest(self) -> Tuple[str, ...]:
        """The symbols following the symbol after the dot."""
        return self.rule.rhs[self.dotPos + 1:]

    def advance(self) -> Item:
        return Item(self.rule, self.dotPos + 1, self.lookahead)

    def core(self) -> Item:
        if self.lookahead is None:
            return self
        return Item(self.rule, self.dotPos)


# ============================================================================
# Precedence.
#
relations: Dict[str, Callable[[int, int], bool]] = {
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}

# Named associativities map onto the relation that produces them.
assoc_aliases = {
    "right": "<",
    "left": "<=",
}


class Precedence:
    """
    Operator precedence used to resolve shift/reduce conflicts.

    Each terminal may be given an integer priority; the higher the number,
    the tighter the operator binds.  Undeclared terminals have priority 0.

    Each priority level may be given an associativity relation, one of
    ``<``, ``>``, ``<=``, ``>=``, or the names ``left``, ``right`` and
    ``nonassoc``.  When a conflict pits two operators of equal priority p
    against each other, the relation is applied as rel(p, p): if it holds the
    reduction wins (left associativity), otherwise the shift wins (right
    associativity).  %nonassoc removes both actions, making the input a
    parse-time error.  Levels without a declared relation use ``<``.
    """

    def __init__(self) -> None:
        self._priorities: Dict[str, int] = {}
        self._assoc: Dict[int, str] = {}

    def __repr__(self) -> str:
        return "Precedence(%r, %r)" % (self._priorities, self._assoc)

    def set(self, terminal: str, priority: int) -> None:
        if not isinstance(priority, int) or isinstance(priority, bool):
            raise SpecError(
                "Priority of %r must be an integer: %r" % (terminal, priority)
            )
        if terminal != EOI and not is_symbol(terminal):
            raise SpecError("Invalid terminal name: %r" % (terminal,))
        self._priorities[terminal] = priority

    def priority(self, terminal: Optional[str]) -> int:
        if terminal is None:
            return 0
        return self._priorities.get(terminal, 0)

    def declared(self, terminal: Optional[str]) -> bool:
        return terminal is not None and terminal in self._priorities

    def set_assoc(self, level: int, relation: str) -> None:
        relation = assoc_aliases.get(relation, relation)
        if relation not in relations and relation != "nonassoc":
            raise SpecError(
                "Invalid associativity for level %r: %r" % (level, relation)
            )
        self._assoc[level] = relation

    def assoc(self, level: int) -> str:
        return self._assoc.get(level, "<")


# ============================================================================
# Actions.
#
class Action:
    """
    Abstract base class, subclassed by {Shift,Reduce,Goto,Accept,Conflict}
    Action.  An empty table cell is represented by the absence of an action.
    """

    def __init__(self) -> None:
        pass


class ShiftAction(Action):
    """
    Shift action, with associated nextState."""

    def __init__(self, nextState: int) -> None:
        super().__init__()
        self.nextState = nextState

    def __repr__(self) -> str:
        return "s%d" % self.nextState

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ShiftAction):
            return False
        return self.nextState == other.nextState

    def __hash__(self) -> int:
        return hash(("s", self.nextState))


class ReduceAction(Action):
    """
    Reduce action, with the index of the associated rule."""

    def __init__(self, ruleIndex: int) -> None:
        super().__init__()
        self.ruleIndex = ruleIndex

    def __repr__(self) -> str:
        return "r%d" % self.ruleIndex

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ReduceAction):
            return False
        return self.ruleIndex == other.ruleIndex

    def __hash__(self) -> int:
        return hash(("r", self.ruleIndex))


class GotoAction(Action):
    """
    Goto action for a variable column, with associated nextState."""

    def __init__(self, nextState: int) -> None:
        super().__init__()
        self.nextState = nextState

    def __repr__(self) -> str:
        return "%d" % self.nextState

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, GotoAction):
            return False
        return self.nextState == other.nextState

    def __hash__(self) -> int:
        return hash(("g", self.nextState))


class AcceptAction(Action):
    def __repr__(self) -> str:
        return "acc"

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, AcceptAction)

    def __hash__(self) -> int:
        return hash("acc")


class ConflictAction(Action):
    """
    Unresolved conflict between several candidate actions.  Only left in a
    table built in strict mode, which then refuses to hand the table out."""

    def __init__(self, candidates: Sequence[Action]) -> None:
        super().__init__()
        self.candidates: Tuple[Action, ...] = tuple(candidates)

    def __repr__(self) -> str:
        return "/".join(repr(action) for action in self.candidates)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ConflictAction):
            return False
        return self.candidates == other.candidates

    def __hash__(self) -> int:
        return hash(self.candidates)
