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
The lrgen package implements a table-driven LR parser generator, along with
the runtime support for using a generated parser via the Lr parser driver.

A grammar is given as an ordered list of productions, written as strings of
the form "LHS -> sym1 sym2 ...", each optionally paired with a semantic
routine.  The left-hand side of the first production is the start symbol,
and an empty right-hand side denotes an epsilon production:

    rules = LR1RulesCollection([
        ("S -> exp", None),
        ("exp -> exp T_PLS exp", lambda a, op, b: a + b),
        ("exp -> exp T_MUL exp", lambda a, op, b: a * b),
        ("exp -> T_NUM", int),
    ])
    grammar = Grammar(rules)
    grammar.set_precedence("T_PLS", 1)
    grammar.set_precedence("T_MUL", 2)

    parser = Lr(grammar, Lexer({r"[0-9]+": "T_NUM", r"\\+": "T_PLS",
                                r"\\*": "T_MUL", r"\\s+": ""}))
    parser.parse("2 + 3 * 4")
    parser.value  # 14

Two kinds of rules collections exist, which determine the kind of parsing
tables that are generated:

  RulesCollection : LR(0) item sets, with reductions placed on FOLLOW sets
                    (SLR tables).

  LR1RulesCollection : Canonical LR(1) item sets, with reductions placed on
                       each item's own lookahead.

Shift/reduce conflicts are resolved with operator precedence: each terminal
can be given an integer priority, and each priority level an associativity
relation (see Precedence).  Reduce/reduce conflicts are resolved in favor of
the rule listed first.  With Grammar(..., strict=True), any conflict that
declared precedence does not settle is a SpecError instead.

Grammars are immutable once their transition table has been built, and can
be shared by any number of Lr instances.
"""

from __future__ import annotations


__all__ = (
    "AcceptAction",
    "Action",
    "AnyException",
    "CanonicalCollection",
    "Conflict",
    "ConflictAction",
    "EOI",
    "EPSILON",
    "GotoAction",
    "Grammar",
    "GrammarTokenMismatchError",
    "Item",
    "ItemSet",
    "Leaf",
    "LexError",
    "Lexer",
    "Lr",
    "LR1RulesCollection",
    "MalformedRuleError",
    "Node",
    "ParserLoopError",
    "ParsingError",
    "Precedence",
    "ReduceAction",
    "Rule",
    "RuleLookupError",
    "RulesCollection",
    "ShiftAction",
    "SpecError",
    "StateLookupError",
    "Token",
    "TraceEntry",
    "TransitionTable",
    "UnexpectedToken",
    "__version__",
    "dump",
    "parse_rule",
    "unparse",
)

from lrgen._version import __version__
from lrgen.ast import Leaf, Node, Token, dump, unparse
from lrgen.automaton import Conflict, Grammar, TransitionTable
from lrgen.collection import (
    CanonicalCollection,
    ItemSet,
    LR1RulesCollection,
    RulesCollection,
)
from lrgen.errors import (
    AnyException,
    GrammarTokenMismatchError,
    LexError,
    MalformedRuleError,
    ParserLoopError,
    ParsingError,
    RuleLookupError,
    SpecError,
    StateLookupError,
    UnexpectedToken,
)
from lrgen.grammar import (
    EOI,
    EPSILON,
    AcceptAction,
    Action,
    ConflictAction,
    GotoAction,
    Item,
    Precedence,
    ReduceAction,
    Rule,
    ShiftAction,
    parse_rule,
)
from lrgen.lrparser import Lr, TraceEntry
from lrgen.scanner import Lexer
