"""
The classes in this module compute the LR transition table of a grammar from
its canonical collection of item sets, resolving shift/reduce conflicts with
operator precedence.
"""
from __future__ import annotations
from typing import (
    TYPE_CHECKING,
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import sys
import threading
import time

from lrgen.collection import (
    CanonicalCollection,
    LR1RulesCollection,
    RuleSpec,
    RulesCollection,
)
from lrgen.errors import SpecError
from lrgen.grammar import (
    EOI,
    AcceptAction,
    Action,
    ConflictAction,
    GotoAction,
    Precedence,
    ReduceAction,
    Rule,
    ShiftAction,
    relations,
)

if TYPE_CHECKING:
    from typing_extensions import Literal

    ConflictResolution = Literal[
        "neither",  # Discard both.
        "old",  # Keep old.
        "new",  # Keep new.
        "err",  # Unresolvable conflict.
    ]


class Conflict(NamedTuple):
    """A table cell that received more than one action."""

    state: int
    symbol: str
    candidates: Tuple[Action, ...]
    # None when every candidate was discarded (%nonassoc), or when the
    # conflict was left unresolved.
    chosen: Optional[Action]


class TransitionTable:
    """
    The LR parsing table.  It conceptually contains one row per state and
    one column per symbol (terminals, including '$', then variables); each
    row is a dictionary, and a missing entry means that the symbol is an
    error in that state.
    """

    def __init__(
        self, terminals: Sequence[str], variables: Sequence[str]
    ) -> None:
        self.terminals: Tuple[str, ...] = tuple(terminals)
        self.variables: Tuple[str, ...] = tuple(variables)
        self.columns: Tuple[str, ...] = self.terminals + self.variables
        self._rows: List[Dict[str, Action]] = []
        self.conflicts: List[Conflict] = []

    def __len__(self) -> int:
        return len(self._rows)

    def __iter__(self) -> Iterator[Dict[str, Action]]:
        return iter(self._rows)

    def __repr__(self) -> str:
        return "TransitionTable(%d states, %d columns)" % (
            len(self._rows),
            len(self.columns),
        )

    def __str__(self) -> str:
        rows = self.to_display_rows()
        widths = [
            max(len(row[col]) for row in rows) for col in range(len(rows[0]))
        ]
        return "\n".join(
            " ".join(cell.rjust(w) for cell, w in zip(row, widths)).rstrip()
            for row in rows
        )

    def add_state(self) -> int:
        self._rows.append({})
        return len(self._rows) - 1

    def get(self, state: int, symbol: str) -> Optional[Action]:
        if 0 <= state < len(self._rows):
            return self._rows[state].get(symbol)
        return None

    def set(self, state: int, symbol: str, action: Action) -> None:
        self._rows[state][symbol] = action

    def remove(self, state: int, symbol: str) -> None:
        self._rows[state].pop(symbol, None)

    def actions(self, state: int) -> Dict[str, Action]:
        return dict(self._rows[state])

    def expected(self, state: int) -> List[str]:
        """Terminals that have an action in state."""
        if not 0 <= state < len(self._rows):
            return []
        row = self._rows[state]
        return [
            sym
            for sym in self.terminals
            if sym in row and type(row[sym]) is not ConflictAction
        ]

    def to_display_rows(self) -> List[List[str]]:
        """
        The table as rows of strings: a header row naming the columns, then
        one row per state starting with the state number."""
        rows = [["/"] + list(self.columns)]
        for i, row in enumerate(self._rows):
            rows.append(
                ["%d" % i]
                + [
                    repr(row[sym]) if sym in row else ""
                    for sym in self.columns
                ]
            )
        return rows


class Grammar:
    """
    The Grammar class contains the read-only data structures that the Lr
    parser needs in order to parse input.  The transition table is computed
    the first time it is asked for, and can then be shared by any number of
    parsers, including parsers running in different threads.

    rules : A RulesCollection (SLR tables) or LR1RulesCollection (canonical
            LR(1) tables).  Any other sequence of rule specifications is
            wrapped in an LR1RulesCollection.

    precedence : A Precedence instance; precedences can also be declared
                 with set_precedence() and set_associativity() before the
                 table is built.

    strict : If true, conflicts that declared precedence does not settle
             are fatal, instead of being resolved by the defaults (existing
             action wins a shift/reduce conflict, lowest rule index wins a
             reduce/reduce conflict).

    verbose : If true, print progress information while generating the
              parsing tables.
    """

    def __init__(
        self,
        rules: Union[RulesCollection, Iterable[RuleSpec], Mapping[str, Any]],
        precedence: Optional[Precedence] = None,
        strict: bool = False,
        verbose: bool = False,
    ) -> None:
        if isinstance(rules, RulesCollection):
            self._rules = rules
        else:
            self._rules = LR1RulesCollection(rules)
        self._precedence = precedence if precedence is not None else (
            Precedence()
        )
        self._strict = strict
        self._verbose = verbose
        self._table: Optional[TransitionTable] = None
        self._lock = threading.Lock()
        self._nConflicts = 0

    def __repr__(self) -> str:
        if self._table is None:
            return "lrgen.Grammar: %d rules (%s), tables not built" % (
                len(self._rules),
                self._rules.itemKind,
            )
        return "lrgen.Grammar: %d rules (%s), %d states, %d conflict%s" % (
            len(self._rules),
            self._rules.itemKind,
            len(self._table),
            len(self._table.conflicts),
            ("s", "")[len(self._table.conflicts) == 1],
        )

    @property
    def rules(self) -> RulesCollection:
        return self._rules

    @property
    def precedence(self) -> Precedence:
        return self._precedence

    # ========================================================================
    # Precedence.
    #
    def set_precedence(self, terminal: str, priority: int) -> None:
        """Declare the priority of an operator; higher binds tighter."""
        self._check_mutable()
        self._precedence.set(terminal, priority)

    def set_associativity(self, level: int, relation: str) -> None:
        """
        Declare how conflicts between operators of priority level are
        resolved: '<' or '>' shift (right associative), '<=' or '>='
        reduce (left associative).  'left', 'right' and 'nonassoc' are
        also accepted."""
        self._check_mutable()
        self._precedence.set_assoc(level, relation)

    def prec(self, terminal: str) -> int:
        return self._precedence.priority(terminal)

    def assoc(self, level: int) -> str:
        return self._precedence.assoc(level)

    def _check_mutable(self) -> None:
        if self._table is not None:
            raise SpecError(
                "Precedences cannot change once the transition table is built"
            )

    def rule_precedence(self, rule: Rule) -> Optional[str]:
        """
        The terminal whose precedence a rule has: the one named by %prec,
        else the last terminal of its right-hand side."""
        if rule.prec is not None:
            return rule.prec
        terminals = self._rules.terminals
        for sym in reversed(rule.rhs):
            if sym in terminals:
                return sym
        return None

    # ========================================================================
    # Derived data.
    #
    def first(self, seq: Union[str, Sequence[str], None] = None) -> Any:
        return self._rules.first(seq)

    def follow(self, variable: Optional[str] = None) -> Any:
        return self._rules.follow(variable)

    def canonical_collection(self) -> CanonicalCollection:
        return self._rules.canonical_collection()

    def reduce_by(
        self, index: int, values: Sequence[Any], context: Any = None
    ) -> Any:
        """
        Run the semantic routine of rule #index on the values of its
        right-hand side symbols, and return the synthesized value.  A rule
        without a routine passes a single value through, and otherwise
        yields the tuple of values."""
        rule = self._rules.rule_by_index(index)
        if rule.routine is None:
            if len(values) == 1:
                return values[0]
            return tuple(values)
        if context is None:
            return rule.routine(*values)
        return rule.routine(context, *values)

    def transition_table(self) -> TransitionTable:
        table = self._table
        if table is None:
            with self._lock:
                if self._table is None:
                    self._table = self._build()
                table = self._table
        return table

    # ========================================================================
    # Table generation.
    #
    def _build(self) -> TransitionTable:
        # A failed strict build leaves no table behind and may be retried.
        self._nConflicts = 0
        if self._verbose:
            start = time.monotonic()
            print(
                "lrgen.Grammar: Generating %s itemset collection... "
                % self._rules.itemKind,
                end=" ",
            )
            sys.stdout.flush()

        def progress(state: int) -> None:
            sys.stdout.write("+")
            sys.stdout.flush()

        collection = self._rules.canonical_collection(
            progress if self._verbose else None
        )

        if self._verbose:
            sys.stdout.write("\n")
            print(
                "lrgen.Grammar: Generating parsing tables (%d state%s)..."
                % (len(collection), ("s", "")[len(collection) == 1])
            )

        table = self._lr(collection)
        self._disambiguate(table)
        self._validate(table)

        if self._verbose:
            print(
                "lrgen.Grammar: %s table generation took %.1f milliseconds"
                % (
                    self._rules.itemKind,
                    (time.monotonic() - start) * 1000,
                )
            )
            sys.stdout.flush()
        return table

    # Compute LR parsing tables; conflicting actions are collected in
    # self._pending, in the order they were proposed.
    def _lr(self, collection: CanonicalCollection) -> TransitionTable:
        rules = self._rules
        variables = set(rules.variables)
        table = TransitionTable(rules.terminals, rules.variables)
        self._pending: Dict[Tuple[int, str], List[Action]] = {}

        for i, itemSet in enumerate(collection):
            table.add_state()
            for item in itemSet:
                sym = item.symbol
                # A -> a.Xb
                if sym is not None:
                    j = collection.goto_index(i, sym)
                    if sym in variables:
                        table.set(i, sym, GotoAction(j))
                    else:
                        self._propose(i, sym, ShiftAction(j))
                # S' -> S.
                elif rules.is_accepting(item):
                    self._propose(i, EOI, AcceptAction())
                # A -> a.
                else:
                    action = ReduceAction(rules.rule_index(item))
                    for lookahead in rules.reduce_lookaheads(item):
                        self._propose(i, lookahead, action)
        return table

    # Add a symbol action to a cell, if the action doesn't already exist.
    def _propose(self, state: int, sym: str, action: Action) -> None:
        actions = self._pending.setdefault((state, sym), [])
        if action not in actions:
            actions.append(action)

    # Look for action ambiguities and resolve them if possible.
    def _disambiguate(self, table: TransitionTable) -> None:
        assert self._nConflicts == 0
        for (state, sym), acts in self._pending.items():
            if len(acts) == 1:
                table.set(state, sym, acts[0])
                continue

            # Construct a list that corresponds to acts; each element
            # indicates whether to preserve the action.
            actStats = [True] * len(acts)
            nConflicts = 0
            # Reductions are settled among themselves first; the surviving
            # reduction then faces the shift and the accept action.
            for reducePass in (True, False):
                for i in range(len(acts)):
                    for j in range(i + 1, len(acts)):
                        if not (actStats[i] and actStats[j]):
                            continue
                        bothReduce = (
                            type(acts[i]) is ReduceAction
                            and type(acts[j]) is ReduceAction
                        )
                        if bothReduce != reducePass:
                            continue
                        res = self._resolve(sym, acts[i], acts[j])
                        if res == "neither":
                            actStats[i] = False
                            actStats[j] = False
                        elif res == "old":
                            actStats[j] = False
                        elif res == "new":
                            actStats[i] = False
                        elif res == "err":
                            nConflicts += 1
                        else:
                            assert False

            if nConflicts > 0:
                self._nConflicts += nConflicts
                conflict = ConflictAction(acts)
                table.set(state, sym, conflict)
                table.conflicts.append(
                    Conflict(state, sym, tuple(acts), None)
                )
                continue

            newActs = [act for act, keep in zip(acts, actStats) if keep]
            assert len(newActs) <= 1
            chosen = newActs[0] if newActs else None
            if chosen is not None:
                table.set(state, sym, chosen)
            table.conflicts.append(Conflict(state, sym, tuple(acts), chosen))
        del self._pending

    # Compute how to resolve an action conflict.
    #
    # ret: "neither" : Discard both.
    #      "old"     : Keep old.
    #      "new"     : Keep new.
    #      "err"     : Unresolvable conflict.
    def _resolve(
        self, sym: str, oldAct: Action, newAct: Action
    ) -> ConflictResolution:
        if type(oldAct) is AcceptAction:
            return "old"
        if type(newAct) is AcceptAction:
            return "new"

        if type(oldAct) is ReduceAction and type(newAct) is ReduceAction:
            # Reduce/reduce: no precedence applies.  The rule listed first in
            # the grammar wins.
            if self._strict:
                return "err"
            if oldAct.ruleIndex <= newAct.ruleIndex:
                return "old"
            return "new"

        shift: Action
        reduce: Action
        if type(oldAct) is ShiftAction:
            shift, reduce = oldAct, newAct
        else:
            shift, reduce = newAct, oldAct
        assert type(shift) is ShiftAction
        assert type(reduce) is ReduceAction

        rule = self._rules.rule_by_index(reduce.ruleIndex)
        ruleSym = self.rule_precedence(rule)
        precedence = self._precedence
        if not precedence.declared(sym) and not precedence.declared(ruleSym):
            if self._strict:
                return "err"
            # No precedence on either side: the existing action prevails.
            return "old"

        symPrec = precedence.priority(sym)
        rulePrec = precedence.priority(ruleSym)
        winner: Action
        if symPrec > rulePrec:
            winner = shift
        elif symPrec < rulePrec:
            winner = reduce
        else:
            assoc = precedence.assoc(symPrec)
            if assoc == "nonassoc":
                return "neither"
            if relations[assoc](symPrec, rulePrec):
                winner = reduce
            else:
                winner = shift
        if winner is oldAct:
            return "old"
        return "new"

    # Report conflicts, then throw a SpecError if any were left unresolved.
    def _validate(self, table: TransitionTable) -> None:
        lines = []
        if self._nConflicts > 0:
            lines.append(
                "lrgen.Grammar: %d unresolvable conflict%s"
                % (self._nConflicts, ("s", "")[self._nConflicts == 1])
            )
        for conflict in table.conflicts:
            cell = table.get(conflict.state, conflict.symbol)
            if type(cell) is ConflictAction:
                status = "unresolved"
            elif conflict.chosen is None:
                status = "both discarded"
            else:
                status = "chose %r" % conflict.chosen
            lines.append(
                "lrgen.Grammar: State %d, symbol %s: %s (%s)"
                % (
                    conflict.state,
                    conflict.symbol,
                    "/".join(repr(a) for a in conflict.candidates),
                    status,
                )
            )

        # Conflicts are fatal.
        if self._nConflicts > 0:
            raise SpecError("\n".join(lines))

        if self._verbose and lines:
            sys.stdout.write("%s\n" % "\n".join(lines))
