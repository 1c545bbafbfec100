"""
Rules collections: the grammar's ordered list of productions, together with
the closure and goto operations over LR item sets and the construction of the
canonical collection of item sets.

RulesCollection works with LR(0) items (the resulting tables are SLR, since
reductions are placed on FOLLOW sets); LR1RulesCollection works with
canonical LR(1) items.
"""
from __future__ import annotations
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Tuple,
    Union,
)

import threading

from lrgen.errors import (
    MalformedRuleError,
    RuleLookupError,
    SpecError,
    StateLookupError,
)
from lrgen.firstfollow import FirstFollow
from lrgen.grammar import EOI, Item, Rule, is_symbol, parse_rule

RuleSpec = Union[str, Rule, Sequence[Any]]


class ItemSet:
    """
    A set of items (an automaton state).  Iteration follows insertion order,
    so that everything derived from an item set is reproducible; equality and
    hashing only depend on which items are present.
    """

    def __init__(self, items: Iterable[Item] = ()) -> None:
        self._items: Dict[Item, None] = {}
        self._symMap: Dict[str, List[Item]] = {}
        self._hash: Optional[int] = None
        for item in items:
            self.add(item)

    def __repr__(self) -> str:
        return "ItemSet(%s)" % ", ".join(repr(i) for i in self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Item]:
        return iter(self._items)

    def __contains__(self, item: Any) -> bool:
        return item in self._items

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash(frozenset(self._items))
        return self._hash

    def __eq__(self, other: Any) -> bool:
        if type(other) is ItemSet:
            return self._items.keys() == other._items.keys()
        else:
            return NotImplemented

    def add(self, item: Item) -> bool:
        """Add item; returns False if it was already present."""
        if item in self._items:
            return False
        # Item sets are keys of the canonical collection once hashed.
        assert self._hash is None
        self._items[item] = None
        sym = item.symbol
        if sym is not None:
            if sym in self._symMap:
                self._symMap[sym].append(item)
            else:
                self._symMap[sym] = [item]
        return True

    def symbols(self) -> List[str]:
        """Distinct symbols that appear right after a dot, in item order."""
        return list(self._symMap)

    def moving(self, sym: str) -> List[Item]:
        """Items whose dot immediately precedes sym."""
        return list(self._symMap.get(sym, ()))


class CanonicalCollection:
    """
    The ordered collection of distinct item sets.  The position of an item
    set is its state number; state 0 is the closure of the start item.
    """

    def __init__(self) -> None:
        self._states: List[ItemSet] = []
        self._index: Dict[ItemSet, int] = {}
        # (state, symbol) --> state.
        self.transitions: Dict[Tuple[int, str], int] = {}

    def __repr__(self) -> str:
        lines = ["CanonicalCollection(%d states)" % len(self._states)]
        for i, itemSet in enumerate(self._states):
            lines.append("  %d: %r" % (i, itemSet))
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[ItemSet]:
        return iter(self._states)

    def __getitem__(self, state: int) -> ItemSet:
        return self._states[state]

    def index(self, itemSet: ItemSet) -> Optional[int]:
        return self._index.get(itemSet)

    def add(self, itemSet: ItemSet) -> Tuple[int, bool]:
        """
        Insert itemSet unless a structurally equal one exists.  Returns the
        state number and whether the item set was new."""
        assert len(itemSet) > 0
        i = self._index.get(itemSet)
        if i is not None:
            return i, False
        i = len(self._states)
        self._states.append(itemSet)
        self._index[itemSet] = i
        return i, True

    def goto_index(self, state: int, sym: str) -> int:
        try:
            return self.transitions[(state, sym)]
        except KeyError:
            raise StateLookupError(
                "No transition from state %d on symbol %r" % (state, sym)
            ) from None


def _coerce(spec: RuleSpec) -> Rule:
    if isinstance(spec, Rule):
        for sym in (spec.lhs,) + spec.rhs:
            if not is_symbol(sym):
                raise MalformedRuleError(
                    'The rule "%s" contains the invalid symbol "%s".'
                    % (spec, sym)
                )
        return spec
    if isinstance(spec, str):
        return parse_rule(spec)
    if isinstance(spec, (tuple, list)):
        if len(spec) == 1:
            return parse_rule(spec[0])
        if len(spec) == 2:
            text, routine = spec
            if not isinstance(text, str):
                # (routine, production)
                text, routine = routine, text
            if routine is not None and not callable(routine):
                raise MalformedRuleError(
                    "The semantic routine of %r is not callable" % (text,)
                )
            return parse_rule(text, routine)
    raise MalformedRuleError("Invalid rule specification: %r" % (spec,))


class RulesCollection:
    """
    An ordered collection of rules forming a grammar.  Rules may be given in
    any of the following forms, which can be mixed freely:

        [
            ("S -> a A", routine),
            (routine, "A -> b B"),
            "B -> c",                 # No semantic routine.
            Rule("B", ("d",)),
        ]

    or as a mapping of production strings to routines.  The left-hand side of
    the first rule is the start symbol.
    """

    itemKind = "LR(0)"

    def __init__(
        self, spec: Union[Iterable[RuleSpec], Mapping[str, Any]] = ()
    ) -> None:
        entries: Iterable[RuleSpec]
        if isinstance(spec, Mapping):
            entries = list(spec.items())
        else:
            entries = spec
        self._rules: List[Rule] = [_coerce(entry) for entry in entries]
        if not self._rules:
            raise SpecError("A grammar needs at least one rule")

        self._start = self._rules[0].lhs
        variables: Dict[str, None] = {}
        for rule in self._rules:
            variables.setdefault(rule.lhs, None)
        terminals: Dict[str, None] = {}
        for rule in self._rules:
            for sym in rule.rhs:
                if sym not in variables:
                    terminals.setdefault(sym, None)
        terminals[EOI] = None
        self._variables: Tuple[str, ...] = tuple(variables)
        self._terminals: Tuple[str, ...] = tuple(terminals)

        self._byLhs: Dict[str, List[Rule]] = {}
        for rule in self._rules:
            self._byLhs.setdefault(rule.lhs, []).append(rule)

        self._firstFollow = FirstFollow(
            self._rules, self._variables, self._terminals, self._start
        )
        self._augmented: Optional[Rule] = None
        self._ruleIndex: Optional[
            Dict[Tuple[str, Tuple[str, ...]], int]
        ] = None
        self._collection: Optional[CanonicalCollection] = None
        self._lock = threading.RLock()

    def __repr__(self) -> str:
        return "%s(%s)" % (
            type(self).__name__,
            "; ".join(str(rule) for rule in self._rules),
        )

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    @property
    def rules(self) -> Tuple[Rule, ...]:
        return tuple(self._rules)

    @property
    def start(self) -> str:
        return self._start

    @property
    def variables(self) -> Tuple[str, ...]:
        return self._variables

    @property
    def terminals(self) -> Tuple[str, ...]:
        return self._terminals

    @property
    def augmented_start(self) -> Optional[str]:
        if self._augmented is None:
            return None
        return self._augmented.lhs

    # ========================================================================
    # FIRST/FOLLOW.
    #
    def first(
        self, seq: Union[str, Sequence[str], None] = None
    ) -> Any:
        """
        With no argument, the FIRST sets of all symbols; otherwise FIRST of
        the given symbol or sequence of symbols."""
        with self._lock:
            if seq is None:
                return self._firstFollow.first_sets()
            if isinstance(seq, str):
                seq = (seq,)
            return self._firstFollow.first(seq)

    def follow(self, variable: Optional[str] = None) -> Any:
        """
        With no argument, the FOLLOW sets of all variables; otherwise the
        FOLLOW set of the given variable."""
        with self._lock:
            if variable is None:
                return self._firstFollow.follow_sets()
            return self._firstFollow.follow(variable)

    # ========================================================================
    # Rules lookup.
    #
    def augment(self) -> Rule:
        """
        Insert S' -> S at the front of the collection.  This happens once;
        later calls return the same rule."""
        with self._lock:
            if self._augmented is None:
                name = self._start + "'"
                while name in self._variables or name in self._terminals:
                    name += "'"
                rule = Rule(name, (self._start,))
                self._rules.insert(0, rule)
                self._byLhs[name] = [rule]
                self._augmented = rule
                self._ruleIndex = None
            return self._augmented

    def rule_index(self, rule: Union[Rule, Item]) -> int:
        """Index of a rule (or of an item's rule), ignoring lookaheads."""
        if isinstance(rule, Item):
            rule = rule.rule
        index = self._ruleIndex
        if index is None:
            index = {}
            for i, r in enumerate(self._rules):
                index.setdefault((r.lhs, r.rhs), i)
            self._ruleIndex = index
        try:
            return index[(rule.lhs, rule.rhs)]
        except KeyError:
            raise RuleLookupError(
                'Rule "%s" was not found in the collection.' % rule.core()
            ) from None

    def rule_by_index(self, index: int) -> Rule:
        if 0 <= index < len(self._rules):
            return self._rules[index]
        raise RuleLookupError(
            "Rule #%d was not found in the collection." % index
        )

    # ========================================================================
    # Items.
    #
    def start_item(self) -> Item:
        return self.augment().item(0)

    def is_accepting(self, item: Item) -> bool:
        return (
            item.complete
            and self._augmented is not None
            and item.rule == self._augmented
        )

    def reduce_lookaheads(self, item: Item) -> Iterable[str]:
        """Terminals on which a complete item is reduced."""
        if self._augmented is not None and item.rule == self._augmented:
            return (EOI,)
        follow = self.follow(item.rule.lhs)
        return [sym for sym in self._terminals if sym in follow]

    def _expand(self, item: Item, sym: str) -> Iterator[Item]:
        for rule in self._byLhs[sym]:
            yield rule.item(0)

    def closure(self, items: Iterable[Item]) -> ItemSet:
        """
        Close a set of items: for every item whose dot precedes a variable,
        add the items of that variable's rules with the dot at the start,
        until nothing more can be added."""
        itemSet = ItemSet(items)
        worklist = list(itemSet)
        i = 0
        while i < len(worklist):
            item = worklist[i]
            i += 1
            sym = item.symbol
            if sym in self._byLhs:
                for tItem in self._expand(item, sym):
                    if itemSet.add(tItem):
                        worklist.append(tItem)
        return itemSet

    def goto(self, itemSet: ItemSet, sym: str) -> ItemSet:
        """
        Advance the dot past sym in every item that allows it, then close
        the result.  The result is empty if no item moves."""
        moved = [item.advance() for item in itemSet.moving(sym)]
        if not moved:
            return ItemSet()
        return self.closure(moved)

    def canonical_collection(
        self, progress: Optional[Callable[[int], None]] = None
    ) -> CanonicalCollection:
        """
        Build (once) the canonical collection of item sets reachable from the
        augmented start item.  progress, if given, is called with the number
        of each newly created state."""
        with self._lock:
            if self._collection is not None:
                return self._collection

            collection = CanonicalCollection()
            collection.add(self.closure((self.start_item(),)))
            symbols = self._variables + self._terminals

            # Every state is expanded over every symbol exactly once; new
            # states are appended and expanded in turn, so the loop ends when
            # a complete pass over the known states adds nothing.
            i = 0
            while i < len(collection):
                itemSet = collection[i]
                present = set(itemSet.symbols())
                for sym in symbols:
                    if sym not in present:
                        continue
                    gotoSet = self.goto(itemSet, sym)
                    j, new = collection.add(gotoSet)
                    collection.transitions[(i, sym)] = j
                    if new and progress is not None:
                        progress(j)
                i += 1

            self._collection = collection
            return collection


class LR1RulesCollection(RulesCollection):
    """
    Rules collection working with LR(1) items.  Each item carries a
    lookahead terminal, and reductions happen only on an item's own
    lookahead.
    """

    itemKind = "LR(1)"

    def start_item(self) -> Item:
        return self.augment().item(0, EOI)

    def reduce_lookaheads(self, item: Item) -> Iterable[str]:
        assert item.lookahead is not None
        return (item.lookahead,)

    def _expand(self, item: Item, sym: str) -> Iterator[Item]:
        # [A -> a.Bb, x] yields [B -> .g, y] for every y in first(bx).
        assert item.lookahead is not None
        firstSet = self.first(item.rest + (item.lookahead,))
        lookaheads = [t for t in self._terminals if t in firstSet]
        for rule in self._byLhs[sym]:
            for lookahead in lookaheads:
                yield rule.item(0, lookahead)
