"""
Fixed-point computation of FIRST and FOLLOW sets, shared by the LR(0) and
LR(1) rules collections.
"""
from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from lrgen.grammar import EOI, EPSILON, Rule


class FirstFollow:
    """
    FIRST and FOLLOW sets of a grammar.  Both are computed on first use and
    cached; the grammar must not change afterwards.
    """

    def __init__(
        self,
        rules: Iterable[Rule],
        variables: Sequence[str],
        terminals: Sequence[str],
        start: str,
    ) -> None:
        self._rules: List[Rule] = list(rules)
        self._variables = tuple(variables)
        self._terminals = tuple(terminals)
        self._start = start
        self._firstSets: Optional[Dict[str, frozenset[str]]] = None
        self._followSets: Optional[Dict[str, frozenset[str]]] = None
        self._firstSetCache: Dict[Tuple[str, ...], frozenset[str]] = {}

    # Compute the first sets for all symbols.
    def first_sets(self) -> Dict[str, frozenset[str]]:
        if self._firstSets is not None:
            return self._firstSets

        first: Dict[str, Set[str]] = {}
        # first(X) is X for terminals.
        for sym in self._terminals:
            first[sym] = {sym}
        first[EOI] = {EOI}
        for sym in self._variables:
            first[sym] = set()

        # Repeat the following loop until no more symbols can be added to any
        # first set.
        done = False
        while not done:
            done = True
            for rule in self._rules:
                firstSet = first[rule.lhs]
                before = len(firstSet)
                firstSet.update(self._sequence(first, rule.rhs))
                if len(firstSet) != before:
                    done = False

        self._firstSets = {k: frozenset(v) for k, v in first.items()}
        return self._firstSets

    def first(self, seq: Sequence[str]) -> frozenset[str]:
        """FIRST of a sequence of symbols; {<e>} for the empty sequence."""
        key = tuple(seq)
        firstSet = self._firstSetCache.get(key)
        if firstSet is None:
            firstSet = frozenset(self._sequence(self.first_sets(), key))
            self._firstSetCache[key] = firstSet
        return firstSet

    # Calculate the first set for the string encoded by seq, merging
    # symbols' first sets until one of them does not contain epsilon.
    @staticmethod
    def _sequence(
        first: Dict[str, Set[str]] | Dict[str, frozenset[str]],
        seq: Sequence[str],
    ) -> Set[str]:
        result: Set[str] = set()
        for sym in seq:
            symFirst = first.get(sym)
            if symFirst is None:
                # Symbols unknown to the grammar behave like terminals.
                symFirst = frozenset((sym,))
            result.update(elm for elm in symFirst if elm != EPSILON)
            if EPSILON not in symFirst:
                break
        else:
            # Merge epsilon if it was in the first set of every symbol.
            result.add(EPSILON)
        return result

    # Compute the follow sets for all variables.
    def follow_sets(self) -> Dict[str, frozenset[str]]:
        if self._followSets is not None:
            return self._followSets

        follow: Dict[str, Set[str]] = {sym: set() for sym in self._variables}
        follow[self._start].add(EOI)
        variables = set(self._variables)

        done = False
        while not done:
            done = True
            for rule in self._rules:
                for i, sym in enumerate(rule.rhs):
                    if sym not in variables:
                        continue
                    followSet = follow[sym]
                    before = len(followSet)
                    # For A -> aBb, merge first(b) - <e> into follow(B).
                    firstRest = self.first(rule.rhs[i + 1:])
                    followSet.update(
                        elm for elm in firstRest if elm != EPSILON
                    )
                    # For A -> aB, or A -> aBb where first(b) contains <e>,
                    # merge follow(A) into follow(B).
                    if EPSILON in firstRest:
                        followSet.update(follow[rule.lhs])
                    if len(followSet) != before:
                        done = False

        self._followSets = {k: frozenset(v) for k, v in follow.items()}
        return self._followSets

    def follow(self, variable: str) -> frozenset[str]:
        return self.follow_sets()[variable]
