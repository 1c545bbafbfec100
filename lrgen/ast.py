"""
Tokens, and the parse tree built by the parser.  A tree is made of Leaf
nodes (shifted tokens) and Node nodes (reductions), each Node carrying the
rule it was reduced by and the value its semantic routine synthesized.
"""

from __future__ import annotations
from typing import TYPE_CHECKING, Any, Iterator, List, Sequence, Union

import abc

from mypy_extensions import mypyc_attr

if TYPE_CHECKING:
    from lrgen.grammar import Rule


@mypyc_attr(serializable=True, allow_interpreted_subclasses=True)
class Token:
    """
    A lexer-produced token: a tag (the terminal symbol) and the matched
    text.  offset is the position of the text in the input, or -1 when
    unknown; it does not take part in comparisons.
    """

    def __init__(self, tag: str, value: str, offset: int = -1) -> None:
        self.tag = tag
        self.value = value
        self.offset = offset

    def __repr__(self) -> str:
        return "Token(%r, %r)" % (self.tag, self.value)

    def __str__(self) -> str:
        return self.tag

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Token):
            return self.tag == other.tag and self.value == other.value
        else:
            return NotImplemented

    def __hash__(self) -> int:
        return hash((self.tag, self.value))


@mypyc_attr(serializable=True, allow_interpreted_subclasses=True)
class Symbol(abc.ABC):
    """Base class of parse tree nodes."""

    value: Any

    @abc.abstractmethod
    def tokens(self) -> Iterator[Token]:
        """The tokens under this node, left to right."""
        raise NotImplementedError


class Leaf(Symbol):
    def __init__(self, token: Token) -> None:
        self.token = token
        self.value = token.value

    def __repr__(self) -> str:
        return "Leaf(%r)" % (self.token,)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Leaf):
            return self.token == other.token
        else:
            return NotImplemented

    def __hash__(self) -> int:
        return hash(self.token)

    def tokens(self) -> Iterator[Token]:
        yield self.token


class Node(Symbol):
    """
    Interior node: one child per right-hand side symbol of rule, in input
    order.  value is whatever the rule's semantic routine returned.
    """

    def __init__(
        self, rule: Rule, children: Sequence[Symbol], value: Any = None
    ) -> None:
        self.rule = rule
        self.children: List[Symbol] = list(children)
        self.value = value

    def __repr__(self) -> str:
        return "Node(%r, %r)" % (str(self.rule), self.children)

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Node):
            return (
                self.rule == other.rule and self.children == other.children
            )
        else:
            return NotImplemented

    def __hash__(self) -> int:
        return hash((self.rule, tuple(self.children)))

    def tokens(self) -> Iterator[Token]:
        for child in self.children:
            yield from child.tokens()


Tree = Union[Leaf, Node]


def unparse(tree: Symbol) -> str:
    """Concatenate the text of the tree's tokens, separated by spaces."""
    return " ".join(
        token.value for token in tree.tokens() if token.tag != "$"
    )


def dump(tree: Symbol, depth: int = 0) -> str:
    lines = []
    prefix = "-" * depth
    if isinstance(tree, Node):
        lines.append("%s%s" % (prefix, tree.rule))
        for child in tree.children:
            lines.append(dump(child, depth + 1))
    else:
        assert isinstance(tree, Leaf)
        lines.append("%s%s %s" % (prefix, tree.token.tag, tree.token.value))
    return "\n".join(lines)
