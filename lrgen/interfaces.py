"""
This module declares the structural interfaces that a lexer and a parser
driver implement to be used with the library.
"""

from __future__ import annotations

import abc
from typing import Iterable, List, Sequence, Tuple, Union

from lrgen.ast import Node, Token


class Lexer(abc.ABC):
    @abc.abstractmethod
    def tokenize(self, text: str) -> List[Token]:
        """
        Split text into tokens.  The result always ends with a token whose
        tag is '$'."""
        raise NotImplementedError

    @abc.abstractmethod
    def tags(self) -> Sequence[str]:
        """Every tag that tokenize() can produce, besides '$'."""
        raise NotImplementedError


class Parser(abc.ABC):
    @abc.abstractmethod
    def run(self, tokens: Iterable[Union[Token, Tuple[str, str]]]) -> Node:
        raise NotImplementedError

    @abc.abstractmethod
    def trace(self) -> list:
        raise NotImplementedError
