from __future__ import annotations
from typing import Iterable, List, Mapping, Optional, Tuple, Union

from re import compile as re_compile

from lrgen import interfaces
from lrgen.ast import Token
from lrgen.errors import LexError
from lrgen.grammar import EOI


class Lexer(interfaces.Lexer):
    """
    Regular expression lexer.  tokenMap maps patterns to tags, in priority
    order; a pattern whose tag is empty (or None) is matched and discarded,
    which is how whitespace is skipped:

        Lexer({
            r"[0-9]+": "T_NUM",
            r"\\+": "T_PLS",
            r"\\s+": "",
        })

    At each position the longest match wins; between matches of the same
    length, the pattern listed first wins.
    """

    def __init__(
        self,
        tokenMap: Union[
            Mapping[str, Optional[str]], Iterable[Tuple[str, Optional[str]]]
        ],
        flags: int = 0,
    ) -> None:
        if isinstance(tokenMap, Mapping):
            pairs = list(tokenMap.items())
        else:
            pairs = list(tokenMap)
        self.regexes = [
            (re_compile(pattern, flags), tag or None) for pattern, tag in pairs
        ]

    def tags(self) -> List[str]:
        result: List[str] = []
        for _, tag in self.regexes:
            if tag is not None and tag not in result:
                result.append(tag)
        return result

    def tokenize(self, text: str) -> List[Token]:
        regexes = self.regexes
        tokens = []

        idx = 0
        while idx < len(text):
            max_idx = idx
            max_tag = None
            for rgx, tag in regexes:
                m = rgx.match(text, idx)
                if m and m.end() > max_idx:
                    max_idx = m.end()
                    max_tag = tag
            if max_idx == idx:
                raise LexError(text[idx], idx)
            if max_tag is not None:
                tokens.append(Token(max_tag, text[idx:max_idx], idx))
            idx = max_idx

        tokens.append(Token(EOI, EOI, len(text)))
        return tokens
