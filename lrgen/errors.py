"""
The lrgen package implements the following exception classes:

  * AnyException
  * SpecError
      MalformedRuleError, GrammarTokenMismatchError, RuleLookupError,
      StateLookupError
  * ParsingError
      LexError, UnexpectedToken, ParserLoopError
"""
from __future__ import annotations
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from lrgen.ast import Token


# ============================================================================
# Begin exceptions.
#
class AnyException(Exception):
    """
    Top-level class for all exceptions thrown within the lrgen package.
    """


class ParsingError(AnyException):
    """
    Top level parsing exception class, from which we derive all exceptions
    that occur during the tokenization or parsing of an input string.  A
    ParsingError aborts the current run only; the grammar and its tables stay
    usable.
    """


class SpecError(AnyException):
    """
    Specification error exception.  SpecError arises when a grammar cannot be
    turned into parsing tables, either because a production is malformed or
    because table generation detects an inconsistency.
    """


class MalformedRuleError(SpecError):
    """
    A production string does not have the form ``LHS -> sym1 sym2 ...``, or
    one of its symbols is not a valid symbol name.
    """


class GrammarTokenMismatchError(SpecError):
    """
    The grammar references terminals that the lexer can never produce.
    """

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = sorted(missing)
        super().__init__(
            "Invalid tokens were found in the provided grammar: %s"
            % ", ".join(self.missing)
        )


class RuleLookupError(SpecError):
    """
    A rule (or rule index) referenced during table generation or reduction
    does not exist in the rules collection.
    """


class StateLookupError(SpecError):
    """
    A goto target referenced by the automaton does not exist.
    """


class LexError(ParsingError):
    """
    No token pattern matches the input at ``offset``.
    """

    def __init__(self, char: str, offset: int) -> None:
        self.char = char
        self.offset = offset
        super().__init__(
            'Unexpected character "%s" at position %d' % (char, offset)
        )


class UnexpectedToken(ParsingError):
    """
    Parser syntax error.  UnexpectedToken arises when a parser finds no
    action for the current (state, token) pair.  ``expected`` lists the
    terminals that would have been accepted in that state.
    """

    def __init__(
        self, token: Token, state: int, expected: Iterable[str] = ()
    ) -> None:
        self.token = token
        self.state = state
        self.expected = sorted(expected)
        msg = "Unexpected token: %r in state %d" % (token, state)
        if self.expected:
            msg += " (expected one of: %s)" % ", ".join(self.expected)
        super().__init__(msg)


class ParserLoopError(ParsingError):
    """
    The parser ran for more steps than its ceiling allows, or stopped
    making progress on the input.  This always indicates a broken automaton
    rather than bad input.
    """

    def __init__(self, steps: int, msg: Optional[str] = None) -> None:
        self.steps = steps
        if msg is None:
            msg = "Parser exceeded its step ceiling (%d steps)" % steps
        super().__init__(msg)


#
# End exceptions.
# ============================================================================
