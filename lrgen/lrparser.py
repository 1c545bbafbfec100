from __future__ import annotations
from typing import (
    Any,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Set,
    Tuple,
    Union,
)

from lrgen.ast import Leaf, Node, Symbol, Token
from lrgen.automaton import Grammar
from lrgen.errors import (
    GrammarTokenMismatchError,
    ParserLoopError,
    StateLookupError,
    UnexpectedToken,
)
from lrgen.grammar import (
    EOI,
    AcceptAction,
    GotoAction,
    ReduceAction,
    ShiftAction,
)
from lrgen.interfaces import Lexer, Parser


class TraceEntry(NamedTuple):
    """One step of the parser: the state stack, the tags of the remaining
    input, and the action taken."""

    stack: Tuple[int, ...]
    input: Tuple[str, ...]
    action: str

    def __str__(self) -> str:
        return "stack: %s | input: ^%s | action: %s" % (
            " ".join("%d" % state for state in self.stack),
            " ".join(self.input),
            self.action,
        )


class Lr(Parser):
    """
    LR parser.  The Lr class uses the transition table of a Grammar in order
    to parse a sequence of tokens, building a parse tree and running the
    rules' semantic routines as reductions happen.

    A parser instance keeps the stacks, tree and trace of its latest run;
    the grammar itself is never modified, so any number of parsers can share
    one grammar.

    lexer : Optional Lexer.  When given, parse() accepts text, and every run
            first checks that the lexer can produce each terminal of the
            grammar.

    maxSteps : Ceiling on the number of steps of a run, guarding against a
               broken automaton looping forever.  Defaults to the class
               attribute of the same name.  When both are None, a run is
               only stopped once it makes no progress: a stack configuration
               repeats without a shift in between, or the stack outgrows
               (tokens + 1) * (total right-hand side length + 1).

    context : Passed as first argument to every semantic routine, when not
              None.
    """

    maxSteps: Optional[int] = None

    _grammar: Grammar
    _states: List[int]
    _nodes: List[Symbol]
    _tree: Optional[Node]

    def __init__(
        self,
        grammar: Grammar,
        lexer: Optional[Lexer] = None,
        maxSteps: Optional[int] = None,
        context: Any = None,
        verbose: bool = False,
    ) -> None:
        self._grammar = grammar
        self._table = grammar.transition_table()
        self._lexer = lexer
        if maxSteps is not None:
            self.maxSteps = maxSteps
        self.context = context
        self.verbose = verbose
        self.reset()

    @property
    def grammar(self) -> Grammar:
        return self._grammar

    @property
    def tree(self) -> Optional[Node]:
        """Root of the parse tree of the last successful run."""
        return self._tree

    @property
    def value(self) -> Any:
        """Value synthesized for the root of the last successful run."""
        if self._tree is None:
            return None
        return self._tree.value

    def reset(self) -> None:
        self._tree = None
        self._states = [0]
        self._nodes = []
        self._trace: List[TraceEntry] = []
        self.messages: List[str] = []

    def trace(self) -> List[TraceEntry]:
        return list(self._trace)

    def validate(self) -> None:
        """
        Check that the lexer can produce every terminal of the grammar, and
        note the lexer tags that the grammar never uses."""
        if self._lexer is None:
            return
        lexerTags = self._lexer.tags()
        terminals = [t for t in self._grammar.rules.terminals if t != EOI]
        missing = [t for t in terminals if t not in lexerTags]
        if missing:
            raise GrammarTokenMismatchError(missing)
        unused = [t for t in lexerTags if t not in terminals]
        if unused:
            msg = "Unused tokens were found: %s" % ", ".join(unused)
            self.messages.append(msg)
            if self.verbose:
                print(msg)

    def parse(self, text: str) -> Node:
        """Tokenize text with the parser's lexer, then parse the tokens."""
        if self._lexer is None:
            raise ValueError("parse() requires a lexer; use run() instead")
        self.reset()
        self.validate()
        return self._run(self._lexer.tokenize(text))

    def run(self, tokens: Iterable[Union[Token, Tuple[str, str]]]) -> Node:
        """
        Parse a sequence of tokens, given as Token instances or (tag, value)
        pairs.  A '$' token is appended if the sequence lacks one."""
        self.reset()
        self.validate()
        return self._run(tokens)

    def _run(self, tokens: Iterable[Union[Token, Tuple[str, str]]]) -> Node:
        input = [
            tok if isinstance(tok, Token) else Token(*tok) for tok in tokens
        ]
        if not input or input[-1].tag != EOI:
            input.append(Token(EOI, EOI))

        # Without an explicit ceiling, a run fails only when it stops making
        # progress: a stack configuration repeats before the next shift, or
        # the stack grows past the longest viable prefix the input allows.
        ceiling = self.maxSteps
        maxHeight = (len(input) + 1) * (
            sum(len(rule.rhs) for rule in self._grammar.rules) + 1
        ) + 1
        seen: Set[Tuple[int, ...]] = set()
        low = len(self._states)

        pos = 0
        steps = 0
        while True:
            steps += 1
            if ceiling is not None and steps > ceiling:
                raise ParserLoopError(ceiling)

            token = input[pos]
            state = self._states[-1]
            action = self._table.get(state, token.tag)
            self._trace.append(
                TraceEntry(
                    tuple(self._states),
                    tuple(tok.tag for tok in input[pos:]),
                    "err" if action is None else repr(action),
                )
            )
            if self.verbose:
                self._printStack()
                print("INPUT: %r" % token)
                print("   --> %r" % action)

            if action is None or type(action) is GotoAction:
                raise UnexpectedToken(
                    token, state, self._table.expected(state)
                )
            elif type(action) is ShiftAction:
                self._states.append(action.nextState)
                self._nodes.append(Leaf(token))
                pos += 1
                seen.clear()
                low = len(self._states)
            elif type(action) is ReduceAction:
                self._reduce(action.ruleIndex)
                if ceiling is None:
                    # states[:low] is unchanged since seen was last cleared.
                    height = len(self._states)
                    if height - 1 < low:
                        low = height - 1
                        seen.clear()
                    config = tuple(self._states[low:])
                    if config in seen or height > maxHeight:
                        raise ParserLoopError(
                            steps,
                            "Parser stopped making progress at token %r "
                            "after %d steps" % (token, steps),
                        )
                    seen.add(config)
            elif type(action) is AcceptAction:
                break
            else:
                raise StateLookupError(
                    "Unresolved conflict %r in state %d on %s"
                    % (action, state, token.tag)
                )

        assert len(self._nodes) == 1
        root = self._nodes[0]
        assert isinstance(root, Node)
        self._tree = root
        return root

    def _printStack(self) -> None:
        print("STACK:", end=" ")
        for node in self._nodes:
            if isinstance(node, Node):
                print(node.rule.lhs, end=" ")
            else:
                assert isinstance(node, Leaf)
                print(node.token.tag, end=" ")
        print()
        print("      ", " ".join("%d" % state for state in self._states))

    def _reduce(self, ruleIndex: int) -> None:
        rule = self._grammar.rules.rule_by_index(ruleIndex)
        nRhs = len(rule.rhs)
        if nRhs:
            children = self._nodes[-nRhs:]
            del self._nodes[-nRhs:]
            del self._states[-nRhs:]
        else:
            children = []

        top = self._states[-1]
        goto = self._table.get(top, rule.lhs)
        if not isinstance(goto, GotoAction):
            raise StateLookupError(
                "No goto from state %d on %s" % (top, rule.lhs)
            )

        value = self._grammar.reduce_by(
            ruleIndex, [child.value for child in children], self.context
        )
        self._states.append(goto.nextState)
        self._nodes.append(Node(rule, children, value))
