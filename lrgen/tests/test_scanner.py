import re
import unittest

import lrgen
from lrgen.ast import Token
from lrgen.tests.specs import boolean


class TestLexer(unittest.TestCase):
    def test_tokenize(self):
        lexer = lrgen.Lexer({r"[0-9]+": "T_NUM", r"\+": "T_PLS", r"\s+": ""})
        tokens = lexer.tokenize("12 + 3")
        self.assertEqual(
            tokens,
            [
                Token("T_NUM", "12"),
                Token("T_PLS", "+"),
                Token("T_NUM", "3"),
                Token("$", "$"),
            ],
        )
        self.assertEqual([t.offset for t in tokens], [0, 3, 5, 6])

    def test_empty(self):
        lexer = lrgen.Lexer({r"\s+": None})
        self.assertEqual(lexer.tokenize(""), [Token("$", "$")])
        self.assertEqual(lexer.tokenize("   "), [Token("$", "$")])
        self.assertEqual(lexer.tags(), [])

    def test_longest_match(self):
        lexer = lrgen.Lexer(boolean.tokens)
        self.assertEqual(
            [str(token) for token in lexer.tokenize("and android or")],
            ["T_AND", "T_WORD", "T_OR", "$"],
        )

    def test_first_pattern_wins_ties(self):
        lexer = lrgen.Lexer([(r"\w+", "T_WORD"), ("and", "T_AND")])
        self.assertEqual(lexer.tokenize("and")[0], Token("T_WORD", "and"))

    def test_boolean_query(self):
        lexer = lrgen.Lexer(boolean.tokens)
        tokens = lexer.tokenize(
            'this and "this phrase" -negated created:"2013..2015"'
        )
        self.assertEqual(
            [str(token) for token in tokens],
            [
                "T_WORD",
                "T_AND",
                "T_LITERAL",
                "T_NOT",
                "T_WORD",
                "T_WORD",
                "T_CMD",
                "T_LITERAL",
                "$",
            ],
        )
        self.assertEqual(tokens[2].value, '"this phrase"')

    def test_tags(self):
        lexer = lrgen.Lexer(boolean.tokens)
        self.assertEqual(
            lexer.tags(),
            [
                "T_AND",
                "T_OR",
                "T_NOT",
                "T_LITERAL",
                "T_WORD",
                "T_LP",
                "T_RP",
                "T_CMD",
            ],
        )

    def test_flags(self):
        lexer = lrgen.Lexer({"sqrt": "T_SQRT"}, re.IGNORECASE)
        self.assertEqual(lexer.tokenize("SQRT")[0], Token("T_SQRT", "SQRT"))

    def test_lex_error(self):
        lexer = lrgen.Lexer({r"[0-9]+": "T_NUM", r"\s+": ""})
        with self.assertRaises(lrgen.LexError) as cm:
            lexer.tokenize("12 x")
        self.assertEqual(cm.exception.char, "x")
        self.assertEqual(cm.exception.offset, 3)
        self.assertIsInstance(cm.exception, lrgen.ParsingError)


if __name__ == "__main__":
    unittest.main()
