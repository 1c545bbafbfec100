import unittest

import lrgen
from lrgen.tests.specs import arith, boolean, dragon


def _sets(spec, cls=lrgen.RulesCollection):
    rules = cls(spec)
    return rules, rules.first(), rules.follow()


class TestFirstFollow(unittest.TestCase):
    def test_dragon_first(self):
        _, first, _ = _sets(dragon.expr)
        self.assertEqual(first["E"], {"lp", "id"})
        self.assertEqual(first["T"], {"lp", "id"})
        self.assertEqual(first["F"], {"lp", "id"})
        self.assertEqual(first["E'"], {"plus", lrgen.EPSILON})
        self.assertEqual(first["T'"], {"times", lrgen.EPSILON})
        self.assertEqual(first["plus"], {"plus"})
        self.assertEqual(first[lrgen.EOI], {lrgen.EOI})

    def test_dragon_follow(self):
        _, _, follow = _sets(dragon.expr)
        self.assertEqual(follow["E"], {"rp", "$"})
        self.assertEqual(follow["E'"], {"rp", "$"})
        self.assertEqual(follow["T"], {"plus", "rp", "$"})
        self.assertEqual(follow["T'"], {"plus", "rp", "$"})
        self.assertEqual(follow["F"], {"plus", "times", "rp", "$"})

    def test_sequences(self):
        rules = lrgen.RulesCollection(dragon.expr)
        self.assertEqual(rules.first(()), {lrgen.EPSILON})
        self.assertEqual(rules.first("T'"), {"times", lrgen.EPSILON})
        self.assertEqual(rules.first(("E'", "T'")), {
            "plus", "times", lrgen.EPSILON
        })
        self.assertEqual(rules.first(("E'", "rp")), {"plus", "rp"})
        self.assertEqual(rules.first(("T'", "$")), {"times", "$"})
        self.assertEqual(rules.follow("F"), {"plus", "times", "rp", "$"})

    def test_epsilon_grammar(self):
        _, first, follow = _sets(["S -> A b", "A -> "])
        self.assertEqual(first["A"], {lrgen.EPSILON})
        self.assertEqual(first["S"], {"b"})
        self.assertEqual(follow["A"], {"b"})
        self.assertEqual(follow["S"], {"$"})

    def test_boolean(self):
        _, first, follow = _sets(boolean.rules)
        operands = {"T_NOT", "T_LP", "T_LITERAL", "T_WORD"}
        self.assertEqual(first["exp_b"], operands)
        self.assertEqual(first["command"], {"T_WORD"})
        self.assertEqual(first["statement"], {"T_LITERAL", "T_WORD"})
        self.assertEqual(follow["S"], {"$"})
        after = operands | {"$", "T_OR", "T_AND", "T_RP"}
        for variable in ("exp_b", "expression", "command", "command_arg"):
            self.assertEqual(follow[variable], after, variable)

    def test_soundness(self):
        for spec in (
            dragon.expr,
            dragon.expr_lr,
            dragon.cc,
            dragon.assign,
            boolean.rules,
            arith.rules,
            ["S -> A B c", "A -> ", "A -> a", "B -> A", "B -> b A"],
        ):
            rules, first, follow = _sets(spec)
            variables = set(rules.variables)
            self.assertIn(lrgen.EOI, follow[rules.start])
            for rule in rules:
                # FIRST of every right-hand side is part of FIRST(lhs).
                self.assertLessEqual(
                    rules.first(rule.rhs), first[rule.lhs], str(rule)
                )
                for i, sym in enumerate(rule.rhs):
                    if sym not in variables:
                        continue
                    rest = rules.first(rule.rhs[i + 1:])
                    self.assertLessEqual(
                        rest - {lrgen.EPSILON}, follow[sym], str(rule)
                    )
                    if lrgen.EPSILON in rest:
                        self.assertLessEqual(
                            follow[rule.lhs], follow[sym], str(rule)
                        )
            for variable in variables:
                self.assertNotIn(lrgen.EPSILON, follow[variable])

    def test_idempotent(self):
        rules = lrgen.LR1RulesCollection(dragon.expr)
        self.assertIs(rules.first(), rules.first())
        self.assertIs(rules.follow(), rules.follow())
        self.assertIs(rules.first(("E'", "T'")), rules.first(["E'", "T'"]))
        grammar = lrgen.Grammar(rules)
        self.assertIs(grammar.first(), rules.first())
        self.assertEqual(grammar.follow("T"), {"plus", "rp", "$"})


if __name__ == "__main__":
    unittest.main()
