import unittest

import lrgen
from lrgen.grammar import Item, Rule, parse_rule


class TestRules(unittest.TestCase):
    def test_parse_rule(self):
        rule = parse_rule("exp -> exp T_PLS  term")
        self.assertEqual(rule.lhs, "exp")
        self.assertEqual(rule.rhs, ("exp", "T_PLS", "term"))
        self.assertIsNone(rule.routine)
        self.assertIsNone(rule.prec)
        self.assertEqual(str(rule), "exp -> exp T_PLS term")

    def test_parse_rule_quoted_symbols(self):
        rule = parse_rule("E' -> plus T E'")
        self.assertEqual(rule.lhs, "E'")
        self.assertEqual(rule.rhs, ("plus", "T", "E'"))

    def test_parse_rule_epsilon(self):
        self.assertEqual(parse_rule("A -> ").rhs, ())
        self.assertEqual(parse_rule("A ->").rhs, ())

    def test_parse_rule_prec(self):
        rule = parse_rule("E -> minus E %prec UMINUS")
        self.assertEqual(rule.rhs, ("minus", "E"))
        self.assertEqual(rule.prec, "UMINUS")

    def test_malformed(self):
        for text in (
            "A => b",
            "A b",
            "-> b",
            "A B -> c",
            "A -> b$",
            "A -> b + c",
            "A -> 1b",
            "A -> b %prec",
        ):
            with self.assertRaises(lrgen.MalformedRuleError, msg=text):
                parse_rule(text)

    def test_malformed_is_spec_error(self):
        with self.assertRaises(lrgen.SpecError):
            lrgen.Grammar(["A => b"])
        with self.assertRaises(lrgen.AnyException):
            lrgen.RulesCollection([("A -> b", "not callable")])

    def test_equality_ignores_routine(self):
        a = Rule("A", ("b",), routine=len)
        b = parse_rule("A -> b")
        self.assertEqual(a, b)
        self.assertEqual(hash(a), hash(b))
        self.assertNotEqual(a, Rule("A", ("b",), lookahead="$"))
        self.assertEqual(Rule("A", ("b",), lookahead="$").core(), a)


class TestItems(unittest.TestCase):
    def test_item(self):
        rule = parse_rule("A -> b C d")
        item = rule.item(1, "$")
        self.assertEqual(item.symbol, "C")
        self.assertEqual(item.rest, ("d",))
        self.assertFalse(item.complete)
        self.assertEqual(repr(item), "[A -> b . C d, $]")
        self.assertEqual(item.lr0__repr__(), "A -> b . C d")
        self.assertEqual(item.core(), Item(rule, 1))

        end = item.advance().advance()
        self.assertTrue(end.complete)
        self.assertIsNone(end.symbol)
        self.assertEqual(end.lookahead, "$")
        self.assertEqual(repr(end.core()), "[A -> b C d .]")

    def test_epsilon_item(self):
        item = parse_rule("A -> ").item(0)
        self.assertTrue(item.complete)
        self.assertIsNone(item.symbol)
        self.assertEqual(repr(item), "[A -> .]")

    def test_item_identity(self):
        rule = parse_rule("A -> b")
        self.assertEqual(rule.item(0, "x"), Item(Rule("A", ["b"]), 0, "x"))
        self.assertNotEqual(rule.item(0, "x"), rule.item(0, "y"))
        self.assertEqual(len({rule.item(0), rule.item(0), rule.item(1)}), 2)


class TestPrecedence(unittest.TestCase):
    def test_defaults(self):
        prec = lrgen.Precedence()
        self.assertEqual(prec.priority("T_PLS"), 0)
        self.assertEqual(prec.priority(None), 0)
        self.assertFalse(prec.declared("T_PLS"))
        self.assertEqual(prec.assoc(0), "<")

    def test_set(self):
        prec = lrgen.Precedence()
        prec.set("T_PLS", 1)
        prec.set_assoc(1, "left")
        prec.set_assoc(2, "right")
        prec.set_assoc(3, ">=")
        prec.set_assoc(4, "nonassoc")
        self.assertTrue(prec.declared("T_PLS"))
        self.assertEqual(prec.priority("T_PLS"), 1)
        self.assertEqual(prec.assoc(1), "<=")
        self.assertEqual(prec.assoc(2), "<")
        self.assertEqual(prec.assoc(3), ">=")
        self.assertEqual(prec.assoc(4), "nonassoc")

    def test_invalid(self):
        prec = lrgen.Precedence()
        with self.assertRaises(lrgen.SpecError):
            prec.set("T_PLS", "high")  # type: ignore
        with self.assertRaises(lrgen.SpecError):
            prec.set("T_PLS", True)
        with self.assertRaises(lrgen.SpecError):
            prec.set("+", 1)
        with self.assertRaises(lrgen.SpecError):
            prec.set_assoc(1, "==")


class TestActions(unittest.TestCase):
    def test_repr(self):
        self.assertEqual(repr(lrgen.ShiftAction(3)), "s3")
        self.assertEqual(repr(lrgen.ReduceAction(2)), "r2")
        self.assertEqual(repr(lrgen.GotoAction(7)), "7")
        self.assertEqual(repr(lrgen.AcceptAction()), "acc")
        conflict = lrgen.ConflictAction(
            [lrgen.ShiftAction(3), lrgen.ReduceAction(2)]
        )
        self.assertEqual(repr(conflict), "s3/r2")

    def test_equality(self):
        self.assertEqual(lrgen.ShiftAction(3), lrgen.ShiftAction(3))
        self.assertNotEqual(lrgen.ShiftAction(3), lrgen.GotoAction(3))
        self.assertNotEqual(lrgen.ReduceAction(1), lrgen.ReduceAction(2))
        self.assertEqual(lrgen.AcceptAction(), lrgen.AcceptAction())
        self.assertEqual(
            len({lrgen.ShiftAction(1), lrgen.ShiftAction(1)}), 1
        )


if __name__ == "__main__":
    unittest.main()
