"""Arithmetic expressions over integers, with an ambiguous expression rule
disambiguated by operator precedence."""
import math

import lrgen


rules = [
    ("S -> exp_a", None),
    ("exp_a -> exp_a T_PLS exp_a", lambda a, op, b: a + b),
    ("exp_a -> exp_a T_SUB exp_a", lambda a, op, b: a - b),
    ("exp_a -> exp_a T_MUL exp_a", lambda a, op, b: a * b),
    ("exp_a -> exp_a T_DIV exp_a", lambda a, op, b: a / b),
    ("exp_a -> T_LP exp_a T_RP", lambda lp, a, rp: a),
    ("exp_a -> T_SQRT T_LP exp_a T_RP", lambda s, lp, a, rp: math.sqrt(a)),
    ("exp_a -> T_NUM", int),
]

tokens = {
    r"\*": "T_MUL",
    r"/": "T_DIV",
    r"\+": "T_PLS",
    r"-": "T_SUB",
    r"sqrt": "T_SQRT",
    r"[0-9]+": "T_NUM",
    r"\(": "T_LP",
    r"\)": "T_RP",
    r"\s+": "",
}


def precedence():
    """The usual precedence: * and / over + and -, all left associative."""
    prec = lrgen.Precedence()
    prec.set("T_PLS", 1)
    prec.set("T_SUB", 1)
    prec.set("T_MUL", 2)
    prec.set("T_DIV", 2)
    prec.set_assoc(1, "left")
    prec.set_assoc(2, "left")
    return prec


def grammar(**kwargs):
    return lrgen.Grammar(
        lrgen.LR1RulesCollection(rules), precedence(), **kwargs
    )
