"""
Rule table tests: strict validation, permissive inference and lookup.

Usage:
    python -m pytest tests/test_rule_table.py -v
"""
import unittest

from engine.errors import (
    ConstructionError, DuplicateRule, EmptyField, InvalidHeadAction, InvalidState, InvalidSymbol,
)
from engine.rule_table import HeadAction, Rule, RuleTable, Transition

APPEND_ONE = [
    ("q0", "1", "1", "R", "q0"),
    ("q0", "_", "1", "N", "qh"),
]


class TestStrictBuild(unittest.TestCase):

    def test_lookup(self):
        table = RuleTable.build(APPEND_ONE)
        self.assertEqual(table.get("q0", "1"), Transition("q0", "1", "R"))
        self.assertEqual(table.get("q0", "_"), ("qh", "1", "N"))
        self.assertIsNone(table.get("q0", "x"))
        self.assertIsNone(table.get("qh", "1"))

    def test_transitions_from(self):
        table = RuleTable.build(APPEND_ONE)
        self.assertEqual(set(table.transitions_from("q0")), {"1", "_"})
        self.assertEqual(table.transitions_from("qh"), {})

    def test_has_state(self):
        table = RuleTable.build(APPEND_ONE)
        self.assertTrue(table.has_state("q0"))
        # reachable but without outgoing rules
        self.assertFalse(table.has_state("qh"))

    def test_inferred_sets_keep_first_appearance_order(self):
        table = RuleTable.build(APPEND_ONE)
        self.assertEqual(table.states, ["q0", "qh"])
        self.assertEqual(table.symbols, ["1", "_"])
        self.assertIsNone(table.declared_states)

    def test_rules_are_normalized_in_order(self):
        table = RuleTable.build(APPEND_ONE)
        self.assertEqual(table.rules[0], Rule("q0", "1", "1", "R", "q0"))
        self.assertEqual(len(table), 2)

    def test_comma_separated_rules(self):
        table = RuleTable.build(["q0, 1, 1, R, q0", "q0,_,1,N,qh"])
        self.assertEqual(table.get("q0", "_"), Transition("qh", "1", "N"))

    def test_duplicate_rule(self):
        rules = APPEND_ONE + [("q0", "1", "_", "L", "qh")]
        with self.assertRaises(DuplicateRule) as ctx:
            RuleTable.build(rules)
        self.assertEqual(ctx.exception.index, 2)
        self.assertEqual(ctx.exception.rule, Rule("q0", "1", "_", "L", "qh"))

    def test_invalid_head_action(self):
        with self.assertRaises(InvalidHeadAction):
            RuleTable.build([("q0", "1", "1", "X", "q0")])

    def test_symbol_must_be_one_character(self):
        with self.assertRaises(InvalidSymbol):
            RuleTable.build([("q0", "11", "1", "R", "q0")])

    def test_empty_field(self):
        with self.assertRaises(EmptyField):
            RuleTable.build([("q0", "1", "1", "R", "")])
        with self.assertRaises(EmptyField):
            RuleTable.build([("", "1", "1", "R", "q0")])
        with self.assertRaises(EmptyField):
            RuleTable.build([("q0", "1", "1", "", "q0")])

    def test_short_tuple_is_empty_field(self):
        with self.assertRaises(EmptyField):
            RuleTable.build([("q0", "1", "1", "R")])

    def test_undeclared_state(self):
        with self.assertRaises(InvalidState) as ctx:
            RuleTable.build(APPEND_ONE, declared_states=["q0"])
        self.assertIn("Next state 'qh' is not valid", str(ctx.exception))

    def test_undeclared_symbol(self):
        with self.assertRaises(InvalidSymbol):
            RuleTable.build(APPEND_ONE, declared_symbols=["1"])

    def test_declared_sets_are_reported(self):
        table = RuleTable.build(APPEND_ONE, declared_states=["q0", "qh", "unused"],
                                declared_symbols=["1", "_"])
        self.assertEqual(table.states, ["q0", "qh", "unused"])
        self.assertEqual(table.declared_symbols, ["1", "_"])

    def test_errors_share_a_base_class(self):
        with self.assertRaises(ConstructionError):
            RuleTable.build([("q0", "1", "1", "Q", "q0")])


class TestPermissiveBuild(unittest.TestCase):

    def test_duplicate_last_rule_wins(self):
        rules = APPEND_ONE + [("q0", "1", "_", "L", "qh")]
        table = RuleTable.build(rules, strict=False)
        self.assertEqual(table.get("q0", "1"), Transition("qh", "_", "L"))
        self.assertEqual(len(table.rules), 3)

    def test_accepts_incomplete_rules(self):
        table = RuleTable.build([("q0", "1"), ("q0", "", "", "", "q1"), "q1,a"], strict=False)
        self.assertEqual(table.rules[0], Rule("q0", "1", "", "", ""))
        self.assertEqual(table.rules[2], Rule("q1", "a", "", "", ""))
        self.assertEqual(table.states, ["q0", "q1"])

    def test_unvalidated_head_action_and_long_symbols(self):
        table = RuleTable.build([("q0", "ab", "c", "jump", "q0")], strict=False)
        self.assertEqual(table.get("q0", "ab"), Transition("q0", "c", "jump"))
        self.assertFalse(table.strict)


class TestHeadAction(unittest.TestCase):

    def test_markers(self):
        self.assertEqual(HeadAction("L").marker, "<")
        self.assertEqual(HeadAction("R").marker, ">")
        self.assertEqual(HeadAction("N").marker, "-")


if __name__ == "__main__":
    unittest.main()
