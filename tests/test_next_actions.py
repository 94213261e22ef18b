"""
Funder-specific next actions from missing requirement names.
Run: python -m pytest tests/test_next_actions.py -v
"""
import unittest

from services.next_actions import MAX_ACTIONS, suggest_next_actions


class TestNextActions(unittest.TestCase):
    def test_base_rules_apply_to_any_funder(self):
        actions = suggest_next_actions("velocity", "purchase", ["Insurance Policy", "Appraisal"])
        self.assertTrue(actions[0].startswith("Contact insurance agent"))
        self.assertTrue(actions[1].startswith("Order appraisal"))

    def test_kiavi_refinance_payoff(self):
        actions = suggest_next_actions("kiavi", "cash_out_refinance", ["Payoff Statement"])
        self.assertIn("Request payoff statement from current lender with per diem interest", actions)
        self.assertEqual(actions[-1], "Confirm AMC appraisal meets Kiavi valuation guidelines")

    def test_kiavi_purchase_skips_payoff(self):
        actions = suggest_next_actions("kiavi", "purchase", ["Payoff Statement"])
        self.assertFalse(any("payoff" in a.lower() for a in actions))

    def test_unknown_funder(self):
        self.assertEqual(
            suggest_next_actions(None, "purchase", []),
            ["Review lender-specific requirements for this funder"],
        )

    def test_nothing_missing(self):
        actions = suggest_next_actions("velocity", "purchase", [])
        self.assertEqual(len(actions), 1)
        self.assertIn("complete", actions[0])

    def test_limit(self):
        missing = [
            "Insurance Policy",
            "Appraisal",
            "ROC Capital Background/Credit Authorization",
            "ROC ACH Consent Form",
            "Current Property Tax Bill",
            "3 Months Rent Collection History",
        ]
        self.assertEqual(len(suggest_next_actions("roc_capital", "purchase", missing)), MAX_ACTIONS)


if __name__ == "__main__":
    unittest.main()
