"""
Completion tracking and document-to-requirement assignment.
Run: python -m pytest tests/test_checklist.py -v
"""
import unittest

from schemas.records import LoanRecord
from schemas.requirement import Requirement
from services.checklist import ChecklistTracker, LoanChecklist, _percent
from services.errors import InvalidInputError, UnknownRequirementError
from services.requirement_catalog import build_default_catalog
from services.requirements import RequirementCatalog, RequirementResolver


def _ten_item_kiavi_catalog():
    names = ["Driver's License"] + [f"Item {i}" for i in range(2, 11)]
    return RequirementCatalog(
        common=[Requirement(id=f"r{i}", name=n, category="borrower_entity") for i, n in enumerate(names)],
        by_funder={"kiavi": []},
    )


class TestPercent(unittest.TestCase):
    def test_zero_total(self):
        self.assertEqual(_percent(0, 0), 0)

    def test_rounds_half_up(self):
        self.assertEqual(_percent(1, 8), 13)  # 12.5
        self.assertEqual(_percent(1, 3), 33)
        self.assertEqual(_percent(2, 3), 67)
        self.assertEqual(_percent(3, 3), 100)


class TestCompletionTracker(unittest.TestCase):
    def setUp(self):
        self.tracker = ChecklistTracker(RequirementResolver(build_default_catalog()))
        self.checklist = LoanChecklist(loan_id="loan-1", funder="kiavi")

    def test_kiavi_ten_item_scenario(self):
        tracker = ChecklistTracker(RequirementResolver(_ten_item_kiavi_catalog()))
        checklist = LoanChecklist(loan_id="loan-1", funder="kiavi")
        tracker.mark_complete(checklist, "Driver's License")
        self.assertEqual(tracker.percent_complete(checklist), 10)

    def test_mark_complete_is_set_like(self):
        self.tracker.mark_complete(self.checklist, "Appraisal")
        self.tracker.mark_complete(self.checklist, "Appraisal")
        self.assertEqual(self.checklist.completed_requirements, ["Appraisal"])
        self.assertTrue(self.tracker.is_complete(self.checklist, "Appraisal"))

    def test_mark_incomplete(self):
        self.tracker.mark_complete(self.checklist, "Appraisal")
        self.tracker.mark_incomplete(self.checklist, "Appraisal")
        self.assertFalse(self.tracker.is_complete(self.checklist, "Appraisal"))
        self.tracker.mark_incomplete(self.checklist, "Appraisal")
        self.assertEqual(self.checklist.completed_requirements, [])

    def test_percent_ignores_names_outside_resolved_list(self):
        self.tracker.mark_complete(self.checklist, "Not A Real Requirement")
        self.assertEqual(self.tracker.percent_complete(self.checklist), 0)

    def test_percent_stays_in_range(self):
        for name in self.tracker.resolver.resolve_names("kiavi"):
            self.tracker.mark_complete(self.checklist, name)
        self.assertEqual(self.tracker.percent_complete(self.checklist), 100)

    def test_empty_checklist_percent_is_zero(self):
        tracker = ChecklistTracker(RequirementResolver(RequirementCatalog(common=[], by_funder={})))
        self.assertEqual(tracker.percent_complete(LoanChecklist(loan_id="x", funder="kiavi")), 0)

    def test_blank_name_rejected(self):
        with self.assertRaises(InvalidInputError):
            self.tracker.mark_complete(self.checklist, "")

    def test_missing_respects_required_flag(self):
        required_missing = self.tracker.missing(self.checklist)
        all_missing = self.tracker.missing(self.checklist, required_only=False)
        self.assertNotIn("Payoff Statement", required_missing)
        self.assertIn("Payoff Statement", all_missing)
        self.tracker.mark_complete(self.checklist, "Appraisal")
        self.assertNotIn("Appraisal", self.tracker.missing(self.checklist))

    def test_validate_names(self):
        self.tracker.validate_names(self.checklist, ["Appraisal", "Disclosure Form"])
        with self.assertRaises(UnknownRequirementError) as ctx:
            self.tracker.validate_names(self.checklist, ["Appraisal", "Bogus"])
        self.assertEqual(ctx.exception.names, ["Bogus"])

    def test_replace_completed_dedupes(self):
        self.tracker.replace_completed(self.checklist, ["Appraisal", "Appraisal", "", "Voided Check"])
        self.assertEqual(self.checklist.completed_requirements, ["Appraisal", "Voided Check"])

    def test_from_loan_copies_state(self):
        loan = LoanRecord(
            id="loan-9",
            loan_number="9",
            borrower_name="B",
            property_address="1 St",
            loan_type="DSCR",
            loan_purpose="purchase",
            funder="visio",
            completed_requirements=["Appraisal"],
            document_assignments={"Appraisal": ["d1"]},
        )
        checklist = LoanChecklist.from_loan(loan)
        self.tracker.mark_complete(checklist, "Voided Check")
        self.assertEqual(loan.completed_requirements, ["Appraisal"])
        self.assertEqual(checklist.funder, "visio")


class TestDocumentAssignment(unittest.TestCase):
    def setUp(self):
        self.tracker = ChecklistTracker(RequirementResolver(build_default_catalog()))
        self.checklist = LoanChecklist(loan_id="loan-1", funder="kiavi")

    def test_assign_is_idempotent(self):
        self.tracker.assign(self.checklist, "Appraisal", "d1")
        self.tracker.assign(self.checklist, "Appraisal", "d1")
        self.assertEqual(self.checklist.document_assignments, {"Appraisal": ["d1"]})

    def test_document_may_serve_many_requirements(self):
        self.tracker.assign(self.checklist, "Appraisal", "d1")
        self.tracker.assign(self.checklist, "Voided Check", "d1")
        self.assertEqual(
            self.tracker.requirements_for_document(self.checklist, "d1"), ["Appraisal", "Voided Check"]
        )

    def test_unassign_drops_empty_lists(self):
        self.tracker.assign(self.checklist, "Appraisal", "d1")
        self.tracker.unassign(self.checklist, "Appraisal", "d1")
        self.assertEqual(self.checklist.document_assignments, {})
        self.tracker.unassign(self.checklist, "Appraisal", "d1")

    def test_unassign_everywhere(self):
        self.tracker.assign(self.checklist, "Appraisal", "d1")
        self.tracker.assign(self.checklist, "Appraisal", "d2")
        self.tracker.assign(self.checklist, "Voided Check", "d1")
        self.tracker.unassign_everywhere(self.checklist, "d1")
        self.assertEqual(self.checklist.document_assignments, {"Appraisal": ["d2"]})

    def test_document_complete_follows_requirement(self):
        self.tracker.assign(self.checklist, "Appraisal", "d1")
        self.assertFalse(self.tracker.is_document_complete(self.checklist, "d1"))
        self.tracker.mark_complete(self.checklist, "Appraisal")
        self.assertTrue(self.tracker.is_document_complete(self.checklist, "d1"))
        self.assertFalse(self.tracker.is_document_complete(self.checklist, "d2"))

    def test_unassigned_documents_keep_order(self):
        self.tracker.assign(self.checklist, "Appraisal", "d2")
        self.assertEqual(self.tracker.unassigned_documents(self.checklist, ["d3", "d2", "d1"]), ["d3", "d1"])

    def test_assign_requires_document_id(self):
        with self.assertRaises(InvalidInputError):
            self.tracker.assign(self.checklist, "Appraisal", "")

    def test_summarize(self):
        self.tracker.assign(self.checklist, "Appraisal", "d1")
        self.tracker.mark_complete(self.checklist, "Appraisal")
        summary = self.tracker.summarize(self.checklist, ["d1", "d2"])
        self.assertEqual(summary.loan_id, "loan-1")
        self.assertEqual(summary.completed_document_ids, ["d1"])
        self.assertEqual(summary.unassigned_document_ids, ["d2"])
        self.assertNotIn("Appraisal", summary.missing)
        appraisal = next(g for g in summary.groups if g.category == "appraisal")
        self.assertEqual(appraisal.completed_count, 1)
        self.assertEqual(appraisal.items[0].document_ids, ["d1"])
        self.assertEqual(summary.completion_percentage, self.tracker.percent_complete(self.checklist))


if __name__ == "__main__":
    unittest.main()
