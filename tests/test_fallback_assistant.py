"""
Keyword routing, document gap detection and stage inference of the fallback assistant.
Run: python -m pytest tests/test_fallback_assistant.py -v
"""
import unittest

from schemas.records import DocumentRecord, LoanContext, LoanRecord, TaskRecord
from services.errors import InvalidLoanContextError
from services.fallback_assistant import (
    STAGE_CLOSING,
    STAGE_CONDITIONAL_APPROVAL,
    STAGE_INITIAL_SUBMISSION,
    FallbackAssistant,
    IntentRule,
    infer_stage,
    missing_document_categories,
)


def _doc(i, category, deleted=False):
    return DocumentRecord(id=f"d{i}", name=f"doc {i}.pdf", file_id=f"f{i}", category=category, deleted=deleted)


def _context(documents=(), tasks=()):
    loan = LoanRecord(
        id="loan-1",
        loan_number="1001",
        borrower_name="Maria Santos",
        property_address="123 Main St",
        loan_amount="$300,000",
        loan_type="DSCR",
        loan_purpose="purchase",
        funder="kiavi",
    )
    return LoanContext(loan=loan, documents=list(documents), tasks=list(tasks))


class TestInferStage(unittest.TestCase):
    def test_conditional_approval(self):
        self.assertEqual(infer_stage(6, 4), STAGE_CONDITIONAL_APPROVAL)

    def test_thresholds(self):
        self.assertEqual(infer_stage(0, 0), STAGE_INITIAL_SUBMISSION)
        self.assertEqual(infer_stage(5, 2), STAGE_INITIAL_SUBMISSION)
        self.assertEqual(infer_stage(5, 3), STAGE_CONDITIONAL_APPROVAL)
        self.assertEqual(infer_stage(10, 7), STAGE_CLOSING)
        self.assertEqual(infer_stage(10, 6), STAGE_CONDITIONAL_APPROVAL)


class TestMissingCategories(unittest.TestCase):
    def test_borrower_entity_counts_as_borrower(self):
        docs = [_doc(1, "borrower_entity"), _doc(2, "title")]
        self.assertEqual(missing_document_categories(docs), ["insurance"])

    def test_deleted_documents_do_not_count(self):
        self.assertEqual(missing_document_categories([_doc(1, "title", deleted=True)]), ["borrower", "title", "insurance"])


class TestFallbackAssistant(unittest.TestCase):
    def setUp(self):
        self.assistant = FallbackAssistant()

    def test_documents_query_reports_title_gap(self):
        reply = self.assistant.respond(_context([_doc(1, "borrower"), _doc(2, "insurance")]), "what documents do I need?")
        self.assertIn("Title Documents", reply.content)
        self.assertNotIn("Insurance Documents", reply.content)

    def test_checklist_when_nothing_missing(self):
        docs = [_doc(1, "borrower"), _doc(2, "title"), _doc(3, "insurance")]
        reply = self.assistant.respond(_context(docs), "Show me the checklist")
        self.assertIn("standard document checklist", reply.content)

    def test_first_matching_rule_wins(self):
        self.assertEqual(self.assistant.classify("email me the missing documents"), "documents")
        self.assertEqual(self.assistant.classify("what is the next step for this email"), "process")
        self.assertEqual(self.assistant.classify("explain the dscr ratio"), "dscr")
        self.assertEqual(self.assistant.classify("hello"), "general")

    def test_custom_rule_order(self):
        rules = (IntentRule(intent="email", keywords=("email",)), IntentRule(intent="documents", keywords=("document",)))
        self.assertEqual(FallbackAssistant(rules=rules).classify("email about documents"), "email")

    def test_process_uses_inferred_stage(self):
        docs = [_doc(i, "borrower") for i in range(6)]
        tasks = [TaskRecord(description=f"t{i}", completed=True) for i in range(4)]
        reply = self.assistant.respond(_context(docs, tasks), "What is the timeline?")
        self.assertIn("conditional approval phase", reply.content)
        self.assertEqual(reply.sources, ["process:conditional_approval"])

    def test_process_stage_ignores_deleted_documents(self):
        docs = [_doc(i, "borrower", deleted=i >= 4) for i in range(6)]
        tasks = [TaskRecord(description=f"t{i}", completed=True) for i in range(4)]
        reply = self.assistant.respond(_context(docs, tasks), "What is the timeline?")
        self.assertEqual(reply.sources, ["process:initial_submission"])

    def test_email_templates(self):
        self.assertIn("title commitment", self.assistant.respond(_context(), "draft an email to title").content)
        self.assertIn("insurance", self.assistant.respond(_context(), "insurance email please").content)

    def test_dscr_faq(self):
        reply = self.assistant.respond(_context(), "What is DSCR?")
        self.assertEqual(reply.sources, ["faq:what is dscr"])

    def test_general_summary(self):
        tasks = [TaskRecord(description="a"), TaskRecord(description="b", completed=True)]
        reply = self.assistant.respond(_context(tasks=tasks), "hello")
        self.assertIn("123 Main St", reply.content)
        self.assertIn("1 open tasks", reply.content)

    def test_none_context_raises(self):
        with self.assertRaises(InvalidLoanContextError):
            self.assistant.respond(None, "anything")


if __name__ == "__main__":
    unittest.main()
