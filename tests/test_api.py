"""
HTTP API against an in-memory SQLite database.
Run: python -m pytest tests/test_api.py -v
"""
import os
import unittest
import uuid

os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = ""

from fastapi.testclient import TestClient  # noqa: E402

from main import app  # noqa: E402


class ApiTestCase(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.client = TestClient(app)
        cls.client.__enter__()

    @classmethod
    def tearDownClass(cls):
        cls.client.__exit__(None, None, None)

    def create_loan(self, **overrides):
        body = {
            "loanNumber": f"T-{uuid.uuid4().hex[:8]}",
            "borrowerName": "Maria Santos",
            "propertyAddress": "123 Main St, Tampa, FL",
            "loanPurpose": "purchase",
            "funder": "kiavi",
            "processorId": "proc-1",
        }
        body.update(overrides)
        res = self.client.post("/api/loans", json=body)
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()

    def create_document(self, loan_id, name="Appraisal.pdf", size=100, **extra):
        res = self.client.post(
            f"/api/loans/{loan_id}/documents",
            json={"name": name, "fileId": f"file-{uuid.uuid4().hex[:6]}", "fileSize": size, **extra},
        )
        self.assertEqual(res.status_code, 201, res.text)
        return res.json()


class TestHealthAndRequirements(ApiTestCase):
    def test_health(self):
        self.assertEqual(self.client.get("/health").json(), {"status": "ok"})

    def test_categories(self):
        categories = self.client.get("/api/requirements/categories").json()
        self.assertEqual(categories[0], {"category": "borrower_entity", "displayName": "Borrower & Entity Documents"})
        self.assertEqual(len(categories), 8)

    def test_funder_requirements(self):
        data = self.client.get("/api/requirements/Roc Capital").json()
        self.assertEqual(data["funderKey"], "roc_capital")
        self.assertTrue(data["requirements"][0]["lenderSpecific"])
        self.assertTrue(data["groups"])

    def test_unknown_funder_gets_common_list(self):
        data = self.client.get("/api/requirements/nobody").json()
        self.assertIsNone(data["funderKey"])
        self.assertFalse(any(r["lenderSpecific"] for r in data["requirements"]))

    def test_funders(self):
        self.assertIn("kiavi", self.client.get("/api/requirements/funders").json())


class TestLoans(ApiTestCase):
    def test_crud(self):
        loan = self.create_loan()
        self.assertEqual(loan["status"], "in_progress")
        self.assertEqual(loan["completionPercentage"], 0)
        self.assertEqual(self.client.get(f"/api/loans/{loan['id']}").json()["loanNumber"], loan["loanNumber"])

        res = self.client.patch(f"/api/loans/{loan['id']}", json={"borrowerName": "Maria S.", "status": "closed"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["borrowerName"], "Maria S.")
        self.assertEqual(res.json()["status"], "closed")

        self.assertEqual(self.client.delete(f"/api/loans/{loan['id']}").status_code, 204)
        self.assertEqual(self.client.get(f"/api/loans/{loan['id']}").status_code, 404)

    def test_list_by_processor(self):
        processor = f"proc-{uuid.uuid4().hex[:6]}"
        loan = self.create_loan(processorId=processor)
        self.create_loan()
        listed = self.client.get("/api/loans", params={"processorId": processor}).json()
        self.assertEqual([l["id"] for l in listed], [loan["id"]])

    def test_duplicate_loan_number(self):
        loan = self.create_loan()
        res = self.client.post(
            "/api/loans",
            json={
                "loanNumber": loan["loanNumber"],
                "borrowerName": "X",
                "propertyAddress": "Y",
                "loanPurpose": "purchase",
                "funder": "kiavi",
            },
        )
        self.assertEqual(res.status_code, 409)

    def test_missing_fields_rejected(self):
        self.assertEqual(self.client.post("/api/loans", json={"borrowerName": "X"}).status_code, 422)

    def test_blank_funder_or_loan_number_rejected_on_update(self):
        loan = self.create_loan()
        for body in ({"funder": ""}, {"loanNumber": ""}):
            self.assertEqual(self.client.patch(f"/api/loans/{loan['id']}", json=body).status_code, 422)
        self.assertEqual(self.client.get(f"/api/loans/{loan['id']}").json()["funder"], loan["funder"])

    def test_delete_cascades_children(self):
        loan = self.create_loan()
        doc = self.create_document(loan["id"])
        self.client.post(f"/api/loans/{loan['id']}/tasks", json={"description": "Order appraisal"})
        self.assertEqual(self.client.delete(f"/api/loans/{loan['id']}").status_code, 204)
        self.assertEqual(self.client.patch(f"/api/documents/{doc['id']}", json={"status": "ok"}).status_code, 404)


class TestChecklist(ApiTestCase):
    def test_toggle_requirement_updates_percentage(self):
        loan = self.create_loan()
        res = self.client.patch(
            f"/api/loans/{loan['id']}/requirements", json={"requirementName": "Appraisal", "completed": True}
        )
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["completedRequirements"], ["Appraisal"])
        self.assertGreater(res.json()["completionPercentage"], 0)

        res = self.client.patch(
            f"/api/loans/{loan['id']}/requirements", json={"requirementName": "Appraisal", "completed": False}
        )
        self.assertEqual(res.json()["completedRequirements"], [])
        self.assertEqual(res.json()["completionPercentage"], 0)

    def test_unknown_requirement_rejected(self):
        loan = self.create_loan()
        res = self.client.patch(
            f"/api/loans/{loan['id']}/completed-requirements", json={"completedRequirements": ["Bogus"]}
        )
        self.assertEqual(res.status_code, 400)

    def test_replace_completed_requirements(self):
        loan = self.create_loan()
        res = self.client.patch(
            f"/api/loans/{loan['id']}/completed-requirements",
            json={"completedRequirements": ["Appraisal", "Voided Check", "Appraisal"]},
        )
        self.assertEqual(res.json()["completedRequirements"], ["Appraisal", "Voided Check"])

    def test_checklist_summary(self):
        loan = self.create_loan()
        doc = self.create_document(loan["id"])
        other = self.create_document(loan["id"], name="Voided Check.pdf")
        self.client.post(
            f"/api/loans/{loan['id']}/document-assignments/assign",
            json={"requirementName": "Appraisal", "documentId": doc["id"]},
        )
        self.client.patch(f"/api/loans/{loan['id']}/requirements", json={"requirementName": "Appraisal"})
        data = self.client.get(f"/api/loans/{loan['id']}/checklist").json()
        self.assertEqual(data["loanId"], loan["id"])
        self.assertEqual(data["completedDocumentIds"], [doc["id"]])
        self.assertEqual(data["unassignedDocumentIds"], [other["id"]])
        self.assertNotIn("Appraisal", data["missing"])
        self.assertIn("Confirm AMC appraisal meets Kiavi valuation guidelines", data["nextActions"])
        appraisal = next(g for g in data["groups"] if g["category"] == "appraisal")
        self.assertEqual(appraisal["items"][0]["documentIds"], [doc["id"]])
        self.assertTrue(appraisal["items"][0]["isComplete"])


class TestDocumentAssignments(ApiTestCase):
    def test_assign_unassign(self):
        loan = self.create_loan()
        doc = self.create_document(loan["id"])
        url = f"/api/loans/{loan['id']}/document-assignments"
        body = {"requirementName": "Appraisal", "documentId": doc["id"]}
        self.client.post(f"{url}/assign", json=body)
        res = self.client.post(f"{url}/assign", json=body)
        self.assertEqual(res.json()["documentAssignments"], {"Appraisal": [doc["id"]]})
        res = self.client.post(f"{url}/unassign", json=body)
        self.assertEqual(res.json()["documentAssignments"], {})

    def test_assign_unknown_document(self):
        loan = self.create_loan()
        res = self.client.post(
            f"/api/loans/{loan['id']}/document-assignments/assign",
            json={"requirementName": "Appraisal", "documentId": "doc-missing"},
        )
        self.assertEqual(res.status_code, 404)

    def test_replace_mapping(self):
        loan = self.create_loan()
        doc = self.create_document(loan["id"])
        url = f"/api/loans/{loan['id']}/document-assignments"
        res = self.client.patch(url, json={"documentAssignments": {"Appraisal": [doc["id"], doc["id"]], "Voided Check": []}})
        self.assertEqual(res.status_code, 200, res.text)
        self.assertEqual(res.json()["documentAssignments"], {"Appraisal": [doc["id"]]})
        res = self.client.patch(url, json={"documentAssignments": {"Appraisal": ["doc-nope"]}})
        self.assertEqual(res.status_code, 400)


class TestDocuments(ApiTestCase):
    def test_category_suggested_from_name(self):
        loan = self.create_loan()
        doc = self.create_document(loan["id"], name="Insurance Binder.pdf")
        self.assertEqual(doc["category"], "insurance")
        self.assertEqual(doc["suggestion"]["matchedRequirement"], "insurance_policy")

    def test_soft_delete_restore_and_assignment_cleanup(self):
        loan = self.create_loan()
        doc = self.create_document(loan["id"])
        self.client.post(
            f"/api/loans/{loan['id']}/document-assignments/assign",
            json={"requirementName": "Appraisal", "documentId": doc["id"]},
        )
        self.assertEqual(self.client.delete(f"/api/documents/{doc['id']}").status_code, 204)
        self.assertEqual(self.client.get(f"/api/loans/{loan['id']}/documents").json(), [])
        deleted = self.client.get(f"/api/loans/{loan['id']}/deleted-documents").json()
        self.assertEqual([d["id"] for d in deleted], [doc["id"]])
        self.assertEqual(self.client.get(f"/api/loans/{loan['id']}").json()["documentAssignments"], {})

        restored = self.client.patch(f"/api/documents/{doc['id']}/restore").json()
        self.assertFalse(restored["deleted"])

    def test_dedupe(self):
        loan = self.create_loan()
        first = self.create_document(loan["id"], name="Appraisal.pdf", size=500)
        self.create_document(loan["id"], name="Appraisal.pdf", size=500)
        self.create_document(loan["id"], name="Appraisal.pdf", size=900)
        res = self.client.post(f"/api/loans/{loan['id']}/documents/dedupe").json()
        self.assertEqual(res["removed"], 1)
        remaining = [d["id"] for d in self.client.get(f"/api/loans/{loan['id']}/documents").json()]
        self.assertIn(first["id"], remaining)
        self.assertEqual(len(remaining), 2)


class TestContactsAndTasks(ApiTestCase):
    def test_contact_email_draft(self):
        loan = self.create_loan()
        res = self.client.post(
            f"/api/loans/{loan['id']}/contacts",
            json={"name": "Sam Lee", "email": "sam@coastal.com", "role": "insurance"},
        )
        self.assertEqual(res.status_code, 201, res.text)
        contact = res.json()
        draft = self.client.get(f"/api/contacts/{contact['id']}/email-draft").json()
        self.assertEqual(draft["to"], "sam@coastal.com")
        self.assertIn("Insurance Requirements", draft["subject"])
        self.assertIn("123 Main St, Tampa, FL", draft["subject"])

    def test_contact_role_validated(self):
        loan = self.create_loan()
        res = self.client.post(f"/api/loans/{loan['id']}/contacts", json={"name": "X", "role": "plumber"})
        self.assertEqual(res.status_code, 422)

    def test_contact_update_delete(self):
        loan = self.create_loan()
        contact = self.client.post(f"/api/loans/{loan['id']}/contacts", json={"name": "Dana", "role": "title"}).json()
        updated = self.client.patch(f"/api/contacts/{contact['id']}", json={"isAnalyst": True}).json()
        self.assertTrue(updated["isAnalyst"])
        self.assertEqual(self.client.delete(f"/api/contacts/{contact['id']}").status_code, 204)
        self.assertEqual(self.client.get(f"/api/loans/{loan['id']}/contacts").json(), [])

    def test_tasks(self):
        loan = self.create_loan()
        task = self.client.post(
            f"/api/loans/{loan['id']}/tasks", json={"description": "Order appraisal", "priority": "high"}
        ).json()
        self.assertFalse(task["completed"])
        done = self.client.patch(f"/api/tasks/{task['id']}", json={"completed": True}).json()
        self.assertTrue(done["completed"])
        self.assertEqual(len(self.client.get(f"/api/loans/{loan['id']}/tasks").json()), 1)
        self.assertEqual(self.client.delete(f"/api/tasks/{task['id']}").status_code, 204)
        self.assertEqual(self.client.delete(f"/api/tasks/{task['id']}").status_code, 404)


class TestMessagesAndTemplates(ApiTestCase):
    def test_chat_uses_fallback_and_appends_log(self):
        loan = self.create_loan()
        res = self.client.post(f"/api/loans/{loan['id']}/messages", json={"content": "What documents do I need?"})
        self.assertEqual(res.status_code, 201, res.text)
        self.assertIn("Title Documents", res.json()["assistantMessage"]["content"])
        log = self.client.get(f"/api/loans/{loan['id']}/messages").json()
        self.assertEqual([m["role"] for m in log], ["user", "assistant"])

    def test_template_list_filter(self):
        templates = self.client.get("/api/templates", params={"category": "title"}).json()
        self.assertTrue(templates)
        self.assertTrue(all(t["category"] == "title" for t in templates))
        self.assertEqual(len(self.client.get("/api/templates").json()), 8)

    def test_render_template(self):
        loan = self.create_loan()
        res = self.client.post(
            f"/api/loans/{loan['id']}/templates/2/render", json={"context": {"COMPANY_NAME": "Adler Capital"}}
        )
        self.assertEqual(res.status_code, 200, res.text)
        data = res.json()
        self.assertIn("Dear Maria Santos", data["body"])
        self.assertIn("- Appraisal", data["body"])
        self.assertIn("Adler Capital", data["body"])
        self.assertNotIn("MISSING_DOCUMENTS", data["unresolved"])

    def test_render_unknown_template(self):
        loan = self.create_loan()
        self.assertEqual(self.client.post(f"/api/loans/{loan['id']}/templates/99/render").status_code, 404)


if __name__ == "__main__":
    unittest.main()
