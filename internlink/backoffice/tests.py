from unittest import mock

from django.urls import reverse

from backend.errors import AdminError
from backend.gateway import Query
from backend.local import PROCEDURES
from backend.testing import LocalBackendTestCase
from internships import services as internship_services

from . import services


class AdminTestCase(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.admin = self.sign_up("root@example.com", "Root", "admin")
        self.org = self.sign_up("org@example.com", "Org", "employer", company_name="Acme")
        self.intern = self.sign_up("ada@example.com", "Ada Lovelace")

    def audit_rows(self, **lookups):
        return self.backend.fetch(Query("audit_logs").where(**lookups))


class ApprovalTests(AdminTestCase):
    def setUp(self):
        super().setUp()
        self.approval = services.submit_organization(
            self.org["id"], {"company_name": "Acme", "contact_name": "Rita", "contact_email": "org@example.com"}
        )

    def test_approve_removes_from_queue_and_writes_one_audit_row(self):
        row = services.approve_organization(self.approval["id"], self.admin["id"], "Looks legit")
        self.assertEqual(row["status"], "approved")
        self.assertEqual(row["admin_notes"], "Looks legit")
        self.assertEqual(services.get_pending_approvals(), [])

        audit = self.audit_rows(action_type="approve_organization", target_id=self.approval["id"])
        self.assertEqual(len(audit), 1)
        self.assertEqual(audit[0]["old_values"], {"status": "pending"})
        self.assertEqual(audit[0]["new_values"], {"status": "approved", "notes": "Looks legit"})
        self.assertEqual(audit[0]["admin_id"], self.admin["id"])

    def test_processed_approval_cannot_move_again(self):
        services.reject_organization(self.approval["id"], self.admin["id"], "Incomplete details")
        with self.assertRaisesMessage(AdminError, "already been processed"):
            services.approve_organization(self.approval["id"], self.admin["id"])
        self.assertEqual(len(self.audit_rows(target_id=self.approval["id"])), 1)

    def test_audit_failure_does_not_undo_the_approval(self):
        with mock.patch.dict(PROCEDURES, clear=True):
            with self.assertLogs("backoffice.services", level="ERROR"):
                row = services.approve_organization(self.approval["id"], self.admin["id"])
        self.assertEqual(row["status"], "approved")
        self.assertEqual(self.audit_rows(), [])

    def test_pending_queue_embeds_submitter(self):
        pending = services.get_pending_approvals()
        self.assertEqual(len(pending), 1)
        self.assertEqual(pending[0]["users"]["email"], "org@example.com")


class UserManagementTests(AdminTestCase):
    def test_listing_excludes_admins_and_searches(self):
        emails = {row["email"] for row in services.get_all_users()}
        self.assertEqual(emails, {"org@example.com", "ada@example.com"})
        self.assertEqual([row["name"] for row in services.get_all_users(search="lovelace")], ["Ada Lovelace"])

    def test_paging(self):
        self.assertEqual(len(services.get_all_users(page=1, limit=1)), 1)
        self.assertEqual(len(services.get_all_users(page=3, limit=1)), 0)

    def test_ban_then_unban(self):
        banned = services.ban_user(self.intern["id"], self.admin["id"], "Spam")
        self.assertEqual(banned["status"], "banned")
        self.assertEqual(banned["ban_reason"], "Spam")

        active = services.unban_user(self.intern["id"], self.admin["id"])
        self.assertEqual(active["status"], "active")
        self.assertIsNone(active["ban_reason"])
        actions = sorted(row["action_type"] for row in self.audit_rows(target_id=self.intern["id"]))
        self.assertEqual(actions, ["ban_user", "unban_user"])

    def test_ban_unknown_user_fails(self):
        with self.assertRaises(AdminError):
            services.ban_user("00000000-0000-0000-0000-000000000000", self.admin["id"], "Spam")

    def test_delete_user_keeps_snapshot_in_audit(self):
        services.delete_user(self.intern["id"], self.admin["id"])
        self.assertIsNone(self.backend.fetch_one(Query("users").where(id=self.intern["id"])))
        audit = self.audit_rows(action_type="delete_user")
        self.assertEqual(audit[0]["old_values"]["email"], "ada@example.com")


class JobAndReportTests(AdminTestCase):
    def setUp(self):
        super().setUp()
        self.job = internship_services.create_job_listing(
            {"employer_id": self.org["id"], "title": "Data Intern", "description": "SQL work", "status": "active"}
        )

    def test_moderate_job(self):
        row = services.moderate_job(self.job["id"], self.admin["id"], "flagged", "Check stipend")
        self.assertEqual(row["moderation_status"], "flagged")
        with self.assertRaises(AdminError):
            services.moderate_job(self.job["id"], self.admin["id"], "deleted")

    def test_job_listing_embeds_employer(self):
        rows = services.get_all_job_listings(search="data")
        self.assertEqual(rows[0]["employer_profiles"]["company_name"], "Acme")
        self.assertEqual(rows[0]["employer_profiles"]["users"]["email"], "org@example.com")

    def test_report_lifecycle(self):
        report = services.submit_report(self.intern["id"], "scam", reported_job_id=self.job["id"])
        rows = services.get_all_reports(status="pending")
        self.assertEqual(rows[0]["reporter"]["name"], "Ada Lovelace")
        self.assertEqual(rows[0]["reported_job"]["title"], "Data Intern")

        handled = services.handle_report(report["id"], self.admin["id"], "resolved", "Listing removed")
        self.assertEqual(handled["status"], "resolved")
        self.assertEqual(services.get_all_reports(status="pending"), [])
        with self.assertRaises(AdminError):
            services.handle_report(report["id"], self.admin["id"], "ignored")


class AnalyticsTests(AdminTestCase):
    def test_dashboard_metrics(self):
        job = internship_services.create_job_listing(
            {"employer_id": self.org["id"], "title": "Data Intern", "description": "SQL", "status": "active"}
        )
        internship_services.create_job_listing(
            {"employer_id": self.org["id"], "title": "Draft", "description": "Later", "status": "draft"}
        )
        internship_services.create_application({"intern_id": self.intern["id"], "job_id": job["id"]})
        services.submit_organization(self.org["id"], {"company_name": "Acme", "contact_name": "Rita", "contact_email": "o@x.com"})

        metrics = services.get_dashboard_metrics()
        self.assertEqual(metrics["total_users"], 2)
        self.assertEqual(metrics["total_interns"], 1)
        self.assertEqual(metrics["total_employers"], 1)
        self.assertEqual(metrics["total_jobs"], 2)
        self.assertEqual(metrics["active_jobs"], 1)
        self.assertEqual(metrics["total_applications"], 1)
        self.assertEqual(metrics["pending_approvals"], 1)
        self.assertEqual(metrics["pending_reports"], 0)

        trends = services.get_application_trends()
        self.assertEqual(sum(day["applications"] for day in trends), 1)

    def test_trends_accept_hosted_timestamp_formats(self):
        rows = [
            {"applied_at": "2024-05-01T10:00:00.12345Z"},
            {"applied_at": "2024-05-01T11:30:00+00:00"},
            {"applied_at": "2024-05-02T09:00:00Z"},
        ]
        with mock.patch.object(self.backend, "fetch", return_value=rows):
            trends = services.get_application_trends()
        self.assertEqual(
            trends, [{"date": "2024-05-01", "applications": 2}, {"date": "2024-05-02", "applications": 1}]
        )

    def test_audit_log_filters(self):
        services.ban_user(self.intern["id"], self.admin["id"], "Spam")
        services.unban_user(self.intern["id"], self.admin["id"])
        rows = services.get_audit_logs(action_type="ban_user")
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["admin"]["name"], "Root")


class BackofficeViewTests(AdminTestCase):
    def test_admin_pages_require_an_admin(self):
        self.assertRedirects(self.client.get(reverse("admin_dashboard")), reverse("admin_login"))
        self.login("ada@example.com")
        self.assertRedirects(self.client.get(reverse("admin_users")), reverse("admin_login"))

    def test_non_admin_is_signed_out_at_admin_login(self):
        resp = self.client.post(reverse("admin_login"), {"email": "ada@example.com", "password": "secret123"})
        self.assertContains(resp, "This account does not have admin access.")
        self.assertRedirects(self.client.get(reverse("applications")), reverse("home"))

    def test_admin_approves_through_the_queue(self):
        approval = services.submit_organization(
            self.org["id"], {"company_name": "Acme", "contact_name": "Rita", "contact_email": "org@example.com"}
        )
        resp = self.client.post(reverse("admin_login"), {"email": "root@example.com", "password": "secret123"})
        self.assertRedirects(resp, reverse("admin_dashboard"))

        resp = self.client.post(reverse("admin_approvals"), {"approval_id": approval["id"], "decision": "approve"})
        self.assertRedirects(resp, reverse("admin_approvals"))
        audit = self.audit_rows(target_id=approval["id"])
        self.assertEqual(audit[0]["new_values"]["notes"], "Organization approved by admin")

        resp = self.client.post(reverse("admin_approvals"), {"approval_id": approval["id"], "decision": "reject"}, follow=True)
        self.assertContains(resp, "Failed to process approval. Please try again.")

    def test_ban_requires_reason(self):
        self.client.post(reverse("admin_login"), {"email": "root@example.com", "password": "secret123"})
        resp = self.client.post(reverse("admin_users"), {"user_id": self.intern["id"], "action": "ban"}, follow=True)
        self.assertContains(resp, "A reason is required to ban a user.")
        self.assertEqual(self.backend.fetch_one(Query("users").where(id=self.intern["id"]))["status"], "active")
