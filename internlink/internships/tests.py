from django.test import SimpleTestCase
from django.urls import reverse

from backend.gateway import Query
from backend.testing import LocalBackendTestCase

from . import services
from .views import APPLIED_SESSION_KEY, dashboard_stats, display_status, filter_internships


def listing_values(employer_id, **overrides):
    values = {
        "employer_id": employer_id,
        "title": "Frontend Developer Intern",
        "description": "Build interfaces with React.",
        "skills_required": ["React", "JavaScript"],
        "location": "San Francisco, CA",
        "job_type": "in-person",
        "is_paid": True,
        "status": "active",
    }
    values.update(overrides)
    return values


class FilterInternshipsTests(SimpleTestCase):
    listings = [
        {
            "id": "1",
            "title": "Frontend Developer Intern",
            "description": "React work",
            "skills_required": ["React", "JavaScript"],
            "job_type": "remote",
            "is_paid": True,
            "location": "Remote",
            "employer_profiles": {"company_name": "TechCorp"},
        },
        {
            "id": "2",
            "title": "Marketing Intern",
            "description": "Campaigns",
            "skills_required": ["SEO"],
            "job_type": "in-person",
            "is_paid": False,
            "location": "New York, NY",
            "employer_profiles": {"company_name": "BrightWave"},
        },
    ]

    def ids(self, rows):
        return [row["id"] for row in rows]

    def test_search_matches_title_company_description_and_skills(self):
        self.assertEqual(self.ids(filter_internships(self.listings, q="frontend")), ["1"])
        self.assertEqual(self.ids(filter_internships(self.listings, q="brightwave")), ["2"])
        self.assertEqual(self.ids(filter_internships(self.listings, q="campaign")), ["2"])
        self.assertEqual(self.ids(filter_internships(self.listings, q="javascript")), ["1"])

    def test_checkbox_filters_narrow_results(self):
        self.assertEqual(self.ids(filter_internships(self.listings, remote=True)), ["1"])
        self.assertEqual(self.ids(filter_internships(self.listings, paid=True)), ["1"])
        self.assertEqual(self.ids(filter_internships(self.listings, location="new york, ny")), ["2"])
        self.assertEqual(self.ids(filter_internships(self.listings, skills=["SEO"])), ["2"])

    def test_no_filters_keeps_everything(self):
        self.assertEqual(self.ids(filter_internships(self.listings)), ["1", "2"])

    def test_applied_is_shown_as_pending(self):
        self.assertEqual(display_status("applied"), "pending")
        self.assertEqual(display_status("accepted"), "accepted")

    def test_dashboard_stats(self):
        listings = [{"status": "active"}, {"status": "draft"}, {"status": "active"}]
        applications = [{"status": "applied"}, {"status": "reviewing"}, {"status": "accepted"}]
        self.assertEqual(
            dashboard_stats(listings, applications),
            {"active_internships": 2, "total_applications": 3, "pending_reviews": 2, "accepted": 1},
        )


class JobListingServiceTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.org = self.sign_up("org@example.com", "Org", "employer", company_name="TechCorp")

    def test_only_active_listings_are_public(self):
        active = services.create_job_listing(listing_values(self.org["id"]))
        services.create_job_listing(listing_values(self.org["id"], title="Draft", status="draft"))
        services.create_job_listing(listing_values(self.org["id"], title="Closed", status="closed"))

        rows = services.get_active_job_listings()
        self.assertEqual([row["id"] for row in rows], [active["id"]])
        self.assertEqual(rows[0]["employer_profiles"]["company_name"], "TechCorp")
        self.assertEqual(len(services.get_job_listings_by_employer(self.org["id"])), 3)

    def test_missing_listing_reads_as_none(self):
        listing = services.create_job_listing(listing_values(self.org["id"]))
        services.delete_job_listing(listing["id"])
        self.assertIsNone(services.get_job_listing(listing["id"]))

    def test_employer_sees_applications_to_own_listings_only(self):
        mine = services.create_job_listing(listing_values(self.org["id"]))
        other_org = self.sign_up("other@example.com", "Other", "employer", company_name="Other")
        theirs = services.create_job_listing(listing_values(other_org["id"]))
        intern = self.sign_up("ada@example.com", "Ada")
        services.create_application({"intern_id": intern["id"], "job_id": mine["id"]})
        services.create_application({"intern_id": intern["id"], "job_id": theirs["id"]})

        rows = services.get_applications_by_employer(self.org["id"])
        self.assertEqual(len(rows), 1)
        self.assertEqual(rows[0]["status"], "applied")
        self.assertEqual(rows[0]["users"]["name"], "Ada")


class InternFlowTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        org = self.sign_up("org@example.com", "Org", "employer", company_name="TechCorp")
        self.listing = services.create_job_listing(listing_values(org["id"]))
        self.intern = self.sign_up("ada@example.com", "Ada")
        self.login("ada@example.com")

    def test_browse_lists_active_internships(self):
        resp = self.client.get(reverse("internship_list"))
        self.assertContains(resp, "Frontend Developer Intern")
        resp = self.client.get(reverse("internship_list"), {"q": "nothing matches this"})
        self.assertNotContains(resp, "Frontend Developer Intern")

    def test_apply_then_withdraw(self):
        resp = self.client.post(reverse("apply", args=[self.listing["id"]]), {"cover_letter": ""})
        self.assertRedirects(resp, reverse("applications"))

        apps = services.get_applications_by_intern(self.intern["id"])
        self.assertEqual(len(apps), 1)
        self.assertEqual(apps[0]["cover_letter"], services.DEFAULT_COVER_LETTER)
        self.assertIn(self.listing["id"], self.client.session[APPLIED_SESSION_KEY])

        resp = self.client.post(reverse("withdraw_application", args=[apps[0]["id"]]))
        self.assertRedirects(resp, reverse("applications"))
        self.assertEqual(services.get_applications_by_intern(self.intern["id"]), [])
        self.assertNotIn(self.listing["id"], self.client.session[APPLIED_SESSION_KEY])

    def test_second_apply_is_refused(self):
        url = reverse("apply", args=[self.listing["id"]])
        self.client.post(url, {"cover_letter": "Hello"})
        resp = self.client.post(url, {"cover_letter": "Again"}, follow=True)
        self.assertContains(resp, "You already applied to this internship.")
        self.assertEqual(self.backend.count(Query("applications").where(intern_id=self.intern["id"])), 1)

    def test_tracker_counts_applied_as_pending(self):
        self.client.post(reverse("apply", args=[self.listing["id"]]))
        resp = self.client.get(reverse("applications"), {"status": "pending"})
        self.assertEqual(resp.context["counts"]["pending"], 1)
        self.assertEqual(len(resp.context["applications"]), 1)

    def test_detail_of_unknown_listing_is_404(self):
        resp = self.client.get(reverse("internship_detail", args=["no-such-listing"]))
        self.assertEqual(resp.status_code, 404)

    def test_intern_cannot_reach_organization_pages(self):
        resp = self.client.get(reverse("organization_dashboard"))
        self.assertRedirects(resp, reverse("internship_list"))

    def test_report_listing(self):
        resp = self.client.post(reverse("report_internship", args=[self.listing["id"]]), {"reason": "spam"})
        self.assertRedirects(resp, reverse("internship_detail", args=[self.listing["id"]]))
        report = self.backend.fetch_one(Query("user_reports").where(reported_job_id=self.listing["id"]))
        self.assertEqual(report["status"], "pending")


class OrganizationFlowTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.org = self.sign_up("org@example.com", "Org", "employer", company_name="TechCorp")
        self.intern = self.sign_up("ada@example.com", "Ada")
        self.login("org@example.com")

    def test_post_internship(self):
        resp = self.client.post(
            reverse("post_internship"),
            {
                "title": "Data Analyst Intern",
                "description": "Dashboards",
                "skills_required": "SQL, Python",
                "job_type": "remote",
                "is_paid": "on",
            },
        )
        self.assertRedirects(resp, reverse("organization_dashboard"))
        listing = services.get_job_listings_by_employer(self.org["id"])[0]
        self.assertEqual(listing["status"], "active")
        self.assertEqual(listing["skills_required"], ["SQL", "Python"])

    def test_dashboard_stats_reflect_applications(self):
        listing = services.create_job_listing(listing_values(self.org["id"]))
        services.create_application({"intern_id": self.intern["id"], "job_id": listing["id"]})
        resp = self.client.get(reverse("organization_dashboard"))
        self.assertEqual(resp.context["stats"]["active_internships"], 1)
        self.assertEqual(resp.context["stats"]["total_applications"], 1)
        self.assertEqual(resp.context["stats"]["pending_reviews"], 1)

    def test_close_listing_hides_it_from_interns(self):
        listing = services.create_job_listing(listing_values(self.org["id"]))
        self.client.post(reverse("listing_status", args=[listing["id"]]), {"status": "closed"})
        self.assertEqual(services.get_active_job_listings(), [])

    def test_accept_application_then_review_intern(self):
        listing = services.create_job_listing(listing_values(self.org["id"]))
        app = services.create_application({"intern_id": self.intern["id"], "job_id": listing["id"]})

        resp = self.client.post(reverse("review_application", args=[app["id"]]), {"rating": "5"})
        self.assertRedirects(resp, reverse("organization_dashboard"))
        self.assertEqual(services.get_reviews_for_user(self.intern["id"]), [])

        self.client.post(reverse("application_status", args=[app["id"]]), {"status": "accepted"})
        self.assertEqual(services.get_application(app["id"])["status"], "accepted")

        self.client.post(reverse("review_application", args=[app["id"]]), {"rating": "5", "comment": "Great"})
        reviews = services.get_reviews_for_user(self.intern["id"])
        self.assertEqual(len(reviews), 1)
        self.assertEqual(reviews[0]["review_type"], "employer_to_intern")
        self.assertEqual(reviews[0]["reviewer"]["name"], "Org")

    def test_other_organizations_listing_is_404(self):
        other = self.sign_up("other@example.com", "Other", "employer", company_name="Other")
        listing = services.create_job_listing(listing_values(other["id"]))
        resp = self.client.post(reverse("listing_delete", args=[listing["id"]]))
        self.assertEqual(resp.status_code, 404)
