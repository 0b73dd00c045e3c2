from unittest import mock

from django.conf import settings
from django.urls import reverse

from backend.errors import AuthError
from backend.gateway import Query
from backend.mock_auth import MockAuthStore
from backend.testing import LocalBackendTestCase

from . import services
from .auth_context import AuthContext, CurrentUser
from .views import CONFIRM_EMAIL_MESSAGE


class SignUpTests(LocalBackendTestCase):
    def test_intern_sign_up_creates_profile_and_signs_in(self):
        resp = self.client.post(
            reverse("signup_intern"),
            {
                "name": "Ada Lovelace",
                "email": "ada@example.com",
                "password": "secret123",
                "confirm_password": "secret123",
                "skills": "Python, SQL",
                "field_of_interest": "tech",
                "agree_to_terms": "on",
            },
        )
        self.assertRedirects(resp, reverse("internship_list"))
        user = self.backend.fetch_one(Query("users").embed("intern_profiles").where(email="ada@example.com"))
        self.assertEqual(user["user_type"], "intern")
        self.assertEqual(user["intern_profiles"]["skills"], ["Python", "SQL"])
        self.assertEqual(user["intern_profiles"]["interests"], ["tech"])
        self.assertEqual(len(MockAuthStore().users()), 1)

    def test_organization_sign_up_queues_approval(self):
        resp = self.client.post(
            reverse("signup_organization"),
            {
                "organization_name": "Acme",
                "contact_name": "Rita",
                "email": "hr@acme.test",
                "password": "secret123",
                "confirm_password": "secret123",
                "agree_to_terms": "on",
            },
        )
        self.assertRedirects(resp, reverse("organization_dashboard"))
        approvals = self.backend.fetch(Query("organization_approvals").where(status="pending"))
        self.assertEqual([a["company_name"] for a in approvals], ["Acme"])

    def test_duplicate_email_shows_error(self):
        self.sign_up("ada@example.com", "Ada")
        resp = self.client.post(
            reverse("signup_intern"),
            {
                "name": "Ada Again",
                "email": "ada@example.com",
                "password": "secret123",
                "confirm_password": "secret123",
                "agree_to_terms": "on",
            },
        )
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "already exists")

    def test_sign_up_without_session_asks_for_email_confirmation(self):
        with mock.patch("accounts.auth_context.AuthContext.sign_up", return_value=None):
            resp = self.client.post(
                reverse("signup_organization"),
                {
                    "organization_name": "Acme",
                    "contact_name": "Rita",
                    "email": "hr@acme.test",
                    "password": "secret123",
                    "confirm_password": "secret123",
                    "agree_to_terms": "on",
                },
                follow=True,
            )
        self.assertRedirects(resp, reverse("home"))
        self.assertContains(resp, CONFIRM_EMAIL_MESSAGE)
        self.assertNotContains(resp, "No user logged in")

    def test_validation_rules(self):
        with self.assertRaises(AuthError):
            services.validate_sign_up("", "secret123", "Ada", "intern")
        with self.assertRaisesMessage(AuthError, "at least 6 characters"):
            services.validate_sign_up("a@example.com", "123", "Ada", "intern")
        with self.assertRaisesMessage(AuthError, "Company name is required"):
            services.validate_sign_up("a@example.com", "secret123", "Ada", "employer")


class SignInTests(LocalBackendTestCase):
    def test_unknown_email_is_rejected_and_session_unchanged(self):
        resp = self.login("nobody@example.com")
        self.assertEqual(resp.status_code, 200)
        self.assertContains(resp, "Invalid email or password")
        resp = self.client.get(reverse("profile"))
        self.assertRedirects(resp, reverse("home"))

    def test_anonymous_visit_creates_no_session(self):
        self.client.get(reverse("home"))
        self.assertNotIn(settings.SESSION_COOKIE_NAME, self.client.cookies)

    def test_sign_in_cycles_the_session_key(self):
        self.sign_up("ada@example.com", "Ada")
        key = self.client.session.session_key
        self.login("ada@example.com")
        self.assertNotEqual(self.client.session.session_key, key)
        self.assertEqual(self.client.get(reverse("profile")).status_code, 200)

    def test_sign_in_lands_on_role_home(self):
        self.sign_up("org@example.com", "Org", "employer", company_name="Acme")
        resp = self.login("org@example.com")
        self.assertRedirects(resp, reverse("organization_dashboard"))

    def test_banned_user_cannot_sign_in(self):
        user = self.sign_up("ada@example.com", "Ada")
        self.backend.update(Query("users").where(id=user["id"]), {"status": "banned"})
        resp = self.login("ada@example.com")
        self.assertEqual(resp.status_code, 200)
        resp = self.client.get(reverse("applications"))
        self.assertRedirects(resp, reverse("home"))

    def test_sign_out(self):
        self.sign_up("ada@example.com", "Ada")
        self.login("ada@example.com")
        resp = self.client.post(reverse("signout"))
        self.assertRedirects(resp, reverse("home"))
        self.assertRedirects(self.client.get(reverse("profile")), reverse("home"))


class RoutingTests(LocalBackendTestCase):
    def test_signed_out_user_is_sent_home(self):
        for name in ("internship_list", "applications", "organization_dashboard", "profile", "inbox"):
            self.assertRedirects(self.client.get(reverse(name)), reverse("home"))

    def test_public_pages_render(self):
        for name in ("home", "signup", "signup_intern", "signup_organization", "password_reset"):
            self.assertEqual(self.client.get(reverse(name)).status_code, 200)

    def test_organization_on_home_goes_to_dashboard(self):
        self.sign_up("org@example.com", "Org", "employer", company_name="Acme")
        self.login("org@example.com")
        self.assertRedirects(self.client.get(reverse("home")), reverse("organization_dashboard"))

    def test_intern_on_organization_pages_goes_to_internships(self):
        self.sign_up("ada@example.com", "Ada")
        self.login("ada@example.com")
        self.assertRedirects(self.client.get(reverse("organization_dashboard")), reverse("internship_list"))


class ProfileTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.user = self.sign_up("ada@example.com", "Ada")
        self.login("ada@example.com")

    def test_update_profile_patches_base_and_extension(self):
        resp = self.client.post(reverse("profile"), {"action": "save", "name": "Ada L", "skills": "Python, Go"})
        self.assertRedirects(resp, reverse("profile"))
        row = services.get_user_profile(self.user["auth_user_id"])
        self.assertEqual(row["name"], "Ada L")
        self.assertEqual(row["intern_profiles"]["skills"], ["Python", "Go"])

    def test_add_and_remove_education(self):
        self.client.post(
            reverse("profile"),
            {"action": "add_education", "institution": "MIT", "degree": "BSc", "field": "CS"},
        )
        education = services.get_intern_profile(self.user["id"])["education"]
        self.assertEqual(education[0]["institution"], "MIT")

        self.client.post(reverse("profile"), {"action": "remove_education", "entry_id": education[0]["id"]})
        self.assertEqual(services.get_intern_profile(self.user["id"])["education"], [])


class AuthContextTests(LocalBackendTestCase):
    def test_context_follows_provider_transitions(self):
        provider = self.backend.identity()
        context = AuthContext(provider).initialize()
        self.assertIsNone(context.user)
        self.assertFalse(context.loading)

        seen = []
        context.subscribe(seen.append)
        user = context.sign_up("ada@example.com", "secret123", "Ada", role="intern")
        self.assertIsInstance(user, CurrentUser)
        self.assertTrue(user.is_intern)

        context.sign_out()
        self.assertIsNone(context.user)
        self.assertIsNone(seen[-1])
        context.teardown()

    def test_update_profile_without_user_fails(self):
        context = AuthContext(self.backend.identity()).initialize()
        with self.assertRaises(AuthError):
            context.update_profile(base={"name": "x"})
