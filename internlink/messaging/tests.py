from django.test import SimpleTestCase
from django.urls import reverse

from backend.testing import LocalBackendTestCase
from internships import services as internship_services

from . import services
from .chat import AUTO_REPLY, OPENING_MESSAGES, SESSION_KEY, search_contacts
from .views import PERMISSION_SESSION_KEY, _conversations


class ConversationGroupingTests(SimpleTestCase):
    def test_groups_by_counterpart_and_counts_unread(self):
        rows = [
            {"id": "3", "sender_id": "b", "receiver_id": "me", "is_read": False, "sender": {"name": "B"}},
            {"id": "2", "sender_id": "me", "receiver_id": "b", "is_read": False, "receiver": {"name": "B"}},
            {"id": "1", "sender_id": "b", "receiver_id": "me", "is_read": True, "sender": {"name": "B"}},
            {"id": "0", "sender_id": "c", "receiver_id": "me", "is_read": False, "sender": {"name": "C"}},
        ]
        threads = _conversations("me", rows)
        self.assertEqual([t["user_id"] for t in threads], ["b", "c"])
        self.assertEqual(threads[0]["latest"]["id"], "3")
        self.assertEqual(threads[0]["unread"], 1)

    def test_contact_search(self):
        self.assertEqual([c["id"] for c in search_contacts("tech")], ["org1"])
        self.assertEqual(len(search_contacts("")), 4)


class MessageServiceTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.ada = self.sign_up("ada@example.com", "Ada")
        self.org = self.sign_up("org@example.com", "Org", "employer", company_name="TechCorp")

    def test_conversation_contains_both_directions_oldest_first(self):
        services.send_message(self.ada["id"], self.org["id"], "Hello")
        services.send_message(self.org["id"], self.ada["id"], "Hi Ada", subject="Re: Hello")
        other = self.sign_up("x@example.com", "X")
        services.send_message(other["id"], self.ada["id"], "Unrelated")

        thread = services.get_conversation(self.ada["id"], self.org["id"])
        self.assertEqual([m["content"] for m in thread], ["Hello", "Hi Ada"])
        self.assertEqual(thread[1]["sender"]["name"], "Org")
        self.assertEqual(len(services.get_messages_by_user(self.ada["id"])), 3)

    def test_only_the_receiver_can_mark_read(self):
        message = services.send_message(self.ada["id"], self.org["id"], "Hello")
        self.assertEqual(services.mark_as_read(message["id"], reader_id=self.ada["id"]), [])
        rows = services.mark_as_read(message["id"], reader_id=self.org["id"])
        self.assertTrue(rows[0]["is_read"])

    def test_receiver_subscription_sees_new_messages(self):
        seen = []
        cancel = services.subscribe_to_messages(self.org["id"], seen.append)
        services.send_message(self.ada["id"], self.org["id"], "Hello")
        services.send_message(self.org["id"], self.ada["id"], "Not for the org feed")
        cancel()
        self.assertEqual([c.row["content"] for c in seen], ["Hello"])

    def test_notifications_for_new_applications_and_status_changes(self):
        listing = internship_services.create_job_listing(
            {"employer_id": self.org["id"], "title": "Data Intern", "description": "SQL", "status": "active"}
        )
        employer_seen, intern_seen = [], []
        cancel_employer = services.subscribe_to_user_notifications(self.org["id"], employer_seen.append)
        cancel_intern = services.subscribe_to_user_notifications(self.ada["id"], intern_seen.append)

        app = internship_services.create_application({"intern_id": self.ada["id"], "job_id": listing["id"]})
        internship_services.update_application_status(app["id"], "reviewing")
        internship_services.update_application_status(app["id"], "reviewing", notes="same status")
        cancel_employer()
        cancel_intern()

        self.assertEqual([n["message"] for n in employer_seen], ["New application received for Data Intern"])
        self.assertEqual([n["message"] for n in intern_seen], ["Application status changed to reviewing"])


class InboxViewTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.ada = self.sign_up("ada@example.com", "Ada")
        self.org = self.sign_up("org@example.com", "Org", "employer", company_name="TechCorp")
        self.login("ada@example.com")

    def test_send_from_conversation_page(self):
        url = reverse("conversation", args=[self.org["id"]])
        resp = self.client.post(url, {"subject": "Question", "content": "Is the role remote?"})
        self.assertRedirects(resp, url)
        self.assertContains(self.client.get(reverse("inbox")), "Is the role remote?")

    def test_opening_conversation_marks_received_messages_read(self):
        message = services.send_message(self.org["id"], self.ada["id"], "Welcome!")
        self.client.get(reverse("conversation", args=[self.org["id"]]))
        thread = services.get_conversation(self.ada["id"], self.org["id"])
        self.assertEqual(thread[0]["id"], message["id"])
        self.assertTrue(thread[0]["is_read"])

    def test_unknown_counterpart_is_404(self):
        resp = self.client.get(reverse("conversation", args=["not-a-user"]))
        self.assertEqual(resp.status_code, 404)


class ChatWidgetTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.sign_up("ada@example.com", "Ada")
        self.login("ada@example.com")

    def test_send_appends_message_and_auto_reply(self):
        url = reverse("chat_window", args=["org1"])
        resp = self.client.post(url, {"content": "Sounds good!"})
        self.assertRedirects(resp, url)

        transcript = self.client.session[SESSION_KEY]["transcripts"]["org1"]
        self.assertEqual(len(transcript), len(OPENING_MESSAGES) + 2)
        self.assertEqual(transcript[-2]["content"], "Sounds good!")
        self.assertEqual(transcript[-1]["content"], AUTO_REPLY)

    def test_minimize_and_close_windows(self):
        self.client.get(reverse("chat_window", args=["org2"]))
        self.client.post(reverse("chat_minimize", args=["org2"]))
        self.assertEqual(self.client.session[SESSION_KEY]["minimized"], ["org2"])
        self.client.post(reverse("chat_close", args=["org2"]))
        self.assertEqual(self.client.session[SESSION_KEY]["open"], [])

    def test_unknown_contact_is_404(self):
        self.assertEqual(self.client.get(reverse("chat_window", args=["nobody"])).status_code, 404)


class NotificationViewTests(LocalBackendTestCase):
    def setUp(self):
        super().setUp()
        self.sign_up("ada@example.com", "Ada")
        self.login("ada@example.com")

    def test_permission_state_is_stored_in_session(self):
        resp = self.client.post(reverse("notifications_permission"), {"permission": "granted"})
        self.assertEqual(resp.json(), {"permission": "granted"})
        self.assertEqual(self.client.session[PERMISSION_SESSION_KEY], "granted")

    def test_unknown_permission_state_is_rejected(self):
        resp = self.client.post(reverse("notifications_permission"), {"permission": "maybe"})
        self.assertEqual(resp.status_code, 400)
