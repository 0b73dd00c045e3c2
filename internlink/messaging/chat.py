"""
Demo chat widget state.

Contacts and opening messages are fixed demo data; sent messages and the
open/minimized windows live in the browser session. Nothing here touches the
backend.
"""
from django.utils import timezone

AUTO_REPLY = "Thanks for your message! I'll get back to you shortly."
SESSION_KEY = "chat_widget"

CONTACTS = [
    {"id": "org1", "name": "TechCorp HR", "role": "organization", "last_message": "How about we schedule a call for tomorrow at 2 PM?"},
    {"id": "org2", "name": "DataSystems Recruiting", "role": "organization", "last_message": "Thanks for your interest in our data science internship!"},
    {"id": "intern1", "name": "Sarah Johnson", "role": "intern", "last_message": "I'd love to learn more about the frontend position."},
    {"id": "intern2", "name": "Michael Chen", "role": "intern", "last_message": "Thank you for considering my application."},
]

OPENING_MESSAGES = [
    {"sender": "contact", "content": "Hi! I saw your application for our internship position. I'd love to discuss the opportunity with you."},
    {"sender": "me", "content": "Thank you for reaching out! I'm very excited about this opportunity. When would be a good time to discuss the details?"},
    {"sender": "contact", "content": "How about we schedule a call for tomorrow at 2 PM? I can share more details about the role and answer any questions you might have."},
]


def get_contact(contact_id):
    return next((c for c in CONTACTS if c["id"] == contact_id), None)


def search_contacts(term="") -> list:
    term = (term or "").strip().lower()
    if not term:
        return list(CONTACTS)
    return [c for c in CONTACTS if term in c["name"].lower()]


class ChatSession:
    def __init__(self, session):
        self.session = session
        self.state = session.get(SESSION_KEY) or {"open": [], "minimized": [], "transcripts": {}}

    def _save(self):
        self.session[SESSION_KEY] = self.state
        self.session.modified = True

    @property
    def open_windows(self) -> list:
        return [c for c in (get_contact(cid) for cid in self.state["open"]) if c]

    def is_minimized(self, contact_id) -> bool:
        return contact_id in self.state["minimized"]

    def transcript(self, contact_id) -> list:
        if contact_id not in self.state["transcripts"]:
            return [dict(m) for m in OPENING_MESSAGES]
        return list(self.state["transcripts"][contact_id])

    def open(self, contact_id) -> None:
        if contact_id not in self.state["open"]:
            self.state["open"].append(contact_id)
        if contact_id in self.state["minimized"]:
            self.state["minimized"].remove(contact_id)
        self._save()

    def toggle_minimize(self, contact_id) -> None:
        if contact_id in self.state["minimized"]:
            self.state["minimized"].remove(contact_id)
        else:
            self.state["minimized"].append(contact_id)
        self._save()

    def close(self, contact_id) -> None:
        for key in ("open", "minimized"):
            if contact_id in self.state[key]:
                self.state[key].remove(contact_id)
        self._save()

    def send(self, contact_id, content: str) -> list:
        now = timezone.now().isoformat()
        messages = self.transcript(contact_id)
        messages.append({"sender": "me", "content": content, "sent_at": now})
        messages.append({"sender": "contact", "content": AUTO_REPLY, "sent_at": now})
        self.state["transcripts"][contact_id] = messages
        self._save()
        return messages
