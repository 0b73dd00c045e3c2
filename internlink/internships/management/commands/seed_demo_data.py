import random
from datetime import timedelta

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction
from django.utils import timezone

from accounts import services as account_services
from backend.client import is_using_mock_auth
from backend.errors import ServiceError
from backend.gateway import Query, get_backend
from backoffice import services as backoffice_services
from internships import services as internship_services
from messaging import services as messaging_services


class Command(BaseCommand):
    help = "Seed demo data into the local store (organizations, interns, listings, applications, messages, reviews)."

    def add_arguments(self, parser):
        parser.add_argument("--prefix", type=str, default="demo")
        parser.add_argument("--organizations", type=int, default=4)
        parser.add_argument("--interns", type=int, default=8)
        parser.add_argument("--listings-per-organization", type=int, default=3)
        parser.add_argument("--applications-per-intern", type=int, default=2)
        parser.add_argument("--password", type=str, default="DemoPass123!")
        parser.add_argument("--seed", type=int, default=42)
        parser.add_argument("--wipe", action="store_true", help="Delete existing accounts whose email starts with prefix before seeding.")

    def _skills(self, rnd, minimum=2, maximum=4):
        pool = [
            "JavaScript",
            "React",
            "Python",
            "SQL",
            "Data Analysis",
            "Figma",
            "UI/UX Design",
            "Java",
            "Node.js",
            "Git",
            "Content Creation",
            "SEO",
        ]
        return sorted(rnd.sample(pool, rnd.randint(minimum, maximum)))

    def _wipe(self, store, prefix):
        backend = get_backend()
        rows = backend.fetch(Query("users", "id", "email").where(email__icontains=f"{prefix}_"))
        emails = [row["email"] for row in rows if row["email"].startswith(f"{prefix}_")]
        for email in emails:
            backend.delete(Query("users").where(email=email))
        removed = store.remove(emails)
        self.stdout.write(f"Wiped {len(emails)} users and {removed} mock accounts with prefix '{prefix}_'.")

    def _account(self, provider, email, password, name, user_type, **extra):
        """Sign up through the provider, or reuse the existing users row on re-runs."""
        try:
            return account_services.sign_up(
                provider, email=email, password=password, name=name, user_type=user_type, **extra
            )
        except ServiceError:
            existing = get_backend().fetch_one(Query("users").where(email=email))
            if existing is None:
                raise
            return existing

    @transaction.atomic
    def handle(self, *args, **opts):
        if not is_using_mock_auth():
            raise CommandError("seed_demo_data only runs against the local store; unset SUPABASE_URL first.")

        rnd = random.Random(opts["seed"])
        prefix = (opts["prefix"] or "demo").strip().lower()
        organizations_n = max(1, int(opts["organizations"]))
        interns_n = max(1, int(opts["interns"]))
        listings_per_org = max(1, int(opts["listings_per_organization"]))
        apps_per_intern = max(0, int(opts["applications_per_intern"]))
        password = opts["password"]

        provider = get_backend().identity(None)
        if opts["wipe"]:
            self._wipe(provider.store, prefix)

        company_names = ["TechCorp", "DataSystems", "BrightWave Media", "GreenLeaf Labs", "Northwind Health", "Orbit Finance"]
        industries = ["Technology", "Data & Analytics", "Media", "Environment", "Healthcare", "Finance"]
        listing_templates = [
            ("Frontend Developer Intern", "Build responsive interfaces and ship features with our product team."),
            ("Data Analyst Intern", "Turn product data into dashboards that guide decisions."),
            ("Marketing Intern", "Plan campaigns and write content for our community channels."),
            ("Backend Developer Intern", "Design APIs and keep our services healthy."),
            ("UX Design Intern", "Prototype user journeys and run usability sessions."),
            ("Operations Intern", "Streamline internal processes and reporting."),
        ]
        locations = ["San Francisco, CA", "New York, NY", "Austin, TX", "Remote", "Boston, MA", "Seattle, WA"]
        job_types = ["remote", "in-person", "hybrid"]
        intern_names = ["Sarah Johnson", "Michael Chen", "Priya Patel", "Diego Alvarez", "Emma Wilson", "Noah Kim", "Lena Fischer", "Omar Haddad"]

        listings = []
        org_creds, intern_creds = [], []

        for i in range(1, organizations_n + 1):
            company = company_names[(i - 1) % len(company_names)]
            email = f"{prefix}_org_{i}@example.com"
            user = self._account(provider, email, password, f"{company} Recruiting", "employer", company_name=f"{company} {i}")
            org_creds.append((email, password))
            account_services.update_employer_profile(
                user["id"],
                {
                    "company_description": "Hiring interns across engineering, data and marketing.",
                    "industry": industries[(i - 1) % len(industries)],
                    "website": "https://example.com",
                    "company_size": "51-200",
                },
            )
            if i % 2 == 0:
                backoffice_services.submit_organization(
                    user["id"],
                    {
                        "company_name": f"{company} {i}",
                        "industry": industries[(i - 1) % len(industries)],
                        "contact_name": f"{company} Recruiting",
                        "contact_email": email,
                    },
                )

            for j in range(listings_per_org):
                title, description = listing_templates[(i + j) % len(listing_templates)]
                job_type = rnd.choice(job_types)
                paid = rnd.random() > 0.25
                listings.append(
                    internship_services.create_job_listing(
                        {
                            "employer_id": user["id"],
                            "title": title,
                            "description": description,
                            "requirements": ["Currently enrolled in a degree program"],
                            "skills_required": self._skills(rnd),
                            "location": "Remote" if job_type == "remote" else rnd.choice(locations),
                            "job_type": job_type,
                            "duration": f"{rnd.choice([3, 4, 6])} months",
                            "stipend": f"${rnd.choice([1500, 1800, 2000, 2500]):,}/month" if paid else None,
                            "is_paid": paid,
                            "application_deadline": (timezone.localdate() + timedelta(days=rnd.randint(14, 60))).isoformat(),
                            "status": "active" if j < listings_per_org - 1 or rnd.random() > 0.3 else "draft",
                        }
                    )
                )

        active = [listing for listing in listings if listing["status"] == "active"]
        statuses = ["applied", "reviewing", "interviewing", "accepted", "rejected"]

        for i in range(1, interns_n + 1):
            name = intern_names[(i - 1) % len(intern_names)]
            email = f"{prefix}_intern_{i}@example.com"
            user = self._account(provider, email, password, name, "intern")
            intern_creds.append((email, password))
            account_services.update_intern_profile(
                user["id"],
                {
                    "skills": self._skills(rnd),
                    "interests": [rnd.choice(["Software Engineering", "Data Science", "Marketing", "Design"])],
                    "bio": f"{name.split()[0]} is looking for a hands-on internship.",
                    "location": rnd.choice(locations),
                },
            )

            for listing in rnd.sample(active, min(apps_per_intern, len(active))):
                status = rnd.choice(statuses)
                application = internship_services.create_application(
                    {
                        "intern_id": user["id"],
                        "job_id": listing["id"],
                        "cover_letter": internship_services.DEFAULT_COVER_LETTER,
                        "status": status,
                    }
                )
                messaging_services.send_message(
                    sender_id=listing["employer_id"],
                    receiver_id=user["id"],
                    subject=f"About {listing['title']}",
                    content="Thanks for applying! We'll be in touch about next steps.",
                    application_id=application["id"],
                )
                if status == "accepted":
                    internship_services.create_review(
                        {
                            "reviewer_id": listing["employer_id"],
                            "reviewee_id": user["id"],
                            "application_id": application["id"],
                            "rating": rnd.randint(4, 5),
                            "comment": "Great attitude and quick learner.",
                            "review_type": "employer_to_intern",
                        }
                    )

        admin_email = f"{prefix}_admin@example.com"
        self._account(provider, admin_email, password, "Platform Admin", "admin")
        provider.sign_out()

        self.stdout.write(self.style.SUCCESS("Seeded demo data successfully."))
        self.stdout.write(f"Organizations: {organizations_n}")
        self.stdout.write(f"Interns: {interns_n}")
        self.stdout.write(f"Listings: {len(listings)} ({len(active)} active)")
        self.stdout.write("")
        self.stdout.write("Sample credentials:")
        for email, pwd in org_creds[:2] + intern_creds[:2] + [(admin_email, password)]:
            self.stdout.write(f"  {email} / {pwd}")
