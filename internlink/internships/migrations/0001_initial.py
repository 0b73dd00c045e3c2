# Generated manually to mirror the hosted job_listings / applications / reviews tables
from django.db import migrations, models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="JobListing",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("title", models.CharField(max_length=255)),
                ("description", models.TextField()),
                ("requirements", models.JSONField(blank=True, default=list)),
                ("skills_required", models.JSONField(blank=True, default=list)),
                ("location", models.CharField(blank=True, default="", max_length=255)),
                ("job_type", models.CharField(choices=[("remote", "Remote"), ("in-person", "In person"), ("hybrid", "Hybrid")], default="in-person", max_length=20)),
                ("duration", models.CharField(blank=True, default="", max_length=100)),
                ("stipend", models.CharField(blank=True, max_length=100, null=True)),
                ("is_paid", models.BooleanField(default=True)),
                ("application_deadline", models.DateField(blank=True, null=True)),
                ("start_date", models.DateField(blank=True, null=True)),
                ("end_date", models.DateField(blank=True, null=True)),
                ("status", models.CharField(choices=[("active", "Active"), ("closed", "Closed"), ("draft", "Draft")], default="active", max_length=20)),
                ("moderation_status", models.CharField(choices=[("pending", "Pending"), ("approved", "Approved"), ("rejected", "Rejected"), ("flagged", "Flagged")], default="pending", max_length=20)),
                ("moderation_notes", models.TextField(blank=True, null=True)),
                ("moderated_by", models.UUIDField(blank=True, null=True)),
                ("moderated_at", models.DateTimeField(blank=True, null=True)),
                ("posted_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("employer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="job_listings", to="accounts.user")),
            ],
            options={"db_table": "job_listings", "ordering": ["-posted_at"]},
        ),
        migrations.CreateModel(
            name="Application",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("status", models.CharField(choices=[("applied", "Applied"), ("reviewing", "Reviewing"), ("interviewing", "Interviewing"), ("accepted", "Accepted"), ("rejected", "Rejected"), ("withdrawn", "Withdrawn")], default="applied", max_length=20)),
                ("cover_letter", models.TextField(blank=True, null=True)),
                ("resume_url", models.URLField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("applied_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("intern", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to="accounts.user")),
                ("job", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to="internships.joblisting")),
            ],
            options={"db_table": "applications", "ordering": ["-applied_at"]},
        ),
        migrations.CreateModel(
            name="Review",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("rating", models.PositiveSmallIntegerField(validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(5)])),
                ("comment", models.TextField(blank=True, null=True)),
                ("review_type", models.CharField(choices=[("intern_to_employer", "Intern to employer"), ("employer_to_intern", "Employer to intern")], max_length=30)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("application", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews", to="internships.application")),
                ("reviewee", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews_received", to="accounts.user")),
                ("reviewer", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="reviews_given", to="accounts.user")),
            ],
            options={"db_table": "reviews", "ordering": ["-created_at"]},
        ),
    ]
