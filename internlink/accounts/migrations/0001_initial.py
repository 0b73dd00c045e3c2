# Generated manually to mirror the hosted users / profile tables
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone
import uuid


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="User",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("auth_user_id", models.CharField(max_length=64, unique=True)),
                ("user_type", models.CharField(choices=[("intern", "Intern"), ("employer", "Employer"), ("admin", "Admin")], default="intern", max_length=20)),
                ("name", models.CharField(max_length=255)),
                ("email", models.EmailField(max_length=254)),
                ("profile_picture", models.URLField(blank=True, null=True)),
                ("status", models.CharField(choices=[("active", "Active"), ("banned", "Banned")], default="active", max_length=20)),
                ("banned_at", models.DateTimeField(blank=True, null=True)),
                ("banned_by", models.UUIDField(blank=True, null=True)),
                ("ban_reason", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"db_table": "users", "ordering": ["-created_at"]},
        ),
        migrations.CreateModel(
            name="InternProfile",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("resume_url", models.URLField(blank=True, null=True)),
                ("skills", models.JSONField(blank=True, default=list)),
                ("interests", models.JSONField(blank=True, default=list)),
                ("availability_start", models.DateField(blank=True, null=True)),
                ("availability_end", models.DateField(blank=True, null=True)),
                ("education", models.JSONField(blank=True, default=list)),
                ("experience", models.JSONField(blank=True, default=list)),
                ("bio", models.TextField(blank=True, null=True)),
                ("location", models.CharField(blank=True, max_length=255, null=True)),
                ("phone", models.CharField(blank=True, max_length=30, null=True)),
                ("linkedin_url", models.URLField(blank=True, null=True)),
                ("github_url", models.URLField(blank=True, null=True)),
                ("portfolio_url", models.URLField(blank=True, null=True)),
                ("gpa", models.FloatField(blank=True, null=True)),
                ("graduation_date", models.DateField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="intern_profile", to="accounts.user")),
            ],
            options={"db_table": "intern_profiles"},
        ),
        migrations.CreateModel(
            name="EmployerProfile",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("company_name", models.CharField(max_length=255)),
                ("company_description", models.TextField(blank=True, null=True)),
                ("industry", models.CharField(blank=True, max_length=100, null=True)),
                ("location", models.CharField(blank=True, max_length=255, null=True)),
                ("website", models.URLField(blank=True, null=True)),
                ("company_size", models.CharField(blank=True, max_length=50, null=True)),
                ("logo_url", models.URLField(blank=True, null=True)),
                ("contact_name", models.CharField(blank=True, max_length=255, null=True)),
                ("contact_phone", models.CharField(blank=True, max_length=30, null=True)),
                ("founded_year", models.PositiveIntegerField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="employer_profile", to="accounts.user")),
            ],
            options={"db_table": "employer_profiles"},
        ),
    ]
