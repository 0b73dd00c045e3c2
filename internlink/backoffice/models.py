import uuid

from django.db import models
from django.utils import timezone

from accounts.models import User
from internships.models import JobListing


class AdminUser(models.Model):
    class Level(models.TextChoices):
        SUPER_ADMIN = "super_admin", "Super admin"
        ADMIN = "admin", "Admin"
        MODERATOR = "moderator", "Moderator"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="admin_user")
    admin_level = models.CharField(max_length=20, choices=Level.choices, default=Level.ADMIN)
    permissions = models.JSONField(default=list, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    embeds = {"users": "user"}

    class Meta:
        db_table = "admin_users"

    def __str__(self):
        return f"AdminUser({self.user_id}, {self.admin_level})"


class OrganizationApproval(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="organization_approvals")
    company_name = models.CharField(max_length=255)
    company_description = models.TextField(blank=True, null=True)
    industry = models.CharField(max_length=100, blank=True, null=True)
    website = models.URLField(blank=True, null=True)
    contact_name = models.CharField(max_length=255, blank=True, null=True)
    contact_email = models.EmailField(blank=True, null=True)
    contact_phone = models.CharField(max_length=30, blank=True, null=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    admin_notes = models.TextField(blank=True, null=True)
    reviewed_by = models.UUIDField(blank=True, null=True)
    reviewed_at = models.DateTimeField(blank=True, null=True)
    submitted_at = models.DateTimeField(default=timezone.now)

    embeds = {"users": "user"}

    class Meta:
        db_table = "organization_approvals"
        ordering = ["-submitted_at"]

    def __str__(self):
        return f"{self.company_name} ({self.status})"


class UserReport(models.Model):
    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        RESOLVED = "resolved", "Resolved"
        DISMISSED = "dismissed", "Dismissed"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reporter = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reports_filed")
    reported_user = models.ForeignKey(User, on_delete=models.CASCADE, blank=True, null=True, related_name="reports_received")
    reported_job = models.ForeignKey(JobListing, on_delete=models.CASCADE, blank=True, null=True, related_name="reports")
    reason = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    admin_notes = models.TextField(blank=True, null=True)
    handled_by = models.UUIDField(blank=True, null=True)
    handled_at = models.DateTimeField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    embeds = {"reporter": "reporter", "reported_user": "reported_user", "reported_job": "reported_job"}

    class Meta:
        db_table = "user_reports"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Report({self.reason}, {self.status})"


class AuditLog(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    admin = models.ForeignKey(User, on_delete=models.SET_NULL, blank=True, null=True, related_name="audit_logs")
    action_type = models.CharField(max_length=64)
    target_type = models.CharField(max_length=64)
    target_id = models.CharField(max_length=64)
    old_values = models.JSONField(blank=True, null=True)
    new_values = models.JSONField(blank=True, null=True)
    created_at = models.DateTimeField(default=timezone.now)

    embeds = {"admin": "admin"}

    class Meta:
        db_table = "audit_logs"
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.action_type} {self.target_type}:{self.target_id}"
