import uuid

from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils import timezone

from accounts.models import User


class JobListing(models.Model):
    class JobType(models.TextChoices):
        REMOTE = "remote", "Remote"
        IN_PERSON = "in-person", "In person"
        HYBRID = "hybrid", "Hybrid"

    class Status(models.TextChoices):
        ACTIVE = "active", "Active"
        CLOSED = "closed", "Closed"
        DRAFT = "draft", "Draft"

    class Moderation(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"
        FLAGGED = "flagged", "Flagged"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    employer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="job_listings")
    title = models.CharField(max_length=255)
    description = models.TextField()
    requirements = models.JSONField(default=list, blank=True)
    skills_required = models.JSONField(default=list, blank=True)
    location = models.CharField(max_length=255, blank=True, default="")
    job_type = models.CharField(max_length=20, choices=JobType.choices, default=JobType.IN_PERSON)
    duration = models.CharField(max_length=100, blank=True, default="")
    stipend = models.CharField(max_length=100, blank=True, null=True)
    is_paid = models.BooleanField(default=True)
    application_deadline = models.DateField(blank=True, null=True)
    start_date = models.DateField(blank=True, null=True)
    end_date = models.DateField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.ACTIVE)
    moderation_status = models.CharField(max_length=20, choices=Moderation.choices, default=Moderation.PENDING)
    moderation_notes = models.TextField(blank=True, null=True)
    moderated_by = models.UUIDField(blank=True, null=True)
    moderated_at = models.DateTimeField(blank=True, null=True)
    posted_at = models.DateTimeField(default=timezone.now)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    embeds = {
        "employer_profiles": "employer.employer_profile",
        "users": "employer",
        "applications": "applications",
    }

    class Meta:
        db_table = "job_listings"
        ordering = ["-posted_at"]

    def __str__(self):
        return self.title


class Application(models.Model):
    class Status(models.TextChoices):
        APPLIED = "applied", "Applied"
        REVIEWING = "reviewing", "Reviewing"
        INTERVIEWING = "interviewing", "Interviewing"
        ACCEPTED = "accepted", "Accepted"
        REJECTED = "rejected", "Rejected"
        WITHDRAWN = "withdrawn", "Withdrawn"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    intern = models.ForeignKey(User, on_delete=models.CASCADE, related_name="applications")
    job = models.ForeignKey(JobListing, on_delete=models.CASCADE, related_name="applications")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.APPLIED)
    cover_letter = models.TextField(blank=True, null=True)
    resume_url = models.URLField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    applied_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    embeds = {
        "job_listings": "job",
        "users": "intern",
        "intern_profiles": "intern.intern_profile",
    }

    class Meta:
        db_table = "applications"
        ordering = ["-applied_at"]

    def __str__(self):
        return f"Application({self.intern_id} -> {self.job_id}, {self.status})"


class Review(models.Model):
    class ReviewType(models.TextChoices):
        INTERN_TO_EMPLOYER = "intern_to_employer", "Intern to employer"
        EMPLOYER_TO_INTERN = "employer_to_intern", "Employer to intern"

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    reviewer = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reviews_given")
    reviewee = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reviews_received")
    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="reviews")
    rating = models.PositiveSmallIntegerField(validators=[MinValueValidator(1), MaxValueValidator(5)])
    comment = models.TextField(blank=True, null=True)
    review_type = models.CharField(max_length=30, choices=ReviewType.choices)
    created_at = models.DateTimeField(default=timezone.now)

    embeds = {"reviewer": "reviewer", "reviewee": "reviewee", "applications": "application"}

    class Meta:
        db_table = "reviews"
        ordering = ["-created_at"]

    def __str__(self):
        return f"Review({self.reviewer_id} -> {self.reviewee_id}: {self.rating})"
