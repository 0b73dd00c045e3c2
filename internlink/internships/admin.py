from django.contrib import admin

from .models import Application, JobListing, Review


@admin.register(JobListing)
class JobListingAdmin(admin.ModelAdmin):
    list_display = ("title", "employer", "job_type", "status", "moderation_status", "posted_at")
    list_filter = ("status", "moderation_status", "job_type", "is_paid")
    search_fields = ("title", "description", "location")


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ("job", "intern", "status", "applied_at")
    list_filter = ("status",)
    search_fields = ("job__title", "intern__name", "intern__email")


@admin.register(Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("reviewer", "reviewee", "rating", "review_type", "created_at")
    list_filter = ("review_type", "rating")
