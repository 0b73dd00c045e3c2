from django.contrib import admin

from .models import AdminUser, AuditLog, OrganizationApproval, UserReport


@admin.register(AdminUser)
class AdminUserAdmin(admin.ModelAdmin):
    list_display = ("user", "admin_level", "created_at")
    list_filter = ("admin_level",)


@admin.register(OrganizationApproval)
class OrganizationApprovalAdmin(admin.ModelAdmin):
    list_display = ("company_name", "user", "status", "submitted_at", "reviewed_at")
    list_filter = ("status",)
    search_fields = ("company_name", "contact_email")


@admin.register(UserReport)
class UserReportAdmin(admin.ModelAdmin):
    list_display = ("reason", "reporter", "reported_user", "reported_job", "status", "created_at")
    list_filter = ("status",)


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ("action_type", "target_type", "target_id", "admin", "created_at")
    list_filter = ("action_type", "target_type")
    readonly_fields = ("admin", "action_type", "target_type", "target_id", "old_values", "new_values", "created_at")
