from django.contrib import admin

from .models import EmployerProfile, InternProfile, User


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ("name", "email", "user_type", "status", "created_at")
    list_filter = ("user_type", "status")
    search_fields = ("name", "email", "auth_user_id")


@admin.register(InternProfile)
class InternProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "location", "graduation_date")
    search_fields = ("user__name", "user__email")


@admin.register(EmployerProfile)
class EmployerProfileAdmin(admin.ModelAdmin):
    list_display = ("company_name", "industry", "company_size", "location")
    search_fields = ("company_name",)
