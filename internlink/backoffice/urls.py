from django.urls import path

from . import views

urlpatterns = [
    path("admin/login", views.admin_login, name="admin_login"),
    path("admin/logout", views.admin_logout, name="admin_logout"),
    path("admin/dashboard", views.dashboard, name="admin_dashboard"),
    path("admin/approvals", views.approvals, name="admin_approvals"),
    path("admin/users", views.users, name="admin_users"),
    path("admin/jobs", views.jobs, name="admin_jobs"),
    path("admin/reports", views.reports, name="admin_reports"),
    path("admin/audit", views.audit, name="admin_audit"),
]
