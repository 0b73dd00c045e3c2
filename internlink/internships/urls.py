from django.urls import path

from . import views

urlpatterns = [
    path("internships", views.internship_list, name="internship_list"),
    path("internships/<str:job_id>", views.internship_detail, name="internship_detail"),
    path("internships/<str:job_id>/apply", views.apply, name="apply"),
    path("internships/<str:job_id>/report", views.report, name="report_internship"),
    path("applications", views.applications, name="applications"),
    path("applications/<str:application_id>/withdraw", views.withdraw, name="withdraw_application"),
    path("applications/<str:application_id>/review", views.review, name="review_application"),
    path("organization/dashboard", views.organization_dashboard, name="organization_dashboard"),
    path("organization/post", views.post_internship, name="post_internship"),
    path("organization/internships/<str:job_id>/status", views.listing_status, name="listing_status"),
    path("organization/internships/<str:job_id>/delete", views.listing_delete, name="listing_delete"),
    path(
        "organization/applications/<str:application_id>/status",
        views.application_status,
        name="application_status",
    ),
]
