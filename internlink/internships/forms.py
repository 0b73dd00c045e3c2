from django import forms

from accounts.constants import COMMON_SKILLS
from accounts.forms import split_csv

from .models import Application, JobListing


class InternshipFilterForm(forms.Form):
    q = forms.CharField(required=False, label="Search")
    remote = forms.BooleanField(required=False, label="Remote only")
    paid = forms.BooleanField(required=False, label="Paid only")
    location = forms.CharField(required=False)
    skills = forms.MultipleChoiceField(
        choices=[(s, s) for s in COMMON_SKILLS],
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )

    def is_filtered(self) -> bool:
        data = self.cleaned_data if self.is_valid() else {}
        return any(data.get(name) for name in ("q", "remote", "paid", "location", "skills"))


class JobListingForm(forms.Form):
    title = forms.CharField(max_length=255)
    description = forms.CharField(widget=forms.Textarea)
    requirements = forms.CharField(required=False, help_text="Comma separated")
    skills_required = forms.CharField(required=False, help_text="Comma separated")
    location = forms.CharField(max_length=255, required=False)
    job_type = forms.ChoiceField(choices=JobListing.JobType.choices, initial=JobListing.JobType.IN_PERSON)
    duration = forms.CharField(max_length=100, required=False)
    stipend = forms.CharField(max_length=100, required=False)
    is_paid = forms.BooleanField(required=False, initial=True)
    application_deadline = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))

    def listing_values(self, employer_id) -> dict:
        data = self.cleaned_data
        deadline = data.get("application_deadline")
        return {
            "employer_id": employer_id,
            "title": data["title"],
            "description": data["description"],
            "requirements": split_csv(data.get("requirements")),
            "skills_required": split_csv(data.get("skills_required")),
            "location": data.get("location") or "",
            "job_type": data["job_type"],
            "duration": data.get("duration") or "",
            "stipend": data.get("stipend") or None,
            "is_paid": data.get("is_paid", False),
            "application_deadline": deadline.isoformat() if deadline else None,
            "status": JobListing.Status.ACTIVE,
        }


class ApplicationForm(forms.Form):
    cover_letter = forms.CharField(widget=forms.Textarea(attrs={"rows": 4}), required=False)


class ApplicationStatusForm(forms.Form):
    status = forms.ChoiceField(
        choices=[(value, label) for value, label in Application.Status.choices if value != Application.Status.WITHDRAWN]
    )
    notes = forms.CharField(widget=forms.Textarea(attrs={"rows": 2}), required=False)


class ListingStatusForm(forms.Form):
    status = forms.ChoiceField(choices=JobListing.Status.choices)


class ReviewForm(forms.Form):
    rating = forms.TypedChoiceField(choices=[(i, i) for i in range(1, 6)], coerce=int)
    comment = forms.CharField(widget=forms.Textarea(attrs={"rows": 3}), required=False)


class ReportForm(forms.Form):
    REASONS = [
        ("spam", "Spam or misleading"),
        ("inappropriate", "Inappropriate content"),
        ("scam", "Suspected scam"),
        ("other", "Other"),
    ]

    reason = forms.ChoiceField(choices=REASONS)
    description = forms.CharField(widget=forms.Textarea(attrs={"rows": 3}), required=False)
