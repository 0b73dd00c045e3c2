import uuid

from django import forms

from .constants import COMPANY_SIZES, FIELDS_OF_INTEREST, INDUSTRIES, WORK_TYPES
from .services import MIN_PASSWORD_LENGTH


def split_csv(text) -> list:
    return [part.strip() for part in (text or "").split(",") if part.strip()]


def _json_ready(values: dict) -> dict:
    # dates must travel as ISO strings to the hosted API
    return {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in values.items()}


class SignInForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput)


class PasswordResetForm(forms.Form):
    email = forms.EmailField()


class _SignUpForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(widget=forms.PasswordInput, min_length=MIN_PASSWORD_LENGTH)
    confirm_password = forms.CharField(widget=forms.PasswordInput)
    agree_to_terms = forms.BooleanField(error_messages={"required": "You must agree to the terms"})

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("password") and cleaned.get("password") != cleaned.get("confirm_password"):
            self.add_error("confirm_password", "Passwords do not match")
        return cleaned


class InternSignUpForm(_SignUpForm):
    name = forms.CharField(max_length=255)
    field_of_interest = forms.ChoiceField(choices=[("", "Choose a field")] + FIELDS_OF_INTEREST, required=False)
    skills = forms.CharField(required=False, help_text="Comma separated")
    work_type = forms.ChoiceField(choices=WORK_TYPES, required=False)
    preferred_location = forms.CharField(max_length=255, required=False)
    bio = forms.CharField(widget=forms.Textarea, required=False)

    field_order = ["name", "email", "password", "confirm_password", "field_of_interest", "skills",
                   "work_type", "preferred_location", "bio", "agree_to_terms"]

    def profile_values(self) -> dict:
        data = self.cleaned_data
        values = {"skills": split_csv(data.get("skills"))}
        if data.get("field_of_interest"):
            values["interests"] = [data["field_of_interest"]]
        if data.get("bio"):
            values["bio"] = data["bio"]
        if data.get("preferred_location"):
            values["location"] = data["preferred_location"]
        return values


class OrganizationSignUpForm(_SignUpForm):
    organization_name = forms.CharField(max_length=255)
    contact_name = forms.CharField(max_length=255)
    phone = forms.CharField(max_length=30, required=False)
    website = forms.URLField(required=False)
    description = forms.CharField(widget=forms.Textarea, required=False)
    industry = forms.ChoiceField(choices=[("", "Select industry")] + [(i, i) for i in INDUSTRIES], required=False)
    company_size = forms.ChoiceField(choices=[("", "Select size")] + [(s, s) for s in COMPANY_SIZES], required=False)
    location = forms.CharField(max_length=255, required=False)

    field_order = ["organization_name", "contact_name", "email", "phone", "password", "confirm_password",
                   "website", "description", "industry", "company_size", "location", "agree_to_terms"]

    def profile_values(self) -> dict:
        data = self.cleaned_data
        values = {
            "company_name": data["organization_name"],
            "contact_name": data["contact_name"],
            "contact_phone": data.get("phone") or None,
            "website": data.get("website") or None,
            "company_description": data.get("description") or None,
            "industry": data.get("industry") or None,
            "company_size": data.get("company_size") or None,
            "location": data.get("location") or None,
        }
        return {k: v for k, v in values.items() if v is not None}

    def approval_values(self) -> dict:
        data = self.cleaned_data
        return {
            "company_name": data["organization_name"],
            "company_description": data.get("description") or None,
            "industry": data.get("industry") or None,
            "website": data.get("website") or None,
            "contact_name": data["contact_name"],
            "contact_email": data["email"],
            "contact_phone": data.get("phone") or None,
        }


class InternProfileForm(forms.Form):
    name = forms.CharField(max_length=255)
    bio = forms.CharField(widget=forms.Textarea, required=False)
    location = forms.CharField(max_length=255, required=False)
    phone = forms.CharField(max_length=30, required=False)
    skills = forms.CharField(required=False, help_text="Comma separated")
    interests = forms.CharField(required=False, help_text="Comma separated")
    resume_url = forms.URLField(required=False)
    linkedin_url = forms.URLField(required=False)
    github_url = forms.URLField(required=False)
    portfolio_url = forms.URLField(required=False)
    gpa = forms.FloatField(required=False, min_value=0, max_value=10)
    graduation_date = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    availability_start = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))
    availability_end = forms.DateField(required=False, widget=forms.DateInput(attrs={"type": "date"}))

    LIST_FIELDS = ("skills", "interests")

    @classmethod
    def initial_for(cls, user) -> dict:
        initial = {"name": user.name}
        for key, value in (user.extension or {}).items():
            if key in cls.base_fields:
                initial[key] = ", ".join(value) if key in cls.LIST_FIELDS else value
        return initial

    def split(self):
        data = dict(self.cleaned_data)
        base = {"name": data.pop("name")}
        extension = {k: (split_csv(v) if k in self.LIST_FIELDS else (v if v != "" else None)) for k, v in data.items()}
        return base, _json_ready(extension)


class EmployerProfileForm(forms.Form):
    name = forms.CharField(max_length=255, label="Your name")
    company_name = forms.CharField(max_length=255)
    company_description = forms.CharField(widget=forms.Textarea, required=False)
    industry = forms.ChoiceField(choices=[("", "Select industry")] + [(i, i) for i in INDUSTRIES], required=False)
    company_size = forms.ChoiceField(choices=[("", "Select size")] + [(s, s) for s in COMPANY_SIZES], required=False)
    location = forms.CharField(max_length=255, required=False)
    website = forms.URLField(required=False)
    logo_url = forms.URLField(required=False)
    contact_name = forms.CharField(max_length=255, required=False)
    contact_phone = forms.CharField(max_length=30, required=False)
    founded_year = forms.IntegerField(required=False, min_value=1800, max_value=2100)

    @classmethod
    def initial_for(cls, user) -> dict:
        initial = {"name": user.name}
        initial.update({k: v for k, v in (user.extension or {}).items() if k in cls.base_fields})
        return initial

    def split(self):
        data = dict(self.cleaned_data)
        base = {"name": data.pop("name")}
        return base, {k: (v if v != "" else None) for k, v in data.items()}


class EducationForm(forms.Form):
    institution = forms.CharField(max_length=255)
    degree = forms.CharField(max_length=255)
    field = forms.CharField(max_length=255, required=False)
    start_date = forms.CharField(max_length=20, required=False, help_text="e.g. 2022-09")
    end_date = forms.CharField(max_length=20, required=False)
    current = forms.BooleanField(required=False)
    gpa = forms.FloatField(required=False, min_value=0, max_value=10)

    def entry(self) -> dict:
        data = self.cleaned_data
        entry = {"id": uuid.uuid4().hex[:12], **data}
        if data.get("current"):
            entry["end_date"] = ""
        return entry
