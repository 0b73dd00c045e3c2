from django import forms


class ApprovalDecisionForm(forms.Form):
    decision = forms.ChoiceField(choices=[("approve", "Approve"), ("reject", "Reject")])
    notes = forms.CharField(widget=forms.Textarea(attrs={"rows": 3}), required=False)

    def note_text(self) -> str:
        notes = (self.cleaned_data.get("notes") or "").strip()
        if notes:
            return notes
        if self.cleaned_data["decision"] == "approve":
            return "Organization approved by admin"
        return "Organization rejected by admin"


class UserActionForm(forms.Form):
    action = forms.ChoiceField(choices=[("ban", "Ban"), ("unban", "Unban"), ("delete", "Delete")])
    reason = forms.CharField(max_length=500, required=False)

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("action") == "ban" and not (cleaned.get("reason") or "").strip():
            self.add_error("reason", "A reason is required to ban a user.")
        return cleaned


class JobActionForm(forms.Form):
    action = forms.ChoiceField(
        choices=[("approved", "Approve"), ("rejected", "Reject"), ("flagged", "Flag"), ("delete", "Delete")]
    )
    notes = forms.CharField(max_length=500, required=False)


class ReportActionForm(forms.Form):
    status = forms.ChoiceField(choices=[("resolved", "Resolve"), ("dismissed", "Dismiss")])
    notes = forms.CharField(max_length=500, required=False)
