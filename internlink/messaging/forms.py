from django import forms


class MessageForm(forms.Form):
    subject = forms.CharField(max_length=255, required=False)
    content = forms.CharField(widget=forms.Textarea(attrs={"rows": 3}))


class ChatMessageForm(forms.Form):
    content = forms.CharField(max_length=2000)
