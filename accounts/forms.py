from django import forms
from django.contrib.auth.forms import UserCreationForm, UserChangeForm
from accounts.models import CustomUser


class StorageQuotaMixin:
    def clean_storage_quota(self):
        quota = self.cleaned_data.get("storage_quota")
        if quota is not None and quota < 0:
            raise forms.ValidationError("Storage quota cannot be negative.")
        return quota


class CustomUserCreationForm(StorageQuotaMixin, UserCreationForm):
    class Meta:
        model = CustomUser
        fields = ('email', 'first_name', 'last_name', 'storage_quota')


class CustomUserChangeForm(StorageQuotaMixin, UserChangeForm):
    class Meta:
        model = CustomUser
        fields = ('email', 'first_name', 'last_name', 'storage_quota', 'is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions')
