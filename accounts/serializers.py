from rest_framework import serializers
from accounts.models import CustomUser


class UserProfileSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = CustomUser
        fields = ["uid", "email", "first_name", "last_name", "display_name", "storage_quota"]
        read_only_fields = fields


class UserProfileUpdateSerializer(serializers.ModelSerializer):
    class Meta:
        model = CustomUser
        fields = ["first_name", "last_name"]
