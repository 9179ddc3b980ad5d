from rest_framework import serializers

from files.models import ResourceType
from sharing.models import Role


class ShareSerializer(serializers.Serializer):
    resource_uid = serializers.CharField()
    resource_type = serializers.ChoiceField(choices=ResourceType.choices)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=Role.choices)
    inherit_to_children = serializers.BooleanField(default=False)


class ResourceRefSerializer(serializers.Serializer):
    resource_id = serializers.CharField()
    resource_type = serializers.ChoiceField(choices=ResourceType.choices)


class BulkShareSerializer(serializers.Serializer):
    resources = ResourceRefSerializer(many=True, allow_empty=False)
    email = serializers.EmailField()
    role = serializers.ChoiceField(choices=Role.choices)
    inherit_to_children = serializers.BooleanField(default=False)


class UpdateShareSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=Role.choices)
