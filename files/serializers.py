from rest_framework import serializers

from files.models import File, FileVersion, Folder


class CreateFolderSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    parent_uid = serializers.UUIDField(required=False, allow_null=True)


class RenameFolderSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)


class RenameFileSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)


class TrashItemRefSerializer(serializers.Serializer):
    id = serializers.UUIDField()
    type = serializers.ChoiceField(choices=["file", "folder"])


class RestoreManySerializer(serializers.Serializer):
    items = TrashItemRefSerializer(many=True, allow_empty=False)


class FolderSerializer(serializers.ModelSerializer):
    parent_uid = serializers.UUIDField(source="parent_id", read_only=True)
    owner = serializers.EmailField(source="owner.email", read_only=True)
    file_count = serializers.IntegerField(read_only=True, required=False)
    subfolder_count = serializers.IntegerField(read_only=True, required=False)

    class Meta:
        model = Folder
        fields = [
            "uid", "name", "path", "parent_uid", "owner",
            "file_count", "subfolder_count", "created_at", "updated_at",
        ]


class FileSerializer(serializers.ModelSerializer):
    folder_uid = serializers.UUIDField(source="folder_id", read_only=True)
    owner = serializers.EmailField(source="owner.email", read_only=True)

    class Meta:
        model = File
        fields = [
            "uid", "name", "size", "mime_type", "extension", "folder_uid",
            "owner", "version", "created_at", "updated_at",
        ]


class FileVersionSerializer(serializers.ModelSerializer):
    created_by = serializers.EmailField(source="created_by.email", default=None, read_only=True)

    class Meta:
        model = FileVersion
        fields = ["uid", "version_number", "size", "created_at", "created_by"]


class TrashItemSerializer(serializers.Serializer):
    id = serializers.CharField()
    type = serializers.CharField()
    name = serializers.CharField()
    original_path = serializers.CharField()
    size = serializers.IntegerField()
    deleted_at = serializers.DateTimeField()
    auto_purge_at = serializers.DateTimeField()
