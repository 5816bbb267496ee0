from rest_framework import serializers

from apps.documents.serializers import DocumentSerializer


class RedeemInviteSerializer(serializers.Serializer):
    code = serializers.CharField(max_length=32, trim_whitespace=True)


class GrantedViewerSerializer(serializers.Serializer):
    viewer_id = serializers.IntegerField()
    display_name = serializers.CharField()
    granted_at = serializers.DateTimeField(allow_null=True)


class SharingOwnerSerializer(serializers.Serializer):
    owner_id = serializers.IntegerField()
    display_name = serializers.CharField()
    document_count = serializers.IntegerField()


class SharedDocumentSerializer(serializers.Serializer):
    """A document plus the display name of the owner who shared it."""

    def to_representation(self, instance):
        data = DocumentSerializer(instance.document).data
        data['owner_name'] = instance.owner_name
        return data
