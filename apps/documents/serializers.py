from rest_framework import serializers

from .models import Document


class DocumentSerializer(serializers.ModelSerializer):
    class Meta:
        model = Document
        fields = [
            'id', 'owner', 'name', 'original_filename', 'content_type', 'size',
            'insurance_type', 'policy_number', 'provider', 'premium', 'due_date',
            'created_at', 'updated_at',
        ]
        read_only_fields = fields


class DocumentUploadSerializer(serializers.Serializer):
    file = serializers.FileField(allow_empty_file=True)


class DocumentUpdateSerializer(serializers.ModelSerializer):
    """Owner edits. Extracted fields may be corrected or cleared."""

    class Meta:
        model = Document
        fields = ['name', 'insurance_type', 'policy_number', 'provider', 'premium', 'due_date']
        extra_kwargs = {name: {'required': False} for name in fields}

    def validate_name(self, value):
        value = value.strip()
        if not value:
            raise serializers.ValidationError("Document name cannot be blank.")
        return value
