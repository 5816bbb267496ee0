from rest_framework import serializers

from apps.common.errors import InvalidPhoneNumber
from apps.common.validators import normalize_mobile

from .models import User


class UserSerializer(serializers.ModelSerializer):
    display_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'mobile', 'email', 'first_name', 'last_name', 'display_name', 'is_phone_verified']
        read_only_fields = ['id', 'mobile', 'display_name', 'is_phone_verified']

    def validate_email(self, value):
        if value and User.objects.filter(email__iexact=value).exclude(pk=getattr(self.instance, 'pk', None)).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value or None


class MobileField(serializers.CharField):
    def to_internal_value(self, data):
        value = super().to_internal_value(data)
        try:
            return normalize_mobile(value)
        except InvalidPhoneNumber as e:
            raise serializers.ValidationError(e.message)


class RegisterSerializer(serializers.Serializer):
    mobile = MobileField(max_length=20)
    first_name = serializers.CharField(max_length=150)
    last_name = serializers.CharField(max_length=150, required=False, allow_blank=True)
    email = serializers.EmailField(required=False, allow_blank=True)

    def validate_mobile(self, value):
        if User.objects.filter(mobile=value).exists():
            raise serializers.ValidationError("A user with this mobile number already exists.")
        return value

    def validate_email(self, value):
        if value and User.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError("A user with this email already exists.")
        return value


class RequestOTPSerializer(serializers.Serializer):
    mobile = serializers.CharField(max_length=20)


class VerifyOTPSerializer(serializers.Serializer):
    mobile = serializers.CharField(max_length=20)
    otp = serializers.CharField(max_length=6)
