import logging

from django.db import transaction
from rest_framework import views, status, permissions
from rest_framework.response import Response
from rest_framework_simplejwt.tokens import RefreshToken

from apps.common.errors import VaultError, error_response

from .identity import OTPAuthenticator
from .models import User
from .serializers import (
    RegisterSerializer, RequestOTPSerializer, VerifyOTPSerializer, UserSerializer,
)

logger = logging.getLogger(__name__)


class RegisterView(views.APIView):
    """POST /api/auth/register/: Create an unverified account and send an OTP."""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = RegisterSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        logger.info("Register request for mobile %s", data['mobile'])

        with transaction.atomic():
            user = User.objects.create_user(
                mobile=data['mobile'],
                first_name=data['first_name'].strip(),
                last_name=data.get('last_name', '').strip(),
                email=data.get('email') or None,
            )

        try:
            OTPAuthenticator().request_code(user.mobile)
        except VaultError as e:
            return error_response(e)

        logger.info("Registration successful for %s (user_id=%s)", user.mobile, user.id)
        return Response({
            "message": "Registration successful. OTP sent.",
            "identifier": user.mobile,
        }, status=status.HTTP_201_CREATED)


class RequestOTPView(views.APIView):
    """POST /api/auth/request-otp/: Send a login OTP to a registered mobile."""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = RequestOTPSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            user = OTPAuthenticator().request_code(serializer.validated_data['mobile'])
        except VaultError as e:
            return error_response(e)

        return Response({"message": "OTP sent.", "identifier": user.mobile})


class VerifyOTPView(views.APIView):
    """POST /api/auth/verify-otp/: Exchange a valid OTP for a JWT pair."""
    permission_classes = [permissions.AllowAny]

    def post(self, request):
        serializer = VerifyOTPSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        data = serializer.validated_data
        try:
            identity = OTPAuthenticator().verify(data['mobile'], data['otp'])
        except VaultError as e:
            return error_response(e)

        user = User.objects.get(pk=identity.user_id)
        refresh = RefreshToken.for_user(user)
        return Response({
            'refresh': str(refresh),
            'access': str(refresh.access_token),
            'user': UserSerializer(user).data,
        })


class MeView(views.APIView):
    """
    GET /api/auth/me/: Current profile
    PATCH /api/auth/me/: Update name/email
    """
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request):
        return Response(UserSerializer(request.user).data)

    def patch(self, request):
        serializer = UserSerializer(request.user, data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer.save()
        return Response(serializer.data)
