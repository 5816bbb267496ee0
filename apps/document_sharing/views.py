import logging

from rest_framework import views, status
from rest_framework.response import Response

from apps.authentication.permissions import IsVerifiedUser
from apps.common.errors import VaultError, error_response

from .serializers import (
    RedeemInviteSerializer, GrantedViewerSerializer, SharingOwnerSerializer, SharedDocumentSerializer,
)
from .services import SharingService

logger = logging.getLogger(__name__)


class SharedDocumentsView(views.APIView):
    """GET /api/vault/shared/: Documents other owners share with me."""
    permission_classes = [IsVerifiedUser]

    def get(self, request):
        shared = SharingService().shared_documents_for(request.user.id)
        return Response(SharedDocumentSerializer(shared, many=True).data)


class SharingOwnersView(views.APIView):
    """GET /api/vault/shared/owners/: Owners sharing with me, with document counts."""
    permission_classes = [IsVerifiedUser]

    def get(self, request):
        owners = SharingService().list_sharing_owners(request.user.id)
        return Response(SharingOwnerSerializer(owners, many=True).data)


class InviteCodeView(views.APIView):
    """
    GET /api/vault/invite-code/: My current code (null if never issued)
    POST /api/vault/invite-code/: Issue a new code, replacing the old one
    """
    permission_classes = [IsVerifiedUser]

    def get(self, request):
        return Response({"code": SharingService().get_my_invite_code(request.user.id)})

    def post(self, request):
        try:
            result = SharingService().rotate_invite_code(request.user.id)
        except VaultError as e:
            return error_response(e)

        return Response({
            "code": result.code,
            "invalidate": result.invalidation.as_dict(),
        }, status=status.HTTP_201_CREATED)


class RedeemInviteCodeView(views.APIView):
    """POST /api/vault/invite-code/redeem/: Gain access to the code owner's documents."""
    permission_classes = [IsVerifiedUser]

    def post(self, request):
        serializer = RedeemInviteSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = SharingService().redeem(serializer.validated_data['code'], request.user.id)
        except VaultError as e:
            logger.info("Invite redeem by user %s rejected: %s", request.user.id, e.code)
            return error_response(e)

        return Response({
            "message": f"You can now view documents shared by {result.owner_name}.",
            "owner_id": result.owner_id,
            "owner_name": result.owner_name,
            "invalidate": result.invalidation.as_dict(),
        }, status=status.HTTP_201_CREATED)


class ViewerListView(views.APIView):
    """GET /api/vault/viewers/: Who can see my documents."""
    permission_classes = [IsVerifiedUser]

    def get(self, request):
        viewers = SharingService().list_granted_viewers(request.user.id)
        return Response(GrantedViewerSerializer(viewers, many=True).data)


class RevokeViewerView(views.APIView):
    """DELETE /api/vault/viewers/<viewer_id>/: Remove a viewer's access. Idempotent."""
    permission_classes = [IsVerifiedUser]

    def delete(self, request, viewer_id):
        result = SharingService().revoke_access(request.user.id, viewer_id)
        return Response({
            "removed": result.removed,
            "invalidate": result.invalidation.as_dict(),
        })
