import logging

from rest_framework import views, status
from rest_framework.parsers import MultiPartParser, FormParser, JSONParser
from rest_framework.response import Response

from apps.authentication.permissions import IsVerifiedUser
from apps.common.errors import VaultError, error_response

from .pipeline import IngestionPipeline
from .serializers import DocumentSerializer, DocumentUploadSerializer, DocumentUpdateSerializer

logger = logging.getLogger(__name__)


class DocumentListCreateView(views.APIView):
    """
    GET /api/vault/documents/: My documents, newest first
    POST /api/vault/documents/: Upload a document (multipart 'file')
    """
    permission_classes = [IsVerifiedUser]
    parser_classes = [MultiPartParser, FormParser]

    def get(self, request):
        documents = IngestionPipeline().list_my_documents(request.user.id)
        return Response(DocumentSerializer(documents, many=True).data)

    def post(self, request):
        serializer = DocumentUploadSerializer(data=request.data)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        file_obj = serializer.validated_data['file']
        try:
            result = IngestionPipeline().upload(
                owner_id=request.user.id,
                file_bytes=file_obj.read(),
                file_name=file_obj.name,
                content_type=file_obj.content_type,
                size_bytes=file_obj.size,
            )
        except VaultError as e:
            logger.info("Upload rejected for user %s: %s", request.user.id, e.code)
            return error_response(e)

        return Response({
            "document": DocumentSerializer(result.document).data,
            "invalidate": result.invalidation.as_dict(),
        }, status=status.HTTP_201_CREATED)


class DocumentDetailView(views.APIView):
    """
    GET /api/vault/documents/<id>/: Metadata + download URL (owner or viewer)
    PATCH /api/vault/documents/<id>/: Owner edits details
    DELETE /api/vault/documents/<id>/: Owner deletes
    """
    permission_classes = [IsVerifiedUser]
    parser_classes = [JSONParser, FormParser, MultiPartParser]

    def get(self, request, pk):
        try:
            access = IngestionPipeline().get_document_for(request.user.id, pk)
        except VaultError as e:
            return error_response(e)

        data = DocumentSerializer(access.document).data
        data['download_url'] = access.download_url
        data['is_owner'] = access.is_owner
        return Response(data)

    def patch(self, request, pk):
        serializer = DocumentUpdateSerializer(data=request.data, partial=True)
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        try:
            result = IngestionPipeline().update_document_details(request.user.id, pk, serializer.validated_data)
        except VaultError as e:
            return error_response(e)

        return Response({
            "document": DocumentSerializer(result.document).data,
            "invalidate": result.invalidation.as_dict(),
        })

    def delete(self, request, pk):
        try:
            result = IngestionPipeline().delete_document(request.user.id, pk)
        except VaultError as e:
            return error_response(e)

        return Response({
            "message": "Document deleted.",
            "invalidate": result.invalidation.as_dict(),
        })
