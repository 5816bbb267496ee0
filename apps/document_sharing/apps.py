from django.apps import AppConfig


class DocumentSharingConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'apps.document_sharing'
    label = 'document_sharing'
    verbose_name = 'Invite codes and access grants'
