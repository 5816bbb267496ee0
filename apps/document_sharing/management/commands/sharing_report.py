"""
Django management command summarizing the sharing graph for support staff.
Read-only.

Usage:
    python manage.py sharing_report
    python manage.py sharing_report --owner 42
"""
from django.core.management.base import BaseCommand
from django.db.models import Count

from apps.authentication.models import User
from apps.document_sharing.models import AccessGrant, InviteCode


class Command(BaseCommand):
    help = 'Show invite codes, viewers and documents per owner'

    def add_arguments(self, parser):
        parser.add_argument('--owner', type=int, help='Only report on this owner id')

    def handle(self, *args, **options):
        owner_ids = set(AccessGrant.objects.values_list('owner_id', flat=True))
        owner_ids |= set(InviteCode.objects.values_list('owner_id', flat=True))
        if options.get('owner'):
            owner_ids &= {options['owner']}

        rows = list(User.objects.filter(pk__in=owner_ids).annotate(
            viewer_count=Count('grants_given', distinct=True),
            document_count=Count('documents', distinct=True),
        ).order_by('pk'))
        codes = dict(InviteCode.objects.filter(owner_id__in=owner_ids).values_list('owner_id', 'code'))

        if not rows:
            self.stdout.write(self.style.SUCCESS('No sharing activity found'))
            return

        for user in rows:
            self.stdout.write(
                f"{user.pk}\t{user.display_name}\tcode={codes.get(user.pk, '-')}\t"
                f"viewers={user.viewer_count}\tdocuments={user.document_count}"
            )

        self.stdout.write(self.style.SUCCESS(
            f'Report complete: {len(rows)} owners, {AccessGrant.objects.count()} grants, '
            f'{len(codes)} active codes'
        ))
