"""
Create the storage bucket directories used for uploads
"""
from django.conf import settings
from django.core.management.base import BaseCommand

from admin.storage import ensure_buckets


class Command(BaseCommand):
    help = 'Create storage buckets (lesson-videos, course-thumbnails, avatars) under MEDIA_ROOT'

    def handle(self, *args, **options):
        self.stdout.write(f'[STORAGE] MEDIA_ROOT = {settings.MEDIA_ROOT}')
        for bucket, created in ensure_buckets().items():
            if created:
                self.stdout.write(self.style.SUCCESS(f'  + created {bucket}'))
            else:
                self.stdout.write(f'  = {bucket} already exists')
        self.stdout.write(self.style.SUCCESS('[SUCCESS] Storage buckets ready'))
