"""
Object storage buckets for lesson videos, course thumbnails and avatars

Objects go through Django's default storage under MEDIA_ROOT/<bucket>/ and
are addressed by a public URL.
"""
import logging
import os
import uuid

from django.conf import settings
from django.core.files.storage import default_storage

from academy.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

LESSON_VIDEOS_BUCKET = 'lesson-videos'
COURSE_THUMBNAILS_BUCKET = 'course-thumbnails'
AVATARS_BUCKET = 'avatars'

ALLOWED_CONTENT_TYPES = {
    LESSON_VIDEOS_BUCKET: ('video/',),
    COURSE_THUMBNAILS_BUCKET: ('image/',),
    AVATARS_BUCKET: ('image/',),
}


def bucket_names():
    return list(settings.ACADEMY['STORAGE_BUCKETS'])


def ensure_buckets():
    """Create bucket directories on local storage. Returns {bucket: created}."""
    results = {}
    for bucket in bucket_names():
        path = os.path.join(settings.MEDIA_ROOT, bucket)
        existed = os.path.isdir(path)
        os.makedirs(path, exist_ok=True)
        results[bucket] = not existed
    return results


def _validate(bucket, file_obj):
    if bucket not in bucket_names():
        raise ValidationFailed(f'Unknown storage bucket: {bucket}')

    max_mb = settings.ACADEMY['MAX_UPLOAD_MB'].get(bucket)
    if max_mb is not None and file_obj.size > max_mb * 1024 * 1024:
        raise ValidationFailed(f'حجم الملف يتجاوز الحد المسموح ({max_mb} ميجابايت)')

    content_type = getattr(file_obj, 'content_type', None) or ''
    prefixes = ALLOWED_CONTENT_TYPES.get(bucket, ())
    if prefixes and not content_type.startswith(prefixes):
        raise ValidationFailed('نوع الملف غير مدعوم')


def upload_to_bucket(bucket, file_obj, request=None):
    """Store the file under a unique name and return its public URL"""
    _validate(bucket, file_obj)

    _, ext = os.path.splitext(file_obj.name)
    object_name = f'{bucket}/{uuid.uuid4().hex}{ext.lower()}'
    stored_name = default_storage.save(object_name, file_obj)
    logger.info('Stored %s (%s bytes) in %s', stored_name, file_obj.size, bucket)

    url = default_storage.url(stored_name)
    if request is not None:
        url = request.build_absolute_uri(url)
    return url


def delete_from_bucket(url, bucket):
    """
    Best-effort removal of an object previously returned by upload_to_bucket.

    Only objects stored directly in `bucket` are removed; any other URL is
    left alone and False is returned.
    """
    if not url:
        return False
    media_url = settings.MEDIA_URL
    idx = url.find(media_url)
    if idx == -1:
        return False
    name = url[idx + len(media_url):].split('?', 1)[0]
    folder, _, filename = name.partition('/')
    if folder != bucket or not filename or '/' in filename or filename in ('.', '..'):
        logger.warning('Refusing to delete %s outside bucket %s', name, bucket)
        return False
    if default_storage.exists(name):
        default_storage.delete(name)
        return True
    return False
