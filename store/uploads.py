# store/uploads.py
"""Images go to Cloudinary; the API only ever receives their URLs."""

import logging

import cloudinary.uploader
from cloudinary.exceptions import Error as CloudinaryError

logger = logging.getLogger(__name__)

ALLOWED_TYPES = ('image/jpeg', 'image/png', 'image/webp', 'image/gif')


class UploadError(Exception):
    pass


def upload_image(file, folder):
    content_type = getattr(file, 'content_type', None)
    if content_type and content_type not in ALLOWED_TYPES:
        raise UploadError("Only JPEG, PNG, WebP or GIF images can be uploaded.")
    try:
        result = cloudinary.uploader.upload(file, folder=folder, resource_type='image')
    except CloudinaryError as exc:
        logger.warning("Upload to %s failed: %s", folder, exc)
        raise UploadError("File upload failed") from exc
    url = result.get('secure_url') or result.get('url')
    if not url:
        raise UploadError("File upload failed")
    logger.info("Uploaded image to %s", url)
    return url


def image_from_request(request, field='image', folder='products', fallback=None):
    """The uploaded file's URL, or the URL typed into ``<field>_url``, or ``fallback``."""
    upload = request.FILES.get(field)
    if upload:
        return upload_image(upload, folder)
    return request.POST.get(f'{field}_url', '').strip() or fallback
