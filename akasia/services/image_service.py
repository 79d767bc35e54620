import secrets
import string
import time
from io import BytesIO

from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app
from PIL import Image, ImageOps, UnidentifiedImageError

from akasia.extensions import s3

_ALPHABET = string.ascii_lowercase + string.digits


class ImageUploadError(Exception):
    status_code = 500


class InvalidImageError(ImageUploadError):
    status_code = 400


def random_string(length: int) -> str:
    return ''.join(secrets.choice(_ALPHABET) for _ in range(length))


def compress_image(data: bytes, max_width: int, quality: int) -> bytes:
    """Downscale to ``max_width`` (never upscale) and re-encode as JPEG."""
    try:
        with Image.open(BytesIO(data)) as source:
            image = ImageOps.exif_transpose(source)
            if image.mode != 'RGB':
                image = image.convert('RGB')
            if image.width > max_width:
                height = max(1, round(image.height * max_width / image.width))
                image = image.resize((max_width, height), Image.Resampling.LANCZOS)

            output = BytesIO()
            image.save(output, format='JPEG', quality=quality)
            return output.getvalue()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise InvalidImageError('File must be an image') from exc


def build_object_key(folder: str) -> str:
    safe_folder = folder.rstrip('/')
    return f"{safe_folder}/{int(time.time() * 1000)}-{random_string(10)}.jpg"


def upload_compressed_image(file, folder: str) -> dict:
    """
    Compress an uploaded image and store it in the public bucket.

    :param file: a werkzeug ``FileStorage``
    :param folder: key prefix inside the bucket, e.g. ``receipts/spending``
    :return: dict with ``file_url``, ``file_name``, ``mime_type`` and ``size_bytes``
    """
    if not (file.mimetype or '').startswith('image/'):
        raise InvalidImageError('File must be an image')

    compressed = compress_image(
        file.read(),
        max_width=current_app.config['IMAGE_MAX_WIDTH'],
        quality=current_app.config['IMAGE_JPEG_QUALITY']
    )
    key = build_object_key(folder)

    try:
        file_url = s3.upload(key, compressed, 'image/jpeg')
    except (BotoCoreError, ClientError) as exc:
        current_app.logger.exception("Failed to upload %s to bucket %s", key, s3.bucket)
        raise ImageUploadError(f'Failed to upload file: {exc}') from exc

    return {
        'file_url': file_url,
        'file_name': file.filename or key.rsplit('/', 1)[-1],
        'mime_type': 'image/jpeg',
        'size_bytes': len(compressed),
    }


def delete_uploaded_files(file_urls):
    """Remove stored objects; a failed delete is logged and leaves the object behind."""
    for file_url in file_urls:
        try:
            s3.delete(file_url)
        except (BotoCoreError, ClientError):
            current_app.logger.exception("Failed to delete %s from bucket %s", file_url, s3.bucket)
