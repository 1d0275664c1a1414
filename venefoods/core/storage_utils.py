# venefoods/core/storage_utils.py
import time
import uuid

from venefoods.core.config import get_settings
from venefoods.core.exceptions import ValidationError
from venefoods.core.supabase_client import supabase_admin

# --- Image config ---

MAX_IMAGE_BYTES = 5 * 1024 * 1024  # 5MB per image

ALLOWED_IMAGE_CONTENT_TYPES: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
}


def validate_image(content_type: str | None, file_bytes: bytes) -> str:
    """
    Check an uploaded image and return the file extension to store it with.

    Raises:
        ValidationError: unsupported type or file larger than MAX_IMAGE_BYTES.
    """
    if content_type not in ALLOWED_IMAGE_CONTENT_TYPES:
        raise ValidationError("Unsupported image type. Allowed: JPEG, PNG, WEBP.")

    if len(file_bytes) > MAX_IMAGE_BYTES:
        raise ValidationError("Image too large (max 5MB).")

    return ALLOWED_IMAGE_CONTENT_TYPES[content_type]


def _bucket():
    return supabase_admin().storage.from_(get_settings().STORAGE_BUCKET)


def upload_to_storage(path: str, file_bytes: bytes, content_type: str) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    If a file already exists at this path, it will be overwritten
    thanks to the 'upsert' option.

    Args:
        path: Full object path inside the bucket.
              Example: "banners/banner-1712345678.png"
        file_bytes: File content in bytes.
        content_type: MIME type stored with the object.

    Raises:
        Any exception raised by Supabase client if upload fails.
    """
    bucket = _bucket()
    bucket.upload(path, file_bytes, {"upsert": "true", "content-type": content_type})
    return bucket.get_public_url(path)


def delete_from_storage(path: str) -> None:
    """
    Delete a file from Supabase Storage by its object path.

    Example path (relative to bucket):
        'products/<uuid>/<uuid>.png'
    """
    _bucket().remove([path])


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/images/banners/b.png
        -> 'banners/b.png'
    """
    marker = f"/storage/v1/object/public/{get_settings().STORAGE_BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    return url[idx + len(marker) :]


def delete_public_url(url: str) -> None:
    """
    Convenience helper: delete a file by its public URL.
    No-op if the URL does not belong to this bucket.
    """
    path = extract_path_from_public_url(url)
    if path:
        delete_from_storage(path)


def generate_filename(ext: str) -> str:
    """
    Generate a random filename using UUID4, e.g. "<uuid4>.png".
    """
    return f"{uuid.uuid4()}.{ext}"


def banner_filename(ext: str) -> str:
    """Timestamped banner name, e.g. "banner-1712345678.png"."""
    return f"banner-{int(time.time())}.{ext}"
