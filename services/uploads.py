import secrets
import time
from typing import Any, Dict, Optional

import cloudinary
import cloudinary.utils

from errors import BlogError


def generate_upload_url(folder: Optional[str] = None) -> Dict[str, Any]:
    """Signed parameters for a direct browser upload of one JPEG image.

    Cloudinary refuses signatures older than one hour, which bounds the
    validity of the returned fields.
    """
    config = cloudinary.config()
    if not (config.cloud_name and config.api_key and config.api_secret):
        raise BlogError("Image storage is not configured")

    now = time.time()
    fields: Dict[str, Any] = {
        "timestamp": int(now),
        "public_id": f"{secrets.token_urlsafe(15)}-{int(now * 1000)}",
        "allowed_formats": "jpg,jpeg",
    }
    if folder:
        fields["folder"] = folder
    fields["signature"] = cloudinary.utils.api_sign_request(fields, config.api_secret)
    fields["api_key"] = config.api_key

    return {
        "uploadURL": cloudinary.utils.cloudinary_api_url("upload", resource_type="image"),
        "fields": fields,
    }
