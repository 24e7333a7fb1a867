import logging

import cloudinary.exceptions
import cloudinary.uploader
from flask import current_app

logger = logging.getLogger(__name__)


def upload_image(file_storage):
    """
    Uploads a werkzeug FileStorage to the media host.
    Returns (secure_url, None) on success or (None, error_message).
    """
    cloud_name = current_app.config.get("CLOUDINARY_CLOUD_NAME")
    api_key = current_app.config.get("CLOUDINARY_API_KEY")
    api_secret = current_app.config.get("CLOUDINARY_API_SECRET")
    folder = current_app.config.get("MEDIA_FOLDER", "DevEvent")
    timeout = current_app.config.get("MEDIA_UPLOAD_TIMEOUT_SECONDS", 30)

    if not cloud_name or not api_key or not api_secret:
        return None, "Media upload not configured"

    try:
        # credentials per call; no process-global cloudinary.config()
        result = cloudinary.uploader.upload(
            file_storage.stream,
            resource_type="image",
            folder=folder,
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            timeout=timeout,
        )
    except cloudinary.exceptions.Error as exc:
        logger.error("Image upload failed: %s", exc)
        return None, str(exc)

    url = (result or {}).get("secure_url")
    if not url:
        return None, "Media host returned no URL"
    return url, None
