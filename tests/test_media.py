import io
from unittest.mock import patch

import cloudinary.exceptions
from werkzeug.datastructures import FileStorage

from utils.media import upload_image

CLOUDINARY = {
    "CLOUDINARY_CLOUD_NAME": "demo",
    "CLOUDINARY_API_KEY": "key123",
    "CLOUDINARY_API_SECRET": "shh",
}


def _file():
    return FileStorage(stream=io.BytesIO(b"img"), filename="cool.png", content_type="image/png")


@patch("utils.media.cloudinary.uploader.upload")
def test_upload_not_configured(mock_upload, app):
    url, err = upload_image(_file())
    assert url is None
    assert err == "Media upload not configured"
    assert not mock_upload.called


@patch("utils.media.cloudinary.uploader.upload", return_value={"secure_url": "https://cdn/x.png"})
def test_upload_passes_folder_and_credentials(mock_upload, app):
    app.config.update(CLOUDINARY)

    url, err = upload_image(_file())

    assert (url, err) == ("https://cdn/x.png", None)
    _, kwargs = mock_upload.call_args
    assert kwargs["folder"] == "DevEvent"
    assert kwargs["resource_type"] == "image"
    assert kwargs["cloud_name"] == "demo"
    assert kwargs["api_key"] == "key123"
    assert kwargs["api_secret"] == "shh"
    assert kwargs["timeout"] == 30


@patch("utils.media.cloudinary.uploader.upload", side_effect=cloudinary.exceptions.Error("down"))
def test_upload_failure(_mock_upload, app):
    app.config.update(CLOUDINARY)
    url, err = upload_image(_file())
    assert url is None
    assert "down" in err


@patch("utils.media.cloudinary.uploader.upload", return_value={})
def test_upload_without_url(_mock_upload, app):
    app.config.update(CLOUDINARY)
    assert upload_image(_file()) == (None, "Media host returned no URL")
