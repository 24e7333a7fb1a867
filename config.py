import os


class Config:
    # Required: the app refuses to start without it
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL")
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Connection defaults (fixed, not tunable per call)
    DB_POOL_SIZE = 10
    DB_SERVER_SELECTION_TIMEOUT_SECONDS = 5
    DB_SOCKET_TIMEOUT_SECONDS = 45

    # Media host (Cloudinary)
    CLOUDINARY_CLOUD_NAME = os.getenv("CLOUDINARY_CLOUD_NAME")
    CLOUDINARY_API_KEY = os.getenv("CLOUDINARY_API_KEY")
    CLOUDINARY_API_SECRET = os.getenv("CLOUDINARY_API_SECRET")
    MEDIA_FOLDER = os.getenv("MEDIA_FOLDER", "DevEvent")
    MEDIA_UPLOAD_TIMEOUT_SECONDS = int(os.getenv("MEDIA_UPLOAD_TIMEOUT_SECONDS", "30"))

    # Slug lookups longer than this are rejected before hitting the store
    SLUG_MAX_LEN = 200

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
