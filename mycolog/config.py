import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-key-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "postgresql://localhost:5432/mycolog"
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Photo storage
    UPLOAD_FOLDER = os.environ.get("UPLOAD_FOLDER", "/tmp/mycolog-uploads")
    MAX_CONTENT_LENGTH = 20 * 1024 * 1024  # 20MB max photo size
    ALLOWED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "webp", "heic"}

    # AI assistant (Gemini generateContent REST API)
    GEMINI_API_KEY = os.environ.get("GEMINI_API_KEY", "")
    GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.0-flash")
    GEMINI_BASE_URL = os.environ.get(
        "GEMINI_BASE_URL", "https://generativelanguage.googleapis.com/v1beta"
    )
    ASSISTANT_TIMEOUT = float(os.environ.get("ASSISTANT_TIMEOUT", "30"))

    # Operation stage whose quantities are weights in grams
    HARVEST_OPERATION = os.environ.get("HARVEST_OPERATION", "Harvest")

    # Most unit batches one bulk create or expand may produce
    MAX_BULK_COUNT = int(os.environ.get("MAX_BULK_COUNT", "500"))
