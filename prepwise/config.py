# prepwise/config.py
import os

from dotenv import load_dotenv

load_dotenv()

# =====================================================
# BASE DIRECTORY
# =====================================================
BASE_DIR = os.path.dirname(os.path.abspath(__file__))


class Config:
    # Database
    MONGO_URI = os.getenv("MONGO_URI")
    MONGO_DB_NAME = os.getenv("MONGO_DB_NAME", "prepwise")

    # Tokens
    JWT_SECRET = os.getenv("JWT_SECRET", "CHANGE_THIS_SECRET")
    JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", 7))

    # URLs
    BASE_URL = os.getenv("BASE_URL", "http://localhost:5000")
    CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:3000")

    # Uploads
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(BASE_DIR, "uploads"))
    MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 5 * 1024 * 1024))
    # multipart overhead on top of the single allowed file
    MAX_CONTENT_LENGTH = MAX_UPLOAD_BYTES + 1024 * 1024

    # Institution
    INSTITUTION_EMAIL_DOMAIN = os.getenv("INSTITUTION_EMAIL_DOMAIN", "@vnrvjiet.in")
    PINNED_REGULATION = os.getenv("PINNED_REGULATION", "R22")
    PINNED_YEAR = int(os.getenv("PINNED_YEAR", 2))
    PINNED_SEMESTER = int(os.getenv("PINNED_SEMESTER", 1))

    # Runtime
    APP_ENV = os.getenv("APP_ENV", "development")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    PORT = int(os.getenv("PORT", 5000))
