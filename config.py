# config.py
import os
from dotenv import load_dotenv

load_dotenv()

class Config:
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-secret-change-in-production'
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or 'sqlite:///vaultguard.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    BASE_DIR = os.path.abspath(os.path.dirname(__file__))
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER') or os.path.join(BASE_DIR, 'uploads')

    # 10 MB per document; the request cap leaves room for the multipart headers
    MAX_UPLOAD_SIZE = 10 * 1024 * 1024
    MAX_CONTENT_LENGTH = MAX_UPLOAD_SIZE + 64 * 1024

    # ==========================================================
    # ACCEPTED EXTENSIONS, GROUPED BY DOCUMENT KIND
    # ==========================================================
    DOCUMENT_KINDS = {
        'document': {'pdf', 'doc', 'docx', 'xls', 'xlsx', 'ppt', 'pptx', 'txt', 'csv', 'rtf', 'odt'},
        'image': {'jpg', 'jpeg', 'png', 'gif', 'webp'},
        'archive': {'zip', 'rar', '7z', 'tar', 'gz'},
        'audio': {'mp3', 'wav', 'ogg'},
        'video': {'mp4', 'mov', 'avi', 'mkv'},
    }
    ALLOWED_EXTENSIONS = set().union(*DOCUMENT_KINDS.values())

    LOGS_PER_PAGE = int(os.getenv('LOGS_PER_PAGE', 5))
    RECENT_ACTIVITY_LIMIT = 5

    # Signed tokens (seconds)
    API_TOKEN_MAX_AGE = int(os.getenv('API_TOKEN_MAX_AGE', 24 * 3600))
    RESET_TOKEN_MAX_AGE = int(os.getenv('RESET_TOKEN_MAX_AGE', 3600))

    TOTP_ISSUER = os.getenv('TOTP_ISSUER', 'VaultGuard')

    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')

    # ==========================================================
    # Mail
    # ==========================================================
    MAIL_SERVER = os.getenv('MAIL_SERVER', 'localhost')
    MAIL_PORT = int(os.getenv('MAIL_PORT', 587))
    MAIL_USE_TLS = os.getenv('MAIL_USE_TLS', 'True').lower() == 'true'
    MAIL_USE_SSL = os.getenv('MAIL_USE_SSL', 'False').lower() == 'true'
    MAIL_USERNAME = os.getenv('MAIL_USERNAME')
    MAIL_PASSWORD = os.getenv('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.getenv('MAIL_DEFAULT_SENDER', 'VaultGuard <no-reply@vaultguard.local>')
