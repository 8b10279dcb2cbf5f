# ==========================================================================================================
# -------------- Configuration file for the Goalux Flask application ---------------------------------------
# ==========================================================================================================
import os
from dotenv import load_dotenv


if os.environ.get("FLASK_ENV") != "production":
    load_dotenv()

basedir = os.path.abspath(os.path.dirname(__file__))

class Config:

    SECRET_KEY = os.getenv("SECRET_KEY")
    if not SECRET_KEY:
        raise ValueError("SECRET_KEY must be set in production")

    FLASK_ENV = os.getenv("FLASK_ENV", "production")
    DEBUG = os.getenv("DEBUG", "False").lower() in ("true", "1", "t")
    PORT = int(os.getenv("PORT", "3000"))

    # Bearer tokens
    JWT_SECRET = os.getenv("JWT_SECRET") or SECRET_KEY
    JWT_ALGORITHM = "HS256"
    JWT_EXPIRES_SECONDS = int(os.getenv("JWT_EXPIRES_SECONDS", "3600"))

    _database_url = os.getenv("DATABASE_URL")
    if not _database_url:
        _database_url = f"sqlite:///{os.path.join(basedir, 'instance', 'goalux.db')}"

    if _database_url.startswith("postgres://"):
        _database_url = _database_url.replace("postgres://", "postgresql://", 1)

    SQLALCHEMY_DATABASE_URI = _database_url
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {"pool_pre_ping": True}
    if not _database_url.startswith("sqlite"):
        SQLALCHEMY_ENGINE_OPTIONS.update({
            "pool_size": 10,
            "max_overflow": 20,
            "pool_recycle": 300,
        })

    # Paytm gateway (placeholders until merchant credentials are issued)
    PAYTM_MID = os.getenv("PAYTM_MID", "YOUR_TEST_MID")
    PAYTM_MERCHANT_KEY = os.getenv("PAYTM_MERCHANT_KEY", "YOUR_TEST_KEY")
    PAYTM_WEBSITE = os.getenv("PAYTM_WEBSITE", "WEBSTAGING")
    PAYTM_CALLBACK_URL = os.getenv("PAYTM_CALLBACK_URL", "http://localhost:3000/callback")

    REFERRAL_CODE_PREFIX = os.getenv("REFERRAL_CODE_PREFIX", "GOALUX")

    LOG_DIR = os.getenv("LOG_DIR", "logs")
