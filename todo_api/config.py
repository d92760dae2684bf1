import os

SECRET_KEY = os.environ.get("SECRET_KEY", "CHANGE_ME_DEV_SECRET_KEY")
ALGORITHM = os.environ.get("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = float(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60))

# Default to local SQLite for dev/tests; override via env in Docker/Prod
DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./todo.db")
DB_POOL_SIZE = int(os.environ.get("DB_POOL_SIZE", 10))
DB_MAX_OVERFLOW = int(os.environ.get("DB_MAX_OVERFLOW", 90))
DB_POOL_RECYCLE = int(os.environ.get("DB_POOL_RECYCLE", 3600))

# Attachment storage
UPLOAD_DIR = os.environ.get("UPLOAD_DIR", "uploads")
LOCAL_STORAGE_URL_PREFIX = os.environ.get("LOCAL_STORAGE_URL_PREFIX", "")
S3_BUCKET_NAME = os.environ.get("S3_BUCKET_NAME", "todo-attachments")
S3_REGION = os.environ.get("S3_REGION", "us-east-1")
S3_ENDPOINT_URL = os.environ.get("S3_ENDPOINT_URL") or None
MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
ALLOWED_UPLOAD_EXTENSIONS = (".jpg", ".jpeg", ".png", ".webp")

# Shared secret for the static-key routes
STATIC_API_KEY = os.environ.get("STATIC_API_KEY", "secret_Key")

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
