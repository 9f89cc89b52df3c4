import os
from dotenv import load_dotenv

load_dotenv()

class Settings:
	APP_NAME = os.getenv("APP_NAME", "RentEase")

	# "local" runs against the embedded SQLAlchemy backend, "supabase" against a hosted project
	BACKEND = os.getenv("BACKEND", "local").lower()
	DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./rentease.db")

	SUPABASE_URL = os.getenv("SUPABASE_URL", "")
	SUPABASE_ANON_KEY = os.getenv("SUPABASE_ANON_KEY", "")
	SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET", "")
	BACKEND_TIMEOUT_SEC = float(os.getenv("BACKEND_TIMEOUT_SEC", "10"))

	JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me")
	JWT_ALG = "HS256"

	ACCESS_TOKEN_EXPIRES_MIN = int(os.getenv("ACCESS_TOKEN_EXPIRES_MIN", "60"))
	REFRESH_TOKEN_EXPIRES_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRES_DAYS", "14"))

	SESSION_COOKIE_PREFIX = os.getenv("SESSION_COOKIE_PREFIX", "rentease")
	COOKIE_SECURE = os.getenv("COOKIE_SECURE", "false").lower() == "true"

	LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

settings = Settings()
