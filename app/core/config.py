import os

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./inrooms.db")
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0") == "1"

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY")  # required; the app refuses to start without it
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))

# Shared secret for the OAuth callback handler that mirrors provider profiles
OAUTH_SYNC_SECRET = os.getenv("OAUTH_SYNC_SECRET")

# ✅ Subscription defaults for new accounts
TRIAL_DAYS = int(os.getenv("TRIAL_DAYS", "14"))
DEFAULT_EVENTS_QUOTA = int(os.getenv("DEFAULT_EVENTS_QUOTA", "3"))

# ✅ Stripe
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")

# ✅ Google Calendar (Meet links)
GOOGLE_CLIENT_EMAIL = os.getenv("GOOGLE_CLIENT_EMAIL")
GOOGLE_PRIVATE_KEY = os.getenv("GOOGLE_PRIVATE_KEY")
GOOGLE_CALENDAR_ID = os.getenv("GOOGLE_CALENDAR_ID", "primary")

# ✅ Frontend
FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv("CORS_ORIGINS", FRONTEND_URL).split(",")
    if origin.strip()
]

# ✅ Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "logs")  # empty string logs to the console only
