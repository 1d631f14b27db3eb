import os

# ✅ Environment
ENVIRONMENT = os.getenv("ENVIRONMENT", "production")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

# ✅ Database
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./cvforge.db")
RUN_MIGRATIONS = os.getenv("RUN_MIGRATIONS", "0")

# ✅ Security
SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
LOGIN_RATE_LIMIT = int(os.getenv("LOGIN_RATE_LIMIT", "20"))

# ✅ Admin allow-list (comma-separated emails)
ADMIN_EMAILS = {
    email.strip().lower()
    for email in os.getenv("ADMIN_EMAILS", "").split(",")
    if email.strip()
}

# ✅ CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://localhost:3000,https://localhost:5173",
    ).split(",")
    if origin.strip()
]

# ✅ OpenAI
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY")
OPENAI_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o")

# ✅ Stripe
STRIPE_SECRET_KEY = os.getenv("STRIPE_SECRET_KEY")
STRIPE_WEBHOOK_SECRET = os.getenv("STRIPE_WEBHOOK_SECRET")
CLIENT_URL = os.getenv("CLIENT_URL", "http://localhost:5173")

# plan -> currency -> Stripe price ID. Missing entries mean "no price for that currency".
PRODUCT_PRICES = {
    "basic": {
        currency: price_id
        for currency, price_id in (
            ("USD", os.getenv("BASIC_PRICE_ID_USD")),
            ("EUR", os.getenv("BASIC_PRICE_ID_EUR")),
        )
        if price_id
    },
    "pro": {
        currency: price_id
        for currency, price_id in (
            ("USD", os.getenv("PRO_PRICE_ID_USD")),
            ("EUR", os.getenv("PRO_PRICE_ID_EUR")),
        )
        if price_id
    },
}

# ✅ Automation hook (billing notifications)
NOTIFICATION_WEBHOOK_URL = os.getenv("NOTIFICATION_WEBHOOK_URL")
NOTIFICATION_TIMEOUT_SECONDS = float(os.getenv("NOTIFICATION_TIMEOUT_SECONDS", "5"))
