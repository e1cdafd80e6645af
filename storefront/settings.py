import os
from pathlib import Path
from dotenv import load_dotenv
load_dotenv()


BASE_DIR = Path(__file__).resolve().parent.parent

SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "django-insecure-storefront-dev-key-change-me")

DEBUG = os.getenv("DJANGO_DEBUG", "1") not in ("0", "false", "False", "")
ALLOWED_HOSTS = ["localhost", "127.0.0.1", "testserver", os.getenv("HOST", "")]

INSTALLED_APPS = [
    "django.contrib.contenttypes",
    "django.contrib.messages",
    "django.contrib.staticfiles",
    # app
    "catalog",
    "cart",
    "payment",
]

MIDDLEWARE = [
    "django.middleware.security.SecurityMiddleware",
    "django.middleware.common.CommonMiddleware",
    "django.middleware.csrf.CsrfViewMiddleware",
    "django.contrib.messages.middleware.MessageMiddleware",
    "cart.middleware.CartCookieMiddleware",
    "django.middleware.clickjacking.XFrameOptionsMiddleware",
]

ROOT_URLCONF = "storefront.urls"

TEMPLATES = [
    {
        "BACKEND": "django.template.backends.django.DjangoTemplates",
        "DIRS": [BASE_DIR / "templates"],
        "APP_DIRS": True,
        "OPTIONS": {
            "context_processors": [
                "django.template.context_processors.debug",
                "django.template.context_processors.request",
                "django.contrib.messages.context_processors.messages",
                "cart.context_processors.cart_meta",
            ],
        },
    },
]

WSGI_APPLICATION = "storefront.wsgi.application"

# Catalog and cart live in memory and in the cart cookie; nothing is stored here.
DATABASES = {
    "default": {
        "ENGINE": "django.db.backends.sqlite3",
        "NAME": BASE_DIR / "db.sqlite3",
    }
}

USE_I18N = True
LANGUAGE_CODE = "en"
TIME_ZONE = "UTC"
USE_TZ = True

STATIC_URL = "/static/"
STATIC_ROOT = BASE_DIR / "staticfiles"

DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"

MESSAGE_STORAGE = "django.contrib.messages.storage.cookie.CookieStorage"

SITE_NAME = os.getenv("SITE_NAME", "LH Books")

# Email info

EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "django.core.mail.backends.console.EmailBackend")
DEFAULT_FROM_EMAIL = os.getenv("DEFAULT_FROM_EMAIL", f"{SITE_NAME} <orders@example.com>")
SUPPORT_EMAIL = os.getenv("SUPPORT_EMAIL", "support@example.com")

# Cart cookie

CART_COOKIE_NAME = os.getenv("CART_COOKIE_NAME", "cart")
CART_COOKIE_AGE = int(os.getenv("CART_COOKIE_AGE", 60 * 60 * 24 * 7))  # 7 days
CART_COOKIE_SECURE = not DEBUG
CART_PLACEHOLDER_IMAGE = "/placeholder-image.jpg"

# Payments

CART_DELIVERY_FEE = os.getenv("CART_DELIVERY_FEE", "2.00")
PAYMENT_CURRENCY = os.getenv("PAYMENT_CURRENCY", "usd")
PAYMENT_SUBMIT_DELAY = float(os.getenv("PAYMENT_SUBMIT_DELAY", "2"))
PAYMENT_PROCESSING_SECONDS = int(os.getenv("PAYMENT_PROCESSING_SECONDS", "10"))
PAYMENT_RECEIPT_COOKIE = "checkout_receipt"

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "root": {
        "handlers": ["console"],
        "level": os.getenv("LOG_LEVEL", "INFO"),
    },
}
