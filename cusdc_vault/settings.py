"""Django settings for the cUSDC vault.


This project runs the confidential stablecoin flows in-process:
- Native ETH (native_stub) -> fixed-rate cUSDC mint (core ledger)
- cUSDC + ETH -> liquidity on the AMM router (router_stub), exact refunds
- Balance handles decrypted through signed, time-boxed grants (fhe_stub)


Wallet UI, deployment and the real confidential-computation relayer are out of scope.
"""

import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.getenv("DEBUG", "1") in ("1", "true", "True", "yes")
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")
CSRF_TRUSTED_ORIGINS = os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if os.getenv("CSRF_TRUSTED_ORIGINS") else []

def env_bool(name, default=""):
    v = os.getenv(name, default)
    return v.lower() in ("1", "true", "yes", "on")

#######################
# Chain + contract addresses (deploy-time constants)
CHAIN_ID = int(os.getenv("CHAIN_ID", "11155111"))  # sepolia

CUSDC_OWNER_ADDRESS = os.getenv("CUSDC_OWNER_ADDRESS", "0x0000000000000000000000000000000000000c00")
CUSDC_ADDRESS = os.getenv("CUSDC_ADDRESS", "0x0000000000000000000000000000000000000c01")
SWAP_ADDRESS = os.getenv("SWAP_ADDRESS", "0x0000000000000000000000000000000000000c02")
LIQUIDITY_ADDRESS = os.getenv("LIQUIDITY_ADDRESS", "0x0000000000000000000000000000000000000c03")
ROUTER_ADDRESS = os.getenv("ROUTER_ADDRESS", "0x0000000000000000000000000000000000000c04")
DECRYPTION_VERIFIER_ADDRESS = os.getenv("DECRYPTION_VERIFIER_ADDRESS", "0x0000000000000000000000000000000000000c05")

# Fixed swap rate: 1 ETH -> CUSDC_PER_ETH cUSDC. Changing it means redeploying.
CUSDC_PER_ETH = int(os.getenv("CUSDC_PER_ETH", "3100"))

# Where unused ETH from a liquidity call goes: "caller" or "reserve"
LIQUIDITY_BASE_REFUND_POLICY = os.getenv("LIQUIDITY_BASE_REFUND_POLICY", "caller")

# Client defaults (mirrors the dApp)
DEFAULT_SLIPPAGE_BPS = int(os.getenv("DEFAULT_SLIPPAGE_BPS", "100"))
LIQUIDITY_DEADLINE_SECONDS = int(os.getenv("LIQUIDITY_DEADLINE_SECONDS", "900"))
DECRYPTION_DEFAULT_DAYS = int(os.getenv("DECRYPTION_DEFAULT_DAYS", "10"))

# Off => the relayer behaves as unreachable
FHE_RELAYER_ENABLED = env_bool("FHE_RELAYER_ENABLED", "1")
#######################


INSTALLED_APPS = [
	"django.contrib.admin",
	"django.contrib.auth",
	"django.contrib.contenttypes",
	"django.contrib.sessions",
	"django.contrib.messages",
	"django.contrib.staticfiles",
	# local apps
	"core",
	"api",
	"native_stub",
	"fhe_stub",
	"router_stub",
]


MIDDLEWARE = [
	"django.middleware.security.SecurityMiddleware",
	"django.contrib.sessions.middleware.SessionMiddleware",
	"django.middleware.common.CommonMiddleware",
	"django.middleware.csrf.CsrfViewMiddleware",
	"django.contrib.auth.middleware.AuthenticationMiddleware",
	"django.contrib.messages.middleware.MessageMiddleware",
]


ROOT_URLCONF = "cusdc_vault.urls"
TEMPLATES = [
	{
		"BACKEND": "django.template.backends.django.DjangoTemplates",
		"DIRS": [],
		"APP_DIRS": True,
		"OPTIONS": {
			"context_processors": [
				"django.template.context_processors.debug",
				"django.template.context_processors.request",
				"django.contrib.auth.context_processors.auth",
				"django.contrib.messages.context_processors.messages",
			],
		},
	},
]


DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")
if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "cusdc_vault"),
            "USER": os.getenv("POSTGRES_USER", "cusdc_vault"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", "cusdc_vault"),
            "HOST": os.getenv("POSTGRES_HOST", "localhost"),
            "PORT": os.getenv("POSTGRES_PORT", "5432"),
        }
    }
else:
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.sqlite3",
            "NAME": BASE_DIR / "db.sqlite3",
        }
    }


LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOGGING = {
	"version": 1,
	"disable_existing_loggers": False,
	"formatters": {
		"plain": {"format": "%(asctime)s %(levelname)s %(name)s: %(message)s"},
	},
	"handlers": {
		"console": {"class": "logging.StreamHandler", "formatter": "plain"},
	},
	"loggers": {
		"core": {"handlers": ["console"], "level": LOG_LEVEL},
		"fhe_stub": {"handlers": ["console"], "level": LOG_LEVEL},
		"router_stub": {"handlers": ["console"], "level": LOG_LEVEL},
	},
}


AUTH_PASSWORD_VALIDATORS = []


LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


# Token uses 6 decimals (cUSDC); native currency uses 18 (wei).
TOKEN_DECIMALS = 6
NATIVE_DECIMALS = 18
