"""Django settings for the DApp token ledger demo.


This project runs the contract side of a small decentralized-application demo:
- DAppToken (ERC20 ledger + ownership + time-locked staking + ETH custody)
- Counter
- a deterministic local dev chain (chain_stub) and wallet provider (wallet_stub)


Signing, gas and multi-chain support are intentionally omitted for clarity.
"""

import os
from pathlib import Path


BASE_DIR = Path(__file__).resolve().parent.parent
SECRET_KEY = os.getenv("DJANGO_SECRET_KEY", "dev-only-insecure-key")
DEBUG = os.getenv("DEBUG", "1") in ("1", "true", "True", "yes")
ALLOWED_HOSTS = os.getenv("ALLOWED_HOSTS", "*").split(",")
CSRF_TRUSTED_ORIGINS = os.getenv("CSRF_TRUSTED_ORIGINS", "").split(",") if os.getenv("CSRF_TRUSTED_ORIGINS") else []


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
	"wallet_stub",
	"chain_stub",
]


MIDDLEWARE = [
	"django.middleware.security.SecurityMiddleware",
	"django.contrib.sessions.middleware.SessionMiddleware",
	"django.middleware.common.CommonMiddleware",
	"django.middleware.csrf.CsrfViewMiddleware",
	"django.contrib.auth.middleware.AuthenticationMiddleware",
	"django.contrib.messages.middleware.MessageMiddleware",
]


ROOT_URLCONF = "dapp_ledger.urls"
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


WSGI_APPLICATION = "dapp_ledger.wsgi.application"


DB_ENGINE = os.getenv("DB_ENGINE", "sqlite")
if DB_ENGINE == "postgres":
    DATABASES = {
        "default": {
            "ENGINE": "django.db.backends.postgresql",
            "NAME": os.getenv("POSTGRES_DB", "dapp_ledger"),
            "USER": os.getenv("POSTGRES_USER", "dapp_ledger"),
            "PASSWORD": os.getenv("POSTGRES_PASSWORD", "dapp_ledger"),
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



AUTH_PASSWORD_VALIDATORS = []


LANGUAGE_CODE = "en-us"
TIME_ZONE = "UTC"
USE_I18N = True
USE_TZ = True


STATIC_URL = "static/"
DEFAULT_AUTO_FIELD = "django.db.models.BigAutoField"


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
		"api": {"handlers": ["console"], "level": LOG_LEVEL},
		"client": {"handlers": ["console"], "level": LOG_LEVEL},
		"wallet_stub": {"handlers": ["console"], "level": LOG_LEVEL},
		"chain_stub": {"handlers": ["console"], "level": LOG_LEVEL},
	},
}


#######################
# Dev chain the wallet switches to (falls back to wallet_addEthereumChain on 4902)
CHAIN_ID = int(os.getenv("CHAIN_ID", "31337"))
CHAIN_NAME = os.getenv("CHAIN_NAME", "Hardhat Local Network")
RPC_URL = os.getenv("RPC_URL", "http://127.0.0.1:8545")
NATIVE_SYMBOL = "ETH"
NATIVE_DECIMALS = 18

# Blocks to wait for before a write counts as done on the client
CONFIRMATIONS = int(os.getenv("CONFIRMATIONS", "1"))
#######################


# Demo-wide constants: token uses 18 decimals; supply is given in whole tokens.
TOKEN_NAME = "DApp Demo Token"
TOKEN_SYMBOL = "DDT"
TOKEN_DECIMALS = 18
TOKEN_INITIAL_SUPPLY = os.getenv("TOKEN_INITIAL_SUPPLY", "1000000")

# Well-known dev chain accounts, funded by the demo faucet
DEMO_ACCOUNTS = [
	"0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266",
	"0x70997970C51812dc3A010C7d01b50e0d17dc79C8",
	"0x3C44CdDdB6a900fa2b585dd299e03d12FA4293BC",
	"0x90F79bf6EB2c4f870365E785982E1f101E93b906",
]
DEMO_ACCOUNT_BALANCE_ETH = os.getenv("DEMO_ACCOUNT_BALANCE_ETH", "10000")
