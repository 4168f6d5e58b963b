"""
Django settings for the name registry client.

Everything is read from the environment (optionally via a .env file).
"""
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(override=True)

# Build paths inside the project like this: BASE_DIR / 'subdir'.
BASE_DIR = Path(__file__).resolve().parent.parent


# ---------------- Security ------------------------------------------------- #

SECRET_KEY = os.getenv('SECRET_KEY', '')

DEBUG = os.getenv('DEBUG', 'false').lower() == 'true'

ALLOWED_HOSTS = [
  'localhost',
  '127.0.0.1',
  'testserver',
] + [h for h in os.getenv('ALLOWED_HOSTS', '').split(',') if h]


# ---------------- Application definition ---------------------------------- #

INSTALLED_APPS = [
  'naming',
]

MIDDLEWARE = [
  'django.middleware.security.SecurityMiddleware',
  'django.middleware.common.CommonMiddleware',
]

ROOT_URLCONF = 'config.urls'

WSGI_APPLICATION = 'config.wsgi.nameRegistry'

# No models; the registry lives on chain.
DATABASES = {}


# ---------------- Internationalization ------------------------------------ #

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = False
USE_TZ = True


# ---------------- Logging ------------------------------------------------- #

LOGGING = {
  'version': 1,
  'disable_existing_loggers': False,
  'formatters': {
    'wide_event': {
      'format': '%(message)s',
    },
  },
  'handlers': {
    'wide_event_console': {
      'class': 'logging.StreamHandler',
      'formatter': 'wide_event',
    },
  },
  'loggers': {
    'wide_event': {
      'handlers': ['wide_event_console'],
      'level': os.getenv('LOG_LEVEL', 'INFO'),
      'propagate': False,
    },
  },
}


# ---------------- Web3 / ENS Config --------------------------------------- #

ENS_CHAIN_ID = int(os.getenv('ENS_CHAIN_ID', '1'))

MAINNET_RPC_URL = os.getenv('MAINNET_RPC_URL', '')
SEPOLIA_RPC_URL = os.getenv('SEPOLIA_RPC_URL', '')
HOLESKY_RPC_URL = os.getenv('HOLESKY_RPC_URL', '')

# Overrides the known registry deployment (devnets, forks)
ENS_REGISTRY_ADDRESS = os.getenv('ENS_REGISTRY_ADDRESS', '')

# Backend wallet for writes; empty means the node signs for tx_config['from']
BACKEND_PRIVATE_KEY = os.getenv('BACKEND_PRIVATE_KEY', '')
ENS_DEFAULT_GAS = int(os.getenv('ENS_DEFAULT_GAS', '200000'))
