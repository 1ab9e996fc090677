import os
import sys
from pathlib import Path
from dotenv import load_dotenv
from django.core.exceptions import ImproperlyConfigured

BASE_DIR = Path(__file__).resolve().parent.parent
# Try root project .env (one directory up from BASE_DIR) first, then local
root_env = (BASE_DIR.parent / '.env')
local_env = (BASE_DIR / '.env')
if root_env.exists():
    load_dotenv(root_env)
elif local_env.exists():
    load_dotenv(local_env)

DEBUG = os.getenv('DEBUG', 'True') == 'True'

INSTALLED_APPS = [
    'rest_framework',
    'apps.common',
    'apps.catalog',
    'apps.carts',
    'apps.auth.apps.AuthConfig',
    'apps.orders',
]

# The client keeps no relational state; every record lives in the remote
# document store or in the local key-value cache below.
DATABASES = {}

# ---------------------------------------------------------------------------
# FIREBASE
# FIREBASE_API_KEY is the public web API key used by the Identity Toolkit REST
# endpoints. FIREBASE_CREDENTIALS_PATH points at a service account file; when
# unset, Application Default Credentials are used for Firestore.
# ---------------------------------------------------------------------------
FIREBASE_API_KEY = os.getenv('FIREBASE_API_KEY', '')
FIREBASE_PROJECT_ID = os.getenv('FIREBASE_PROJECT_ID', '')
FIREBASE_CREDENTIALS_PATH = os.getenv('FIREBASE_CREDENTIALS_PATH') or None
FIREBASE_AUTH_URL = os.getenv(
    'FIREBASE_AUTH_URL', 'https://identitytoolkit.googleapis.com/v1'
)
FIREBASE_TOKEN_URL = os.getenv(
    'FIREBASE_TOKEN_URL', 'https://securetoken.googleapis.com/v1'
)
try:
    FIREBASE_AUTH_TIMEOUT = float(os.getenv('FIREBASE_AUTH_TIMEOUT', '10'))
except ValueError as exc:
    raise ImproperlyConfigured('FIREBASE_AUTH_TIMEOUT must be a number of seconds.') from exc

PRODUCTS_COLLECTION = os.getenv('PRODUCTS_COLLECTION', 'Products')
USERS_COLLECTION = os.getenv('USERS_COLLECTION', 'Users')
ORDERS_COLLECTION = os.getenv('ORDERS_COLLECTION', 'Orders')

DEFAULT_USER_ROLE = os.getenv('DEFAULT_USER_ROLE', 'mechanic')
if DEFAULT_USER_ROLE not in ('mechanic', 'admin'):
    raise ImproperlyConfigured(
        "DEFAULT_USER_ROLE must be either 'mechanic' or 'admin'."
    )

# ---------------------------------------------------------------------------
# LOCAL STORAGE
# Device-local durable key/value slots (cart snapshot, auth session) are kept
# in a file based cache that never expires entries.
# ---------------------------------------------------------------------------
STOREFRONT_DATA_DIR = os.getenv('STOREFRONT_DATA_DIR', str(BASE_DIR.parent / 'data'))
LOCAL_STORAGE_CACHE_ALIAS = 'local'
CART_STORAGE_KEY = os.getenv('CART_STORAGE_KEY', '@cart_items')
AUTH_STORAGE_KEY = os.getenv('AUTH_STORAGE_KEY', '@auth_session')

CACHES = {
    'default': {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'storefront-default',
    },
    LOCAL_STORAGE_CACHE_ALIAS: {
        'BACKEND': 'django.core.cache.backends.filebased.FileBasedCache',
        'LOCATION': os.path.join(STOREFRONT_DATA_DIR, 'storage'),
        'TIMEOUT': None,
        'OPTIONS': {'MAX_ENTRIES': 10000},
    },
}

# Use local in-memory storage for tests so runs never touch the data dir
USING_PYTEST = (
    os.getenv('PYTEST_CURRENT_TEST') is not None
    or 'pytest' in sys.modules
    or any(os.path.basename(arg).startswith('pytest') for arg in sys.argv)
)

if 'test' in sys.argv or USING_PYTEST:
    CACHES[LOCAL_STORAGE_CACHE_ALIAS] = {
        'BACKEND': 'django.core.cache.backends.locmem.LocMemCache',
        'LOCATION': 'storefront-test-storage',
        'TIMEOUT': None,
    }

LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG' if DEBUG else 'INFO').upper()

LOGGING = {
    'version': 1,
    'disable_existing_loggers': False,
    'formatters': {
        'plain': {
            'format': '%(asctime)s | %(levelname)s | %(name)s | %(message)s',
        },
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'formatter': 'plain',
        },
    },
    'loggers': {
        'apps': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': True},
        'storefront': {'handlers': ['console'], 'level': LOG_LEVEL, 'propagate': True},
    },
}

LANGUAGE_CODE = 'en-us'
TIME_ZONE = 'UTC'
USE_I18N = True
USE_TZ = True
