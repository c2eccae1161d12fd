import os

from .config import Config

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

CACHE_DIR = Config.CACHE_DIR

REMOTE_BACKEND = Config.REMOTE_BACKEND
SHEETS_API_URL = Config.SHEETS_API_URL
BACKEND_PROXY_URL = Config.BACKEND_PROXY_URL
REST_URL = Config.REST_URL
REST_API_KEY = Config.REST_API_KEY
REMOTE_ERROR_POLICY = Config.REMOTE_ERROR_POLICY

GEOCODER_URL = Config.GEOCODER_URL
GEOCODER_ENABLED = Config.GEOCODER_ENABLED
HTTP_TIMEOUT_SECONDS = Config.HTTP_TIMEOUT_SECONDS

DEBUG = False
