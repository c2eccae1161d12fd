SECRET_KEY = "test-secret"

# None keeps the cache in memory.
CACHE_DIR = None

REMOTE_BACKEND = "local"
SHEETS_API_URL = ""
BACKEND_PROXY_URL = ""
REST_URL = ""
REST_API_KEY = ""
REMOTE_ERROR_POLICY = ""

GEOCODER_URL = "http://geocoder.invalid"
GEOCODER_ENABLED = False
HTTP_TIMEOUT_SECONDS = 1.0

DEBUG = False
TESTING = True
