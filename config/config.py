import os


def env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY") or "geo-attendance-dev-key"

    # Device-local cache
    CACHE_DIR = os.environ.get("CACHE_DIR", os.path.join(os.getcwd(), "var", "cache"))

    # Remote backend: local | sheets | proxy | rest
    REMOTE_BACKEND = os.environ.get("REMOTE_BACKEND", "local").lower()
    SHEETS_API_URL = os.environ.get("SHEETS_API_URL", "")
    BACKEND_PROXY_URL = os.environ.get("BACKEND_PROXY_URL", "")
    REST_URL = os.environ.get("REST_URL", "")
    REST_API_KEY = os.environ.get("REST_API_KEY", "")
    # Optional override of the backend's default policy: fallback | propagate
    REMOTE_ERROR_POLICY = os.environ.get("REMOTE_ERROR_POLICY", "")

    GEOCODER_URL = os.environ.get("GEOCODER_URL", "https://nominatim.openstreetmap.org")
    GEOCODER_ENABLED = env_flag("GEOCODER_ENABLED", "1")
    HTTP_TIMEOUT_SECONDS = float(os.environ.get("HTTP_TIMEOUT_SECONDS", "10"))
