from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from .attendance.service import AttendanceService
from .cache.local_cache import LocalCache
from .cache.store import FileKeyValueStore, InMemoryKeyValueStore, KeyValueStore
from .core.constants import DEFAULT_GEOCODER_URL, DEFAULT_HTTP_TIMEOUT_SECONDS
from .core.enums import BackendKind, ErrorPolicy
from .geo.geocoder import NominatimGeocoder, NullGeocoder, ReverseGeocoder
from .remote.action_adapter import ActionSyncAdapter
from .remote.local_adapter import LocalSyncAdapter
from .remote.repository import RemoteSyncAdapter
from .remote.rest_adapter import RestSyncAdapter
from .users.service import AuthService, UserService

_DEFAULT_POLICIES = {
    BackendKind.SHEETS: ErrorPolicy.FALLBACK,
    BackendKind.PROXY: ErrorPolicy.PROPAGATE,
    BackendKind.REST: ErrorPolicy.PROPAGATE,
}


@dataclass(frozen=True)
class Container:
    cache: LocalCache
    remote: RemoteSyncAdapter
    geocoder: ReverseGeocoder

    auth_service: AuthService
    user_service: UserService
    attendance_service: AttendanceService


def build_remote(settings: Any, cache: LocalCache) -> RemoteSyncAdapter:
    local = LocalSyncAdapter(cache)
    kind = BackendKind(str(getattr(settings, "REMOTE_BACKEND", "local") or "local").lower())
    if kind == BackendKind.LOCAL:
        return local

    override = str(getattr(settings, "REMOTE_ERROR_POLICY", "") or "").lower()
    policy = ErrorPolicy(override) if override else _DEFAULT_POLICIES[kind]
    timeout = float(getattr(settings, "HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS))
    fallback = local if policy == ErrorPolicy.FALLBACK else None

    if kind == BackendKind.SHEETS:
        return ActionSyncAdapter(
            getattr(settings, "SHEETS_API_URL", ""), policy=policy, fallback=fallback, timeout=timeout
        )
    if kind == BackendKind.PROXY:
        return ActionSyncAdapter(
            getattr(settings, "BACKEND_PROXY_URL", ""), policy=policy, fallback=fallback, timeout=timeout
        )
    return RestSyncAdapter(
        getattr(settings, "REST_URL", ""),
        getattr(settings, "REST_API_KEY", ""),
        policy=policy,
        fallback=fallback,
        timeout=timeout,
    )


def build_container(*, settings: Any, store: Optional[KeyValueStore] = None) -> Container:
    if store is None:
        cache_dir = getattr(settings, "CACHE_DIR", None)
        store = FileKeyValueStore(cache_dir) if cache_dir else InMemoryKeyValueStore()
    cache = LocalCache(store)

    remote = build_remote(settings, cache)

    if getattr(settings, "GEOCODER_ENABLED", True):
        geocoder: ReverseGeocoder = NominatimGeocoder(
            getattr(settings, "GEOCODER_URL", DEFAULT_GEOCODER_URL),
            timeout=float(getattr(settings, "HTTP_TIMEOUT_SECONDS", DEFAULT_HTTP_TIMEOUT_SECONDS)),
        )
    else:
        geocoder = NullGeocoder()

    auth_service = AuthService(remote, cache)
    user_service = UserService(remote)
    attendance_service = AttendanceService(cache, remote, geocoder=geocoder)

    return Container(
        cache=cache,
        remote=remote,
        geocoder=geocoder,
        auth_service=auth_service,
        user_service=user_service,
        attendance_service=attendance_service,
    )
