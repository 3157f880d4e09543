"""Request throttling for the write-heavy buyer endpoints.

RFQ submission, inquiry notifications and chat messages take the stricter
``settings.rate_limit_submit``; every other route gets
``settings.rate_limit_default``. Clients are keyed by remote address.
Limits live in process memory unless RATE_LIMIT_STORAGE_URI names a shared
backend (e.g. ``redis://``), which multi-worker deployments need.
"""

from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address

from .config import settings


def _resolve_storage() -> str | None:
    uri = settings.rate_limit_storage_uri
    if not uri:
        return None
    logger.info("Rate limits stored in {}", uri.partition(":")[0])
    return uri


limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[settings.rate_limit_default],
    storage_uri=_resolve_storage(),
    enabled=settings.rate_limit_enabled,
)
