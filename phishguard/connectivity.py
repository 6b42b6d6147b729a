import httpx
from .config import Settings, get_settings
from .utils.logging import get_logger

log = get_logger(__name__)


async def is_online(settings: Settings = None) -> bool:
    """Report whether the network is reachable right now.

    Any HTTP response from the probe URL counts as online; a transport or URL
    failure counts as offline. ``PHISHGUARD_OFFLINE=1`` forces offline.
    """
    settings = settings or get_settings()
    if settings.force_offline:
        return False
    try:
        async with httpx.AsyncClient(timeout=settings.connectivity_timeout) as client:
            await client.head(settings.connectivity_probe_url)
        return True
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        log.info(f"Connectivity probe failed: {e!r}")
        return False
