import logging
from typing import Dict

import httpx

from .config import EmulatorSettings

logger = logging.getLogger(__name__)


async def probe(client: httpx.AsyncClient, host: str, port: int, timeout: float) -> bool:
    """
    True when anything answers HTTP on ``host:port``. Any status code
    counts; refused connections and timeouts do not.
    """
    url = f"http://{host}:{port}/"
    try:
        await client.get(url, timeout=timeout)
    except httpx.HTTPError as exc:
        logger.debug(f"Probe {url} failed: {exc!r}")
        return False
    return True


async def check_emulators(settings: EmulatorSettings) -> Dict[str, bool]:
    """Probe the Firestore and Auth emulators one after the other."""
    targets = {
        "Firestore": settings.firestore_port,
        "Authentication": settings.auth_port,
    }
    results = {}
    async with httpx.AsyncClient() as client:
        for name, port in targets.items():
            results[name] = await probe(client, settings.host, port, settings.probe_timeout)
            logger.info(f"{name} emulator on port {port}: {'up' if results[name] else 'down'}")
    return results
