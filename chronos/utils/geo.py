import asyncio
import logging
import os
from typing import Optional

import requests

from chronos.storage.models import Coordinates
from chronos.utils.http import SESSION, TIMEOUT

GEO_LOOKUP_URL = os.getenv("GEO_LOOKUP_URL", "https://ipapi.co/json/")

logger = logging.getLogger(__name__)


def _env_location() -> Optional[Coordinates]:
    lat, lng = os.getenv("CHRONOS_LAT"), os.getenv("CHRONOS_LNG")
    if not lat or not lng:
        return None
    try:
        return Coordinates(lat=float(lat), lng=float(lng))
    except ValueError:
        logger.warning("CHRONOS_LAT/CHRONOS_LNG inválidos: %r, %r", lat, lng)
        return None


def lookup_ip_location(url: str = GEO_LOOKUP_URL, session: Optional[requests.Session] = None) -> Optional[Coordinates]:
    session = session or SESSION
    try:
        resp = session.get(url, timeout=TIMEOUT)
        resp.raise_for_status()
        data = resp.json()
        return Coordinates(lat=float(data["latitude"]), lng=float(data["longitude"]))
    except (requests.RequestException, KeyError, TypeError, ValueError) as e:
        logger.info("IP geolocation unavailable: %s", e)
        return None


async def get_current_location() -> Optional[Coordinates]:
    """Best-effort: coordenadas do .env ou lookup por IP. Nunca levanta erro."""
    return _env_location() or await asyncio.to_thread(lookup_ip_location)
