from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import aiohttp

from .assembler import build_profile
from .models import DecodeError, Profile
from .serializer import serialize
from .steam_api import SteamAPI

log = logging.getLogger(__name__)


async def export_profile(
    key: str,
    target: str,
    cfg: Dict,
    progress: bool = True,
    base: Optional[str] = None,
) -> Tuple[Profile, str]:
    """Resolve target, assemble its Profile and return it with the wrapped literal."""
    async with aiohttp.ClientSession() as session:
        api = SteamAPI(key, session, base=base, lang=cfg.get("lang", "en"))
        steamid = await api.ensure_steam64(target)
        if not steamid:
            raise DecodeError(f"could not resolve '{target}' to a SteamID64")
        log.info("building profile for %s", steamid)
        profile = await build_profile(api, steamid, cfg, progress=progress)
    return profile, serialize(profile, cfg.get("const_name", "profile"))
