from __future__ import annotations

import asyncio
import logging
from typing import Dict, Iterable, List, Optional

from tqdm.asyncio import tqdm_asyncio

from .achievements import join_game_achievements
from .models import GameAchievements
from .steam_api import SteamAPI

log = logging.getLogger(__name__)


class StaggeredStart:
    """Offsets the start of the i-th job by i * interval_ms."""

    def __init__(self, interval_ms: int = 125) -> None:
        self.interval = max(0, interval_ms) / 1000.0

    def delay(self, index: int) -> float:
        return index * self.interval

    async def wait(self, index: int) -> None:
        d = self.delay(index)
        if d > 0:
            await asyncio.sleep(d)


async def _staggered_join(
    api: SteamAPI,
    steamid: str,
    appid: int,
    index: int,
    stagger: StaggeredStart,
) -> Optional[GameAchievements]:
    await stagger.wait(index)
    return await join_game_achievements(api, steamid, appid)


async def fan_out(
    api: SteamAPI,
    steamid: str,
    appids: Iterable[int],
    interval_ms: int = 125,
    progress: bool = True,
) -> Dict[int, GameAchievements]:
    """Run the joiner for every appid concurrently; first failure aborts."""
    ids: List[int] = list(appids)
    if not ids:
        return {}
    stagger = StaggeredStart(interval_ms)
    jobs = [
        _staggered_join(api, steamid, appid, i, stagger)
        for i, appid in enumerate(ids)
    ]
    log.info("joining achievements for %d games", len(ids))
    results = await tqdm_asyncio.gather(
        *jobs, desc="achievements", unit="games", disable=not progress
    )
    return {r.appid: r for r in results if r is not None}
