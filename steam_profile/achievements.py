from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from .models import (
    Achievement,
    GameAchievements,
    GlobalPercentage,
    PlayerAchievement,
    SchemaAchievement,
    quote_normalize,
)
from .steam_api import SteamAPI

log = logging.getLogger(__name__)


def percent_lookup(rows: List[GlobalPercentage]) -> Dict[str, float]:
    return {r.name: round(r.percent, 1) for r in rows}


def schema_lookup(rows: List[SchemaAchievement]) -> Dict[str, SchemaAchievement]:
    return {r.name: r for r in rows}


def merge_achievements(
    player: List[PlayerAchievement],
    percents: Dict[str, float],
    schema: Dict[str, SchemaAchievement],
) -> List[Achievement]:
    """Achieved-only merge; lookup misses leave the field unset."""
    out: List[Achievement] = []
    for a in player:
        if a.achieved != 1:
            continue
        meta = schema.get(a.apiname)
        name = a.name
        description = a.description
        if meta is not None:
            name = name if name is not None else meta.displayName
            description = description if description is not None else meta.description
        out.append(
            Achievement(
                apiname=a.apiname,
                achieved=a.achieved,
                unlocktime=a.unlocktime,
                name=quote_normalize(name),
                description=quote_normalize(description),
                percent=percents.get(a.apiname),
                icon=meta.icon if meta else None,
                icongray=meta.icongray if meta else None,
                hidden=meta.hidden if meta else None,
            )
        )
    return out


async def join_game_achievements(
    api: SteamAPI, steamid: str, appid: int
) -> Optional[GameAchievements]:
    player = await api.get_player_achievements(steamid, appid)
    if player is None:
        log.debug("app %s: no achievement list, skipping", appid)
        return None

    percents, schema = await asyncio.gather(
        api.get_global_percentages(appid),
        api.get_game_schema(appid),
    )
    achievements = merge_achievements(
        player, percent_lookup(percents), schema_lookup(schema)
    )
    return GameAchievements(
        appid=appid,
        num_achievements=len(player),
        achievements=achievements,
    )
