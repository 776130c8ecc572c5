from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional

from .models import (
    Badge,
    BadgeEntry,
    DecodeError,
    Friend,
    FriendEntry,
    Game,
    GameAchievements,
    OwnedGame,
    PlayerSummary,
    Profile,
    quote_normalize,
)
from .scheduler import fan_out
from .steam_api import SteamAPI

log = logging.getLogger(__name__)

ICON_URL = (
    "https://steamcdn-a.akamaihd.net/steamcommunity/public/images/apps/"
    "{appid}/{hash}.jpg"
)


def make_badge(b: BadgeEntry) -> Badge:
    if b.is_community:
        return Badge(
            badgeid=b.badgeid,
            completion_time=b.completion_time,
            level=b.level,
            scarcity=b.scarcity,
            communityid=b.communityid,
            appid=b.appid,
        )
    return Badge(
        badgeid=b.badgeid,
        completion_time=b.completion_time,
        level=b.level,
        scarcity=b.scarcity,
    )


def make_game(g: OwnedGame) -> Game:
    icon = ICON_URL.format(appid=g.appid, hash=g.img_icon_url) if g.img_icon_url else ""
    return Game(
        appid=g.appid,
        name=quote_normalize(g.name),
        playtime=g.playtime_forever,
        playtime_2weeks=g.playtime_2weeks,
        last_played=g.rtime_last_played,
        icon_url=icon,
    )


def merge_games(
    owned: List[OwnedGame], joined: Dict[int, GameAchievements]
) -> List[Game]:
    """Left join owned games with per-appid achievement results."""
    games: List[Game] = []
    seen = set()
    for g in owned:
        if g.appid in seen:
            continue
        seen.add(g.appid)
        game = make_game(g)
        hit = joined.get(g.appid)
        if hit is not None:
            game.num_achievements = hit.num_achievements
            game.achievements = hit.achievements
        games.append(game)
    return games


def make_friend(p: PlayerSummary, since: Dict[str, int]) -> Friend:
    return Friend(
        steamid=p.steamid,
        avatar=p.avatarfull,
        lastlogoff=p.lastlogoff,
        username=quote_normalize(p.personaname),
        friend_since=since[p.steamid],
    )


async def fetch_friends(api: SteamAPI, steamid: str) -> List[Friend]:
    entries: List[FriendEntry] = await api.get_friend_list(steamid)
    since = {f.steamid: f.friend_since for f in entries}
    summaries = await api.get_player_summaries(list(since))
    return [make_friend(p, since) for p in summaries if p.steamid in since]


def _stats_appids(owned: List[OwnedGame], only_with_stats: bool) -> List[int]:
    ids: List[int] = []
    seen = set()
    for g in owned:
        if g.appid in seen:
            continue
        seen.add(g.appid)
        if only_with_stats and not g.has_community_visible_stats:
            continue
        ids.append(g.appid)
    return ids


async def _games(
    api: SteamAPI, steamid: str, cfg: Dict, progress: bool
) -> List[Game]:
    owned = await api.get_owned_games(steamid)
    appids = _stats_appids(owned, cfg.get("only_with_stats", False))
    joined = await fan_out(
        api,
        steamid,
        appids,
        interval_ms=cfg.get("stagger_ms", 125),
        progress=progress,
    )
    return merge_games(owned, joined)


async def build_profile(
    api: SteamAPI,
    steamid: str,
    cfg: Optional[Dict] = None,
    progress: bool = True,
) -> Profile:
    """Fetch everything for one user and merge it into a Profile."""
    cfg = cfg or {}
    summaries, level, badges, games, friends = await asyncio.gather(
        api.get_player_summaries([steamid]),
        api.get_steam_level(steamid),
        api.get_badges(steamid),
        _games(api, steamid, cfg, progress),
        fetch_friends(api, steamid),
    )
    if not summaries:
        raise DecodeError(f"no player summary returned for {steamid}")
    user = summaries[0]
    log.info(
        "assembled %s: %d badges, %d games, %d friends",
        user.steamid,
        len(badges),
        len(games),
        len(friends),
    )
    return Profile(
        steamid=user.steamid,
        avatar=user.avatarfull,
        lastlogoff=user.lastlogoff,
        username=quote_normalize(user.personaname),
        level=level,
        badges=[make_badge(b) for b in badges],
        games=games,
        friends=friends,
    )
