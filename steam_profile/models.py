from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, NonNegativeInt, ValidationError, model_validator


class SteamProfileError(Exception):
    pass


class RemoteError(SteamProfileError):
    """Non-2xx answer from a Steam Web API endpoint."""

    def __init__(self, status: int, reason: str, body: str = "") -> None:
        super().__init__(f"{status}: {reason}")
        self.status = status
        self.reason = reason
        self.body = body


class DecodeError(SteamProfileError):
    pass


def quote_normalize(s: Optional[str]) -> Optional[str]:
    # output literal is delimited with double quotes
    if s is None:
        return None
    return s.replace('"', "'")


# ────────────────────────────── Endpoint schemas


class SteamModel(BaseModel):
    """Base for Steam Web API records; unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    @classmethod
    def from_json(cls, data: Any):
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or '<body>'}: {err['msg']}"
                for err in e.errors()
            )
            raise DecodeError(f"{cls.__name__}: {problems}") from e


class PlayerSummary(SteamModel):
    steamid: str
    personaname: str
    avatarfull: str
    lastlogoff: Optional[int] = None
    profileurl: Optional[str] = None
    personastate: Optional[int] = None


class FriendEntry(SteamModel):
    steamid: str
    friend_since: int
    relationship: Optional[str] = None


class BadgeEntry(SteamModel):
    badgeid: int
    level: int
    completion_time: int
    scarcity: int
    kind: Literal["plain", "community"] = "plain"
    xp: Optional[int] = None
    appid: Optional[int] = None
    communityid: Optional[str] = None
    border_color: Optional[int] = None

    @model_validator(mode="before")
    @classmethod
    def _tag_variant(cls, data: Any) -> Any:
        # variant is decided by the presence of the communityid key
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if "communityid" in data:
            data["kind"] = "community"
        else:
            data["kind"] = "plain"
            data.pop("appid", None)
        return data

    @property
    def is_community(self) -> bool:
        return self.kind == "community"


class OwnedGame(SteamModel):
    appid: int
    name: str
    playtime_forever: int
    img_icon_url: str
    playtime_2weeks: Optional[int] = None
    rtime_last_played: Optional[int] = None
    has_community_visible_stats: Optional[bool] = None


class PlayerAchievement(SteamModel):
    apiname: str
    achieved: int
    unlocktime: int
    name: Optional[str] = None
    description: Optional[str] = None


class GlobalPercentage(SteamModel):
    name: str
    percent: float


class SchemaAchievement(SteamModel):
    name: str
    displayName: Optional[str] = None
    description: Optional[str] = None
    icon: Optional[str] = None
    icongray: Optional[str] = None
    hidden: Optional[int] = None


class SteamLevel(SteamModel):
    player_level: NonNegativeInt


# ────────────────────────────── Output records


def _compact(d: Dict[str, Any], optional: tuple) -> Dict[str, Any]:
    """Drop optional keys whose value is missing; other keys stay (even None)."""
    return {k: v for k, v in d.items() if not (k in optional and v is None)}


@dataclass
class Achievement:
    apiname: str
    achieved: int
    unlocktime: int
    name: Optional[str]
    description: Optional[str]
    percent: Optional[float] = None
    icon: Optional[str] = None
    icongray: Optional[str] = None
    hidden: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "apiname": self.apiname,
                "achieved": self.achieved,
                "unlocktime": self.unlocktime,
                "name": self.name,
                "description": self.description,
                "percent": self.percent,
                "icon": self.icon,
                "icongray": self.icongray,
                "hidden": self.hidden,
            },
            ("name", "description", "percent", "icon", "icongray", "hidden"),
        )


@dataclass
class GameAchievements:
    appid: int
    num_achievements: int
    achievements: List[Achievement] = field(default_factory=list)


@dataclass
class Badge:
    badgeid: int
    completion_time: int
    level: int
    scarcity: int
    communityid: Optional[str] = None
    appid: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "badgeid": self.badgeid,
            "completion_time": self.completion_time,
            "level": self.level,
            "scarcity": self.scarcity,
            "communityid": self.communityid,
            "appid": self.appid,
        }


@dataclass
class Game:
    appid: int
    name: str
    playtime: int
    last_played: Optional[int]
    icon_url: str
    playtime_2weeks: Optional[int] = None
    num_achievements: Optional[int] = None
    achievements: Optional[List[Achievement]] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "appid": self.appid,
                "name": self.name,
                "playtime": self.playtime,
                "playtime_2weeks": self.playtime_2weeks,
                "last_played": self.last_played,
                "icon_url": self.icon_url,
                "num_achievements": self.num_achievements,
                "achievements": (
                    None
                    if self.achievements is None
                    else [a.to_dict() for a in self.achievements]
                ),
            },
            ("playtime_2weeks", "last_played", "num_achievements", "achievements"),
        )


@dataclass
class Friend:
    steamid: str
    avatar: str
    username: str
    friend_since: int
    lastlogoff: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "steamid": self.steamid,
                "avatar": self.avatar,
                "lastlogoff": self.lastlogoff,
                "username": self.username,
                "friend_since": self.friend_since,
            },
            ("lastlogoff",),
        )


@dataclass(frozen=True)
class Profile:
    steamid: str
    avatar: str
    lastlogoff: Optional[int]
    username: str
    level: int
    badges: List[Badge]
    games: List[Game]
    friends: List[Friend]

    def to_dict(self) -> Dict[str, Any]:
        return _compact(
            {
                "steamid": self.steamid,
                "avatar": self.avatar,
                "lastlogoff": self.lastlogoff,
                "username": self.username,
                "level": self.level,
                "badges": [b.to_dict() for b in self.badges],
                "games": [g.to_dict() for g in self.games],
                "friends": [f.to_dict() for f in self.friends],
            },
            ("lastlogoff",),
        )
