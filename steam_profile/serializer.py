from __future__ import annotations

import json
import re

from .models import Profile

META_CHARS = "'$()\"!"
AVATAR_PREFIX = "https://avatars.steamstatic.com/"
APP_ICON_PREFIX = re.compile(
    r"https://steamcdn-a\.akamaihd\.net/steamcommunity/public/images/apps/\d+/"
)

DECLARATIONS = """\
export interface Achievement {
\tapiname: string;
\tachieved: number;
\tunlocktime: number;
\tname?: string;
\tdescription?: string;
\tpercent?: number;
\ticon?: string;
\ticongray?: string;
\thidden?: number;
}

export interface Game {
\tappid: number;
\tname: string;
\tplaytime: number;
\tplaytime_2weeks?: number;
\tlast_played?: number;
\ticon_url: string;
\tnum_achievements?: number;
\tachievements?: Achievement[];
}

export interface Badge {
\tbadgeid: number;
\tcompletion_time: number;
\tlevel: number;
\tscarcity: number;
\tcommunityid: string | null;
\tappid: number | null;
}

export interface Friend {
\tsteamid: string;
\tavatar: string;
\tlastlogoff?: number;
\tusername: string;
\tfriend_since: number;
}

export interface Profile {
\tsteamid: string;
\tavatar: string;
\tlastlogoff?: number;
\tusername: string;
\tlevel: number;
\tbadges: Badge[];
\tgames: Game[];
\tfriends: Friend[];
}
"""


def strip_backslashes(text: str) -> str:
    return text.replace("\\", "")


def escape_metachars(text: str) -> str:
    return "".join("\\" + c if c in META_CHARS else c for c in text)


def strip_non_ascii(text: str) -> str:
    return "".join(c for c in text if ord(c) < 128)


def strip_cdn_prefixes(text: str) -> str:
    text = text.replace(AVATAR_PREFIX, "")
    return APP_ICON_PREFIX.sub("", text)


# order matters: escaping assumes no stray backslashes remain
PIPELINE = (strip_backslashes, escape_metachars, strip_non_ascii, strip_cdn_prefixes)


def sanitize(text: str) -> str:
    for step in PIPELINE:
        text = step(text)
    return text


def to_json(profile: Profile) -> str:
    return json.dumps(profile.to_dict(), ensure_ascii=False, separators=(",", ":"))


def wrap(literal: str, const_name: str = "profile") -> str:
    return (
        DECLARATIONS
        + f'\nexport const {const_name}: Profile = JSON.parse("{literal}");\n'
    )


def serialize(profile: Profile, const_name: str = "profile") -> str:
    """Profile -> TypeScript module text holding the sanitized JSON literal."""
    return wrap(sanitize(to_json(profile)), const_name)
