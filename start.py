from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional

import aiohttp
import questionary as q
import yaml
from colorama import Fore, Style as CStyle, init as colorama_init
from dotenv import load_dotenv
from questionary import Style
from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

from steam_profile.export import export_profile
from steam_profile.models import SteamProfileError
from steam_profile.utils import load_config, open_folder, stamp, write_json, write_text


# ────────────────────────────── Initialization

colorama_init(autoreset=True)

THEME = Theme({"accent": "cyan", "hint": "cyan", "warn": "yellow"})
console = Console(theme=THEME, stderr=True)


def app_root() -> Path:
    if getattr(sys, "frozen", False):
        return Path(sys.executable).parent
    return Path(__file__).parent


ROOT = app_root()
OUTPUTS = ROOT / "outputs"
USER_CFG = ROOT / "config.yaml"
ENV = ROOT / ".env"

CUSTOM_STYLE = Style(
    [
        ("qmark", "fg:yellow bold"),
        ("question", "fg:cyan bold"),
        ("answer", "fg:green bold"),
        ("pointer", "fg:yellow bold"),
        ("highlighted", "fg:black bg:yellow bold"),
        ("instruction", "fg:gray"),
    ]
)


# ────────────────────────────── Banner / logging

def print_banner() -> None:
    print(Fore.CYAN + CStyle.BRIGHT + "steam-profile-export" + CStyle.RESET_ALL)
    print(Fore.CYAN + "-" * 70 + "\n")


def setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


# ────────────────────────────── ENV / Config

def _ensure_env(interactive: bool) -> str:
    load_dotenv(dotenv_path=ENV)
    key = os.getenv("STEAM_API_KEY", "").strip()
    if key or not interactive:
        return key
    console.print("Get your API key: https://steamcommunity.com/dev/apikey", style="hint")
    key = q.text("Paste your STEAM_API_KEY", style=CUSTOM_STYLE).ask()
    if not key:
        return ""
    ENV.write_text(f"STEAM_API_KEY={key}\n", encoding="utf-8")
    load_dotenv(dotenv_path=ENV, override=True)
    return key.strip()


def _guided_config(cfg: Dict) -> Dict:
    console.print("Guided Config (Press Enter for default)", style="accent")
    cfg["stagger_ms"] = int(
        q.text(f"stagger_ms [default {cfg['stagger_ms']}]", style=CUSTOM_STYLE).ask()
        or cfg["stagger_ms"]
    )
    cfg["lang"] = (
        q.text(f"lang [default {cfg['lang']}]", style=CUSTOM_STYLE).ask() or cfg["lang"]
    )
    cfg["only_with_stats"] = q.confirm(
        f"only_with_stats? [default {cfg['only_with_stats']}]",
        default=cfg["only_with_stats"],
        style=CUSTOM_STYLE,
    ).ask()
    cfg["write_raw_json"] = q.confirm(
        f"write_raw_json? [default {cfg['write_raw_json']}]",
        default=cfg["write_raw_json"],
        style=CUSTOM_STYLE,
    ).ask()
    if q.confirm("Save as config.yaml?", default=False, style=CUSTOM_STYLE).ask():
        USER_CFG.write_text(yaml.safe_dump(cfg, sort_keys=False), encoding="utf-8")
        console.print(f"Saved {USER_CFG.name}", style="accent")
    return cfg


# ────────────────────────────── Core logic

def _run(key: str, target: str, cfg: Dict, progress: bool):
    return asyncio.run(export_profile(key, target, cfg, progress=progress))


def run_export(key: str, target: str, cfg: Dict) -> Optional[Path]:
    try:
        profile, text = _run(key, target, cfg, progress=True)
    except (SteamProfileError, aiohttp.ClientError) as e:
        console.print(f"Failed: {e}", style="warn")
        return None
    out_dir = OUTPUTS / profile.steamid / stamp()
    write_text(out_dir / "profile.ts", text)
    if cfg.get("write_raw_json", False):
        write_json(out_dir / "profile.json", profile.to_dict())
    console.print(
        f"Done: {len(profile.games)} games, {len(profile.friends)} friends\n"
        f"Output → {out_dir}",
        style="accent",
    )
    return out_dir


def pick_recent() -> None:
    targets = sorted([p.name for p in OUTPUTS.glob("*") if p.is_dir()], reverse=True)
    if not targets:
        console.print("No exports yet", style="warn")
        return
    sid = q.select("Recent exports", choices=targets + ["Back"], style=CUSTOM_STYLE).ask()
    if not sid or sid == "Back":
        return
    runs = sorted([p.name for p in (OUTPUTS / sid).glob("*") if p.is_dir()], reverse=True)
    if not runs:
        console.print("No runs for that target", style="warn")
        return
    run = q.select("Choose run", choices=runs + ["Back"], style=CUSTOM_STYLE).ask()
    if run and run != "Back":
        open_folder(OUTPUTS / sid / run)


def oneshot(target: str, cfg: Dict) -> int:
    """Print the wrapped literal for target to stdout; non-zero on failure."""
    key = _ensure_env(interactive=False)
    if not key:
        console.print("STEAM_API_KEY is not set", style="warn")
        return 1
    try:
        _, text = _run(key, target, cfg, progress=False)
    except (SteamProfileError, aiohttp.ClientError) as e:
        console.print(f"Failed: {e}", style="warn")
        return 1
    sys.stdout.write(text)
    return 0


# ────────────────────────────── Entry point

def main() -> int:
    cfg = load_config(USER_CFG)
    setup_logging(cfg.get("log_level", "WARNING"))

    load_dotenv(dotenv_path=ENV)
    target = sys.argv[1] if len(sys.argv) > 1 else os.getenv("STEAM_ID", "").strip()
    if target:
        return oneshot(target, cfg)

    print_banner()
    key = _ensure_env(interactive=True)
    if not key:
        console.print("No key; exiting.", style="warn")
        return 1

    while True:
        choice = q.select(
            "What do you want to do?",
            choices=[
                "Export by steamid64",
                "Export by profile URL",
                "Config",
                "Recent exports",
                "Quit",
            ],
            style=CUSTOM_STYLE,
        ).ask()

        if not choice or choice == "Quit":
            return 0
        if choice in ("Export by steamid64", "Export by profile URL"):
            prompt = "Enter SteamID64" if choice == "Export by steamid64" else "Paste profile URL"
            target = (q.text(prompt, style=CUSTOM_STYLE).ask() or "").strip()
            if not target:
                continue
            out_dir = run_export(key, target, cfg)
            if out_dir and q.confirm("Open output folder?", default=True, style=CUSTOM_STYLE).ask():
                open_folder(out_dir)
        elif choice == "Config":
            cfg = _guided_config(cfg)
        elif choice == "Recent exports":
            pick_recent()


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        console.print("\nInterrupted.", style="warn")
        sys.exit(130)
