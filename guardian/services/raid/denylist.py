"""
Dangerous Bot Deny-List
=======================

Static list of known destructive bot accounts, loaded from JSON.

Format:
    {"bots": [{"id": 123, "name": "Nuke Bot"}, ...]}
"""

import json
from pathlib import Path
from typing import Dict

from guardian.core.logger import logger


def load_dangerous_bots(path: Path) -> Dict[int, str]:
    """
    Load the deny-list as {bot_id: name}.

    A missing or unreadable file yields an empty list with a warning;
    rate-based raid detection keeps working without it.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.warning("Dangerous Bot List Missing", [("Path", str(path))])
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Dangerous Bot List Unreadable", [("Path", str(path)), ("Error", str(e)[:100])])
        return {}

    bots: Dict[int, str] = {}
    for entry in data.get("bots", []):
        try:
            bots[int(entry["id"])] = str(entry.get("name", "unknown"))
        except (KeyError, TypeError, ValueError):
            continue

    logger.info("Dangerous Bot List Loaded", [("Path", str(path)), ("Entries", str(len(bots)))])
    return bots
