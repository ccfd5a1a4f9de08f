from __future__ import annotations

import os
import re
from typing import Callable, Optional

from ..common.json_store import JsonFileStore

VOTING_FILE = "voting.json"
BALLOTS_FILE = "voting-votes.json"

_NON_WORD = re.compile(r"[^\w\s-]")
_WHITESPACE = re.compile(r"\s+")


def slugify(title: str) -> str:
    """``"Budget 2025!"`` -> ``"budget-2025"``."""
    text = _NON_WORD.sub("", title.lower()).strip()
    return _WHITESPACE.sub("-", text)


def unique_slug(title: str, taken: dict, *, now_ms: Callable[[], int]) -> str:
    base = slugify(title) or f"vote-{now_ms()}"
    candidate = base
    attempt = 1
    while candidate in taken:
        candidate = f"{base}-{attempt}"
        attempt += 1
    return candidate


class VotingStore:
    """The vote definitions file and the recorded-ballots file."""

    def __init__(self, data_dir: str):
        self.definitions = JsonFileStore(os.path.join(data_dir, VOTING_FILE), default=dict)
        self.ballots = JsonFileStore(os.path.join(data_dir, BALLOTS_FILE), default=list)

    def get_definition(self, vote_id: str) -> Optional[dict]:
        entry = self.definitions.read().get(vote_id)
        return entry if isinstance(entry, dict) else None
