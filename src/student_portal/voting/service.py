from __future__ import annotations

from collections import Counter
from typing import Any, Callable, Optional

from ..common.datetime_utils import iso_utc, utc_now
from ..common.periods import now_ms
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..core.logger import get_logger
from .model import RecordedBallot
from .store import VotingStore, unique_slug

logger = get_logger(__name__)


def _tally(vote_id: str, ballots: list) -> Counter:
    counts: Counter = Counter()
    for b in ballots:
        if isinstance(b, dict) and str(b.get("voteId")) == str(vote_id):
            counts[str(b.get("optionId"))] += 1
    return counts


def _stored_count(value: Any) -> int:
    # hand-edited files may hold anything here
    try:
        return int(value or 0)
    except (TypeError, ValueError):
        return 0


def _stored_options(entry: dict) -> list[dict]:
    data = entry.get("data")
    return [o for o in data if isinstance(o, dict)] if isinstance(data, list) else []


def _with_counts(vote_id: str, entry: dict, ballots: list) -> list[dict]:
    recorded = _tally(vote_id, ballots)
    return [
        {**o, "count": _stored_count(o.get("value")) + recorded.get(str(o.get("id")), 0)}
        for o in _stored_options(entry)
    ]


def _clean_options(options: list) -> list[dict]:
    cleaned = []
    for o in options:
        if not isinstance(o, dict) or o.get("id") is None or not isinstance(o.get("label"), str):
            raise ValidationError("each option needs an id and a label")
        value = o.get("value", 0)
        if value is None:
            value = 0
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError("option value must be an integer")
        cleaned.append({**o, "value": value})
    return cleaned


class VotingService:
    """Flat-file votes: definitions in one JSON file, ballots in another."""

    def __init__(self, store: VotingStore, *, clock_ms: Optional[Callable[[], int]] = None):
        self._store = store
        self._clock_ms = clock_ms or now_ms

    # -------- Public --------
    def list_definitions(self) -> dict:
        return self._store.definitions.read()

    def get_vote(self, vote_id: str) -> dict:
        entry = self._store.get_definition(vote_id)
        if entry is None:
            raise NotFoundError("Vote not found")
        options = [
            {"id": o.get("id"), "label": o.get("label"), "count": o["count"]}
            for o in _with_counts(vote_id, entry, self._store.ballots.read())
        ]
        return {"id": vote_id, "options": options}

    def cast(self, *, vote_id: str, user_id: str, option_id: Any) -> None:
        entry = self._store.get_definition(vote_id)
        if entry is None:
            raise NotFoundError("Vote not found")
        if not entry.get("running"):
            raise AuthorizationError("Vote is closed")

        valid = {str(o.get("id")) for o in _stored_options(entry)}
        if option_id is None or str(option_id) not in valid:
            raise ValidationError("Invalid option")

        def append(ballots: list) -> None:
            for b in ballots:
                if isinstance(b, dict) and str(b.get("voteId")) == str(vote_id) and b.get("userId") == user_id:
                    raise ConflictError("User has already voted")
            ballots.append(
                RecordedBallot(
                    id=self._clock_ms(),
                    vote_id=vote_id,
                    option_id=option_id,
                    user_id=user_id,
                    created_at=iso_utc(utc_now()),
                ).to_dict()
            )

        self._store.ballots.update(append)
        logger.info("User {} voted on {}", user_id, vote_id)

    # -------- Admin --------
    def admin_list(self) -> dict:
        ballots = self._store.ballots.read()
        return {
            vote_id: {**entry, "data": _with_counts(vote_id, entry, ballots)}
            for vote_id, entry in self._store.definitions.read().items()
            if isinstance(entry, dict)
        }

    def create(self, *, data: dict) -> str:
        options = data.get("options")
        if not isinstance(options, list) or not options:
            raise ValidationError("options required")
        title = str(data.get("title") or "").strip()
        if not title:
            raise ValidationError("title required")
        running = data.get("running")

        def add(definitions: dict) -> str:
            vote_id = unique_slug(title, definitions, now_ms=self._clock_ms)
            definitions[vote_id] = {
                "title": title,
                "running": True if running is None else bool(running),
                "data": [{"id": idx, "value": 0, "label": label} for idx, label in enumerate(options)],
            }
            return vote_id

        vote_id = self._store.definitions.update(add)
        logger.info("Vote {} created", vote_id)
        return vote_id

    def replace(self, *, data: dict) -> None:
        vote_id = data.get("id")
        options = data.get("data")
        if not vote_id or not isinstance(options, list):
            raise ValidationError("id and data required")
        options = _clean_options(options)

        title = data.get("title")
        clean_title = str(title).strip() if title is not None else None
        if clean_title == "":
            raise ValidationError("title cannot be empty")
        running = data.get("running")

        def merge(definitions: dict) -> None:
            existing = definitions.get(str(vote_id)) or {}
            definitions[str(vote_id)] = {
                **existing,
                "title": clean_title if clean_title is not None else existing.get("title"),
                "running": running if running is not None else existing.get("running", True),
                "data": options,
            }

        self._store.definitions.update(merge)

    def delete(self, *, vote_id: Any) -> None:
        if not vote_id:
            raise ValidationError("id required")
        self._store.definitions.update(lambda definitions: definitions.pop(str(vote_id), None))
        logger.info("Vote {} deleted", vote_id)
