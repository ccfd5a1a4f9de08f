from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class RecordedBallot:
    id: int
    vote_id: str
    option_id: int | str
    user_id: str
    created_at: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "voteId": self.vote_id,
            "optionId": self.option_id,
            "userId": self.user_id,
            "createdAt": self.created_at,
        }
