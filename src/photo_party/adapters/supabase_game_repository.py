"""Supabase-backed game session repository."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from photo_party.domain.game import GameSessionRecord, GameStatus
from photo_party.services.game import GameRepository

GAME_ROW_ID = 1


@dataclass
class SupabaseGameRepository(GameRepository):
    """Supabase implementation keeping the session in a single row."""

    client: Client

    def read_game_session(self) -> GameSessionRecord:
        """Return the session row, or a waiting session if none exists."""
        response = (
            self.client.table("game")
            .select("*")
            .eq("id", GAME_ROW_ID)
            .limit(1)
            .execute()
        )
        if not response.data:
            return GameSessionRecord()
        row = response.data[0]
        return GameSessionRecord(
            status=GameStatus(row["status"]),
            order=tuple(int(photo_id) for photo_id in row.get("order") or []),
            index=int(row.get("index") or 0),
            started_at=_parse_datetime(row.get("started_at")),
            finished_at=_parse_datetime(row.get("finished_at")),
        )

    def write_game_session(self, session: GameSessionRecord) -> None:
        """Upsert the session row."""
        self.client.table("game").upsert(
            {
                "id": GAME_ROW_ID,
                "status": session.status.value,
                "order": list(session.order),
                "index": session.index,
                "started_at": (
                    session.started_at.isoformat() if session.started_at else None
                ),
                "finished_at": (
                    session.finished_at.isoformat() if session.finished_at else None
                ),
            }
        ).execute()


def _parse_datetime(value: object) -> datetime | None:
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None
