"""Database adapter using asyncpg for PostgreSQL.

Match and timeline documents are stored verbatim as JSONB, with a narrow
``match_participants`` table indexed for the two lookups the scoring core
needs: a player's matches and a champion+role cohort. Each participant row
stores its canonical role, resolved at write time with the same fallback
chain the core uses, so the cohort filter, sort and limit run entirely in SQL
and ``LIMIT`` is never spent on rows the core would discard.
"""

import asyncio
import json
import logging
import random
from datetime import UTC, datetime
from typing import Any

import asyncpg
from pydantic import ValidationError

from riftcoach.config import get_settings
from riftcoach.contracts.match import Match, MatchRecord
from riftcoach.contracts.timeline import MatchTimeline
from riftcoach.core.errors import DataUnavailableError
from riftcoach.core.observability import trace_adapter
from riftcoach.core.ports import MatchDataSourcePort
from riftcoach.core.roles import normalize_role, participant_role

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS match_data (
    match_id VARCHAR(255) PRIMARY KEY,
    queue_id INTEGER NOT NULL,
    game_creation BIGINT NOT NULL,
    game_duration INTEGER NOT NULL,
    match_data JSONB NOT NULL,
    timeline_data JSONB,
    created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
);

CREATE INDEX IF NOT EXISTS idx_match_data_creation
ON match_data(game_creation DESC);

CREATE INDEX IF NOT EXISTS idx_match_data_queue
ON match_data(queue_id);

CREATE TABLE IF NOT EXISTS match_participants (
    id SERIAL PRIMARY KEY,
    match_id VARCHAR(255) NOT NULL REFERENCES match_data(match_id) ON DELETE CASCADE,
    participant_id INTEGER NOT NULL,
    puuid VARCHAR(255) NOT NULL,
    champion_name VARCHAR(64) NOT NULL,
    team_position VARCHAR(16) NOT NULL DEFAULT '',
    individual_position VARCHAR(16) NOT NULL DEFAULT '',
    role VARCHAR(16) NOT NULL DEFAULT 'UNKNOWN',
    team_id INTEGER NOT NULL,
    win BOOLEAN NOT NULL,
    UNIQUE(match_id, participant_id)
);

CREATE INDEX IF NOT EXISTS idx_match_participants_puuid
ON match_participants(puuid);

CREATE INDEX IF NOT EXISTS idx_match_participants_cohort
ON match_participants(lower(champion_name), role);
"""

# Shared parameters: $3 queue ids, $4/$5 optional window bounds (epoch ms).
_WINDOW_FILTER = """
    m.queue_id = ANY($3::int[])
    AND ($4::bigint IS NULL OR m.game_creation >= $4)
    AND ($5::bigint IS NULL OR m.game_creation < $5)
"""

_PLAYER_MATCHES_SQL = f"""
    SELECT m.match_data, m.timeline_data
    FROM match_data m
    WHERE EXISTS (
        SELECT 1 FROM match_participants p
        WHERE p.match_id = m.match_id AND p.puuid = $1
    )
    AND {_WINDOW_FILTER}
    ORDER BY m.game_creation DESC, m.match_id DESC
    LIMIT $2
"""

_COHORT_MATCHES_SQL = """
    SELECT m.match_data, m.timeline_data
    FROM match_data m
    WHERE EXISTS (
        SELECT 1 FROM match_participants p
        WHERE p.match_id = m.match_id
          AND lower(p.champion_name) = lower($1)
          AND p.role = ANY($6::text[])
          AND (NOT $7::bool OR p.win)
    )
    AND {window}
    ORDER BY m.game_creation {direction}, m.match_id {direction}
    LIMIT $2
"""


def _decode(value: Any) -> Any:
    """JSONB columns arrive as text unless a codec is registered."""
    if isinstance(value, str):
        return json.loads(value)
    return value


class DatabaseAdapter(MatchDataSourcePort):
    """Match/Timeline data source over PostgreSQL.

    Features:
    - Async connection pooling for high concurrency
    - JSONB document storage, validated into contracts on read
    - Cohort and player filters pushed down to indexed SQL
    """

    def __init__(self, pool: Any = None) -> None:
        self._pool: Any = pool  # asyncpg.Pool (untyped library)
        self.settings = get_settings()

    async def connect(self) -> None:
        """Create the connection pool and schema. Call once at startup."""
        if self._pool is not None:
            logger.warning("Database pool already exists")
            return

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.settings.database_url,
                min_size=1,
                max_size=self.settings.database_pool_size,
                max_inactive_connection_lifetime=300,
                command_timeout=self.settings.database_command_timeout,
            )
            logger.info("Database connection pool created successfully")
            await self._initialize_schema()
        except (asyncpg.PostgresError, OSError) as e:
            logger.error(f"Failed to create database pool: {e}")
            raise

    async def disconnect(self) -> None:
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")

    async def _initialize_schema(self) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(_SCHEMA)

    def _require_pool(self) -> Any:
        if not self._pool:
            raise DataUnavailableError("Database pool not initialized")
        return self._pool

    # ========================================================================
    # Writes
    # ========================================================================

    async def save_match_record(self, record: MatchRecord) -> bool:
        """Upsert a match, its timeline and its participant index rows.

        Retries transient failures with jittered exponential backoff.
        """
        pool = self._require_pool()
        match = record.match
        info = match.info
        match_json = json.dumps(match.model_dump(mode="json", by_alias=True))
        timeline_json = (
            json.dumps(record.timeline.model_dump(mode="json", by_alias=True))
            if record.timeline
            else None
        )

        max_retries = 3
        base_delay = 0.1

        for attempt in range(max_retries):
            try:
                async with pool.acquire() as conn, conn.transaction():
                    now = datetime.now(UTC)
                    await conn.execute(
                        """
                        INSERT INTO match_data (
                            match_id, queue_id, game_creation, game_duration,
                            match_data, timeline_data, created_at, updated_at
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $7)
                        ON CONFLICT (match_id)
                        DO UPDATE SET
                            match_data = EXCLUDED.match_data,
                            timeline_data = COALESCE(EXCLUDED.timeline_data, match_data.timeline_data),
                            updated_at = EXCLUDED.updated_at
                        """,
                        match.match_id,
                        info.queue_id,
                        info.game_creation,
                        info.game_duration,
                        match_json,
                        timeline_json,
                        now,
                    )
                    await conn.executemany(
                        """
                        INSERT INTO match_participants (
                            match_id, participant_id, puuid, champion_name,
                            team_position, individual_position, role, team_id, win
                        ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9)
                        ON CONFLICT (match_id, participant_id)
                        DO UPDATE SET role = EXCLUDED.role
                        """,
                        [
                            (
                                match.match_id,
                                p.participant_id,
                                p.puuid,
                                p.champion_name,
                                (p.team_position or "").upper(),
                                (p.individual_position or "").upper(),
                                participant_role(p).value,
                                p.team_id,
                                p.win,
                            )
                            for p in info.participants
                        ],
                    )
                logger.info(f"Saved match data for {match.match_id}")
                return True
            except (asyncpg.PostgresError, OSError) as e:
                logger.error(
                    f"Attempt {attempt + 1} failed saving match data for {match.match_id}: {e}"
                )
                if attempt < max_retries - 1:
                    delay = base_delay * (2**attempt) + random.uniform(0, 0.2)
                    await asyncio.sleep(delay)
        return False

    # ========================================================================
    # Reads
    # ========================================================================

    def _to_record(self, row: Any) -> MatchRecord | None:
        try:
            match = Match.model_validate(_decode(row["match_data"]))
            raw_timeline = _decode(row["timeline_data"])
            timeline = MatchTimeline.model_validate(raw_timeline) if raw_timeline else None
        except (ValidationError, json.JSONDecodeError) as e:
            logger.warning(f"Skipping malformed match document: {e}")
            return None
        return MatchRecord(match=match, timeline=timeline)

    async def _fetch(self, query: str, *params: Any) -> list[Any]:
        pool = self._require_pool()
        try:
            async with pool.acquire() as conn:
                return list(await conn.fetch(query, *params))
        except (asyncpg.PostgresError, OSError) as e:
            raise DataUnavailableError(f"Match query failed: {e}") from e

    @trace_adapter
    async def get_match(self, match_id: str) -> Match | None:
        rows = await self._fetch(
            "SELECT match_data, NULL AS timeline_data FROM match_data WHERE match_id = $1",
            match_id,
        )
        if not rows:
            return None
        record = self._to_record(rows[0])
        if record is None:
            raise DataUnavailableError(f"Match {match_id} is stored but malformed")
        return record.match

    @trace_adapter
    async def get_timeline(self, match_id: str) -> MatchTimeline | None:
        rows = await self._fetch(
            "SELECT timeline_data FROM match_data WHERE match_id = $1", match_id
        )
        if not rows:
            return None
        raw = _decode(rows[0]["timeline_data"])
        if not raw:
            return None
        try:
            return MatchTimeline.model_validate(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring malformed timeline for {match_id}: {e}")
            return None

    @trace_adapter
    async def find_player_matches(
        self,
        puuid: str,
        *,
        queue_ids: tuple[int, ...],
        start_ms: int | None = None,
        end_ms: int | None = None,
        limit: int | None = None,
    ) -> list[MatchRecord]:
        rows = await self._fetch(
            _PLAYER_MATCHES_SQL, puuid, limit, list(queue_ids), start_ms, end_ms
        )
        records = [self._to_record(row) for row in rows]
        return [r for r in records if r is not None]

    @trace_adapter
    async def find_cohort_matches(
        self,
        champion_name: str,
        positions: tuple[str, ...],
        *,
        queue_ids: tuple[int, ...],
        start_ms: int,
        end_ms: int,
        wins_only: bool = False,
        limit: int = 1000,
        descending: bool = True,
    ) -> list[MatchRecord]:
        query = _COHORT_MATCHES_SQL.format(
            window=_WINDOW_FILTER, direction="DESC" if descending else "ASC"
        )
        rows = await self._fetch(
            query,
            champion_name,
            limit,
            list(queue_ids),
            start_ms,
            end_ms,
            sorted({normalize_role(p).value for p in positions}),
            wins_only,
        )
        records = [self._to_record(row) for row in rows]
        return [r for r in records if r is not None]

    async def health_check(self) -> bool:
        if not self._pool:
            return False

        try:
            async with self._pool.acquire() as conn:
                result: int | None = await conn.fetchval("SELECT 1")
                return bool(result == 1)
        except (asyncpg.PostgresError, OSError):
            return False
