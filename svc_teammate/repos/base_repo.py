from __future__ import annotations

import asyncpg
import json
import logging
from typing import Any, Dict, List, Optional, Union

logger = logging.getLogger(__name__)


def coerce_json_value(value: Any, *, default: Any) -> Any:
    """
    Turn DB 'json-ish' values into JSON-compatible Python objects.

    - dict/list -> as-is
    - valid JSON string -> parsed
    - CSV-ish string ("a, b") -> ["a", "b"] when a list is expected
    - None/empty -> default
    """
    if value is None:
        return default

    if isinstance(value, (dict, list)):
        return value

    if isinstance(value, str):
        s = value.strip()
        if not s:
            return default
        try:
            return json.loads(s)
        except ValueError:
            pass
        if isinstance(default, list):
            return [p.strip() for p in s.split(",") if p.strip()]
        if isinstance(default, dict):
            return {"raw": s}
        return s

    return default


class BaseRepository:
    """
    Thin asyncpg wrapper shared by all repos.

    Every call logs on failure and re-raises; callers decide whether a
    failure is fatal.
    """

    JSON_DICT_FIELDS = {"parameters"}
    JSON_LIST_FIELDS = {"skills", "interests"}
    ID_FIELDS = {"id", "user_id", "teammate_id"}

    def __init__(self, pool: Optional[asyncpg.Pool]):
        self.pool = pool

    def _require_pool(self) -> asyncpg.Pool:
        if self.pool is None:
            raise RuntimeError("DB pool not initialized")
        return self.pool

    def convert_db_row(self, row: Optional[asyncpg.Record]) -> Dict[str, Any]:
        if not row:
            return {}

        converted: Dict[str, Any] = {}
        for field_name, field_value in dict(row).items():
            if field_name in self.ID_FIELDS:
                converted[field_name] = str(field_value) if field_value is not None else None
            elif field_name in self.JSON_LIST_FIELDS:
                converted[field_name] = coerce_json_value(field_value, default=[])
            elif field_name in self.JSON_DICT_FIELDS:
                converted[field_name] = coerce_json_value(field_value, default={})
            else:
                converted[field_name] = field_value
        return converted

    async def execute_query(self, query: str, *params) -> Optional[asyncpg.Record]:
        try:
            async with self._require_pool().acquire() as conn:
                return await conn.fetchrow(query, *params)
        except Exception as e:
            logger.error("Query failed", extra={"query": query, "error": str(e)})
            raise

    async def execute_queries(self, query: str, *params) -> List[asyncpg.Record]:
        try:
            async with self._require_pool().acquire() as conn:
                return await conn.fetch(query, *params)
        except Exception as e:
            logger.error("Multi-query failed", extra={"query": query, "error": str(e)})
            raise

    async def execute_command(self, command: str, *params) -> str:
        try:
            async with self._require_pool().acquire() as conn:
                return await conn.execute(command, *params)
        except Exception as e:
            logger.error("Command failed", extra={"command": command, "error": str(e)})
            raise

    async def fetch_scalar(self, query: str, *params) -> Any:
        try:
            async with self._require_pool().acquire() as conn:
                return await conn.fetchval(query, *params)
        except Exception as e:
            logger.error("Scalar query failed", extra={"query": query, "error": str(e)})
            raise

    def prepare_jsonb_param(self, value: Any) -> Any:
        """
        JSON-compatible value for `$n::jsonb`.

        The pool registers a json.dumps encoder for jsonb, so this returns plain
        Python objects (datetimes/UUIDs stringified), never a pre-encoded string.
        """
        if value is None:
            return {}
        if isinstance(value, str):
            value = coerce_json_value(value, default={})
        return json.loads(json.dumps(value, default=str))

    @staticmethod
    def prepare_id_param(value: Union[str, Any, None]) -> Optional[str]:
        """Ids are text columns; visitor/session tables still hand back UUID objects."""
        if value is None:
            return None
        return str(value)

    @staticmethod
    def command_count(status: str) -> int:
        """Row count from an asyncpg status tag like 'UPDATE 3'."""
        try:
            return int(str(status).rsplit(" ", 1)[-1])
        except ValueError:
            return 0
