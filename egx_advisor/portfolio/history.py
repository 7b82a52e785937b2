"""Recommendation history kept as one JSON array, newest entry first."""

import asyncio
import json
import os
from datetime import UTC, datetime
from pathlib import Path
from uuid import uuid4

import structlog
from pydantic import ValidationError as PydanticValidationError

from egx_advisor.exceptions import NotFoundError
from egx_advisor.portfolio.schemas import (
    DeployCapitalResult,
    HistoryEntry,
    HoldingSnapshot,
    Portfolio,
)

logger = structlog.get_logger()


class HistoryRepository:
    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    async def list_all(self) -> list[HistoryEntry]:
        entries = []
        for raw in self._load():
            try:
                entries.append(HistoryEntry.model_validate(raw))
            except PydanticValidationError as exc:
                logger.warning("history_entry_invalid", error=str(exc))
        return entries

    async def add(
        self, amount: float, result: DeployCapitalResult, portfolio: Portfolio
    ) -> HistoryEntry:
        snapshot_fields = set(HoldingSnapshot.model_fields)
        entry = HistoryEntry(
            id=str(uuid4()),
            date=datetime.now(UTC).isoformat(),
            amount_to_deploy_egp=amount,
            result=result,
            portfolio_snapshot=[
                HoldingSnapshot(**h.model_dump(include=snapshot_fields))
                for h in portfolio.holdings
            ],
        )
        async with self._lock:
            history = self._load()
            history.insert(0, entry.model_dump(mode="json", by_alias=True))
            self._save(history)
        logger.info("history_entry_saved", entry_id=entry.id)
        return entry

    async def delete(self, entry_id: str) -> None:
        async with self._lock:
            if not self._path.exists():
                raise NotFoundError("History entry", entry_id)
            history = self._load()
            remaining = [raw for raw in history if raw.get("id") != entry_id]
            if len(remaining) == len(history):
                raise NotFoundError("History entry", entry_id)
            self._save(remaining)
        logger.info("history_entry_deleted", entry_id=entry_id)

    def _load(self) -> list[dict]:
        if not self._path.exists():
            return []
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.error("history_read_error", path=str(self._path), error=str(exc))
            return []
        if not isinstance(data, list):
            logger.error("history_malformed", path=str(self._path))
            return []
        return [raw for raw in data if isinstance(raw, dict)]

    def _save(self, history: list[dict]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(history, indent=2), encoding="utf-8")
        os.replace(tmp_path, self._path)
