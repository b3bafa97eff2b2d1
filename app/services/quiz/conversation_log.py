"""
Append-only audit trail of every Gemini exchange, keyed by request id.

Each entry goes to a per-kind file and to the combined conversation file.
Concurrent requests may interleave entries; a failed write is logged and
never interrupts generation.
"""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

PROMPTS_LOG = "gemini-prompts.log"
RESPONSES_LOG = "gemini-responses.log"
ERRORS_LOG = "gemini-errors.log"
CONVERSATIONS_LOG = "gemini-conversations.log"


def _render(payload: Any) -> str:
    if isinstance(payload, BaseModel):
        return payload.model_dump_json(indent=2, by_alias=True)
    if isinstance(payload, str):
        return payload
    return json.dumps(payload, indent=2, ensure_ascii=False, default=str)


class ConversationLogger:
    def __init__(self, log_dir: str | Path) -> None:
        self.log_dir = Path(log_dir)

    def _append(self, filename: str, entry: str) -> None:
        self.log_dir.mkdir(parents=True, exist_ok=True)
        with (self.log_dir / filename).open("a", encoding="utf-8") as fp:
            fp.write(entry)

    async def write(self, filename: str, label: str, payload: Any) -> bool:
        timestamp = datetime.now(timezone.utc).isoformat()
        entry = f"[{timestamp}] {label}\n{_render(payload)}\n\n"
        try:
            await asyncio.to_thread(self._append, filename, entry)
        except (OSError, ValueError) as exc:
            # ValueError covers text the file encoding cannot represent.
            logger.warning("Failed to write %s entry to %s: %s", label, filename, exc)
            return False
        return True

    async def _log_pair(self, filename: str, request_id: str, kind: str, payload: Any) -> None:
        label = f"REQUEST ID: {request_id} - {kind}:"
        await self.write(filename, label, payload)
        await self.write(CONVERSATIONS_LOG, label, payload)

    async def log_metadata(self, request_id: str, metadata: Any) -> None:
        await self.write(CONVERSATIONS_LOG, f"REQUEST ID: {request_id} - METADATA:", metadata)

    async def log_prompt(self, request_id: str, prompt: str) -> None:
        await self._log_pair(PROMPTS_LOG, request_id, "PROMPT", prompt)

    async def log_response(self, request_id: str, response: str) -> None:
        await self._log_pair(RESPONSES_LOG, request_id, "RESPONSE", response)

    async def log_error(self, request_id: str, message: str, kind: str = "ERROR") -> None:
        await self._log_pair(ERRORS_LOG, request_id, kind, message)

    async def log_outcome(self, request_id: str, summary: Any) -> None:
        await self.write(CONVERSATIONS_LOG, f"REQUEST ID: {request_id} - SUCCESS:", summary)
