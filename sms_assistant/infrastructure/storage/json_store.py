import json
import os
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar
from urllib.parse import quote, unquote
from uuid import uuid4

from sms_assistant.config.settings import settings
from sms_assistant.domain.conversation import ConversationState, ConversationStats, ConversationStore, Turn
from sms_assistant.domain.exceptions import StoreUnavailable
from sms_assistant.infrastructure.storage.locks import KeyedLocks

T = TypeVar("T")


class JsonConversationStore(ConversationStore):
    """每个会话一个 JSON 文件的持久化存储。

    apply() 在会话锁内完成 读取 -> 变更 -> 原子写回；
    变更函数抛出异常时不会写回。
    """

    def __init__(self, root: str | Path | None = None):
        self._root = Path(root or settings.storage_root).resolve()
        self._conv_root = self._root / "conversations"
        self._locks = KeyedLocks()
        try:
            self._conv_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(message=str(e))

    def get(self, conversation_id: str) -> Optional[ConversationState]:
        with self._locks.get(conversation_id):
            path = self._path_for(conversation_id)
            if not path.exists():
                return None
            return self._read(path, conversation_id)

    def get_or_create(self, conversation_id: str) -> ConversationState:
        with self._locks.get(conversation_id):
            return self._load_or_init(conversation_id)

    def apply(self, conversation_id: str, mutation: Callable[[ConversationState], T]) -> T:
        with self._locks.get(conversation_id):
            state = self._load_or_init(conversation_id)
            result = mutation(state)
            self._write(state)
            return result

    def list_conversation_ids(self) -> List[str]:
        return sorted(unquote(p.stem) for p in self._conv_root.glob("*.json"))

    def _path_for(self, conversation_id: str) -> Path:
        # 号码中的 "+" 等字符需要转义
        return self._conv_root / f"{quote(conversation_id, safe='')}.json"

    def _load_or_init(self, conversation_id: str) -> ConversationState:
        path = self._path_for(conversation_id)
        if not path.exists():
            state = ConversationState(conversation_id=conversation_id)
            self._write(state)
            return state
        return self._read(path, conversation_id)

    def _read(self, path: Path, conversation_id: str) -> ConversationState:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return self._to_state(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            raise StoreUnavailable(code="STORE_READ_ERROR", message=str(e), conversation_id=conversation_id)

    def _write(self, state: ConversationState) -> None:
        path = self._path_for(state.conversation_id)
        tmp_path = path.with_name(f"{path.stem}.{uuid4().hex}.json.tmp")
        obj = {
            "conversation_id": state.conversation_id,
            "history": [
                {"role": t.role, "text": t.text, "timestamp": _iso(t.timestamp)}
                for t in state.history
            ],
            "stats": {
                k: (_iso(v) if isinstance(v, datetime) else v)
                for k, v in asdict(state.stats).items()
            },
        }
        try:
            tmp_path.write_text(json.dumps(obj, ensure_ascii=False), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as e:
            raise StoreUnavailable(code="STORE_WRITE_ERROR", message=str(e), conversation_id=state.conversation_id)

    def _to_state(self, data: Dict[str, Any]) -> ConversationState:
        raw_stats = data.get("stats") or {}
        stats = ConversationStats(
            created_at=_parse(raw_stats["created_at"]),
            last_active_at=_parse(raw_stats["last_active_at"]),
            quota_reset_at=_parse(raw_stats["quota_reset_at"]),
            message_count=int(raw_stats.get("message_count", 0)),
            assistant_reply_count=int(raw_stats.get("assistant_reply_count", 0)),
            inbound_count=int(raw_stats.get("inbound_count", 0)),
            outbound_count=int(raw_stats.get("outbound_count", 0)),
            received_today=int(raw_stats.get("received_today", 0)),
            estimated_cost=float(raw_stats.get("estimated_cost", 0.0)),
        )
        history = [
            Turn(role=t["role"], text=t.get("text") or "", timestamp=_parse(t["timestamp"]))
            for t in data.get("history") or []
        ]
        return ConversationState(conversation_id=data["conversation_id"], history=history, stats=stats)


def _iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def _parse(value: str) -> datetime:
    return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
