from __future__ import annotations

import json
from datetime import datetime
from typing import Any


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def serialize_event(event_type: str, request_id: int, payload: dict[str, Any]) -> str:
    envelope = {"event": event_type, "request_id": request_id, "data": payload}
    return json.dumps(envelope, cls=_Encoder)


def deserialize_event(raw: str | bytes) -> tuple[str, int, dict[str, Any]]:
    data = json.loads(raw)
    return data["event"], int(data["request_id"]), data["data"]
