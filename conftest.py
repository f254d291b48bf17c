"""Root conftest: loads .env.test before the settings singleton is imported."""
from __future__ import annotations

import os
from pathlib import Path

_ROOT = Path(__file__).resolve().parent

# Enough for Settings() to build without a real database or Redis.
_FALLBACKS = {
    "POSTGRES_USER": "test",
    "POSTGRES_PASSWORD": "test",
    "POSTGRES_DB": "lending_chat_test",
    "JWT_SECRET": "test-secret-key-that-is-at-least-32-bytes",
    "FANOUT_BACKEND": "local",
}


def _load_env_file(path: Path) -> None:
    if not path.exists():
        return
    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        key, _, value = line.partition("=")
        os.environ.setdefault(key.strip(), value.strip())


_load_env_file(_ROOT / ".env.test")
for _key, _value in _FALLBACKS.items():
    os.environ.setdefault(_key, _value)
