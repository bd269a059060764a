from __future__ import annotations

import json
import os
import stat
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Iterator, List

from provlock.core.errors import MalformedLockError

DEFAULT_LOCK_PATH = Path("provider-lock.json")


@dataclass
class LockEntry:
    name: str
    package: str
    version: str
    alias: str = ""


@dataclass
class ProviderLock:
    entries: List[LockEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[LockEntry]:
        return iter(self.entries)

    def append(self, entry: LockEntry) -> None:
        self.entries.append(entry)

    def get(self, name: str) -> LockEntry | None:
        for entry in self.entries:
            if entry.name == name:
                return entry
        return None

    def to_json(self) -> str:
        return json.dumps([asdict(entry) for entry in self.entries], indent=2) + "\n"


def _target_mode(path: Path) -> int:
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def atomic_write(path: Path, content: str) -> None:
    """Write ``content`` to a sibling temp file, then rename it over ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    mode = _target_mode(path)
    fd, tmp = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        # mkstemp creates 0600; keep the permissions of the file being replaced
        os.chmod(tmp, mode)
        os.replace(tmp, path)
    except BaseException:
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def _parse_entry(item: object, index: int, lock_path: Path) -> LockEntry:
    if not isinstance(item, dict):
        raise MalformedLockError(
            f"Lock entry {index} is not an object", details={"path": str(lock_path)}
        )
    values = {}
    for key in ("name", "package", "version", "alias"):
        value = item.get(key, "")
        if not isinstance(value, str):
            raise MalformedLockError(
                f"Lock entry {index} has a non-string '{key}'",
                details={"path": str(lock_path)},
            )
        values[key] = value
    if not values["name"]:
        raise MalformedLockError(
            f"Lock entry {index} has no name", details={"path": str(lock_path)}
        )
    return LockEntry(**values)


def load_lock(path: Path | None = None) -> ProviderLock:
    lock_path = path or DEFAULT_LOCK_PATH
    if not lock_path.exists():
        return ProviderLock()
    try:
        data = json.loads(lock_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        raise MalformedLockError(
            f"Failed to read provider lock: {exc}", details={"path": str(lock_path)}
        ) from exc
    if data is None:
        return ProviderLock()
    if not isinstance(data, list):
        raise MalformedLockError(
            "Provider lock must be a JSON array", details={"path": str(lock_path)}
        )

    lock = ProviderLock()
    for index, item in enumerate(data):
        entry = _parse_entry(item, index, lock_path)
        if lock.get(entry.name) is not None:
            raise MalformedLockError(
                f"Duplicate provider '{entry.name}' in lock",
                details={"path": str(lock_path)},
            )
        lock.append(entry)
    return lock


def save_lock(lock: ProviderLock, path: Path | None = None) -> None:
    lock_path = path or DEFAULT_LOCK_PATH
    atomic_write(lock_path, lock.to_json())
