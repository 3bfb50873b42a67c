"""Session persistence: conversations stored as JSON files on disk."""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import List, NamedTuple, Optional, Sequence, Tuple

from .messages import Message, messages_from_records, messages_to_records

logger = logging.getLogger(__name__)


class SessionRecord(NamedTuple):
    model: str
    messages: List[Message]
    timestamp: str


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 time with millisecond precision, e.g. ``2024-05-01T10:20:30.123Z``."""
    now = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def autosave_name(timestamp: str) -> str:
    return "autosave-" + timestamp.replace(":", "-").replace(".", "-")


class SessionStore:
    """Reads and writes session files inside a single directory."""

    FILENAME_SUFFIX = ".json"
    SESSIONS_DIR = Path.home() / ".gpt-cli" / "sessions"

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory) if directory is not None else self.SESSIONS_DIR

    # ---------------- Paths ----------------

    def path_for(self, name: str) -> Path:
        if not name or name in {".", ".."} or "/" in name or "\\" in name:
            raise ValueError(f"Invalid session name: {name!r}")
        return self.directory / f"{name}{self.FILENAME_SUFFIX}"

    def _session_files(self) -> List[Path]:
        return [
            p
            for p in self.directory.iterdir()
            if p.suffix == self.FILENAME_SUFFIX and p.is_file()
        ]

    # ---------------- Encoding ----------------

    def _write(self, name: str, messages: Sequence[Message], model: str) -> Path:
        path = self.path_for(name)
        self.directory.mkdir(parents=True, exist_ok=True)
        data = {
            "model": model,
            "messages": messages_to_records(messages),
            "timestamp": iso_timestamp(),
        }
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp_path.replace(path)
        logger.debug("wrote session %s (%d messages)", path, len(messages))
        return path

    @staticmethod
    def _decode(raw: str, source: str) -> SessionRecord:
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f"Session '{source}' is not a JSON object.")
        model = data.get("model")
        if not isinstance(model, str):
            raise ValueError(f"Session '{source}' has no model.")
        records = data.get("messages") or []
        if not isinstance(records, list):
            raise ValueError(f"Session '{source}' has a malformed message list.")
        return SessionRecord(
            model=model,
            messages=messages_from_records(records),
            timestamp=str(data.get("timestamp", "")),
        )

    # ---------------- Public API ----------------

    def save(self, name: str, messages: Sequence[Message], model: str) -> Path:
        return self._write(name, messages, model)

    def load(self, name: str) -> Tuple[str, List[Message]]:
        path = self.path_for(name)
        if not path.exists():
            raise FileNotFoundError(f"Session '{name}' does not exist.")
        record = self._decode(path.read_text(encoding="utf-8"), name)
        logger.debug("loaded session %s (model=%s)", path, record.model)
        return record.model, record.messages

    def list(self) -> List[str]:
        try:
            return [p.stem for p in self._session_files()]
        except OSError as exc:
            logger.warning("could not list sessions in %s: %s", self.directory, exc)
            return []

    def delete(self, name: str) -> None:
        self.path_for(name).unlink()
        logger.debug("deleted session %s", name)

    def autosave(self, messages: Sequence[Message], model: str) -> str:
        name = autosave_name(iso_timestamp())
        self._write(name, messages, model)
        return name

    def resume_latest(self) -> Optional[SessionRecord]:
        """Return the most recently modified session, or ``None``."""
        try:
            latest: Optional[Path] = None
            latest_mtime = 0.0
            for path in self._session_files():
                mtime = path.stat().st_mtime
                if latest is None or mtime > latest_mtime:
                    latest, latest_mtime = path, mtime

            if latest is None:
                logger.info("no session files found in %s", self.directory)
                return None

            record = self._decode(latest.read_text(encoding="utf-8"), latest.stem)
        except (OSError, ValueError) as exc:
            logger.warning("failed to resume latest session: %s", exc)
            return None

        logger.debug("resumed session %s", latest)
        return record
