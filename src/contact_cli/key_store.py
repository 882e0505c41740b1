import json
import logging
import tomllib
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_STORE_PATH = Path.home() / ".contact.cli.toml"


# ========== Access key persistence ==========
class KeyStore:
    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else DEFAULT_STORE_PATH

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            with self.path.open("rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.warning("Ignoring unreadable key store %s: %s", self.path, e)
            return None
        value = data.get("access_key")
        return value if isinstance(value, str) and value else None

    def save(self, access_key: str):
        # json.dumps would escape astral characters as surrogate pairs, which TOML rejects
        line = f"access_key = {json.dumps(access_key.strip(), ensure_ascii=False)}\n"
        try:
            tomllib.loads(line)
        except tomllib.TOMLDecodeError as e:
            raise ValueError(f"access key cannot be stored: {e}") from e
        self.path.write_text(line, encoding="utf-8")
        try:
            self.path.chmod(0o600)
        except OSError:
            logger.debug("Could not restrict permissions on %s", self.path)

    def clear(self) -> bool:
        if not self.path.exists():
            return False
        self.path.unlink()
        return True
