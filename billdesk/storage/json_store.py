from __future__ import annotations

import glob
import json
import logging
import os
import shutil
import tempfile
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Union

logger = logging.getLogger(__name__)


def _json_default(o: Any) -> Any:
    if isinstance(o, (date, datetime)):
        return o.isoformat()
    return str(o)


class JsonStore:
    """
    Stockage clé -> document JSON, un fichier par clé (<data_dir>/<key>.json).
    - Lecture tolérante : fichier absent ou corrompu -> None
    - N'écrit pas si le contenu ne change pas
    - Rotation de backups optionnelle par clé
    - Écriture "fire-and-forget" : un échec est journalisé, jamais levé
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        *,
        backup_keys: tuple[str, ...] = (),
        backup_keep: int = 5,
    ) -> None:
        self.data_dir = Path(data_dir)
        self.backup_keys = set(backup_keys)
        self.backup_keep = max(0, int(backup_keep))
        self._lock = threading.Lock()
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    # ---------------- lecture ---------------- #

    def read(self, key: str) -> Any:
        path = self.path_for(key)
        try:
            with path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            return None
        except (json.JSONDecodeError, UnicodeDecodeError):
            logger.warning("Malformed JSON in %s, ignoring it", path)
            try:
                shutil.copy2(path, path.with_suffix(".corrupt.json"))
            except OSError:
                logger.debug("Could not copy corrupt file %s aside", path)
            return None
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            return None

    # ---------------- écriture ---------------- #

    def _rotate_backups(self, path: Path) -> None:
        pattern = str(path.with_suffix(".*.bak.json"))
        files = sorted(glob.glob(pattern))
        # garde les plus récents
        if len(files) > self.backup_keep:
            for old in files[: len(files) - self.backup_keep]:
                try:
                    Path(old).unlink(missing_ok=True)
                except OSError:
                    pass

    def _backup(self, path: Path) -> None:
        ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        try:
            shutil.copy2(path, path.with_suffix(f".{ts}.bak.json"))
        except OSError as e:
            logger.debug("Backup of %s failed: %s", path, e)
            return
        self._rotate_backups(path)

    def write(self, key: str, data: Any) -> bool:
        path = self.path_for(key)
        new_dump = json.dumps(data, ensure_ascii=False, indent=2, default=_json_default)
        with self._lock:
            try:
                if path.exists():
                    # si contenu identique -> ne rien faire
                    if path.read_text(encoding="utf-8") == new_dump:
                        return True
                    if key in self.backup_keys and self.backup_keep > 0:
                        self._backup(path)

                fd, tmp = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as f:
                        f.write(new_dump)
                    os.replace(tmp, path)
                except BaseException:
                    Path(tmp).unlink(missing_ok=True)
                    raise
            except OSError as e:
                logger.warning("Write of %s failed, keeping in-memory state: %s", path, e)
                return False
        return True

    def remove(self, key: str) -> bool:
        path = self.path_for(key)
        with self._lock:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Cannot remove %s: %s", path, e)
                return False
        return True
