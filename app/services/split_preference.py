"""
Default split preference.

The split ratio saved with "Save as Default" is kept in a small local
key/value store (the server-side counterpart of browser localStorage),
under a single fixed key, serialized as a decimal string. It seeds new
bookings only; existing bookings re-derive their ratio from buy/sell fees.
"""

import json
import logging
import os
import tempfile
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Optional, Union

from app.services.currency import parse_decimal
from app.services.fee_split_engine import FALLBACK_SPLIT_RATIO, clamp_split_ratio

logger = logging.getLogger(__name__)

DEFAULT_SPLIT_STORAGE_KEY = "showpro.defaultSplitRatio"


class LocalPreferenceStorage:
    """
    localStorage-like key/value store persisted as one JSON object.

    Every write replaces the whole file atomically; a missing file reads
    as empty.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Preference file {self.path} is corrupt, ignoring it: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Preference file {self.path} does not hold an object, ignoring it")
            return {}
        return data

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".prefs-", suffix=".json")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, sort_keys=True)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return None if value is None else str(value)

    def set_item(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove_item(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)


class DefaultSplitPreference:
    """The user's default split ratio for new bookings."""

    def __init__(self, storage: LocalPreferenceStorage, key: str = DEFAULT_SPLIT_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def load(self) -> Optional[Decimal]:
        raw = self.storage.get_item(self.key)
        if raw is None:
            return None

        ratio = parse_decimal(raw, None)
        if ratio is None:
            logger.warning(f"Ignoring unparsable default split ratio {raw!r}")
            return None
        return clamp_split_ratio(ratio)

    def save(self, ratio: Any) -> Decimal:
        parsed = parse_decimal(ratio, FALLBACK_SPLIT_RATIO)
        clamped = clamp_split_ratio(parsed)
        self.storage.set_item(self.key, str(clamped))
        logger.info(f"Default split ratio saved: {clamped}")
        return clamped

    def clear(self) -> None:
        self.storage.remove_item(self.key)
        logger.info("Default split ratio cleared")

    def initial_split_ratio(self) -> Decimal:
        """Ratio for a new booking: the saved default, else 0.85."""
        saved = self.load()
        return saved if saved is not None else FALLBACK_SPLIT_RATIO
