"""Single-file JSON cache mirroring the last pushed aggregate."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class LocalCache:
	def __init__(self, path: Path) -> None:
		self.path = Path(path)

	def read(self) -> Optional[Dict[str, Any]]:
		"""Return the cached aggregate, or None when absent or unreadable."""
		if not self.path.exists():
			return None
		try:
			payload = json.loads(self.path.read_text(encoding="utf-8"))
		except (OSError, ValueError):
			logger.warning("local_cache_unreadable", extra={"event": "local_cache_unreadable", "path": str(self.path)}, exc_info=True)
			return None
		return payload if isinstance(payload, dict) else None

	def write(self, payload: Dict[str, Any]) -> None:
		serialized = json.dumps(payload, ensure_ascii=False, indent=2)
		self.path.parent.mkdir(parents=True, exist_ok=True)

		with tempfile.NamedTemporaryFile(
			"w", dir=self.path.parent, delete=False, encoding="utf-8", suffix=".tmp"
		) as tmp:
			tmp.write(serialized)
			tmp.flush()
			os.fsync(tmp.fileno())
			temp_path = Path(tmp.name)

		temp_path.replace(self.path)
