"""File-backed element corpus with a time-based cache."""

import json
import logging
import os
import tempfile
import threading
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import xxhash

from element_matcher.config.models import ElementRecord, ReplacementRequest, StoreConfig
from element_matcher.core.exceptions import CorpusUnavailableError

CORPUS_KEY = 'test_elements'


class ElementStore:
    """
    Loads the element corpus from a JSON file and keeps it cached.

    The file holds {"test_elements": [...]}. After the cache expires the file
    is read again, but only re-parsed when its content fingerprint changed.
    Replacements are written straight through to the file; concurrent
    writers follow last-write-wins.
    """

    def __init__(self, config: StoreConfig, clock=time.monotonic):
        self.config = config
        self.path = Path(config.path)
        self._clock = clock
        self._lock = threading.Lock()
        self._records: Optional[List[ElementRecord]] = None
        self._fingerprint: Optional[str] = None
        self._loaded_at = 0.0
        self.logger = logging.getLogger(__name__)

    def load(self) -> List[ElementRecord]:
        """
        Return the current corpus snapshot.

        Returns:
            List[ElementRecord]: Records in file order

        Raises:
            CorpusUnavailableError: If the file cannot be read or parsed
        """
        with self._lock:
            now = self._clock()
            if (self._records is not None
                    and now - self._loaded_at < self.config.cache_ttl_seconds):
                return list(self._records)

            raw = self._read_bytes()
            fingerprint = xxhash.xxh64(raw).hexdigest()
            if self._records is None or fingerprint != self._fingerprint:
                self.logger.debug(f"Loading elements data from {self.path}")
                self._records = self._parse(raw)
                self._fingerprint = fingerprint
                self.logger.info(f"Loaded {len(self._records)} test elements")

            self._loaded_at = now
            return list(self._records)

    def invalidate(self) -> None:
        """Drop the cached snapshot so the next load re-reads the file."""
        with self._lock:
            self._records = None
            self._fingerprint = None

    def replace(self, old_element_id: str, record: ElementRecord) -> bool:
        """
        Replace the first record carrying old_element_id.

        Args:
            old_element_id: element_id of the record to replace
            record: Record to put in its place

        Returns:
            bool: Whether a record was replaced
        """
        if old_element_id is None or record is None:
            return False

        records = self.load()
        for index, existing in enumerate(records):
            if existing.element_id == old_element_id:
                records[index] = record
                self._write(records)
                self.logger.info(
                    f"Updated element: {old_element_id} -> {record.element_id}"
                )
                return True

        self.logger.warning(f"Element not found for update: {old_element_id}")
        return False

    def apply(self, request: ReplacementRequest) -> bool:
        """Apply a replacement emitted by the matcher."""
        return self.replace(request.old_element_id, request.new_record)

    def statistics(self) -> Dict[str, Any]:
        """Count elements overall, by screen and by element type."""
        records = self.load()
        frame = pd.DataFrame(
            [(r.screen, r.element_type) for r in records],
            columns=['screen', 'element_type']
        ).fillna('Unknown')

        return {
            'totalElements': len(records),
            'elementsByScreen': {
                str(k): int(v) for k, v in frame['screen'].value_counts().items()
            },
            'elementsByType': {
                str(k): int(v) for k, v in frame['element_type'].value_counts().items()
            },
        }

    def _read_bytes(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            self.logger.error(f"Failed to load elements data: {e}")
            raise CorpusUnavailableError(f"Failed to load elements data from {self.path}") from e

    def _parse(self, raw: bytes) -> List[ElementRecord]:
        try:
            data = json.loads(raw.decode(self.config.encoding))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to parse elements data: {e}")
            raise CorpusUnavailableError(f"Malformed elements data in {self.path}") from e

        elements = data.get(CORPUS_KEY) if isinstance(data, dict) else None
        if not isinstance(elements, list):
            raise CorpusUnavailableError(
                f"Expected a '{CORPUS_KEY}' list in {self.path}"
            )
        return [ElementRecord.from_dict(item) for item in elements if isinstance(item, dict)]

    def _write(self, records: List[ElementRecord]) -> None:
        payload = json.dumps(
            {CORPUS_KEY: [r.to_dict() for r in records]}, indent=2
        ).encode(self.config.encoding)
        with self._lock:
            # Swap in a complete file so readers never see a partial corpus
            tmp = tempfile.NamedTemporaryFile(
                dir=self.path.parent, prefix=f".{self.path.name}.", delete=False
            )
            try:
                with tmp:
                    tmp.write(payload)
                os.replace(tmp.name, self.path)
            except OSError:
                os.unlink(tmp.name)
                raise
            self._records = records
            self._fingerprint = xxhash.xxh64(payload).hexdigest()
            self._loaded_at = self._clock()
