"""Entity registry - holds parsed entity metadata keyed by entity name.

The registry is an explicit object handed to the parser, the compiler and
the normalizer. Inserts and lookups are guarded by a re-entrant lock; a
re-registered entity replaces the previous entry (last write wins).
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from schema_marshal.core.exceptions import EntityNotFoundError

if TYPE_CHECKING:
    from schema_marshal.parsing.model import EntityMetadata

logger = logging.getLogger(__name__)


class EntityRegistry:
    """Thread-safe store of entity metadata.

    Besides the entities themselves the registry remembers, per source key,
    the digest of the source text the entity was parsed from. The parser uses
    it to skip re-parsing an unchanged source.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._entities: dict[str, EntityMetadata] = {}
        self._sources: dict[str, tuple[str, EntityMetadata]] = {}

    def register(
        self,
        metadata: EntityMetadata,
        *,
        source_key: str | None = None,
        digest: str | None = None,
    ) -> None:
        """Insert or replace the metadata for ``metadata.entity_name``."""
        with self._lock:
            if metadata.entity_name in self._entities:
                logger.debug("Replacing registered entity %s", metadata.entity_name)
            self._entities[metadata.entity_name] = metadata
            if source_key is not None and digest is not None:
                self._sources[source_key] = (digest, metadata)

    def cached(self, source_key: str, digest: str) -> EntityMetadata | None:
        """Return the entity parsed from ``source_key`` if its digest is unchanged."""
        with self._lock:
            entry = self._sources.get(source_key)
            if entry is None or entry[0] != digest:
                return None
            return entry[1]

    def get(self, entity_name: str) -> EntityMetadata:
        """Look up metadata by entity name.

        Raises:
            EntityNotFoundError: If no entity with that name is registered.
        """
        with self._lock:
            try:
                return self._entities[entity_name]
            except KeyError:
                raise EntityNotFoundError(entity_name) from None

    def find(self, entity_name: str) -> EntityMetadata | None:
        """Look up metadata by entity name, ``None`` when absent."""
        with self._lock:
            return self._entities.get(entity_name)

    def has(self, entity_name: str) -> bool:
        """Check if an entity name is registered."""
        with self._lock:
            return entity_name in self._entities

    def unregister(self, entity_name: str) -> None:
        """Drop an entity and any source digest pointing at it."""
        with self._lock:
            removed = self._entities.pop(entity_name, None)
            if removed is None:
                raise EntityNotFoundError(entity_name)
            stale = [key for key, (_, meta) in self._sources.items() if meta is removed]
            for key in stale:
                del self._sources[key]

    @property
    def entity_names(self) -> list[str]:
        """List all registered entity names, sorted alphabetically."""
        with self._lock:
            return sorted(self._entities.keys())

    def __len__(self) -> int:
        """Number of registered entities."""
        with self._lock:
            return len(self._entities)
