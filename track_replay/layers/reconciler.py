"""
Identity-keyed entity reconciliation.

Turns a stream of Upsert/Remove/Clear deltas into a live set of entities.
Entity creation and mutation are supplied by the owner of the entity type,
so one reconciler works for any domain.
"""

import logging
from typing import Callable, Generic, Iterator, Optional, TypeVar

from track_replay.shared.protocol import Clear, Delta, GeoFeature, Remove, Upsert

logger = logging.getLogger(__name__)

E = TypeVar("E")


class EntityReconciler(Generic[E]):
    """
    Maintains exactly one live entity per feature id.

    Upsert creates the entity on first sight and updates it in place
    afterwards; Remove and Clear drop entities. Nothing else touches the
    entity set.
    """

    def __init__(
        self,
        create_entity: Callable[[GeoFeature], E],
        update_entity: Callable[[E, GeoFeature], None],
    ):
        self._create_entity = create_entity
        self._update_entity = update_entity
        self._entities: dict[str, E] = {}

    def apply(self, delta: Delta):
        if isinstance(delta, Upsert):
            self._upsert(delta.feature)
        elif isinstance(delta, Remove):
            self._entities.pop(delta.id, None)
        elif isinstance(delta, Clear):
            self.clear()
        else:
            logger.debug(f"Ignoring unsupported delta {delta!r}")

    def clear(self):
        self._entities.clear()

    def get(self, entity_id: str) -> Optional[E]:
        return self._entities.get(entity_id)

    def ids(self) -> list[str]:
        return list(self._entities)

    def items(self) -> Iterator[tuple[str, E]]:
        return iter(list(self._entities.items()))

    def __len__(self) -> int:
        return len(self._entities)

    def __contains__(self, entity_id: object) -> bool:
        return entity_id in self._entities

    def _upsert(self, feature: GeoFeature):
        if feature.id not in self._entities:
            self._entities[feature.id] = self._create_entity(feature)
        entity = self._entities[feature.id]
        # New entities take their initial state from the same update path
        self._update_entity(entity, feature)
