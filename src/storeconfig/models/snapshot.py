"""Immutable cache snapshot."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import datetime, timedelta
from types import MappingProxyType

from storeconfig._redact import mask_token
from storeconfig.clock import ensure_aware
from storeconfig.exceptions import DuplicateTokenError
from storeconfig.models.store import StoreConfig


def index_by_token(stores: Iterable[StoreConfig]) -> dict[str, StoreConfig]:
    """Map each location token to its store.

    Raises
    ------
    DuplicateTokenError
        If two stores share a location token. The error carries the masked
        token only.
    """
    index: dict[str, StoreConfig] = {}
    for store in stores:
        existing = index.get(store.location_token)
        if existing is not None:
            masked = mask_token(store.location_token)
            raise DuplicateTokenError(
                f"Location token {masked} is shared by stores {existing.id} and {store.id}",
                token=masked,
            )
        index[store.location_token] = store
    return index


@dataclass(frozen=True, slots=True)
class CacheSnapshot:
    """Point-in-time view of every active store.

    Built fully before publication and replaced wholesale on refresh, so a
    reader holding a reference always sees a consistent view.
    """

    entities: tuple[StoreConfig, ...]
    by_token: Mapping[str, StoreConfig]
    fetched_at: datetime

    @classmethod
    def build(cls, entities: Iterable[StoreConfig], fetched_at: datetime) -> CacheSnapshot:
        """Index *entities* by token, dropping inactive ones.

        Raises
        ------
        DuplicateTokenError
            If two active stores share a location token.
        """
        active = sorted(
            (store for store in entities if store.is_active),
            key=lambda store: (store.name.casefold(), store.id),
        )
        return cls(
            entities=tuple(active),
            by_token=MappingProxyType(index_by_token(active)),
            fetched_at=ensure_aware(fetched_at),
        )

    def age(self, now: datetime) -> timedelta:
        return ensure_aware(now) - self.fetched_at

    def __len__(self) -> int:
        return len(self.entities)
