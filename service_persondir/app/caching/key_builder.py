"""
Cache key derivation for attribute lookups.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple

from shared.errors import ConfigurationError
from shared.logging import get_logger


def _freeze(value: Any) -> Any:
    """Render a seed value as something hashable that keeps its type.

    ``1``, ``1.0`` and ``True`` are equal in Python but are distinct seed
    values, so every scalar is paired with its type.
    """
    if isinstance(value, Mapping):
        return (Mapping, frozenset((k, _freeze(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return (list, tuple(_freeze(v) for v in value))
    if isinstance(value, (set, frozenset)):
        return (frozenset, frozenset(_freeze(v) for v in value))
    return (type(value), value)


class CacheKey(Mapping):
    """
    Immutable mapping of key attribute name to the seed's value for it.

    Keys compare and hash by content, so two seeds that agree on the key
    attributes produce equal keys. Values of different types never match,
    even when Python would call them equal. Entry order follows the
    configured attribute order and only affects ``repr``.
    """

    __slots__ = ("_entries", "_frozen")

    def __init__(self, entries: Iterable[Tuple[str, Any]]):
        self._entries: Dict[str, Any] = dict(entries)
        self._frozen: Optional[frozenset] = None

    def __getitem__(self, attr_name: str) -> Any:
        return self._entries[attr_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def _rendering(self) -> frozenset:
        if self._frozen is None:
            self._frozen = _freeze(self._entries)[1]
        return self._frozen

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CacheKey):
            return self._rendering() == other._rendering()
        if isinstance(other, Mapping):
            return self._rendering() == _freeze(other)[1]
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._rendering())

    def __repr__(self) -> str:
        return f"CacheKey({self._entries!r})"


class CacheKeyBuilder:
    """Builds cache keys from query seeds.

    ``cache_key_attributes`` names the seed attributes that make up the key.
    An empty collection is the same as none at all, in which case the key is
    built from ``default_attribute_name`` alone.
    """

    def __init__(
        self,
        cache_key_attributes: Optional[Iterable[str]] = None,
        default_attribute_name: Optional[str] = None,
    ):
        self.logger = get_logger("persondir.cache.key_builder")
        self.cache_key_attributes = cache_key_attributes
        self.default_attribute_name = default_attribute_name

    @property
    def cache_key_attributes(self) -> Optional[Tuple[str, ...]]:
        return self._cache_key_attributes

    @cache_key_attributes.setter
    def cache_key_attributes(self, attributes: Optional[Iterable[str]]) -> None:
        if attributes is None:
            self._cache_key_attributes = None
            return
        # Deduplicate, keep first-seen order
        names = tuple(dict.fromkeys(attributes))
        self._cache_key_attributes = names or None

    def derive_key(self, seed: Mapping) -> Optional[CacheKey]:
        """
        Derive the cache key for a seed.

        Attributes absent from the seed still take part in the key with a
        value of ``None``, so every seed lacking them shares one key.

        Returns:
            The key, or ``None`` if no key attributes were chosen, in which
            case caching is skipped for the query.

        Raises:
            ConfigurationError: neither key attributes nor a default
                attribute name is configured.
        """
        if self._cache_key_attributes:
            attributes = self._cache_key_attributes
            source = "cache_key_attributes"
        else:
            if self.default_attribute_name is None:
                raise ConfigurationError(
                    "Both 'default_attribute_name' and 'cache_key_attributes' may not be unset"
                )
            attributes = (self.default_attribute_name,)
            source = "default_attribute_name"

        cache_key = CacheKey((attr, seed.get(attr)) for attr in attributes)

        self.logger.debug(
            "Created cache key",
            cache_key=repr(cache_key),
            attributes=list(attributes),
            source=source,
        )

        if len(cache_key) == 0:
            return None
        return cache_key
