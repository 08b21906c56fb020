"""
Attribute record containers returned by person attribute lookups.
"""

from collections.abc import Mapping
from typing import Any, Dict, Iterator, List, Optional


def _as_value_list(value: Any) -> List[Any]:
    """Normalise a raw attribute value into a list of values."""
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class AttributeRecord(Mapping):
    """Ordered, read-only mapping of attribute name to a list of values."""

    def __init__(self, attributes: Optional[Mapping] = None, name_attribute: Optional[str] = None):
        self._attributes: Dict[str, List[Any]] = {}
        for attr_name, value in (attributes or {}).items():
            self._attributes[str(attr_name)] = _as_value_list(value)
        self.name_attribute = name_attribute

    def __getitem__(self, attr_name: str) -> List[Any]:
        return self._attributes[attr_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._attributes)

    def __len__(self) -> int:
        return len(self._attributes)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._attributes!r})"

    @property
    def name(self) -> Optional[Any]:
        """First value of the configured name attribute, if any."""
        if self.name_attribute is None:
            return None
        return self.get_attribute_value(self.name_attribute)

    def get_attribute_values(self, attr_name: str) -> Optional[List[Any]]:
        return self.get(attr_name)

    def get_attribute_value(self, attr_name: str) -> Optional[Any]:
        values = self.get(attr_name)
        if not values:
            return None
        return values[0]

    def to_dict(self) -> Dict[str, List[Any]]:
        """Serialize to a plain dict, copying the value lists."""
        return {attr_name: list(values) for attr_name, values in self.items()}


class CaseInsensitiveAttributeRecord(Mapping):
    """
    Wraps an AttributeRecord so attribute names match regardless of case.

    Lookups fold case; iteration and serialization keep the names exactly as
    the wrapped record holds them.
    """

    def __init__(self, record: Mapping, name_attribute: Optional[str] = None):
        if not isinstance(record, AttributeRecord):
            record = AttributeRecord(record, name_attribute=name_attribute)
        self._record = record
        self._names: Dict[str, str] = {}
        for attr_name in record:
            # First spelling wins when a record carries case-variant duplicates
            self._names.setdefault(attr_name.casefold(), attr_name)
        self.name_attribute = name_attribute or record.name_attribute

    @property
    def record(self) -> AttributeRecord:
        return self._record

    def _resolve(self, attr_name: Any) -> Any:
        if isinstance(attr_name, str):
            return self._names.get(attr_name.casefold(), attr_name)
        return attr_name

    def __getitem__(self, attr_name: str) -> List[Any]:
        return self._record[self._resolve(attr_name)]

    def __contains__(self, attr_name: object) -> bool:
        return self._resolve(attr_name) in self._record

    def __iter__(self) -> Iterator[str]:
        return iter(self._record)

    def __len__(self) -> int:
        return len(self._record)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Mapping):
            return dict(self.items()) == dict(other.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._record.to_dict()!r})"

    @property
    def name(self) -> Optional[Any]:
        if self.name_attribute is None:
            return None
        return self.get_attribute_value(self.name_attribute)

    def get_attribute_values(self, attr_name: str) -> Optional[List[Any]]:
        return self.get(attr_name)

    def get_attribute_value(self, attr_name: str) -> Optional[Any]:
        values = self.get(attr_name)
        if not values:
            return None
        return values[0]

    def to_dict(self) -> Dict[str, List[Any]]:
        return self._record.to_dict()
