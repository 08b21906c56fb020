"""
Attribute record package.

Holds the containers a lookup resolves a seed into: an ordered mapping of
attribute name to value list, plus a case-insensitive view over it.
"""

from .record import AttributeRecord, CaseInsensitiveAttributeRecord

__all__ = ["AttributeRecord", "CaseInsensitiveAttributeRecord"]
