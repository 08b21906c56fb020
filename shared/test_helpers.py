"""
Test helper functions and factory methods for the Person Directory services.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set


@dataclass
class TestPerson:
    """Test person data."""
    __test__ = False

    uid: str
    mail: str
    display_name: str
    groups: List[str] = field(default_factory=list)

    def to_attributes(self) -> Dict[str, List[Any]]:
        return {
            "uid": [self.uid],
            "mail": [self.mail],
            "displayName": [self.display_name],
            "memberOf": list(self.groups),
        }


class TestDataFactory:
    """Factory for creating test data."""
    __test__ = False

    @staticmethod
    def create_test_people() -> List[TestPerson]:
        return [
            TestPerson(
                uid="jdoe",
                mail="j@x.com",
                display_name="John Doe",
                groups=["staff", "faculty"]
            ),
            TestPerson(
                uid="asmith",
                mail="a.smith@x.com",
                display_name="Alice Smith",
                groups=["staff"]
            ),
            TestPerson(
                uid="bnguyen",
                mail="b.nguyen@x.com",
                display_name="Binh Nguyen",
                groups=["students"]
            ),
        ]

    @staticmethod
    def create_directory() -> Dict[str, Dict[str, List[Any]]]:
        """Attribute records keyed by uid."""
        return {person.uid: person.to_attributes() for person in TestDataFactory.create_test_people()}


class FakeAttributeLookup:
    """
    In-memory attribute lookup that records every call.

    Seeds resolve by their ``uid`` value; unknown seeds resolve to an empty
    record. Set ``error`` to make every call raise it.
    """
    __test__ = False

    def __init__(self, directory: Optional[Dict[str, Dict[str, List[Any]]]] = None,
                 error: Optional[Exception] = None):
        self.directory = directory if directory is not None else TestDataFactory.create_directory()
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def resolve(self, seed: Mapping[str, Any]) -> Dict[str, List[Any]]:
        self.calls.append(dict(seed))
        if self.error is not None:
            raise self.error
        return dict(self.directory.get(seed.get("uid"), {}))

    async def possible_attribute_names(self) -> Set[str]:
        names: Set[str] = set()
        for attributes in self.directory.values():
            names.update(attributes)
        return names


def create_test_config(**overrides) -> Dict[str, Any]:
    """Settings for a person directory service under test."""
    config = {
        "env": "test",
        "log_level": "debug",
        "cache_backend": "memory",
        "cache_key_attributes": ["uid"],
        "default_attribute_name": "uid",
        "directory_service_url": "http://localhost:8090",
    }
    config.update(overrides)
    return config
