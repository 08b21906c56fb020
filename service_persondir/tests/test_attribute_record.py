"""
Unit tests for attribute record containers.
"""

import pytest

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_persondir.app.attributes import AttributeRecord, CaseInsensitiveAttributeRecord


class TestAttributeRecord:
    """Test cases for AttributeRecord."""

    @pytest.fixture
    def record(self):
        return AttributeRecord(
            {"uid": "jdoe", "mail": ["j@x.com", "john@x.com"], "memberOf": ("staff",), "phone": None},
            name_attribute="uid",
        )

    def test_values_normalised_to_lists(self, record):
        """Test scalars, tuples and None become lists."""
        assert record["uid"] == ["jdoe"]
        assert record["mail"] == ["j@x.com", "john@x.com"]
        assert record["memberOf"] == ["staff"]
        assert record["phone"] == []

    def test_preserves_insertion_order(self, record):
        assert list(record) == ["uid", "mail", "memberOf", "phone"]

    def test_first_and_all_values(self, record):
        assert record.get_attribute_value("mail") == "j@x.com"
        assert record.get_attribute_values("mail") == ["j@x.com", "john@x.com"]
        assert record.get_attribute_value("phone") is None
        assert record.get_attribute_value("missing") is None
        assert record.get_attribute_values("missing") is None

    def test_name_from_name_attribute(self, record):
        assert record.name == "jdoe"
        assert AttributeRecord({"uid": "jdoe"}).name is None

    def test_read_only(self, record):
        with pytest.raises(TypeError):
            record["uid"] = ["asmith"]

    def test_equality_with_plain_mapping(self, record):
        """Test records compare by content."""
        assert AttributeRecord({"uid": "jdoe"}) == {"uid": ["jdoe"]}
        assert AttributeRecord({"uid": "jdoe"}) != {"uid": ["asmith"]}

    def test_to_dict_returns_copies(self, record):
        data = record.to_dict()
        data["mail"].append("other@x.com")

        assert record["mail"] == ["j@x.com", "john@x.com"]

    def test_empty_record(self):
        record = AttributeRecord()

        assert len(record) == 0
        assert record.to_dict() == {}


class TestCaseInsensitiveAttributeRecord:
    """Test cases for CaseInsensitiveAttributeRecord."""

    @pytest.fixture
    def record(self):
        return CaseInsensitiveAttributeRecord(
            AttributeRecord({"uid": "jdoe", "displayName": "John Doe", "mail": "j@x.com"}, name_attribute="uid")
        )

    def test_lookup_ignores_case(self, record):
        assert record["DISPLAYNAME"] == ["John Doe"]
        assert record["displayname"] == ["John Doe"]
        assert record.get("MAIL") == ["j@x.com"]
        assert record.get_attribute_value("Uid") == "jdoe"

    def test_membership_ignores_case(self, record):
        assert "UID" in record
        assert "givenName" not in record

    def test_iteration_keeps_original_case(self, record):
        assert list(record) == ["uid", "displayName", "mail"]
        assert list(record.to_dict()) == ["uid", "displayName", "mail"]

    def test_missing_attribute(self, record):
        with pytest.raises(KeyError):
            record["givenName"]
        assert record.get_attribute_values("givenName") is None

    def test_wraps_plain_mapping(self):
        record = CaseInsensitiveAttributeRecord({"eduPersonAffiliation": ["staff"]})

        assert record["EDUPERSONAFFILIATION"] == ["staff"]
        assert isinstance(record.record, AttributeRecord)

    def test_name_attribute_carried_from_wrapped_record(self, record):
        assert record.name_attribute == "uid"
        assert record.name == "jdoe"

    def test_first_spelling_wins_for_case_variants(self):
        """Test case-variant duplicates resolve to the first spelling."""
        record = CaseInsensitiveAttributeRecord({"Mail": ["first@x.com"], "mail": ["second@x.com"]})

        assert record["MAIL"] == ["first@x.com"]
        assert len(record) == 2

    def test_equality(self, record):
        assert record == {"uid": ["jdoe"], "displayName": ["John Doe"], "mail": ["j@x.com"]}
