"""
Unit tests for the person directory client.
"""

import pytest
import httpx
from unittest.mock import AsyncMock, patch
import json

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', '..'))

from service_persondir.app.adapters import DirectoryClient
from service_persondir.app.attributes import AttributeRecord, CaseInsensitiveAttributeRecord
from shared.errors import ExternalServiceError

BASE_URL = "http://localhost:8090"


def make_response(status_code, body, method="POST", path="/attributes/query"):
    content = body if isinstance(body, str) else json.dumps(body)
    return httpx.Response(
        status_code=status_code,
        content=content,
        request=httpx.Request(method, f"{BASE_URL}{path}")
    )


class TestDirectoryClient:
    """Test cases for DirectoryClient."""

    @pytest.fixture
    def directory_client(self):
        """Create DirectoryClient instance."""
        return DirectoryClient(BASE_URL + "/", name_attribute="uid")

    @pytest.fixture
    def mock_attributes(self):
        return {"uid": ["jdoe"], "mail": ["j@x.com"], "displayName": ["John Doe"]}

    @pytest.mark.asyncio
    async def test_resolve_success(self, directory_client, mock_attributes):
        """Test successful attribute resolution."""
        with patch('httpx.AsyncClient') as mock_client:
            post = AsyncMock(return_value=make_response(200, {"attributes": mock_attributes}))
            mock_client.return_value.__aenter__.return_value.post = post

            record = await directory_client.resolve({"uid": "jdoe"})

            assert isinstance(record, AttributeRecord)
            assert record == mock_attributes
            assert record.name == "jdoe"
            post.assert_awaited_once_with(f"{BASE_URL}/attributes/query", json={"seed": {"uid": "jdoe"}})

    @pytest.mark.asyncio
    async def test_resolve_case_insensitive(self, mock_attributes):
        """Test records are wrapped when case-insensitive names are enabled."""
        directory_client = DirectoryClient(BASE_URL, case_insensitive=True)

        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(200, {"attributes": mock_attributes})
            )

            record = await directory_client.resolve({"uid": "jdoe"})

            assert isinstance(record, CaseInsensitiveAttributeRecord)
            assert record["DISPLAYNAME"] == ["John Doe"]

    @pytest.mark.asyncio
    async def test_resolve_error_status(self, directory_client):
        """Test non-200 responses raise ExternalServiceError."""
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(500, {"error": "Internal server error"})
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await directory_client.resolve({"uid": "jdoe"})

            assert exc_info.value.details["status_code"] == 500

    @pytest.mark.asyncio
    async def test_resolve_transport_error(self, directory_client):
        """Test transport failures raise ExternalServiceError."""
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                side_effect=httpx.ConnectError("Connection refused")
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await directory_client.resolve({"uid": "jdoe"})

            assert "unavailable" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_resolve_malformed_body(self, directory_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(200, {"attributes": ["not", "a", "mapping"]})
            )

            with pytest.raises(ExternalServiceError):
                await directory_client.resolve({"uid": "jdoe"})

    @pytest.mark.asyncio
    async def test_resolve_invalid_json(self, directory_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(200, "<html>")
            )

            with pytest.raises(ExternalServiceError):
                await directory_client.resolve({"uid": "jdoe"})

    @pytest.mark.asyncio
    async def test_resolve_non_object_body(self, directory_client):
        """Test a JSON array body is an external service error."""
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.post = AsyncMock(
                return_value=make_response(200, [1, 2])
            )

            with pytest.raises(ExternalServiceError) as exc_info:
                await directory_client.resolve({"uid": "jdoe"})

            assert exc_info.value.status_code == 502
            assert exc_info.value.details["response"] == [1, 2]

    @pytest.mark.asyncio
    async def test_possible_attribute_names_non_object_body(self, directory_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                return_value=make_response(200, ["uid"], method="GET", path="/attributes/names")
            )

            with pytest.raises(ExternalServiceError):
                await directory_client.possible_attribute_names()

    @pytest.mark.asyncio
    async def test_possible_attribute_names(self, directory_client):
        with patch('httpx.AsyncClient') as mock_client:
            get = AsyncMock(return_value=make_response(
                200, {"names": ["uid", "mail", "uid"]}, method="GET", path="/attributes/names"
            ))
            mock_client.return_value.__aenter__.return_value.get = get

            names = await directory_client.possible_attribute_names()

            assert names == {"uid", "mail"}
            get.assert_awaited_once_with(f"{BASE_URL}/attributes/names")

    @pytest.mark.asyncio
    async def test_health_check(self, directory_client):
        with patch('httpx.AsyncClient') as mock_client:
            mock_client.return_value.__aenter__.return_value.get = AsyncMock(
                side_effect=httpx.ConnectError("Connection refused")
            )

            assert await directory_client.health_check() is False
