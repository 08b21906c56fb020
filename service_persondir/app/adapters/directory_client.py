"""
Person directory service client.
"""

import httpx
from typing import Any, Dict, Mapping, Optional, Set, Union

from shared.logging import get_logger
from shared.errors import ExternalServiceError
from ..attributes import AttributeRecord, CaseInsensitiveAttributeRecord


class DirectoryClient:
    """Resolves person attributes against a remote directory service."""

    SERVICE_NAME = "directory_service"

    def __init__(
        self,
        directory_service_url: str,
        *,
        timeout: float = 10.0,
        case_insensitive: bool = False,
        name_attribute: Optional[str] = None,
    ):
        self.directory_service_url = directory_service_url.rstrip("/")
        self.timeout = timeout
        self.case_insensitive = case_insensitive
        self.name_attribute = name_attribute
        self.logger = get_logger("persondir.directory_client")

    async def resolve(self, seed: Mapping[str, Any]) -> Union[AttributeRecord, CaseInsensitiveAttributeRecord]:
        """Resolve a query seed into the person's attribute record."""
        data = await self._request("POST", "/attributes/query", json={"seed": dict(seed)})

        attributes = data.get("attributes")
        if not isinstance(attributes, dict):
            raise ExternalServiceError(
                self.SERVICE_NAME,
                "Malformed attribute response",
                details={"response": data}
            )

        record = AttributeRecord(attributes, name_attribute=self.name_attribute)
        if self.case_insensitive:
            return CaseInsensitiveAttributeRecord(record)
        return record

    async def possible_attribute_names(self) -> Set[str]:
        """Attribute names the directory can return."""
        data = await self._request("GET", "/attributes/names")
        return set(data.get("names") or [])

    async def health_check(self) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(f"{self.directory_service_url}/health")
            return response.status_code == 200
        except httpx.HTTPError:
            return False

    async def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.directory_service_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                if method == "GET":
                    response = await client.get(url)
                else:
                    response = await client.post(url, json=json)

        except httpx.HTTPError as e:
            self.logger.error("Directory service HTTP error", url=url, error=str(e))
            raise ExternalServiceError(
                self.SERVICE_NAME,
                "Directory service unavailable",
                details={"http_error": str(e)}
            )

        if response.status_code != 200:
            self.logger.error("Directory service error", url=url, status_code=response.status_code)
            raise ExternalServiceError(
                self.SERVICE_NAME,
                f"Unexpected status {response.status_code}",
                details={"status_code": response.status_code}
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                self.SERVICE_NAME,
                "Invalid JSON response",
                details={"error": str(e)}
            )

        if not isinstance(data, dict):
            self.logger.error("Directory service malformed response", url=url, body_type=type(data).__name__)
            raise ExternalServiceError(
                self.SERVICE_NAME,
                "Malformed response",
                details={"response": data}
            )
        return data
