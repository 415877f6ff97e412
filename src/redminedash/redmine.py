from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

import httpx

from redminedash.models import Issue, IssueDetail

if TYPE_CHECKING:
    from redminedash.config import AppConfig

logger = logging.getLogger(__name__)

API_KEY_HEADER = "X-Redmine-API-Key"


class RedmineError(Exception):
    """Base class for every failure surfaced by the Redmine pipeline."""


@dataclass(frozen=True)
class ConfigurationError(RedmineError):
    missing: tuple[str, ...] = ()

    def __str__(self) -> str:
        if set(self.missing) >= {"server_url", "api_key"} or not self.missing:
            return "URL and API key are required"
        labels = {"server_url": "URL", "api_key": "API key"}
        return f"{' and '.join(labels.get(name, name) for name in self.missing)} is required"


@dataclass(frozen=True)
class TransportError(RedmineError):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass(frozen=True)
class HttpError(RedmineError):
    status_code: int

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in {401, 403}

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600

    def __str__(self) -> str:
        return f"HTTP error {self.status_code}"


@dataclass(frozen=True)
class DecodeError(RedmineError):
    message: str

    def __str__(self) -> str:
        return f"Failed to parse Redmine response: {self.message}"


def _require_dict(value: Any, where: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise DecodeError(f"{where}: expected object, got {type(value).__name__}")
    return value


def _require_int(raw: dict[str, Any], key: str, where: str) -> int:
    value = raw.get(key)
    if isinstance(value, bool) or not isinstance(value, int):
        raise DecodeError(f"{where}.{key}: expected integer")
    return value


def _require_str(raw: dict[str, Any], key: str, where: str) -> str:
    value = raw.get(key)
    if not isinstance(value, str):
        raise DecodeError(f"{where}.{key}: expected string")
    return value


def _optional_str(raw: dict[str, Any], key: str, where: str) -> Optional[str]:
    value = raw.get(key)
    if value is None or isinstance(value, str):
        return value
    raise DecodeError(f"{where}.{key}: expected string or null")


def _named(raw: dict[str, Any], key: str, where: str) -> str:
    ref = _require_dict(raw.get(key), f"{where}.{key}")
    return _require_str(ref, "name", f"{where}.{key}")


def _optional_named(raw: dict[str, Any], key: str, where: str) -> Optional[str]:
    if raw.get(key) is None:
        return None
    return _named(raw, key, where)


def parse_issue(raw: Any, where: str = "issue") -> Issue:
    data = _require_dict(raw, where)
    return Issue(
        id=_require_int(data, "id", where),
        subject=_require_str(data, "subject", where),
        status=_named(data, "status", where),
        project=_named(data, "project", where),
        priority=_optional_named(data, "priority", where),
    )


def parse_issue_detail(raw: Any, where: str = "issue") -> IssueDetail:
    data = _require_dict(raw, where)
    return IssueDetail(
        id=_require_int(data, "id", where),
        subject=_require_str(data, "subject", where),
        status=_named(data, "status", where),
        project=_named(data, "project", where),
        description=_optional_str(data, "description", where),
    )


def parse_issues_envelope(payload: Any) -> list[Issue]:
    envelope = _require_dict(payload, "response")
    raw_issues = envelope.get("issues")
    if not isinstance(raw_issues, list):
        raise DecodeError("response.issues: expected array")
    return [parse_issue(raw, f"issues[{index}]") for index, raw in enumerate(raw_issues)]


def parse_issue_detail_envelope(payload: Any) -> IssueDetail:
    envelope = _require_dict(payload, "response")
    if "issue" not in envelope:
        raise DecodeError("response.issue: missing")
    return parse_issue_detail(envelope["issue"])


def issue_web_url(base_url: str, issue_id: int) -> str:
    return f"{base_url.rstrip('/')}/issues/{issue_id}"


class RedmineClient:
    ISSUE_LIMIT = 50

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url.strip().rstrip("/")
        self.api_key = api_key
        self.timeout = timeout
        self.transport = transport
        self.headers = {
            "Accept": "application/json",
            API_KEY_HEADER: api_key,
        }

    @classmethod
    def from_config(cls, config: "AppConfig") -> "RedmineClient":
        return cls(config.server_url, config.api_key, timeout=float(config.request_timeout_seconds))

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        logger.debug("GET %s params=%s", url, params)
        try:
            async with httpx.AsyncClient(transport=self.transport, timeout=self.timeout) as client:
                response = await client.get(url, params=params, headers=self.headers)
        except httpx.InvalidURL as e:
            logger.warning("Invalid Redmine URL %r: %s", url, e)
            raise TransportError(f"Invalid URL: {url}") from e
        except httpx.TransportError as e:
            logger.warning("Request to %s failed: %s", url, e)
            raise TransportError(str(e) or type(e).__name__) from e
        except httpx.RequestError as e:
            # Body decoding and redirect failures
            logger.warning("Request to %s failed: %s", url, e)
            raise TransportError(str(e) or type(e).__name__) from e

        if not response.is_success:
            logger.warning("GET %s returned HTTP %s", url, response.status_code)
            raise HttpError(response.status_code)
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(f"invalid JSON: {e}") from e

    async def fetch_assigned_issues(self) -> list[Issue]:
        """Open issues assigned to the API key's owner, in server order."""
        payload = await self._get(
            "/issues.json",
            {"assigned_to_id": "me", "status_id": "open", "limit": self.ISSUE_LIMIT},
        )
        issues = parse_issues_envelope(payload)
        logger.debug("Fetched %d issues", len(issues))
        return issues

    async def fetch_issue_detail(self, issue_id: int) -> IssueDetail:
        payload = await self._get(f"/issues/{issue_id}.json")
        return parse_issue_detail_envelope(payload)

    def issue_url(self, issue_id: int) -> str:
        return issue_web_url(self.base_url, issue_id)
