"""Fluent request-options builder.

Example:
    >>> from fetchkit import build_request
    >>>
    >>> options = (
    ...     build_request("https://api.example.com/users", "POST")
    ...     .add_auth_header("sk-xxx")
    ...     .set_json_body({"name": "Ada"})
    ...     .set_timeout(10.0)
    ...     .build()
    ... )
    >>> options.headers["Content-Type"]
    'application/json'
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Annotated, Literal
from urllib.parse import urlencode

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, field_validator

if TYPE_CHECKING:
    import httpx

    from fetchkit.retry import BackoffPolicy

HttpMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


# ─────────────────────────────────────────────────────────────────────────────
# Request Options
# ─────────────────────────────────────────────────────────────────────────────

class RequestOptions(BaseModel):
    """Everything the transport needs for one request.

    Attributes:
        url: Absolute http(s) URL
        method: HTTP method
        headers: Request headers
        content: Serialized body, if any
        timeout: Per-request timeout in seconds (None = client default)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        revalidate_instances="never",
        json_schema_extra={
            "title": "Request Options",
            "examples": [{"url": "https://api.example.com/data", "method": "GET"}],
        },
    )

    url: Annotated[str, Field(description="URL to request")]
    method: HttpMethod = "GET"
    headers: dict[str, str] = Field(default_factory=dict, repr=False)
    content: str | bytes | None = Field(default=None, repr=False)
    timeout: PositiveFloat | None = None

    @field_validator("url", mode="before")
    @classmethod
    def _validate_url(cls, v: object) -> object:
        """Validate URL has proper scheme."""
        if isinstance(v, str) and not v.strip().startswith(("http://", "https://")):
            raise ValueError("URL must start with http:// or https://")
        return v

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, v: object) -> object:
        return v.upper() if isinstance(v, str) else v

    def to_httpx(self) -> dict[str, object]:
        """Keyword arguments for httpx Client.request / AsyncClient.request."""
        kwargs: dict[str, object] = {"method": self.method, "url": self.url, "headers": dict(self.headers)}
        if self.content is not None:
            kwargs["content"] = self.content
        if self.timeout is not None:
            kwargs["timeout"] = self.timeout
        return kwargs


# ─────────────────────────────────────────────────────────────────────────────
# Builder
# ─────────────────────────────────────────────────────────────────────────────

class RequestBuilder:
    """Chainable builder producing RequestOptions.

    Every setter returns the builder. Object bodies passed to set_body are
    JSON-encoded at build time.
    """

    __slots__ = ("url", "method", "headers", "body", "timeout")

    def __init__(self, url: str, method: str = "GET") -> None:
        self.url = url
        self.method = method
        self.headers: dict[str, str] = {}
        self.body: str | bytes | dict[str, object] | list[object] | None = None
        self.timeout: float | None = None

    def set_header(self, name: str, value: str) -> RequestBuilder:
        self.headers[name] = value
        return self

    def set_headers(self, headers: Mapping[str, str]) -> RequestBuilder:
        self.headers.update(headers)
        return self

    def add_custom_header(self, name: str, value: str) -> RequestBuilder:
        return self.set_header(name, value)

    def set_body(self, body: str | bytes | dict[str, object] | list[object] | None) -> RequestBuilder:
        """Set raw body; dicts and lists also set a JSON content type."""
        self.body = body
        if isinstance(body, (dict, list)):
            self.set_header("Content-Type", JSON_CONTENT_TYPE)
        return self

    def set_json_body(self, data: object) -> RequestBuilder:
        self.body = json.dumps(data)
        return self.set_header("Content-Type", JSON_CONTENT_TYPE)

    def set_form_body(self, data: Mapping[str, object]) -> RequestBuilder:
        self.body = urlencode(data)
        return self.set_header("Content-Type", FORM_CONTENT_TYPE)

    def set_timeout(self, seconds: float) -> RequestBuilder:
        self.timeout = seconds
        return self

    def add_auth_header(self, token: str, scheme: str = "Bearer") -> RequestBuilder:
        return self.set_header("Authorization", f"{scheme} {token}")

    def build(self) -> RequestOptions:
        """Validate and freeze into RequestOptions."""
        content = self.body if isinstance(self.body, (str, bytes)) or self.body is None else json.dumps(self.body)
        return RequestOptions(
            url=self.url,
            method=self.method,
            headers=dict(self.headers),
            content=content or None,
            timeout=self.timeout or None,
        )

    async def send(
        self,
        client: httpx.AsyncClient | None = None,
        policy: BackoffPolicy | None = None,
    ) -> httpx.Response:
        """Send the request; retries only when a policy is given."""
        from fetchkit.retry import NO_RETRY, fetch_with_retry

        options = self.build()
        return await fetch_with_retry(options.url, options, policy if policy is not None else NO_RETRY, client=client)

    def send_sync(
        self,
        client: httpx.Client | None = None,
        policy: BackoffPolicy | None = None,
    ) -> httpx.Response:
        from fetchkit.retry import NO_RETRY, fetch_with_retry_sync

        options = self.build()
        return fetch_with_retry_sync(options.url, options, policy if policy is not None else NO_RETRY, client=client)

    def __repr__(self) -> str:
        return f"RequestBuilder({self.method} {self.url})"


def build_request(url: str, method: str = "GET") -> RequestBuilder:
    return RequestBuilder(url, method)
