"""Test helpers for faking HTTP transports."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest


def scripted(*outcomes: int | Exception) -> tuple[Callable[[httpx.Request], httpx.Response], list[httpx.Request]]:
    """MockTransport handler replaying statuses/exceptions; repeats the last one."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        outcome = outcomes[min(len(seen), len(outcomes)) - 1]
        if isinstance(outcome, Exception):
            raise outcome
        return httpx.Response(outcome, json={"attempt": len(seen)})

    return handler, seen


def route_clients(monkeypatch: pytest.MonkeyPatch, handler: Callable[[httpx.Request], httpx.Response]) -> list[httpx.Client | httpx.AsyncClient]:
    """Make httpx.Client/AsyncClient use a MockTransport; returns every client opened."""
    opened: list[httpx.Client | httpx.AsyncClient] = []

    def factory(cls: type[httpx.Client] | type[httpx.AsyncClient]) -> Callable[..., httpx.Client | httpx.AsyncClient]:
        def build(**kwargs: object) -> httpx.Client | httpx.AsyncClient:
            client = cls(transport=httpx.MockTransport(handler), **kwargs)
            opened.append(client)
            return client
        return build

    monkeypatch.setattr(httpx, "Client", factory(httpx.Client))
    monkeypatch.setattr(httpx, "AsyncClient", factory(httpx.AsyncClient))
    return opened
