"""httpx wrapper for the GitHub REST API.

Only used for diagnostics: checking that the API is reachable and that the
configured token can see the target repository.
"""

from __future__ import annotations

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    extra_headers: dict[str, str] | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an `httpx.AsyncClient` with the API base URL, timeouts and headers set."""

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/vnd.github+json",
        "X-GitHub-Api-Version": "2022-11-28",
    }
    token = settings.token_value()
    if token:
        headers["Authorization"] = f"Bearer {token}"
    if extra_headers:
        headers.update(extra_headers)
    return httpx.AsyncClient(
        base_url=settings.github_api_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        transport=transport,
    )


async def check_repository_access(
    repository: str | None,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> tuple[bool, str]:
    """Probe the API (`/repos/<repository>`, or `/` when no repository is given)."""

    path = f"/repos/{repository}" if repository else "/"
    try:
        async with build_async_client(settings, transport=transport) as client:
            response = await client.get(path)
    except httpx.HTTPError as exc:
        return False, str(exc)

    if response.status_code == 200:
        return True, f"HTTP {response.status_code}"
    return False, f"HTTP {response.status_code} for {path}"
