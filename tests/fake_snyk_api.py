"""Fake Snyk REST API for client tests.

Serves queued httpx responses through httpx.MockTransport and records every
request the client sends, plus builders for page envelopes and API items.
"""

from collections.abc import Callable

import httpx

BASE_URL = "https://api.snyk.test"
TOKEN = "snyk-test-token-123"


class FakeSnykAPI:
    """Serves queued responses in order and records each request received.

    Entries may be httpx.Response objects or async callables taking the
    request (used to raise transport errors or block).
    """

    def __init__(self, *responses: httpx.Response | Callable) -> None:
        self._responses = list(responses)
        self.requests: list[httpx.Request] = []

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self._responses:
            raise AssertionError(f"unexpected request: {request.url}")
        response = self._responses.pop(0)
        if callable(response):
            return await response(request)
        return response

    @property
    def params(self) -> list[dict[str, str]]:
        """Query parameters of every recorded request."""
        return [dict(r.url.params) for r in self.requests]

    @property
    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]


def page(items: list[dict] | None = None, next_link: str | None = None) -> httpx.Response:
    """Build a 200 response holding one page envelope."""
    links = {"next": next_link} if next_link is not None else {}
    return httpx.Response(200, json={"data": items or [], "links": links})


def org_item(org_id: str, name: str = "", group_id: str = "grp-1") -> dict:
    return {
        "id": org_id,
        "type": "org",
        "attributes": {"group_id": group_id, "name": name or f"Org {org_id}"},
    }


def project_item(project_id: str, name: str = "") -> dict:
    return {
        "id": project_id,
        "type": "project",
        "attributes": {"name": name or f"project/{project_id}"},
    }


def issue_item(
    issue_id: str,
    severity: str = "high",
    ignored: bool = False,
    upgradable: bool = True,
    patchable: bool = False,
) -> dict:
    return {
        "attributes": {
            "id": issue_id,
            "type": "package_vulnerability",
            "title": f"Issue {issue_id}",
            "effective_severity_level": severity,
            "ignored": ignored,
        },
        "coordinates": {
            "is_upgradable": upgradable,
            "is_patchable": patchable,
            "type": "library",
        },
    }
