"""Snyk REST API client.

Provides an async httpx-based client for the Snyk REST API with token auth.
Organizations, projects and issues are all listed through one paginator that
follows the cursor in ``links.next`` until the API stops returning one.

Every request carries the pinned API version and the maximum page size; those
two query parameters always override whatever the target URL already holds.
Nothing is retried: the first failure aborts the whole enumeration.

Reference: https://apidocs.snyk.io/
"""

import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from . import metrics
from .__version__ import __version__
from .config import DEFAULT_BASE_URL, SnykConfig
from .models import Issue, Organization, Page, Project
from .timing import timed_enumeration

__all__ = [
    "API_VERSION",
    "PAGE_LIMIT",
    "BuildError",
    "DecodeError",
    "RequestFailed",
    "SnykClient",
    "SnykClientError",
    "TransportError",
]

LOGGER_NAME = "snyk_issues.client"

# Query parameters forced onto every request
API_VERSION = "2024-01-23"
PAGE_LIMIT = 100

# Substituted for the response body when it cannot be read on a failed request
BODY_READ_FAILED = "failed to read body"

T = TypeVar("T", bound=BaseModel)


class SnykClientError(Exception):
    """Base class for every error raised by SnykClient.

    Any of these aborts the enumeration in progress; items already collected
    for that call are discarded.
    """


class BuildError(SnykClientError):
    """Raised when a request URL cannot be built."""


class TransportError(SnykClientError):
    """Raised when the server cannot be reached or the response cannot be read.

    The underlying httpx exception is chained as ``__cause__``.
    """


class RequestFailed(SnykClientError):
    """Raised when the API answers with anything other than 200 OK.

    Attributes:
        status_code: HTTP status code
        status: Status line, e.g. "403 Forbidden"
        url: Effective request URL (including forced query parameters)
        body: Response body, or a placeholder when it could not be read
        request_dump: Outgoing request with the token redacted, if available
    """

    def __init__(
        self,
        status_code: int,
        status: str,
        url: str,
        body: str,
        request_dump: str | None = None,
    ) -> None:
        self.status_code = status_code
        self.status = status
        self.url = url
        self.body = body
        self.request_dump = request_dump
        super().__init__(f"request not OK: {status}: url: {url} body: {body}")


class DecodeError(SnykClientError):
    """Raised when a response body is not a valid page envelope."""


class SnykClient:
    """Snyk REST API client using httpx with token auth.

    Uses a long-lived httpx.AsyncClient with connection pooling. Requests are
    issued strictly one after another; cancelling the awaiting task aborts the
    in-flight request and no further pages are fetched.

    Attributes:
        base_url: API root the ``/rest/...`` paths are appended to
        logger: Sink for debug/error lines, injectable for tests and hosts

    Example:
        >>> async with SnykClient("snyk-token") as client:
        ...     for org in await client.get_organizations():
        ...         for project in await client.get_projects(org.id):
        ...             issues = await client.get_issues(org.id, project.id)
    """

    DEFAULT_BASE_URL = DEFAULT_BASE_URL

    # Timeout configuration
    CONNECT_TIMEOUT = 5.0  # seconds
    READ_TIMEOUT = 30.0  # seconds
    WRITE_TIMEOUT = 5.0  # seconds
    POOL_TIMEOUT = 5.0  # seconds

    def __init__(
        self,
        token: str,
        base_url: str | None = None,
        *,
        logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        read_timeout: float = READ_TIMEOUT,
    ) -> None:
        """Initialize Snyk client with token authentication.

        Args:
            token: Snyk API token
            base_url: API root (default: https://api.snyk.io)
            logger: Logger receiving the client's log lines
                    (default: the "snyk_issues.client" logger)
            transport: Optional httpx transport (tests pass httpx.MockTransport)
            read_timeout: Read timeout in seconds for one page request
        """
        self.base_url = (base_url or self.DEFAULT_BASE_URL).rstrip("/")
        self.logger = logger if logger is not None else logging.getLogger(LOGGER_NAME)
        self._auth_header = f"TOKEN {token}"

        self._client = httpx.AsyncClient(
            headers={"User-Agent": f"snyk-issues-client/{__version__}"},
            timeout=httpx.Timeout(
                connect=self.CONNECT_TIMEOUT,
                read=read_timeout,
                write=self.WRITE_TIMEOUT,
                pool=self.POOL_TIMEOUT,
            ),
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: SnykConfig,
        *,
        logger: logging.Logger | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "SnykClient":
        """Build a client from loaded settings."""
        return cls(
            config.snyk_api_token.get_secret_value(),
            config.snyk_base_url,
            logger=logger,
            transport=transport,
            read_timeout=config.snyk_read_timeout,
        )

    async def __aenter__(self) -> "SnykClient":
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the httpx client and release connections."""
        await self._client.aclose()

    # --- Resources ---

    async def get_organizations(self) -> list[Organization]:
        """List every organization the token can access.

        Returns:
            Organizations in API order, across all pages

        Raises:
            SnykClientError: On the first failed page
        """
        self.logger.debug("Start finding organizations")
        with timed_enumeration(
            "find_organizations", self.logger, resource="orgs"
        ) as run:
            orgs = await self._paginate("/rest/orgs", Organization, resource="orgs")
            run.found = len(orgs)
        self.logger.debug("Done finding organizations, found: %d", len(orgs))
        return orgs

    async def get_projects(self, org_id: str) -> list[Project]:
        """List every project of one organization.

        Args:
            org_id: Organization ID

        Returns:
            Projects in API order, across all pages
        """
        self.logger.debug("Start finding projects for: %s", org_id)
        with timed_enumeration(
            "find_projects", self.logger, resource="projects", extra={"org_id": org_id}
        ) as run:
            projects = await self._paginate(
                f"/rest/orgs/{org_id}/projects", Project, resource="projects"
            )
            run.found = len(projects)
        self.logger.debug(
            "Done finding projects for: %s, found: %d", org_id, len(projects)
        )
        return projects

    async def get_issues(self, org_id: str, project_id: str) -> list[Issue]:
        """List every issue related to one project.

        Issues are listed at organization level and filtered on the scanned
        project. The filter is sent with every page request because the
        ``next`` links are not guaranteed to carry it.

        Args:
            org_id: Organization ID owning the project
            project_id: Project ID used as scan_item filter

        Returns:
            Issues in API order, across all pages
        """
        self.logger.debug("Start finding issues for: %s", project_id)
        params = {"scan_item.id": project_id, "scan_item.type": "project"}
        with timed_enumeration(
            "find_issues",
            self.logger,
            resource="issues",
            extra={"org_id": org_id, "project_id": project_id},
        ) as run:
            issues = await self._paginate(
                f"/rest/orgs/{org_id}/issues", Issue, resource="issues", params=params
            )
            run.found = len(issues)
        self.logger.debug(
            "Done finding issues for: %s, found: %d", project_id, len(issues)
        )
        return issues

    # --- Pagination ---

    async def _paginate(
        self,
        path: str,
        item_model: type[T],
        resource: str,
        params: Mapping[str, str] | None = None,
    ) -> list[T]:
        """Fetch all pages of a cursor-paginated endpoint.

        Follows ``links.next`` until it is empty. A page whose next link is
        the link that was just followed ends the loop as well, so a server
        handing back the same cursor cannot keep us fetching forever.

        Args:
            path: Base-relative path of the first page
            item_model: Model each entry of ``data`` decodes to
            resource: Label for logs and metrics (orgs, projects, issues)
            params: Filters re-applied to every page request

        Returns:
            Concatenated items of all pages, in fetch order
        """
        items: list[T] = []

        page = await self._get_page(path, item_model, resource, params)
        items.extend(page.data)
        pages = 1

        next_link = page.next_link
        while next_link:
            self.logger.debug(
                "More %s to be found, currently: %d", resource, len(items)
            )
            page = await self._get_page(next_link, item_model, resource, params)
            items.extend(page.data)
            pages += 1

            if page.next_link == next_link:
                self.logger.debug("No more new link, stopping")
                break
            next_link = page.next_link

        self.logger.debug(
            "Fetched %d page(s) of %s, %d items", pages, resource, len(items)
        )
        metrics.items_fetched_total.labels(resource=resource).inc(len(items))
        return items

    async def _get_page(
        self,
        target: str,
        item_model: type[T],
        resource: str,
        params: Mapping[str, str] | None = None,
    ) -> Page[T]:
        response = await self._request(target, params=params, resource=resource)
        try:
            page = Page[item_model].model_validate_json(response.content)
        except ValidationError as e:
            raise DecodeError(
                f"unexpected response body from {response.request.url}: {e}"
            ) from e
        metrics.pages_fetched_total.labels(resource=resource).inc()
        return page

    # --- Core HTTP ---

    def _build_request(
        self, target: str, params: Mapping[str, str] | None = None
    ) -> httpx.Request:
        """Build an authenticated GET for an absolute or base-relative target.

        Query parameters already present in the target are kept, ``params``
        are merged over them, then version and limit are merged last so they
        always win. Absolute targets must share the base URL's scheme, host
        and port: the token is never sent anywhere else, whatever a
        ``links.next`` cursor says.

        Raises:
            BuildError: If the target does not make an absolute http(s) URL
                on the API host
        """
        if target.startswith("/"):
            target = self.base_url + target

        try:
            base = httpx.URL(self.base_url)
            url = httpx.URL(target)
            if params:
                url = url.copy_merge_params(dict(params))
            url = url.copy_merge_params(
                {"version": API_VERSION, "limit": str(PAGE_LIMIT)}
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise BuildError(f"invalid request URL {target!r}: {e}") from e

        if url.scheme not in ("http", "https") or not url.host:
            raise BuildError(
                f"invalid request URL {target!r}: expected an absolute http(s) URL"
            )

        if (url.scheme, url.host, url.port) != (base.scheme, base.host, base.port):
            raise BuildError(
                f"invalid request URL {target!r}: not on API host {self.base_url}"
            )

        return self._client.build_request(
            "GET", url, headers={"authorization": self._auth_header}
        )

    async def _request(
        self,
        target: str,
        params: Mapping[str, str] | None = None,
        resource: str = "api",
    ) -> httpx.Response:
        """Send one GET and enforce the 200-only success contract.

        Returns:
            The response, body fully read

        Raises:
            BuildError: If the URL cannot be built
            TransportError: On network failure or unreadable 200 body
            RequestFailed: On any status other than 200
        """
        request = self._build_request(target, params)
        self.logger.debug("Running request to URL: %s", request.url)

        try:
            with metrics.request_duration_seconds.labels(resource=resource).time():
                response = await self._client.send(request, stream=True)
        except httpx.RequestError as e:
            metrics.requests_total.labels(resource=resource, status="error").inc()
            raise TransportError(f"request to {request.url} failed: {e}") from e

        try:
            if response.status_code != httpx.codes.OK:
                metrics.requests_total.labels(resource=resource, status="failed").inc()
                body = await self._read_error_body(response)
                raise RequestFailed(
                    status_code=response.status_code,
                    status=f"{response.status_code} {response.reason_phrase}",
                    url=str(request.url),
                    body=body,
                    request_dump=self._dump_request(request),
                )

            try:
                await response.aread()
            except httpx.HTTPError as e:
                metrics.requests_total.labels(resource=resource, status="error").inc()
                raise TransportError(
                    f"reading response from {request.url} failed: {e}"
                ) from e

            metrics.requests_total.labels(resource=resource, status="ok").inc()
            return response
        finally:
            await response.aclose()

    async def _read_error_body(self, response: httpx.Response) -> str:
        try:
            await response.aread()
        except httpx.HTTPError as e:
            self.logger.error("read body failed: %s", e)
            return BODY_READ_FAILED
        return response.text

    def _dump_request(self, request: httpx.Request) -> str | None:
        """Render the outgoing request (request line, headers, body) for debugging.

        The token is redacted. A request that cannot be rendered only
        produces a debug note.
        """
        try:
            lines = [f"{request.method} {request.url.raw_path.decode('ascii')} HTTP/1.1"]
            for name, value in request.headers.multi_items():
                if name.lower() == "authorization":
                    value = "TOKEN [REDACTED]"
                lines.append(f"{name}: {value}")
            dump = "\r\n".join(lines) + "\r\n\r\n" + request.content.decode("utf-8")
        except (httpx.RequestNotRead, UnicodeDecodeError) as e:
            self.logger.debug("Failed to dump request for logging: %s", e)
            return None

        self.logger.debug("Failed request dump: %s", dump)
        return dump
