"""Timing of whole enumerations (all pages of one resource listing).

Single requests are timed by the request_duration_seconds histogram inside
SnykClient._request; this module covers the enclosing loop so a slow listing
can be told apart from one slow page.
"""

import logging
import time
from contextlib import contextmanager
from typing import Optional

from . import metrics


class Enumeration:
    """Outcome slot filled in by the timed block."""

    __slots__ = ("found",)

    def __init__(self) -> None:
        self.found = 0


@contextmanager
def timed_enumeration(
    operation: str,
    logger: logging.Logger,
    *,
    resource: str,
    extra: Optional[dict] = None,
):
    """Time one enumeration and log its outcome.

    The block sets ``found`` on the yielded Enumeration once all pages are in.

    Args:
        operation: Log message stem ({operation}_completed / {operation}_failed)
        logger: Logger the client was given
        resource: Metric label (orgs, projects, issues)
        extra: Identifiers of the listing (org_id, project_id)

    Example:
        >>> with timed_enumeration("find_projects", logger, resource="projects",
        ...                        extra={"org_id": "abc"}) as run:
        ...     run.found = len(await client._paginate(...))

    Logs on success (DEBUG):
        {"message": "find_projects_completed",
         "context": {"org_id": "abc", "resource": "projects", "found": 12,
                     "duration_ms": 145.23, "status": "success"}}

    Logs on failure (ERROR), then re-raises:
        {"message": "find_projects_failed",
         "context": {"org_id": "abc", "resource": "projects",
                     "duration_ms": 89.01, "status": "failed",
                     "error": "...", "error_type": "RequestFailed",
                     "status_code": 403}}

    Cancellation is not an Exception and passes through unlogged.
    """
    run = Enumeration()
    start = time.perf_counter()
    context = {**(extra or {}), "resource": resource}

    try:
        yield run
    except Exception as e:
        elapsed = time.perf_counter() - start
        metrics.enumeration_duration_seconds.labels(
            resource=resource, status="failed"
        ).observe(elapsed)

        failure = {
            **context,
            "duration_ms": round(elapsed * 1000, 2),
            "status": "failed",
            "error": str(e),
            "error_type": type(e).__name__,
        }
        status_code = getattr(e, "status_code", None)
        if status_code is not None:
            failure["status_code"] = status_code
        logger.error(f"{operation}_failed", extra=failure)
        raise

    elapsed = time.perf_counter() - start
    metrics.enumeration_duration_seconds.labels(
        resource=resource, status="success"
    ).observe(elapsed)
    logger.debug(
        f"{operation}_completed",
        extra={
            **context,
            "found": run.found,
            "duration_ms": round(elapsed * 1000, 2),
            "status": "success",
        },
    )
