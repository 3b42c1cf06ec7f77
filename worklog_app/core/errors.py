"""Exception taxonomy for the report run."""

from __future__ import annotations


class WorklogReportError(Exception):
    """Base class for errors raised by the report pipeline."""


class UserNotFoundError(WorklogReportError):
    """No account resolves for a configured email. Aborts the whole run."""

    def __init__(self, email: str):
        super().__init__(f"No Jira account found for {email!r}")
        self.email = email


class RemoteServiceError(WorklogReportError):
    """A single call to Jira or Tempo failed.

    Raised by the API wrappers; resolvers and the fetcher recover from it.
    """
