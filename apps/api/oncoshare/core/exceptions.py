"""Exceptions raised by the shared-data query layer."""


class OncoshareError(Exception):
    """Base class for query-layer errors."""


class CaseQueryError(OncoshareError):
    """The case query failed on the fallback path (no further retry)."""


class CaseNotFoundError(OncoshareError):
    """No case exists with the requested identifier."""

    def __init__(self, case_id: object):
        super().__init__(f"Case {case_id} not found")
        self.case_id = case_id


class InvalidCursorError(OncoshareError):
    """A feed cursor could not be decoded."""
