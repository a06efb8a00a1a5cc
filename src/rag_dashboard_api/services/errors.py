from __future__ import annotations

from dataclasses import dataclass


class EvaluationDataError(Exception):
    """Base error for evaluation data loading."""


class RetrieverValidationError(EvaluationDataError, ValueError):
    """Requested retriever id is not supported. Raised before any I/O."""


class NotFoundError(EvaluationDataError, LookupError):
    """Retriever id is valid but no evaluation data exists for it yet."""


class RemoteFetchError(EvaluationDataError):
    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class RemoteTimeoutError(RemoteFetchError):
    pass


@dataclass(slots=True)
class RowDiagnostic:
    line_no: int
    expected_fields: int
    actual_fields: int

    def __str__(self) -> str:
        return f"line {self.line_no}: expected {self.expected_fields} fields, got {self.actual_fields}"


class ParseError(EvaluationDataError):
    def __init__(self, path: str, diagnostics: list[RowDiagnostic] | None = None, message: str | None = None) -> None:
        self.path = path
        self.diagnostics = list(diagnostics or [])
        if message is None:
            message = f"failed to parse {path}: " + "; ".join(str(item) for item in self.diagnostics)
        super().__init__(message)
