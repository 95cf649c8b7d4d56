"""
Exception hierarchy for the congressional ETL.

    EtlError (base)
    ├── ApiError            upstream failure (bad status, network, timeout)
    │   └── NotFoundError   404; never retried
    ├── PreconditionError   run cannot start (e.g. legislature not resolved)
    └── StageError          failure inside EXTRAINDO / TRANSFORMANDO / CARREGANDO
"""

from __future__ import annotations


class EtlError(Exception):
    """Base exception for all ETL failures."""


class ApiError(EtlError):
    """Raised for any failed request against an open-data API.

    Attributes
    ----------
    path : str
        Relative API path that failed.
    status_code : int | None
        HTTP status, or None when no response was received.
    cause : BaseException | None
        The originating exception (httpx error), if any.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        path: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.path = path
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        parts = [self.message]
        if self.path:
            parts.append(f"path={self.path}")
        if self.status_code is not None:
            parts.append(f"status={self.status_code}")
        return " | ".join(parts)


class NotFoundError(ApiError):
    """Raised when the upstream resource does not exist (HTTP 404)."""

    def __init__(self, path: str, message: str = "Recurso não encontrado") -> None:
        super().__init__(message, 404, path)


class PreconditionError(EtlError):
    """Raised when a pipeline run cannot start."""


class StageError(EtlError):
    """Raised when a pipeline stage fails; wraps the original exception."""

    def __init__(self, stage: str, entity: str, cause: BaseException) -> None:
        super().__init__(f"[{entity}] falha na etapa {stage}: {cause}")
        self.stage = stage
        self.entity = entity
        self.cause = cause
