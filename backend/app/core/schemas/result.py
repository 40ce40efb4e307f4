from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Literal, TypeVar, Union

from pydantic import Field

from app.core.models.base import AppBaseModel

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Where a failure came from."""

    VALIDATION = "validation"
    REMOTE = "remote"
    UNEXPECTED = "unexpected"


class OperationError(AppBaseModel):
    kind: ErrorKind
    message: str
    code: str | None = None


class Success(AppBaseModel, Generic[T]):
    """Successful data-access call. `count` is set for paged reads."""

    ok: Literal[True] = True
    data: T
    count: int | None = None


class Failure(AppBaseModel):
    """Failed data-access call.

    `data` carries a fallback payload for operations that promise one
    (e.g. an empty tag list) and is None otherwise.
    """

    ok: Literal[False] = False
    error: OperationError
    data: Any = Field(default=None)

    @property
    def message(self) -> str:
        return self.error.message

    @classmethod
    def validation(cls, message: str) -> Failure:
        return cls(error=OperationError(kind=ErrorKind.VALIDATION, message=message))

    @classmethod
    def remote(cls, message: str, code: str | None = None, data: Any = None) -> Failure:
        return cls(
            error=OperationError(kind=ErrorKind.REMOTE, message=message, code=code),
            data=data,
        )


Result = Union[Success[T], Failure]
