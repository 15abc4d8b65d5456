"""Common Pydantic schemas shared across the API."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel

DataT = TypeVar("DataT")


class StandardResponse(BaseModel, Generic[DataT]):
    """Standard response envelope: ``{status, message?, data?, error?}``."""

    status: bool
    message: str | None = None
    data: DataT | None = None
    error: Any | None = None


def envelope(
    status: bool,
    message: str | None = None,
    data: Any | None = None,
    error: Any | None = None,
) -> dict[str, Any]:
    """Build an envelope dict, omitting empty optional members."""
    body: dict[str, Any] = {"status": status}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    if error is not None:
        body["error"] = error
    return body
