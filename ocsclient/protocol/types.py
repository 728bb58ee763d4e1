"""
Core protocol types for the Sans-I/O OCS implementation.

These dataclasses represent HTTP requests and responses plus the decoded
OCS envelope, independent of any I/O implementation.
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Generic, TypeVar

T = TypeVar("T")


class HTTPMethod(Enum):
    """HTTP methods used by the OCS provisioning API."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


class StatusCode(IntEnum):
    """
    Status codes found in ``<ocs><meta><statuscode>``.

    Only ``SUCCESS`` means success.  The failure codes are reused by the
    server with endpoint-specific meanings (e.g. 101 is "user does not
    exist" for one call and "invalid input data" for another), so the
    names are only a rough guide.
    """

    SUCCESS = 100
    INVALID_INPUT = 101
    FAILURE = 102
    UNKNOWN_ERROR = 103
    NOT_FOUND = 404
    NOT_AUTHORIZED = 997
    NOT_FOUND_SERVER = 998
    INVALID_REQUEST = 999


@dataclass(frozen=True)
class OCSRequest:
    """
    Represents an HTTP request to be made.

    This is a pure data structure with no I/O. It describes what request
    should be made, but does not make it.

    Attributes:
        method: HTTP method
        url: Full URL for the request, query string included
        headers: HTTP headers as dict
        body: Form encoded request body (optional)
    """

    method: HTTPMethod
    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes | None = None


@dataclass(frozen=True)
class OCSResponse:
    """
    Represents an HTTP response received.

    Attributes:
        status: HTTP status code
        headers: HTTP headers as dict
        body: Response body as bytes
    """

    status: int
    headers: dict[str, str]
    body: bytes

    @property
    def ok(self) -> bool:
        """True if the server answered with plain HTTP 200.

        The OCS API always answers 200 on requests it understood, the
        real outcome is in the envelope.
        """
        return self.status == 200


@dataclass(frozen=True)
class Meta:
    """The ``<meta>`` section of an OCS envelope."""

    statuscode: int = 0
    status: str = ""
    message: str = ""
    totalitems: int = 0
    itemsperpage: int = 0

    @property
    def success(self) -> bool:
        return self.statuscode == StatusCode.SUCCESS


@dataclass(frozen=True)
class Envelope(Generic[T]):
    """
    A decoded OCS response: status metadata plus the payload extracted
    from ``<data>`` according to the schema given to the parser.
    """

    meta: Meta
    data: T
