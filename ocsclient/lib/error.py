#!/usr/bin/env python
import logging
import os
from typing import List
from typing import Optional

from ocsclient import __version__

## Environmental variables prepended with "PYTHON_OCSCLIENT" are used for debug purposes,
## environmental variables prepended with "OCS_" are for connection parameters
debug_dump_communication = bool(os.environ.get("PYTHON_OCSCLIENT_COMMDUMP", False))

## one of DEBUG, DEVELOPMENT, PRODUCTION
debugmode = os.environ.get("PYTHON_OCSCLIENT_DEBUGMODE")
if not debugmode:
    if "dev" in __version__ or __version__ == "(unknown)":
        debugmode = "DEVELOPMENT"
    else:
        debugmode = "PRODUCTION"

log = logging.getLogger("ocsclient")
if debugmode.startswith("DEBUG"):
    log.setLevel(logging.DEBUG)
else:
    log.setLevel(logging.WARNING)


def weirdness(*reasons) -> None:
    """Log a deviation from what the server is expected to send.

    In DEVELOPMENT and PRODUCTION mode this is only a warning, so that
    odd-but-usable responses do not break the caller.
    """
    reason = " : ".join(str(x) for x in reasons)
    log.warning(f"Deviation from expectations found: {reason}")


ERR_FRAGMENT: str = "Check the server logs, or rerun with PYTHON_OCSCLIENT_DEBUGMODE=DEBUG to get a trace of the communication"


class OCSError(Exception):
    url: Optional[str] = None
    reason: str = "no reason"

    def __init__(self, url: Optional[str] = None, reason: Optional[str] = None) -> None:
        if url:
            self.url = url
        if reason:
            self.reason = reason
        super().__init__(self.reason)

    def __str__(self) -> str:
        return "%s at '%s', reason %s" % (
            self.__class__.__name__,
            self.url,
            self.reason,
        )


class ValidationError(OCSError):
    """
    Client-side input problems found before anything was sent to the
    server.  ``problems`` holds the individual messages, ``reason``
    holds all of them joined by newlines.
    """

    problems: List[str] = []

    def __init__(
        self, problems: List[str], url: Optional[str] = None
    ) -> None:
        self.problems = list(problems)
        super().__init__(url=url, reason="\n".join(self.problems))


class TransportError(OCSError):
    """
    The HTTP round trip failed: the connection could not be made, the
    request timed out, or the server answered with something else than
    HTTP 200.  For the latter, ``status`` and ``body`` carry what the
    server sent.  For the former, the underlying exception is available
    as ``__cause__``.
    """

    status: Optional[int] = None
    body: bytes = b""

    def __init__(
        self,
        url: Optional[str] = None,
        reason: Optional[str] = None,
        status: Optional[int] = None,
        body: bytes = b"",
    ) -> None:
        self.status = status
        self.body = body or b""
        super().__init__(url=url, reason=reason)


class AuthorizationError(TransportError):
    """
    The server answered HTTP 401 or 403.  Most likely the username or
    the password (app token) is wrong, or the user lacks admin rights.
    """

    reason = "Authentication failed"


class DecodeError(OCSError):
    """The response body is not a well-formed OCS envelope."""

    reason = "Malformed response body"


class ApiError(OCSError):
    """
    The server delivered a well-formed envelope, but the status code in
    the meta section signals failure.
    """

    statuscode: int = 0
    message: str = ""

    def __init__(
        self,
        statuscode: int,
        message: str = "",
        url: Optional[str] = None,
    ) -> None:
        self.statuscode = statuscode
        self.message = message
        reason = "Api returned a status code %d indicating failure" % statuscode
        if message:
            reason += ". Message: %s" % message
        super().__init__(url=url, reason=reason)


class NotFoundError(OCSError):
    pass
