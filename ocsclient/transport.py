"""
Synchronous I/O using the requests library.

The transport is intentionally thin - it executes an OCSRequest and
reduces the outcome to the raw response body or a TransportError.  All
protocol logic (headers, form bodies, XML parsing) is in
ocsclient.protocol.
"""

import datetime
from tempfile import NamedTemporaryFile
from typing import Optional

import requests

from ocsclient.lib import error
from ocsclient.lib.error import log
from ocsclient.protocol.form import decode_form
from ocsclient.protocol.operations import raise_for_status
from ocsclient.protocol.types import OCSRequest, OCSResponse

#: Seconds before a request is given up
DEFAULT_TIMEOUT = 10

_REDACTED_HEADERS = ("Authorization",)
_REDACTED_FIELDS = ("password",)
## update_user_detail sends the attribute name in "key" and the new value in "value"
_REDACTED_KEYED_VALUES = ("password",)


def _printable_headers(headers) -> dict:
    return {
        k: ("***" if k in _REDACTED_HEADERS else v) for k, v in dict(headers).items()
    }


def _printable_body(body: Optional[bytes]) -> str:
    if not body:
        return ""
    form = decode_form(body)
    for field in _REDACTED_FIELDS:
        if field in form:
            form[field] = "***"
    if form.get("key") in _REDACTED_KEYED_VALUES and "value" in form:
        form["value"] = "***"
    return str(form)


class OCSTransport:
    """
    Synchronous I/O shell using the requests library.

    Example:
        transport = OCSTransport()
        request = protocol.request(HTTPMethod.GET, "/cloud/users")
        body = transport.send(request)
        users = protocol.parse(body, USER_LIST)

    The transport holds no per-request state, one instance may be shared
    by threads as far as the underlying ``requests.Session`` allows.
    """

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Args:
            session: Existing requests Session to use (creates new if None)
            timeout: Request timeout in seconds
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.timeout = timeout

    def execute(self, request: OCSRequest) -> OCSResponse:
        """
        Execute an OCSRequest and return the OCSResponse, whatever the
        HTTP status.

        Raises:
            TransportError: if the request timed out or the connection failed
        """
        log.debug(
            "sending request - method={0}, url={1}, headers={2}\nbody:\n{3}".format(
                request.method.value,
                request.url,
                _printable_headers(request.headers),
                _printable_body(request.body),
            )
        )
        try:
            r = self.session.request(
                method=request.method.value,
                url=request.url,
                headers=request.headers,
                data=request.body,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as err:
            raise error.TransportError(
                url=request.url,
                reason=f"No response within {self.timeout} seconds",
            ) from err
        except requests.exceptions.RequestException as err:
            raise error.TransportError(url=request.url, reason=str(err)) from err

        log.debug("server responded with %i %s" % (r.status_code, r.reason))
        response = OCSResponse(
            status=r.status_code,
            headers=dict(r.headers),
            body=r.content or b"",
        )
        log.debug(response.body)
        if error.debug_dump_communication:
            self._dump_communication(request, response)
        return response

    def send(self, request: OCSRequest) -> bytes:
        """
        Execute an OCSRequest and return the full response body.

        Raises:
            TransportError: on timeout, connection failure or any HTTP
                status but 200
            AuthorizationError: on HTTP 401 and 403
        """
        response = self.execute(request)
        raise_for_status(response, url=request.url)
        return response.body

    def _dump_communication(self, request: OCSRequest, response: OCSResponse) -> None:
        with NamedTemporaryFile(prefix="ocscomm", delete=False) as commlog:
            commlog.write(b"=" * 80 + b"\n")
            commlog.write(f"{datetime.datetime.now():%FT%H:%M:%S}".encode("utf-8"))
            commlog.write(b"\n====>\n")
            commlog.write(f"{request.method.value} {request.url}\n".encode("utf-8"))
            headers = _printable_headers(request.headers)
            commlog.write("\n".join(f"{x}: {headers[x]}" for x in headers).encode("utf-8"))
            commlog.write(b"\n\n")
            commlog.write(_printable_body(request.body).encode("utf-8"))
            commlog.write(b"\n<====\n")
            commlog.write(f"{response.status}\n".encode("utf-8"))
            commlog.write(
                "\n".join(f"{x}: {response.headers[x]}" for x in response.headers).encode(
                    "utf-8"
                )
            )
            commlog.write(b"\n\n")
            commlog.write(response.body)
            commlog.write(b"\n")
            log.debug("communication dumped to %s" % commlog.name)

    def close(self) -> None:
        """Close the session if we created it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self) -> "OCSTransport":
        return self

    def __exit__(self, *args) -> None:
        self.close()
