"""
OCS protocol operations combining request building and response parsing.

This class provides a high-level interface to the provisioning API while
remaining completely I/O-free.
"""

import base64
from typing import Optional, TypeVar
from urllib.parse import quote, urlencode

from ocsclient.lib import error

from .form import FORM_CONTENT_TYPE, FormValue, encode_form
from .results import interpret
from .types import HTTPMethod, OCSRequest, OCSResponse
from .xml_parsers import Schema, parse_envelope

T = TypeVar("T")

#: Path of the OCS API below the server root
API_ROOT = "/ocs/v1.php"

#: Header marking a request as an API call, without it the server
#: treats the request as coming from a browser and wants a CSRF token
API_REQUEST_HEADER = "OCS-APIRequest"


def quote_id(identifier: str) -> str:
    """Quote a user or group id for use as a single path segment."""
    return quote(identifier, safe="")


class OCSProtocol:
    """
    Sans-I/O OCS protocol handler.

    Builds requests and parses responses without doing any I/O.
    All HTTP communication is delegated to an external I/O implementation.

    Example:
        protocol = OCSProtocol("https://cloud.example.com", "admin", "secret")

        # Build request
        request = protocol.request(HTTPMethod.GET, "/cloud/users")

        # Execute with your I/O (not shown)
        body = transport.send(request)

        # Parse response
        users = protocol.parse(body, USER_LIST)
    """

    def __init__(
        self,
        host: str,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ):
        """
        Initialize the protocol handler.

        Args:
            host: Base URL of the server, without the OCS API root
            username: Username for Basic authentication
            password: Password or app token for Basic authentication
        """
        self.host = host.rstrip("/") if host else ""
        self.base_url = self.host + API_ROOT
        self.username = username
        self._auth_header = self._build_auth_header(username, password)

    def _build_auth_header(
        self,
        username: Optional[str],
        password: Optional[str],
    ) -> Optional[str]:
        """Build Basic auth header if credentials provided."""
        if username is None and password is None:
            return None
        credentials = f"{username or ''}:{password or ''}"
        encoded = base64.b64encode(credentials.encode("utf-8")).decode("ascii")
        return f"Basic {encoded}"

    def _base_headers(self) -> dict[str, str]:
        """Return base headers for all requests."""
        headers = {API_REQUEST_HEADER: "true"}
        if self._auth_header:
            headers["Authorization"] = self._auth_header
        return headers

    def url(self, path: str, query: Optional[dict[str, str]] = None) -> str:
        """Resolve an API path like ``/cloud/users`` to a full URL."""
        url = self.base_url + "/" + path.lstrip("/")
        if query:
            url += "?" + urlencode(query)
        return url

    # =========================================================================
    # Request builders
    # =========================================================================

    def request(
        self,
        method: HTTPMethod,
        path: str,
        form: Optional[dict[str, FormValue]] = None,
        query: Optional[dict[str, str]] = None,
    ) -> OCSRequest:
        """
        Build a request.

        Args:
            method: HTTP method
            path: API path below the OCS root, identifiers already quoted
            form: Parameters to send as form encoded body
            query: Parameters to send in the query string

        Returns:
            OCSRequest ready for execution
        """
        headers = self._base_headers()
        body = None
        if form is not None:
            body = encode_form(form).encode("ascii")
            headers["Content-Type"] = FORM_CONTENT_TYPE
            headers["Content-Length"] = str(len(body))
        return OCSRequest(
            method=method,
            url=self.url(path, query),
            headers=headers,
            body=body,
        )

    # =========================================================================
    # Response parsers
    # =========================================================================

    def parse(self, body: bytes, schema: Schema[T], url: Optional[str] = None) -> T:
        """
        Decode an envelope and hand back its payload.

        Raises:
            DecodeError: body is not an OCS envelope
            ApiError: the envelope carries a failure status code
        """
        return interpret(parse_envelope(body, schema), url=url)

    def parse_response(
        self, response: OCSResponse, schema: Schema[T], url: Optional[str] = None
    ) -> T:
        """As :meth:`parse`, for callers doing their own I/O."""
        raise_for_status(response, url=url)
        return self.parse(response.body, schema, url=url)


def raise_for_status(response: OCSResponse, url: Optional[str] = None) -> None:
    """
    Anything but HTTP 200 is a transport failure.  The server may put a
    failure envelope in the body of e.g. a 401, it is not decoded, but
    kept raw on the exception.

    Raises:
        AuthorizationError: on HTTP 401 and 403
        TransportError: on any other status but 200
    """
    if response.ok:
        return
    reason = "status: %d, body: %s" % (
        response.status,
        response.body.decode("utf-8", errors="replace"),
    )
    if response.status in (401, 403):
        exc_class = error.AuthorizationError
    else:
        exc_class = error.TransportError
    raise exc_class(url=url, reason=reason, status=response.status, body=response.body)
