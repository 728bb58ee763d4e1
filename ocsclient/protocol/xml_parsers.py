"""
Pure functions for parsing OCS XML response envelopes.

All functions in this module are pure - they take XML bytes in and return
structured data out, with no side effects or I/O.

Every OCS response looks like this::

    <ocs>
      <meta>
        <status>ok</status>
        <statuscode>100</statuscode>
        <message>OK</message>
        <totalitems></totalitems>
        <itemsperpage></itemsperpage>
      </meta>
      <data>(...)</data>
    </ocs>

The shape of ``<data>`` depends on the endpoint.  The caller passes a
schema object telling :func:`parse_envelope` what to pull out of it.
"""

import logging
from typing import Generic, TypeVar

from lxml import etree
from lxml.etree import _Element

from ocsclient.lib import error
from ocsclient.objects import BackendCapabilities, UserDetails, UserQuota

from .types import Envelope, Meta, StatusCode

log = logging.getLogger(__name__)

T = TypeVar("T")

_TRUE_VALUES = ("1", "t", "true")
_FALSE_VALUES = ("", "0", "f", "false")


# =========================================================================
# Field helpers
# =========================================================================


def _text(node: _Element, path: str) -> str:
    elem = node.find(path)
    if elem is None or elem.text is None:
        return ""
    return elem.text.strip()


def _int(node: _Element, path: str) -> int:
    value = _text(node, path)
    if not value:
        return 0
    try:
        return int(value)
    except ValueError as err:
        raise error.DecodeError(
            reason=f"Expected an integer in <{path}>, got {value!r}"
        ) from err


def _float(node: _Element, path: str) -> float:
    value = _text(node, path)
    if not value:
        return 0.0
    try:
        return float(value)
    except ValueError as err:
        raise error.DecodeError(
            reason=f"Expected a number in <{path}>, got {value!r}"
        ) from err


def _bool(node: _Element, path: str) -> bool:
    value = _text(node, path).lower()
    if value in _TRUE_VALUES:
        return True
    if value not in _FALSE_VALUES:
        error.weirdness(f"expected a boolean in <{path}>, got {value!r}")
    return False


def _elements(node: _Element, path: str) -> list[str]:
    return [(elem.text or "").strip() for elem in node.iterfind(path)]


# =========================================================================
# Payload schemas
# =========================================================================


class Schema(Generic[T]):
    """
    Describes how to extract the payload of one kind of response.

    Subclasses implement :meth:`extract`, which gets the ``<ocs>`` root
    element.  Paths are relative to that root.
    """

    def extract(self, root: _Element) -> T:
        raise NotImplementedError()


class NoPayload(Schema[None]):
    """For calls where only the status matters."""

    def extract(self, root: _Element) -> None:
        return None

    def __repr__(self) -> str:
        return "NoPayload()"


class ElementList(Schema[list[str]]):
    """
    A flat, ordered list of ``<element>`` texts, e.g.
    ``data/users/element`` for a user listing or ``data/element`` for
    the subadmin listings.  A missing or empty section gives ``[]``.
    """

    def __init__(self, path: str) -> None:
        self.path = path

    def extract(self, root: _Element) -> list[str]:
        return _elements(root, self.path)

    def __repr__(self) -> str:
        return f"ElementList({self.path!r})"

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ElementList) and other.path == self.path

    def __hash__(self) -> int:
        return hash(self.path)


class UserDetailsRecord(Schema[UserDetails]):
    """The ``<data>`` of ``GET /cloud/users/{userid}``."""

    def extract(self, root: _Element) -> UserDetails:
        data = root.find("data")
        if data is None:
            return UserDetails()
        quota = UserQuota(
            free=_int(data, "quota/free"),
            used=_int(data, "quota/used"),
            total=_int(data, "quota/total"),
            relative=_float(data, "quota/relative"),
            quota=_text(data, "quota/quota"),
        )
        capabilities = BackendCapabilities(
            set_display_name=_bool(data, "backendCapabilities/setDisplayName"),
            set_password=_bool(data, "backendCapabilities/setPassword"),
        )
        return UserDetails(
            id=_text(data, "id"),
            enabled=_bool(data, "enabled"),
            storage_location=_text(data, "storageLocation"),
            last_login=_text(data, "lastLogin"),
            backend=_text(data, "backend"),
            subadmin_groups=_elements(data, "subadmin/element"),
            quota=quota,
            email=_text(data, "email"),
            display_name=_text(data, "displayname"),
            phone=_text(data, "phone"),
            address=_text(data, "address"),
            website=_text(data, "website"),
            twitter=_text(data, "twitter"),
            groups=_elements(data, "groups/element"),
            language=_text(data, "language"),
            locale=_text(data, "locale"),
            backend_capabilities=capabilities,
        )

    def __repr__(self) -> str:
        return "UserDetailsRecord()"


NO_PAYLOAD = NoPayload()
USER_LIST = ElementList("data/users/element")
GROUP_LIST = ElementList("data/groups/element")
FLAT_LIST = ElementList("data/element")
USER_DETAILS = UserDetailsRecord()


# =========================================================================
# Envelope
# =========================================================================


def _parse_xml(body: bytes) -> _Element:
    if not body:
        raise error.DecodeError(reason="Empty response body, expected an OCS envelope")
    try:
        return etree.fromstring(body, parser=etree.XMLParser(remove_blank_text=True))
    except etree.XMLSyntaxError as err:
        log.debug("Expected some valid XML from the server, but got this: \n%r", body)
        raise error.DecodeError(
            reason=f"Response is not valid XML: {err}.  {error.ERR_FRAGMENT}"
        ) from err


def _parse_meta(root: _Element) -> Meta:
    meta = root.find("meta")
    if meta is None:
        raise error.DecodeError(reason="OCS envelope without <meta> section")
    statuscode = _int(meta, "statuscode")
    try:
        StatusCode(statuscode)
    except ValueError:
        error.weirdness(f"unknown OCS status code {statuscode}")
    return Meta(
        statuscode=statuscode,
        status=_text(meta, "status"),
        message=_text(meta, "message"),
        totalitems=_int(meta, "totalitems"),
        itemsperpage=_int(meta, "itemsperpage"),
    )


def parse_envelope(body: bytes, schema: Schema[T]) -> Envelope[T]:
    """
    Parse an OCS response body.

    Args:
        body: Raw XML response bytes
        schema: What to extract from the ``<data>`` section

    Returns:
        Envelope with the meta section and the extracted payload.  The
        payload is extracted no matter the status code; it is up to
        :func:`ocsclient.protocol.results.interpret` to decide if it
        may be used.

    Raises:
        DecodeError: If body is not valid XML, or not an OCS envelope
    """
    root = _parse_xml(body)
    if root.tag != "ocs":
        raise error.DecodeError(
            reason=f"Expected <ocs> as root element, got <{root.tag}>"
        )
    meta = _parse_meta(root)
    if log.isEnabledFor(logging.DEBUG):
        log.debug(etree.tostring(root, pretty_print=True))
    return Envelope(meta=meta, data=schema.extract(root))


def parse_meta(body: bytes) -> Meta:
    """Parse only the ``<meta>`` section of an OCS response body."""
    return parse_envelope(body, NO_PAYLOAD).meta
