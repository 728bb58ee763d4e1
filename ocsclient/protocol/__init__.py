"""
Sans-I/O OCS protocol implementation.

This module provides protocol-level operations without any I/O.
It builds requests and parses responses as pure data transformations.

The protocol layer is organized into:
- types: Core data structures (OCSRequest, OCSResponse, Envelope, StatusCode)
- form: Pure functions to build form encoded request bodies
- xml_parsers: Pure functions and payload schemas to parse XML envelopes
- results: Status interpretation of decoded envelopes
- operations: OCSProtocol class combining builders and parsers

Example usage:

    from ocsclient.protocol import OCSProtocol, HTTPMethod, GROUP_LIST

    protocol = OCSProtocol("https://cloud.example.com", "admin", "secret")

    # Build a request (no I/O)
    request = protocol.request(HTTPMethod.GET, "/cloud/groups")

    # Execute via your preferred I/O (sync, or mock)
    response = your_http_client.execute(request)

    # Parse response (no I/O)
    groups = protocol.parse_response(response, GROUP_LIST)
"""

from .form import decode_form, encode_form
from .operations import API_ROOT, OCSProtocol, quote_id, raise_for_status
from .results import find_exact, interpret, interpret_flag
from .types import Envelope, HTTPMethod, Meta, OCSRequest, OCSResponse, StatusCode
from .xml_parsers import (
    FLAT_LIST,
    GROUP_LIST,
    NO_PAYLOAD,
    USER_DETAILS,
    USER_LIST,
    ElementList,
    NoPayload,
    Schema,
    UserDetailsRecord,
    parse_envelope,
    parse_meta,
)

__all__ = [
    # Types
    "HTTPMethod",
    "OCSRequest",
    "OCSResponse",
    "StatusCode",
    "Meta",
    "Envelope",
    # Form
    "encode_form",
    "decode_form",
    # Parsers
    "Schema",
    "NoPayload",
    "ElementList",
    "UserDetailsRecord",
    "NO_PAYLOAD",
    "USER_LIST",
    "GROUP_LIST",
    "FLAT_LIST",
    "USER_DETAILS",
    "parse_envelope",
    "parse_meta",
    # Results
    "interpret",
    "interpret_flag",
    "find_exact",
    # Operations
    "API_ROOT",
    "OCSProtocol",
    "quote_id",
    "raise_for_status",
]
