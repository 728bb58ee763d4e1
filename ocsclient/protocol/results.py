"""
Turning decoded envelopes into results.

The status code in ``<meta>`` is the only thing deciding success.  These
functions either hand back the payload or raise, there are no partial
results.
"""

from collections.abc import Iterable
from typing import Optional, TypeVar

from ocsclient.lib import error

from .types import Envelope

T = TypeVar("T")


def interpret(envelope: Envelope[T], url: Optional[str] = None) -> T:
    """
    Return the payload of a successful envelope.

    Raises:
        ApiError: carrying the status code and the message (or the
            status text if the server gave no message) when the status
            code is anything but ``StatusCode.SUCCESS``
    """
    meta = envelope.meta
    if not meta.success:
        raise error.ApiError(
            statuscode=meta.statuscode,
            message=meta.message or meta.status,
            url=url,
        )
    return envelope.data


def interpret_flag(envelope: Envelope, url: Optional[str] = None) -> bool:
    """
    For create/delete/update style calls.  Success is ``True``; there
    is no ``False``, failure raises ``ApiError``.
    """
    interpret(envelope, url=url)
    return True


def find_exact(
    items: Iterable[str], wanted: str, kind: str = "item", url: Optional[str] = None
) -> str:
    """
    Pick ``wanted`` out of a listing.  Search endpoints match on
    substrings, so the listing may hold several near-misses or none.

    Raises:
        NotFoundError: if no element equals ``wanted``
    """
    for item in items:
        if item == wanted:
            return item
    raise error.NotFoundError(url=url, reason=f"No {kind} with the id {wanted} was found")
