"""
Pure functions for building form encoded OCS request bodies.

The provisioning API takes ``application/x-www-form-urlencoded`` bodies.
Multi-valued parameters are sent PHP style, as repeated ``name[]`` keys.
"""

from collections.abc import Iterable, Mapping
from typing import Union
from urllib.parse import parse_qsl, urlencode

FormValue = Union[str, Iterable[str], None]

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def _form_items(params: Mapping[str, FormValue]) -> list[tuple[str, str]]:
    items: list[tuple[str, str]] = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, str):
            items.append((key, value))
        else:
            items.extend((f"{key}[]", v) for v in value)
    ## stable sort, so repeated keys keep their list order
    items.sort(key=lambda kv: kv[0])
    return items


def encode_form(params: Mapping[str, FormValue]) -> str:
    """
    Encode named parameters as a form body.

    Args:
        params: parameter name to value.  ``None`` values are left out,
            a list (or any other non-string iterable) becomes one
            ``name[]=...`` entry per element.

    Returns:
        The encoded body, keys in sorted order, e.g.
        ``email=john%40example.local&groups%5B%5D=a&groups%5B%5D=b``
    """
    return urlencode(_form_items(params))


def decode_form(body: Union[str, bytes]) -> dict[str, Union[str, list[str]]]:
    """
    Inverse of :func:`encode_form`, mostly useful for tests and for
    debug logging.  ``name[]`` keys are collected into lists.
    """
    if isinstance(body, bytes):
        body = body.decode("utf-8")
    result: dict[str, Union[str, list[str]]] = {}
    for key, value in parse_qsl(body, keep_blank_values=True):
        if key.endswith("[]"):
            result.setdefault(key[:-2], []).append(value)  # type: ignore[union-attr]
        else:
            result[key] = value
    return result
