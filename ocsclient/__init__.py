#!/usr/bin/env python
import logging

__version__ = "0.3.0"

from .client import OCSClient
from .config import get_ocsclient
from .objects import NewUser
from .objects import UserDetails

## Silence notification of no default logging handler
log = logging.getLogger("ocsclient")


class NullHandler(logging.Handler):
    def emit(self, record) -> None:
        pass


log.addHandler(NullHandler())

__all__ = ["__version__", "OCSClient", "get_ocsclient", "NewUser", "UserDetails"]
