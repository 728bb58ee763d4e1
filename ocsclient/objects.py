"""
Value objects exchanged with the OCS provisioning API.

``NewUser`` is input, validated client side before anything is sent.
``UserDetails`` and friends are decoded from the ``<data>`` section of
a ``GET /cloud/users/{userid}`` response.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ocsclient.protocol.form import FormValue

#: Quota value meaning "no limit"
QUOTA_UNLIMITED = "none"


@dataclass
class NewUser:
    """Data for creating a user account.

    Attributes:
        user_id: Login name of the new account.  Required.
        password: Initial password.  Either this or ``email`` must be set;
            with only an email the server sends an invitation mail.
        display_name: Full name shown in the UI.
        email: Mail address of the account.
        groups: Group ids the account is added to.
        subadmin_groups: Group ids the account becomes subadmin of.
        quota: Storage quota, e.g. ``"5 GB"`` or :data:`QUOTA_UNLIMITED`.
        language: Language code, e.g. ``"en"``.
    """

    user_id: str = ""
    password: str = ""
    display_name: str = ""
    email: str = ""
    groups: list[str] = field(default_factory=list)
    subadmin_groups: list[str] = field(default_factory=list)
    quota: str = ""
    language: str = ""

    def validate(self) -> list[str]:
        """Return a list of problems, empty if the data can be sent."""
        problems = []
        if not self.user_id:
            problems.append("UserId must not be empty")
        if not self.email and not self.password:
            problems.append("Either Password or Email must be set")
        return problems

    def to_form(self) -> dict[str, FormValue]:
        return {
            "userid": self.user_id,
            "password": self.password or None,
            "displayName": self.display_name or None,
            "email": self.email or None,
            "groups": self.groups,
            "subadmin": self.subadmin_groups,
            "quota": self.quota or None,
            "language": self.language or None,
        }


@dataclass(frozen=True)
class UserQuota:
    free: int = 0
    used: int = 0
    total: int = 0
    relative: float = 0.0
    #: the configured quota; a byte count, ``"none"`` or a negative
    #: number for "default"/"unknown"
    quota: str = ""


@dataclass(frozen=True)
class BackendCapabilities:
    set_display_name: bool = False
    set_password: bool = False


@dataclass(frozen=True)
class UserDetails:
    """Account details as returned by the server.

    Fields the server leaves out are set to their empty value.
    """

    id: str = ""
    enabled: bool = False
    storage_location: str = ""
    last_login: str = ""
    backend: str = ""
    #: group ids this user is subadmin of
    subadmin_groups: list[str] = field(default_factory=list)
    quota: UserQuota = field(default_factory=UserQuota)
    email: str = ""
    display_name: str = ""
    phone: str = ""
    address: str = ""
    website: str = ""
    twitter: str = ""
    #: group ids this user belongs to
    groups: list[str] = field(default_factory=list)
    language: str = ""
    locale: str = ""
    backend_capabilities: BackendCapabilities = field(
        default_factory=BackendCapabilities
    )
