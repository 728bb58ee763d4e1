"""
The ``OCSClient`` class gives access to the user and group provisioning
API of the server.  Every method does exactly one HTTP request, and
either returns the decoded result or raises one of the exceptions in
:mod:`ocsclient.lib.error`.

``get_ocsclient`` in :mod:`ocsclient.config` returns an OCSClient
object based on parameters, environmental variables or a
configuration file.
"""

from types import TracebackType
from typing import Optional

import requests

from ocsclient.lib import error
from ocsclient.lib.error import log
from ocsclient.objects import NewUser, UserDetails
from ocsclient.protocol.form import FormValue
from ocsclient.protocol.operations import OCSProtocol, quote_id
from ocsclient.protocol.results import find_exact, interpret_flag
from ocsclient.protocol.types import HTTPMethod
from ocsclient.protocol.xml_parsers import (
    FLAT_LIST,
    GROUP_LIST,
    NO_PAYLOAD,
    USER_DETAILS,
    USER_LIST,
    Schema,
    parse_envelope,
)
from ocsclient.transport import DEFAULT_TIMEOUT, OCSTransport


class OCSClient:
    """
    Client for the OCS provisioning API, uses the requests lib.

    Usage::

        with OCSClient("https://cloud.example.com", "admin", "app-token") as client:
            for user_id in client.get_users():
                print(client.get_user_details(user_id).email)

    Args:
        host: Base URL of the server, e.g. ``https://cloud.example.com``.
            The OCS API root is appended.
        username: Admin (or subadmin) account doing the requests.
        password: Its password, or preferably an app token.
        timeout: HTTP request timeout in seconds.
        session: A pre-built ``requests.Session`` to use.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.protocol = OCSProtocol(host, username, password)
        self.transport = OCSTransport(session=session, timeout=float(timeout))
        log.debug("api url: " + self.protocol.base_url)

    @property
    def url(self) -> str:
        return self.protocol.base_url

    def __enter__(self) -> "OCSClient":
        return self

    def __exit__(
        self,
        exc_type: Optional[type] = None,
        exc_value: Optional[BaseException] = None,
        traceback: Optional[TracebackType] = None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """
        Closes the underlying session object
        """
        self.transport.close()

    def _call(
        self,
        method: HTTPMethod,
        path: str,
        schema: Schema,
        form: Optional[dict[str, FormValue]] = None,
        query: Optional[dict[str, str]] = None,
    ):
        request = self.protocol.request(method, path, form=form, query=query)
        body = self.transport.send(request)
        return self.protocol.parse(body, schema, url=request.url)

    def _flag_call(
        self,
        method: HTTPMethod,
        path: str,
        form: Optional[dict[str, FormValue]] = None,
    ) -> bool:
        request = self.protocol.request(method, path, form=form)
        body = self.transport.send(request)
        return interpret_flag(parse_envelope(body, NO_PAYLOAD), url=request.url)

    ## Users

    def get_users(self) -> list[str]:
        """Returns the ids of all users."""
        return self._call(HTTPMethod.GET, "/cloud/users", USER_LIST)

    def create_user(self, new_user: NewUser) -> bool:
        """
        Creates a user account.

        Raises:
            ValidationError: before any request is sent, if ``new_user``
                lacks the user id, or both password and email
        """
        problems = new_user.validate()
        if problems:
            raise error.ValidationError(problems, url=self.protocol.url("/cloud/users"))
        return self._flag_call(HTTPMethod.POST, "/cloud/users", form=new_user.to_form())

    def get_user_details(self, user_id: str) -> UserDetails:
        return self._call(
            HTTPMethod.GET, f"/cloud/users/{quote_id(user_id)}", USER_DETAILS
        )

    def update_user_detail(self, user_id: str, attribute: str, value: str) -> bool:
        """
        Changes one attribute of a user account.

        Args:
            attribute: one of ``email``, ``quota``, ``displayname``,
                ``phone``, ``address``, ``website``, ``twitter``,
                ``password``, ``language``, ``locale``
            value: the new value, empty to clear the field
        """
        return self._flag_call(
            HTTPMethod.PUT,
            f"/cloud/users/{quote_id(user_id)}",
            form={"key": attribute, "value": value},
        )

    def delete_user(self, user_id: str) -> bool:
        return self._flag_call(HTTPMethod.DELETE, f"/cloud/users/{quote_id(user_id)}")

    def enable_user(self, user_id: str) -> bool:
        return self._flag_call(
            HTTPMethod.PUT, f"/cloud/users/{quote_id(user_id)}/enable"
        )

    def disable_user(self, user_id: str) -> bool:
        return self._flag_call(
            HTTPMethod.PUT, f"/cloud/users/{quote_id(user_id)}/disable"
        )

    def resend_welcome_mail(self, user_id: str) -> bool:
        return self._flag_call(
            HTTPMethod.POST, f"/cloud/users/{quote_id(user_id)}/welcome"
        )

    ## Group membership

    def get_user_groups(self, user_id: str) -> list[str]:
        """Returns the ids of the groups the user is member of."""
        return self._call(
            HTTPMethod.GET, f"/cloud/users/{quote_id(user_id)}/groups", GROUP_LIST
        )

    def add_user_to_group(self, user_id: str, group_id: str) -> bool:
        return self._flag_call(
            HTTPMethod.POST,
            f"/cloud/users/{quote_id(user_id)}/groups",
            form={"groupid": group_id},
        )

    def remove_user_from_group(self, user_id: str, group_id: str) -> bool:
        return self._flag_call(
            HTTPMethod.DELETE,
            f"/cloud/users/{quote_id(user_id)}/groups",
            form={"groupid": group_id},
        )

    ## Subadmin roles

    def promote_to_subadmin(self, user_id: str, group_id: str) -> bool:
        """Makes the user subadmin of the group."""
        return self._flag_call(
            HTTPMethod.POST,
            f"/cloud/users/{quote_id(user_id)}/subadmins",
            form={"groupid": group_id},
        )

    def demote_from_subadmin(self, user_id: str, group_id: str) -> bool:
        return self._flag_call(
            HTTPMethod.DELETE,
            f"/cloud/users/{quote_id(user_id)}/subadmins",
            form={"groupid": group_id},
        )

    def get_subadmin_groups(self, user_id: str) -> list[str]:
        """Returns the ids of the groups the user is subadmin of."""
        return self._call(
            HTTPMethod.GET, f"/cloud/users/{quote_id(user_id)}/subadmins", FLAT_LIST
        )

    ## Groups

    def get_groups(self) -> list[str]:
        """Returns the ids of all groups."""
        return self._call(HTTPMethod.GET, "/cloud/groups", GROUP_LIST)

    def get_group(self, group_id: str) -> str:
        """
        Checks that a group exists.  The server only offers a substring
        search, so this searches for ``group_id`` and picks the exact
        match out of the results.

        Returns:
            ``group_id``

        Raises:
            NotFoundError: if no group has exactly this id
        """
        groups = self._call(
            HTTPMethod.GET, "/cloud/groups", GROUP_LIST, query={"search": group_id}
        )
        return find_exact(
            groups, group_id, kind="group", url=self.protocol.url("/cloud/groups")
        )

    def create_group(self, group_id: str) -> bool:
        return self._flag_call(
            HTTPMethod.POST, "/cloud/groups", form={"groupid": group_id}
        )

    def delete_group(self, group_id: str) -> bool:
        return self._flag_call(HTTPMethod.DELETE, f"/cloud/groups/{quote_id(group_id)}")

    def get_group_members(self, group_id: str) -> list[str]:
        """Returns the ids of the users in the group."""
        return self._call(
            HTTPMethod.GET, f"/cloud/groups/{quote_id(group_id)}", USER_LIST
        )

    def get_group_subadmins(self, group_id: str) -> list[str]:
        """Returns the ids of the users who are subadmin of the group."""
        return self._call(
            HTTPMethod.GET, f"/cloud/groups/{quote_id(group_id)}/subadmins", FLAT_LIST
        )
