#!/usr/bin/env python
"""
Unit tests for the OCSClient.

The HTTP layer is mocked out, see fixture_helpers.py.  Every test
states the exact request it expects the client to send, and what the
emulated server answers.
"""

import tempfile
from unittest import mock

import pytest
import requests

from ocsclient import NewUser, OCSClient
from ocsclient.lib import error
from ocsclient.objects import QUOTA_UNLIMITED

from .fixture_helpers import (
    API_URL,
    HOST,
    PASS,
    USER,
    USER_DETAILS_RESPONSE,
    RequestExpectation,
    failure_response,
    list_response,
    mocked_server,
)


@pytest.fixture
def client():
    with OCSClient(HOST, USER, PASS) as client:
        yield client


class TestClientSetup:
    def test_url(self, client):
        assert client.url == API_URL

    def test_trailing_slash(self):
        assert OCSClient(HOST + "/", USER, PASS).url == API_URL

    def test_default_timeout_is_passed_on(self, client):
        with mocked_server(
            RequestExpectation("GET", f"{API_URL}/cloud/groups", response=list_response([], "groups"))
        ) as mocked:
            client.get_groups()
        assert mocked.call_args.kwargs["timeout"] == 10

    def test_custom_timeout(self):
        client = OCSClient(HOST, USER, PASS, timeout=2.5)
        with mocked_server(
            RequestExpectation("GET", f"{API_URL}/cloud/groups", response=list_response([], "groups"))
        ) as mocked:
            client.get_groups()
        assert mocked.call_args.kwargs["timeout"] == 2.5

    def test_given_session_is_not_closed(self):
        session = mock.MagicMock()
        OCSClient(HOST, USER, PASS, session=session).close()
        session.close.assert_not_called()


class TestGroups:
    def test_get_groups(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/groups",
                response=list_response(["admin", "testGroup"], "groups"),
            )
        ) as mocked:
            assert client.get_groups() == ["admin", "testGroup"]
        assert mocked.call_count == 1

    def test_get_groups_empty(self, client):
        with mocked_server(
            RequestExpectation(
                "GET", f"{API_URL}/cloud/groups", response=list_response([], "groups")
            )
        ):
            assert client.get_groups() == []

    def test_get_group(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/groups?search=admin",
                response=list_response(["admins", "admin"], "groups"),
            )
        ):
            assert client.get_group("admin") == "admin"

    def test_get_group_unknown(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/groups?search=unknownGroup",
                response=list_response([], "groups"),
            )
        ):
            with pytest.raises(error.NotFoundError) as excinfo:
                client.get_group("unknownGroup")
        assert "No group with the id unknownGroup was found" in str(excinfo.value)

    def test_get_group_substring_only(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/groups?search=dev",
                response=list_response(["developers"], "groups"),
            )
        ):
            with pytest.raises(error.NotFoundError):
                client.get_group("dev")

    def test_create_group(self, client):
        with mocked_server(
            RequestExpectation(
                "POST", f"{API_URL}/cloud/groups", body=b"groupid=testGroup01"
            )
        ):
            assert client.create_group("testGroup01") is True

    def test_create_group_exists(self, client):
        with mocked_server(
            RequestExpectation(
                "POST",
                f"{API_URL}/cloud/groups",
                body=b"groupid=admin",
                response=failure_response(102, "group exists"),
            )
        ):
            with pytest.raises(error.ApiError) as excinfo:
                client.create_group("admin")
        assert excinfo.value.statuscode == 102
        assert excinfo.value.message == "group exists"

    def test_delete_group(self, client):
        with mocked_server(
            RequestExpectation("DELETE", f"{API_URL}/cloud/groups/testGroup01")
        ):
            assert client.delete_group("testGroup01") is True

    def test_delete_group_quoted(self, client):
        with mocked_server(
            RequestExpectation("DELETE", f"{API_URL}/cloud/groups/test%20group%2F1")
        ):
            assert client.delete_group("test group/1") is True

    def test_get_group_members(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/groups/employees",
                response=list_response(["john.doe", "jane.doe"], "users"),
            )
        ):
            assert client.get_group_members("employees") == ["john.doe", "jane.doe"]

    def test_get_group_subadmins(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/groups/employees/subadmins",
                response=list_response(["jane.doe"]),
            )
        ):
            assert client.get_group_subadmins("employees") == ["jane.doe"]


class TestUsers:
    def test_get_users(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/users",
                response=list_response(["admin", "john.doe"], "users"),
            )
        ):
            assert client.get_users() == ["admin", "john.doe"]

    def test_create_user(self, client):
        new_user = NewUser(
            user_id="john.doe",
            password="johnsPassword",
            display_name="John Doe",
            email="john.doe@example.local",
            groups=["employees", "development"],
            subadmin_groups=["employees", "development", "accounting"],
            quota=QUOTA_UNLIMITED,
            language="en",
        )
        expected_body = (
            b"displayName=John+Doe&email=john.doe%40example.local"
            b"&groups%5B%5D=employees&groups%5B%5D=development"
            b"&language=en&password=johnsPassword&quota=none"
            b"&subadmin%5B%5D=employees&subadmin%5B%5D=development"
            b"&subadmin%5B%5D=accounting&userid=john.doe"
        )
        with mocked_server(
            RequestExpectation("POST", f"{API_URL}/cloud/users", body=expected_body)
        ):
            assert client.create_user(new_user) is True

    def test_create_user_minimal(self, client):
        with mocked_server(
            RequestExpectation(
                "POST",
                f"{API_URL}/cloud/users",
                body=b"email=jane%40example.local&userid=jane",
            )
        ):
            assert client.create_user(NewUser(user_id="jane", email="jane@example.local"))

    @pytest.mark.parametrize(
        "new_user, problems",
        [
            (NewUser(password="secret"), ["UserId must not be empty"]),
            (NewUser(user_id="jane"), ["Either Password or Email must be set"]),
            (
                NewUser(),
                ["UserId must not be empty", "Either Password or Email must be set"],
            ),
        ],
    )
    def test_create_user_invalid(self, client, new_user, problems):
        with mocked_server(RequestExpectation("POST", f"{API_URL}/cloud/users")) as mocked:
            with pytest.raises(error.ValidationError) as excinfo:
                client.create_user(new_user)
        assert excinfo.value.problems == problems
        assert mocked.call_count == 0

    def test_create_user_exists(self, client):
        with mocked_server(
            RequestExpectation(
                "POST",
                f"{API_URL}/cloud/users",
                body=b"password=secret&userid=admin",
                response=failure_response(102, "User already exists"),
            )
        ):
            with pytest.raises(error.ApiError) as excinfo:
                client.create_user(NewUser(user_id="admin", password="secret"))
        assert excinfo.value.statuscode == 102

    def test_get_user_details(self, client):
        with mocked_server(
            RequestExpectation(
                "GET", f"{API_URL}/cloud/users/john.doe", response=USER_DETAILS_RESPONSE
            )
        ):
            details = client.get_user_details("john.doe")
        assert details.id == "john.doe"
        assert details.display_name == "John Doe"
        assert details.subadmin_groups == ["employees"]
        assert details.groups == ["developers", "employees"]
        assert details.quota.relative == 0.5

    def test_get_user_details_unknown(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/users/nobody",
                response=failure_response(404, "User does not exist"),
            )
        ):
            with pytest.raises(error.ApiError) as excinfo:
                client.get_user_details("nobody")
        assert excinfo.value.statuscode == 404

    def test_update_user_detail(self, client):
        with mocked_server(
            RequestExpectation(
                "PUT",
                f"{API_URL}/cloud/users/john.doe",
                body=b"key=displayname&value=Johnny+Doe",
            )
        ):
            assert client.update_user_detail("john.doe", "displayname", "Johnny Doe")

    def test_update_user_detail_clear(self, client):
        with mocked_server(
            RequestExpectation(
                "PUT", f"{API_URL}/cloud/users/john.doe", body=b"key=phone&value="
            )
        ):
            assert client.update_user_detail("john.doe", "phone", "")

    def test_delete_user(self, client):
        with mocked_server(
            RequestExpectation("DELETE", f"{API_URL}/cloud/users/john.doe")
        ):
            assert client.delete_user("john.doe") is True

    def test_enable_user(self, client):
        with mocked_server(
            RequestExpectation("PUT", f"{API_URL}/cloud/users/john.doe/enable")
        ):
            assert client.enable_user("john.doe") is True

    def test_disable_user(self, client):
        with mocked_server(
            RequestExpectation("PUT", f"{API_URL}/cloud/users/john.doe/disable")
        ):
            assert client.disable_user("john.doe") is True

    def test_resend_welcome_mail(self, client):
        with mocked_server(
            RequestExpectation("POST", f"{API_URL}/cloud/users/john.doe/welcome")
        ):
            assert client.resend_welcome_mail("john.doe") is True


class TestMembership:
    def test_get_user_groups(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/users/john.doe/groups",
                response=list_response(["employees"], "groups"),
            )
        ):
            assert client.get_user_groups("john.doe") == ["employees"]

    def test_add_user_to_group(self, client):
        with mocked_server(
            RequestExpectation(
                "POST",
                f"{API_URL}/cloud/users/john.doe/groups",
                body=b"groupid=employees",
            )
        ):
            assert client.add_user_to_group("john.doe", "employees") is True

    def test_add_user_to_unknown_group(self, client):
        with mocked_server(
            RequestExpectation(
                "POST",
                f"{API_URL}/cloud/users/john.doe/groups",
                body=b"groupid=nope",
                response=failure_response(102, "Group does not exist"),
            )
        ):
            with pytest.raises(error.ApiError):
                client.add_user_to_group("john.doe", "nope")

    def test_remove_user_from_group(self, client):
        with mocked_server(
            RequestExpectation(
                "DELETE",
                f"{API_URL}/cloud/users/john.doe/groups",
                body=b"groupid=employees",
            )
        ):
            assert client.remove_user_from_group("john.doe", "employees") is True

    def test_promote_to_subadmin(self, client):
        with mocked_server(
            RequestExpectation(
                "POST",
                f"{API_URL}/cloud/users/john.doe/subadmins",
                body=b"groupid=employees",
            )
        ):
            assert client.promote_to_subadmin("john.doe", "employees") is True

    def test_demote_from_subadmin(self, client):
        with mocked_server(
            RequestExpectation(
                "DELETE",
                f"{API_URL}/cloud/users/john.doe/subadmins",
                body=b"groupid=employees",
            )
        ):
            assert client.demote_from_subadmin("john.doe", "employees") is True

    def test_get_subadmin_groups(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/users/john.doe/subadmins",
                response=list_response(["employees", "accounting"]),
            )
        ):
            assert client.get_subadmin_groups("john.doe") == ["employees", "accounting"]


class TestFailures:
    def test_bad_credentials(self):
        client = OCSClient(HOST, USER, "wrong-password")
        with mocked_server(RequestExpectation("GET", f"{API_URL}/cloud/groups")):
            with pytest.raises(error.AuthorizationError) as excinfo:
                client.get_groups()
        assert isinstance(excinfo.value, error.TransportError)
        assert excinfo.value.status == 401
        assert b"Current user is not logged in" in excinfo.value.body

    def test_bad_credentials_on_write(self):
        client = OCSClient(HOST, "someone-else", PASS)
        with mocked_server(
            RequestExpectation("POST", f"{API_URL}/cloud/groups", body=b"groupid=g")
        ):
            with pytest.raises(error.TransportError):
                client.create_group("g")

    def test_server_error(self, client):
        with mocked_server(
            RequestExpectation(
                "GET", f"{API_URL}/cloud/users", status=500, response=b"Internal error"
            )
        ):
            with pytest.raises(error.TransportError) as excinfo:
                client.get_users()
        assert excinfo.value.status == 500
        assert "status: 500" in str(excinfo.value)
        assert not isinstance(excinfo.value, error.AuthorizationError)

    def test_garbage_response(self, client):
        with mocked_server(
            RequestExpectation(
                "GET", f"{API_URL}/cloud/users", response=b"<html>maintenance</html"
            )
        ):
            with pytest.raises(error.DecodeError):
                client.get_users()

    def test_not_authorized_envelope(self, client):
        with mocked_server(
            RequestExpectation(
                "GET",
                f"{API_URL}/cloud/users",
                response=failure_response(997, "not an admin"),
            )
        ):
            with pytest.raises(error.ApiError) as excinfo:
                client.get_users()
        assert excinfo.value.statuscode == 997

    @pytest.mark.parametrize(
        "exception",
        [
            requests.exceptions.Timeout("read timed out"),
            requests.exceptions.ConnectionError("connection refused"),
        ],
    )
    def test_network_failures(self, client, exception):
        with mock.patch(
            "ocsclient.transport.requests.Session.request", side_effect=exception
        ):
            with pytest.raises(error.TransportError) as excinfo:
                client.get_users()
        assert excinfo.value.__cause__ is exception
        assert excinfo.value.status is None
        assert excinfo.value.url == f"{API_URL}/cloud/users"

    def test_password_not_logged(self, client, caplog):
        caplog.set_level("DEBUG", logger="ocsclient")
        with mocked_server(
            RequestExpectation(
                "POST",
                f"{API_URL}/cloud/users",
                body=b"password=topsecret&userid=jane",
            )
        ):
            client.create_user(NewUser(user_id="jane", password="topsecret"))
        assert "topsecret" not in caplog.text
        assert PASS not in caplog.text

    def test_password_change_not_logged(self, client, caplog):
        caplog.set_level("DEBUG", logger="ocsclient")
        with mocked_server(
            RequestExpectation(
                "PUT",
                f"{API_URL}/cloud/users/jane",
                body=b"key=password&value=N3wS3cret",
            )
        ):
            assert client.update_user_detail("jane", "password", "N3wS3cret")
        assert "N3wS3cret" not in caplog.text
        assert "'key': 'password'" in caplog.text


class TestCommunicationDump:
    def test_dump_file(self, client, monkeypatch, tmp_path):
        monkeypatch.setattr(error, "debug_dump_communication", True)
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        with mocked_server(
            RequestExpectation(
                "PUT",
                f"{API_URL}/cloud/users/jane",
                body=b"key=password&value=N3wS3cret",
            )
        ):
            client.update_user_detail("jane", "password", "N3wS3cret")

        dumps = list(tmp_path.glob("ocscomm*"))
        assert len(dumps) == 1
        content = dumps[0].read_bytes()
        assert f"PUT {API_URL}/cloud/users/jane".encode() in content
        assert b"Authorization: ***" in content
        assert b"N3wS3cret" not in content
        assert PASS.encode() not in content
        assert b"'value': '***'}\n<====\n200\n" in content
        assert content.endswith(b"</ocs>\n")

    def test_no_dump_by_default(self, client, monkeypatch, tmp_path):
        monkeypatch.setattr(error, "debug_dump_communication", False)
        monkeypatch.setattr(tempfile, "tempdir", str(tmp_path))
        with mocked_server(RequestExpectation("DELETE", f"{API_URL}/cloud/users/jane")):
            client.delete_user("jane")
        assert list(tmp_path.glob("ocscomm*")) == []
