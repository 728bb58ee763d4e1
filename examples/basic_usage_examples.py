import sys

## We'll try to use the local ocsclient library, not the system-installed
sys.path.insert(0, "..")
sys.path.insert(0, ".")

import ocsclient
from ocsclient.lib import error
from ocsclient.objects import QUOTA_UNLIMITED

## CONFIGURATION.  Edit here, or set OCS_URL, OCS_USERNAME and
## OCS_PASSWORD in the environment and use ocsclient.get_ocsclient()
ocs_url = "https://cloud.example.com"
username = "admin"
password = "app-token-goes-here"


def run_examples():
    """
    Run through all the examples, one by one
    """
    ## The client object stores the http session and the credentials.
    ## Initiating the client object will not cause any server communication,
    ## so the credentials aren't validated before the first call.
    with ocsclient.OCSClient(ocs_url, username, password) as client:
        print("users:", client.get_users())
        print("groups:", client.get_groups())

        ## This cleans up from previous runs, if needed:
        cleanup_demo(client)

        group_demo(client)
        user_demo(client)

        cleanup_demo(client)


def group_demo(client):
    client.create_group("ocsclient-examples")
    ## get_group raises NotFoundError unless there is an exact match
    assert client.get_group("ocsclient-examples") == "ocsclient-examples"


def user_demo(client):
    new_user = ocsclient.NewUser(
        user_id="ocsclient-example-user",
        email="example-user@example.com",
        display_name="Example User",
        groups=["ocsclient-examples"],
        quota=QUOTA_UNLIMITED,
        language="en",
    )
    client.create_user(new_user)
    client.promote_to_subadmin(new_user.user_id, "ocsclient-examples")
    print("subadmins:", client.get_group_subadmins("ocsclient-examples"))

    details = client.get_user_details(new_user.user_id)
    print(f"{details.display_name} <{details.email}> member of {details.groups}")

    client.update_user_detail(new_user.user_id, "phone", "+1555123")
    client.disable_user(new_user.user_id)

    ## Validation happens before anything is sent to the server
    try:
        client.create_user(ocsclient.NewUser(user_id="no-password-no-email"))
    except error.ValidationError as e:
        print("refused:", e.problems)


def cleanup_demo(client):
    try:
        client.delete_user("ocsclient-example-user")
    except error.ApiError:
        pass
    try:
        client.delete_group("ocsclient-examples")
    except error.ApiError:
        pass


if __name__ == "__main__":
    run_examples()
