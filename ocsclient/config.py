import json
import logging
import os
from typing import Optional

"""
Connection configuration.  A client can be configured through explicit
parameters, through environmental variables prepended with ``OCS_``, or
through a JSON (or YAML, if pyyaml is installed) configuration file.

The configuration file holds sections, each section is a dict of
connection parameters prefixed with ``ocs_``::

    {
        "default": {"inherits": "office"},
        "office": {
            "ocs_url": "https://cloud.example.com",
            "ocs_user": "admin",
            "ocs_pass": "app-token"
        }
    }
"""

## keys accepted by OCSClient.__init__, and how they may be spelled in config files
CONNKEYS = {"url", "username", "password", "timeout"}
_KEY_ALIASES = {"host": "url", "user": "username", "pass": "password"}


def config_section(config, section="default"):
    if section in config and "inherits" in config[section]:
        ret = config_section(config, config[section]["inherits"])
    else:
        ret = {}
    if section in config:
        ret.update(config[section])
    return ret


def read_config(fn, interactive_error=False):
    if not fn:
        cfgdir = f"{os.environ.get('HOME', '/')}/.config/"
        for config_file in (
            f"{cfgdir}/ocsclient/ocs.conf",
            f"{cfgdir}/ocsclient/ocs.yaml",
            f"{cfgdir}/ocsclient/ocs.json",
            "/etc/ocsclient/ocs.conf",
        ):
            cfg = read_config(config_file)
            if cfg:
                return cfg
        return None

    try:
        try:
            with open(fn, "rb") as config_file:
                return json.load(config_file)
        except json.decoder.JSONDecodeError:
            ## Late import, wrapped in try/except.  yaml is external module,
            ## and not included in the requirements.
            try:
                import yaml

                try:
                    with open(fn, "rb") as config_file:
                        return yaml.load(config_file, yaml.Loader)
                except yaml.YAMLError:
                    logging.error(
                        f"config file {fn} exists but is neither valid json nor yaml.  Check the syntax."
                    )
            except ImportError:
                logging.error(
                    f"config file {fn} exists but is not valid json, and pyyaml is not installed."
                )

    except FileNotFoundError:
        logging.info("no config file found")
    except ValueError:
        if interactive_error:
            logging.error(
                "error in config file.  Be aware that the interactive configuration will ignore and overwrite the current broken config file",
                exc_info=True,
            )
        else:
            logging.error("error in config file.  It will be ignored", exc_info=True)
    return {}


def _normalize_key(key: str) -> str:
    key = key.lower()
    return _KEY_ALIASES.get(key, key)


def _to_client_params(conn_params: dict) -> dict:
    params = {}
    for key, value in conn_params.items():
        key = _normalize_key(key)
        if key not in CONNKEYS:
            logging.warning(f"ignoring unknown connection parameter {key}")
            continue
        params[key] = value
    if "timeout" in params:
        params["timeout"] = float(params["timeout"])
    if "url" in params:
        params["host"] = params.pop("url")
    return params


def get_connection_params(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section_name: Optional[str] = None,
    environment: bool = True,
    **config_data,
) -> Optional[dict]:
    """
    Collect connection parameters, from the first source yielding any:

    * The parameters given
    * Environment variables prepended with ``OCS_``, like ``OCS_URL``,
      ``OCS_USERNAME``, ``OCS_PASSWORD``, ``OCS_TIMEOUT``.
    * Configuration file, ``OCS_CONFIG_FILE`` or the default locations,
      section ``OCS_CONFIG_SECTION`` or ``default``.

    Returns ``None`` if nothing is configured.
    """
    if config_data:
        return _to_client_params(config_data)

    if environment:
        conf = {}
        for conf_key in (
            x for x in os.environ if x.startswith("OCS_") and not x.startswith("OCS_CONFIG")
        ):
            conf[conf_key[4:].lower()] = os.environ[conf_key]
        if conf:
            return _to_client_params(conf)
        if not config_file:
            config_file = os.environ.get("OCS_CONFIG_FILE")
        if not config_section_name:
            config_section_name = os.environ.get("OCS_CONFIG_SECTION")

    if check_config_file:
        cfg = read_config(config_file)
        if cfg:
            section = config_section(cfg, config_section_name or "default")
            conn_params = {}
            for k in section:
                if k.startswith("ocs_") and section[k]:
                    conn_params[k[4:]] = section[k]
            if conn_params:
                return _to_client_params(conn_params)
    return None


def get_ocsclient(
    check_config_file: bool = True,
    config_file: Optional[str] = None,
    config_section: Optional[str] = None,
    environment: bool = True,
    **config_data,
):
    """
    This function will yield an OCSClient object.  It will not try to
    connect.  See :func:`get_connection_params` for where the
    configuration is looked up.  Returns ``None`` if no configuration
    is found.
    """
    from ocsclient.client import OCSClient

    conn_params = get_connection_params(
        check_config_file=check_config_file,
        config_file=config_file,
        config_section_name=config_section,
        environment=environment,
        **config_data,
    )
    if conn_params is None:
        return None
    return OCSClient(**conn_params)
