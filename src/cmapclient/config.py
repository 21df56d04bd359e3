"""Configuration management for the cmapclient package.

Settings are loaded with Dynaconf from multiple locations in order of
increasing priority:

1. Global settings (/etc/cmapclient/)
2. User settings (~/.config/cmapclient/)
3. Current directory settings (./)
4. Environment variable specified file (CMAPCLIENT_SETTINGS_FILE_FOR_DYNACONF)

Individual keys can also be overridden with ``CMAPCLIENT_<KEY>``
environment variables.

Attributes
----------
USER_DIR : pathlib.Path
    Path to user configuration directory.
GLOB_DIR : pathlib.Path
    Path to global configuration directory.
CURR_DIR : pathlib.Path
    Path to current working directory.
SECRETS_FILE : pathlib.Path
    User secrets file where the API key is persisted.
settings : Dynaconf
    The Dynaconf settings object with loaded configuration.
"""
import os
import pathlib

from dynaconf import Dynaconf

USER_DIR = pathlib.Path("~/.config/cmapclient").expanduser()
USER_DIR.mkdir(parents=True, exist_ok=True)
GLOB_DIR = pathlib.Path("/etc/cmapclient/")
CURR_DIR = pathlib.Path("./").absolute()
SECRETS_FILE = USER_DIR / ".secrets.toml"

settings_files = [
    GLOB_DIR / "settings.toml",
    GLOB_DIR / ".secrets.toml",
    USER_DIR / "settings.toml",
    SECRETS_FILE,
    CURR_DIR / "settings.toml",
    CURR_DIR / ".secrets.toml"
    ]
extra_file = os.getenv("CMAPCLIENT_SETTINGS_FILE_FOR_DYNACONF")
if extra_file:
    settings_files.append(pathlib.Path(extra_file).absolute())

settings = Dynaconf(
    merge_enabled = True,
    envvar_prefix="CMAPCLIENT",
    settings_files=settings_files,
    environments=True,
    load_dotenv=True,
)

DEFAULTS = {
    "base_url": "https://simonscmap.com",
    "connect_timeout": 2,
    "read_timeout": None,
    "strict": True,
}


def get(key):
    """Return a setting, falling back to the package default.

    Parameters
    ----------
    key : str
        Setting name, e.g. 'base_url' or 'connect_timeout'.
    """
    return settings.get(key, DEFAULTS.get(key))


def change_env(new_env):
    """Change the active Dynaconf environment.

    Parameters
    ----------
    new_env : str
        The environment name to switch to (e.g., 'development', 'production').
    """
    settings.setenv(new_env)
    settings.reload()
