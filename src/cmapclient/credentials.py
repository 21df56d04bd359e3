"""Storage and retrieval of the CMAP API key.

The key is looked up, in order, in memory, in the ``CMAP_API_KEY``
environment variable and finally in the Dynaconf settings (which include
``CMAPCLIENT_API_KEY`` and the ``.secrets.toml`` files). ``set_key`` writes
it to the user secrets file so that later sessions find it as well.
"""
import logging
import os
import pathlib

from dynaconf.loaders import toml_loader

from . import config
from .errors import MissingCredentialError

logger = logging.getLogger(__name__)

ENV_VAR = "CMAP_API_KEY"

MISSING_KEY_MESSAGE = (
    "CMAP API Key not found.\n"
    "You may obtain an API Key from https://simonscmap.com.\n"
    "Record your API key on your machine permanently using the following command:\n"
    "    cmapclient.set_api_key('<Your API Key>')\n"
    "or from the shell:\n"
    "    cmapclient set-key <Your API Key>"
)


class CredentialProvider:
    """Hold and persist the API key used to authorize requests.

    Parameters
    ----------
    api_key : str, optional
        Key to use for this session. It is not persisted unless
        ``set_key`` is called.
    env_var : str, optional
        Environment variable read and written, by default 'CMAP_API_KEY'.
    secrets_file : str or pathlib.Path, optional
        TOML file where ``set_key`` persists the key, by default the user
        secrets file of the Dynaconf configuration.
    """

    def __init__(self, api_key=None, env_var=ENV_VAR, secrets_file=None):
        self._api_key = api_key
        self.env_var = env_var
        self.secrets_file = pathlib.Path(secrets_file or config.SECRETS_FILE)

    def get_key(self):
        """Return the current API key.

        Raises
        ------
        MissingCredentialError
            If no key is stored anywhere.
        """
        key = (self._api_key
               or os.getenv(self.env_var)
               or config.settings.get("api_key"))
        if not key:
            raise MissingCredentialError(MISSING_KEY_MESSAGE)
        return str(key)

    def set_key(self, key):
        """Persist ``key`` and use it for the rest of this session.

        Any previously stored key is overwritten. ``CMAP_API_KEY`` takes
        precedence over the secrets file, so a different key still exported
        in the shell wins in later sessions; see ``shadowing_env_key``.

        Parameters
        ----------
        key : str
            The CMAP API key.
        """
        self.secrets_file.parent.mkdir(parents=True, exist_ok=True)
        toml_loader.write(self.secrets_file,
                          {"default": {"api_key": key}},
                          merge=True)
        logger.info(f"API key written to {self.secrets_file}")
        os.environ[self.env_var] = key
        config.settings.set("api_key", key)
        self._api_key = key

    def shadowing_env_key(self, key):
        """Return the environment key if it differs from ``key``, else None."""
        env_key = os.getenv(self.env_var)
        if env_key and env_key != key:
            return env_key
        return None
