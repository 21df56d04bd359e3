"""Python client for the Simons CMAP ocean data service.

Typical use::

    import cmapclient
    cmapclient.set_api_key("<Your API Key>")   # once per machine
    cmap = cmapclient.CMAP()
    cmap.head("tblSST_AVHRR_OI_NRT", rows=3)
"""
from . import config
from .api import CMAP, MAX_ROWS, interval_to_usp_name, is_climatology
from .credentials import CredentialProvider
from .errors import (AmbiguousNameError, CMAPError, DatasetTooLargeError,
                     InvalidArgumentError, InvalidIntervalError,
                     MalformedResponseError, MissingCredentialError,
                     NotFoundError, ServiceError, TransportError,
                     UnsupportedOperationError)
from .match import Match
from .payload import CruiseBounds, SpaceTime, encode_payload

__version__ = "0.1.0"


def get_api_key():
    """Return the stored CMAP API key."""
    return CredentialProvider().get_key()


def set_api_key(api_key):
    """Store the CMAP API key on this machine permanently."""
    CredentialProvider().set_key(api_key)
