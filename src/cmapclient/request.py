"""Submission of GET requests to the CMAP REST API."""
import logging

import requests

from . import config
from .errors import ServiceError, TransportError
from .payload import encode_payload
from .response import resp_to_table

logger = logging.getLogger(__name__)

QUERY_ROUTE = "/api/data/query?"
SP_ROUTE = "/api/data/sp?"


def build_url(route, payload):
    """Return ``base_url + route + encoded payload``."""
    return config.get("base_url") + route + encode_payload(payload)


def send(route, payload, api_key):
    """Send a single authorized GET request.

    Parameters
    ----------
    route : str
        API route including the trailing '?', e.g. '/api/data/query?'.
    payload : dict
        Ordered query parameters.
    api_key : str
        CMAP API key placed in the Authorization header.

    Returns
    -------
    requests.Response
        The response, whatever its status.

    Raises
    ------
    TransportError
        If the request fails before a response is received.
    """
    url = build_url(route, payload)
    logger.debug(f"GET {url}")
    headers = {"Authorization": f"Api-Key {api_key}"}
    timeout = (config.get("connect_timeout"), config.get("read_timeout"))
    try:
        return requests.get(url, headers=headers, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        raise TransportError(f"Request to {route} failed: {exc}") from exc


def atomic_request(route, payload, api_key, strict=None):
    """Submit a request and return the response body as a DataFrame.

    A non-success status is logged with its code and message. When
    ``strict`` is true (the default from settings) a ``ServiceError`` is
    raised; otherwise the returned body is materialized anyway.

    Parameters
    ----------
    route : str
        API route.
    payload : dict
        Ordered query parameters.
    api_key : str
        CMAP API key.
    strict : bool, optional
        Overrides the 'strict' setting.

    Returns
    -------
    pandas.DataFrame
    """
    resp = send(route, payload, api_key)
    if not resp.ok:
        logger.warning(f"Status: {resp.reason}")
        logger.warning(f"Status Code: {resp.status_code}")
        logger.warning(f"Message: {resp.text}")
        if config.get("strict") if strict is None else strict:
            raise ServiceError(resp.status_code, resp.reason, resp.text)
    return resp_to_table(resp.content)
