"""Shared pytest fixtures for cmapclient tests."""

import io
from unittest.mock import MagicMock, patch

import pandas as pd
import pytest

from cmapclient import CMAP, CredentialProvider, config


def make_response(body="", status_code=200, reason="OK"):
    """Build a stand-in for a requests.Response."""
    resp = MagicMock()
    resp.ok = status_code < 400
    resp.status_code = status_code
    resp.reason = reason
    resp.text = body
    resp.content = body.encode()
    return resp


def frame(csv_text):
    """Parse CSV text into a DataFrame the way the client does."""
    return pd.read_csv(io.StringIO(csv_text))


@pytest.fixture
def credentials(tmp_path):
    """Provide a credential provider with a key and a private secrets file."""
    return CredentialProvider(api_key="test-key",
                              secrets_file=tmp_path / ".secrets.toml")


@pytest.fixture
def cmap(credentials):
    """Provide a strict client using the test credentials."""
    return CMAP(credentials=credentials, strict=True)


@pytest.fixture
def sst_head():
    """Provide the CSV body of a three row head of tblSST."""
    return ("time,lat,lon,sst\n"
            "2016-04-30,10.125,-179.875,27.3\n"
            "2016-04-30,10.125,-179.625,27.1\n"
            "2016-04-30,10.125,-179.375,26.9\n")


@pytest.fixture
def cruise_record():
    """Provide a single cruise record."""
    return frame("ID,Name,Nickname\n"
                 "589,KM1906,Gradients 3\n")


@pytest.fixture
def cruise_bounds():
    """Provide the bounds of a single cruise."""
    return frame("ID,dt1,dt2,lat1,lat2,lon1,lon2\n"
                 "589,2019-04-10 05:40:00,2019-05-01 21:57:00,21.5,42.25,-158.5,-156.75\n")


@pytest.fixture(autouse=True)
def default_settings():
    """Isolate tests from settings files and CMAPCLIENT_* variables."""
    with patch.object(config, "settings") as mock_settings:
        mock_settings.get = MagicMock(side_effect=lambda key, default=None: default)
        yield mock_settings
