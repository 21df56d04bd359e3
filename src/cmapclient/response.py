"""Conversion of CSV response bodies into DataFrames."""
import io

import pandas as pd

from .errors import MalformedResponseError


def resp_to_table(body):
    """Parse a CSV response body into a DataFrame.

    The body is read from an in-memory buffer, nothing is staged on disk.

    Parameters
    ----------
    body : bytes
        Raw response body: a header row followed by data rows.

    Returns
    -------
    pandas.DataFrame
        Parsed table. Empty if the body is empty.

    Raises
    ------
    MalformedResponseError
        If the body is not valid delimited text.
    """
    if not body or not body.strip():
        return pd.DataFrame()
    try:
        return pd.read_csv(io.BytesIO(body))
    except (pd.errors.ParserError, UnicodeDecodeError) as exc:
        raise MalformedResponseError(f"Could not parse response: {exc}") from exc
