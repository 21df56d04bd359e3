"""Colocalization of a source variable with one or more target variables.

The matching itself runs on the server: for every target the match
procedure returns the source samples with the target values found within
the temporal, latitude, longitude and depth tolerances. This module
validates the request, submits one query per target and places the
target columns side by side.
"""
import logging

import pandas as pd

from .errors import InvalidArgumentError, MalformedResponseError

logger = logging.getLogger(__name__)

TRAJECTORY_TABLE = "tblCruise_Trajectory"


def _targets(target_tables, target_vars):
    """Return the targets as two lists of equal, non-zero length."""
    if isinstance(target_tables, str):
        target_tables = [target_tables]
    if isinstance(target_vars, str):
        target_vars = [target_vars]
    if len(target_tables) != len(target_vars):
        raise InvalidArgumentError(
            f"Got {len(target_tables)} target tables and "
            f"{len(target_vars)} target variables; they must pair up.")
    if len(target_tables) == 0:
        raise InvalidArgumentError("At least one target variable is required.")
    return list(target_tables), list(target_vars)


def _per_target(value, count, name):
    """Broadcast a scalar tolerance to ``count`` targets."""
    if isinstance(value, (list, tuple)):
        if len(value) != count:
            raise InvalidArgumentError(
                f"{name} has {len(value)} entries for {count} target variables.")
        return list(value)
    return [value] * count


class Match:
    """Assemble a match request.

    Parameters
    ----------
    client : cmapclient.CMAP
        Client used to submit the queries.
    sp_name : str
        Match stored procedure, e.g. 'uspMatch'.
    source_table, source_var : str
        Source data set and variable.
    target_tables, target_vars : list of str
        Target data sets and variables, ``target_vars[i]`` belongs to
        ``target_tables[i]``.
    dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2
        Space-time window of the source.
    temporal_tolerance, lat_tolerance, lon_tolerance, depth_tolerance
        Scalar or one value per target.

    Raises
    ------
    InvalidArgumentError
        If the target or tolerance lengths do not match.
    """

    def __init__(self, client, sp_name, source_table, source_var,
                 target_tables, target_vars,
                 dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2,
                 temporal_tolerance, lat_tolerance, lon_tolerance,
                 depth_tolerance):
        self.target_tables, self.target_vars = _targets(target_tables, target_vars)
        count = len(self.target_tables)
        self.client = client
        self.sp_name = sp_name
        self.source_table = source_table
        self.source_var = source_var
        self.window = (dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2)
        self.temporal_tolerance = _per_target(temporal_tolerance, count, "temporal_tolerance")
        self.lat_tolerance = _per_target(lat_tolerance, count, "lat_tolerance")
        self.lon_tolerance = _per_target(lon_tolerance, count, "lon_tolerance")
        self.depth_tolerance = _per_target(depth_tolerance, count, "depth_tolerance")

    def query_string(self, index):
        """Return the match query for target ``index``."""
        dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2 = self.window
        return (
            f"EXEC {self.sp_name} '{self.source_table}', '{self.source_var}', "
            f"'{self.target_tables[index]}', '{self.target_vars[index]}', "
            f"'{dt1}', '{dt2}', {lat1}, {lat2}, {lon1}, {lon2}, {depth1}, {depth2}, "
            f"{self.temporal_tolerance[index]}, {self.lat_tolerance[index]}, "
            f"{self.lon_tolerance[index]}, {self.depth_tolerance[index]}"
        )

    def _target_columns(self, df, data, index):
        """Return the columns of ``data`` holding target ``index``'s values."""
        var = self.target_vars[index]
        if var in data.columns:
            return [var]
        return [col for col in data.columns if col not in df.columns]

    def compile(self):
        """Submit one match query per target and combine the results.

        Every target is matched against the same source window, so the
        responses share the source rows in server order. The following
        targets' columns are appended by position; a column name already
        present gets the target table as suffix.

        Returns
        -------
        pandas.DataFrame
            Rows of the first target's match, in server order, with one
            column per following target.

        Raises
        ------
        MalformedResponseError
            If a target's response does not have the same number of rows
            as the first one.
        """
        df = None
        for index, (table, var) in enumerate(zip(self.target_tables, self.target_vars)):
            logger.info(f"Matching {self.source_table}.{self.source_var} with {table}.{var}")
            data = self.client.query(self.query_string(index))
            if df is None:
                df = data.reset_index(drop=True)
                continue
            if len(data) != len(df):
                raise MalformedResponseError(
                    f"Match with {table}.{var} returned {len(data)} rows, "
                    f"expected {len(df)} source rows.")
            columns = self._target_columns(df, data, index)
            added = data[columns].reset_index(drop=True)
            added = added.rename(columns={col: f"{col}_{table}"
                                          for col in columns if col in df.columns})
            df = pd.concat([df, added], axis=1)
        return df


def along_track(client, cruise, target_tables, target_vars, depth1, depth2,
                temporal_tolerance, lat_tolerance, lon_tolerance, depth_tolerance):
    """Colocalize a cruise track with the target variables.

    The cruise is resolved to its space-time bounds first, a failed
    resolution raises before any match query is sent.

    Parameters
    ----------
    client : cmapclient.CMAP
        Client used to submit the queries.
    cruise : str
        Cruise name.
    target_tables, target_vars : list of str
        Target data sets and variables.
    depth1, depth2 : float
        Depth window.
    temporal_tolerance, lat_tolerance, lon_tolerance, depth_tolerance
        Scalar or one value per target.

    Returns
    -------
    pandas.DataFrame
    """
    target_tables, target_vars = _targets(target_tables, target_vars)
    tolerances = dict(temporal_tolerance=temporal_tolerance,
                      lat_tolerance=lat_tolerance,
                      lon_tolerance=lon_tolerance,
                      depth_tolerance=depth_tolerance)
    for name, value in tolerances.items():
        _per_target(value, len(target_tables), name)
    bounds = client.resolve_cruise(cruise)
    return Match(client, "uspMatch", TRAJECTORY_TABLE, str(bounds.ID),
                 target_tables, target_vars,
                 bounds.dt1, bounds.dt2, bounds.lat1, bounds.lat2,
                 bounds.lon1, bounds.lon2, depth1, depth2,
                 temporal_tolerance, lat_tolerance, lon_tolerance,
                 depth_tolerance).compile()
