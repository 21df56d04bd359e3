"""High-level access to the Simons CMAP database.

The ``CMAP`` class maps catalog, metadata, cruise and subset operations
onto either a raw query (``/api/data/query``) or a stored procedure call
(``/api/data/sp``). Every method returns a fresh ``pandas.DataFrame``
unless stated otherwise.

Notes
-----
Arguments are inserted into SQL snippets with only whitespace escaping.
Do not pass untrusted text containing quote characters.
"""
import json
import logging

from . import request
from .credentials import CredentialProvider
from .errors import (AmbiguousNameError, DatasetTooLargeError,
                     InvalidIntervalError, NotFoundError,
                     UnsupportedOperationError)
from .match import Match, along_track
from .payload import CruiseBounds, SpaceTime

logger = logging.getLogger(__name__)

MAX_ROWS = 2000000
CLIMATOLOGY_MARKER = "_Climatology"

INTERVALS = {
    "uspWeekly": ("w", "week", "weekly"),
    "uspMonthly": ("m", "month", "monthly"),
    "uspQuarterly": ("q", "s", "season", "seasonal", "seasonality", "quarterly"),
    "uspAnnual": ("y", "a", "year", "yearly", "annual"),
}

VERBOSE = False


def vprint(text):
    """Print text if verbose mode is enabled.

    Parameters
    ----------
    text : str
        Text to print.
    """
    if VERBOSE:
        print(text)


def interval_to_usp_name(interval=None):
    """Return the aggregation procedure for a time-series binning interval.

    Parameters
    ----------
    interval : str, optional
        None or '' for the raw time series, otherwise one of the weekly,
        monthly, quarterly or annual synonyms (e.g. 'w', 'month', 'season',
        'annual').

    Returns
    -------
    str
        Stored procedure name.

    Raises
    ------
    InvalidIntervalError
        If the interval is not recognized.
    """
    if not interval:
        return "uspTimeSeries"
    for usp_name, synonyms in INTERVALS.items():
        if interval in synonyms:
            return usp_name
    raise InvalidIntervalError(
        f"Unknown interval '{interval}'. Use one of: "
        + ", ".join(s for synonyms in INTERVALS.values() for s in synonyms))


def is_climatology(table):
    """Return True if the table represents a climatological data set.

    Based on the table naming convention only.
    """
    return CLIMATOLOGY_MARKER in table


class CMAP:
    """Client for the Simons CMAP REST API.

    Parameters
    ----------
    api_key : str, optional
        API key for this client. Falls back to the stored key.
    credentials : CredentialProvider, optional
        Provider used to look up the key. Created if not given.
    strict : bool, optional
        Raise ``ServiceError`` on non-success responses. Defaults to the
        'strict' setting.
    """

    def __init__(self, api_key=None, credentials=None, strict=None):
        self.credentials = credentials or CredentialProvider(api_key=api_key)
        self.strict = strict

    @property
    def api_key(self):
        return self.credentials.get_key()

    def set_api_key(self, api_key):
        """Persist a new API key (see ``CredentialProvider.set_key``)."""
        self.credentials.set_key(api_key)

    def atomic_request(self, route, payload):
        return request.atomic_request(route, payload,
                                      self.credentials.get_key(),
                                      strict=self.strict)

    def query(self, query_string):
        """Run a custom query and return the results as a DataFrame."""
        return self.atomic_request(request.QUERY_ROUTE, {"query": query_string})

    def stored_proc(self, sp_name, space_time):
        """Execute a stored procedure on a space-time subset.

        Parameters
        ----------
        sp_name : str
            Stored procedure name, e.g. 'uspSpaceTime'.
        space_time : SpaceTime
            Table, variable and space-time window.
        """
        return self.atomic_request(request.SP_ROUTE, space_time.to_payload(sp_name))

    def subset(self, sp_name, table, variable, dt1, dt2, lat1, lat2,
               lon1, lon2, depth1, depth2):
        """Return a subset of data according to space-time constraints."""
        space_time = SpaceTime(table, variable, dt1, dt2, lat1, lat2,
                               lon1, lon2, depth1, depth2)
        return self.stored_proc(sp_name, space_time)

    # Catalog

    def get_catalog(self):
        """Return the full catalog of variables."""
        return self.query("EXEC uspCatalog")

    def search_catalog(self, keywords):
        """Search the catalog of variables.

        Every variable is annotated with semantically related keywords. The
        space separated ``keywords`` may be variable names (NO3, Nitrate),
        methodologies or instruments (model, satellite, CTD), cruise names
        (KOK1606, Falkor), data producers or institutions. The search is not
        sensitive to keyword order or case.
        """
        return self.query(f"EXEC uspSearchCatalog '{keywords}'")

    def datasets(self):
        """Return the list of hosted data sets."""
        return self.query("EXEC uspDatasets")

    def head(self, table, rows=5):
        """Return the top records of a data set."""
        return self.query(f"EXEC uspHead '{table}', '{int(rows)}'")

    def columns(self, table):
        """Return the list of data set columns."""
        return self.query(f"EXEC uspColumns '{table}'")

    def get_dataset(self, table):
        """Return an entire data set.

        The row count estimate is checked first. Data sets with
        ``MAX_ROWS`` or more records must be retrieved in chunks with
        ``space_time``. The data set metadata is not included, see
        ``get_dataset_metadata``.

        Raises
        ------
        NotFoundError
            If no size estimate exists for the table.
        DatasetTooLargeError
            If the estimate reaches ``MAX_ROWS``.
        """
        stats = self.query(
            f"SELECT JSON_stats FROM tblDataset_Stats WHERE Dataset_Name='{table}'")
        rows = None
        if not stats.empty and "JSON_stats" in stats.columns:
            lat_stats = json.loads(stats["JSON_stats"].iloc[0]).get("lat") or {}
            rows = lat_stats.get("count")
        if rows is None:
            raise NotFoundError(f"No size estimates found for the {table} table.")
        if rows >= MAX_ROWS:
            raise DatasetTooLargeError(
                f"The requested dataset has {rows} records.\n"
                f"It is not recommended to retrieve datasets with more than "
                f"{MAX_ROWS} rows using this method.\n"
                "For large datasets, please use the 'space_time' method and "
                "retrieve the data in smaller chunks.",
                rows=rows, max_rows=MAX_ROWS)
        return self.query(f"SELECT * FROM {table}")

    def get_dataset_metadata(self, table):
        return self.query(f"EXEC uspDatasetMetadata '{table}'")

    def get_var_catalog(self, table, variable):
        """Return a single-row catalog entry with all of the variable's info."""
        return self.query(
            "SELECT * FROM [dbo].udfCatalog() "
            f"WHERE Table_Name='{table}' AND Variable='{variable}'")

    def _single_value(self, df, column, table, variable):
        if df.empty:
            raise NotFoundError(f"Variable {variable} not found in {table}.")
        return df[column].iloc[0]

    def get_var_long_name(self, table, variable):
        """Return the long name of a variable as a string."""
        df = self.query(
            "SELECT Long_Name, Short_Name FROM tblVariables "
            f"WHERE Table_Name='{table}' AND Short_Name='{variable}'")
        return self._single_value(df, "Long_Name", table, variable)

    def get_unit(self, table, variable):
        """Return the unit of a variable as a string."""
        df = self.query(f"EXEC uspVariableUnit '{table}', '{variable}'")
        return self._single_value(df, "Unit", table, variable)

    def get_var_resolution(self, table, variable):
        """Return the variable's spatial and temporal resolutions."""
        return self.query(f"EXEC uspVariableResolution '{table}', '{variable}'")

    def get_var_coverage(self, table, variable):
        """Return the variable's spatial and temporal coverage."""
        return self.query(f"EXEC uspVariableCoverage '{table}', '{variable}'")

    def get_var_stat(self, table, variable):
        """Return the variable's summary statistics."""
        return self.query(f"EXEC uspVariableStat '{table}', '{variable}'")

    def has_field(self, table, variable):
        """Return True if the column ``variable`` exists in ``table``."""
        df = self.query(f"SELECT COL_LENGTH('{table}', '{variable}') AS RESULT ")
        return bool(not df.empty and df["RESULT"].notna().iloc[0])

    def is_grid(self, table, variable):
        """Return whether the variable is a gridded product.

        Returns
        -------
        bool or None
            False for irregular spatial resolution, None if the variable is
            not registered.
        """
        df = self.query(
            "SELECT Spatial_Res_ID, RTRIM(LTRIM(Spatial_Resolution)) AS Spatial_Resolution "
            "FROM tblVariables JOIN tblSpatial_Resolutions "
            "ON [tblVariables].Spatial_Res_ID=[tblSpatial_Resolutions].ID "
            f"WHERE Table_Name='{table}' AND Short_Name='{variable}' ")
        if df.empty:
            return None
        return "irregular" not in str(df["Spatial_Resolution"].iloc[0]).lower()

    @staticmethod
    def is_climatology(table):
        return is_climatology(table)

    def get_references(self, dataset_id):
        """Return the references associated with a data set."""
        return self.query(
            f"SELECT Reference FROM dbo.udfDatasetReferences({int(dataset_id)})")

    def get_metadata(self, table, variable):
        """Return the metadata associated with a variable."""
        return self.query(f"EXEC uspVariableMetaData '{table}', '{variable}'")

    # Cruises

    def cruises(self):
        """Return the list of hosted cruises."""
        return self.query("EXEC uspCruises")

    def cruise_by_name(self, cruise_name):
        """Return the single-row cruise record matching ``cruise_name``.

        Raises
        ------
        NotFoundError
            If no cruise matches.
        AmbiguousNameError
            If more than one cruise matches. The candidates are
            attached to the exception and printed when ``VERBOSE`` is set.
        """
        df = self.query(f"EXEC uspCruiseByName '{cruise_name}'")
        if df.empty:
            raise NotFoundError(f"Invalid cruise name: {cruise_name}")
        if len(df) > 1:
            vprint(df)
            raise AmbiguousNameError(
                "More than one cruise found. "
                "Please provide a more specific cruise name.",
                candidates=df)
        return df

    def _cruise_id(self, cruise_name):
        return int(self.cruise_by_name(cruise_name)["ID"].iloc[0])

    def cruise_bounds(self, cruise_name):
        """Return the cruise boundaries in space and time."""
        return self.query(f"EXEC uspCruiseBounds {self._cruise_id(cruise_name)}")

    def cruise_trajectory(self, cruise_name):
        """Return the cruise trajectory."""
        return self.query(f"EXEC uspCruiseTrajectory {self._cruise_id(cruise_name)}")

    def cruise_variables(self, cruise_name):
        """Return all registered variables measured during a cruise."""
        return self.query(
            f"SELECT * FROM dbo.udfCruiseVariables({self._cruise_id(cruise_name)})")

    def resolve_cruise(self, cruise_name):
        """Resolve a cruise name once into its ``CruiseBounds``.

        Raises
        ------
        NotFoundError
            If the cruise, or its bounds, cannot be found.
        AmbiguousNameError
            If the name matches more than one cruise.
        """
        df = self.cruise_bounds(cruise_name)
        if df.empty:
            raise NotFoundError(f"No bounds found for cruise {cruise_name}")
        return CruiseBounds.from_frame(df)

    # Subsets

    def space_time(self, table, variable, dt1, dt2, lat1, lat2, lon1, lon2,
                   depth1, depth2):
        """Return a subset ordered by time, lat, lon, and depth (if exists)."""
        return self.subset("uspSpaceTime", table, variable, dt1, dt2,
                           lat1, lat2, lon1, lon2, depth1, depth2)

    def time_series(self, table, variable, dt1, dt2, lat1, lat2, lon1, lon2,
                    depth1, depth2, interval=None):
        """Return a subset aggregated by time.

        The results are ordered by time, lat, lon, and depth (if exists).
        They can be binned weekly, monthly, quarterly, or annually with
        ``interval``. Binning does not apply to climatological data sets.

        Raises
        ------
        InvalidIntervalError
            If ``interval`` is not recognized.
        UnsupportedOperationError
            If binning is requested for a climatological data set.
        """
        usp_name = interval_to_usp_name(interval)
        if usp_name != "uspTimeSeries" and is_climatology(table):
            raise UnsupportedOperationError(
                f"Table {table} represents a climatological data set.\n"
                "Custom binning (monthly, weekly, ...) is not supported "
                "for climatological data sets.")
        return self.subset(usp_name, table, variable, dt1, dt2,
                           lat1, lat2, lon1, lon2, depth1, depth2)

    def depth_profile(self, table, variable, dt1, dt2, lat1, lat2, lon1, lon2,
                      depth1, depth2):
        """Return a subset aggregated and ordered by depth."""
        return self.subset("uspDepthProfile", table, variable, dt1, dt2,
                           lat1, lat2, lon1, lon2, depth1, depth2)

    def section(self, table, variable, dt1, dt2, lat1, lat2, lon1, lon2,
                depth1, depth2):
        """Return a subset ordered by time, lat, lon, and depth."""
        return self.subset("uspSectionMap", table, variable, dt1, dt2,
                           lat1, lat2, lon1, lon2, depth1, depth2)

    # Colocalization

    def match(self, source_table, source_var, target_tables, target_vars,
              dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2,
              temporal_tolerance, lat_tolerance, lon_tolerance, depth_tolerance):
        """Colocalize a source variable with one or more target variables.

        The tolerances set the matching boundaries between the source and
        target data sets. Each may be a scalar or one value per target.

        Returns
        -------
        pandas.DataFrame
            The source variable joined with the target variables.
        """
        return Match(self, "uspMatch", source_table, source_var,
                     target_tables, target_vars,
                     dt1, dt2, lat1, lat2, lon1, lon2, depth1, depth2,
                     temporal_tolerance, lat_tolerance, lon_tolerance,
                     depth_tolerance).compile()

    def along_track(self, cruise, target_tables, target_vars, depth1, depth2,
                    temporal_tolerance, lat_tolerance, lon_tolerance,
                    depth_tolerance):
        """Colocalize a cruise track with the target variables."""
        return along_track(self, cruise, target_tables, target_vars,
                           depth1, depth2, temporal_tolerance, lat_tolerance,
                           lon_tolerance, depth_tolerance)
