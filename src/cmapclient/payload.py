"""Request payloads: query string encoding and typed stored-procedure arguments."""
from dataclasses import dataclass, fields


def encode_payload(payload):
    """Construct the query string appended to the base URL and route.

    Pairs are joined in insertion order and spaces are replaced with
    ``%20``. No other character is escaped, values are expected to be
    valid SQL snippets.

    Parameters
    ----------
    payload : dict
        Ordered mapping of query parameter names to values.

    Returns
    -------
    str
        Encoded query string, empty for an empty payload.
    """
    query_string = "&".join(f"{name}={value}" for name, value in payload.items())
    return query_string.replace(" ", "%20")


@dataclass
class SpaceTime:
    """Space-time constraint of a stored-procedure subset.

    Field order is the positional order expected by the service and must
    not change.
    """
    table: str
    variable: str
    dt1: str
    dt2: str
    lat1: float
    lat2: float
    lon1: float
    lon2: float
    depth1: float
    depth2: float

    def args(self, sp_name):
        """Return the 11 positional stored-procedure arguments."""
        return [getattr(self, field.name) for field in fields(self)] + [sp_name]

    def to_payload(self, sp_name):
        """Return the named wire payload for stored procedure ``sp_name``.

        Parameters
        ----------
        sp_name : str
            Name of the stored procedure, e.g. 'uspSpaceTime'.

        Returns
        -------
        dict
            Mapping in the order tableName, fields, dt1, dt2, lat1, lat2,
            lon1, lon2, depth1, depth2, spName.
        """
        return dict(zip(SP_PARAMS, self.args(sp_name)))


SP_PARAMS = ("tableName", "fields", "dt1", "dt2", "lat1", "lat2",
             "lon1", "lon2", "depth1", "depth2", "spName")


@dataclass(frozen=True)
class CruiseBounds:
    """Spatial and temporal extent of a cruise."""
    ID: int
    dt1: str
    dt2: str
    lat1: float
    lat2: float
    lon1: float
    lon2: float

    @classmethod
    def from_frame(cls, df):
        """Build from the first row of a cruise bounds table."""
        row = df.iloc[0]
        return cls(**{field.name: row[field.name] for field in fields(cls)})
