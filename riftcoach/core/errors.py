"""Error taxonomy for the scoring core.

Only conditions the caller must act on are exceptions. A thin cohort sample
is reported through ``CohortPercentiles.low_confidence``; cache failures are
logged by the cache adapter and behave like a miss.
"""


class RiftcoachError(Exception):
    """Base class for all scoring-core errors."""


class DataUnavailableError(RiftcoachError):
    """A required Match record is missing or the data source query failed."""


class DataSourceTimeoutError(DataUnavailableError):
    """The data source did not answer within the configured timeout."""


class InvalidParameterError(RiftcoachError, ValueError):
    """Unrecognized role/champion or an empty time window; raised before any query."""


class UpstreamScoringError(RiftcoachError):
    """The badge narrator was unreachable or returned a malformed response."""
