"""Cohort percentile builder.

Sampling is recency-biased on purpose: the cohort is the most recent
``sample_size`` matching rows, not a uniform sample. That keeps percentiles
close to the current patch, at the cost of skewing them right after a patch
that changed the champion. Low-volume champion/role pairs are flagged
``low_confidence`` instead of rejected.
"""

import logging
from collections.abc import Iterable
from datetime import datetime

from pydantic import ValidationError

from riftcoach.config import get_settings
from riftcoach.contracts.cohort import CohortPercentiles, CohortQuery
from riftcoach.contracts.common import ALLOWED_QUEUE_IDS, Role
from riftcoach.contracts.match import MatchRecord
from riftcoach.contracts.metrics import MetricRow
from riftcoach.core.aggregation.stages import (
    by_champion,
    by_queue,
    by_role,
    filter_stage,
    in_window,
    percentile_stage,
    run_stages,
    sort_stage,
    take_stage,
    wins_only,
)
from riftcoach.core.errors import DataUnavailableError, InvalidParameterError
from riftcoach.core.extraction import extract_metric_row
from riftcoach.core.roles import parse_role, participant_role
from riftcoach.core.zoning import ZoneClassifier

logger = logging.getLogger(__name__)

COHORT_METRICS: tuple[str, ...] = (
    "kills",
    "deaths",
    "assists",
    "cs",
    "gold_earned",
    "gold_at_10",
    "cs_at_10",
    "gold_at_15",
    "cs_at_15",
    "dpm",
    "dtpm",
    "kpm",
    "apm",
    "deaths_per_min",
)

def build_cohort_query(
    champion_name: str,
    role: str | Role,
    start: datetime,
    end: datetime,
    *,
    wins_only: bool = False,
    sample_size: int = 1000,
    sort_descending: bool = True,
    queue_ids: Iterable[int] = ALLOWED_QUEUE_IDS,
) -> CohortQuery:
    """Validate caller input into a ``CohortQuery``.

    Raises:
        InvalidParameterError: blank champion, unknown role, start >= end, or a
            non-positive sample size.
    """
    if not champion_name or not champion_name.strip():
        raise InvalidParameterError("champion_name is required")
    canonical = parse_role(role)
    try:
        return CohortQuery(
            champion_name=champion_name.strip(),
            role=canonical,
            start=start,
            end=end,
            wins_only=wins_only,
            sample_size=sample_size,
            sort_descending=sort_descending,
            queue_ids=tuple(queue_ids),
        )
    except ValidationError as e:
        raise InvalidParameterError(str(e)) from e


def cohort_rows(
    records: Iterable[MatchRecord],
    query: CohortQuery,
    *,
    classifier: ZoneClassifier | None = None,
) -> list[MetricRow]:
    """Metric Rows of the cohort participant in each match, sampled per ``query``."""
    wanted = query.champion_name.casefold()
    rows: list[MetricRow] = []
    for record in records:
        for participant in record.match.info.participants:
            if participant.champion_name.casefold() != wanted:
                continue
            if participant_role(participant) != query.role:
                continue
            try:
                rows.append(
                    extract_metric_row(
                        record.match,
                        record.timeline,
                        participant_id=participant.participant_id,
                        classifier=classifier,
                    )
                )
            except DataUnavailableError as e:
                logger.warning(f"Skipping cohort match {record.match_id}: {e}")

    predicates = [
        by_champion(query.champion_name),
        by_role(query.role),
        by_queue(query.queue_ids),
        in_window(query.start_ms, query.end_ms),
    ]
    if query.wins_only:
        predicates.append(wins_only())

    return run_stages(
        rows,
        filter_stage(*predicates),
        sort_stage(descending=query.sort_descending),
        take_stage(query.sample_size),
    )


def build_cohort_percentiles(
    rows: list[MetricRow],
    query: CohortQuery,
    *,
    min_reliable_sample: int | None = None,
) -> CohortPercentiles:
    """Percentile distribution of ``COHORT_METRICS`` over already-sampled rows.

    ``min_reliable_sample`` defaults to ``Settings.min_reliable_sample``.
    """
    if min_reliable_sample is None:
        min_reliable_sample = get_settings().min_reliable_sample
    sample_size = len(rows)
    low_confidence = sample_size < min_reliable_sample
    if low_confidence:
        logger.info(
            f"Cohort {query.champion_name}/{query.role} has only {sample_size} rows; "
            f"percentiles flagged low confidence"
        )
    return CohortPercentiles(
        champion_name=query.champion_name,
        role=query.role,
        start=query.start,
        end=query.end,
        wins_only=query.wins_only,
        sample_size=sample_size,
        low_confidence=low_confidence,
        metrics=percentile_stage(rows, COHORT_METRICS),
    )
