"""Metric recording helpers for answers, searches and ingestion runs."""

from __future__ import annotations

from helpdesk_kb.observability.logger import get_logger

logger = get_logger("metrics")


def log_answer_metrics(
    outcome: str,
    attempts: int,
    model_calls: int,
    searches: int,
    duration_ms: float,
) -> None:
    logger.info(
        "answer_metrics",
        outcome=outcome,
        attempts=attempts,
        model_calls=model_calls,
        searches=searches,
        duration_ms=round(duration_ms, 2),
    )


def log_search_metrics(limit: int, top_scores: list[float], num_results: int) -> None:
    logger.info(
        "search_metrics",
        limit=limit,
        top_scores=[round(s, 4) for s in top_scores[:5]],
        num_results=num_results,
    )


def log_ingestion_metrics(
    channel_id: str,
    pairs_found: int,
    questions_stored: int,
    citations_stored: int,
    pairs_skipped: int,
) -> None:
    logger.info(
        "ingestion_metrics",
        channel_id=channel_id,
        pairs_found=pairs_found,
        questions_stored=questions_stored,
        citations_stored=citations_stored,
        pairs_skipped=pairs_skipped,
    )
