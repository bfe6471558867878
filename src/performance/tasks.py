"""Celery tasks for the performance indicators."""
from __future__ import annotations

import logging

from celery import shared_task

logger = logging.getLogger(__name__)


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def warm_node_metrics(self, *, node_ids: list[str], by_product: bool = False):
    """Recompute today's cached report for each node after an input changed."""
    from performance.exceptions import NotFound
    from performance.services import build_window, node_report

    window = build_window()
    warmed = 0
    try:
        for node_id in node_ids:
            try:
                node_report(node_id, window, by_product=by_product)
            except NotFound:
                logger.info("Skipped warm-up of removed node %s", node_id)
                continue
            warmed += 1
    except Exception as exc:
        logger.exception("warm_node_metrics failed: %s", exc)
        raise self.retry(exc=exc)
    logger.info("Warmed performance cache for %d/%d nodes", warmed, len(node_ids))
    return warmed
