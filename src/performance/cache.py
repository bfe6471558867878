"""Cache of derived indicators, keyed by generation counters.

Derived values are never stored in the database. They are cached under keys
that embed a generation number per assignment, per hierarchy node and for the
hierarchy as a whole; invalidating means bumping the relevant generations so
older entries are simply never read again and expire on their own.
"""
from __future__ import annotations

import logging

from django.conf import settings
from django.core.cache import cache
from django.db import transaction

from performance.hierarchy import MAX_DEPTH

logger = logging.getLogger(__name__)

KEY_PREFIX = "perf"

SCOPE_VISIT_ASSIGNMENT = "visit_assignment"
SCOPE_SALES_ASSIGNMENT = "sales_assignment"
SCOPE_NODE = "node"
SCOPE_HIERARCHY = "hierarchy"


def _generation_key(scope: str, ident) -> str:
    return f"{KEY_PREFIX}:gen:{scope}:{ident}"


def get_generation(scope: str, ident="all") -> int:
    return cache.get_or_set(_generation_key(scope, ident), 1, timeout=None)


def bump_generation(scope: str, ident="all") -> int:
    key = _generation_key(scope, ident)
    try:
        return cache.incr(key)
    except ValueError:
        # Unknown key: the next reader would start at 1, so start past it.
        cache.set(key, 2, timeout=None)
        return 2


def metrics_key(scope: str, ident, *parts) -> str:
    """Versioned key for one cached computation about ``(scope, ident)``."""
    suffix = ":".join(str(part) for part in parts)
    return (
        f"{KEY_PREFIX}:{scope}:{ident}"
        f":h{get_generation(SCOPE_HIERARCHY)}"
        f":g{get_generation(scope, ident)}"
        f":{suffix}"
    )


def get_or_compute(scope: str, ident, parts, compute):
    key = metrics_key(scope, ident, *parts)
    value = cache.get(key)
    if value is not None:
        return value
    value = compute()
    cache.set(key, value, timeout=settings.PERFORMANCE_CACHE_TIMEOUT)
    return value


def ancestor_chain(delegate_id) -> list:
    """``delegate_id`` followed by its supervisors, read from the database."""
    from organization.models import Delegate

    chain = []
    current = delegate_id
    while current is not None and current not in chain and len(chain) <= MAX_DEPTH:
        chain.append(current)
        current = (
            Delegate.objects.filter(pk=current)
            .values_list("supervisor_id", flat=True)
            .first()
        )
    return chain


def invalidate_nodes(delegate_id) -> list:
    node_ids = ancestor_chain(delegate_id)
    for node_id in node_ids:
        bump_generation(SCOPE_NODE, node_id)
    return node_ids


def invalidate_visit_assignment(assignment_id, delegate_id) -> list:
    bump_generation(SCOPE_VISIT_ASSIGNMENT, assignment_id)
    node_ids = invalidate_nodes(delegate_id)
    logger.debug(
        "Invalidated visit assignment %s and nodes %s", assignment_id, node_ids,
    )
    return node_ids


def invalidate_sales_assignment(assignment_id, delegate_id) -> list:
    bump_generation(SCOPE_SALES_ASSIGNMENT, assignment_id)
    node_ids = invalidate_nodes(delegate_id)
    logger.debug(
        "Invalidated sales assignment %s and nodes %s", assignment_id, node_ids,
    )
    return node_ids


def invalidate_hierarchy() -> None:
    bump_generation(SCOPE_HIERARCHY)
    logger.debug("Invalidated every cached indicator after a hierarchy change")


def invalidate_on_commit(
    *,
    delegate_id,
    previous_delegate_id=None,
    visit_assignment_id=None,
    sales_assignment_id=None,
    warm: bool = False,
) -> None:
    """Invalidate after the surrounding transaction commits, then warm the nodes.

    ``previous_delegate_id`` is the former owner of a reassigned row; its
    ancestor chain still holds the row in cached rollups.
    """

    def _dispatch() -> None:
        try:
            if visit_assignment_id is not None:
                node_ids = invalidate_visit_assignment(visit_assignment_id, delegate_id)
            elif sales_assignment_id is not None:
                node_ids = invalidate_sales_assignment(sales_assignment_id, delegate_id)
            else:
                node_ids = invalidate_nodes(delegate_id)
            if previous_delegate_id is not None and previous_delegate_id != delegate_id:
                node_ids += [
                    node_id
                    for node_id in invalidate_nodes(previous_delegate_id)
                    if node_id not in node_ids
                ]
        except Exception as exc:
            # Never let a cache outage crash a business transaction.
            logger.error("performance cache invalidation failed: %s", exc, exc_info=True)
            return

        if not (warm and settings.PERFORMANCE_WARM_CACHE_ON_VISIT and node_ids):
            return
        try:
            from performance.tasks import warm_node_metrics

            warm_node_metrics.delay(node_ids=[str(node_id) for node_id in node_ids])
        except Exception as exc:
            logger.warning("performance warm-up dispatch failed: %s", exc, exc_info=True)

    # Fallback to immediate dispatch where no DB transaction is available.
    try:
        transaction.on_commit(_dispatch)
    except Exception:
        _dispatch()
