"""Signals: a reporting-line change moves assignments between rollups."""
from __future__ import annotations

import logging

from django.db import transaction
from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from performance.cache import invalidate_hierarchy

logger = logging.getLogger(__name__)


def _invalidate() -> None:
    try:
        invalidate_hierarchy()
    except Exception as exc:
        logger.error("performance cache invalidation failed: %s", exc, exc_info=True)


@receiver(pre_save, sender="organization.Delegate")
def on_delegate_pre_save(sender, instance, **kwargs):
    """Capture the fields cached rollups depend on, to detect changes in post_save."""
    if instance._state.adding:
        instance._previous_snapshot = None
        return
    instance._previous_snapshot = (
        sender.objects.filter(pk=instance.pk)
        .values("supervisor_id", "role", "first_name", "last_name")
        .first()
    )


@receiver(post_save, sender="organization.Delegate")
def on_delegate_saved(sender, instance, created, **kwargs):
    if created and instance.supervisor_id is None:
        return
    previous = getattr(instance, "_previous_snapshot", None)
    current = {
        "supervisor_id": instance.supervisor_id,
        "role": instance.role,
        "first_name": instance.first_name,
        "last_name": instance.last_name,
    }
    # Reporting line, role and names all end up in cached node reports.
    if not created and previous == current:
        return
    try:
        transaction.on_commit(_invalidate)
    except Exception:
        _invalidate()


@receiver(post_delete, sender="organization.Delegate")
def on_delegate_deleted(sender, instance, **kwargs):
    try:
        transaction.on_commit(_invalidate)
    except Exception:
        _invalidate()
