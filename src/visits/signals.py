"""Signals: drop cached indicators when visit inputs change."""
from __future__ import annotations

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from performance.cache import invalidate_on_commit


def _delegate_id(event):
    from visits.models import VisitAssignment

    try:
        return event.assignment.delegate_id
    except VisitAssignment.DoesNotExist:
        # Cascade from a deleted assignment; its own signal covers the nodes.
        return None


@receiver(post_save, sender="visits.VisitEvent")
def on_visit_event_saved(sender, instance, created, **kwargs):
    invalidate_on_commit(
        delegate_id=_delegate_id(instance),
        visit_assignment_id=instance.assignment_id,
        warm=created,
    )


@receiver(post_delete, sender="visits.VisitEvent")
def on_visit_event_deleted(sender, instance, **kwargs):
    invalidate_on_commit(
        delegate_id=_delegate_id(instance),
        visit_assignment_id=instance.assignment_id,
    )


@receiver(pre_save, sender="visits.VisitAssignment")
def on_visit_assignment_pre_save(sender, instance, **kwargs):
    if instance._state.adding:
        instance._previous_delegate_id = None
        return
    instance._previous_delegate_id = (
        sender.objects.filter(pk=instance.pk).values_list("delegate_id", flat=True).first()
    )


@receiver(post_save, sender="visits.VisitAssignment")
@receiver(post_delete, sender="visits.VisitAssignment")
def on_visit_assignment_changed(sender, instance, **kwargs):
    invalidate_on_commit(
        delegate_id=instance.delegate_id,
        previous_delegate_id=getattr(instance, "_previous_delegate_id", None),
        visit_assignment_id=instance.pk,
    )
