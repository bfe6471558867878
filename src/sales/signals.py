"""Signals: drop cached indicators when sales targets or achievements change."""
from __future__ import annotations

from django.db.models.signals import post_delete, post_save, pre_save
from django.dispatch import receiver

from performance.cache import invalidate_on_commit


@receiver(pre_save, sender="sales.SalesAssignment")
def on_sales_assignment_pre_save(sender, instance, **kwargs):
    """Capture the previous owner so a reassignment refreshes both rollups."""
    if instance._state.adding:
        instance._previous_delegate_id = None
        return
    instance._previous_delegate_id = (
        sender.objects.filter(pk=instance.pk).values_list("delegate_id", flat=True).first()
    )


@receiver(post_save, sender="sales.SalesAssignment")
@receiver(post_delete, sender="sales.SalesAssignment")
def on_sales_assignment_changed(sender, instance, **kwargs):
    invalidate_on_commit(
        delegate_id=instance.delegate_id,
        previous_delegate_id=getattr(instance, "_previous_delegate_id", None),
        sales_assignment_id=instance.pk,
    )
