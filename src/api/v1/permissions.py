"""Custom DRF permissions for the field force API."""
from rest_framework.permissions import BasePermission


def acting_delegate(user):
    """Delegate profile linked to ``user``, or ``None``."""
    return getattr(user, "delegate_profile", None)


class IsFieldForceMember(BasePermission):
    """Allow users linked to a delegate profile, and superusers."""

    message = "Aucun profil de delegue n'est associe a votre compte."

    def has_permission(self, request, view):
        user = request.user
        if not (user and user.is_authenticated):
            return False
        return bool(user.is_superuser or acting_delegate(user) is not None)


class CanRecordVisit(BasePermission):
    """Only the delegate owning the assignment records visits on it."""

    message = "Seul le delegue de cette affectation peut enregistrer une visite."

    def has_object_permission(self, request, view, obj):
        if request.user.is_superuser:
            return True
        delegate = acting_delegate(request.user)
        return delegate is not None and obj.delegate_id == delegate.pk
