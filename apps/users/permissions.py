"""Role-based permission classes shared by the hotel and booking APIs."""

from __future__ import annotations

from rest_framework import permissions  # type: ignore


def is_platform_admin(user) -> bool:
    """ADMIN role or Django staff/superuser."""
    if not user or not user.is_authenticated:
        return False
    return hasattr(user, "is_admin") and user.is_admin()


class IsHotelOwnerOrAdmin(permissions.BasePermission):
    """
    Only hotel owners and administrators may write.

    Safe methods are open to everyone.
    """

    def has_permission(self, request, view) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS:
            return True
        user = request.user
        if not user.is_authenticated:
            return False
        if is_platform_admin(user):
            return True
        return hasattr(user, "is_hotel_owner") and user.is_hotel_owner()


class IsOwnerOrAdmin(permissions.BasePermission):
    """
    Object-level permission: user must own the object (``owner_id`` or
    ``user_id``) or be a platform administrator.
    """

    def has_object_permission(self, request, view, obj) -> bool:  # type: ignore
        if request.method in permissions.SAFE_METHODS and not hasattr(obj, "user_id"):
            return True
        user = request.user
        if is_platform_admin(user):
            return True
        owner_id = getattr(obj, "owner_id", None) or getattr(obj, "user_id", None)
        return owner_id == user.id
