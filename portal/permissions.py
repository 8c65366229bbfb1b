"""
Custom permission classes for role and hospital based access control.
"""
from rest_framework.permissions import BasePermission


class IsAdminRole(BasePermission):
    """Allow access only to hospital administrators."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == "admin")


class IsPatientRole(BasePermission):
    """Allow access only to users with the patient role."""
    def has_permission(self, request, view) -> bool:  # type: ignore[override]
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) == "patient")


class IsGovernmentOrAdmin(BasePermission):
    """government officers or hospital admins."""
    def has_permission(self, request, view) -> bool:
        user = getattr(request, "user", None)
        return bool(user and user.is_authenticated and getattr(user, "role", None) in {"government", "admin"})


def is_hospital_admin_of(user, obj) -> bool:
    """True if ``user`` administers the hospital that ``obj`` belongs to (expects `obj.hospital_id`)."""
    if not (user and getattr(user, "is_authenticated", False)):
        return False
    if getattr(user, "role", None) != "admin":
        return False
    hospital_id = getattr(user, "hospital_id", None)
    return hospital_id is not None and getattr(obj, "hospital_id", None) == hospital_id
