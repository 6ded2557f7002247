# apps/api/permissions.py
"""
Permissions for the REST API.

Everything requires an authenticated user (see REST_FRAMEWORK settings);
reviewing counts additionally requires the approve_stockcount permission.
"""
from rest_framework import permissions


class CanApproveStockCounts(permissions.BasePermission):
    """
    User may approve or reject submitted stock counts.

    Granted through the 'stock_counts.approve_stockcount' permission,
    directly or via a group. Superusers always pass.
    """
    message = "You do not have permission to review stock counts."

    def has_permission(self, request, view):
        if not request.user or not request.user.is_authenticated:
            return False
        return request.user.has_perm('stock_counts.approve_stockcount')
