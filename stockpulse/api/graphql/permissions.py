import strawberry
from typing import Any

from stockpulse.core.auth import CurrentCaller


class OwnerOrAdminPermission(strawberry.BasePermission):
    message = "Only owners and admins can access forecasting analytics"

    def has_permission(
        self,
        source: Any,
        info: strawberry.types.Info,
        **kwargs
    ) -> bool:
        caller: CurrentCaller = info.context.get("caller")
        return caller is not None and caller.is_owner_or_admin
