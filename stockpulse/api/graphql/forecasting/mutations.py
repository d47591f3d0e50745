import strawberry
from typing import List
from strawberry.types import Info

from stockpulse.api.graphql.forecasting.types import DemandPrediction
from stockpulse.api.graphql.permissions import OwnerOrAdminPermission
from stockpulse.core.config import get_settings

settings = get_settings()


@strawberry.type
class ForecastingMutation:
    @strawberry.mutation(permission_classes=[OwnerOrAdminPermission])
    async def run_demand_prediction(
        self,
        info: Info,
        days_ahead: int = settings.DEMAND_DAYS_AHEAD,
    ) -> List[DemandPrediction]:
        """Append a demand prediction snapshot for every product."""
        from stockpulse.api.graphql.forecasting.resolvers import resolve_run_demand_prediction
        return await resolve_run_demand_prediction(info, days_ahead)
