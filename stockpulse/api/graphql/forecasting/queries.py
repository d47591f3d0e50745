import strawberry
from typing import List, Optional
from strawberry.types import Info

from stockpulse.api.graphql.forecasting.types import (
    BusinessReport,
    DemandPrediction,
    ForecastSummary,
    ReorderRecommendation,
    SalesForecast,
    SlowMovingReport,
    StockDepletion,
)
from stockpulse.api.graphql.permissions import OwnerOrAdminPermission


@strawberry.type
class ForecastingQuery:
    @strawberry.field(permission_classes=[OwnerOrAdminPermission])
    async def forecast_summary(self, info: Info) -> ForecastSummary:
        from stockpulse.api.graphql.forecasting.resolvers import resolve_forecast_summary
        return await resolve_forecast_summary(info)

    @strawberry.field(permission_classes=[OwnerOrAdminPermission])
    async def sales_forecast(
        self,
        info: Info,
        range: Optional[str] = "30",
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> SalesForecast:
        from stockpulse.api.graphql.forecasting.resolvers import resolve_sales_forecast
        return await resolve_sales_forecast(info, range, start_date, end_date)

    @strawberry.field(permission_classes=[OwnerOrAdminPermission])
    async def stock_depletion(self, info: Info) -> List[StockDepletion]:
        from stockpulse.api.graphql.forecasting.resolvers import resolve_stock_depletion
        return await resolve_stock_depletion(info)

    @strawberry.field(permission_classes=[OwnerOrAdminPermission])
    async def reorder_recommendations(self, info: Info) -> List[ReorderRecommendation]:
        from stockpulse.api.graphql.forecasting.resolvers import resolve_reorder_recommendations
        return await resolve_reorder_recommendations(info)

    @strawberry.field(permission_classes=[OwnerOrAdminPermission])
    async def slow_moving(self, info: Info, days: Optional[int] = None) -> SlowMovingReport:
        from stockpulse.api.graphql.forecasting.resolvers import resolve_slow_moving
        return await resolve_slow_moving(info, days)

    @strawberry.field(permission_classes=[OwnerOrAdminPermission])
    async def business_report(
        self,
        info: Info,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
    ) -> BusinessReport:
        from stockpulse.api.graphql.forecasting.resolvers import resolve_business_report
        return await resolve_business_report(info, start_date, end_date)

    @strawberry.field(permission_classes=[OwnerOrAdminPermission])
    async def latest_predictions(self, info: Info) -> List[DemandPrediction]:
        from stockpulse.api.graphql.forecasting.resolvers import resolve_latest_predictions
        return await resolve_latest_predictions(info)
