import strawberry

from stockpulse.schemas.forecast import InsightImpact, ReorderTimeframe, RiskLevel
from stockpulse.schemas.ledger import StockoutRisk

# Enums shared across forecasting types
RiskLevelEnum = strawberry.enum(RiskLevel, name="RiskLevel")
ReorderTimeframeEnum = strawberry.enum(ReorderTimeframe, name="ReorderTimeframe")
InsightImpactEnum = strawberry.enum(InsightImpact, name="InsightImpact")
StockoutRiskEnum = strawberry.enum(StockoutRisk, name="StockoutRisk")
