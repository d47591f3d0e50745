# Common module for shared Strawberry elements across features
from stockpulse.api.graphql.common.enums import (
    InsightImpactEnum,
    ReorderTimeframeEnum,
    RiskLevelEnum,
    StockoutRiskEnum,
)

__all__ = ['InsightImpactEnum', 'ReorderTimeframeEnum', 'RiskLevelEnum', 'StockoutRiskEnum']
