import strawberry

# Import feature queries and mutations
from stockpulse.api.graphql.forecasting.queries import ForecastingQuery
from stockpulse.api.graphql.forecasting.mutations import ForecastingMutation
from stockpulse.api.graphql.assistant.mutations import AssistantMutation

# Define root Query type by combining all feature queries
@strawberry.type
class Query(ForecastingQuery):
    pass

# Define root Mutation type by combining all feature mutations
@strawberry.type
class Mutation(ForecastingMutation, AssistantMutation):
    pass

# Create schema
schema = strawberry.Schema(query=Query, mutation=Mutation)
