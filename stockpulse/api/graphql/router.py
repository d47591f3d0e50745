from typing import Any, Dict

from fastapi import Depends, Request
from strawberry.fastapi import GraphQLRouter

from stockpulse.api.graphql.schema import schema
from stockpulse.core.auth import CurrentCaller, get_current_caller
from stockpulse.services.ledger import LedgerStore, get_ledger_store

async def get_context(
    request: Request,
    caller: CurrentCaller = Depends(get_current_caller),
    store: LedgerStore = Depends(get_ledger_store),
) -> Dict[str, Any]:
    """
    Creates a context for GraphQL resolvers with the request, the caller and the ledger store.
    """
    return {
        "request": request,
        "caller": caller,
        "store": store
    }

# Create a GraphQL router for FastAPI
graphql_router = GraphQLRouter(
    schema,
    context_getter=get_context,
    graphiql=True  # Enable GraphiQL interface for development
)
