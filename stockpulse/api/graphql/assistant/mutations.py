import strawberry
from strawberry.types import Info

from stockpulse.core.auth import CurrentCaller
from stockpulse.services.assistant.chat import ChatService


@strawberry.type
class AssistantMutation:
    @strawberry.mutation
    async def chat(self, info: Info, message: str) -> str:
        """Answer a free-text assistant message for the calling user's role."""
        caller: CurrentCaller = info.context["caller"]
        return await ChatService.chat(info.context["store"], message, caller.role, caller.id)
