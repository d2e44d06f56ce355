"""Chat session commands."""

from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from customer_care.agent.agent import SupportAgent
from customer_care.chat.chat import ChatSession
from customer_care.domain import customer_care, logger


@customer_care.command(part_of="ChatSession")
class StartChatSession:
    user_id = Identifier()
    topic = String(max_length=255)
    priority = String(max_length=20)


@customer_care.command(part_of="ChatSession")
class AssignChatAgent:
    session_id = Identifier(required=True)
    agent_id = Identifier(required=True)


@customer_care.command(part_of="ChatSession")
class AddChatMessage:
    session_id = Identifier(required=True)
    sender_type = String(required=True, max_length=20)
    body = Text(required=True)
    sender_id = Identifier()


@customer_care.command(part_of="ChatSession")
class EndChatSession:
    session_id = Identifier(required=True)


@customer_care.command(part_of="ChatSession")
class UpdateChatStatus:
    session_id = Identifier(required=True)
    status = String(required=True, max_length=20)


@customer_care.command_handler(part_of=ChatSession)
class ChatSessionHandler:
    def _mutate(self, session_id, change):
        repo = current_domain.repository_for(ChatSession)
        session = repo.get(session_id)
        result = change(session)
        repo.add(session)
        return result

    @handle(StartChatSession)
    def start(self, command):
        session = ChatSession.start(command.user_id, command.topic, command.priority)
        current_domain.repository_for(ChatSession).add(session)
        logger.info("Chat session started", session_id=str(session.id))
        return str(session.id)

    @handle(AssignChatAgent)
    def assign_agent(self, command):
        agent = current_domain.repository_for(SupportAgent).get(command.agent_id)
        agent.assert_available()
        return self._mutate(command.session_id, lambda s: s.assign_agent(agent.id) or s.status)

    @handle(AddChatMessage)
    def add_message(self, command):
        message = self._mutate(
            command.session_id, lambda s: s.add_message(command.sender_type, command.body, command.sender_id)
        )
        return str(message.id)

    @handle(EndChatSession)
    def end(self, command):
        self._mutate(command.session_id, lambda s: s.end())
        logger.info("Chat session ended", session_id=str(command.session_id))

    @handle(UpdateChatStatus)
    def update_status(self, command):
        return self._mutate(command.session_id, lambda s: s.change_status(command.status) or s.status)
