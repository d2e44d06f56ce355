"""SupportAgent aggregate and its commands.

Roster entries (shift labels such as ``mon-am``) and skills are stored as JSON
lists of normalized, de-duplicated strings.
"""

import json

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Identifier, String, Text
from protean.utils.globals import current_domain

from customer_care.domain import customer_care, logger
from shared.clock import utcnow


def _normalize(values) -> list[str]:
    cleaned = []
    for value in values or []:
        value = (value or "").strip().lower()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


def _loads(value) -> list:
    return json.loads(value) if value else []


@customer_care.aggregate
class SupportAgent:
    name = String(required=True, max_length=200)
    roster = Text()  # JSON list
    skills = Text()  # JSON list
    is_active = Boolean(default=True)
    created_at = DateTime()

    @classmethod
    def create(cls, name, roster=None, skills=None):
        if not name or not name.strip():
            raise ValidationError({"name": ["Agent name cannot be empty"]})
        return cls(
            name=name.strip(),
            roster=json.dumps(_normalize(roster)),
            skills=json.dumps(_normalize(skills)),
            created_at=utcnow(),
        )

    def skill_list(self) -> list[str]:
        return json.loads(self.skills) if self.skills else []

    def roster_list(self) -> list[str]:
        return json.loads(self.roster) if self.roster else []

    def has_skill(self, skill) -> bool:
        return (skill or "").strip().lower() in self.skill_list()

    def update_skills(self, skills):
        self.skills = json.dumps(_normalize(skills))

    def update_roster(self, roster):
        self.roster = json.dumps(_normalize(roster))

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"is_active": ["Agent is already inactive"]})
        self.is_active = False

    def assert_available(self):
        if not self.is_active:
            raise ValidationError({"agent_id": [f"Agent {self.id} is inactive"]})


@customer_care.command(part_of=SupportAgent)
class CreateSupportAgent:
    name = String(required=True, max_length=200)
    roster = Text()  # JSON list
    skills = Text()  # JSON list


@customer_care.command(part_of=SupportAgent)
class UpdateAgentSkills:
    agent_id = Identifier(required=True)
    skills = Text()  # JSON list


@customer_care.command(part_of=SupportAgent)
class UpdateAgentRoster:
    agent_id = Identifier(required=True)
    roster = Text()  # JSON list


@customer_care.command(part_of=SupportAgent)
class DeactivateAgent:
    agent_id = Identifier(required=True)


@customer_care.command_handler(part_of=SupportAgent)
class SupportAgentHandler:
    @handle(CreateSupportAgent)
    def create(self, command):
        agent = SupportAgent.create(command.name, _loads(command.roster), _loads(command.skills))
        current_domain.repository_for(SupportAgent).add(agent)
        logger.info("Support agent created", agent_id=str(agent.id))
        return str(agent.id)

    @handle(UpdateAgentSkills)
    def update_skills(self, command):
        repo = current_domain.repository_for(SupportAgent)
        agent = repo.get(command.agent_id)
        agent.update_skills(_loads(command.skills))
        repo.add(agent)
        return agent.skill_list()

    @handle(UpdateAgentRoster)
    def update_roster(self, command):
        repo = current_domain.repository_for(SupportAgent)
        agent = repo.get(command.agent_id)
        agent.update_roster(_loads(command.roster))
        repo.add(agent)
        return agent.roster_list()

    @handle(DeactivateAgent)
    def deactivate(self, command):
        repo = current_domain.repository_for(SupportAgent)
        agent = repo.get(command.agent_id)
        agent.deactivate()
        repo.add(agent)
