"""
Architect Agent: first agent in the pipeline.

Responsibilities:
1. PLANNING: Turn topic/goal/audience into a hub blueprint
2. TOOL SELECTION: Pick exactly one assembler and one persona from the
   registry manifest
3. WORKFORCE: Assign each section a writer the chosen assembler allows

Output (JSON reply of the model):
{
    "message": str,          # explanation / questions for the human
    "title": str,
    "assemblerId": str,
    "personaId": str,
    "language": str,
    "sections": [
        {"heading": str, "goal": str, "writerId": str},
        ...
    ]
}

Conversation history is kept per instance, so feedback rounds build on the
previous proposals.
"""

import json
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from agents.assembler import Assembler
from agents.base import extract_json
from utils.errors import StructuralDefect


@dataclass(frozen=True)
class SectionBlueprint:
    heading: str
    goal: str
    writer_id: str

    def to_dict(self) -> Dict:
        return {"heading": self.heading, "goal": self.goal, "writerId": self.writer_id}


@dataclass(frozen=True)
class HubBlueprint:
    title: str
    sections: Tuple[SectionBlueprint, ...]
    assembler_id: str
    persona_id: str
    language: str = "English"
    message: str = ""

    def to_dict(self) -> Dict:
        return {
            "message": self.message,
            "title": self.title,
            "assemblerId": self.assembler_id,
            "personaId": self.persona_id,
            "language": self.language,
            "sections": [s.to_dict() for s in self.sections],
        }


def _required_text(data: Dict, key: str, where: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise StructuralDefect(f"{where} is missing '{key}'")
    return value.strip()


def parse_blueprint(content: str, default_language: str = "English") -> HubBlueprint:
    """
    Parse the Architect's reply into a HubBlueprint.

    Raises:
        StructuralDefect: reply is not a JSON object, misses a required
            field, or plans no sections
    """
    try:
        data = extract_json(content)
    except json.JSONDecodeError as e:
        raise StructuralDefect(f"Architect reply is not valid JSON: {e.msg}") from e

    if not isinstance(data, dict):
        raise StructuralDefect("Architect reply is not a JSON object")

    raw_sections = data.get("sections")
    if not isinstance(raw_sections, list) or not raw_sections:
        raise StructuralDefect("Blueprint has no sections")

    sections = []
    for i, raw in enumerate(raw_sections):
        if not isinstance(raw, dict):
            raise StructuralDefect(f"Section {i + 1} is not an object")
        where = f"Section {i + 1}"
        sections.append(SectionBlueprint(
            heading=_required_text(raw, "heading", where),
            goal=_required_text(raw, "goal", where),
            writer_id=_required_text(raw, "writerId", where),
        ))

    language = data.get("language")
    message = data.get("message")
    return HubBlueprint(
        title=_required_text(data, "title", "Blueprint"),
        sections=tuple(sections),
        assembler_id=_required_text(data, "assemblerId", "Blueprint"),
        persona_id=_required_text(data, "personaId", "Blueprint"),
        language=language.strip() if isinstance(language, str) and language.strip() else default_language,
        message=message.strip() if isinstance(message, str) else "",
    )


def check_eligibility(blueprint: HubBlueprint, assembler: Assembler) -> None:
    """Raise StructuralDefect for the first section whose writer the assembler does not allow."""
    for section in blueprint.sections:
        if not assembler.is_eligible(section.writer_id):
            raise StructuralDefect(
                f"Section '{section.heading}' uses writer '{section.writer_id}', "
                f"which assembler '{assembler.id}' does not allow "
                f"(eligible: {', '.join(assembler.writer_ids) or 'none'})"
            )


class ArchitectAgent:
    """
    Architect Agent: proposes and refines the hub blueprint.

    The agent only builds prompts and parses replies; the provider call is
    passed in by the orchestrator so retries stay under its control.
    """

    def __init__(self, topic: str, goal: str, audience: str, language: str,
                 manifest: str, eligible_writers: Dict[str, List[str]]):
        self.topic = topic
        self.goal = goal
        self.audience = audience
        self.language = language
        self.system_prompt = self._build_system_prompt(manifest, eligible_writers)
        self.history: List[Tuple[str, str]] = []

    def _build_system_prompt(self, manifest: str, eligible_writers: Dict[str, List[str]]) -> str:
        writers_context = "\n".join(
            f"- {assembler_id}: {', '.join(ids)}" for assembler_id, ids in eligible_writers.items()
        )

        return f"""You are the Hub Architect. Your job is to plan a multi-section content hub.

USER BASELINE:
Topic: {self.topic}
Goal: {self.goal}
Audience: {self.audience}
Language: {self.language}

AVAILABLE TOOLS:
{manifest}

ELIGIBLE WRITERS PER ASSEMBLER:
{writers_context}

PROTOCOL:
1. Select exactly ONE assemblerId and ONE personaId from the available tools.
2. Plan 2-6 sections in reading order. Every section gets a heading, a goal and a writerId.
3. Every writerId MUST be one of the eligible writers of the selected assembler.
4. "message" explains your choices to the user, in the user's language.

OUTPUT FORMAT (JSON only, no prose around it):
{{
  "message": "...",
  "title": "...",
  "assemblerId": "...",
  "personaId": "...",
  "language": "{self.language}",
  "sections": [{{"heading": "...", "goal": "...", "writerId": "..."}}]
}}"""

    def build_prompt(self, feedback: Optional[str] = None) -> str:
        """Prompt for the next proposal, carrying earlier rounds as context."""
        request = self._request(feedback)
        if not self.history:
            return request

        rounds = "\n\n".join(
            f"USER:\n{previous_request}\n\nARCHITECT:\n{previous_reply}"
            for previous_request, previous_reply in self.history
        )
        return f"### Previous Rounds\n{rounds}\n\n### Current Request\n{request}"

    def propose(self, execute: Callable[[str, str], str],
                feedback: Optional[str] = None) -> HubBlueprint:
        """
        Run one planning round.

        Args:
            execute: Callable(prompt, system_prompt) -> reply text
            feedback: Human feedback (or a structural defect) on the last proposal

        Returns:
            Parsed HubBlueprint

        Raises:
            ProviderError: from execute, unchanged
            StructuralDefect: reply could not be parsed into a blueprint
        """
        reply = execute(self.build_prompt(feedback), self.system_prompt)
        self.history.append((self._request(feedback), reply))
        return parse_blueprint(reply, default_language=self.language)

    @staticmethod
    def _request(feedback: Optional[str]) -> str:
        request = "Analyze the baseline and provide your best blueprint."
        if feedback:
            request += f"\n\nUSER FEEDBACK: {feedback}"
        return request
