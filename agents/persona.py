"""
Persona: a reusable voice/tone/language profile.

A persona never calls the LLM itself. It renders the VOICE & STYLE fragment
that every drafting prompt of a hub is prefixed with.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from agents.base import AgentTruth, format_learned_context


@dataclass(frozen=True)
class Persona:
    id: str
    name: str
    description: str
    language: str = "English"
    accent: str = "Standard"
    tone: str = "Neutral"
    role_description: str = ""
    model: Optional[str] = None
    truths: Tuple[AgentTruth, ...] = ()

    def render_instructions(self, topic: str, goal: str, audience: str,
                            language: Optional[str] = None) -> str:
        """
        Render the persona's instruction fragment.

        Args:
            topic: Subject of the hub
            goal: What the hub should achieve
            audience: Target readers
            language: Overrides the persona's own language when given

        Returns:
            Deterministic instruction text
        """
        role = self.role_description or f"You are {self.name}. {self.description}"
        learned = format_learned_context(self.truths)

        instructions = "\n".join([
            "ROLE:",
            role,
            "",
            "VOICE & STYLE:",
            f"- LANGUAGE: Must write exclusively in {language or self.language}.",
            f"- ACCENT: {self.accent}",
            f"- TONE: {self.tone}.",
            "",
            "CONTEXT:",
            f'Subject: "{topic}"',
            f'Goal: "{goal}"',
            f'Target Audience: "{audience}"',
        ])

        if learned:
            instructions += f"\n\nLEARNED CONTEXT (MANDATORY GUIDELINES):\n{learned}"

        return instructions


BUILTIN_PERSONAS: Dict[str, Persona] = {
    p.id: p for p in (
        Persona(
            id="standard",
            name="Standard",
            description="Neutral, professional, and highly clear. Ideal for formal documentation, "
                        "API references, and global audiences.",
            language="English",
            accent="Neutral / Standard. Avoid slang, regionalisms, or biased idioms.",
            tone="Professional, Objective, Concise",
            role_description="You are a professional Technical Writer focused on clarity and formal documentation.",
        ),
        Persona(
            id="arg-woman-dev",
            name="Sofía",
            description="Senior female engineer from Argentina. Expert, professional, uses voseo.",
            language="Spanish",
            accent='Argentinian (Rioplatense / Voseo). Use "voseo" (e.g., "vení", "hacelo", "fijate").',
            tone="Expert, Professional, Culturally Authentic",
            role_description="You are Sofía, a Senior Software Engineer and Tech Lead from Buenos Aires. "
                             "You speak from technical authority.",
        ),
        Persona(
            id="sarcastic-es",
            name="Mateo",
            description="Elite senior developer from Spain. Heavily sarcastic and cynical. "
                        "Best for high-level technical critiques.",
            language="Spanish",
            accent='Peninsular (Spain / Madrileño). Use phrasing like "vale", "venga" or "cutre".',
            tone="Highly Sarcastic, Professional, Cynical",
            role_description="You are Mateo, a senior engineer from Madrid who has zero patience "
                             "for suboptimal code.",
        ),
    )
}
