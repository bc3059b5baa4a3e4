"""
Writer: a named drafting strategy for one hub section.

Responsibilities:
1. WRITING STRATEGY: Render the strategy fragment for the drafting prompt
2. SECTION PROMPT: Combine persona voice, assembler structure and the
   section's heading/goal into the single prompt sent to the provider

Writers are pure records; the orchestrator performs the provider call.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from agents.base import AgentTruth, format_learned_context


@dataclass(frozen=True)
class Writer:
    id: str
    description: str
    writing_strategy: str
    model: Optional[str] = None
    truths: Tuple[AgentTruth, ...] = ()

    def render_strategy(self) -> str:
        """Render this writer's strategy fragment."""
        fragment = f"WRITING STRATEGY ({self.id}):\n{self.writing_strategy}"
        learned = format_learned_context(self.truths)
        if learned:
            fragment += f"\n\nLEARNED CONTEXT (MANDATORY GUIDELINES):\n{learned}"
        return fragment


def progress_label(index: int, total: int) -> str:
    """Where a section sits in the hub: Start, In-Progress or Conclusion."""
    if index == 0:
        return "Start"
    if index == total - 1:
        return "Conclusion"
    return "In-Progress"


def build_section_prompt(persona_instructions: str, assembler_strategy: str,
                         writer_strategy: str, heading: str, goal: str,
                         index: int, total: int, feedback: Optional[str] = None) -> str:
    """
    Build the drafting prompt for one section.

    Args:
        persona_instructions: Output of Persona.render_instructions()
        assembler_strategy: Output of Assembler.render_strategy()
        writer_strategy: Output of Writer.render_strategy()
        heading: Section heading (rendered by the assembly step, not the writer)
        goal: What this section must achieve
        index: Position of the section in the blueprint
        total: Number of sections in the blueprint
        feedback: Human feedback on the previous draft, if any

    Returns:
        Prompt text
    """
    prompt = f"""{persona_instructions}

{assembler_strategy}

{writer_strategy}

### Section
SECTION HEADER: {heading}
INTENT: {goal}
PROGRESS: {progress_label(index, total)}

### Rules
1. Follow the INTENT exactly. It defines your scope boundaries.
2. Do not repeat topics reserved for other sections.
3. Do NOT include the section header or a document title in your response.
4. Output ONLY the raw markdown content. No greetings, no commentary."""

    if feedback:
        prompt += f"""

### REVISION NEEDED
USER FEEDBACK: {feedback}"""

    return prompt


BUILTIN_WRITERS: Dict[str, Writer] = {
    w.id: w for w in (
        Writer(
            id="prose",
            description="Narrative writer focused on flow, clarity and transitions.",
            writing_strategy="Focus on narrative flow, clarity, and transitions. Avoid code blocks "
                             "unless absolutely necessary to illustrate a point.",
        ),
        Writer(
            id="code",
            description="Technical writer that leads with production-ready code.",
            writing_strategy="Prioritize technical implementation. Provide clean, production-ready code "
                             "blocks. Ensure all code comments and explanations are in the target language.",
        ),
    )
}
