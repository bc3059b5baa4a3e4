"""
Assembler: a named structural strategy.

An assembler constrains which writers a hub may use and how its sections
are organized. The Architect picks one; its eligible writer ids are the
contract every SectionBlueprint is checked against before drafting.
"""

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from agents.base import AgentTruth, format_learned_context


@dataclass(frozen=True)
class Assembler:
    id: str
    description: str
    strategy_prompt: str
    writer_ids: Tuple[str, ...] = ()
    model: Optional[str] = None
    truths: Tuple[AgentTruth, ...] = ()

    def is_eligible(self, writer_id: str) -> bool:
        return writer_id in self.writer_ids

    def render_strategy(self) -> str:
        """Render the structural-strategy fragment."""
        fragment = (
            f"STRUCTURAL STRATEGY ({self.id}):\n{self.strategy_prompt}\n"
            f"ELIGIBLE WRITERS: {', '.join(self.writer_ids)}"
        )
        learned = format_learned_context(self.truths)
        if learned:
            fragment += f"\n\nLEARNED CONTEXT:\n{learned}"
        return fragment


BUILTIN_ASSEMBLERS: Dict[str, Assembler] = {
    a.id: a for a in (
        Assembler(
            id="tutorial",
            description="Dynamic step-by-step learning path. Adapts depth to topic complexity.",
            strategy_prompt="Focus on a logical progression from prerequisites to a working final product. "
                            "If the topic involves multiple stacks, create dedicated implementation "
                            "sections for each.",
            writer_ids=("prose", "code"),
        ),
        Assembler(
            id="deep-dive",
            description="Advanced architectural and performance analysis.",
            strategy_prompt="Focus on internals, trade-offs, and edge cases. Headers should reflect "
                            "senior-level technical scrutiny.",
            writer_ids=("prose", "code"),
        ),
    )
}
