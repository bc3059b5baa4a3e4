"""
Agents for hub content generation.

Agents:
- ArchitectAgent: Blueprint planning + assembler/persona selection
- Persona: Voice, tone and language instructions
- Assembler: Structural strategy + eligible writer roster
- Writer: Section drafting strategy

Support:
- AgentRegistry: Built-in and stored agent resolution
- CompletionProvider: OpenAI-compatible completion adapter
"""

from agents.base import HubConfig, AgentTruth, get_llm, clean_output, compute_slug, rank_truths
from agents.persona import Persona, BUILTIN_PERSONAS
from agents.writer import Writer, BUILTIN_WRITERS, build_section_prompt
from agents.assembler import Assembler, BUILTIN_ASSEMBLERS
from agents.architect import ArchitectAgent, HubBlueprint, SectionBlueprint, check_eligibility
from agents.registry import AgentRegistry, FolderStore, RegistryStore
from agents.provider import CompletionProvider
from agents.intelligence import generate_inferred_description

__all__ = [
    'HubConfig',
    'AgentTruth',
    'get_llm',
    'clean_output',
    'compute_slug',
    'rank_truths',
    'Persona',
    'Writer',
    'Assembler',
    'BUILTIN_PERSONAS',
    'BUILTIN_WRITERS',
    'BUILTIN_ASSEMBLERS',
    'build_section_prompt',
    'ArchitectAgent',
    'HubBlueprint',
    'SectionBlueprint',
    'check_eligibility',
    'AgentRegistry',
    'FolderStore',
    'RegistryStore',
    'CompletionProvider',
    'generate_inferred_description'
]
