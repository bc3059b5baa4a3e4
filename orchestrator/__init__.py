"""
Orchestrator: LangGraph-based workflow coordination.

Implements the hub workflow:
1. Planning → Architect blueprint, assembler and persona confirmation
2. Drafting → One writer call per section, in blueprint order
3. Assembling → Frontmatter + sections into one artifact
4. Validating → Integrity report attached to the result

Every stage can be steered by the human through the interaction channel.
"""

from orchestrator.interaction import InteractionKind, Proceed, Feedback, auto_proceed
from orchestrator.workflow import HubWorkflow, HubResult, HubStage, SectionDraft, run_hub

__all__ = [
    'InteractionKind', 'Proceed', 'Feedback', 'auto_proceed',
    'HubWorkflow', 'HubResult', 'HubStage', 'SectionDraft', 'run_hub'
]
