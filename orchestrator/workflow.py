"""
Hub Workflow Orchestrator using LangGraph.

Implements the complete pipeline:
TOPIC → ARCHITECT ⟲ → ASSEMBLER/PERSONA CONFIRM → WRITERS ⟲ → ASSEMBLY → VALIDATION

Features:
- Human approval/feedback at every stage through an injected channel
- Provider failures offered to the human as retry decisions
- Attempt budget per step (RetryBudgetExceeded when exhausted)
- Sections drafted and assembled strictly in blueprint order
- No file I/O: the caller decides where the artifact goes
"""

import time
import uuid
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, TypedDict

from langgraph.graph import StateGraph, END

from agents.architect import ArchitectAgent, HubBlueprint, SectionBlueprint, check_eligibility
from agents.assembler import Assembler
from agents.base import HubConfig, compute_slug
from agents.persona import Persona
from agents.registry import AgentRegistry
from agents.writer import Writer, build_section_prompt
from orchestrator.interaction import (
    Channel, Decision, Feedback, InteractionKind,
    auto_proceed, expect_decision, expect_retry,
)
from utils.enhanced_logger import get_logger
from utils.errors import HubError, NotFound, ProviderError, RetryBudgetExceeded, StructuralDefect
from utils.frontmatter import ContentFrontmatter, parse_writer_ids, render_frontmatter
from utils.validation import ValidationReport, check_content


class HubStage(str, Enum):
    PLANNING = "planning"
    DRAFTING = "drafting"
    ASSEMBLING = "assembling"
    VALIDATING = "validating"
    DONE = "done"


@dataclass
class SectionDraft:
    """Drafting outcome of one blueprint section."""
    section: SectionBlueprint
    index: int
    text: str = ""
    failed: bool = False
    error: str = ""
    attempts: int = 0


@dataclass
class HubResult:
    hub_id: str
    artifact: str
    report: ValidationReport
    blueprint: HubBlueprint
    drafts: List[SectionDraft] = field(default_factory=list)
    stage: HubStage = HubStage.DONE

    @property
    def failed_sections(self) -> List[int]:
        """Indices of sections that were not drafted."""
        return [d.index for d in self.drafts if d.failed]


class AttemptBudget:
    """Counts provider calls of one step; raises once max_attempts is used up."""

    def __init__(self, stage: str, max_attempts: int):
        self.stage = stage
        self.max_attempts = max_attempts
        self.used = 0

    def spend(self, cause: Optional[BaseException] = None):
        """Use one attempt; `cause` is the last failure, chained onto the exhaustion error."""
        if self.used >= self.max_attempts:
            raise RetryBudgetExceeded(self.stage, self.max_attempts) from cause
        self.used += 1


# --- State Definition ---

class HubState(TypedDict):
    """Global state of one hub generation run."""
    # Input
    topic: str
    goal: str
    audience: str
    language: str
    max_attempts: int

    stage: str

    # Planning outputs
    blueprint: Optional[HubBlueprint]
    assembler: Optional[Assembler]
    persona: Optional[Persona]

    # Drafting / assembly outputs
    drafts: List[SectionDraft]
    hub_id: str
    artifact: str
    report: Optional[ValidationReport]


def assemble_artifact(frontmatter: ContentFrontmatter, blueprint: HubBlueprint,
                      drafts: List[SectionDraft]) -> str:
    """
    Concatenate drafts in blueprint order under a YAML header.

    A failed section keeps its heading and gets a TODO marker with the
    section goal, so validation reports it.
    """
    parts = [render_frontmatter(frontmatter.to_dict()), f"# {blueprint.title}", ""]
    for draft in sorted(drafts, key=lambda d: d.index):
        body = f"> **TODO:** {draft.section.goal}" if draft.failed else draft.text.strip()
        parts += [f"## {draft.section.heading}", "", body, ""]
    return "\n".join(parts)


def _banner(title: str):
    print("\n" + "=" * 60)
    print(title)
    print("=" * 60)


class HubWorkflow:
    """
    Hub generation workflow orchestrator.

    Coordinates:
    - ArchitectAgent: blueprint planning, refined through feedback
    - Assembler / Persona: confirmed by the human before drafting
    - Writers: one drafting call per section, in blueprint order
    - Assembly + Validation: artifact text and its integrity report
    """

    def __init__(self, provider, registry: AgentRegistry, channel: Channel = auto_proceed,
                 config: Optional[HubConfig] = None):
        self.config = config or HubConfig()
        self.provider = provider
        self.registry = registry
        self.channel = channel

        self.graph = self._build_graph()

    def _build_graph(self):
        """Build the LangGraph workflow."""
        workflow = StateGraph(HubState)

        workflow.add_node("planning", self._run_planning)
        workflow.add_node("drafting", self._run_drafting)
        workflow.add_node("assembling", self._run_assembling)
        workflow.add_node("validating", self._run_validating)

        workflow.set_entry_point("planning")
        workflow.add_edge("planning", "drafting")
        workflow.add_edge("drafting", "assembling")
        workflow.add_edge("assembling", "validating")
        workflow.add_edge("validating", END)

        return workflow.compile()

    # --- Provider and channel access ---

    def _execute(self, agent_name: str, operation: str, prompt: str,
                 system_prompt: Optional[str] = None, model: Optional[str] = None) -> str:
        """One completion call, traced when a run logger is installed."""
        model = model or self.config.model
        logger = get_logger()
        start = time.time()

        try:
            text = self.provider.execute(prompt, api_key=self.config.api_key, model=model,
                                         system_prompt=system_prompt)
        except ProviderError as e:
            if logger:
                logger.log_llm_call(agent_name, operation, model, system_prompt or "", prompt,
                                    "", time.time() - start, error=str(e))
            raise

        if logger:
            logger.log_llm_call(agent_name, operation, model, system_prompt or "", prompt,
                                text, time.time() - start)
        return text

    def _decide(self, kind: InteractionKind, data: Dict[str, Any]) -> Decision:
        decision = expect_decision(kind, self.channel(kind, data))

        logger = get_logger()
        if logger:
            if isinstance(decision, Feedback):
                logger.log_interaction(kind.value, "feedback", decision.text)
            else:
                logger.log_interaction(kind.value, "proceed")
        return decision

    def _retry(self, stage: HubStage, error: ProviderError) -> bool:
        retry = expect_retry(self.channel(InteractionKind.RETRY, {"stage": stage.value, "error": str(error)}))
        print(f"[RETRY] {stage.value}: {error} -> {'retrying' if retry else 'declined'}")

        logger = get_logger()
        if logger:
            logger.log_interaction(InteractionKind.RETRY.value, "retry" if retry else "decline")
        return retry

    def _enter(self, stage: HubStage):
        logger = get_logger()
        if logger:
            logger.log_stage(stage.value)

    # --- Nodes ---

    def _run_planning(self, state: HubState) -> Dict:
        """Architect loop, then assembler and persona confirmation."""
        _banner("STAGE 1: PLANNING (ARCHITECT)")
        self._enter(HubStage.PLANNING)

        architect = ArchitectAgent(
            topic=state['topic'],
            goal=state['goal'],
            audience=state['audience'],
            language=state['language'],
            manifest=self.registry.manifest_json(),
            eligible_writers={a.id: list(a.writer_ids) for a in self.registry.list_kind("assembler")},
        )
        budget = AttemptBudget(HubStage.PLANNING.value, state['max_attempts'])

        def execute(prompt: str, system_prompt: str) -> str:
            return self._execute("Architect", "blueprint", prompt, system_prompt=system_prompt)

        feedback = None
        last_error = None
        while True:
            budget.spend(cause=last_error)
            try:
                blueprint = architect.propose(execute, feedback)
            except ProviderError as e:
                last_error = e
                if self._retry(HubStage.PLANNING, e):
                    continue
                raise
            except StructuralDefect as e:
                last_error = e
                feedback = self._reject_defect(None, e)
                continue

            print(f"[ARCHITECT] Proposed '{blueprint.title}' "
                  f"({len(blueprint.sections)} sections, assembler={blueprint.assembler_id}, "
                  f"persona={blueprint.persona_id})")

            decision = self._decide(InteractionKind.ARCHITECT, {"blueprint": blueprint, "defect": None})
            if isinstance(decision, Feedback):
                feedback = decision.text
                continue

            try:
                assembler, persona = self._resolve_blueprint(blueprint)
            except StructuralDefect as e:
                last_error = e
                feedback = self._reject_defect(blueprint, e)
                continue

            decision = self._decide(InteractionKind.ASSEMBLER, {"assembler": assembler, "blueprint": blueprint})
            if isinstance(decision, Feedback):
                feedback = f"ASSEMBLER '{assembler.id}': {decision.text}"
                continue

            decision = self._decide(InteractionKind.PERSONA, {"persona": persona, "blueprint": blueprint})
            if isinstance(decision, Feedback):
                feedback = f"PERSONA '{persona.id}': {decision.text}"
                continue

            print(f"[ARCHITECT] Blueprint approved after {budget.used} attempt(s)")
            logger = get_logger()
            if logger:
                logger.log_blueprint(blueprint.to_dict())
            return {
                "stage": HubStage.DRAFTING.value,
                "blueprint": blueprint,
                "assembler": assembler,
                "persona": persona,
            }

    def _resolve_blueprint(self, blueprint: HubBlueprint) -> Tuple[Assembler, Persona]:
        """
        Resolve the agents an approved blueprint names.

        An id missing from the registry or a writer the assembler does not
        allow is a StructuralDefect of the blueprint (the NotFound is chained).
        """
        try:
            assembler = self.registry.resolve_assembler(blueprint.assembler_id)
            check_eligibility(blueprint, assembler)
            for section in blueprint.sections:
                self.registry.resolve_writer(section.writer_id)
            persona = self.registry.resolve_persona(blueprint.persona_id)
        except NotFound as e:
            raise StructuralDefect(f"Blueprint references unknown {e.kind} '{e.agent_id}'") from e
        return assembler, persona

    def _reject_defect(self, blueprint: Optional[HubBlueprint], defect: StructuralDefect) -> str:
        """Show a structural defect to the human; returns the feedback for the next round."""
        print(f"[ARCHITECT] Structural defect: {defect}")
        decision = self._decide(InteractionKind.ARCHITECT, {"blueprint": blueprint, "defect": str(defect)})
        if isinstance(decision, Feedback):
            return f"{decision.text}\n\nSTRUCTURAL DEFECT: {defect}"
        return f"STRUCTURAL DEFECT: {defect}. Fix it in the next blueprint."

    def _run_drafting(self, state: HubState) -> Dict:
        """Draft every section in blueprint order."""
        _banner("STAGE 2: DRAFTING (WRITERS)")
        self._enter(HubStage.DRAFTING)

        blueprint = state['blueprint']
        persona = state['persona']
        assembler = state['assembler']

        persona_instructions = persona.render_instructions(
            state['topic'], state['goal'], state['audience'], language=blueprint.language
        )
        assembler_strategy = assembler.render_strategy()

        drafts = []
        total = len(blueprint.sections)
        for index, section in enumerate(blueprint.sections):
            writer = self.registry.resolve_writer(section.writer_id)
            try:
                drafts.append(self._draft_section(
                    index, total, section, writer,
                    persona_instructions, assembler_strategy, state['max_attempts']
                ))
            except RetryBudgetExceeded as e:
                e.drafts = drafts + e.drafts
                print(f"[WRITER] Stopped at section {index + 1}/{total}; "
                      f"{len(drafts)} drafted section(s) kept on the error")
                raise

        failed = sum(1 for d in drafts if d.failed)
        print(f"[WRITER] Drafted {total - failed}/{total} sections")
        return {"stage": HubStage.ASSEMBLING.value, "drafts": drafts}

    def _draft_section(self, index: int, total: int, section: SectionBlueprint,
                       writer: Writer, persona_instructions: str,
                       assembler_strategy: str, max_attempts: int) -> SectionDraft:
        """
        Draft one section until the human accepts it.

        A declined retry marks the section failed; the last accepted text,
        if any, stays on the draft for reporting. When the budget runs out
        the draft is marked failed and travels on the RetryBudgetExceeded.
        """
        print(f"[WRITER] Section {index + 1}/{total}: {section.heading} ({writer.id})")

        draft = SectionDraft(section=section, index=index)
        budget = AttemptBudget(f"{HubStage.DRAFTING.value} section {index + 1}", max_attempts)
        writer_strategy = writer.render_strategy()
        feedback = None
        last_error = None

        while True:
            try:
                budget.spend(cause=last_error)
            except RetryBudgetExceeded as e:
                draft.failed = True
                draft.error = str(e)
                e.drafts = [draft]
                raise

            draft.attempts = budget.used
            prompt = build_section_prompt(
                persona_instructions, assembler_strategy, writer_strategy,
                section.heading, section.goal, index, total, feedback
            )

            try:
                text = self._execute("Writer", "section_draft", prompt, model=writer.model)
            except ProviderError as e:
                last_error = e
                if self._retry(HubStage.DRAFTING, e):
                    continue
                print(f"[WRITER] Section {index + 1} marked failed")
                draft.failed = True
                draft.error = str(e)
                return draft

            logger = get_logger()
            if logger and feedback and draft.text:
                logger.log_redraft(index, section.heading, budget.used, draft.text, text, feedback)
            draft.text = text

            decision = self._decide(InteractionKind.WRITER, {"section": section, "index": index, "draft": text})
            if isinstance(decision, Feedback):
                feedback = decision.text
                continue

            return draft

    def _run_assembling(self, state: HubState) -> Dict:
        """Frontmatter + sections in blueprint order."""
        _banner("STAGE 3: ASSEMBLY")
        self._enter(HubStage.ASSEMBLING)

        blueprint = state['blueprint']
        drafts = state['drafts']

        hub_id = compute_slug(blueprint.title) or "hub"
        frontmatter = ContentFrontmatter(
            id=hub_id,
            title=blueprint.title,
            description=blueprint.message,
            persona_id=blueprint.persona_id,
            assembler_id=blueprint.assembler_id,
            language=blueprint.language,
            writer_ids=parse_writer_ids([d.section.writer_id for d in drafts if not d.failed]),
            model=self.config.model,
            topic=state['topic'],
            goal=state['goal'],
            audience=state['audience'],
            date=date.today().isoformat(),
        )
        artifact = assemble_artifact(frontmatter, blueprint, drafts)

        print(f"[ASSEMBLY] {len(drafts)} sections → {len(artifact)} chars ({hub_id})")
        return {"stage": HubStage.VALIDATING.value, "hub_id": hub_id, "artifact": artifact}

    def _run_validating(self, state: HubState) -> Dict:
        """Integrity check of the in-memory artifact; issues never stop the run."""
        _banner("STAGE 4: VALIDATION")
        self._enter(HubStage.VALIDATING)

        blueprint = state['blueprint']
        report = check_content(state['artifact'], blueprint.persona_id, blueprint.language,
                               registry=self.registry)

        if report.is_valid:
            print("[VALIDATION] No issues found")
        else:
            print(f"[VALIDATION] {len(report.issues)} issue(s):")
            for issue in report.issues:
                print(f"  - {issue}")

        return {"stage": HubStage.DONE.value, "report": report}

    def run(self, topic: str, goal: str, audience: str, language: str = "English",
            max_attempts: Optional[int] = None) -> HubResult:
        """
        Run the complete hub workflow.

        Args:
            topic: Subject of the hub
            goal: What the hub should achieve
            audience: Target readers
            language: Target language
            max_attempts: Attempt budget per step (defaults to config.max_attempts)

        Returns:
            HubResult with the artifact text and its validation report

        Raises:
            NotFound: the blueprint references an unknown agent
            ProviderError: a planning call failed and the retry was declined
            RetryBudgetExceeded: a step used up its attempt budget
        """
        if max_attempts is None:
            max_attempts = self.config.max_attempts
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        initial_state: HubState = {
            "topic": topic,
            "goal": goal,
            "audience": audience,
            "language": language,
            "max_attempts": max_attempts,
            "stage": HubStage.PLANNING.value,
            "blueprint": None,
            "assembler": None,
            "persona": None,
            "drafts": [],
            "hub_id": "",
            "artifact": "",
            "report": None,
        }

        print("\n" + "#" * 60)
        print("# HUB PIPELINE: Content Generation")
        print("#" * 60)
        print(f"Topic: {topic[:60]}")
        print(f"Language: {language} | Max attempts: {max_attempts}")

        logger = get_logger()
        start = time.time()
        if logger:
            logger.start_run(uuid.uuid4().hex[:8], topic, goal, audience, language)

        try:
            final_state = self.graph.invoke(initial_state)
        except HubError as e:
            print(f"\n[WORKFLOW] Failed: {e}")
            if logger:
                drafts = e.drafts if isinstance(e, RetryBudgetExceeded) else []
                logger.finish_run("", [d.index for d in drafts if d.failed], [f"Failed: {e}"],
                                  time.time() - start)
            raise

        result = HubResult(
            hub_id=final_state['hub_id'],
            artifact=final_state['artifact'],
            report=final_state['report'],
            blueprint=final_state['blueprint'],
            drafts=final_state['drafts'],
            stage=HubStage(final_state['stage']),
        )

        if logger:
            logger.finish_run(result.hub_id, result.failed_sections, result.report.issues,
                              time.time() - start)

        print("\n" + "#" * 60)
        print("# WORKFLOW COMPLETE")
        print("#" * 60)

        return result


# --- Convenience function ---

def run_hub(topic: str, goal: str, audience: str, provider,
            language: str = "English",
            registry: Optional[AgentRegistry] = None,
            channel: Channel = auto_proceed,
            config: Optional[HubConfig] = None,
            max_attempts: Optional[int] = None) -> HubResult:
    """
    Convenience function to run the hub workflow.

    Args:
        topic: Subject of the hub
        goal: What the hub should achieve
        audience: Target readers
        provider: Object exposing execute(prompt, api_key, model, system_prompt)
        language: Target language
        registry: AgentRegistry (built-in agents only when omitted)
        channel: Interaction channel (auto_proceed when omitted)
        config: HubConfig object
        max_attempts: Attempt budget per step

    Returns:
        HubResult
    """
    workflow = HubWorkflow(provider, registry or AgentRegistry(), channel, config)
    return workflow.run(topic, goal, audience, language, max_attempts)
