"""
Hub Pipeline - Interactive Runner
=================================
Plan, draft and validate a content hub from the terminal, approving or
steering every stage.

Usage:
    python run_hub.py new "Rust ownership" --goal "Teach borrowing" --audience "Backend devs"
    python run_hub.py new --yes ...          # accept every proposal
    python run_hub.py describe persona standard

Environment (a .env file is loaded first):
    HUB_MODEL, HUB_API_KEY, HUB_BASE_URL
"""

import argparse
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

from agents.base import HubConfig
from agents.intelligence import generate_inferred_description
from agents.provider import CompletionProvider
from agents.registry import AgentRegistry, FolderStore
from orchestrator.interaction import Feedback, InteractionKind, Proceed, auto_proceed
from orchestrator.workflow import HubWorkflow
from utils.enhanced_logger import HubRunLogger, set_logger
from utils.errors import HubError, RetryBudgetExceeded
from utils.validation import check_integrity

PREVIEW_CHARS = 800


class ConsoleChannel:
    """Interaction channel backed by input()."""

    def __call__(self, kind: InteractionKind, data):
        if kind is InteractionKind.RETRY:
            print(f"\n❌ {data['stage']} failed: {data['error']}")
            return self._confirm("Retry?")

        self._show(kind, data)
        while True:
            answer = input("Proceed? [Y] or type feedback: ").strip()
            if not answer or answer.lower() in ("y", "yes"):
                return Proceed()
            return Feedback(answer)

    @staticmethod
    def _confirm(question: str) -> bool:
        answer = input(f"{question} [Y/n]: ").strip().lower()
        return answer in ("", "y", "yes")

    @staticmethod
    def _show(kind: InteractionKind, data):
        print("\n" + "-" * 60)
        if kind is InteractionKind.ARCHITECT:
            blueprint = data['blueprint']
            if blueprint is not None:
                if blueprint.message:
                    print(f"🏗️  {blueprint.message}\n")
                print(f"Title: {blueprint.title}")
                print(f"Assembler: {blueprint.assembler_id} | Persona: {blueprint.persona_id} | "
                      f"Language: {blueprint.language}")
                for i, section in enumerate(blueprint.sections):
                    print(f"  {i + 1}. {section.heading} [{section.writer_id}] - {section.goal}")
            if data['defect']:
                print(f"\n⚠️  Structural defect: {data['defect']}")
        elif kind is InteractionKind.ASSEMBLER:
            assembler = data['assembler']
            print(f"Assembler: {assembler.id} - {assembler.description}")
            print(f"Eligible writers: {', '.join(assembler.writer_ids)}")
        elif kind is InteractionKind.PERSONA:
            persona = data['persona']
            print(f"Persona: {persona.name} ({persona.id}) - {persona.description}")
            print(f"Language: {persona.language} | Tone: {persona.tone}")
        elif kind is InteractionKind.WRITER:
            section, draft = data['section'], data['draft']
            print(f"Section {data['index'] + 1}: {section.heading}\n")
            print(draft[:PREVIEW_CHARS] + ("..." if len(draft) > PREVIEW_CHARS else ""))
        print("-" * 60)


def build_config(args) -> HubConfig:
    return HubConfig(
        model=args.model or os.getenv("HUB_MODEL", HubConfig.model),
        api_key=os.getenv("HUB_API_KEY", ""),
        base_url=os.getenv("HUB_BASE_URL") or None,
        max_attempts=args.max_attempts,
        log_dir=args.log_dir,
        enable_detailed_logging=not args.no_trace,
    )


def report_partial_drafts(drafts):
    """Print the sections drafted before a run stopped."""
    if not drafts:
        return
    print(f"\n📝 Sections drafted before the run stopped ({len(drafts)}):")
    for draft in drafts:
        status = f"FAILED ({draft.error})" if draft.failed else f"{len(draft.text)} chars"
        print(f"  {draft.index + 1}. {draft.section.heading}: {status}")
        if draft.text:
            print(f"\n{draft.text.strip()}\n")


def run_new(args) -> int:
    config = build_config(args)
    registry = AgentRegistry(FolderStore(args.workspace))
    provider = CompletionProvider(base_url=config.base_url, temperature=config.temperature)
    channel = auto_proceed if args.yes else ConsoleChannel()

    logger = None
    if config.enable_detailed_logging:
        logger = HubRunLogger("hub_interactive", log_dir=config.log_dir)
        logger.set_config({'model': config.model, 'max_attempts': config.max_attempts})
        set_logger(logger)

    goal = args.goal or input("Goal: ").strip()
    audience = args.audience or input("Audience: ").strip()

    workflow = HubWorkflow(provider, registry, channel, config)
    try:
        result = workflow.run(args.topic, goal, audience, language=args.language)
    except RetryBudgetExceeded as e:
        print(f"\n❌ Error during execution: {e}")
        report_partial_drafts(e.drafts)
        return 1
    except HubError as e:
        print(f"\n❌ Error during execution: {e}")
        return 1
    finally:
        if logger:
            logger.save()

    hub_dir = Path(args.output) / result.hub_id
    hub_dir.mkdir(parents=True, exist_ok=True)
    artifact_path = hub_dir / "hub.md"
    artifact_path.write_text(result.artifact, encoding="utf-8")
    print(f"\n💾 Hub saved to: {artifact_path}")

    report = check_integrity(artifact_path, result.blueprint.persona_id,
                             result.blueprint.language, registry=registry)
    if result.failed_sections:
        print(f"⚠️  Failed sections: {', '.join(str(i + 1) for i in result.failed_sections)}")
    for issue in report.issues:
        print(f"  - {issue}")

    return 0 if report.is_valid else 2


def run_describe(args) -> int:
    config = build_config(args)
    registry = AgentRegistry(FolderStore(args.workspace))
    provider = CompletionProvider(base_url=config.base_url, temperature=config.temperature)

    try:
        agent = registry.resolve(args.kind, args.agent_id)
        if args.kind == "persona":
            name, behavior = agent.name, agent.role_description or agent.description
            metadata = {'language': agent.language, 'tone': agent.tone, 'accent': agent.accent}
        elif args.kind == "writer":
            name, behavior, metadata = agent.id, agent.writing_strategy, {}
        else:
            name, behavior = agent.id, agent.strategy_prompt
            metadata = {'writers': ", ".join(agent.writer_ids)}

        description = generate_inferred_description(
            provider, config.api_key, config.model, name, behavior,
            truths=agent.truths, metadata=metadata
        )
    except HubError as e:
        print(f"❌ {e}")
        return 1

    print(description)
    return 0


def main(argv=None) -> int:
    load_dotenv()

    parser = argparse.ArgumentParser(description="Generate content hubs with a team of agents")
    parser.add_argument("--workspace", default=".", help="Folder holding personas/, writers/, assemblers/")
    parser.add_argument("--model", default=None, help="Model name (defaults to HUB_MODEL)")
    parser.add_argument("--max-attempts", type=int, default=HubConfig.max_attempts)
    parser.add_argument("--log-dir", default="logs")
    parser.add_argument("--no-trace", action="store_true", help="Skip the JSON run trace")
    sub = parser.add_subparsers(dest="command", required=True)

    new = sub.add_parser("new", help="Create a new hub")
    new.add_argument("topic")
    new.add_argument("--goal", default="")
    new.add_argument("--audience", default="")
    new.add_argument("--language", default="English")
    new.add_argument("--output", default="hubs", help="Hubs are saved to <output>/<hub-id>/hub.md")
    new.add_argument("--yes", action="store_true", help="Accept every proposal without asking")
    new.set_defaults(handler=run_new)

    describe = sub.add_parser("describe", help="Infer a registry description for an agent")
    describe.add_argument("kind", choices=["persona", "writer", "assembler"])
    describe.add_argument("agent_id")
    describe.set_defaults(handler=run_describe)

    args = parser.parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
