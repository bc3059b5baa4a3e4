"""
Tests for persona, writer, assembler and architect agents.
"""

import json

import pytest

from agents.architect import ArchitectAgent, HubBlueprint, SectionBlueprint, check_eligibility, parse_blueprint
from agents.assembler import BUILTIN_ASSEMBLERS, Assembler
from agents.base import AgentTruth
from agents.persona import BUILTIN_PERSONAS, Persona
from agents.writer import BUILTIN_WRITERS, build_section_prompt, progress_label
from utils.errors import StructuralDefect

from conftest import TWO_SECTIONS, blueprint_reply


class TestPersona:
    """Persona instruction rendering."""

    def test_render_uses_own_language_by_default(self):
        persona = BUILTIN_PERSONAS["arg-woman-dev"]

        text = persona.render_instructions("React hooks", "Teach useEffect", "Juniors")

        assert "Must write exclusively in Spanish." in text
        assert "voseo" in text
        assert 'Subject: "React hooks"' in text
        assert 'Target Audience: "Juniors"' in text

    def test_language_override(self):
        text = BUILTIN_PERSONAS["standard"].render_instructions("T", "G", "A", language="German")
        assert "Must write exclusively in German." in text

    def test_rendering_is_deterministic(self):
        persona = BUILTIN_PERSONAS["sarcastic-es"]
        assert persona.render_instructions("T", "G", "A") == persona.render_instructions("T", "G", "A")

    def test_fallback_role_and_defaults(self):
        """Test a bare persona gets defaults and a role built from its name."""
        persona = Persona(id="p", name="Pat", description="Friendly guide.")

        text = persona.render_instructions("T", "G", "A")

        assert "You are Pat. Friendly guide." in text
        assert "TONE: Neutral." in text
        assert "LEARNED CONTEXT" not in text

    def test_learned_context_is_bounded(self):
        """Test at most ten truths reach the prompt."""
        truths = tuple(AgentTruth(f"fact-{i:02d}", weight=i) for i in range(12))
        persona = Persona(id="p", name="Pat", description="d", truths=truths)

        text = persona.render_instructions("T", "G", "A")

        assert "- fact-11" in text
        assert "- fact-02" in text
        assert "fact-01" not in text
        assert "fact-00" not in text


class TestWriter:
    """Writer strategy and section prompts."""

    @pytest.mark.parametrize("index,total,label", [
        (0, 3, "Start"), (1, 3, "In-Progress"), (2, 3, "Conclusion"), (0, 1, "Start"),
    ])
    def test_progress_label(self, index, total, label):
        assert progress_label(index, total) == label

    def test_section_prompt_layers(self):
        """Test the prompt stacks persona, assembler, writer and section parts in order."""
        prompt = build_section_prompt("PERSONA", "ASSEMBLER", BUILTIN_WRITERS["code"].render_strategy(),
                                      "Setup", "Install the toolchain", 1, 3)

        assert prompt.index("PERSONA") < prompt.index("ASSEMBLER") < prompt.index("WRITING STRATEGY (code)")
        assert "SECTION HEADER: Setup" in prompt
        assert "INTENT: Install the toolchain" in prompt
        assert "REVISION NEEDED" not in prompt

    def test_section_prompt_feedback(self):
        prompt = build_section_prompt("P", "A", "W", "H", "G", 0, 1, feedback="Shorter please")
        assert prompt.endswith("USER FEEDBACK: Shorter please")


class TestAssembler:
    def test_builtin_roster(self):
        assert BUILTIN_ASSEMBLERS["tutorial"].writer_ids == ("prose", "code")
        assert BUILTIN_ASSEMBLERS["deep-dive"].is_eligible("code")
        assert not BUILTIN_ASSEMBLERS["deep-dive"].is_eligible("poet")

    def test_strategy_lists_writers(self):
        text = BUILTIN_ASSEMBLERS["tutorial"].render_strategy()
        assert text.startswith("STRUCTURAL STRATEGY (tutorial):")
        assert text.endswith("ELIGIBLE WRITERS: prose, code")


class TestBlueprintParsing:
    """Architect reply parsing and eligibility."""

    def test_parse_valid_reply(self):
        blueprint = parse_blueprint("```json\n" + blueprint_reply(TWO_SECTIONS) + "\n```")

        assert blueprint.title == "Rust Ownership"
        assert blueprint.assembler_id == "tutorial"
        assert blueprint.sections[1] == SectionBlueprint("Borrowing in Practice",
                                                         "Show borrowing with runnable code", "code")

    def test_language_defaults_to_request(self):
        data = json.loads(blueprint_reply(TWO_SECTIONS))
        del data["language"]

        assert parse_blueprint(json.dumps(data), default_language="Spanish").language == "Spanish"

    @pytest.mark.parametrize("reply,reason", [
        ("not json", "not valid JSON"),
        ("[1, 2]", "not a JSON object"),
        (blueprint_reply([]), "no sections"),
        (blueprint_reply([("Intro", "Goal", "")]), "writerId"),
        (json.dumps({"title": "T", "sections": [{"heading": "H", "goal": "G", "writerId": "w"}]}),
         "assemblerId"),
    ])
    def test_malformed_replies(self, reply, reason):
        with pytest.raises(StructuralDefect, match=reason):
            parse_blueprint(reply)

    def test_check_eligibility(self):
        blueprint = parse_blueprint(blueprint_reply(TWO_SECTIONS))
        prose_only = Assembler(id="essay", description="d", strategy_prompt="s", writer_ids=("prose",))

        check_eligibility(blueprint, BUILTIN_ASSEMBLERS["tutorial"])
        with pytest.raises(StructuralDefect, match="writer 'code'.*'essay'"):
            check_eligibility(blueprint, prose_only)


class TestArchitectAgent:
    """Conversation history across planning rounds."""

    def make_agent(self):
        return ArchitectAgent("Rust ownership", "Teach", "Devs", "English",
                              manifest='{"assemblers": []}', eligible_writers={"tutorial": ["prose", "code"]})

    def test_rounds_build_on_history(self):
        agent = self.make_agent()
        prompts = []

        def execute(prompt, system_prompt):
            prompts.append((prompt, system_prompt))
            return blueprint_reply(TWO_SECTIONS)

        first = agent.propose(execute)
        agent.propose(execute, feedback="Add a section on lifetimes")

        assert isinstance(first, HubBlueprint)
        assert "Previous Rounds" not in prompts[0][0]
        assert "ARCHITECT:\n" + blueprint_reply(TWO_SECTIONS) in prompts[1][0]
        assert prompts[1][0].endswith("USER FEEDBACK: Add a section on lifetimes")
        assert "- tutorial: prose, code" in prompts[0][1]
        assert len(agent.history) == 2

    def test_malformed_reply_still_recorded(self):
        agent = self.make_agent()

        with pytest.raises(StructuralDefect):
            agent.propose(lambda prompt, system_prompt: "What audience level?")

        assert agent.history[0][1] == "What audience level?"
