"""
Registry descriptions inferred from an agent's behavior and learned truths.
"""

from typing import Any, Dict, Iterable, Optional

from agents.base import AgentTruth, format_learned_context


def build_description_prompt(display_name: str, behavior: str,
                             truths: Iterable[AgentTruth] = (),
                             metadata: Optional[Dict[str, Any]] = None) -> str:
    """
    Prompt asking for a one-sentence registry description.

    At most MAX_TRUTHS_FOR_CONTEXT truths are included, highest weight first.
    """
    traits = "\n".join(f"{key.upper()}: {value}" for key, value in (metadata or {}).items())
    learned = format_learned_context(truths)

    lines = [
        "Based on the following agent name and behavior, write a concise one-sentence "
        "functional description for a registry.",
        "",
        f"NAME: {display_name}",
    ]
    if traits:
        lines += ["TRAITS:", traits]
    lines.append(f"BEHAVIOR: {behavior}")
    if learned:
        lines += ["LEARNED TRUTHS:", learned]
    lines += ["", "Output only the description string."]

    return "\n".join(lines)


def generate_inferred_description(provider, api_key: str, model: str,
                                  display_name: str, behavior: str,
                                  truths: Iterable[AgentTruth] = (),
                                  metadata: Optional[Dict[str, Any]] = None) -> str:
    """
    Generate a functional description for an agent.

    Args:
        provider: Object exposing execute(prompt, api_key, model)
        api_key: Provider credential
        model: Model name
        display_name: Human-facing agent name
        behavior: The agent's core instructions
        truths: Learned truths about the agent
        metadata: Extra traits (e.g. tone, language) rendered as KEY: value

    Returns:
        Description text

    Raises:
        ProviderError: the completion call failed
    """
    prompt = build_description_prompt(display_name, behavior, truths, metadata)
    return provider.execute(prompt, api_key=api_key, model=model)
