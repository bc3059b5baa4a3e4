"""
Completion provider adapter.

One operation: execute(prompt, api_key, model) -> text. Every client failure
(network, auth, rate limit) or an empty reply surfaces as ProviderError with
the underlying cause attached. No retries happen here; the orchestrator asks
the human whether to retry.
"""

from typing import Optional

from langchain_core.messages import HumanMessage, SystemMessage

from agents.base import DEFAULT_BASE_URL, clean_output, get_llm
from utils.errors import ProviderError


class CompletionProvider:
    """Executes prompts against an OpenAI-compatible chat endpoint."""

    def __init__(self, base_url: Optional[str] = DEFAULT_BASE_URL, temperature: float = 0.6):
        self.base_url = base_url
        self.temperature = temperature

    def execute(self, prompt: str, api_key: str, model: str,
                system_prompt: Optional[str] = None) -> str:
        messages = []
        if system_prompt:
            messages.append(SystemMessage(content=system_prompt))
        messages.append(HumanMessage(content=prompt))

        try:
            llm = get_llm(model=model, api_key=api_key,
                          temperature=self.temperature, base_url=self.base_url)
            response = llm.invoke(messages)
        except Exception as e:
            raise ProviderError(f"completion request to '{model}' failed: {e}", cause=e) from e

        text = clean_output(response.content if isinstance(response.content, str) else str(response.content))
        if not text:
            raise ProviderError(f"completion request to '{model}' returned an empty response")

        return text
