"""
Base utilities shared across all agents.

Provides:
- LLM configuration (any OpenAI-compatible endpoint)
- Output cleaning (remove <think> blocks, code fences)
- Learned-truth ranking for prompt context
- Configuration dataclass
"""

import json
import os
import re
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from langchain_openai import ChatOpenAI

# --- Configuration ---
DEFAULT_MODEL = os.getenv("HUB_MODEL", "gpt-4o-mini")
DEFAULT_API_KEY = os.getenv("HUB_API_KEY", "")
DEFAULT_BASE_URL = os.getenv("HUB_BASE_URL") or None

# Maximum number of high-weight truths included in a prompt
MAX_TRUTHS_FOR_CONTEXT = 10


@dataclass
class HubConfig:
    """Configuration for one hub generation run."""
    model: str = DEFAULT_MODEL
    api_key: str = DEFAULT_API_KEY
    base_url: Optional[str] = DEFAULT_BASE_URL

    temperature: float = 0.6

    # Attempts per feedback/retry loop before RetryBudgetExceeded
    max_attempts: int = 5

    # Run trace
    enable_detailed_logging: bool = True
    log_dir: str = "logs"


@dataclass(frozen=True)
class AgentTruth:
    """A learned fact about an agent's observed behavior."""
    text: str
    weight: float = 0.5


def get_llm(model: str, api_key: str, temperature: float = 0.6,
            base_url: Optional[str] = None) -> ChatOpenAI:
    """Get a configured chat model for an OpenAI-compatible endpoint."""
    kwargs = {
        "model": model,
        "api_key": api_key or "EMPTY",
        "temperature": temperature,
    }
    if base_url:
        kwargs["base_url"] = base_url
    return ChatOpenAI(**kwargs)


def clean_output(content: str) -> str:
    """Clean LLM output by removing thinking blocks and artifacts."""
    # Remove <think>...</think> blocks
    content = re.sub(r'<think>.*?</think>', '', content, flags=re.DOTALL)
    return content.strip()


def extract_json(content: str) -> Any:
    """
    Parse a JSON payload out of an LLM reply.

    Handles ```json fences and leading chatter before the first brace.
    Raises json.JSONDecodeError when nothing parses.
    """
    text = clean_output(content)
    if "```json" in text:
        text = text.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in text:
        text = text.split("```", 1)[1].split("```", 1)[0]

    text = text.strip()
    if not text.startswith("{"):
        start, end = text.find("{"), text.rfind("}")
        if start != -1 and end > start:
            text = text[start:end + 1]

    return json.loads(text)


def rank_truths(truths: Iterable[AgentTruth], limit: int = MAX_TRUTHS_FOR_CONTEXT) -> List[AgentTruth]:
    """
    Top truths by descending weight.

    sorted() is stable, so equal weights keep their insertion order.
    """
    return sorted(truths, key=lambda t: t.weight, reverse=True)[:limit]


def format_learned_context(truths: Iterable[AgentTruth]) -> str:
    """Bullet list of the ranked truths, empty when there are none."""
    return "\n".join(f"- {t.text}" for t in rank_truths(truths))


def compute_slug(raw: str) -> str:
    """Lowercase, dash-separated identifier safe for folder names."""
    slug = raw.strip().lower()
    slug = re.sub(r'\s+', '-', slug)
    slug = re.sub(r'[^a-z0-9-]', '', slug)
    slug = re.sub(r'-+', '-', slug)
    return slug.strip('-')
