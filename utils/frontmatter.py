"""
Structured header blocks for hub and agent artifacts.

An artifact is a `---` delimited YAML header followed by free-text markdown:

    ---
    id: tutorial
    description: Step-by-step learning path
    writerIds: prose, code
    ---

    Body text...
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml

_HEADER_RE = re.compile(r'^---[ \t]*\n(.*?)\n---[ \t]*(?:\n|$)(.*)$', re.DOTALL)


def parse_frontmatter(raw: str) -> Tuple[Dict[str, Any], str]:
    """
    Split raw artifact text into (header data, body).

    Text without a header block yields an empty dict and the text unchanged.
    Raises ValueError when the header exists but is not a YAML mapping.
    """
    match = _HEADER_RE.match(raw.lstrip('\ufeff'))
    if not match:
        return {}, raw

    block, body = match.group(1), match.group(2)
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise ValueError(f"header is not valid YAML: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ValueError("header is not a key/value mapping")

    return data, body


def render_frontmatter(data: Dict[str, Any]) -> str:
    """Render a header block, preserving key order."""
    dumped = yaml.safe_dump(data, sort_keys=False, allow_unicode=True, default_flow_style=False)
    return f"---\n{dumped}---\n"


def parse_writer_ids(value: Any) -> List[str]:
    """
    Normalize a writerIds field into an ordered list.

    Accepts comma-separated text or a list. Entries are trimmed, blanks are
    dropped and duplicates are removed keeping the first occurrence:
    "a, b ,b," -> ["a", "b"].
    """
    if value is None:
        return []

    if isinstance(value, (list, tuple)):
        raw_items = []
        for item in value:
            if item is None:
                continue
            raw_items.extend(str(item).split(','))
    else:
        raw_items = str(value).split(',')

    ids = []
    for item in raw_items:
        item = item.strip()
        if item and item not in ids:
            ids.append(item)
    return ids


@dataclass
class ContentFrontmatter:
    """Persisted metadata of a hub artifact."""
    id: str
    persona_id: str
    language: str
    writer_ids: List[str] = field(default_factory=list)
    model: Optional[str] = None
    description: str = ""
    title: str = ""
    assembler_id: str = ""
    topic: str = ""
    goal: str = ""
    audience: str = ""
    date: str = ""

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "type": "hub",
            "personaId": self.persona_id,
            "assemblerId": self.assembler_id,
            "language": self.language,
            "writerIds": list(self.writer_ids),
            "model": self.model,
            "topic": self.topic,
            "goal": self.goal,
            "audience": self.audience,
            "date": self.date,
        }
        return {k: v for k, v in data.items() if v is not None}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContentFrontmatter":
        return cls(
            id=str(data.get("id") or data.get("hubId") or ""),
            persona_id=str(data.get("personaId") or ""),
            language=str(data.get("language") or "English"),
            writer_ids=parse_writer_ids(data.get("writerIds")),
            model=data.get("model"),
            description=str(data.get("description") or ""),
            title=str(data.get("title") or ""),
            assembler_id=str(data.get("assemblerId") or ""),
            topic=str(data.get("topic") or ""),
            goal=str(data.get("goal") or ""),
            audience=str(data.get("audience") or ""),
            date=str(data.get("date") or ""),
        )
