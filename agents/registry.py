"""
Registry: resolves agent ids to Persona / Writer / Assembler records.

Two resolution paths per role family:
- STATIC: the built-in tables shipped with the package
- DYNAMIC: markdown artifacts read from an external store, one folder per role

Folder layout of a store:

    personas/<id>.md
    writers/<id>.md
    assemblers/<id>.md

Parsed records are immutable and nothing is cached, so one registry can be
shared read-only by concurrent runs.
"""

import json
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple, Union

from agents.assembler import BUILTIN_ASSEMBLERS, Assembler
from agents.base import AgentTruth
from agents.persona import BUILTIN_PERSONAS, Persona
from agents.writer import BUILTIN_WRITERS, Writer
from utils.errors import ArtifactParseError, NotFound
from utils.frontmatter import parse_frontmatter, parse_writer_ids

Agent = Union[Persona, Writer, Assembler]

FOLDERS = {
    "persona": "personas",
    "writer": "writers",
    "assembler": "assemblers",
}


class RegistryStore(Protocol):
    """Store boundary: list and read artifact files of one role folder."""

    def list(self, folder: str) -> List[str]:
        ...

    def read(self, folder: str, filename: str) -> str:
        ...


class FolderStore:
    """RegistryStore backed by a workspace directory."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)

    def list(self, folder: str) -> List[str]:
        path = self.root / folder
        if not path.is_dir():
            return []
        return sorted(p.name for p in path.iterdir() if p.is_file())

    def read(self, folder: str, filename: str) -> str:
        """Artifact text; bytes that are not UTF-8 raise ArtifactParseError."""
        try:
            return (self.root / folder / filename).read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise ArtifactParseError(filename, f"not valid UTF-8 text ({e.reason})") from e


def identifier(filename: str) -> str:
    """Agent id derived from a filename: extension stripped."""
    return Path(filename).stem


def _read_header(raw: str, filename: str):
    try:
        data, body = parse_frontmatter(raw)
    except ValueError as e:
        raise ArtifactParseError(filename, str(e)) from e
    agent_id = str(data.get("id") or identifier(filename)).strip()
    if not agent_id:
        raise ArtifactParseError(filename, "artifact has no id")
    return agent_id, data, body.strip()


def parse_truths(value: Any, filename: str) -> Tuple[AgentTruth, ...]:
    """
    Learned truths from a `truths:` header entry.

    Each entry is either plain text (default weight) or a mapping with
    `text` and an optional numeric `weight`:

        truths:
          - Prefers tables over bullet lists
          - text: Uses voseo consistently
            weight: 0.9
    """
    if value is None:
        return ()
    if not isinstance(value, list):
        raise ArtifactParseError(filename, "truths must be a list")

    truths = []
    for entry in value:
        if isinstance(entry, str):
            text, weight = entry, AgentTruth.weight
        elif isinstance(entry, dict):
            text, weight = entry.get("text"), entry.get("weight", AgentTruth.weight)
        else:
            raise ArtifactParseError(filename, f"truth entry is not text or a mapping: {entry!r}")

        if not isinstance(text, str) or not text.strip():
            raise ArtifactParseError(filename, "truth entry has no text")
        if isinstance(weight, bool) or not isinstance(weight, (int, float)):
            raise ArtifactParseError(filename, f"truth weight is not a number: {weight!r}")
        truths.append(AgentTruth(text.strip(), float(weight)))

    return tuple(truths)


def parse_persona_artifact(raw: str, filename: str) -> Persona:
    agent_id, data, body = _read_header(raw, filename)
    return Persona(
        id=agent_id,
        name=str(data.get("name") or agent_id),
        description=str(data.get("description") or ""),
        language=str(data.get("language") or "English"),
        accent=str(data.get("accent") or "Standard"),
        tone=str(data.get("tone") or "Neutral"),
        role_description=body,
        model=data.get("model"),
        truths=parse_truths(data.get("truths"), filename),
    )


def parse_writer_artifact(raw: str, filename: str) -> Writer:
    agent_id, data, body = _read_header(raw, filename)
    description = str(data.get("description") or "")
    return Writer(
        id=agent_id,
        description=description,
        writing_strategy=body or description,
        model=data.get("model"),
        truths=parse_truths(data.get("truths"), filename),
    )


def parse_assembler_artifact(raw: str, filename: str) -> Assembler:
    agent_id, data, body = _read_header(raw, filename)
    writer_ids = parse_writer_ids(data.get("writerIds"))
    if not writer_ids:
        raise ArtifactParseError(filename, "assembler declares no writerIds")

    description = str(data.get("description") or "")
    return Assembler(
        id=agent_id,
        description=description,
        strategy_prompt=body or description,
        writer_ids=tuple(writer_ids),
        model=data.get("model"),
        truths=parse_truths(data.get("truths"), filename),
    )


PARSERS = {
    "persona": parse_persona_artifact,
    "writer": parse_writer_artifact,
    "assembler": parse_assembler_artifact,
}


class AgentRegistry:
    """
    Resolves ids to agents: static table first, then the dynamic store.

    Artifacts that fail to parse are skipped when listing and never appear
    in the manifest shown to the Architect.
    """

    def __init__(self, store: Optional[RegistryStore] = None,
                 personas: Optional[Dict[str, Persona]] = None,
                 writers: Optional[Dict[str, Writer]] = None,
                 assemblers: Optional[Dict[str, Assembler]] = None):
        self.store = store
        self._static: Dict[str, Dict[str, Agent]] = {
            "persona": dict(BUILTIN_PERSONAS if personas is None else personas),
            "writer": dict(BUILTIN_WRITERS if writers is None else writers),
            "assembler": dict(BUILTIN_ASSEMBLERS if assemblers is None else assemblers),
        }

    def resolve(self, kind: str, agent_id: str) -> Agent:
        """Resolve an id, raising NotFound when absent from both paths."""
        if kind not in FOLDERS:
            raise ValueError(f"Unknown agent kind: {kind}")

        static = self._static[kind].get(agent_id)
        if static is not None:
            return static

        for agent in self._load_stored(kind):
            if agent.id == agent_id:
                return agent

        raise NotFound(kind, agent_id)

    def resolve_persona(self, agent_id: str) -> Persona:
        return self.resolve("persona", agent_id)

    def resolve_writer(self, agent_id: str) -> Writer:
        return self.resolve("writer", agent_id)

    def resolve_assembler(self, agent_id: str) -> Assembler:
        return self.resolve("assembler", agent_id)

    def list_kind(self, kind: str) -> List[Agent]:
        """All known agents of one kind; static entries shadow stored ones."""
        if kind not in FOLDERS:
            raise ValueError(f"Unknown agent kind: {kind}")

        agents = list(self._static[kind].values())
        seen = {a.id for a in agents}
        for agent in self._load_stored(kind):
            if agent.id not in seen:
                seen.add(agent.id)
                agents.append(agent)
        return agents

    def list_manifest(self) -> Dict[str, List[Dict[str, str]]]:
        """The {id, description} catalogue of assemblers and personas."""
        return {
            "assemblers": [{"id": a.id, "description": a.description} for a in self.list_kind("assembler")],
            "personas": [{"id": p.id, "description": p.description} for p in self.list_kind("persona")],
        }

    def manifest_json(self) -> str:
        return json.dumps(self.list_manifest(), indent=2, ensure_ascii=False)

    def _load_stored(self, kind: str) -> Iterator[Agent]:
        if self.store is None:
            return

        folder = FOLDERS[kind]
        parser = PARSERS[kind]
        for filename in self.store.list(folder):
            if not filename.endswith(".md"):
                continue
            try:
                agent = parser(self.store.read(folder, filename), filename)
            except ArtifactParseError as e:
                print(f"[REGISTRY] Skipping {folder}/{filename}: {e.reason}")
                continue
            yield agent
