"""
Integrity checks for finished hub artifacts.

Issues are collected in document order and never raised: a malformed but
readable artifact yields a report, only an unreadable file raises (OSError,
unchanged).
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from utils.errors import NotFound
from utils.frontmatter import parse_frontmatter

TODO_MARKER = "TODO"

_TODO_RE = re.compile(r'\b' + TODO_MARKER + r'\b')
_SECTION_RE = re.compile(r'^(#{2,3})\s+(.*\S)\s*$')
_HEADING_RE = re.compile(r'^(#{1,6})\s')


@dataclass
class ValidationReport:
    issues: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.issues

    def to_dict(self):
        return {"isValid": self.is_valid, "issues": list(self.issues)}


def _scan_body(body: str, first_line: int) -> List[str]:
    """TODO markers and empty sections, interleaved by line number."""
    found = []  # (line number, issue)

    # (line number, level, heading) of a ##/### that has no content yet;
    # a deeper subsection counts as content
    open_section = None
    for offset, line in enumerate(body.splitlines()):
        line_no = first_line + offset

        for _ in _TODO_RE.finditer(line):
            found.append((line_no, f"Pending work marker at line {line_no}: {line.strip()}"))

        heading = _HEADING_RE.match(line)
        if heading:
            level = len(heading.group(1))
            if open_section and level <= open_section[1]:
                found.append((open_section[0], f"Empty section: {open_section[2]}"))
            open_section = None
            match = _SECTION_RE.match(line)
            if match:
                open_section = (line_no, level, match.group(2))
        elif line.strip():
            open_section = None

    if open_section:
        found.append((open_section[0], f"Empty section: {open_section[2]}"))

    found.sort(key=lambda item: item[0])
    return [issue for _, issue in found]


def check_content(text: str, expected_persona_id: str, expected_language: str,
                  registry=None) -> ValidationReport:
    """
    Check an in-memory artifact.

    Args:
        text: Full artifact text (header + body)
        expected_persona_id: Persona the hub must reference
        expected_language: Language the hub must declare
        registry: Optional AgentRegistry; when given the referenced persona
            must also resolve and write in the header language

    Returns:
        ValidationReport with issues in document order
    """
    report = ValidationReport()

    try:
        header, body = parse_frontmatter(text)
    except ValueError as e:
        report.issues.append(f"Malformed header: {e}")
        header = {}
        body = text.split("\n---", 2)[-1] if text.startswith("---") else text

    persona_id = str(header.get("personaId") or "").strip()
    if not persona_id:
        report.issues.append("Missing persona reference")
    elif persona_id != expected_persona_id:
        report.issues.append(
            f"Persona mismatch: header references '{persona_id}', expected '{expected_persona_id}'"
        )

    language = str(header.get("language") or "English").strip()
    if language.lower() != expected_language.strip().lower():
        report.issues.append(f"Language mismatch: header declares '{language}', expected '{expected_language}'")

    if registry is not None and persona_id:
        try:
            persona = registry.resolve_persona(persona_id)
        except NotFound:
            report.issues.append(f"Unresolvable persona: '{persona_id}' is not in the registry")
        else:
            if persona.language.strip().lower() != language.lower():
                report.issues.append(
                    f"Persona language drift: '{persona_id}' writes '{persona.language}', "
                    f"header declares '{language}'"
                )

    header_lines = text.count("\n", 0, len(text) - len(body)) if body else text.count("\n")
    report.issues.extend(_scan_body(body, first_line=header_lines + 1))

    return report


def check_integrity(artifact_path: Union[str, Path], expected_persona_id: str,
                    expected_language: str, registry=None) -> ValidationReport:
    """Read a saved artifact and check it. OSError propagates unchanged."""
    text = Path(artifact_path).read_text(encoding="utf-8")
    report = check_content(text, expected_persona_id, expected_language, registry)

    status = "valid" if report.is_valid else f"{len(report.issues)} issue(s)"
    print(f"[VALIDATION] {artifact_path}: {status}")
    return report
