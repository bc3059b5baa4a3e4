"""
Run trace for hub generation.

Captures everything a run does, for debugging and for tuning prompts:
- Full prompts (system + user) and cleaned outputs of every completion call
- Timing per call
- Every human decision on the interaction channel
- Stage transitions
- Redraft similarity (ROUGE between consecutive drafts of a section)

The trace is optional: the orchestrator looks it up with get_logger() and
skips tracing when none is installed.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

import numpy as np
from rouge_score import rouge_scorer

_rouge_scorer = rouge_scorer.RougeScorer(['rouge1', 'rouge2', 'rougeL'], use_stemmer=True)


def quick_rouge(generated: str, reference: str) -> Dict[str, float]:
    """Quick ROUGE calculation for logging."""
    if not generated or not reference:
        return {'rouge1': 0.0, 'rouge2': 0.0, 'rougeL': 0.0}
    scores = _rouge_scorer.score(reference, generated)
    return {
        'rouge1': scores['rouge1'].fmeasure,
        'rouge2': scores['rouge2'].fmeasure,
        'rougeL': scores['rougeL'].fmeasure
    }


@dataclass
class LLMCallLog:
    """Complete log of a single completion call."""
    call_id: str
    timestamp: str
    agent_name: str
    operation: str  # e.g., "blueprint", "section_draft"
    model: str

    system_prompt: str
    user_prompt: str
    output: str

    duration_seconds: float
    error: str = ""

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class InteractionLog:
    """One ask on the interaction channel and the answer it got."""
    timestamp: str
    kind: str
    decision: str  # "proceed", "feedback", "retry", "decline"
    feedback: str = ""

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class RedraftLog:
    """A section drafted again after feedback."""
    section_index: int
    heading: str
    attempt: int
    feedback: str
    similarity: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class HubRunLog:
    """Complete trace of one hub generation run."""
    run_id: str
    topic: str
    goal: str
    audience: str
    language: str
    timestamp: str

    blueprint: Dict = field(default_factory=dict)
    stages: List[Dict[str, str]] = field(default_factory=list)
    llm_calls: List[LLMCallLog] = field(default_factory=list)
    interactions: List[InteractionLog] = field(default_factory=list)
    redrafts: List[RedraftLog] = field(default_factory=list)

    hub_id: str = ""
    failed_sections: List[int] = field(default_factory=list)
    issues: List[str] = field(default_factory=list)
    total_duration_seconds: float = 0.0

    def to_dict(self) -> Dict:
        return {
            **asdict(self),
            'llm_calls': [c.to_dict() for c in self.llm_calls],
            'interactions': [i.to_dict() for i in self.interactions],
            'redrafts': [r.to_dict() for r in self.redrafts],
        }


class HubRunLogger:
    """
    Trace logger for hub runs.

    Key features:
    - Captures full prompts and outputs per completion call
    - Records every human decision
    - Tracks how much a redraft changed the section (ROUGE vs. previous draft)
    - Provides summary statistics across runs
    """

    def __init__(self, experiment_name: str = "hub", log_dir: str = "logs"):
        self.experiment_name = experiment_name
        self.log_dir = log_dir
        self.timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        os.makedirs(log_dir, exist_ok=True)

        self.runs: Dict[str, HubRunLog] = {}
        self.current_run_id: Optional[str] = None
        self._call_counter = 0

        self.metadata = {
            'experiment_name': experiment_name,
            'start_time': datetime.now().isoformat(),
            'config': {},
            'summary_stats': {}
        }

    @property
    def current(self) -> Optional[HubRunLog]:
        return self.runs.get(self.current_run_id) if self.current_run_id else None

    def set_config(self, config: Dict):
        """Store run configuration (never the api key)."""
        self.metadata['config'] = {k: v for k, v in config.items() if k != 'api_key'}

    def start_run(self, run_id: str, topic: str, goal: str, audience: str, language: str):
        """Start tracing a new run."""
        self.current_run_id = run_id
        self.runs[run_id] = HubRunLog(
            run_id=run_id,
            topic=topic,
            goal=goal,
            audience=audience,
            language=language,
            timestamp=datetime.now().isoformat()
        )
        print(f"[TRACE] === Started run: {run_id} ===")

    def log_stage(self, stage: str):
        run = self.current
        if run is None:
            return
        run.stages.append({'stage': stage, 'timestamp': datetime.now().isoformat()})

    def log_blueprint(self, blueprint: Dict):
        """Record the approved blueprint."""
        run = self.current
        if run is None:
            return
        run.blueprint = blueprint
        print(f"[TRACE] Blueprint: {len(blueprint.get('sections', []))} sections")

    def log_llm_call(self, agent_name: str, operation: str, model: str,
                     system_prompt: str, user_prompt: str, output: str,
                     duration: float, error: str = "") -> Optional[LLMCallLog]:
        """Log a single completion call with full details."""
        run = self.current
        if run is None:
            return None

        self._call_counter += 1
        call_log = LLMCallLog(
            call_id=f"{agent_name}_{operation}_{self._call_counter}",
            timestamp=datetime.now().isoformat(),
            agent_name=agent_name,
            operation=operation,
            model=model,
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            output=output,
            duration_seconds=duration,
            error=error
        )
        run.llm_calls.append(call_log)

        status = f" FAILED: {error[:60]}" if error else ""
        print(f"[TRACE] LLM Call: {agent_name}.{operation} ({duration:.2f}s){status}")
        return call_log

    def log_interaction(self, kind: str, decision: str, feedback: str = ""):
        run = self.current
        if run is None:
            return
        run.interactions.append(InteractionLog(
            timestamp=datetime.now().isoformat(),
            kind=kind,
            decision=decision,
            feedback=feedback
        ))

    def log_redraft(self, section_index: int, heading: str, attempt: int,
                    previous_text: str, new_text: str, feedback: str):
        """Log a redraft and how close it stayed to the previous draft."""
        run = self.current
        if run is None:
            return

        similarity = quick_rouge(new_text, previous_text)
        run.redrafts.append(RedraftLog(
            section_index=section_index,
            heading=heading,
            attempt=attempt,
            feedback=feedback,
            similarity=similarity
        ))
        print(f"[TRACE] Redraft S{section_index} A{attempt}: "
              f"R1 vs previous {similarity['rouge1']:.3f}")

    def finish_run(self, hub_id: str, failed_sections: List[int],
                   issues: List[str], total_duration: float):
        """Finalize the current run."""
        run = self.current
        if run is None:
            return

        run.hub_id = hub_id
        run.failed_sections = list(failed_sections)
        run.issues = list(issues)
        run.total_duration_seconds = total_duration

        print(f"[TRACE] === Run complete: {run.run_id} -> {hub_id or '-'} ===")
        print(f"[TRACE] Total Time: {total_duration:.2f}s | LLM calls: {len(run.llm_calls)} | "
              f"Redrafts: {len(run.redrafts)} | Issues: {len(run.issues)}")

        self.current_run_id = None

    def save(self, filename: str = None) -> str:
        """Save all traces to a JSON file."""
        if filename is None:
            filename = f"{self.log_dir}/{self.experiment_name}_{self.timestamp}_trace.json"

        self._calculate_summary_stats()

        output = {
            'metadata': self.metadata,
            'runs': {rid: run.to_dict() for rid, run in self.runs.items()}
        }

        with open(filename, 'w', encoding='utf-8') as f:
            json.dump(output, f, indent=2, ensure_ascii=False)

        print(f"[TRACE] Saved run trace to: {filename}")
        return filename

    def _calculate_summary_stats(self):
        """Calculate summary statistics across all runs."""
        if not self.runs:
            return

        durations = [c.duration_seconds for r in self.runs.values() for c in r.llm_calls]
        similarity = [d.similarity.get('rouge1', 0.0) for r in self.runs.values() for d in r.redrafts]
        calls_total = sum(len(r.llm_calls) for r in self.runs.values())
        failed_calls = sum(1 for r in self.runs.values() for c in r.llm_calls if c.error)

        self.metadata['summary_stats'] = {
            'total_runs': len(self.runs),
            'total_llm_calls': calls_total,
            'failed_llm_calls': failed_calls,
            'avg_llm_calls_per_run': calls_total / len(self.runs),
            'call_duration_mean': float(np.mean(durations)) if durations else 0.0,
            'call_duration_std': float(np.std(durations)) if durations else 0.0,
            'redraft_rouge1_mean': float(np.mean(similarity)) if similarity else 0.0,
            'total_redrafts': len(similarity),
            'failed_sections_total': sum(len(r.failed_sections) for r in self.runs.values()),
        }


_global_logger: Optional[HubRunLogger] = None


def get_logger() -> Optional[HubRunLogger]:
    """Get the global logger instance."""
    return _global_logger


def set_logger(logger: Optional[HubRunLogger]):
    """Set (or clear, with None) the global logger instance."""
    global _global_logger
    _global_logger = logger
