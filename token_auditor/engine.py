"""
Audit Engine

Fans one AuditContext out to every registered detector, merges their
findings in registry order and hands them to the aggregator.

Detectors are pure functions over immutable input, so they can run on a
thread pool without locking. Each one runs inside its own error boundary:
a detector that raises is logged and contributes no findings.
"""

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from .aggregator import DEFAULT_MAX_RESULTS, aggregate
from .analyzer import SourceScanner
from .detectors import Detector, select_detectors
from .models import AuditContext, Finding
from .sources import ensure_solidity_source

logger = logging.getLogger(__name__)


def _env_flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class EngineConfig:
    max_results: int = DEFAULT_MAX_RESULTS
    parallel: bool = True
    max_workers: Optional[int] = None
    # Detector ids or family names to skip.
    disabled_detectors: Tuple[str, ...] = ()

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'EngineConfig':
        """
        Build a config from TOKEN_AUDITOR_* environment variables.

        TOKEN_AUDITOR_MAX_RESULTS, TOKEN_AUDITOR_WORKERS,
        TOKEN_AUDITOR_DISABLED (comma separated), TOKEN_AUDITOR_SERIAL.
        """
        env = os.environ if environ is None else environ

        max_results = int(env.get('TOKEN_AUDITOR_MAX_RESULTS', DEFAULT_MAX_RESULTS))
        workers = env.get('TOKEN_AUDITOR_WORKERS')
        disabled = tuple(
            item.strip() for item in env.get('TOKEN_AUDITOR_DISABLED', '').split(',') if item.strip()
        )

        return cls(
            max_results=max_results,
            parallel=not _env_flag(env.get('TOKEN_AUDITOR_SERIAL')),
            max_workers=int(workers) if workers else None,
            disabled_detectors=disabled,
        )


class AuditEngine:
    """Runs the detector battery and produces the ordered, capped report."""

    def __init__(self, config: Optional[EngineConfig] = None, detectors: Optional[Iterable[Detector]] = None):
        self.config = config or EngineConfig()
        if detectors is None:
            self.detectors = select_detectors(self.config.disabled_detectors)
        else:
            self.detectors = tuple(detectors)

    def run(self, context: AuditContext) -> List[Finding]:
        """
        Audit one contract.

        Raises MalformedSourceError before any detector runs if the source
        is not recognisably Solidity.
        """
        ensure_solidity_source(context.source_text)

        raw = self.run_detectors(context)
        report = aggregate(raw, self.config.max_results)

        logger.info(
            "Audit complete: %d detectors, %d raw findings, %d reported",
            len(self.detectors), len(raw), len(report),
        )
        return report

    def run_detectors(self, context: AuditContext) -> List[Finding]:
        """Every detector's findings, concatenated in registry order."""
        scanner = SourceScanner(context.source_text)

        if self.config.parallel and len(self.detectors) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as pool:
                # map() yields in submission order regardless of completion order
                results = list(pool.map(lambda d: self._run_detector(d, context, scanner), self.detectors))
        else:
            results = [self._run_detector(d, context, scanner) for d in self.detectors]

        merged: List[Finding] = []
        for findings in results:
            merged.extend(findings)
        return merged

    def audit(
        self,
        source_text: str,
        syntax_tree: Any = None,
        bytecode: str = "",
        contract_address: str = "",
    ) -> List[Finding]:
        return self.run(AuditContext(
            source_text=source_text,
            syntax_tree=syntax_tree,
            bytecode=bytecode,
            contract_address=contract_address,
        ))

    @staticmethod
    def _run_detector(detector: Detector, context: AuditContext, scanner: SourceScanner) -> List[Finding]:
        try:
            findings = detector.run(context, scanner)
        except Exception:
            logger.exception("Detector %s failed; it contributes no findings", detector.detector_id)
            return []

        logger.debug("Detector %s: %d finding(s)", detector.detector_id, len(findings))
        return findings


def create_engine(
    max_results: Optional[int] = None,
    parallel: Optional[bool] = None,
    disabled_detectors: Optional[Sequence[str]] = None,
    max_workers: Optional[int] = None,
) -> AuditEngine:
    """
    Factory function to create an engine.

    Unset arguments fall back to the TOKEN_AUDITOR_* environment.
    """
    config = EngineConfig.from_env()
    config = EngineConfig(
        max_results=config.max_results if max_results is None else max_results,
        parallel=config.parallel if parallel is None else parallel,
        max_workers=config.max_workers if max_workers is None else max_workers,
        disabled_detectors=config.disabled_detectors if disabled_detectors is None else tuple(disabled_detectors),
    )
    return AuditEngine(config)
