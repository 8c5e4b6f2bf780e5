import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional

import yaml

from ..parser.base import LogEvent
from ..utils.logging import get_logger
from .base import SEVERITIES, AnalysisResult, Analyzer

logger = get_logger("rule_analyzer")


@dataclass
class Rule:
    id: str
    name: str
    severity: str
    alert: bool
    description: str
    fix: str
    patterns: List[re.Pattern]
    levels: FrozenSet[str] = field(default_factory=frozenset)

    @classmethod
    def from_dict(cls, data: Dict) -> "Rule":
        patterns = []
        for pattern in data.get("patterns", []):
            try:
                patterns.append(re.compile(pattern))
            except re.error as e:
                logger.error(f"Invalid regex for rule {data.get('id')}: {e}")

        severity = str(data.get("severity", "medium")).lower()
        if severity not in SEVERITIES:
            raise ValueError(f"Rule {data.get('id')}: unknown severity {severity!r}")

        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            severity=severity,
            alert=bool(data.get("alert", True)),
            description=data.get("description", ""),
            fix=data.get("fix", ""),
            patterns=patterns,
            levels=frozenset(data.get("levels", [])),
        )

    def matches(self, event: LogEvent) -> bool:
        if self.levels and event.level not in self.levels:
            return False
        text = f"{event.message}\n{event.stack_trace}"
        return any(pattern.search(text) for pattern in self.patterns)


class RuleAnalyzer(Analyzer):
    """
    Offline analyzer. The first YAML rule whose pattern matches decides the
    verdict; without a match, severity follows the log level.
    """

    def __init__(self, rules_path: Optional[str] = None, rules: Optional[List[Rule]] = None):
        super().__init__("rules")
        self.rules_path = Path(rules_path) if rules_path else None
        self.rules: List[Rule] = list(rules or [])

    def load_rules(self):
        """Load *.yml / *.yaml rule files from the rules directory."""
        if not self.rules_path or not self.rules_path.exists():
            return

        files = sorted(self.rules_path.glob("*.yml")) + sorted(self.rules_path.glob("*.yaml"))
        for rule_file in files:
            try:
                with open(rule_file, "r") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load rule file {rule_file}: {e}")
                continue

            # A file holds either one rule or a list under "rules"
            entries = data.get("rules", [data]) if isinstance(data, dict) else data
            if not isinstance(entries, list):
                logger.error(f"Rule file {rule_file} holds no rules")
                continue

            for index, entry in enumerate(entries):
                try:
                    self.rules.append(Rule.from_dict(entry))
                except (AttributeError, KeyError, TypeError, ValueError) as e:
                    logger.error(f"Skipping rule #{index} in {rule_file}: {e!r}")

        logger.info(f"Loaded {len(self.rules)} analysis rules from {self.rules_path}")

    async def analyze(self, event: LogEvent) -> AnalysisResult:
        for rule in self.rules:
            if rule.matches(event):
                logger.debug(f"Rule match: {rule.id} on {event.describe()}")
                return AnalysisResult(
                    requires_alert=rule.alert,
                    severity=rule.severity,
                    summary=rule.description or rule.name,
                    suggested_fix=rule.fix,
                    analyzer=f"{self.name}:{rule.id}",
                )
        return self._baseline(event)

    def _baseline(self, event: LogEvent) -> AnalysisResult:
        if event.level == "Fatal":
            severity = "critical"
        elif event.level == "Error" or event.stack_trace:
            severity = "high"
        else:
            return AnalysisResult(
                requires_alert=False,
                severity="low",
                summary=f"{event.level} from {event.source}",
                analyzer=self.name,
            )

        return AnalysisResult(
            requires_alert=True,
            severity=severity,
            summary=f"{event.level} in {event.source}: {event.message}",
            analyzer=self.name,
        )
