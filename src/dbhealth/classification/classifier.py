"""
Statement classification utilities.

This module recognizes diagnostic and introspection statements (SHOW,
EXPLAIN, the monitor's own snapshot queries) so that they are excluded from
alerting and mitigation. Rules are applied in priority order and results
are cached per statement text.
"""

import logging
import re
from typing import Dict, List, Optional, Sequence

from ..models.config import DiagnosticRule
from .rules import DEFAULT_RULES

logger = logging.getLogger(__name__)

_NO_MATCH = ""


class StatementClassifier:
    """
    Rule-based classifier for statement text taken from the process list.

    The statement text is only matched against the rules, never parsed.
    """

    def __init__(self, rules: Optional[Sequence[DiagnosticRule]] = None, cache_size: int = 4096):
        """
        Args:
            rules: Diagnostic rules; the built-in rules when None
            cache_size: Maximum number of cached classifications
        """
        source = DEFAULT_RULES if rules is None else rules
        self.rules: List[DiagnosticRule] = sorted(source, key=lambda r: r.priority, reverse=True)
        self.cache_size = cache_size
        self._cache: Dict[str, str] = {}
        self._compiled: Dict[str, "re.Pattern[str]"] = {
            rule.patterns: re.compile(rule.patterns)
            for rule in self.rules
            if rule.match_type == "regex" and isinstance(rule.patterns, str)
        }

    def classify(self, statement: Optional[str]) -> Optional[str]:
        """
        Return the category of the first rule matching ``statement``.

        Returns:
            The rule category, or None for ordinary application statements
            (and for a None statement).

        Examples:
            >>> StatementClassifier().classify("SHOW FULL PROCESSLIST")
            'show'
            >>> StatementClassifier().classify("SELECT * FROM orders") is None
            True
        """
        if statement is None:
            return None

        cached = self._cache.get(statement)
        if cached is not None:
            return cached or None

        result = _NO_MATCH
        for rule in self.rules:
            if self._matches(rule, statement):
                result = rule.category
                logger.debug(f"Statement matched diagnostic rule '{rule.category}' (priority {rule.priority})")
                break

        # Cache the result, but respect the cache size limit
        if len(self._cache) < self.cache_size:
            self._cache[statement] = result
        return result or None

    def is_diagnostic(self, statement: Optional[str]) -> bool:
        """True when ``statement`` is a diagnostic or introspection statement."""
        return self.classify(statement) is not None

    def _matches(self, rule: DiagnosticRule, statement: str) -> bool:
        if rule.match_type == "prefix":
            return statement.lstrip().upper().startswith(str(rule.patterns).upper())
        if rule.match_type == "contains":
            return bool(rule.patterns) and str(rule.patterns) in statement
        if rule.match_type == "regex":
            pattern = self._compiled.get(str(rule.patterns))
            return bool(pattern and pattern.search(statement))
        if rule.match_type == "in_list":
            patterns = rule.patterns if isinstance(rule.patterns, list) else [rule.patterns]
            return statement.strip().rstrip(";").upper() in [p.upper() for p in patterns]
        return False

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.debug("Statement classification cache cleared")

    def get_cache_stats(self) -> Dict[str, int]:
        return {
            "cache_size": len(self._cache),
            "cache_limit": self.cache_size,
        }
