"""
Built-in rules for recognizing diagnostic statements.

These apply when config.toml does not name a rules file. They cover the
statements this monitor issues itself, so that its own sampling queries are
never reported, explained or killed.
"""

from ..models.config import DiagnosticRule

DEFAULT_RULES = [
    DiagnosticRule(
        priority=100,
        category="show",
        match_type="contains",
        patterns="SHOW ",
        comment="SHOW PROCESSLIST, SHOW ENGINE INNODB STATUS and friends",
    ),
    DiagnosticRule(
        priority=90,
        category="show",
        match_type="regex",
        patterns=r"(?i)^\s*show\s",
        comment="lower-case SHOW statements",
    ),
    DiagnosticRule(
        priority=80,
        category="explain",
        match_type="regex",
        patterns=r"(?i)^\s*(explain|describe|desc)\s",
    ),
    DiagnosticRule(
        priority=70,
        category="kill",
        match_type="regex",
        patterns=r"(?i)^\s*kill\s",
    ),
    DiagnosticRule(
        priority=60,
        category="monitor",
        match_type="regex",
        patterns=r"(?i)\b(information_schema\.innodb_trx|performance_schema\.data_locks)\b",
        comment="the transaction and lock snapshot queries",
    ),
]
