"""
Unit tests for diagnostic statement classification.
"""

import pytest

from dbhealth.classification import DEFAULT_RULES, StatementClassifier
from dbhealth.models import DiagnosticRule


@pytest.mark.unit
class TestBuiltinRules:
    """Test cases for the built-in diagnostic rules."""

    def setup_method(self):
        self.classifier = StatementClassifier()

    @pytest.mark.parametrize(
        "statement",
        [
            "SHOW FULL PROCESSLIST",
            "SHOW ENGINE INNODB STATUS",
            "/* mon */ SHOW SLAVE STATUS",
            "show variables like 'max_connections'",
            "EXPLAIN SELECT * FROM orders",
            "describe orders",
            "KILL 42",
            "SELECT * FROM information_schema.innodb_trx",
        ],
    )
    def test_diagnostic_statements(self, statement):
        assert self.classifier.is_diagnostic(statement)

    @pytest.mark.parametrize(
        "statement",
        [
            "SELECT * FROM orders WHERE id = 1",
            "UPDATE stock SET qty = qty - 1",
            "SELECT showroom FROM stores",
            "INSERT INTO kills (id) VALUES (1)",
        ],
    )
    def test_application_statements(self, statement):
        assert not self.classifier.is_diagnostic(statement)

    def test_none_statement_is_not_diagnostic(self):
        assert self.classifier.classify(None) is None
        assert not self.classifier.is_diagnostic(None)

    def test_highest_priority_category_wins(self):
        # Matches both the "SHOW " contains rule and the lower-case show regex.
        assert self.classifier.classify("SHOW TABLES") == "show"
        assert self.classifier.classify("EXPLAIN SHOW TABLES") == "show"


@pytest.mark.unit
class TestConfiguredRules:
    """Test cases for rule types and ordering."""

    def test_match_types(self):
        classifier = StatementClassifier([
            DiagnosticRule(priority=40, category="prefix", match_type="prefix", patterns="analyze"),
            DiagnosticRule(priority=30, category="contains", match_type="contains", patterns="/* healthcheck */"),
            DiagnosticRule(priority=20, category="regex", match_type="regex", patterns=r"^CHECKSUM\s+TABLE"),
            DiagnosticRule(priority=10, category="ping", match_type="in_list", patterns=["SELECT 1"]),
        ])

        assert classifier.classify("  ANALYZE TABLE orders") == "prefix"
        assert classifier.classify("SELECT 1 /* healthcheck */") == "contains"
        assert classifier.classify("CHECKSUM TABLE orders") == "regex"
        assert classifier.classify("select 1;") == "ping"
        assert classifier.classify("SELECT 12") is None

    def test_rules_applied_in_priority_order(self):
        classifier = StatementClassifier([
            DiagnosticRule(priority=1, category="late", match_type="contains", patterns="SHOW"),
            DiagnosticRule(priority=5, category="early", match_type="prefix", patterns="SHOW"),
        ])

        assert [r.category for r in classifier.rules] == ["early", "late"]
        assert classifier.classify("SHOW TABLES") == "early"

    def test_empty_rule_set_classifies_nothing(self):
        assert StatementClassifier([]).classify("SHOW TABLES") is None


@pytest.mark.unit
class TestClassificationCache:
    """Test cases for the classification cache."""

    def test_results_are_cached_including_misses(self):
        classifier = StatementClassifier()

        classifier.classify("SHOW TABLES")
        classifier.classify("SELECT 1 FROM dual")
        classifier.classify("SHOW TABLES")

        assert classifier.get_cache_stats()["cache_size"] == 2

    def test_cache_size_limit(self):
        classifier = StatementClassifier(DEFAULT_RULES, cache_size=2)

        for i in range(5):
            classifier.classify(f"SELECT {i}")

        assert classifier.get_cache_stats() == {"cache_size": 2, "cache_limit": 2}
        assert classifier.classify("SELECT 4") is None

    def test_clear_cache(self):
        classifier = StatementClassifier()
        classifier.classify("SHOW TABLES")

        classifier.clear_cache()

        assert classifier.get_cache_stats()["cache_size"] == 0
