"""
Unit tests for the threshold evaluator.
"""

from datetime import datetime, timedelta

import pytest

from dbhealth.detection import ThresholdEvaluator
from dbhealth.models import LockObservation, RunConfig, Session, Transaction

NOW = datetime(2024, 5, 1, 12, 0, 0)


def make_session(session_id=1, time=0, info="SELECT * FROM orders"):
    return Session(session_id, "app", "h:1", "shop", "Query", time, "executing", info)


def make_transaction(age_seconds, info="UPDATE orders SET x = 1", rows_modified=10):
    return Transaction(
        session=make_session(5, age_seconds, info),
        trx_id=900,
        started=NOW - timedelta(seconds=age_seconds),
        thread_id=5,
        rows_modified=rows_modified,
    )


def make_lock(time, waiting):
    return LockObservation(
        session_id=3, thread_name="thread/sql/one_connection", thread_type="FOREGROUND",
        state="updating", info="UPDATE stock SET qty = 0", time=time, object_schema="shop",
        object_name="stock", lock_mode="X", lock_status="GRANTED", waiting_threads=waiting,
    )


@pytest.mark.unit
class TestSessionEvaluation:
    """Test cases for slow statement detection."""

    def setup_method(self):
        self.evaluator = ThresholdEvaluator(RunConfig(slow_threshold=10))

    def test_over_threshold_is_flagged(self):
        verdict = self.evaluator.evaluate_session(make_session(7, 11, "SELECT SLEEP(100)"))

        assert verdict.flagged
        assert verdict.session_id == 7
        assert verdict.statement == "SELECT SLEEP(100)"
        assert verdict.duration == 11
        assert "10 seconds" in verdict.reason

    def test_threshold_is_exclusive(self):
        assert not self.evaluator.evaluate_session(make_session(time=10)).flagged

    def test_idle_session_is_not_flagged(self):
        assert not self.evaluator.evaluate_session(make_session(time=500, info=None)).flagged

    def test_diagnostic_statement_is_not_flagged(self):
        verdict = self.evaluator.evaluate_session(make_session(time=500, info="SHOW FULL PROCESSLIST"))

        assert not verdict.flagged
        assert not self.evaluator.should_capture_plan(verdict)
        assert not self.evaluator.should_terminate(verdict)


@pytest.mark.unit
class TestTransactionEvaluation:
    """Test cases for long-running transaction detection."""

    def test_duration_from_start_time(self):
        evaluator = ThresholdEvaluator(RunConfig(slow_threshold=10))

        verdict = evaluator.evaluate_transaction(make_transaction(45, rows_modified=300), NOW)

        assert verdict.flagged
        assert verdict.duration == 45
        assert verdict.rows_modified == 300
        assert verdict.session_id == 5

    def test_young_transaction_is_not_flagged(self):
        evaluator = ThresholdEvaluator(RunConfig(slow_threshold=10))

        assert not evaluator.evaluate_transaction(make_transaction(10), NOW).flagged

    def test_idle_owner_flags_without_plan(self):
        evaluator = ThresholdEvaluator(RunConfig(slow_threshold=10, kill=True))

        verdict = evaluator.evaluate_transaction(make_transaction(60, info=None), NOW)

        assert verdict.flagged
        assert verdict.statement is None
        assert not evaluator.should_capture_plan(verdict)
        assert evaluator.should_terminate(verdict)

    def test_diagnostic_owner_statement_is_not_explained(self):
        evaluator = ThresholdEvaluator(RunConfig(slow_threshold=10))

        verdict = evaluator.evaluate_transaction(make_transaction(60, info="SHOW ENGINE INNODB STATUS"), NOW)

        assert verdict.flagged
        assert verdict.statement is None

    def test_duration_uses_server_clock_from_snapshot(self):
        trx = make_transaction(600)
        trx.server_now = NOW

        assert trx.duration_seconds() == 600

    def test_duration_never_negative(self):
        trx = make_transaction(0)

        assert trx.duration_seconds(NOW - timedelta(seconds=30)) == 0


@pytest.mark.unit
class TestLockEvaluation:
    """Test cases for lock contention, including both boundaries."""

    @pytest.mark.parametrize(
        "time, waiting, contended",
        [
            (3, 0, True),
            (2, 2, True),
            (2, 1, False),
            (0, 0, False),
            (10, 5, True),
        ],
    )
    def test_default_thresholds(self, time, waiting, contended):
        evaluator = ThresholdEvaluator(RunConfig())

        assert evaluator.evaluate_lock(make_lock(time, waiting)).flagged is contended

    def test_configured_thresholds(self):
        evaluator = ThresholdEvaluator(RunConfig(lock_min_time=30, lock_min_waiting=10))

        assert not evaluator.evaluate_lock(make_lock(29, 9)).flagged
        assert evaluator.evaluate_lock(make_lock(30, 0)).flagged

    def test_reason_names_the_object(self):
        verdict = ThresholdEvaluator(RunConfig()).evaluate_lock(make_lock(4, 1))

        assert "shop.stock" in verdict.reason
        assert verdict.session_id == 3


@pytest.mark.unit
class TestActionPolicy:
    """Test cases for plan capture and termination decisions."""

    def test_no_kill_when_disabled(self):
        evaluator = ThresholdEvaluator(RunConfig(kill=False))
        verdict = evaluator.evaluate_session(make_session(time=100))

        assert evaluator.should_capture_plan(verdict)
        assert not evaluator.should_terminate(verdict)

    def test_kill_when_enabled(self):
        evaluator = ThresholdEvaluator(RunConfig(kill=True))

        assert evaluator.should_terminate(evaluator.evaluate_session(make_session(time=100)))
        assert not evaluator.should_terminate(evaluator.evaluate_session(make_session(time=1)))
