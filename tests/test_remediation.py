"""Safety-critical tests for the remediation policy."""

import pytest

from pod_restarter.exceptions import DirectoryUnavailable, NotFound
from pod_restarter.models import Outcome, PodPhase, PodRef
from pod_restarter.remediation import RemediationPolicy


@pytest.fixture
def policy(directory, quiet_logger):
    return RemediationPolicy(directory, logger=quiet_logger)


class TestScenarios:
    def test_still_pending_owned_pod_is_deleted(self, policy, directory, snapshot):
        directory.get_pod.return_value = snapshot("p1")

        [result] = policy.remediate([PodRef("p1", "ns1")])

        assert result.outcome == Outcome.DELETED
        directory.delete_pod.assert_called_once_with(PodRef("p1", "ns1"))

    def test_pod_without_owner_is_skipped(self, policy, directory, snapshot):
        directory.get_pod.return_value = snapshot("p2", owned=False)

        [result] = policy.remediate([PodRef("p2", "ns1")])

        assert result.outcome == Outcome.SKIPPED_NO_OWNER
        directory.delete_pod.assert_not_called()

    def test_pod_that_started_running_is_left_alone(self, policy, directory, snapshot):
        directory.get_pod.return_value = snapshot("p3", phase=PodPhase.RUNNING)

        [result] = policy.remediate([PodRef("p3", "ns1")])

        assert result.outcome == Outcome.STATE_CHANGED
        assert result.phase == PodPhase.RUNNING
        directory.delete_pod.assert_not_called()

    def test_vanished_pod(self, policy, directory, quiet_logger):
        directory.get_pod.side_effect = NotFound("Pod ns1/p4 does not exist anymore")

        [result] = policy.remediate([PodRef("p4", "ns1")])

        assert result.outcome == Outcome.VANISHED
        assert result.error is None
        directory.delete_pod.assert_not_called()
        quiet_logger.logger.error.assert_not_called()

    def test_dry_run_never_deletes(self, policy, directory, snapshot):
        directory.get_pod.return_value = snapshot("p5")

        [result] = policy.remediate([PodRef("p5", "ns1")], dry_run=True)

        assert result.outcome == Outcome.WOULD_DELETE
        directory.delete_pod.assert_not_called()


class TestOwnerSafety:
    @pytest.mark.parametrize("dry_run", [True, False])
    @pytest.mark.parametrize("phase", list(PodPhase))
    def test_unowned_pod_is_never_deleted(self, policy, directory, snapshot, phase, dry_run):
        directory.get_pod.return_value = snapshot("p1", phase=phase, owned=False)

        [result] = policy.remediate([PodRef("p1", "ns1")], dry_run=dry_run)

        assert result.outcome in (Outcome.SKIPPED_NO_OWNER, Outcome.STATE_CHANGED)
        directory.delete_pod.assert_not_called()

    def test_owner_summary_is_logged_on_skip(self, policy, directory, snapshot, quiet_logger):
        directory.get_pod.return_value = snapshot("p2", owned=False)

        policy.remediate([PodRef("p2", "ns1")])

        decision = quiet_logger.logger.info.call_args_list[-1]
        assert decision.kwargs["outcome"] == "skipped_no_owner"
        assert decision.kwargs["owners"] == []


class TestFailures:
    def test_delete_failure_is_reported_not_raised(self, policy, directory, snapshot, quiet_logger):
        directory.get_pod.return_value = snapshot("p1")
        directory.delete_pod.side_effect = DirectoryUnavailable("Could not delete pod ns1/p1: Conflict")

        [result] = policy.remediate([PodRef("p1", "ns1")])

        assert result.outcome == Outcome.DELETE_FAILED
        assert "Conflict" in result.error
        quiet_logger.logger.error.assert_called_once()

    def test_recheck_failure_does_not_delete(self, policy, directory):
        directory.get_pod.side_effect = DirectoryUnavailable("Could not get pod ns1/p1: timeout")

        [result] = policy.remediate([PodRef("p1", "ns1")])

        assert result.outcome == Outcome.CHECK_FAILED
        directory.delete_pod.assert_not_called()

    def test_one_failure_does_not_stop_the_others(self, policy, directory, snapshot):
        def get_pod(ref):
            if ref.name == "broken":
                raise DirectoryUnavailable("Could not get pod: boom")
            if ref.name == "gone":
                raise NotFound("gone")
            return snapshot(ref.name)

        directory.get_pod.side_effect = get_pod
        refs = [PodRef("broken", "ns1"), PodRef("gone", "ns1"), PodRef("ok", "ns1")]

        results = policy.remediate(refs)

        assert [r.outcome for r in results] == [
            Outcome.CHECK_FAILED,
            Outcome.VANISHED,
            Outcome.DELETED,
        ]
        directory.delete_pod.assert_called_once_with(PodRef("ok", "ns1"))


class TestParallelRemediation:
    def test_each_candidate_gets_its_own_outcome(self, directory, quiet_logger, snapshot):
        directory.get_pod.side_effect = lambda ref: snapshot(
            ref.name, owned=ref.name != "p0"
        )
        refs = [PodRef(f"p{i}", "ns1") for i in range(6)]

        results = RemediationPolicy(directory, logger=quiet_logger, max_workers=3).remediate(refs)

        outcomes = {r.ref.name: r.outcome for r in results}
        assert outcomes["p0"] == Outcome.SKIPPED_NO_OWNER
        assert all(outcomes[f"p{i}"] == Outcome.DELETED for i in range(1, 6))
        assert directory.delete_pod.call_count == 5

    @pytest.mark.parametrize("max_workers", [1, 2])
    def test_unexpected_recheck_error_does_not_stop_the_others(self, directory, quiet_logger,
                                                               snapshot, max_workers):
        def get_pod(ref):
            if ref.name == "bad":
                raise ValueError("Invalid value for `metadata`, must not be `None`")
            return snapshot(ref.name)

        directory.get_pod.side_effect = get_pod
        policy = RemediationPolicy(directory, logger=quiet_logger, max_workers=max_workers)

        results = policy.remediate([PodRef("bad", "ns1"), PodRef("ok", "ns1")])

        outcomes = {r.ref.name: r for r in results}
        assert outcomes["bad"].outcome == Outcome.CHECK_FAILED
        assert "metadata" in outcomes["bad"].error
        assert outcomes["ok"].outcome == Outcome.DELETED
        directory.delete_pod.assert_called_once_with(PodRef("ok", "ns1"))

    def test_unexpected_delete_error_is_delete_failed(self, directory, quiet_logger, snapshot):
        directory.get_pod.side_effect = lambda ref: snapshot(ref.name)
        directory.delete_pod.side_effect = [RuntimeError("connection reset"), None]
        policy = RemediationPolicy(directory, logger=quiet_logger)

        results = policy.remediate([PodRef("p1", "ns1"), PodRef("p2", "ns1")])

        assert [r.outcome for r in results] == [Outcome.DELETE_FAILED, Outcome.DELETED]
        assert results[0].error == "connection reset"
