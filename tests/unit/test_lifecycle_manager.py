"""Unit tests for the creative lifecycle manager."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from creative_engine.core.exceptions import CreativeNotFoundError, InvalidActionError
from creative_engine.services.analysis.features import extract_features
from creative_engine.services.lifecycle.manager import LifecycleManager
from creative_engine.services.lifecycle.outcomes import bracket_snapshots, classify_outcome
from creative_engine.services.lifecycle.types import ActionInput, PerformanceSnapshot


def _days_ago(days: float) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


@pytest.mark.asyncio
async def test_scaled_action_with_ctr_lift_is_improved(lifecycle_store, make_creative) -> None:
    lifecycle_store.seed_creative(make_creative("cr_1"))
    lifecycle_store.seed_snapshot("cr_1", _days_ago(4), ctr=0.010)
    action = lifecycle_store.seed_action("cr_1", "scaled", _days_ago(3))
    lifecycle_store.seed_snapshot("cr_1", _days_ago(2), ctr=0.012)
    manager = LifecycleManager(lifecycle_store)

    outcomes = await manager.analyze_outcomes(lookback_days=7)

    assert len(outcomes) == 1
    outcome = outcomes[0]
    assert outcome.action_id == action.id
    assert outcome.outcome == "improved"
    assert outcome.outcome_confidence == 80
    assert outcome.pre_performance.ctr == pytest.approx(0.010)
    assert outcome.post_performance.ctr == pytest.approx(0.012)


@pytest.mark.asyncio
async def test_actions_without_both_snapshots_are_skipped(lifecycle_store, make_creative) -> None:
    lifecycle_store.seed_creative(make_creative("cr_pre_only"))
    lifecycle_store.seed_creative(make_creative("cr_post_only"))
    lifecycle_store.seed_snapshot("cr_pre_only", _days_ago(4), ctr=0.01)
    lifecycle_store.seed_action("cr_pre_only", "scaled", _days_ago(3))
    lifecycle_store.seed_action("cr_post_only", "paused", _days_ago(3))
    lifecycle_store.seed_snapshot("cr_post_only", _days_ago(1), ctr=0.01)
    manager = LifecycleManager(lifecycle_store)

    assert await manager.analyze_outcomes(lookback_days=7) == []


@pytest.mark.asyncio
async def test_actions_outside_lookback_window_are_ignored(lifecycle_store, make_creative) -> None:
    lifecycle_store.seed_creative(make_creative("cr_1"))
    lifecycle_store.seed_snapshot("cr_1", _days_ago(12), ctr=0.010)
    lifecycle_store.seed_action("cr_1", "scaled", _days_ago(10))
    lifecycle_store.seed_snapshot("cr_1", _days_ago(9), ctr=0.020)
    manager = LifecycleManager(lifecycle_store)

    assert await manager.analyze_outcomes(lookback_days=7) == []
    assert len(await manager.analyze_outcomes(lookback_days=14)) == 1


def test_scale_decline_and_neutral_bands() -> None:
    pre = PerformanceSnapshot(spend=50.0, ctr=0.02, roas=2.0)

    declined = classify_outcome("scaled", pre, PerformanceSnapshot(spend=80.0, ctr=0.016, roas=2.0))
    flat = classify_outcome("scaled", pre, PerformanceSnapshot(spend=80.0, ctr=0.021, roas=2.1))
    roas_drop = classify_outcome("scaled", pre, PerformanceSnapshot(spend=80.0, ctr=0.02, roas=1.4))

    assert declined == ("declined", 75)
    assert flat == ("neutral", 0)
    assert roas_drop == ("declined", 75)


def test_pause_is_judged_by_pre_action_performance() -> None:
    post = PerformanceSnapshot(spend=0.0, ctr=0.0)

    assert classify_outcome("paused", PerformanceSnapshot(spend=40.0, ctr=0.004), post) == ("improved", 70)
    assert classify_outcome("paused", PerformanceSnapshot(spend=40.0, ctr=0.01, cpa=45.0), post) == (
        "improved",
        70,
    )
    assert classify_outcome("paused", PerformanceSnapshot(spend=40.0, ctr=0.01, cpa=20.0), post) == (
        "neutral",
        0,
    )


def test_tested_actions_are_always_neutral() -> None:
    pre = PerformanceSnapshot(spend=5.0, ctr=0.01)
    post = PerformanceSnapshot(spend=10.0, ctr=0.05)

    assert classify_outcome("tested", pre, post) == ("neutral", 0)


def test_bracketing_excludes_snapshots_at_decision_time(lifecycle_store) -> None:
    decided_at = _days_ago(3)
    older = lifecycle_store.seed_snapshot("cr_1", _days_ago(5), ctr=0.01)
    newest_before = lifecycle_store.seed_snapshot("cr_1", _days_ago(4), ctr=0.01)
    lifecycle_store.seed_snapshot("cr_1", decided_at, ctr=0.01)
    first_after = lifecycle_store.seed_snapshot("cr_1", _days_ago(2), ctr=0.01)
    lifecycle_store.seed_snapshot("cr_1", _days_ago(1), ctr=0.01)

    pre, post = bracket_snapshots(lifecycle_store.snapshots, decided_at)

    assert pre is newest_before
    assert pre is not older
    assert post is first_after


@pytest.mark.asyncio
async def test_log_action_returns_id_and_appends(lifecycle_store, make_creative) -> None:
    lifecycle_store.seed_creative(make_creative("cr_1"))
    manager = LifecycleManager(lifecycle_store)

    action_id = await manager.log_action(
        ActionInput(
            creative_id="cr_1",
            action_type="paused",
            reason_short="CPA too high",
            reason_detail="CPA doubled over three days",
            inputs={"cpa": 52.0},
        )
    )

    assert action_id.startswith("act_")
    assert lifecycle_store.actions[-1].id == action_id
    assert lifecycle_store.actions[-1].inputs == {"cpa": 52.0}


@pytest.mark.asyncio
async def test_log_action_for_unknown_creative_raises_not_found(lifecycle_store) -> None:
    manager = LifecycleManager(lifecycle_store)

    with pytest.raises(CreativeNotFoundError):
        await manager.log_action(ActionInput(creative_id="missing", action_type="tested", reason_short="x"))

    assert lifecycle_store.actions == []


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "action",
    [
        ActionInput(creative_id="cr_1", action_type="deleted", reason_short="x"),  # type: ignore[arg-type]
        ActionInput(creative_id="cr_1", action_type="paused", reason_short="x", decided_by="robot"),  # type: ignore[arg-type]
        ActionInput(creative_id="cr_1", action_type="paused", reason_short="   "),
    ],
)
async def test_log_action_rejects_invalid_payloads(lifecycle_store, make_creative, action) -> None:
    lifecycle_store.seed_creative(make_creative("cr_1"))
    manager = LifecycleManager(lifecycle_store)

    with pytest.raises(InvalidActionError):
        await manager.log_action(action)


@pytest.mark.asyncio
async def test_history_is_newest_first(lifecycle_store, make_creative) -> None:
    lifecycle_store.seed_creative(make_creative("cr_1"))
    first = lifecycle_store.seed_action("cr_1", "tested", _days_ago(5))
    second = lifecycle_store.seed_action("cr_1", "scaled", _days_ago(1))
    lifecycle_store.seed_snapshot("cr_1", _days_ago(6), ctr=0.01)
    latest = lifecycle_store.seed_snapshot("cr_1", _days_ago(1), ctr=0.02)
    manager = LifecycleManager(lifecycle_store)

    history = await manager.get_creative_history("cr_1")

    assert [action.id for action in history.actions] == [second.id, first.id]
    assert history.snapshots[0] is latest
    assert len((await manager.get_creative_history("cr_1", snapshot_limit=1)).snapshots) == 1


@pytest.mark.asyncio
async def test_history_for_unknown_creative_raises(lifecycle_store) -> None:
    manager = LifecycleManager(lifecycle_store)

    with pytest.raises(CreativeNotFoundError):
        await manager.get_creative_history("missing")


@pytest.mark.asyncio
async def test_recent_actions_filters_and_limit(lifecycle_store, make_creative) -> None:
    lifecycle_store.seed_creative(make_creative("cr_1", headline="First"))
    lifecycle_store.seed_creative(make_creative("cr_2", headline="Second"))
    lifecycle_store.seed_action("cr_1", "paused", _days_ago(3))
    lifecycle_store.seed_action("cr_2", "paused", _days_ago(2), decided_by="rule")
    lifecycle_store.seed_action("cr_2", "scaled", _days_ago(1))
    manager = LifecycleManager(lifecycle_store)

    everything = await manager.get_recent_actions()
    paused = await manager.get_recent_actions(action_type="paused")
    by_rule = await manager.get_recent_actions(decided_by="rule")
    newest = await manager.get_recent_actions(1)

    assert len(everything) == 3
    assert [item.headline for item in paused] == ["Second", "First"]
    assert [item.action.creative_id for item in by_rule] == ["cr_2"]
    assert newest[0].action.action_type == "scaled"


@pytest.mark.asyncio
async def test_update_creative_metrics_appends_snapshot_and_keeps_status(
    lifecycle_store,
    make_creative,
) -> None:
    stored = lifecycle_store.seed_creative(make_creative("cr_1"))
    stored.status = "paused"
    manager = LifecycleManager(lifecycle_store)
    observed_at = _days_ago(0.5)

    await manager.update_creative_metrics(make_creative("cr_1", spend=250.0, ctr=0.02), observed_at=observed_at)

    refreshed = lifecycle_store.creatives["cr_1"]
    assert refreshed.spend == 250.0
    assert refreshed.status == "paused"
    assert refreshed.latest_metrics_at == observed_at
    assert lifecycle_store.snapshots[-1].ctr == pytest.approx(0.02)


@pytest.mark.asyncio
async def test_learning_insights_detect_scale_and_pause_patterns(lifecycle_store, make_creative) -> None:
    for index in range(3):
        creative = make_creative(
            f"win_{index}",
            headline="7 Ways To Save",
            thumbnail_url="https://cdn.example.com/img/face-direct.jpg",
        )
        creative.features = extract_features(creative)
        lifecycle_store.seed_creative(creative)
        lifecycle_store.seed_action(creative.id, "scaled", _days_ago(3))
        lifecycle_store.seed_snapshot(creative.id, _days_ago(1), ctr=0.02)
    for index in range(3):
        lifecycle_store.seed_creative(make_creative(f"loss_{index}", cpa=40.0))
        lifecycle_store.seed_action(f"loss_{index}", "paused", _days_ago(2))
    manager = LifecycleManager(lifecycle_store)

    insights = await manager.generate_learning_insights()

    assert [insight.pattern for insight in insights] == [
        "Face + Eye Contact → Higher CTR",
        "Numerical Headlines → Better Performance",
        "High CPA → Pause Decision Accuracy",
    ]
    assert [insight.confidence for insight in insights] == [100, 100, 85]
    assert insights[0].evidence == ["3/3 successful scales had faces"]


@pytest.mark.asyncio
async def test_learning_insights_need_three_qualifying_creatives(lifecycle_store, make_creative) -> None:
    for index in range(2):
        creative = make_creative(f"win_{index}", thumbnail_url="https://cdn.example.com/face.jpg")
        creative.features = extract_features(creative)
        lifecycle_store.seed_creative(creative)
        lifecycle_store.seed_action(creative.id, "scaled", _days_ago(3))
        lifecycle_store.seed_snapshot(creative.id, _days_ago(1), ctr=0.02)
    lifecycle_store.seed_creative(make_creative("loss", cpa=40.0))
    lifecycle_store.seed_action("loss", "paused", _days_ago(2))
    manager = LifecycleManager(lifecycle_store)

    assert await manager.generate_learning_insights() == []


@pytest.mark.asyncio
async def test_learning_config_created_lazily_with_defaults(lifecycle_store) -> None:
    manager = LifecycleManager(lifecycle_store)

    config = await manager.get_learning_config("acct_1")
    again = await manager.get_learning_config("acct_1")

    assert config.target_cpa == 25.0
    assert config.target_roas == 1.3
    assert config.pause_threshold_days == 3
    assert again.id == config.id


@pytest.mark.asyncio
async def test_learning_config_partial_update(lifecycle_store) -> None:
    manager = LifecycleManager(lifecycle_store)

    updated = await manager.update_learning_config("acct_1", {"target_cpa": 18.0})

    assert updated.target_cpa == 18.0
    assert updated.target_roas == 1.3

    with pytest.raises(InvalidActionError):
        await manager.update_learning_config("acct_1", {"target_cpm": 3.0})


@pytest.mark.asyncio
async def test_action_recommendations_follow_rule_order(lifecycle_store, make_creative) -> None:
    winner = make_creative(
        "winner",
        headline="7 Ways To Save",
        thumbnail_url="https://cdn.example.com/img/face.jpg",
        ctr=0.025,
    )
    winner.features = extract_features(winner)
    steady = make_creative("steady")
    failing = make_creative("failing", cpa=60.0, roas=None, ctr=0.002, conversions=1)
    lagging = make_creative("lagging", cpa=40.0, roas=None, ctr=0.01)
    new = make_creative("new", spend=2.0, impressions=5_000, conversions=0)
    quiet = make_creative("quiet", spend=2.0, impressions=500, conversions=0)
    manager = LifecycleManager(lifecycle_store)

    recommendations = await manager.generate_action_recommendations(
        [steady, failing, lagging, new, quiet, winner],
        "acct_1",
    )

    summary = [
        (item.creative.id, item.recommended_action, item.confidence, item.auto_execute)
        for item in recommendations
    ]
    assert summary == [
        ("winner", "scale", 105, True),
        ("failing", "pause", 100, True),
        ("steady", "scale", 85, False),
        ("lagging", "pause", 75, False),
        ("new", "test", 60, False),
    ]
    assert "CPA $20.00 (target: $25.00)" in recommendations[2].reason


@pytest.mark.asyncio
async def test_recommendations_use_account_thresholds(lifecycle_store, make_creative) -> None:
    manager = LifecycleManager(lifecycle_store)
    await manager.update_learning_config("strict", {"target_cpa": 10.0, "target_roas": 5.0})

    recommendations = await manager.generate_action_recommendations([make_creative("steady")], "strict")

    assert [item.recommended_action for item in recommendations] == ["pause"]


@pytest.mark.asyncio
async def test_execute_automated_action_logs_rule_decision(lifecycle_store, make_creative) -> None:
    creative = make_creative("failing", cpa=60.0, roas=None, ctr=0.002)
    lifecycle_store.seed_creative(creative)
    manager = LifecycleManager(lifecycle_store)
    [recommendation] = await manager.generate_action_recommendations([creative], "acct_1")

    action_id = await manager.execute_automated_action(recommendation)

    action = lifecycle_store.actions[-1]
    assert action.id == action_id
    assert action.action_type == "paused"
    assert action.decided_by == "rule"
    assert action.reason_short == "Auto-pause"
    assert action.inputs == {
        "confidence": 100,
        "metrics": {"spend": 100.0, "ctr": 0.002, "cpa": 60.0, "roas": None},
    }
