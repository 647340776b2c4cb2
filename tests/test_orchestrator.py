import pytest

import settings
from entrants import WheelState, identity
from orchestrator import SpinOrchestrator, SpinOutcome


def make(state, store, rng):
    orch = SpinOrchestrator(state, store, rng=rng)
    orch.tick(0)
    return orch


def finish(orch, now=0):
    """Runs frames until the current spin settles; returns the final timestamp."""
    while orch.is_spinning:
        now += 16
        orch.tick(now)
    return now


def test_three_fresh_names(fake_store, seeded_rng):
    state = WheelState(names=["Ann", "Bob", "Cara"], only_new=True)
    orch = make(state, fake_store, seeded_rng)
    assert orch.eligible() == [0, 1, 2]

    assert orch.trigger() is SpinOutcome.STARTED
    finish(orch)

    assert len(state.drawn) == 1
    assert state.drawn[0] in ("Ann", "Bob", "Cara")
    ctl = orch.controller
    assert state.drawn[0] == ["Ann", "Bob", "Cara"][ctl.last_winner]
    assert orch.last_winner == state.drawn[0]
    assert fake_store.saved[-1]["drawn"] == state.drawn


def test_only_remaining_name_is_drawn(fake_store, seeded_rng):
    for _ in range(20):
        state = WheelState(names=["Ann", "Bob"], drawn=["ann"], only_new=True)
        orch = make(state, fake_store, seeded_rng)
        assert orch.eligible() == [1]
        assert orch.trigger() is SpinOutcome.STARTED
        finish(orch)
        assert orch.last_winner == "Bob"
        assert state.drawn == ["ann", "Bob"]


@pytest.mark.parametrize("only_new", [False, True])
def test_no_entrants(fake_store, seeded_rng, only_new):
    state = WheelState(names=[], drawn=[], only_new=only_new)
    orch = make(state, fake_store, seeded_rng)
    wheel, pointer = orch.controller.wheel_angle, orch.controller.pointer_angle

    assert orch.trigger() is SpinOutcome.NO_ENTRANTS
    assert not orch.is_spinning
    assert (orch.controller.wheel_angle, orch.controller.pointer_angle) == (wheel, pointer)
    assert state.drawn == []
    assert fake_store.saved == []


def test_no_eligible_entrants(fake_store, seeded_rng):
    state = WheelState(names=["Ann"], drawn=["ann"], only_new=True)
    orch = make(state, fake_store, seeded_rng)
    assert orch.trigger() is SpinOutcome.NO_ELIGIBLE
    assert not orch.is_spinning
    assert state.drawn == ["ann"]


def test_trigger_while_spinning_is_ignored(fake_store, seeded_rng):
    state = WheelState(names=["Ann", "Bob", "Cara"], only_new=True)
    orch = make(state, fake_store, seeded_rng)
    assert orch.trigger() is SpinOutcome.STARTED
    orch.tick(500)
    session = orch.controller.session
    target, index = session.target_angle, session.index

    assert orch.trigger() is SpinOutcome.BUSY
    assert orch.controller.session is session
    assert (session.target_angle, session.index) == (target, index)
    assert state.drawn == []


def test_history_only_changes_after_bottle_settles(fake_store, seeded_rng):
    state = WheelState(names=["Ann", "Bob"])
    orch = make(state, fake_store, seeded_rng)
    orch.trigger()
    for now in range(16, 2400, 16):
        orch.tick(now)
        assert state.drawn == []
        assert fake_store.saved == []
    orch.tick(2400)
    assert len(state.drawn) == 1
    assert len(fake_store.saved) == 1


def test_repeat_winner_is_not_duplicated(fake_store, seeded_rng):
    state = WheelState(names=["Ann"], drawn=["ANN"], only_new=False)
    orch = make(state, fake_store, seeded_rng)
    assert orch.trigger() is SpinOutcome.STARTED
    finish(orch)
    assert orch.last_winner == "Ann"
    assert state.drawn == ["ANN"]


def test_only_new_draws_everyone_exactly_once(fake_store, seeded_rng):
    names = ["Ann", "Bob", "Cara", "Dan", "Eve"]
    state = WheelState(names=list(names), only_new=True)
    orch = make(state, fake_store, seeded_rng)
    now = 0
    for _ in names:
        assert orch.trigger() is SpinOutcome.STARTED
        now = finish(orch, now)
    assert sorted(state.drawn) == sorted(names)
    assert orch.trigger() is SpinOutcome.NO_ELIGIBLE


def test_history_stays_within_roster(store, seeded_rng):
    state = WheelState(names=["Ann", "Bob", "Cara", "Dan"])
    orch = make(state, store, seeded_rng)
    now = 0
    rosters = ["Ann\nBob\nCara\nDan", "Bob\nDan\nEve", "eve\nFay", "Fay\nGus\nBob"]
    for text in rosters:
        settings.commit_names(state, store, text)
        for _ in range(3):
            assert orch.trigger() is SpinOutcome.STARTED
            now = finish(orch, now)
            present = {identity(n) for n in state.names}
            assert all(identity(d) in present for d in state.drawn)
