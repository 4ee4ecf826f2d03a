import logging

import pytest

from chaos_theorist.store.actions import SelectSystem, SetGlobalError
from chaos_theorist.store.state import AppState
from chaos_theorist.store.store import Store


def test_listener_sees_each_transition():
    store = Store()
    seen = []
    store.subscribe(lambda state, action: seen.append((type(action).__name__, state.selected_system_id)))

    store.dispatch(SelectSystem("a"))
    store.dispatch(SelectSystem("b"))

    assert seen == [("SelectSystem", "a"), ("SelectSystem", "b")]
    assert list(store.history) == ["SelectSystem", "SelectSystem"]


def test_dispatch_from_listener_is_queued_after_current():
    store = Store()
    order = []

    def chain(state: AppState, action):
        order.append(action)
        if isinstance(action, SelectSystem) and action.system_id == "a":
            store.dispatch(SetGlobalError("follow-up"))
            # the follow-up has not been applied yet
            assert store.state.global_error is None

    store.subscribe(chain)
    final = store.dispatch(SelectSystem("a"))

    assert [type(a).__name__ for a in order] == ["SelectSystem", "SetGlobalError"]
    assert final.global_error == "follow-up"
    assert final.selected_system_id == "a"


def test_failing_listener_does_not_block_others(caplog):
    store = Store()
    calls = []

    def broken(state, action):
        raise RuntimeError("boom")

    store.subscribe(broken)
    store.subscribe(lambda state, action: calls.append(action))

    with caplog.at_level(logging.WARNING):
        store.dispatch(SelectSystem("a"))

    assert store.state.selected_system_id == "a"
    assert len(calls) == 1
    assert "boom" in caplog.text


def test_unsubscribe_stops_notifications():
    store = Store()
    calls = []
    unsubscribe = store.subscribe(lambda state, action: calls.append(action))
    store.dispatch(SelectSystem("a"))
    unsubscribe()
    unsubscribe()
    store.dispatch(SelectSystem("b"))
    assert len(calls) == 1


def test_unchanged_state_does_not_notify():
    store = Store()
    calls = []
    store.subscribe(lambda state, action: calls.append(action))
    store.dispatch(object())
    assert calls == []


def test_reducer_failure_propagates_and_clears_queue():
    def exploding(state, action):
        if action == "explode":
            raise ValueError("reducer bug")
        return state

    store = Store(reducer=exploding)
    with pytest.raises(ValueError):
        store.dispatch("explode")
    # store remains usable
    assert store.dispatch("fine") is store.state


def test_history_is_bounded():
    store = Store(history_size=3)
    for name in "abcde":
        store.dispatch(SelectSystem(name))
    assert len(store.history) == 3
