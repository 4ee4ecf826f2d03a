from dataclasses import dataclass

from hypothesis import HealthCheck, given, settings, strategies as st

from chaos_theorist.domain.chat import AIModel, Sender, new_message
from chaos_theorist.store.actions import (
    AddChatMessage,
    MarkChatMessageFailed,
    ReplaceSystems,
    SelectSystem,
    SetChatModel,
    SetGlobalError,
    SetLeverageIdle,
    SetLeverageLoading,
    SetLeveragePoints,
    SetLeverageUnavailable,
    SetLoading,
    SetParameterError,
    SetParameterPending,
    SetPreference,
    ToggleChat,
    UpdateSystem,
)
from chaos_theorist.gateway.seed import build_leverage_points
from chaos_theorist.store.reducer import reduce
from chaos_theorist.store.state import AnalysisStatus, LoadingKey, initial_state


@dataclass(frozen=True)
class Unknown:
    payload: str = "noise"


def test_unknown_transition_returns_same_object():
    state = initial_state()
    assert reduce(state, Unknown()) is state
    assert reduce(state, "not-an-action") is state


def test_select_system_is_unconditional():
    state = reduce(initial_state(), SelectSystem("does-not-exist"))
    assert state.selected_system_id == "does-not-exist"
    assert reduce(state, SelectSystem(None)).selected_system_id is None


def test_update_system_keeps_other_entries_identical(make_system):
    a, b = make_system("a"), make_system("b")
    state = reduce(initial_state(), ReplaceSystems((a, b)))
    updated_a = a.with_parameter_value("p1", 55)
    after = reduce(state, UpdateSystem(updated_a))
    assert after.systems[0] is updated_a
    assert after.systems[1] is state.systems[1]
    assert [s.id for s in after.systems] == ["a", "b"]


def test_update_unknown_system_is_noop(make_system):
    state = reduce(initial_state(), ReplaceSystems((make_system("a"),)))
    assert reduce(state, UpdateSystem(make_system("ghost"))) is state


def test_replace_systems_drops_duplicate_ids(make_system):
    first = make_system("a")
    state = reduce(initial_state(), ReplaceSystems((first, make_system("a"), make_system("b"))))
    assert [s.id for s in state.systems] == ["a", "b"]
    assert state.systems[0] is first


def test_set_loading_touches_one_flag():
    state = reduce(initial_state(), SetLoading(LoadingKey.SYSTEMS, True))
    assert state.loading.systems is True
    assert state.loading.simulations is False
    assert state.loading.get(LoadingKey.AGENTS) is False


def test_preferences_merge_and_ignore_unknown_keys():
    state = initial_state()
    state = reduce(state, SetPreference("dark_mode", True))
    state = reduce(state, SetPreference("notification_settings", {"critical_alerts": False}))
    assert state.user_preferences.dark_mode is True
    assert state.user_preferences.notification_settings.critical_alerts is False
    assert state.user_preferences.notification_settings.simulation_updates is True
    assert reduce(state, SetPreference("font", "comic")) is state


def test_notification_settings_read_text_flags_and_skip_unparseable():
    state = reduce(
        initial_state(),
        SetPreference("notification_settings", {"critical_alerts": "false", "simulation_updates": "maybe"}),
    )
    settings_ = state.user_preferences.notification_settings
    assert settings_.critical_alerts is False
    assert settings_.simulation_updates is True

    state = reduce(state, SetPreference("notification_settings", {"critical_alerts": "Yes"}))
    assert state.user_preferences.notification_settings.critical_alerts is True


def test_chat_messages_append_in_order():
    first = new_message("A", Sender.USER)
    second = new_message("B", Sender.AI, ai_model=AIModel.GEMINI)
    state = reduce(reduce(initial_state(), AddChatMessage(first)), AddChatMessage(second))
    assert [m.text for m in state.chat.messages] == ["A", "B"]


def test_failed_message_marked_without_editing_it():
    msg = new_message("hello", Sender.USER)
    state = reduce(initial_state(), AddChatMessage(msg))
    state = reduce(state, MarkChatMessageFailed(msg.id))
    assert state.chat.failed_message_ids == frozenset({msg.id})
    assert state.chat.messages == (msg,)


def test_toggle_chat_and_model():
    state = reduce(initial_state(), ToggleChat())
    assert state.chat.is_open is True
    assert reduce(state, ToggleChat()).chat.is_open is False
    assert reduce(state, SetChatModel(AIModel.CLAUDE)).chat.current_model is AIModel.CLAUDE


def test_leverage_status_transitions():
    points = tuple(p for p in build_leverage_points() if p.system_id == "financial-market-stability-v1")
    sid = "financial-market-stability-v1"
    state = reduce(initial_state(), SetLeverageLoading(sid))
    assert state.leverage_for(sid).status is AnalysisStatus.LOADING
    state = reduce(state, SetLeveragePoints(sid, points))
    assert state.leverage_for(sid).status is AnalysisStatus.READY
    assert state.leverage_for(sid).points == points

    reloading = reduce(state, SetLeverageLoading(sid))
    assert reloading.leverage_for(sid).points == points
    idle = reduce(reloading, SetLeverageIdle(sid))
    assert idle.leverage_for(sid).status is AnalysisStatus.IDLE
    assert idle.leverage_for(sid).points == points

    failed = reduce(state, SetLeverageUnavailable(sid, "Analysis unavailable"))
    assert failed.leverage_for(sid).status is AnalysisStatus.UNAVAILABLE
    assert failed.leverage_for(sid).points == ()
    assert state.leverage_for("other").status is AnalysisStatus.IDLE


def test_parameter_edit_slots():
    state = reduce(initial_state(), SetParameterPending("s", "p", True))
    state = reduce(state, SetParameterError("s", "p", "bad value"))
    edit = state.parameter_edit("s", "p")
    assert edit.pending is True
    assert edit.error == "bad value"
    assert state.parameter_edit("s", "q").error is None


action_strategy = st.one_of(
    st.builds(SelectSystem, st.one_of(st.none(), st.sampled_from(["a", "b", "c"]))),
    st.builds(SetGlobalError, st.one_of(st.none(), st.text(max_size=10))),
    st.builds(SetLoading, st.sampled_from(list(LoadingKey)), st.booleans()),
    st.builds(SetPreference, st.sampled_from(["dark_mode", "refresh_interval_seconds", "bogus"]), st.integers(1, 5)),
    st.just(ToggleChat()),
    st.builds(lambda text: AddChatMessage(new_message(text, Sender.USER)), st.text(min_size=1, max_size=8)),
)


@settings(max_examples=60, suppress_health_check=[HealthCheck.function_scoped_fixture])
@given(actions=st.lists(action_strategy, max_size=12))
def test_reduce_is_pure_and_deterministic(make_system, actions):
    start = reduce(initial_state(), ReplaceSystems((make_system("a"), make_system("b"))))
    snapshot = start

    left = start
    right = start
    for action in actions:
        left = reduce(left, action)
        right = reduce(right, action)

    assert left == right
    assert start is snapshot
    assert start.chat.messages == ()
    assert start.global_error is None


@given(texts=st.lists(st.text(min_size=1, max_size=6), max_size=10))
def test_chat_is_append_only(texts):
    state = initial_state()
    seen = []
    for text in texts:
        previous = state.chat.messages
        msg = new_message(text, Sender.USER)
        state = reduce(state, AddChatMessage(msg))
        seen.append(msg)
        assert state.chat.messages[: len(previous)] == previous
    assert list(state.chat.messages) == seen
