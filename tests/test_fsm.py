from lizard.app.fsm import AppStateMachine, AppState


def test_starts_idle():
    fsm = AppStateMachine()
    assert fsm.is_idle()
    assert fsm.can_train()
    assert not fsm.can_play()


def test_playback_requires_training():
    fsm = AppStateMachine()
    assert not fsm.start_playback()
    assert fsm.current_state is AppState.IDLE


def test_train_then_play_cycle():
    fsm = AppStateMachine()
    assert fsm.start_training()
    assert fsm.is_active()
    assert fsm.finish_training()
    assert fsm.can_play()
    assert fsm.start_playback()
    assert fsm.is_playing()
    assert fsm.finish_playback()
    assert fsm.is_trained()


def test_finish_playback_outside_playback_is_ignored():
    fsm = AppStateMachine()
    assert not fsm.finish_playback()


def test_error_only_leaves_to_idle():
    fsm = AppStateMachine()
    fsm.start_training()
    assert fsm.fail_error()
    assert not fsm.start_training()
    assert fsm.reset_to_idle()
    assert fsm.start_training()


def test_callbacks_fire_in_order():
    fsm = AppStateMachine()
    calls = []
    fsm.on_state_exit(AppState.IDLE, lambda ctx: calls.append(("exit", ctx)))
    fsm.on_transition(AppState.IDLE, AppState.TRAINING,
                      lambda src, dst, ctx: calls.append(("transition", src, dst)))
    fsm.on_state_enter(AppState.TRAINING, lambda ctx: calls.append(("enter", ctx)))

    fsm.start_training({"episodes": 5})

    assert calls == [
        ("exit", {"episodes": 5}),
        ("transition", AppState.IDLE, AppState.TRAINING),
        ("enter", {"episodes": 5}),
    ]


def test_state_description():
    fsm = AppStateMachine()
    assert "Ready" in fsm.get_state_description()
