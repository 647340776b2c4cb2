from entrants import (
    WheelState,
    eligible_indices,
    eligible_names,
    parse_names,
    unique_names,
)


def test_all_indices_eligible_without_only_new():
    assert eligible_indices(["Ann", "Bob", "Cara"], ["ann", "bob"], False) == [0, 1, 2]


def test_only_new_with_empty_history():
    assert eligible_indices(["Ann", "Bob", "Cara"], [], True) == [0, 1, 2]


def test_only_new_skips_drawn_case_insensitively():
    assert eligible_indices(["Ann", "Bob"], ["ann"], True) == [1]
    assert eligible_indices(["Ann", "Bob", "Cara"], ["CARA", "aNN"], True) == [1]


def test_nobody_left():
    assert eligible_indices(["Ann"], ["ann"], True) == []
    assert eligible_indices([], [], True) == []
    assert eligible_indices([], [], False) == []


def test_resolver_is_idempotent():
    names, drawn = ["Ann", "Bob", "Cara", "Dan"], ["bob"]
    first = eligible_indices(names, drawn, True)
    assert eligible_indices(names, drawn, True) == first
    assert names == ["Ann", "Bob", "Cara", "Dan"] and drawn == ["bob"]


def test_unique_names_keeps_first_spelling():
    assert unique_names(["Ann", "ANN", "bob", "Bob", "ann"]) == ["Ann", "bob"]


def test_parse_names_trims_and_drops_blanks():
    assert parse_names("  Ann \r\n\nBob\n   \nCara") == ["Ann", "Bob", "Cara"]


def test_normalize_filters_history_to_roster():
    state = WheelState(names=[" Ann", "ann", "Bob", ""], drawn=["ANN", "Zed", "ann", " "])
    state.normalize()
    assert state.names == ["Ann", "Bob"]
    assert state.drawn == ["ANN"]


def test_record_drawn_is_append_if_absent():
    state = WheelState(names=["Ann", "Bob"], drawn=["ann"])
    assert state.record_drawn("Ann") is False
    assert state.record_drawn("Bob") is True
    assert state.drawn == ["ann", "Bob"]


def test_from_record_rejects_bad_shapes():
    assert WheelState.from_record(None) is None
    assert WheelState.from_record([]) is None
    assert WheelState.from_record({"names": "Ann"}) is None


def test_from_record_tolerates_bad_history():
    state = WheelState.from_record({"names": ["Ann", 7], "drawn": "ann", "onlyNew": 1})
    assert state.names == ["Ann", "7"]
    assert state.drawn == []
    assert state.only_new is True


def test_eligible_names():
    state = WheelState(names=["Ann", "Bob"], drawn=["bob"], only_new=True)
    assert eligible_names(state) == ["Ann"]
