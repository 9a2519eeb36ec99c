from constant.const_config import DEFAULT_WAIT_TIMEOUT_MS
from libs.dataclass.conceptual_objects import Action
from libs.parsing.action_synthesizer import (
    KEYPRESS_TARGET,
    SYNTHESIS_RULES,
    classify_line,
    clean_step_line,
    collapse_adjacent_duplicates,
    synthesize_actions,
)


def test_rule_table_order() -> None:
    assert [r.name for r in SYNTHESIS_RULES] == [
        "click", "waitUntilVisible", "isVisible", "setValue", "keypress", "fallbackClick",
    ]


def test_click_line() -> None:
    assert classify_line("Click on the Login button") == Action("click", "loginButton")
    assert classify_line("1. Tap on Cart icon") == Action("click", "cartIcon")


def test_wait_line_carries_default_timeout() -> None:
    assert classify_line("Wait for the dashboard to load") == Action(
        "waitUntilVisible", "dashboard", (DEFAULT_WAIT_TIMEOUT_MS,))


def test_visibility_line() -> None:
    assert classify_line("Verify that the Home screen is displayed") == Action("isVisible", "homeScreen")


def test_set_value_with_quoted_value_and_field() -> None:
    assert classify_line('Enter "bob" in the username field') == Action("setValue", "usernameField", ("bob",))


def test_press_named_key_is_keypress_not_click() -> None:
    assert classify_line("Press Enter") == Action("keypress", KEYPRESS_TARGET, ("Enter",))
    assert classify_line("Press the Submit button") == Action("click", "submitButton")


def test_fallback_click_for_other_navigation_verbs() -> None:
    assert classify_line("Select 'Settings' option") == Action("fallbackClick", "settings")


def test_unrecognized_and_blank_lines() -> None:
    assert classify_line("") is None
    assert classify_line("Observe the weather") is None


def test_clean_step_line_strips_numbering_and_bullets() -> None:
    assert clean_step_line("Step 3: Tap Login") == "Tap Login"
    assert clean_step_line("- 2) Tap Login") == "Tap Login"


def test_collapse_adjacent_duplicates_only_collapses_neighbours() -> None:
    a = Action("click", "loginButton")
    b = Action("click", "cartIcon")
    assert collapse_adjacent_duplicates([a, a, b, a]) == [a, b, a]


def test_synthesize_actions_is_deterministic() -> None:
    steps = (
        "1. Tap on Login button\n"
        "2. Tap on Login button\n"
        "\n"
        "3. Enter \"secret\" in the password field\n"
        "4. Press Enter\n"
        "5. Verify that the Home screen is displayed\n"
        "Some narrative line\n"
    )
    expected = [
        Action("click", "loginButton"),
        Action("setValue", "passwordField", ("secret",)),
        Action("keypress", KEYPRESS_TARGET, ("Enter",)),
        Action("isVisible", "homeScreen"),
    ]
    assert synthesize_actions(steps) == expected
    assert synthesize_actions(steps) == synthesize_actions(steps)
    assert synthesize_actions("") == []
