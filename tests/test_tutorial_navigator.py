"""
Unit tests for tutorial steps and the step navigator.
"""

import pytest
from pydantic import ValidationError

from src.shared.tutorial import StepNavigator, TutorialStep


def make_steps(count: int = 5):
    return [TutorialStep(id=i, title=f"Step {i}", description=f"Description {i}") for i in range(1, count + 1)]


class TestTutorialStep:

    def test_to_browser_shape(self):
        step = TutorialStep(
            id=2, title="Create a Service", description="Set up", icon="🔧",
            html_content="<p>hi</p>", code_sample="const a = 1;", curl_sample="curl x"
        )

        assert step.to_browser() == {
            "id": 2,
            "title": "Create a Service",
            "description": "Set up",
            "icon": "🔧",
            "content": "<p>hi</p>",
            "code": "const a = 1;",
            "curl": "curl x",
        }

    def test_step_ids_start_at_one(self):
        with pytest.raises(ValidationError):
            TutorialStep(id=0, title="Zero")

    def test_steps_are_immutable(self):
        step = TutorialStep(id=1, title="One")
        with pytest.raises(ValidationError):
            step.title = "Changed"


class TestStepNavigator:

    def test_starts_at_first_step(self):
        navigator = StepNavigator(make_steps())

        assert navigator.current.id == 1
        assert navigator.is_first
        assert not navigator.is_last

    def test_initial_position(self):
        navigator = StepNavigator(make_steps(), current_id=3)

        assert navigator.current.id == 3

    def test_next_and_previous(self):
        navigator = StepNavigator(make_steps())

        assert navigator.next().id == 2
        assert navigator.next().id == 3
        assert navigator.previous().id == 2

    def test_next_at_last_step_is_noop(self):
        navigator = StepNavigator(make_steps(), current_id=5)

        assert navigator.next().id == 5
        assert navigator.is_last

    def test_previous_at_first_step_is_noop(self):
        navigator = StepNavigator(make_steps())

        assert navigator.previous().id == 1
        assert navigator.is_first

    @pytest.mark.parametrize("requested,expected", [(0, 1), (-4, 1), (6, 5), (99, 5), (4, 4)])
    def test_show_clamps_to_bounds(self, requested, expected):
        navigator = StepNavigator(make_steps())

        assert navigator.show(requested).id == expected

    def test_steps_are_ordered_by_id(self):
        steps = list(reversed(make_steps(3)))
        navigator = StepNavigator(steps)

        assert [step.id for step in navigator.steps] == [1, 2, 3]

    def test_button_state(self):
        navigator = StepNavigator(make_steps(3))
        assert navigator.button_state() == {"show_back": False, "show_next": True}

        navigator.next()
        assert navigator.button_state() == {"show_back": True, "show_next": True}

        navigator.next()
        assert navigator.button_state() == {"show_back": True, "show_next": False}

    def test_neighbour_ids(self):
        navigator = StepNavigator(make_steps(5), current_id=3)

        assert navigator.neighbour_ids() == {"back": 2, "next": 4}
        assert navigator.current.id == 3

    def test_neighbour_ids_at_the_ends(self):
        assert StepNavigator(make_steps(5), current_id=1).neighbour_ids() == {"back": 1, "next": 2}
        assert StepNavigator(make_steps(5), current_id=5).neighbour_ids() == {"back": 4, "next": 5}

    def test_neighbour_ids_skip_missing_ids(self):
        steps = [TutorialStep(id=i, title=f"Step {i}") for i in (1, 4, 7)]

        assert StepNavigator(steps, current_id=4).neighbour_ids() == {"back": 1, "next": 7}

    def test_single_step_tutorial(self):
        navigator = StepNavigator(make_steps(1))

        assert navigator.button_state() == {"show_back": False, "show_next": False}

    def test_empty_step_list_rejected(self):
        with pytest.raises(ValueError):
            StepNavigator([])
