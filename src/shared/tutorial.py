"""
Tutorial steps and the navigator that walks through them.

Steps are defined once at startup and never change. The navigator only keeps
an index into the ordered list and clamps every move to the list bounds.
"""

from functools import lru_cache
from typing import Any, Dict, List, Optional

import jinja2
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict, Field


class TutorialStep(BaseModel):
    """One page of a tutorial."""
    model_config = ConfigDict(frozen=True)

    id: int = Field(..., ge=1, description="Position of the step, starting at 1")
    title: str = Field(..., min_length=1)
    description: str = Field(default="")
    html_content: str = Field(default="", description="Rendered documentation block")
    code_sample: str = Field(default="", description="SDK code shown next to the step")
    curl_sample: str = Field(default="", description="Equivalent cURL commands")
    icon: str = Field(default="")

    def to_browser(self) -> Dict[str, Any]:
        """Shape injected into window.__ONBOARDING_STEPS__."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "icon": self.icon,
            "content": self.html_content,
            "code": self.code_sample,
            "curl": self.curl_sample,
        }


class StepNavigator:
    """
    Position within an ordered list of tutorial steps.

    show() jumps to a step id (clamped to the valid range), next() and
    previous() move by one and do nothing at either end.
    """

    def __init__(self, steps: List[TutorialStep], current_id: Optional[int] = None):
        if not steps:
            raise ValueError("A tutorial needs at least one step")
        self.steps = sorted(steps, key=lambda step: step.id)
        self._index = 0
        if current_id is not None:
            self.show(current_id)

    @property
    def current(self) -> TutorialStep:
        return self.steps[self._index]

    @property
    def is_first(self) -> bool:
        return self._index == 0

    @property
    def is_last(self) -> bool:
        return self._index == len(self.steps) - 1

    def show(self, step_id: int) -> TutorialStep:
        """Move to the step with the given id, or the nearest valid position."""
        for index, step in enumerate(self.steps):
            if step.id == step_id:
                self._index = index
                return self.current

        if step_id < self.steps[0].id:
            self._index = 0
        elif step_id > self.steps[-1].id:
            self._index = len(self.steps) - 1
        return self.current

    def next(self) -> TutorialStep:
        if not self.is_last:
            self._index += 1
        return self.current

    def previous(self) -> TutorialStep:
        if not self.is_first:
            self._index -= 1
        return self.current

    def button_state(self) -> Dict[str, bool]:
        """Which navigation buttons the page should enable."""
        return {"show_back": not self.is_first, "show_next": not self.is_last}

    def neighbour_ids(self) -> Dict[str, int]:
        """Step ids the back and next links lead to; an end step points at itself."""
        around = StepNavigator(self.steps, self.current.id)
        back_id = around.previous().id
        around.show(self.current.id)
        return {"back": back_id, "next": around.next().id}


@lru_cache()
def _sample_environment(templates: Jinja2Templates) -> jinja2.Environment:
    # Code samples are plain text; the page escapes them once when embedding
    return jinja2.Environment(loader=templates.env.loader, autoescape=False)


def render_page_fragment(templates: Jinja2Templates, name: str, context: Dict[str, Any]) -> str:
    """Render an HTML step body with the application's (autoescaping) environment."""
    return templates.get_template(name).render(**context)


def render_sample(templates: Jinja2Templates, name: str, context: Dict[str, Any]) -> str:
    """Render an SDK or cURL sample as plain text."""
    return _sample_environment(templates).get_template(name).render(**context)
