# checklist.py
#
# Description:
# Session-only checklist state for cooking a recipe. Checking off a
# top-level ingredient also checks the step ingredients that mention it,
# and a step counts as done once all of its ingredients are checked.
# Every toggle returns a new ChecklistState; nothing is modified in place.

import logging
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Sequence

from ingredients import find_ingredient_index, names_overlap, resolve_step_ingredient
from models import Ingredient, Instruction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChecklistState:
    checked_top_ingredients: FrozenSet[int] = frozenset()
    step_checked_ingredients: Mapping[int, FrozenSet[int]] = field(default_factory=dict)
    completed_steps: FrozenSet[int] = frozenset()

    def __post_init__(self) -> None:
        # read-only view over a private copy
        object.__setattr__(self, "step_checked_ingredients",
                           MappingProxyType(dict(self.step_checked_ingredients)))

    def __hash__(self) -> int:
        return hash((self.checked_top_ingredients,
                     frozenset(self.step_checked_ingredients.items()),
                     self.completed_steps))

    def step_checked(self, step_index: int) -> FrozenSet[int]:
        return self.step_checked_ingredients.get(step_index, frozenset())

    def is_top_checked(self, index: int) -> bool:
        return index in self.checked_top_ingredients

    def is_step_ingredient_checked(self, step_index: int, sub_index: int) -> bool:
        return sub_index in self.step_checked(step_index)

    def is_step_completed(self, step_index: int) -> bool:
        return step_index in self.completed_steps


def _with(items: FrozenSet[int], index: int, present: bool) -> FrozenSet[int]:
    return items | {index} if present else items - {index}


def _step_is_complete(checked: FrozenSet[int], step: Instruction) -> bool:
    total = len(step.ingredients)
    return total > 0 and len(checked) == total


def toggle_top_ingredient(
    state: ChecklistState,
    index: int,
    top_ingredients: Sequence[Ingredient],
    instructions: Sequence[Instruction],
) -> ChecklistState:
    """
    Flips a top-level ingredient and mirrors the change onto every step.

    Each step ingredient whose resolved name overlaps the toggled
    ingredient's name takes the new checked value. Afterwards every step is
    re-evaluated: it is completed iff it has at least one ingredient and all
    of them are checked.
    """
    if not 0 <= index < len(top_ingredients):
        logger.debug(f"Ignoring toggle of unknown ingredient index {index}.")
        return state

    now_checked = index not in state.checked_top_ingredients
    top_name = top_ingredients[index].name

    step_checked: Dict[int, FrozenSet[int]] = dict(state.step_checked_ingredients)
    completed = set(state.completed_steps)

    for step_index, step in enumerate(instructions):
        checked = state.step_checked(step_index)
        for sub_index, step_ingredient in enumerate(step.ingredients):
            resolved_name = resolve_step_ingredient(step_ingredient, top_ingredients).name
            if names_overlap(resolved_name, top_name):
                checked = _with(checked, sub_index, now_checked)
        step_checked[step_index] = checked
        if _step_is_complete(checked, step):
            completed.add(step_index)
        else:
            completed.discard(step_index)

    return ChecklistState(
        checked_top_ingredients=_with(state.checked_top_ingredients, index, now_checked),
        step_checked_ingredients=step_checked,
        completed_steps=frozenset(completed),
    )


def toggle_step_ingredient(
    state: ChecklistState,
    step_index: int,
    sub_index: int,
    top_ingredients: Sequence[Ingredient],
    instructions: Sequence[Instruction],
) -> ChecklistState:
    """
    Flips one ingredient of one step.

    The step's completion is recomputed, and the matching top-level
    ingredient (if any) is set to the same checked value. Other steps that
    mention the same ingredient are not touched, so they can disagree with
    the top-level state; the last toggle wins.
    """
    if not 0 <= step_index < len(instructions):
        return state
    step = instructions[step_index]
    if not 0 <= sub_index < len(step.ingredients):
        return state

    now_checked = sub_index not in state.step_checked(step_index)
    checked = _with(state.step_checked(step_index), sub_index, now_checked)

    step_checked = dict(state.step_checked_ingredients)
    step_checked[step_index] = checked
    completed = _with(state.completed_steps, step_index, _step_is_complete(checked, step))

    top_checked = state.checked_top_ingredients
    resolved_name = resolve_step_ingredient(step.ingredients[sub_index], top_ingredients).name
    top_index = find_ingredient_index(resolved_name, top_ingredients)
    if top_index != -1:
        top_checked = _with(top_checked, top_index, now_checked)

    return ChecklistState(
        checked_top_ingredients=top_checked,
        step_checked_ingredients=step_checked,
        completed_steps=completed,
    )


def toggle_step(
    state: ChecklistState,
    step_index: int,
    top_ingredients: Sequence[Ingredient],
    instructions: Sequence[Instruction],
) -> ChecklistState:
    """
    Marks a whole step done or not done.

    Completing a step checks all of its ingredients and their top-level
    matches; other top-level entries stay as they were. Reopening a step
    clears its ingredients and unchecks their top-level matches.
    """
    if not 0 <= step_index < len(instructions):
        return state

    step = instructions[step_index]
    completing = step_index not in state.completed_steps

    top_indexes: List[int] = []
    for step_ingredient in step.ingredients:
        resolved_name = resolve_step_ingredient(step_ingredient, top_ingredients).name
        top_index = find_ingredient_index(resolved_name, top_ingredients)
        if top_index != -1:
            top_indexes.append(top_index)

    step_checked = dict(state.step_checked_ingredients)
    if completing:
        step_checked[step_index] = frozenset(range(len(step.ingredients)))
        top_checked = state.checked_top_ingredients | frozenset(top_indexes)
    else:
        step_checked[step_index] = frozenset()
        top_checked = state.checked_top_ingredients - frozenset(top_indexes)

    return replace(
        state,
        checked_top_ingredients=top_checked,
        step_checked_ingredients=step_checked,
        completed_steps=_with(state.completed_steps, step_index, completing),
    )
