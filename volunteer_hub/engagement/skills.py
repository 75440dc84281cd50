# volunteer_hub/engagement/skills.py
"""
Skill matching between a task's required skills and a volunteer's skills.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AbstractSet, Iterable

from .records import Skill


@dataclass(frozen=True)
class SkillMatch:
    matching: tuple[Skill, ...]
    missing: tuple[Skill, ...]

    @property
    def has_all(self) -> bool:
        return not self.missing

    def summary(self) -> dict[str, str | list[str]]:
        """Labels for the two skill columns of the task table."""
        return {
            "matching": [skill.name for skill in self.matching] or "No matching skills",
            "missing": [skill.name for skill in self.missing] or "You have all required skills",
        }


def match(required_skills: Iterable[Skill], held_skill_ids: AbstractSet[int]) -> SkillMatch:
    """
    Partition ``required_skills`` into the ones the volunteer holds and the ones
    they lack. Both sequences keep the task's declared order.
    """
    matching: list[Skill] = []
    missing: list[Skill] = []
    for skill in required_skills:
        if skill.skill_id in held_skill_ids:
            matching.append(skill)
        else:
            missing.append(skill)
    return SkillMatch(matching=tuple(matching), missing=tuple(missing))
