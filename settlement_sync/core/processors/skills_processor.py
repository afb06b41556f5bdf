"""
Skills processor for flattening citizen skill maps into per-skill records.
"""

import logging
import re
from typing import List, Optional

from ...models import PlayerSummary, SettlementSkillRecord
from .base_processor import BaseProcessor

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_int(value) -> Optional[int]:
    """Integer prefix of a value, like JavaScript's parseInt; None when there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value == value and value not in (float("inf"), float("-inf")) else None
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


class SkillsProcessor(BaseProcessor):
    """
    Emits one SettlementSkillRecord per (citizen, skill) pair.

    Each citizen's aggregates (total skills, highest level, total level,
    total XP) are copied onto every one of that citizen's rows.
    """

    def get_record_type(self):
        return "skill"

    def process(self, settlement_data):
        if not isinstance(settlement_data, dict):
            logging.info("❌ No citizen/skill data found")
            return []

        citizens = settlement_data.get("citizens")
        skill_names = settlement_data.get("skillNames")
        if not citizens or not isinstance(skill_names, dict):
            logging.info("❌ No citizen/skill data found")
            return []

        logging.info(f"Processing skills for {len(citizens)} citizens...")
        timestamp = self._timestamp()

        records: List[SettlementSkillRecord] = []
        for citizen in citizens:
            if not isinstance(citizen, dict):
                continue
            skills = citizen.get("skills")
            if not isinstance(skills, dict):
                continue

            for skill_id, level in skills.items():
                skill_key = str(skill_id)
                skill_name = skill_names.get(skill_key) or skill_names.get(parse_int(skill_key))
                records.append(
                    SettlementSkillRecord(
                        id=f"{citizen.get('entityId')}-{skill_key}",
                        player_id=citizen.get("entityId"),
                        username=citizen.get("userName"),
                        skill_id=parse_int(skill_key),
                        skill_name=skill_name or f"Skill {skill_key}",
                        skill_level=parse_int(level),
                        total_skills=citizen.get("totalSkills"),
                        highest_level=citizen.get("highestLevel"),
                        total_level=citizen.get("totalLevel"),
                        total_xp=citizen.get("totalXP"),
                        settlement_id=self.settlement_id,
                        timestamp=timestamp,
                    )
                )

        self._log_result(records, f"for {len(citizens)} citizens")
        return records

    def build_player_summaries(self, settlement_data) -> List[PlayerSummary]:
        """One PlayerSummary per citizen, carrying the aggregates the skill rows repeat."""
        citizens = settlement_data.get("citizens") if isinstance(settlement_data, dict) else None
        summaries = []
        for citizen in citizens or []:
            if not isinstance(citizen, dict):
                continue
            skills = citizen.get("skills")
            summaries.append(
                PlayerSummary(
                    player_id=citizen.get("entityId"),
                    username=citizen.get("userName"),
                    skill_count=len(skills) if isinstance(skills, dict) else 0,
                    total_skills=citizen.get("totalSkills"),
                    highest_level=citizen.get("highestLevel"),
                    total_level=citizen.get("totalLevel"),
                    total_xp=citizen.get("totalXP"),
                )
            )
        return summaries
