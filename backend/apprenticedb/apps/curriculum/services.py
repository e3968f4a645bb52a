from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from . import models

ProgressIndex = Dict[str, Dict[str, models.CurriculumProgressStatus]]


def find_item(db: Session, item_id: str) -> Optional[models.CurriculumItem]:
    return db.query(models.CurriculumItem).filter(models.CurriculumItem.id == item_id).first()


def list_active_items(db: Session) -> List[models.CurriculumItem]:
    return (
        db.query(models.CurriculumItem)
        .filter(models.CurriculumItem.is_active.is_(True))
        .order_by(models.CurriculumItem.order_index.asc())
        .all()
    )


def progress_index(db: Session, apprentice_ids: Iterable[str]) -> ProgressIndex:
    """
    Load progress rows for a set of apprentices in one query.

    Returns {apprentice_id: {curriculum_item_id: status}}; apprentices with
    no rows map to an empty dict.
    """
    ids = list(dict.fromkeys(apprentice_ids))
    index: ProgressIndex = {apprentice_id: {} for apprentice_id in ids}
    if not ids:
        return index

    rows = (
        db.query(models.ApprenticeProgress)
        .filter(models.ApprenticeProgress.apprentice_id.in_(ids))
        .all()
    )
    grouped: Dict[str, Dict[str, models.CurriculumProgressStatus]] = defaultdict(dict)
    for row in rows:
        grouped[row.apprentice_id][row.curriculum_item_id] = row.status
    index.update(grouped)
    return index


def status_for(
    item: models.CurriculumItem,
    statuses: Dict[str, models.CurriculumProgressStatus],
) -> models.CurriculumProgressStatus:
    return statuses.get(item.id, models.CurriculumProgressStatus.NOT_STARTED)
