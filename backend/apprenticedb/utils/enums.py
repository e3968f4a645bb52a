from __future__ import annotations

import enum
from typing import List, Type


def enum_values(enum_cls: Type[enum.Enum]) -> List[str]:
    """
    `values_callable` for SQLAlchemy Enum columns.

    Status and role columns store the lower-case values that existing rows
    already carry ("draft", "submitted", "mentor", ...), not member names.
    """
    return [member.value for member in enum_cls]
