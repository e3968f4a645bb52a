from __future__ import annotations

from .guards import (
    guard_entry_approval,
    guard_entry_rejection,
    guard_entry_submission,
)

# States are the stored status values. A state with an empty mapping is
# terminal; a missing edge is an invalid transition.
WORKFLOWS = {
    "logbook_entry": {
        "transitions": {
            "draft": {
                "draft": [],
                "submitted": [guard_entry_submission],
            },
            "submitted": {
                "approved": [guard_entry_approval],
                "rejected": [guard_entry_rejection],
            },
            "approved": {},
            "rejected": {},
        }
    },
}
