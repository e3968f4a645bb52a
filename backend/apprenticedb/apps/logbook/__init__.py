# backend/apprenticedb/apps/logbook/__init__.py
"""
Logbook app

Responsible for:
- Daily logbook entries and their review lifecycle
- Hours derivation from start/end times
- ATA chapter classification, including the legacy skills encoding
"""
