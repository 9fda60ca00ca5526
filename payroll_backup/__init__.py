"""
payroll_backup -- Local backups of the payroll store.

A rotating ring of automatic snapshots kept in the database, a polling
scheduler that fills it, and the "time to back up" reminder.

Architecture:
    payroll_backup/ is a top-level package.  It reads the store through
    ``RecordStore.export_all`` and serializes with
    ``payroll_ingestion.services.encode_bundle``; nothing in the kernel
    imports from it.

Invariants:
    - The ring never holds more than ``max_backups`` slots; the oldest
      slots are evicted first.
    - At most one snapshot is in flight; a trigger that arrives while one
      runs returns without queuing.
    - All timestamps come from an injected Clock.
"""
