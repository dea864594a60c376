"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, history entries, UserSettings)
- lifecycle.py: pure transition/derivation rules for every mutation
- history.py: append-only change log
- task_store.py: in-memory store (applies lifecycle results, logs history)
- settings_store.py: the single UserSettings record
- board.py: active/scheduled partitions and completion stats
- rollover.py: daily rollover decision rule + polling scheduler
- task_api.py: BoardService, the seam a transport layer calls into
"""
