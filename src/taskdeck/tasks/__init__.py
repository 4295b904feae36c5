"""
Task subsystem.

Components:
- task_models.py: data structures (TaskRecord, TierStatus, result objects)
- validation.py: label and due date rules
- task_store.py: canonical in-memory collection + write-behind persistence
- view.py: search/filter/sort projection and ViewState
- codec.py: import sanitizing and export serialization
- task_api.py: small high-level helpers used by the console front-end
"""
