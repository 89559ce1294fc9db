
"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskDraft, enums, TaskFilter, TaskStats)
- task_codec.py: Task <-> JSON-safe record conversion
- matrix.py: urgency/importance classification into Eisenhower quadrants
- aggregation.py: stats, filters, upcoming/overdue lists, sorting
- debounce.py: coalescing of persistence writes
- task_store.py: the live collection + debounced persistence + change notifications
- task_views.py: derived read-only projections over a TaskStore
- dates.py: small date/time helpers
"""
