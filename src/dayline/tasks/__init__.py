"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskStatus, TaskDraft, TimelineSegment)
- normalize.py: total coercion of raw field values
- reindex.py: priority maintenance (insert / rank change / bulk reorder / load)
- task_registry.py: the owning collection with persistence
- timeline.py: projection of ordered tasks onto the day
"""
