"""Services Layer — task business operations, response mapping, event publishing.

Invariants:
    - Services receive their collaborators (repository, observer, broadcaster) as arguments
    - No service module imports from api/

Design Decisions:
    - One module per concern: task_service, task_mapper, task_events
"""
