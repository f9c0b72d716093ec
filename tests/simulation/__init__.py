"""
Simulated external services for adapter tests.

Components:
- tasks_api.py: in-memory Tasks API served through httpx.MockTransport

Usage:
    from tests.simulation import SimulatedTasksApi, make_task

    api = SimulatedTasksApi.with_tasks(make_task("T-1"))
    async with ApiClient(settings, transport=api.transport()) as client:
        ...

Only the external API is simulated; the real ApiClient, normalizers and
dispatcher run against it.
"""

from tests.simulation.tasks_api import API_TOKEN, API_URL, SimulatedTasksApi, make_task

__all__ = [
    "API_TOKEN",
    "API_URL",
    "SimulatedTasksApi",
    "make_task",
]
