"""Provider implementations for the task tracker and the code host.

Key Components:
    - TaskTracker: Abstract base for task trackers
    - CodeHost: Abstract base for code hosts
    - JiraRestTracker: Jira Cloud REST implementation (httpx)
    - GitHubRestCodeHost: GitHub implementation (PyGithub)

Example:
    >>> from alignment_verifier.providers.factory import create_code_host, create_task_tracker
    >>> async with create_task_tracker(settings) as tracker:
    ...     projects = await tracker.list_projects()
"""

from alignment_verifier.providers.base import CodeHost, TaskTracker

__all__ = [
    "CodeHost",
    "TaskTracker",
]
