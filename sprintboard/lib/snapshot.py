"""
Fetch a project's board data from the backend.
"""

import logging

from sprintboard.lib.api import ApiError, BackendClient
from sprintboard.lib.types import ProjectSnapshot, Sprint, Task, UserStory

logger = logging.getLogger(__name__)


def load_snapshot(client: BackendClient, project_id: str) -> ProjectSnapshot:
    """Build a ProjectSnapshot from the project, task, story and sprint endpoints.

    A project without a details record (404) still loads with an empty name.
    Any other failure propagates.
    """
    try:
        project = client.get_project(project_id) or {}
    except ApiError as e:
        if e.status_code != 404:
            raise
        logger.info(f"[API] Project {project_id} has no details record")
        project = {}

    tasks = [Task.from_api(t) for t in client.list_project_tasks(project_id)]
    stories = [UserStory.from_api(s) for s in client.list_project_stories(project_id)]
    sprints = [Sprint.from_api(s) for s in client.list_project_sprints(project_id)]

    logger.debug(
        f"[API] Loaded project {project_id}: {len(tasks)} tasks, "
        f"{len(stories)} stories, {len(sprints)} sprints"
    )
    return ProjectSnapshot(
        project_id=project_id,
        name=project.get("name") or project.get("title") or "",
        description=project.get("description") or "",
        tasks=tasks,
        stories=stories,
        sprints=sprints,
    )
