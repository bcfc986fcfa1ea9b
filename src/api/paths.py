"""Route paths shared by the API routers and the sync client."""

TASKS_PATH = "/api/v1/tasks"
