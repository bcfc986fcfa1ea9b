import json
import logging

from src.api.generate_openapi import generate_openapi
from src.api.logging_setup import setup_logging


def test_generate_openapi_writes_schema(tmp_path):
    out = generate_openapi(str(tmp_path / "interfaces" / "openapi.json"))
    with open(out, encoding="utf-8") as f:
        schema = json.load(f)
    assert schema["info"]["title"] == "Task Tracker"
    assert "/api/v1/tasks/" in schema["paths"]
    assert "/api/v1/tasks/{task_id}" in schema["paths"]
    assert {t["name"] for t in schema["tags"]} >= {"health", "tasks"}


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("warning")
        setup_logging("not-a-level")
        assert len(root.handlers) == 1
        assert root.level == logging.INFO
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
