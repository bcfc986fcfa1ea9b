import subprocess
import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def test_sync_client_does_not_import_server_stack():
    code = (
        "import sys\n"
        "import src.sync\n"
        "assert 'fastapi' not in sys.modules, 'fastapi'\n"
        "assert 'src.api.repositories' not in sys.modules, 'repositories'\n"
        "assert 'src.api.routers.tasks' not in sys.modules, 'router'\n"
    )
    result = subprocess.run(
        [sys.executable, "-c", code],
        cwd=str(PROJECT_ROOT),
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, result.stderr
