"""Root conftest: keeps the repo root importable and log files out of the tree."""
from __future__ import annotations

import os
import tempfile

os.environ.setdefault("SOCKETMODE_LOG_DIR", os.path.join(tempfile.gettempdir(), "socketmode-test-logs"))
