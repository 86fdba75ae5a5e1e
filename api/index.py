"""Vercel serverless entrypoint.

Vercel imports this file directly from the repository root, so the ``src``
layout is put on the path before the app is built.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))

from photo_party.api.app import create_app  # noqa: E402
from photo_party.containers import build_container  # noqa: E402

app = create_app(build_container())
