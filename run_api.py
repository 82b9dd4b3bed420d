"""Helper launcher to run the verification API without installing the package.

Usage (from project root):
  ZKV_REGISTRY_URL=https://registry.example ZKV_VERIFICATION_KEY_PATH=vk.json python run_api.py
"""
from __future__ import annotations

import pathlib
import sys

ROOT = pathlib.Path(__file__).parent
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from zkverifier.api.main import app  # noqa: E402
from zkverifier.settings import settings  # noqa: E402

if __name__ == "__main__":
    import logging

    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run(app, host="127.0.0.1", port=8000, reload=False)
