#!/usr/bin/env python3
"""
Seed the snippet store with demo snippets.

Saves each entry of SEED_SNIPPETS into a project (embedding computed by the
HF API, stored in Milvus). Re-running replaces the same snippets in place.
Requires MILVUS_URI, MILVUS_TOKEN and HF_API_KEY in .env.

Run from project root:

    python scripts/seed_snippets.py
    python scripts/seed_snippets.py --project demo-project
"""

import argparse
import sys
from pathlib import Path

# Project root on path so "snippy" resolves
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from snippy.core.errors import ServiceUnavailableError
from snippy.services.snippet_service import save_snippet

# (name, content) pairs; edit to change the demo data.
SEED_SNIPPETS = [
    (
        "fastapi_health_route",
        '@router.get("/health", tags=["system"])\ndef health():\n    return {"ok": True}\n',
    ),
    (
        "retry_with_backoff",
        "def retry(fn, attempts=3, delay=0.5):\n"
        "    for i in range(attempts):\n"
        "        try:\n"
        "            return fn()\n"
        "        except ConnectionError:\n"
        "            if i == attempts - 1:\n"
        "                raise\n"
        "            time.sleep(delay * 2 ** i)\n",
    ),
    (
        "module_logger",
        "import logging\n\nlogger = logging.getLogger(__name__)\n",
    ),
    (
        "pydantic_request_model",
        "class SaveRequest(BaseModel):\n"
        "    name: str = Field(..., min_length=1)\n"
        "    content: str = Field(..., min_length=1)\n",
    ),
]


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the snippet store with demo snippets.")
    parser.add_argument(
        "--project",
        default=None,
        help="Project id to save into (default: the configured default project).",
    )
    args = parser.parse_args()

    for name, content in SEED_SNIPPETS:
        try:
            saved = save_snippet(name, content, project=args.project)
        except ServiceUnavailableError as e:
            print(f"Failed: {e.message}", file=sys.stderr)
            sys.exit(1)
        print(f"  saved: {saved['project']}/{saved['name']}")

    print(f"Done. Seeded {len(SEED_SNIPPETS)} snippets.")


if __name__ == "__main__":
    main()
