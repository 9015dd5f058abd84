"""JSON output helper for the assembled feed."""

from __future__ import annotations

import json
from pathlib import Path


def save_feed_json(feed: dict, output_path: Path) -> Path:
    """Write the feed as UTF-8 JSON, creating parent directories.

    Write failures propagate to the caller.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(feed, f, ensure_ascii=False, indent=2)
        f.write("\n")
    return output_path
