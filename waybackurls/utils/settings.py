"""
Optional JSON settings file.

A ``.waybackurls.json`` file in the working directory can override run
options, e.g.::

    {"output_dir": "results", "dedup_by_url": true, "log_dir": null}
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

SETTINGS_FILENAME = '.waybackurls.json'


def settings_path(base_dir: str = None) -> str:
    return os.path.join(os.path.abspath(base_dir or '.'), SETTINGS_FILENAME)


def load_settings(path: str = None, problems: Optional[List[str]] = None) -> Dict[str, Any]:
    """
    Read the settings file.

    Args:
        path: Settings file (defaults to .waybackurls.json in the working
            directory)
        problems: If given, messages about an unusable file are appended
            here instead of being logged, for callers that read settings
            before logging is configured

    Returns:
        The decoded settings, or an empty dict if the file is missing or
        unreadable
    """
    path = path or settings_path()
    if not os.path.exists(path):
        return {}

    message = None
    data: Any = {}
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        message = f"Ignoring unreadable settings file {path}: {e}"
    else:
        if not isinstance(data, dict):
            message = f"Ignoring settings file {path}: expected a JSON object"

    if message is None:
        return data
    if problems is not None:
        problems.append(message)
    else:
        logging.getLogger(__name__).warning(message)
    return {}
