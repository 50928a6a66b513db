"""
Utility functions for search runs.

Provides:
- Logging setup
- Receipt generation
- Receipt persistence (JSON)
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional


def setup_logger(
    name: str, log_file: Optional[Path] = None, level=logging.INFO
) -> logging.Logger:
    """
    Setup logger for a search run.

    Args:
        name: Logger name
        log_file: Optional path to a log file (overwritten)
        level: Logging level

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Clear any existing handlers
    logger.handlers = []

    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
    )

    # Console handler (stderr, so report lines on stdout stay clean)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="w")
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def build_receipt(
    config: Dict[str, Any],
    closure: Dict[str, Any],
    summary: Optional[Dict[str, Any]] = None,
    status: str = "PASS",
    error: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build a receipt dictionary for one run.

    Args:
        config: Search parameters
        closure: Closure receipt (ClosureReceipt.to_dict())
        summary: Coverage summary of the reported range
        status: "PASS" or "FAIL"
        error: Error message if status is FAIL

    Returns:
        Receipt dictionary
    """
    receipt = {
        "timestamp": datetime.now().isoformat(),
        "status": status,
        "config": config,
        "closure": closure,
    }

    if summary is not None:
        receipt["summary"] = summary

    if error is not None:
        receipt["error"] = error

    return receipt


def save_receipt(receipt: Dict[str, Any], path: Path) -> None:
    """Save receipt to a JSON file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        json.dump(receipt, f, indent=2)
