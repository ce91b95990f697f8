"""Writes the manifest to disk and points package.json at it."""

from __future__ import annotations

import json
import posixpath
from pathlib import Path

from .logging import get_logger

MANIFEST_FILENAME = "custom-elements.json"

logger = get_logger("writer")


def manifest_path(root: Path, outdir: str = "") -> Path:
    return root / package_json_value(outdir)


def package_json_value(outdir: str = "") -> str:
    """The ``customElements`` value: a POSIX join of outdir and the manifest name."""
    return posixpath.normpath(posixpath.join(outdir, MANIFEST_FILENAME)) if outdir else MANIFEST_FILENAME


def write_manifest(root: Path, text: str, outdir: str = "") -> Path:
    target = manifest_path(root, outdir)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", target)
    return target


def update_package_json(root: Path, outdir: str = "") -> bool:
    """Set ``customElements`` in the project's package.json.

    The file is rewritten only when the value changes. Returns True when it
    was written.
    """
    package_json = root / "package.json"
    if not package_json.is_file():
        logger.warning("No package.json in %s; skipping customElements update", root)
        return False
    try:
        payload = json.loads(package_json.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        logger.warning("Could not parse %s: %s", package_json, exc)
        return False
    if not isinstance(payload, dict):
        logger.warning("%s does not contain an object; skipping customElements update", package_json)
        return False

    value = package_json_value(outdir)
    if payload.get("customElements") == value:
        return False
    payload["customElements"] = value
    package_json.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
    logger.debug("Set customElements to %s in %s", value, package_json)
    return True


__all__ = [
    "MANIFEST_FILENAME",
    "manifest_path",
    "package_json_value",
    "update_package_json",
    "write_manifest",
]
