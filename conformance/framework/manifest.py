"""
Extension manifest check.
"""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import ManifestError


@dataclass
class ExtensionManifest:
    """The parts of an extension manifest the harness relies on."""
    path: Path
    name: str
    version: str
    extension_entry: Path


def validate_manifest(manifest_path: Union[str, Path]) -> ExtensionManifest:
    """Check that a manifest exists, is an extension manifest and points at an entry file."""
    path = Path(manifest_path)
    if not path.exists():
        raise ManifestError(f"Manifest does not exist at path: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ManifestError(f"Failed to validate manifest: {e}") from e

    if not isinstance(data, dict):
        raise ManifestError("Failed to validate manifest: expected a JSON object")

    if data.get("moosyncExtension") is not True:
        raise ManifestError("Manifest is not of a moosync extension")

    entry = data.get("extensionEntry")
    if not isinstance(entry, str) or not entry:
        raise ManifestError("Failed to validate manifest: missing extensionEntry")

    entry_path = Path(entry)
    if not entry_path.is_absolute():
        entry_path = path.parent / entry_path
    if not entry_path.exists():
        raise ManifestError("Extension path defined in manifest does not exist")

    return ExtensionManifest(
        path=path,
        name=str(data.get("name", "")),
        version=str(data.get("version", "")),
        extension_entry=entry_path,
    )
