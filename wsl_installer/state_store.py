from __future__ import annotations

import json
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import yaml

from .lib.env import PATHS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResumeMarker:
    stage: str
    timestamp: float

    @classmethod
    def now(cls, stage: str) -> "ResumeMarker":
        return cls(stage=stage, timestamp=time.time())


class MarkerStore(Protocol):
    """Holds at most one resume marker; must survive process exit and reboot."""

    def load(self) -> Optional[ResumeMarker]:
        ...

    def save(self, marker: ResumeMarker) -> None:
        ...

    def clear(self) -> None:
        ...


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def load_state(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        return {}

    text = p.read_text(encoding="utf-8")
    if _detect_format(p) in {"yaml", "yml"}:
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)

    if not isinstance(data, dict):
        raise ValueError(f"State file must be an object/dict, got {type(data)}")

    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(state, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(state, indent=2, sort_keys=True) + "\n", encoding="utf-8")


class FileMarkerStore:
    """Resume marker kept in a JSON or YAML file."""

    def __init__(self, path: str) -> None:
        self.path = path

    def load(self) -> Optional[ResumeMarker]:
        try:
            data = load_state(self.path)
            stage = data.get("stage")
            if not stage:
                return None
            return ResumeMarker(stage=str(stage), timestamp=float(data.get("timestamp") or 0.0))
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable resume marker %s: %s", self.path, e)
            return None

    def save(self, marker: ResumeMarker) -> None:
        save_state(self.path, {"stage": marker.stage, "timestamp": marker.timestamp})

    def clear(self) -> None:
        Path(self.path).unlink(missing_ok=True)


class RegistryMarkerStore:
    r"""Resume marker kept under HKCU\Software\<namespace>."""

    def __init__(self, namespace: str) -> None:
        self.key_path = rf"Software\{namespace}"

    def load(self) -> Optional[ResumeMarker]:
        import winreg

        try:
            with winreg.OpenKey(winreg.HKEY_CURRENT_USER, self.key_path, 0, winreg.KEY_READ) as key:
                stage, _ = winreg.QueryValueEx(key, "Stage")
                try:
                    ts, _ = winreg.QueryValueEx(key, "Timestamp")
                except FileNotFoundError:
                    ts = "0"
            if not stage:
                return None
            return ResumeMarker(stage=str(stage), timestamp=float(ts or 0.0))
        except FileNotFoundError:
            return None
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Ignoring unreadable resume marker HKCU\\%s: %s", self.key_path, e)
            return None

    def save(self, marker: ResumeMarker) -> None:
        import winreg

        with winreg.CreateKeyEx(winreg.HKEY_CURRENT_USER, self.key_path, 0, winreg.KEY_WRITE) as key:
            winreg.SetValueEx(key, "Stage", 0, winreg.REG_SZ, marker.stage)
            winreg.SetValueEx(key, "Timestamp", 0, winreg.REG_SZ, repr(marker.timestamp))

    def clear(self) -> None:
        import winreg

        try:
            winreg.DeleteKey(winreg.HKEY_CURRENT_USER, self.key_path)
        except FileNotFoundError:
            pass


def default_marker_store(*, namespace: str, state_path: Optional[str] = None) -> MarkerStore:
    """Registry on Windows unless a state file was requested explicitly."""

    if state_path:
        return FileMarkerStore(state_path)
    if sys.platform == "win32":
        return RegistryMarkerStore(namespace)
    return FileMarkerStore(PATHS.state_default)
