"""docshelf configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (DOCSHELF_BIND, DOCSHELF_DB, DOCSHELF_ROOT, ...)
  3. Per-project docshelf.yaml  (in the served root)
  4. Global ~/.docshelf/config.yaml
  5. Hardcoded defaults

Config files must never contain API keys; the label service reads its
provider key from the environment (litellm convention).
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".docshelf"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
PROJECT_CONFIG_NAME: str = "docshelf.yaml"

# Key names that look like credentials. Forbidden in any config file.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["server", "index", "extractor", "thumbnails", "labels"]
)

_TRUTHY = {"1", "true", "yes", "on"}


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class ServerCfg:
    """HTTP server and storage locations (docshelf.yaml: server:).

    Attributes:
        bind: ``host:port`` the HTTP server listens on.
        root: Directory holding the ``files/`` tree; relative paths resolve
            against the working directory.
        db: SQLite database file; relative paths resolve against *root*.
        log_level: loguru level name.
    """

    bind: str = "0.0.0.0:9321"
    root: str = "."
    db: str = "schema.db"
    log_level: str = "INFO"

    @property
    def host(self) -> str:
        return self.bind.rsplit(":", 1)[0] or "0.0.0.0"

    @property
    def port(self) -> int:
        return int(self.bind.rsplit(":", 1)[1])

    def db_path(self) -> Path:
        p = Path(self.db)
        return p if p.is_absolute() else Path(self.root) / p


@dataclass
class IndexCfg:
    """Full-text indexing and highlighting (docshelf.yaml: index:)."""

    chunk_size: int = 4096
    highlight_open: str = '<b style="background-color:yellow">'
    highlight_close: str = "</b>"
    search_limit: int | None = None


@dataclass
class ExtractorCfg:
    """Text-extraction service (docshelf.yaml: extractor:).

    Attributes:
        backend: ``tika`` (HTTP PUT to an Apache Tika server) or ``pypdf``
            (local, PDF only).
        url: Tika endpoint.
        timeout: Seconds before an extraction call is abandoned.
    """

    backend: str = "tika"
    url: str = "http://localhost:9998/tika"
    timeout: float = 60.0


@dataclass
class ThumbnailCfg:
    """ImageMagick thumbnail rendering (docshelf.yaml: thumbnails:)."""

    command: str = "convert"
    height: int = 100
    video_frame: int = 100
    timeout: float = 60.0


@dataclass
class LabelsCfg:
    """Image label annotation via a vision model (docshelf.yaml: labels:)."""

    enabled: bool = False
    model: str = "openai/gpt-4o-mini"
    max_labels: int = 10
    timeout: float = 60.0


@dataclass
class DocshelfConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    server: ServerCfg = field(default_factory=ServerCfg)
    index: IndexCfg = field(default_factory=IndexCfg)
    extractor: ExtractorCfg = field(default_factory=ExtractorCfg)
    thumbnails: ThumbnailCfg = field(default_factory=ThumbnailCfg)
    labels: LabelsCfg = field(default_factory=LabelsCfg)

    def as_dict(self) -> dict[str, Any]:
        """Flat ``section.key -> value`` view, used for startup logging."""
        out: dict[str, Any] = {}
        for section in ("server", "index", "extractor", "thumbnails", "labels"):
            for k, v in vars(getattr(self, section)).items():
                out[f"{section}.{k}"] = v
        return out


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: DocshelfConfig) -> None:
    if cfg.extractor.backend not in ("tika", "pypdf"):
        raise ConfigError(
            f"extractor.backend must be 'tika' or 'pypdf', got '{cfg.extractor.backend}'"
        )
    if cfg.index.chunk_size < 1:
        raise ConfigError(f"index.chunk_size must be >= 1, got {cfg.index.chunk_size}")
    if cfg.index.search_limit is not None and cfg.index.search_limit < 1:
        raise ConfigError(f"index.search_limit must be >= 1, got {cfg.index.search_limit}")
    if ":" not in cfg.server.bind:
        raise ConfigError(f"server.bind must be host:port, got '{cfg.server.bind}'")


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _opt_int(value: Any) -> int | None:
    return None if value is None else int(value)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY
    return bool(value)


def _cfg_from_dict(data: dict[str, Any]) -> DocshelfConfig:
    """Build a *DocshelfConfig* from a merged raw YAML dict."""
    cfg = DocshelfConfig()

    if "server" in data:
        s = data["server"] or {}
        cfg.server = ServerCfg(
            bind=str(s.get("bind", cfg.server.bind)),
            root=str(s.get("root", cfg.server.root)),
            db=str(s.get("db", cfg.server.db)),
            log_level=str(s.get("log_level", cfg.server.log_level)).upper(),
        )

    if "index" in data:
        i = data["index"] or {}
        cfg.index = IndexCfg(
            chunk_size=int(i.get("chunk_size", cfg.index.chunk_size)),
            highlight_open=str(i.get("highlight_open", cfg.index.highlight_open)),
            highlight_close=str(i.get("highlight_close", cfg.index.highlight_close)),
            search_limit=_opt_int(i.get("search_limit", cfg.index.search_limit)),
        )

    if "extractor" in data:
        e = data["extractor"] or {}
        cfg.extractor = ExtractorCfg(
            backend=str(e.get("backend", cfg.extractor.backend)).lower(),
            url=str(e.get("url", cfg.extractor.url)),
            timeout=float(e.get("timeout", cfg.extractor.timeout)),
        )

    if "thumbnails" in data:
        t = data["thumbnails"] or {}
        cfg.thumbnails = ThumbnailCfg(
            command=str(t.get("command", cfg.thumbnails.command)),
            height=int(t.get("height", cfg.thumbnails.height)),
            video_frame=int(t.get("video_frame", cfg.thumbnails.video_frame)),
            timeout=float(t.get("timeout", cfg.thumbnails.timeout)),
        )

    if "labels" in data:
        lb = data["labels"] or {}
        cfg.labels = LabelsCfg(
            enabled=_as_bool(lb.get("enabled", cfg.labels.enabled)),
            model=str(lb.get("model", cfg.labels.model)),
            max_labels=int(lb.get("max_labels", cfg.labels.max_labels)),
            timeout=float(lb.get("timeout", cfg.labels.timeout)),
        )

    return cfg


def _apply_env_overrides(cfg: DocshelfConfig) -> DocshelfConfig:
    """Apply DOCSHELF_* environment variable overrides."""
    if bind := os.environ.get("DOCSHELF_BIND"):
        cfg.server.bind = bind
    if root := os.environ.get("DOCSHELF_ROOT"):
        cfg.server.root = root
    if db := os.environ.get("DOCSHELF_DB"):
        cfg.server.db = db
    if level := os.environ.get("DOCSHELF_LOG_LEVEL"):
        cfg.server.log_level = level.upper()
    if url := os.environ.get("DOCSHELF_DOC_EXTRACTOR"):
        cfg.extractor.url = url
    if (labels := os.environ.get("DOCSHELF_LABELS")) is not None:
        cfg.labels.enabled = _as_bool(labels)
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> DocshelfConfig:
    """Load and return a merged *DocshelfConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *docshelf.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a config file contains API-key-like fields or an
            invalid value.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    for path in (global_path, search_dir / PROJECT_CONFIG_NAME):
        if not path.exists():
            continue
        raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config '{path}' must be a YAML mapping.")
        _check_no_api_keys(raw, path)
        _warn_unknown_keys(raw, path)
        merged = _deep_merge(merged, raw)

    cfg = _cfg_from_dict(merged)
    cfg = _apply_env_overrides(cfg)
    _validate(cfg)
    return cfg


def write_project_config(root: Path) -> Path:
    """Write a commented ``docshelf.yaml`` template into *root* if missing."""
    target = root / PROJECT_CONFIG_NAME
    if target.exists():
        return target
    content = (
        "# docshelf project configuration.\n"
        "# NEVER store API keys here. The label model reads them from the\n"
        "# environment, e.g.  export OPENAI_API_KEY=sk-...\n"
        "\n"
        "server:\n"
        "  bind: 0.0.0.0:9321\n"
        "  db: schema.db\n"
        "\n"
        "extractor:\n"
        "  backend: tika\n"
        "  url: http://localhost:9998/tika\n"
        "\n"
        "thumbnails:\n"
        "  command: convert\n"
        "\n"
        "labels:\n"
        "  enabled: false\n"
        "  model: openai/gpt-4o-mini\n"
    )
    target.write_text(content, encoding="utf-8")
    return target
