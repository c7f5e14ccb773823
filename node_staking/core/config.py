import copy
import json
import os
from pathlib import Path
from typing import Any

from loguru import logger

from node_staking.core.adapters.models import AutoClaimPreference
from node_staking.core.constants.base import (
    DEFAULT_AUTO_CLAIM_INTERVAL_HOURS,
    DEFAULT_AUTO_CLAIM_THRESHOLD_WEI,
    DEFAULT_RPC_ENDPOINT,
    DEFAULT_RPC_TIMEOUT,
)
from node_staking.core.errors import ConfigPersistError

_CONFIG_ENV_KEYS = ("NODE_STAKING_CONFIG_PATH", "NODE_STAKING_CONFIG")
_DEFAULT_CONFIG_FILENAME = "config.json"


def _find_project_root(start: Path) -> Path | None:
    cur = start.resolve()
    for parent in [cur, *cur.parents]:
        if (parent / "pyproject.toml").exists():
            return parent
    return None


def _project_root() -> Path | None:
    return _find_project_root(Path.cwd()) or _find_project_root(Path(__file__).parent)


def resolve_config_path(path: str | Path | None = None) -> Path:
    if path is not None:
        return Path(path).expanduser()

    env_path = next(
        (os.getenv(k, "").strip() for k in _CONFIG_ENV_KEYS if os.getenv(k)), ""
    )
    if env_path:
        p = Path(env_path).expanduser()
        if p.is_absolute():
            return p
        root = _project_root()
        return (root / p) if root else p

    root = _project_root()
    return (root / _DEFAULT_CONFIG_FILENAME) if root else Path(_DEFAULT_CONFIG_FILENAME)


def _read_config_file(cfg_path: Path) -> dict[str, Any]:
    try:
        parsed = json.loads(cfg_path.read_text())
    except (OSError, ValueError) as exc:
        raise ValueError(f"unreadable config {cfg_path}: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ValueError(f"unreadable config {cfg_path}: not a JSON object")
    return parsed


def load_config_json(
    path: str | Path | None = None, *, require_exists: bool = False
) -> dict[str, Any]:
    cfg_path = resolve_config_path(path)
    if not cfg_path.exists():
        if require_exists:
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return {}
    try:
        return _read_config_file(cfg_path)
    except ValueError as exc:
        logger.warning(f"Ignoring {exc}")
        return {}


def write_config_json(path: str | Path | None, config: dict[str, Any]) -> Path:
    cfg_path = resolve_config_path(path)
    cfg_path.parent.mkdir(parents=True, exist_ok=True)
    cfg_path.write_text(json.dumps(config, indent=2) + "\n")
    return cfg_path


class ConfigStore:
    """Application config backed by a JSON file.

    Only the ``network``, ``auto_claim``, ``staking`` and ``wallet`` sections are
    interpreted here; everything else in the file is carried through untouched
    on ``persist()``. A file that exists but cannot be parsed is read as empty
    and is never overwritten.
    """

    def __init__(
        self,
        path: str | Path | None = None,
        data: dict[str, Any] | None = None,
    ):
        self.path = resolve_config_path(path)
        self.load_error: str | None = None
        self.data: dict[str, Any] = {}
        if data is not None:
            self.data = copy.deepcopy(data)
        elif self.path.exists():
            try:
                self.data = _read_config_file(self.path)
            except ValueError as exc:
                self.load_error = str(exc)
                logger.warning(f"Ignoring {exc}; it will not be overwritten")

    @classmethod
    def load(
        cls, path: str | Path | None = None, *, require_exists: bool = False
    ) -> "ConfigStore":
        cfg_path = resolve_config_path(path)
        if require_exists and not cfg_path.exists():
            raise FileNotFoundError(f"Config file not found: {cfg_path}")
        return cls(cfg_path)

    def _section(self, name: str) -> dict[str, Any]:
        section = self.data.get(name)
        if not isinstance(section, dict):
            section = {}
            self.data[name] = section
        return section

    @property
    def rpc_endpoint(self) -> str:
        value = self._section("network").get("rpc_endpoint")
        if value is None:
            return DEFAULT_RPC_ENDPOINT
        return str(value).strip()

    @property
    def chain_id(self) -> int | None:
        value = self._section("network").get("chain_id")
        if value is None:
            return None
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid network.chain_id: {value!r}") from exc

    @property
    def request_timeout_seconds(self) -> float:
        value = self._section("network").get("request_timeout_seconds")
        if value is None:
            return DEFAULT_RPC_TIMEOUT
        try:
            timeout = float(value)
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"Invalid network.request_timeout_seconds: {value!r}"
            ) from exc
        if timeout <= 0:
            raise ValueError(f"Invalid network.request_timeout_seconds: {value!r}")
        return timeout

    @property
    def contract_overrides(self) -> dict[str, str]:
        contracts = self._section("staking").get("contracts") or {}
        if not isinstance(contracts, dict):
            raise ValueError("Invalid staking.contracts: expected an object")
        return {str(k): str(v) for k, v in contracts.items() if v}

    @property
    def wallet(self) -> dict[str, Any]:
        return dict(self._section("wallet"))

    @property
    def auto_claim(self) -> AutoClaimPreference:
        section = self._section("auto_claim")
        try:
            return AutoClaimPreference(
                enabled=bool(section.get("enabled", False)),
                threshold=int(
                    section.get("threshold", DEFAULT_AUTO_CLAIM_THRESHOLD_WEI)
                ),
                interval_hours=int(
                    section.get("interval", DEFAULT_AUTO_CLAIM_INTERVAL_HOURS)
                ),
            )
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid auto_claim config: {exc}") from exc

    def set_auto_claim(
        self,
        *,
        enabled: bool,
        threshold: int | None = None,
        interval_hours: int | None = None,
    ) -> AutoClaimPreference:
        section = self._section("auto_claim")
        section["enabled"] = bool(enabled)
        if threshold is not None:
            section["threshold"] = str(int(threshold))
        if interval_hours is not None:
            section["interval"] = int(interval_hours)
        return self.auto_claim

    def snapshot(self) -> dict[str, Any]:
        return copy.deepcopy(self.data)

    def restore(self, data: dict[str, Any]) -> None:
        self.data = copy.deepcopy(data)

    def persist(self) -> Path:
        if self.load_error is not None:
            raise ConfigPersistError(
                self.path, f"refusing to replace {self.load_error}"
            )
        try:
            return write_config_json(self.path, self.data)
        except OSError as exc:
            raise ConfigPersistError(self.path, exc) from exc
