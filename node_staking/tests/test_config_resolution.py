from __future__ import annotations

import json
from pathlib import Path

import pytest

import node_staking.core.config as config
from node_staking.core.constants.base import (
    DEFAULT_RPC_ENDPOINT,
    DEFAULT_RPC_TIMEOUT,
)
from node_staking.core.errors import ConfigPersistError


def test_resolve_config_path_defaults_to_repo_root(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.delenv("NODE_STAKING_CONFIG_PATH", raising=False)
    monkeypatch.delenv("NODE_STAKING_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)

    repo_root = Path(__file__).resolve().parents[2]
    assert config.resolve_config_path() == repo_root / "config.json"


def test_resolve_config_path_env_relative_is_repo_relative(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("NODE_STAKING_CONFIG_PATH", "config.example.json")
    monkeypatch.chdir(tmp_path)

    repo_root = Path(__file__).resolve().parents[2]
    assert config.resolve_config_path() == repo_root / "config.example.json"


def test_explicit_path_wins_over_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("NODE_STAKING_CONFIG_PATH", "config.example.json")
    explicit = tmp_path / "mine.json"

    assert config.resolve_config_path(explicit) == explicit


def test_load_config_json_supports_env_override(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    monkeypatch.setenv("NODE_STAKING_CONFIG_PATH", "config.example.json")
    monkeypatch.chdir(tmp_path)

    cfg = config.load_config_json()
    assert cfg["network"]["rpc_endpoint"] == "http://127.0.0.1:8545"
    assert set(cfg["staking"]["contracts"]) == {"compute", "node"}


def test_load_config_json_missing_and_unreadable(tmp_path: Path) -> None:
    missing = tmp_path / "missing.json"
    assert config.load_config_json(missing) == {}
    with pytest.raises(FileNotFoundError):
        config.load_config_json(missing, require_exists=True)

    broken = tmp_path / "broken.json"
    broken.write_text("{not json")
    assert config.load_config_json(broken) == {}


def test_config_store_defaults(tmp_path: Path) -> None:
    store = config.ConfigStore(tmp_path / "config.json", {})

    assert store.rpc_endpoint == DEFAULT_RPC_ENDPOINT
    assert store.chain_id is None
    assert store.request_timeout_seconds == DEFAULT_RPC_TIMEOUT
    assert store.contract_overrides == {}
    assert store.wallet == {}
    pref = store.auto_claim
    assert (pref.enabled, pref.threshold, pref.interval_hours) == (False, 0, 24)


def test_config_store_reads_sections(tmp_path: Path) -> None:
    store = config.ConfigStore(
        tmp_path / "config.json",
        {
            "network": {
                "rpc_endpoint": " https://rpc.example.org ",
                "chain_id": "8453",
                "request_timeout_seconds": 3,
            },
            "auto_claim": {"enabled": True, "threshold": "500", "interval": 6},
            "staking": {"contracts": {"compute": "0xabc", "node": ""}},
        },
    )

    assert store.rpc_endpoint == "https://rpc.example.org"
    assert store.chain_id == 8453
    assert store.request_timeout_seconds == 3.0
    assert store.contract_overrides == {"compute": "0xabc"}
    assert store.auto_claim.threshold == 500
    assert store.auto_claim.interval_hours == 6


def test_set_auto_claim_partial_update_and_persist(tmp_path: Path) -> None:
    path = tmp_path / "config.json"
    store = config.ConfigStore(
        path,
        {
            "auto_claim": {"enabled": False, "threshold": "500", "interval": 6},
            "custom": {"kept": True},
        },
    )

    pref = store.set_auto_claim(enabled=True)
    store.persist()

    assert (pref.enabled, pref.threshold, pref.interval_hours) == (True, 500, 6)
    on_disk = json.loads(path.read_text())
    assert on_disk["auto_claim"] == {"enabled": True, "threshold": "500", "interval": 6}
    assert on_disk["custom"] == {"kept": True}

    reloaded = config.ConfigStore.load(path, require_exists=True)
    assert reloaded.auto_claim == pref


def test_persist_failure_raises_config_persist_error(tmp_path: Path) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    store = config.ConfigStore(blocker / "config.json", {})

    with pytest.raises(ConfigPersistError, match="Failed to persist config"):
        store.persist()


def test_snapshot_and_restore_are_independent_copies(tmp_path: Path) -> None:
    store = config.ConfigStore(tmp_path / "config.json", {"auto_claim": {}})
    snap = store.snapshot()

    store.set_auto_claim(enabled=True, threshold=7)
    assert snap == {"auto_claim": {}}

    store.restore(snap)
    assert store.auto_claim.enabled is False


@pytest.mark.parametrize(
    "contents",
    ['{"wallet": {"private_key": "0x11"}, "network": {},}', "[1, 2]", "\xff\xfe"],
)
def test_unreadable_file_is_never_overwritten(tmp_path: Path, contents: str) -> None:
    path = tmp_path / "config.json"
    path.write_text(contents, encoding="latin-1")
    original = path.read_bytes()

    store = config.ConfigStore.load(path)
    store.set_auto_claim(enabled=True, threshold=500, interval_hours=6)

    assert store.load_error is not None
    assert store.data["auto_claim"]["enabled"] is True
    with pytest.raises(ConfigPersistError, match="refusing to replace"):
        store.persist()
    assert path.read_bytes() == original


def test_missing_file_is_created_on_persist(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "config.json"

    store = config.ConfigStore.load(path)
    store.set_auto_claim(enabled=True)
    store.persist()

    assert store.load_error is None
    assert json.loads(path.read_text())["auto_claim"] == {"enabled": True}


@pytest.mark.parametrize(
    "data,attr,match",
    [
        ({"auto_claim": {"interval": 0}}, "auto_claim", "auto_claim"),
        ({"auto_claim": {"threshold": "lots"}}, "auto_claim", "auto_claim"),
        ({"auto_claim": {"threshold": "-5"}}, "auto_claim", "auto_claim"),
        ({"network": {"chain_id": "base"}}, "chain_id", "network.chain_id"),
        (
            {"network": {"request_timeout_seconds": "soon"}},
            "request_timeout_seconds",
            "request_timeout_seconds",
        ),
        (
            {"network": {"request_timeout_seconds": 0}},
            "request_timeout_seconds",
            "request_timeout_seconds",
        ),
        ({"staking": {"contracts": ["0x1"]}}, "contract_overrides", "contracts"),
    ],
)
def test_malformed_values_raise_value_error(
    tmp_path: Path, data: dict, attr: str, match: str
) -> None:
    store = config.ConfigStore(tmp_path / "config.json", data)

    with pytest.raises(ValueError, match=match):
        getattr(store, attr)
