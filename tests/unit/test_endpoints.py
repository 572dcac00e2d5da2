from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

import pytest
import yaml

from solstamp import PUBLIC_RPC_URL
from solstamp.core.endpoints import EndpointStore, resolve_endpoints

A = "https://a.example"
B = "https://b.example"
C = "https://c.example"


def test_first_added_url_becomes_default(config_dir: Path) -> None:
    store = EndpointStore(config_dir)
    assert store.add(A)
    assert store.add(B)
    assert store.urls() == [A, B]
    assert store.default() == A


def test_add_as_default_and_no_duplicates(config_dir: Path) -> None:
    store = EndpointStore(config_dir)
    store.add(A)
    store.add(B, make_default=True)
    store.add(B)
    assert store.urls() == [A, B]
    assert store.default() == B


def test_removing_default_promotes_last_remaining(config_dir: Path) -> None:
    store = EndpointStore(config_dir)
    for url in (A, B, C):
        store.add(url)
    assert store.default() == A

    assert store.remove(A)
    assert store.urls() == [B, C]
    assert store.default() == C

    store.remove(B)
    store.remove(C)
    assert store.urls() == []
    assert store.default() is None


def test_set_default_requires_configured_url(config_dir: Path) -> None:
    store = EndpointStore(config_dir)
    store.add(A)
    assert store.set_default(B) is False
    store.add(B)
    assert store.set_default(B) is True
    assert store.default() == B


def test_corrupt_config_reads_as_empty(config_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text("rpc: [oops")
    store = EndpointStore(config_dir)

    with caplog.at_level(logging.WARNING, logger="solstamp.core.endpoints"):
        assert store.urls() == []
        assert store.default() is None

    failed = [r for r in caplog.records if r.getMessage() == "config_read_failed"]
    assert failed
    assert failed[0].path == str(store.path)
    assert "not valid YAML" in failed[0].error


def test_wrong_rpc_section_type_is_reported(config_dir: Path, caplog: pytest.LogCaptureFixture) -> None:
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text("rpc:\n  urls: 7\n")

    with caplog.at_level(logging.WARNING, logger="solstamp.core.endpoints"):
        assert EndpointStore(config_dir).urls() == []
    assert any(r.getMessage() == "config_read_failed" and "urls" in r.error for r in caplog.records)


def test_mutations_keep_other_sections_and_skip_env(config_dir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_dir.mkdir(parents=True)
    (config_dir / "config.yaml").write_text("retry:\n  max_retries: 5\nrpc:\n  timeout_s: 12.5\n")
    monkeypatch.setenv("SOLSTAMP_RETRY__MAX_RETRIES", "9")
    monkeypatch.setenv("SOLSTAMP_RPC__RATE_LIMIT_RPS", "1.5")
    monkeypatch.setenv("SOLSTAMP_LOGGING__LEVEL", "DEBUG")

    assert EndpointStore(config_dir).add(A)

    saved = yaml.safe_load((config_dir / "config.yaml").read_text())
    assert saved["retry"] == {"max_retries": 5}
    assert saved["rpc"] == {"urls": [A], "default_url": A, "timeout_s": 12.5}
    assert "logging" not in saved


class Probe:
    def __init__(self, reachable: set[str]) -> None:
        self.reachable = reachable
        self.asked: list[list[str]] = []

    async def __call__(self, urls: Sequence[str]) -> list[str]:
        self.asked.append(list(urls))
        return [u for u in urls if u in self.reachable]


@pytest.mark.anyio
async def test_cli_endpoints_are_probed_and_filtered(config_dir: Path) -> None:
    probe = Probe({A, C})
    out = await resolve_endpoints([A, B, C], EndpointStore(config_dir), probe=probe)
    assert out == [A, C, PUBLIC_RPC_URL]
    assert probe.asked == [[A, B, C]]


@pytest.mark.anyio
async def test_cli_endpoints_all_unreachable_fall_back_to_public(config_dir: Path) -> None:
    store = EndpointStore(config_dir)
    store.add(B)
    assert await resolve_endpoints([A], store, probe=Probe(set())) == [PUBLIC_RPC_URL]


@pytest.mark.anyio
async def test_public_endpoint_is_not_repeated(config_dir: Path) -> None:
    probe = Probe({A, PUBLIC_RPC_URL})
    out = await resolve_endpoints([PUBLIC_RPC_URL, A], EndpointStore(config_dir), probe=probe)
    assert out == [A, PUBLIC_RPC_URL]


@pytest.mark.anyio
async def test_configured_default_goes_first(config_dir: Path) -> None:
    store = EndpointStore(config_dir)
    for url in (A, B, C):
        store.add(url)
    store.set_default(B)

    probe = Probe(set())
    assert await resolve_endpoints(None, store, probe=probe) == [B, A, C, PUBLIC_RPC_URL]
    assert probe.asked == []


@pytest.mark.anyio
async def test_nothing_configured_uses_public_endpoint(config_dir: Path) -> None:
    probe = Probe(set())
    assert await resolve_endpoints([], EndpointStore(config_dir), probe=probe) == [PUBLIC_RPC_URL]
    assert probe.asked == []
