"""solstamp.core.endpoints

Persisted RPC endpoint list, and the order in which `get` tries endpoints.

Order matters: the first endpoint that answers wins, later ones are fallbacks.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from solstamp import PUBLIC_RPC_URL
from solstamp.core.config import CONFIG_FILENAME, RpcConfig, default_config_dir, read_yaml_mapping, write_yaml_mapping
from solstamp.core.exceptions import ConfigError

log = logging.getLogger(__name__)

Probe = Callable[[Sequence[str]], Awaitable[list[str]]]


class EndpointStore:
    """Endpoint list + default endpoint, stored in the `rpc` section of `config.yaml`.

    Every mutation is a read-modify-write of the file as written: other sections are kept
    untouched, and `SOLSTAMP_*` environment overrides never end up on disk.
    """

    def __init__(self, config_dir: Path | None = None) -> None:
        self.config_dir = config_dir or default_config_dir()

    @property
    def path(self) -> Path:
        return self.config_dir / CONFIG_FILENAME

    def _read(self) -> tuple[dict[str, Any], RpcConfig]:
        if not self.path.exists():
            return {}, RpcConfig()
        try:
            raw = read_yaml_mapping(self.path)
            rpc = RpcConfig.model_validate(raw.get("rpc") or {})
        except (ConfigError, ValidationError) as e:
            # unreadable file: start over, the next save replaces it
            log.warning("config_read_failed", extra={"path": str(self.path), "error": str(e)})
            return {}, RpcConfig()
        return raw, rpc

    def _save(self, raw: dict[str, Any], rpc: RpcConfig) -> bool:
        data = {**raw, "rpc": rpc.model_dump(mode="json", exclude_unset=True)}
        try:
            write_yaml_mapping(self.path, data)
        except OSError:
            log.exception("config_save_failed", extra={"path": str(self.path)})
            return False
        return True

    def urls(self) -> list[str]:
        return list(self._read()[1].urls)

    def default(self) -> str | None:
        return self._read()[1].default_url or None

    def add(self, url: str, *, make_default: bool = False) -> bool:
        raw, rpc = self._read()
        if url not in rpc.urls:
            rpc.urls = [*rpc.urls, url]
        if make_default or not rpc.default_url:
            rpc.default_url = url
        return self._save(raw, rpc)

    def remove(self, url: str) -> bool:
        raw, rpc = self._read()
        rpc.urls = [u for u in rpc.urls if u != url]
        if rpc.default_url == url:
            # last remaining URL inherits the default
            rpc.default_url = rpc.urls[-1] if rpc.urls else None
        return self._save(raw, rpc)

    def set_default(self, url: str) -> bool:
        raw, rpc = self._read()
        if url not in rpc.urls:
            return False
        rpc.default_url = url
        return self._save(raw, rpc)


async def resolve_endpoints(
    cli_endpoints: Sequence[str] | None,
    store: EndpointStore,
    *,
    probe: Probe,
) -> list[str]:
    """Endpoints to try, in priority order. Never empty.

    - explicit endpoints: only the reachable ones, in the given order
    - otherwise: the default endpoint first, then the other configured ones
    - the public mainnet RPC always comes last, and alone when nothing else is usable
    """

    if cli_endpoints:
        endpoints = await probe(list(cli_endpoints))
        if not endpoints:
            log.warning("endpoints_unreachable", extra={"endpoints": list(cli_endpoints)})
    else:
        default_url = store.default()
        configured = store.urls()
        if default_url:
            log.debug("endpoints_from_config", extra={"default": default_url})
            endpoints = [default_url, *[u for u in configured if u != default_url]]
        else:
            endpoints = configured

    if not endpoints:
        log.debug(
            "endpoints_public_only",
            extra={"hint": 'provide --endpoints or configure one with "rpc add --default <url>"'},
        )
    return with_public_fallback(endpoints)


def with_public_fallback(endpoints: Sequence[str]) -> list[str]:
    out = [u for u in endpoints if u != PUBLIC_RPC_URL]
    out.append(PUBLIC_RPC_URL)
    return out
