"""Chain selection: known production chains and runtime configurations."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

_DEFAULT_PORTS = {"ws": 80, "wss": 443, "http": 80, "https": 443}

DEFAULT_URL = "ws://localhost:9944"
DEFAULT_CONFIG = "Polkadot"


class ChainError(ValueError):
    """Raised for unknown chains, configurations or malformed endpoints."""


def url_to_string(url: str) -> str:
    """Normalise an endpoint URL, spelling out the scheme's default port."""
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError as exc:
        raise ChainError(f"Invalid url: {url}") from exc
    scheme = parts.scheme.lower()
    host = parts.hostname
    if not scheme or not host:
        raise ChainError(f"Invalid url: {url}")
    if ":" in host:
        host = f"[{host}]"
    userinfo, at, _ = parts.netloc.rpartition("@")
    netloc = f"{userinfo}{at}{host}"
    if port is None:
        port = _DEFAULT_PORTS.get(scheme)
    if port is not None:
        netloc = f"{netloc}:{port}"
    text = f"{scheme}://{netloc}{parts.path or '/'}"
    if parts.query:
        text = f"{text}?{parts.query}"
    if parts.fragment:
        text = f"{text}#{parts.fragment}"
    return text


class ChainConfig(enum.Enum):
    """Runtime configurations a command can be run with."""

    POLKADOT = "Polkadot"
    SUBSTRATE = "Substrate"
    ECDSACHAIN = "Ecdsachain"

    def __str__(self) -> str:
        return self.value


def resolve_config(name: str) -> ChainConfig:
    """Look up a chain configuration by its name."""
    try:
        return ChainConfig(name)
    except ValueError:
        allowed = ", ".join(c.value for c in ChainConfig)
        raise ChainError(
            f"Chain configuration not found, Allowed configurations: {allowed}"
        ) from None


class ProductionChain(enum.Enum):
    """Production chains where a contract can be deployed to."""

    ALEPH_ZERO = "AlephZero"
    ASTAR = "Astar"
    SHIDEN = "Shiden"
    KREST = "Krest"

    def __str__(self) -> str:
        return self.value

    def url(self) -> str:
        """The endpoint URL of the chain."""
        return _ENDPOINTS[self][0]

    def config(self) -> str:
        """The configuration name of the chain."""
        return _ENDPOINTS[self][1]

    @classmethod
    def from_parts(cls, url: str, config: str) -> Optional["ProductionChain"]:
        """The production chain matching a manually given endpoint and config."""
        normalised = url_to_string(url)
        return next(
            (
                chain
                for chain, (endpoint, chain_config) in _ENDPOINTS.items()
                if endpoint == normalised and chain_config == config
            ),
            None,
        )

    @classmethod
    def parse(cls, name: str) -> "ProductionChain":
        """Look up a production chain by its name."""
        try:
            return cls(name)
        except ValueError:
            raise ChainError("Unrecognised chain name") from None


_ENDPOINTS = {
    ProductionChain.ALEPH_ZERO: ("wss://ws.azero.dev:443/", "Substrate"),
    ProductionChain.ASTAR: ("wss://rpc.astar.network:443/", "Polkadot"),
    ProductionChain.SHIDEN: ("wss://rpc.shiden.astar.network:443/", "Polkadot"),
    ProductionChain.KREST: ("wss://wss-krest.peaq.network:443/", "Polkadot"),
}


@dataclass(frozen=True)
class Chain:
    """A chain to talk to: a production chain or a custom endpoint."""

    endpoint: str
    config_name: str
    production_chain: Optional[ProductionChain] = None

    @classmethod
    def from_production(cls, chain: ProductionChain) -> "Chain":
        return cls(chain.url(), chain.config(), chain)

    @classmethod
    def custom(cls, url: str, config: str) -> "Chain":
        return cls(url, config)

    def url(self) -> str:
        """The endpoint URL."""
        return self.endpoint

    def config(self) -> str:
        """The configuration name."""
        return self.config_name

    def production(self) -> Optional[ProductionChain]:
        """The production chain, if this is one."""
        return self.production_chain


@dataclass(frozen=True)
class ChainOptions:
    """Options selecting the node to communicate with."""

    url: Optional[str] = None
    config: Optional[str] = None
    chain_name: Optional[ProductionChain] = None

    def __post_init__(self) -> None:
        if self.chain_name is not None and (self.url is not None or self.config is not None):
            raise ChainError("--chain cannot be used together with --url or --config")

    def chain(self) -> Chain:
        """Resolve the options into a chain."""
        if self.chain_name is not None:
            return Chain.from_production(self.chain_name)
        url = self.url if self.url is not None else DEFAULT_URL
        config = self.config if self.config is not None else DEFAULT_CONFIG
        prod = ProductionChain.from_parts(url, config)
        if prod is not None:
            return Chain.from_production(prod)
        return Chain.custom(url, config)