import pytest

from inkcontract.chains import (
    Chain,
    ChainConfig,
    ChainError,
    ChainOptions,
    ProductionChain,
    resolve_config,
    url_to_string,
)


@pytest.mark.parametrize("chain", list(ProductionChain))
def test_parse_round_trips_display(chain):
    assert ProductionChain.parse(str(chain)) is chain


def test_parse_known_name():
    assert ProductionChain.parse("AlephZero") is ProductionChain.ALEPH_ZERO


def test_parse_unknown_name_fails():
    with pytest.raises(ChainError, match="Unrecognised chain name"):
        ProductionChain.parse("Moonbeam")


def test_endpoint_and_config_of_chain():
    assert ProductionChain.ALEPH_ZERO.url() == "wss://ws.azero.dev:443/"
    assert ProductionChain.ALEPH_ZERO.config() == "Substrate"
    assert ProductionChain.KREST.config() == "Polkadot"


@pytest.mark.parametrize("chain", list(ProductionChain))
def test_from_parts_recognises_own_endpoint(chain):
    assert ProductionChain.from_parts(chain.url(), chain.config()) is chain


def test_from_parts_adds_default_port():
    assert (
        ProductionChain.from_parts("wss://ws.azero.dev", "Substrate")
        is ProductionChain.ALEPH_ZERO
    )


def test_from_parts_wrong_config():
    assert ProductionChain.from_parts("wss://ws.azero.dev", "Polkadot") is None


@pytest.mark.parametrize("chain", list(ProductionChain))
def test_url_to_string_is_idempotent(chain):
    assert url_to_string(chain.url()) == chain.url()


def test_url_to_string_adds_path():
    assert url_to_string("ws://localhost:9944") == "ws://localhost:9944/"


def test_url_to_string_rejects_missing_host():
    with pytest.raises(ChainError):
        url_to_string("localhost")


def test_resolve_config():
    assert resolve_config("Polkadot") is ChainConfig.POLKADOT
    assert resolve_config("Ecdsachain") is ChainConfig.ECDSACHAIN


def test_resolve_unknown_config():
    with pytest.raises(
        ChainError, match="Allowed configurations: Polkadot, Substrate, Ecdsachain"
    ):
        resolve_config("Kusama")


def test_default_options_give_custom_chain():
    chain = ChainOptions().chain()
    assert chain.production() is None
    assert chain.url() == "ws://localhost:9944"
    assert chain.config() == "Polkadot"


def test_options_matching_production_endpoint():
    chain = ChainOptions(url="wss://rpc.astar.network", config="Polkadot").chain()
    assert chain.production() is ProductionChain.ASTAR
    assert chain.url() == ProductionChain.ASTAR.url()


def test_options_with_named_chain():
    chain = ChainOptions(chain_name=ProductionChain.SHIDEN).chain()
    assert chain == Chain.from_production(ProductionChain.SHIDEN)
    assert chain.config() == "Polkadot"


def test_named_chain_conflicts_with_url():
    with pytest.raises(ChainError):
        ChainOptions(url="ws://localhost:9944", chain_name=ProductionChain.KREST)


def test_custom_chain_keeps_values():
    chain = Chain.custom("ws://node.example.com:9944", "Substrate")
    assert chain.url() == "ws://node.example.com:9944"
    assert chain.config() == "Substrate"
    assert chain.production() is None