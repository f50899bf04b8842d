import json
from types import SimpleNamespace

import pytest

from jpyc_deployment import deployer as deployer_module
from jpyc_deployment import utils
from jpyc_deployment.deployer import DeploymentError, TokenDeployer
from jpyc_deployment.registry import read_latest

from conftest import FakeContainer, FakeProxyContainer, SIGNER


@pytest.fixture
def containers(fake_chain):
    return {
        "implementation_v1": FakeContainer(fake_chain, "FiatTokenV1"),
        "implementation_v2": FakeContainer(fake_chain, "FiatTokenV2"),
        "proxy_container": FakeProxyContainer(fake_chain, "ERC1967Proxy"),
    }


@pytest.fixture
def make_deployer(signer, fake_chain, containers, deployments_dir):
    def _make(autosign=True):
        return TokenDeployer(
            account=signer,
            autosign=autosign,
            network_name="ethereum-local",
            deployments_dir=deployments_dir,
            implementation_reader=fake_chain.read_implementation,
            **containers,
        )

    return _make


@pytest.fixture
def verified(monkeypatch):
    addresses = list()
    monkeypatch.setattr(
        deployer_module,
        "verify_contract",
        lambda address, prefix: addresses.append((address, prefix)),
    )
    return addresses


def test_deploy_v1_only(make_deployer, containers, params, deployments_dir, verified, capsys):
    record = make_deployer().deploy(params=params, v1only=True)

    (implementation, _), = containers["implementation_v1"].deployments
    (proxy, proxy_args), = containers["proxy_container"].deployments
    assert containers["implementation_v2"].deployments == []

    # the proxy is initialized through its constructor
    logic, init_data = proxy_args
    assert logic == implementation.address
    assert init_data == f"initialize{tuple(params.initializer_args())}".encode()

    assert record.network == "ethereum-local"
    assert record.deployer == SIGNER
    assert record.proxy == proxy.address
    assert record.implementation == implementation.address
    assert record.tx_hash == proxy.receipt.txn_hash
    assert record.params == params.to_dict()
    assert record.implementation_v2 is None
    assert record.upgrade_tx_hash is None
    assert verified == []

    assert read_latest("ethereum-local", directory=deployments_dir) == record
    output = capsys.readouterr().out
    assert f"[deploy:jpycv2] deploying with deployer {SIGNER}" in output
    assert f"[deploy:jpycv2] proxy={proxy.address} implementation={implementation.address}" in output


def test_deploy_and_upgrade(make_deployer, containers, fake_chain, params, deployments_dir, capsys):
    record = make_deployer().deploy(params=params)

    (implementation, _), = containers["implementation_v1"].deployments
    (implementation_v2, _), = containers["implementation_v2"].deployments
    (proxy, _), = containers["proxy_container"].deployments

    proxy_address, method, args, sender = fake_chain.transactions[-1]
    assert proxy_address == proxy.address
    assert method == "upgradeToAndCall"
    assert args == (implementation_v2.address, b"initializeV2()")

    assert record.implementation == implementation.address
    assert record.implementation_v2 == implementation_v2.address
    assert record.upgrade_tx_hash is not None
    assert record.upgraded_at is not None

    latest = deployments_dir / "ethereum-local-latest.json"
    data = json.loads(latest.read_text())
    assert data["implementationV2"] == implementation_v2.address
    assert data["upgradeTxHash"] == record.upgrade_tx_hash
    # the upgrade rewrites the same history entry
    assert len(list(deployments_dir.iterdir())) == 2

    output = capsys.readouterr().out
    assert f"[deploy:jpycv2] upgraded implementation tx={record.upgrade_tx_hash}" in output
    assert (
        f"[deploy:jpycv2] now running FiatTokenV2 implementation={implementation_v2.address}"
        in output
    )


def test_deploy_verifies_each_implementation(make_deployer, params, verified):
    record = make_deployer().deploy(params=params, verify=True)
    assert verified == [
        (record.implementation, "deploy:jpycv2"),
        (record.implementation_v2, "deploy:jpycv2"),
    ]


def test_upgrade_without_receipt(make_deployer, params, monkeypatch, capsys):
    deployer = make_deployer()
    monkeypatch.setattr(deployer, "transact", lambda method, *args: None)

    record = deployer.deploy(params=params)

    assert record.upgrade_tx_hash is None
    assert "[deploy:jpycv2] upgrade transaction pending or unavailable" in capsys.readouterr().out


def test_deploy_aborts_without_confirmation(make_deployer, containers, params, monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    with pytest.raises(SystemExit):
        make_deployer(autosign=False).deploy(params=params)
    assert containers["implementation_v1"].deployments == []


def test_deploy_with_confirmation(make_deployer, params, monkeypatch, deployments_dir):
    prompts = list()

    def _input(prompt):
        prompts.append(prompt)
        return "y"

    monkeypatch.setattr("builtins.input", _input)
    record = make_deployer(autosign=False).deploy(params=params)

    assert prompts == ["Deploy ERC1967Proxy Y/N? ", "Continue Y/N? "]
    assert read_latest("ethereum-local", directory=deployments_dir) == record


def test_explorer_failure_does_not_abort_deployment(
    make_deployer, containers, params, deployments_dir, monkeypatch, capsys
):
    class FailingExplorer:
        def publish_contract(self, address):
            raise ConnectionError("502 Bad Gateway")

    network = SimpleNamespace(explorer=FailingExplorer())
    monkeypatch.setattr(utils, "networks", SimpleNamespace(provider=SimpleNamespace(network=network)))

    record = make_deployer().deploy(params=params, verify=True)

    (implementation_v2, _), = containers["implementation_v2"].deployments
    assert record.implementation_v2 == implementation_v2.address
    assert read_latest("ethereum-local", directory=deployments_dir) == record
    assert capsys.readouterr().out.count("[deploy:jpycv2] verification skipped: 502 Bad Gateway") == 2


def test_deployer_selects_account_when_none_given(fake_chain, containers, signer, monkeypatch):
    monkeypatch.setattr(deployer_module, "select_account", lambda: signer)
    deployer = TokenDeployer(autosign=True, network_name="ethereum-local", **containers)
    assert deployer.get_account() is signer
    assert signer.autosign is True


def test_deployer_requires_signer(containers, monkeypatch):
    monkeypatch.setattr(deployer_module, "select_account", lambda: None)
    with pytest.raises(DeploymentError, match="No signer available for deployment"):
        TokenDeployer(network_name="ethereum-local", **containers)
