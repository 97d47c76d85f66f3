import pytest
import yaml

from stakekit.errors import InvalidTopology
from stakekit.models import ClientKind
from stakekit.operator import BEACON_NODE_SLOTS, NodeOperator, beacon_targets, merge_config, smartnode_config
from stakekit.networks import network_profile
from stakekit.resolver import resolve_operator_config


def test_beacon_targets_cycle_through_consensus_clients(make_handle, plan):
    one = [make_handle("lighthouse", "http://l:5052", ClientKind.CONSENSUS)]
    three = one + [
        make_handle("teku", "http://t:5051", ClientKind.CONSENSUS),
        make_handle("nimbus", "http://n:5052", ClientKind.CONSENSUS),
    ]
    assert BEACON_NODE_SLOTS == 4
    assert [t.resolve(plan) for t in beacon_targets(one)] == ["http://l:5052"] * 4
    assert [t.resolve(plan) for t in beacon_targets(three)] == [
        "http://l:5052", "http://t:5051", "http://n:5052", "http://l:5052",
    ]
    with pytest.raises(InvalidTopology):
        beacon_targets([])


def test_merge_config_is_nested():
    base = {"chains": {"eth1": {"provider": "a", "chainID": 1}}}
    merge_config(base, {"chains": {"eth1": {"provider": "b"}}})
    assert base == {"chains": {"eth1": {"provider": "b", "chainID": 1}}}


def test_smartnode_config_layers():
    config = smartnode_config(network_profile("prater"), "v1.1.2", "http://e:8545", None, "http://l:5052")
    assert config["chains"]["eth1"]["chainID"] == 5
    assert config["chains"]["eth1"]["provider"] == "http://e:8545"
    assert config["chains"]["eth1"]["wsProvider"] == ""
    assert config["chains"]["eth2"]["provider"] == "http://l:5052"
    assert config["smartnode"]["image"] == "rocketpool/smartnode:v1.1.2"
    assert config["smartnode"]["validatorRestartCommand"] == "/bin/true"
    assert "rplFaucetAddress" in config["rocketpool"]
    assert "rplFaucetAddress" not in smartnode_config(
        network_profile("mainnet"), "v1.1.2", "e", None, "l"
    )["rocketpool"]


def test_operator_declares_config_secret_workload_and_service(make_handle, plan):
    execution = [make_handle("erigon", "http://erigon:8545", ws="ws://erigon:8545"), make_handle("b", "http://b:8545")]
    consensus = [
        make_handle("lighthouse", "http://lighthouse-beacon:5052", ClientKind.CONSENSUS),
        make_handle("teku", "http://teku:5051", ClientKind.CONSENSUS),
    ]
    config = resolve_operator_config({"node_password": "pw", "graffiti": "hi"}, "prater", validator_tag="v2.2.0")
    handle = NodeOperator().instantiate(plan, "prater", config, execution, consensus)

    assert plan.keys() == [
        "ConfigMap/rocketpool-config",
        "Secret/rocketpool-node-password",
        "StatefulSet/rocketpool",
        "Service/rocketpool",
    ]
    assert handle.kind is ClientKind.OPERATOR
    assert handle.endpoint.resolve(plan) == "http://rocketpool:9102"

    rendered = {f"{m['kind']}/{m['metadata']['name']}": m for m in plan.render()}
    smartnode = yaml.safe_load(rendered["ConfigMap/rocketpool-config"]["data"]["config.yml"])
    assert smartnode["chains"]["eth1"]["provider"] == "http://erigon:8545"
    assert smartnode["chains"]["eth1"]["wsProvider"] == "ws://erigon:8545"
    assert smartnode["chains"]["eth2"]["provider"] == "http://lighthouse-beacon:5052"
    settings = yaml.safe_load(rendered["ConfigMap/rocketpool-config"]["data"]["settings.yml"])
    assert settings["chains"]["eth1"]["client"]["params"][0]["value"] == "http://erigon:8545"
    assert rendered["Secret/rocketpool-node-password"]["stringData"] == {"password": "pw"}

    pod = rendered["StatefulSet/rocketpool"]["spec"]["template"]["spec"]
    assert [c["name"] for c in pod["initContainers"]] == ["install-rocketpool-cli"]
    validator = pod["containers"][1]
    assert validator["image"] == "sigp/lighthouse:v2.2.0"
    assert (
        "--beacon-nodes=http://lighthouse-beacon:5052,http://teku:5051,"
        "http://lighthouse-beacon:5052,http://teku:5051"
    ) in validator["command"]
    assert "--graffiti=hi" in validator["command"]
    assert pod["volumes"][0]["configMap"]["name"] == "rocketpool-config"
    assert plan.get("StatefulSet/rocketpool").depends_on == (
        "ConfigMap/rocketpool-config", "Secret/rocketpool-node-password",
    )


def test_password_is_masked_before_render(make_handle, plan):
    config = resolve_operator_config({"node_password": "supersecret"}, "prater")
    NodeOperator().instantiate(
        plan, "prater", config,
        [make_handle("erigon", "http://erigon:8545")],
        [make_handle("lighthouse", "http://l:5052", ClientKind.CONSENSUS)],
    )
    assert "supersecret" not in repr(plan.get("Secret/rocketpool-node-password").manifest)
