import pytest

from stakekit.deferred import Deferred, contains_deferred, resolve_value
from stakekit.descriptors import ResourcePlan
from stakekit.errors import DuplicateResource, UnresolvedReference
from stakekit import manifests


def test_deferred_cannot_be_formatted_eagerly():
    value = Deferred.of("http://erigon:8545")
    with pytest.raises(TypeError):
        f"--eth1-endpoints={value}"


def test_format_and_apply_resolve_late():
    joined = Deferred.gather([Deferred.of("a"), "b"]).apply(",".join)
    flag = Deferred.format("--x={}", joined)
    assert flag.resolve(None) == "--x=a,b"


def test_secret_values_are_masked():
    token = Deferred.of("https://mainnet.infura.io/v3/key", secret=True)
    flag = Deferred.format("--url={}", token)
    assert "key" not in repr(token)
    assert repr(flag) == "Deferred(<secret>)"
    assert flag.resolve(None) == "--url=https://mainnet.infura.io/v3/key"


def test_resolve_value_walks_nested_structures():
    value = {"a": [Deferred.of(1), (2, Deferred.of(3))], "b": "plain"}
    assert contains_deferred(value)
    assert resolve_value(value, None) == {"a": [1, [2, 3]], "b": "plain"}
    assert not contains_deferred(resolve_value(value, None))


def test_references_resolve_against_the_plan():
    plan = ResourcePlan("mainnet")
    service = plan.declare(manifests.cluster_service("erigon", [{"name": "http", "port": 8545}]))
    endpoint = Deferred.format("http://{}:{}", service.ref("metadata.name"), service.ref("spec.ports.0.port"))
    plan.declare(manifests.config_map("probe", {"url": endpoint}))
    rendered = plan.render()
    assert rendered[1]["data"]["url"] == "http://erigon:8545"
    assert rendered[0]["metadata"]["namespace"] == "mainnet"


def test_namespace_is_not_injected_into_cluster_scoped_kinds():
    plan = ResourcePlan("mainnet")
    plan.declare(manifests.namespace("mainnet"))
    assert "namespace" not in plan.render()[0]["metadata"]


def test_unknown_reference_fails_at_render():
    plan = ResourcePlan("mainnet")
    plan.declare(manifests.config_map("x", {"v": Deferred.reference("Service/missing", "metadata.name")}))
    with pytest.raises(UnresolvedReference):
        plan.render()


def test_missing_field_fails_at_render():
    plan = ResourcePlan("mainnet")
    svc = plan.declare(manifests.cluster_service("erigon", []))
    plan.declare(manifests.config_map("x", {"v": svc.ref("spec.ports.0.port")}))
    with pytest.raises(UnresolvedReference):
        plan.render()


def test_circular_reference_is_reported():
    plan = ResourcePlan("mainnet")
    plan.declare(manifests.config_map("a", {"v": Deferred.reference("ConfigMap/b", "data.v")}))
    plan.declare(manifests.config_map("b", {"v": Deferred.reference("ConfigMap/a", "data.v")}))
    with pytest.raises(UnresolvedReference, match="Circular"):
        plan.render()


def test_duplicate_and_undeclared_dependencies():
    plan = ResourcePlan("mainnet")
    first = plan.declare(manifests.config_map("a", {}))
    with pytest.raises(DuplicateResource):
        plan.declare(manifests.config_map("a", {}))

    other = ResourcePlan("prater").declare(manifests.config_map("b", {}))
    with pytest.raises(UnresolvedReference):
        plan.declare(manifests.config_map("c", {}), depends_on=[other])
    assert plan.declare(manifests.config_map("c", {}), depends_on=[first]).depends_on == ("ConfigMap/a",)


def test_declare_copies_the_manifest():
    plan = ResourcePlan("mainnet")
    manifest = manifests.config_map("a", {"k": "v"})
    plan.declare(manifest)
    manifest["data"]["k"] = "changed"
    assert plan.render()[0]["data"]["k"] == "v"
