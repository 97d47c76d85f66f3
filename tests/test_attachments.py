from stakekit.attachments import (
    DEFAULT_RULES,
    ExternalExposure,
    MetricsExport,
    VerticalAutoscaling,
    VolumeSnapshotCapture,
    attach_resources,
)
from stakekit.clients import ErigonClient, InfuraExecutionClient, LighthouseBeacon
from stakekit.models import ClientKind
from stakekit.resolver import resolve_client_config


def instantiate_lighthouse(plan, overrides=None, metrics_default=False):
    config = resolve_client_config(overrides, "prater", ClientKind.CONSENSUS, "lighthouse", metrics_default)
    client = LighthouseBeacon()
    return client, config, client.instantiate(plan, "prater", [], config)


def test_rule_order():
    assert [type(r) for r in DEFAULT_RULES] == [
        VerticalAutoscaling, VolumeSnapshotCapture, MetricsExport, ExternalExposure,
    ]


def test_autoscaling_is_always_attached(plan):
    client, config, handle = instantiate_lighthouse(plan)
    attached = attach_resources(plan, client, config, handle)
    assert [d.key for d in attached] == ["VerticalPodAutoscaler/lighthouse"]

    vpa = plan.render()[-1]
    assert vpa["spec"]["targetRef"]["name"] == "lighthouse-beacon"
    policy = vpa["spec"]["resourcePolicy"]["containerPolicies"][0]
    assert policy["minAllowed"] == {"cpu": "250m", "memory": "512Mi"}
    assert policy["maxAllowed"] == {"cpu": "3", "memory": "8Gi"}


def test_all_optional_attachments(plan):
    client, config, handle = instantiate_lighthouse(
        plan, {"external": True, "volume": {"snapshot": True}}, metrics_default=True
    )
    attached = attach_resources(plan, client, config, handle)
    assert [d.key for d in attached] == [
        "VerticalPodAutoscaler/lighthouse",
        "VolumeSnapshot/data-lighthouse-beacon-0",
        "PodMonitoring/lighthouse-beacon-pod-monitor",
        "Service/lighthouse-beacon-external",
    ]
    assert all(d.depends_on == ("StatefulSet/lighthouse-beacon",) for d in attached)

    rendered = {f"{m['kind']}/{m['metadata']['name']}": m for m in plan.render()}
    external = rendered["Service/lighthouse-beacon-external"]
    assert external["spec"]["type"] == "LoadBalancer"
    assert external["spec"]["ports"] == [{"name": "discovery-tcp", "port": 9000}]
    snapshot = rendered["VolumeSnapshot/data-lighthouse-beacon-0"]
    assert snapshot["spec"]["source"]["persistentVolumeClaimName"] == "data-lighthouse-beacon-0"


def test_execution_clients_have_no_metrics_export(plan):
    config = resolve_client_config({"external": True}, "prater", ClientKind.EXECUTION, "erigon")
    client = ErigonClient()
    handle = client.instantiate(plan, "prater", config)
    attached = attach_resources(plan, client, config, handle)
    assert [d.kind for d in attached] == ["VerticalPodAutoscaler", "Service"]
    ports = plan.get("Service/erigon-external").manifest["spec"]["ports"]
    assert {p["protocol"] for p in ports} == {"UDP", "TCP"}
    assert all(p["port"] == 30303 for p in ports)


def test_hosted_clients_get_nothing(plan):
    config = resolve_client_config({"endpoint": "https://x.infura.io/v3/k"}, "prater", ClientKind.EXECUTION, "infura")
    client = InfuraExecutionClient()
    handle = client.instantiate(plan, "prater", config)
    assert attach_resources(plan, client, config, handle) == []
    assert len(plan) == 0


def test_custom_rule_list(plan):
    client, config, handle = instantiate_lighthouse(plan, {"external": True})
    attached = attach_resources(plan, client, config, handle, rules=[ExternalExposure()])
    assert [d.key for d in attached] == ["Service/lighthouse-beacon-external"]
