"""
attachments.py: optional resources bolted onto a client's workload

Each rule decides on its own whether it applies to a client, so the rule set
can be tested without going through any client implementation.
"""
import abc
import logging
from typing import List, Optional

from . import manifests
from .descriptors import Descriptor, ResourcePlan
from .interfaces import LayerClient
from .models import ClientConfig, ClientHandle

logger = logging.getLogger("stakekit.attachments")


class AttachmentRule(abc.ABC):
    """
    AttachmentRule: declares zero or one extra resource for a client whose
    workload already exists in the plan
    """
    name: str = ""

    @abc.abstractmethod
    def applies(self, client: LayerClient, config: ClientConfig, handle: ClientHandle) -> bool:
        pass

    @abc.abstractmethod
    def attach(self, plan: ResourcePlan, client: LayerClient, config: ClientConfig, handle: ClientHandle) -> Descriptor:
        pass


class ExternalExposure(AttachmentRule):
    """Public LoadBalancer for peer discovery. RPC ports are never exposed."""
    name = "external"

    def applies(self, client, config, handle):
        return bool(config.external and client.discovery_ports)

    def attach(self, plan, client, config, handle):
        ports = [dict(p) for p in client.discovery_ports]
        return plan.declare(manifests.external_service(client.workload_name, ports), depends_on=[handle.workload])


class VolumeSnapshotCapture(AttachmentRule):
    """Capture the data volume into a snapshot named after its canonical claim"""
    name = "snapshot"

    def applies(self, client, config, handle):
        return bool(config.volume and config.volume.snapshot)

    def attach(self, plan, client, config, handle):
        return plan.declare(manifests.volume_snapshot(config.volume.source), depends_on=[handle.workload])


class VerticalAutoscaling(AttachmentRule):
    """Always on for clients that define bounds"""
    name = "autoscaling"

    def applies(self, client, config, handle):
        return client.autoscaling is not None

    def attach(self, plan, client, config, handle):
        bounds = client.autoscaling
        return plan.declare(
            manifests.vertical_autoscaler(
                client.autoscaler_name or client.workload_name,
                handle.workload.ref("metadata.name"),
                min_allowed={"cpu": bounds.min_cpu, "memory": bounds.min_memory},
                max_allowed={"cpu": bounds.max_cpu, "memory": bounds.max_memory},
            ),
            depends_on=[handle.workload],
        )


class MetricsExport(AttachmentRule):
    """Scrape target for the client's metrics port"""
    name = "metrics"

    def applies(self, client, config, handle):
        return bool(config.metrics and client.metrics_port)

    def attach(self, plan, client, config, handle):
        return plan.declare(
            manifests.pod_monitoring(client.workload_name, port=client.metrics_port),
            depends_on=[handle.workload],
        )


DEFAULT_RULES: List[AttachmentRule] = [
    VerticalAutoscaling(),
    VolumeSnapshotCapture(),
    MetricsExport(),
    ExternalExposure(),
]


def attach_resources(
    plan: ResourcePlan,
    client: LayerClient,
    config: ClientConfig,
    handle: ClientHandle,
    rules: Optional[List[AttachmentRule]] = None,
) -> List[Descriptor]:
    """
    Evaluate every rule against one instantiated client
    :return: Descriptors that were declared
    """
    if handle.workload is None:
        logger.debug(f"{handle.name} has no workload, nothing to attach")
        return []

    attached = []
    for rule in DEFAULT_RULES if rules is None else rules:
        if rule.applies(client, config, handle):
            descriptor = rule.attach(plan, client, config, handle)
            logger.debug(f"Attached {rule.name} to {handle.name}: {descriptor.key}")
            attached.append(descriptor)
    return attached
