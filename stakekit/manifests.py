"""
manifests.py: Kubernetes manifest templates shared by every client
"""
from typing import Any, Dict, List, Optional

from .models import VolumeSpec

SNAPSHOT_API_GROUP = "snapshot.storage.k8s.io"
SPOT_NODE_SELECTOR = {"cloud.google.com/gke-spot": "true"}
DATA_VOLUME = "data"


def labels(app: str) -> Dict[str, str]:
    return {"app": app}


def resources(cpu: str, memory: str) -> Dict[str, Any]:
    """Requests equal to limits"""
    return {
        "requests": {"cpu": cpu, "memory": memory},
        "limits": {"cpu": cpu, "memory": memory},
    }


def http_readiness(port: str, path: str) -> Dict[str, Any]:
    return {
        "httpGet": {"port": port, "path": path},
        "failureThreshold": 1,
        "successThreshold": 1,
        "periodSeconds": 1,
    }


def exec_readiness(command: List[str]) -> Dict[str, Any]:
    return {
        "exec": {"command": command},
        "failureThreshold": 1,
        "successThreshold": 1,
        "periodSeconds": 1,
    }


def canonical_claim_name(workload: str, ordinal: int = 0) -> str:
    """Name Kubernetes gives the data claim of pod <workload>-<ordinal>"""
    return f"{DATA_VOLUME}-{workload}-{ordinal}"


def volume_claim_template(app: str, volume: VolumeSpec) -> Dict[str, Any]:
    spec: Dict[str, Any] = {
        "storageClassName": volume.storage_class,
        "accessModes": ["ReadWriteOnce"],
        "resources": {"requests": {"storage": volume.storage}},
    }
    if volume.source:
        spec["dataSource"] = {
            "name": volume.source,
            "kind": "VolumeSnapshot",
            "apiGroup": SNAPSHOT_API_GROUP,
        }
    return {
        "metadata": {"name": DATA_VOLUME, "labels": labels(app)},
        "spec": spec,
    }


def stateful_set(
    name: str,
    replicas: int,
    containers: List[Dict[str, Any]],
    volume: Optional[VolumeSpec] = None,
    init_containers: Optional[List[Dict[str, Any]]] = None,
    volumes: Optional[List[Dict[str, Any]]] = None,
    pod_spec: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    template_spec: Dict[str, Any] = {}
    if init_containers:
        template_spec["initContainers"] = init_containers
    template_spec["containers"] = containers
    if volumes:
        template_spec["volumes"] = volumes
    template_spec.update(pod_spec or {})
    template_spec.setdefault("nodeSelector", dict(SPOT_NODE_SELECTOR))

    spec: Dict[str, Any] = {
        "selector": {"matchLabels": labels(name)},
        "serviceName": name,
        "replicas": replicas,
    }
    if volume is not None:
        spec["volumeClaimTemplates"] = [volume_claim_template(name, volume)]
    spec["template"] = {
        "metadata": {"labels": labels(name)},
        "spec": template_spec,
    }
    return {
        "apiVersion": "apps/v1",
        "kind": "StatefulSet",
        "metadata": {"name": name, "labels": labels(name)},
        "spec": spec,
    }


def cluster_service(name: str, ports: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {"name": name, "labels": labels(name)},
        "spec": {
            "type": "ClusterIP",
            "selector": labels(name),
            "ports": ports,
            "sessionAffinity": "ClientIP",
        },
    }


def external_service(app: str, ports: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Service",
        "metadata": {
            "name": f"{app}-external",
            "labels": labels(app),
            "annotations": {"cloud.google.com/network-tier": "Standard"},
        },
        "spec": {
            "type": "LoadBalancer",
            "selector": labels(app),
            "ports": ports,
        },
    }


def vertical_autoscaler(name: str, target: Any, min_allowed: Dict[str, str], max_allowed: Dict[str, str]) -> Dict[str, Any]:
    return {
        "apiVersion": "autoscaling.k8s.io/v1",
        "kind": "VerticalPodAutoscaler",
        "metadata": {"name": name},
        "spec": {
            "targetRef": {"apiVersion": "apps/v1", "kind": "StatefulSet", "name": target},
            "resourcePolicy": {
                "containerPolicies": [
                    {
                        "containerName": "*",
                        "controlledResources": ["cpu", "memory"],
                        "minAllowed": dict(min_allowed),
                        "maxAllowed": dict(max_allowed),
                    }
                ]
            },
        },
    }


def volume_snapshot(name: str) -> Dict[str, Any]:
    return {
        "apiVersion": f"{SNAPSHOT_API_GROUP}/v1",
        "kind": "VolumeSnapshot",
        "metadata": {"name": name},
        "spec": {"source": {"persistentVolumeClaimName": name}},
    }


def pod_monitoring(app: str, port: str = "metrics", interval: str = "3m") -> Dict[str, Any]:
    return {
        "apiVersion": "monitoring.googleapis.com/v1alpha1",
        "kind": "PodMonitoring",
        "metadata": {"name": f"{app}-pod-monitor"},
        "spec": {
            "selector": {"matchLabels": labels(app)},
            "endpoints": [{"port": port, "interval": interval}],
        },
    }


def namespace(name: str) -> Dict[str, Any]:
    return {"apiVersion": "v1", "kind": "Namespace", "metadata": {"name": name}}


def config_map(name: str, data: Dict[str, Any]) -> Dict[str, Any]:
    return {"apiVersion": "v1", "kind": "ConfigMap", "metadata": {"name": name}, "data": data}


def secret(name: str, string_data: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "apiVersion": "v1",
        "kind": "Secret",
        "metadata": {"name": name},
        "type": "Opaque",
        "stringData": string_data,
    }
