"""
alerts.py: alert policies for a deployment namespace
"""
from typing import Any, Dict, List

from .descriptors import Descriptor, ResourcePlan

ALERT_API_VERSION = "monitoring.cnrm.cloud.google.com/v1beta1"


def _threshold_policy(
    name: str,
    display_name: str,
    documentation: str,
    condition_name: str,
    metric_filter: str,
    threshold: float,
    aggregation: Dict[str, Any],
    channels: List[str],
    auto_close: str = "",
) -> Dict[str, Any]:
    spec: Dict[str, Any] = {
        "displayName": display_name,
        "documentation": {"content": documentation},
        "combiner": "OR",
        "conditions": [
            {
                "displayName": condition_name,
                "conditionThreshold": {
                    "filter": metric_filter,
                    "comparison": "COMPARISON_GT",
                    "thresholdValue": threshold,
                    "duration": "3600s",
                    "aggregations": [aggregation],
                    "trigger": {"count": 1},
                },
            }
        ],
        "notificationChannels": [{"external": c} for c in channels],
    }
    if auto_close:
        spec["alertStrategy"] = {"autoClose": auto_close}
    return {
        "apiVersion": ALERT_API_VERSION,
        "kind": "MonitoringAlertPolicy",
        "metadata": {"name": name},
        "spec": spec,
    }


def declare_alerts(plan: ResourcePlan, network: str, channels: List[str]) -> List[Descriptor]:
    """
    Container restart and volume utilization alerts scoped to the network's namespace
    :param channels: Notification channel resource names
    """
    scope = f'resource.labels.namespace_name = "{network}"'
    restarts = _threshold_policy(
        f"{network}-container-restarts",
        f"Container restarts are high ({network})",
        "This could indicate malformed config or startup commands; "
        "problems with networking/storage; or other issues.",
        "Kubernetes Container - Restart count",
        f'resource.type = "k8s_container" AND {scope} AND metric.type = "kubernetes.io/container/restart_count"',
        5,
        {
            "alignmentPeriod": "1800s",
            "perSeriesAligner": "ALIGN_DELTA",
            "crossSeriesReducer": "REDUCE_SUM",
            "groupByFields": ["resource.label.container_name"],
        },
        channels,
    )
    volumes = _threshold_policy(
        f"{network}-volume-utilization",
        f"Persistent volume needs to be expanded ({network})",
        "See https://kubernetes.io/blog/2018/07/12/resizing-persistent-volumes-using-kubernetes/ "
        "for how to expand the volume.",
        "Kubernetes Pod - Volume utilization",
        f'resource.type = "k8s_pod" AND {scope} AND metric.type = "kubernetes.io/pod/volume/utilization"',
        0.9,
        {
            "alignmentPeriod": "3600s",
            "perSeriesAligner": "ALIGN_MAX",
            "crossSeriesReducer": "REDUCE_MAX",
            "groupByFields": ["resource.label.pod_name"],
        },
        channels,
        auto_close="3600s",
    )
    return [plan.declare(restarts), plan.declare(volumes)]
