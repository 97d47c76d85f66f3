"""
operator.py: the Rocket Pool node operator (smartnode daemon + validator)

The operator talks to the first enabled execution client and keeps
redundant connections to the beacon nodes for validator fail-over.
"""
import copy
import logging
from typing import Any, Dict, List, Optional

import yaml

from . import manifests
from .deferred import Deferred
from .descriptors import ResourcePlan
from .errors import InvalidTopology
from .models import ClientHandle, ClientKind, OperatorConfig
from .networks import NetworkProfile, network_profile

# Lighthouse's validator uses much more aggressive beacon timeouts when it is
# given several beacon nodes, so it always gets this many, cycling through
# the enabled consensus clients.
BEACON_NODE_SLOTS = 4

OPERATOR_NAME = "rocketpool"
NODE_METRICS_PORT = 9102
VALIDATOR_METRICS_PORT = 5064
CLI_INSTALLER_IMAGE = "busybox:1.34.0"
VALIDATOR_RESOURCES = ("200m", "512Mi")
ROCKETPOOL_DIR = "/.rocketpool"

logger = logging.getLogger("stakekit.operator")

STATIC_CONFIG: Dict[str, Any] = {
    "smartnode": {
        "projectName": "rocketpool",
        "passwordPath": f"{ROCKETPOOL_DIR}/password",
        "walletPath": f"{ROCKETPOOL_DIR}/wallet",
        "validatorKeychainPath": f"{ROCKETPOOL_DIR}/data/validators",
        # the validator is restarted by Kubernetes, not by the smartnode
        "validatorRestartCommand": "/bin/true",
        "maxFee": 0,
        "maxPriorityFee": 2,
        "rplClaimGasThreshold": 100,
    },
    "chains": {
        "eth1": {
            "client": {
                "options": [
                    {
                        "id": "custom",
                        "name": "Custom",
                        "params": [
                            {
                                "name": "Provider URL",
                                "desc": "the Eth 1.0 client HTTP server address",
                                "env": "PROVIDER_URL",
                                "required": True,
                            }
                        ],
                    }
                ]
            }
        },
        "eth2": {
            "client": {
                "options": [
                    {
                        "id": "lighthouse",
                        "name": "Lighthouse",
                        "link": "https://lighthouse-book.sigmaprime.io/",
                    }
                ]
            }
        },
    },
}


def beacon_targets(consensus_clients: List[ClientHandle], slots: int = BEACON_NODE_SLOTS) -> List[Deferred]:
    """
    Validator connection targets: slot i goes to consensus_clients[i % N]
    :raises InvalidTopology: when there is no consensus client to connect to
    """
    if not consensus_clients:
        raise InvalidTopology("The validator needs at least one enabled consensus client")
    return [consensus_clients[i % len(consensus_clients)].endpoint for i in range(slots)]


def merge_config(base: Dict[str, Any], update: Dict[str, Any]) -> Dict[str, Any]:
    """Merge update config into base config (nested merge)"""
    for key, value in update.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            merge_config(base[key], value)
        else:
            base[key] = value
    return base


def network_layer(profile: NetworkProfile, tag: str) -> Dict[str, Any]:
    rocketpool = {
        "storageAddress": profile.storage_address,
        "oneInchOracleAddress": profile.one_inch_oracle_address,
        "rplTokenAddress": profile.rpl_token_address,
    }
    if profile.rpl_faucet_address:
        rocketpool["rplFaucetAddress"] = profile.rpl_faucet_address
    return {
        "rocketpool": rocketpool,
        "smartnode": {
            "graffitiVersion": tag,
            "image": f"rocketpool/smartnode:{tag}",
            "txWatchUrl": profile.tx_watch_url,
            "stakeUrl": profile.stake_url,
        },
        "chains": {"eth1": {"chainID": profile.chain_id}},
    }


def endpoint_layer(eth1: str, eth1_ws: Optional[str], eth2: str) -> Dict[str, Any]:
    return {
        "chains": {
            "eth1": {"provider": eth1, "wsProvider": eth1_ws or ""},
            "eth2": {"provider": eth2},
        }
    }


def smartnode_config(profile: NetworkProfile, tag: str, eth1: str, eth1_ws: Optional[str], eth2: str) -> Dict[str, Any]:
    """config.yml contents: static defaults, then network identifiers, then bound endpoints"""
    config: Dict[str, Any] = {}
    for layer in (STATIC_CONFIG, network_layer(profile, tag), endpoint_layer(eth1, eth1_ws, eth2)):
        merge_config(config, copy.deepcopy(layer))
    return config


def smartnode_settings(eth1: str) -> Dict[str, Any]:
    return {
        "chains": {
            "eth1": {
                "client": {
                    "selected": "custom",
                    "params": [{"env": "PROVIDER_URL", "value": eth1}],
                }
            },
            "eth2": {"client": {"selected": "lighthouse"}},
        }
    }


def _dump(data: Dict[str, Any]) -> str:
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


class NodeOperator:
    """
    NodeOperator: declares the smartnode StatefulSet with its config, password
    secret and lighthouse validator sidecar
    """
    name = OPERATOR_NAME

    def instantiate(
        self,
        plan: ResourcePlan,
        network: str,
        config: OperatorConfig,
        execution_clients: List[ClientHandle],
        consensus_clients: List[ClientHandle],
    ) -> ClientHandle:
        """
        :param execution_clients: Enabled execution handles; the first one is the provider
        :param consensus_clients: Enabled consensus handles; must not be empty
        """
        targets = beacon_targets(consensus_clients)
        provider = execution_clients[0]
        profile = network_profile(network)
        tag = config.tag

        config_yml = Deferred.gather(
            [provider.endpoint, provider.secondary_endpoint, targets[0]]
        ).apply(lambda v: _dump(smartnode_config(profile, tag, v[0], v[1], v[2])))
        settings_yml = provider.endpoint.apply(lambda e: _dump(smartnode_settings(e)))

        config_map = plan.declare(manifests.config_map(
            f"{self.name}-config", {"config.yml": config_yml, "settings.yml": settings_yml}
        ))
        password = plan.declare(manifests.secret(
            f"{self.name}-node-password", {"password": Deferred.of(config.node_password, secret=True)}
        ))

        workload = plan.declare(
            manifests.stateful_set(
                self.name,
                1,
                [self.node_container(config), self.validator_container(network, config, targets)],
                volume=config.volume,
                init_containers=[self.cli_installer(config)],
                volumes=[
                    {"name": "config", "configMap": {"name": config_map.ref("metadata.name")}},
                    {"name": "secrets", "secret": {"secretName": password.ref("metadata.name")}},
                ],
            ),
            depends_on=[config_map, password],
        )
        service = plan.declare(
            {
                "apiVersion": "v1",
                "kind": "Service",
                "metadata": {"name": self.name, "labels": manifests.labels(self.name)},
                "spec": {
                    "clusterIP": "None",
                    "selector": manifests.labels(self.name),
                    "ports": [{"name": "metrics", "port": NODE_METRICS_PORT}],
                },
            },
            depends_on=[workload],
        )
        logger.info(f"Operator bound to {provider.name} with {len(consensus_clients)} beacon node(s)")
        return ClientHandle(
            name=self.name,
            kind=ClientKind.OPERATOR,
            enabled=True,
            endpoint=Deferred.format(
                "http://{}:{}", service.ref("metadata.name"), service.ref("spec.ports.0.port")
            ),
            workload=workload,
        )

    def cli_path(self, tag: str, root: str) -> str:
        return f"{root}/rocketpool-cli-{tag}"

    def cli_installer(self, config: OperatorConfig) -> Dict[str, Any]:
        cli = self.cli_path(config.tag, "/mnt/data")
        url = (
            "https://github.com/rocket-pool/smartnode-install/releases/download/"
            f"{config.tag}/rocketpool-cli-linux-amd64"
        )
        return {
            "name": "install-rocketpool-cli",
            "image": CLI_INSTALLER_IMAGE,
            "command": ["sh", "-c", f"test -x {cli} || wget {url} -O {cli} && chmod +x {cli}"],
            "resources": manifests.resources(config.cpu, config.memory),
            "volumeMounts": [{"name": manifests.DATA_VOLUME, "mountPath": "/mnt/data"}],
        }

    def node_container(self, config: OperatorConfig) -> Dict[str, Any]:
        cli = self.cli_path(config.tag, ROCKETPOOL_DIR)
        alias = f"alias rocketpool='{cli} --allow-root -c {ROCKETPOOL_DIR} -d /go/bin/rocketpool'"
        return {
            "name": "rocketpool-node",
            "image": f"rocketpool/smartnode:{config.tag}",
            "command": [
                "sh",
                "-c",
                f"echo \"{alias}\" > /etc/profile.d/rocketpool.sh && /go/bin/rocketpool node",
            ],
            "env": [{"name": "ENV", "value": "/etc/profile"}],
            "ports": [{"name": "metrics", "containerPort": NODE_METRICS_PORT}],
            "resources": manifests.resources(config.cpu, config.memory),
            "volumeMounts": [
                {"name": manifests.DATA_VOLUME, "mountPath": f"{ROCKETPOOL_DIR}/"},
                {"name": "config", "mountPath": f"{ROCKETPOOL_DIR}/config.yml", "subPath": "config.yml"},
                {"name": "config", "mountPath": f"{ROCKETPOOL_DIR}/settings.yml", "subPath": "settings.yml"},
                {"name": "secrets", "mountPath": f"{ROCKETPOOL_DIR}/password", "subPath": "password"},
            ],
        }

    def validator_container(self, network: str, config: OperatorConfig, targets: List[Deferred]) -> Dict[str, Any]:
        command: List[Any] = [
            "lighthouse",
            "validator",
            "--datadir=/data/data/validators/lighthouse/",
            "--debug-level=info",
            "--init-slashing-protection",
            "--logfile-max-number=1",
            f"--network={network}",
            "--metrics",
            "--metrics-address=0.0.0.0",
            f"--metrics-port={VALIDATOR_METRICS_PORT}",
            Deferred.format("--beacon-nodes={}", Deferred.gather(targets).apply(",".join)),
        ]
        if config.graffiti:
            command.append(f"--graffiti={config.graffiti}")
        return {
            "name": "lighthouse-validator",
            "image": f"sigp/lighthouse:{config.validator_tag}",
            "command": command,
            "ports": [{"name": "validator-metrics", "containerPort": VALIDATOR_METRICS_PORT}],
            "resources": manifests.resources(*VALIDATOR_RESOURCES),
            "volumeMounts": [{"name": manifests.DATA_VOLUME, "mountPath": "/data"}],
        }
