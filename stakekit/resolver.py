"""
resolver.py: merges user overrides with the per-network default tables

A field the user supplied always wins, even when it is falsy (replicas: 0,
external: false, volume.source: null). Only absent fields are defaulted.
"""
import logging
from typing import Any, Dict, Mapping, Optional

from .defaults import DEFAULT_TABLES, REQUIRED, evaluate
from .errors import ConfigurationError, MissingRequiredField, UnknownClientKind
from .models import ClientConfig, ClientKind, OperatorConfig, VolumeSpec

logger = logging.getLogger("stakekit.resolver")

OPERATOR_ID = "rocketpool"


def _default_table(kind: ClientKind, client_id: str) -> Dict[str, Any]:
    tables = DEFAULT_TABLES[kind]
    if client_id not in tables:
        raise UnknownClientKind(kind.value, client_id, tables.keys())
    return tables[client_id]


def check_mapping(owner: str, value: Any) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"'{owner}' overrides must be a mapping, got {type(value).__name__}")
    return value


def _check_keys(owner: str, user: Mapping[str, Any], allowed) -> None:
    unknown = sorted(set(user) - set(allowed))
    if unknown:
        raise ConfigurationError(
            f"'{owner}' has unknown settings: {', '.join(unknown)} "
            f"(allowed: {', '.join(sorted(allowed))})"
        )


def _pick(owner: str, field: str, user: Mapping[str, Any], default: Any, network: str) -> Any:
    if field in user:
        value = user[field]
        if value is None and default is REQUIRED:
            raise MissingRequiredField(owner, field)
        return value
    if default is REQUIRED:
        raise MissingRequiredField(owner, field)
    return evaluate(default, network)


def resolve_volume(owner: str, user_volume: Any, defaults: Dict[str, Any], network: str) -> VolumeSpec:
    user = check_mapping(f"{owner}.volume", user_volume)
    _check_keys(f"{owner}.volume", user, defaults)
    values = {
        field: _pick(f"{owner}.volume", field, user, default, network)
        for field, default in defaults.items()
    }
    return VolumeSpec(**values)


def resolve_client_config(
    user_config: Optional[Mapping[str, Any]],
    network: str,
    kind: ClientKind,
    client_id: str,
    metrics_default: bool = False,
) -> ClientConfig:
    """
    Resolve the complete configuration of an execution or consensus client
    :param user_config: Partial overrides from the deployment document (may be None)
    :param network: Deployment target, e.g. "mainnet" or "prater"
    :param kind: Client layer
    :param client_id: Registry identifier of the client
    :param metrics_default: Value for the metrics flag when the user did not set it
    :return: Fully populated ClientConfig
    """
    table = _default_table(kind, client_id)
    user = check_mapping(client_id, user_config)
    _check_keys(client_id, user, table)

    values: Dict[str, Any] = {}
    for field, default in table.items():
        if field == "volume":
            values[field] = resolve_volume(client_id, user.get("volume"), default, network)
        elif field == "metrics" and field not in user:
            values[field] = metrics_default
        else:
            values[field] = _pick(client_id, field, user, default, network)

    logger.debug(f"Resolved {kind.value} client '{client_id}' for {network}")
    return ClientConfig(client_id=client_id, kind=kind, **values)


def resolve_operator_config(
    user_config: Optional[Mapping[str, Any]],
    network: str,
    validator_tag: Optional[str] = None,
) -> OperatorConfig:
    """
    Resolve the node operator configuration.
    The validator image follows the lighthouse beacon tag override unless
    validator_tag is set explicitly.
    """
    table = _default_table(ClientKind.OPERATOR, OPERATOR_ID)
    user = check_mapping(OPERATOR_ID, user_config)
    _check_keys(OPERATOR_ID, user, table)

    values: Dict[str, Any] = {}
    for field, default in table.items():
        if field == "volume":
            values[field] = resolve_volume(OPERATOR_ID, user.get("volume"), default, network)
        elif field == "validator_tag" and field not in user and validator_tag:
            values[field] = validator_tag
        else:
            values[field] = _pick(OPERATOR_ID, field, user, default, network)
    return OperatorConfig(**values)
