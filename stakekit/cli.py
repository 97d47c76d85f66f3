"""
This module purpose is to handle command line interface
"""

import argparse
import sys
from pathlib import Path

import yaml

from .action_builder import ActionBuilder
from .action_executor import ActionExecutor
from .app_config import StakekitAppConfig
from .composer import compose_topology
from .config import DeploymentConfig
from .config_manager import ConfigSource
from .errors import StakekitError
from .plugin_manager import PluginManager
from .registry import consensus_clients, execution_clients
from .utils import BOLD, RESET, fatal, heading, info, setup_logging, success, warning

STARTER_DEPLOYMENT = """\
# Deployment document: one section per network.
{network}:
  execution: [erigon]
  consensus: [lighthouse, teku]
  metrics: false
  alerting: false
  notification_channels: []
  clients:
    erigon:
      external: true
  rocketpool:
    node_password: change-me
"""


def main(argv=None):
    """
    main: main loop for the program
    """
    parser = argparse.ArgumentParser(description="stakekit - staking node topology composer")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("-f", "--file", dest="deployment_file", help="Deployment document (default: stakekit.yaml)")
    parser.add_argument("--plugins-dir", help="Directory holding client plugins")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # stakekit plan <network>
    prepare_cmd_plan(subparsers)

    # stakekit render <network>
    prepare_cmd_render(subparsers)

    # stakekit clients
    prepare_cmd_clients(subparsers)

    # stakekit config
    prepare_cmd_config(subparsers)

    # stakekit init
    prepare_cmd_init(subparsers)

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    config = StakekitAppConfig({
        "deployment_file": args.deployment_file,
        "plugins_dir": args.plugins_dir,
    }).load()

    try:
        if args.command == "plan":
            cmd_plan(args, config)
        elif args.command == "render":
            return cmd_render(args, config)
        elif args.command == "clients":
            cmd_clients(args, config)
        elif args.command == "config":
            return cmd_config(args, config)
        elif args.command == "init":
            return cmd_init(args, config)
    except StakekitError as e:
        fatal(str(e))
        return 1
    return 0


def load_plugins(config: StakekitAppConfig):
    manager = PluginManager(config.plugins_dir)
    manager.load_all_plugins()
    for name, reason in manager.failed.items():
        warning(f"Plugin '{name}' was not loaded: {reason}")
    return manager


def compose(args, config: StakekitAppConfig):
    load_plugins(config)
    network = args.network or config.default_network
    deployment = DeploymentConfig(config.deployment_file).load().for_network(network)
    return compose_topology(deployment)


def prepare_cmd_plan(subparsers):
    """
    prepare_cmd_plan: prepares parser for subcommand and args for `plan`
    """
    plan_p = subparsers.add_parser("plan", help="Show the topology and resources of a network")
    plan_p.add_argument("network", nargs="?", help="Network section to compose")
    plan_p.add_argument("--yaml", action="store_true", help="Print the rendered manifests")


def cmd_plan(args, config):
    """
    cmd_plan: handles 'plan' command
    """
    topology = compose(args, config)
    if args.yaml:
        print(topology.plan.to_yaml(), end="")
        return

    heading(f"Network: {topology.network}")
    print(f"  execution: {', '.join(h.name for h in topology.execution) or '-'}")
    print(f"  consensus: {', '.join(h.name for h in topology.consensus) or '-'}")
    print(f"  operator:  {topology.operator.name if topology.operator else '-'}")
    if topology.disabled:
        print(f"  disabled:  {', '.join(topology.disabled)}")

    heading(f"Resources ({len(topology.plan)})")
    for descriptor in topology.plan:
        print(f"  {descriptor.key}")


def prepare_cmd_render(subparsers):
    """
    prepare_cmd_render: prepares parser for subcommand and args for `render`
    """
    render_p = subparsers.add_parser("render", help="Write the manifests of a network to a directory")
    render_p.add_argument("network", nargs="?", help="Network section to compose")
    render_p.add_argument("-o", "--output", help="Output directory (default: manifests/<network>)")
    render_p.add_argument("--dry-run", action="store_true", help="Show the planned writes only")


def cmd_render(args, config):
    """
    cmd_render: handles 'render' command
    """
    topology = compose(args, config)
    out_dir = Path(args.output) if args.output else config.output_dir / topology.network
    actions = ActionBuilder(topology.plan).build_render_actions(out_dir)
    ok = ActionExecutor().execute_actions(actions, dry_run=args.dry_run)
    return 0 if ok else 1


def prepare_cmd_clients(subparsers):
    subparsers.add_parser("clients", help="List registered client implementations")


def cmd_clients(args, config):
    """
    cmd_clients: handles 'clients' command
    """
    manager = load_plugins(config)
    for registry in (execution_clients, consensus_clients):
        heading(f"{registry.kind.value.capitalize()} clients")
        for name in registry.names():
            origin = " (plugin)" if name in manager.loaded else ""
            print(f"  {BOLD}{name}{RESET}{origin}")


def prepare_cmd_config(subparsers):
    """
    prepare_cmd_config: prepares parser for subcommand and args for `config`
    """
    config_p = subparsers.add_parser("config", help="Show or change stakekit settings")
    config_sub = config_p.add_subparsers(dest="action", required=True)
    config_sub.add_parser("show", help="Show the effective settings")
    get_p = config_sub.add_parser("get", help="Show one setting")
    get_p.add_argument("key")
    set_p = config_sub.add_parser("set", help="Change one setting")
    set_p.add_argument("key")
    set_p.add_argument("value")
    set_p.add_argument("--project", action="store_true",
                       help="Write to ./.stakekit.yaml instead of the global config")


def cmd_config(args, config):
    """
    cmd_config: handles 'config' command
    """
    if args.action == "show":
        print(yaml.safe_dump(config.data, default_flow_style=False), end="")
    elif args.action == "get":
        value = config.get_config_value(args.key)
        if value is None:
            warning(f"'{args.key}' is not set")
            return 1
        print(value)
    elif args.action == "set":
        source = ConfigSource.PROJECT_CONFIG if args.project else ConfigSource.GLOBAL_CONFIG
        # Only the chosen file is rewritten; other layers stay where they are
        stored = StakekitAppConfig()
        stored.data = stored.config_manager.load_config(source)
        stored.config_manager.config_data = stored.data
        stored.set_config_value(args.key, yaml.safe_load(args.value))
        path = stored.save(source)
        success(f"Set {args.key} in {path}")
    return 0


def prepare_cmd_init(subparsers):
    """
    prepare_cmd_init: prepares parser for subcommand and args for `init`
    """
    init_p = subparsers.add_parser("init", help="Write a starter deployment document")
    init_p.add_argument("network", nargs="?", help="Network of the first section")
    init_p.add_argument("--force", action="store_true", help="Overwrite an existing document")


def cmd_init(args, config):
    """
    cmd_init: handles 'init' command
    """
    path = config.deployment_file
    if path.exists() and not args.force:
        warning(f"{path} already exists. Use --force to overwrite.")
        return 1
    network = args.network or config.default_network
    path.write_text(STARTER_DEPLOYMENT.format(network=network))
    success(f"Created {path}")
    info("Set rocketpool.node_password before rendering.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
