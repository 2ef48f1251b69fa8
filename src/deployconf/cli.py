"""CLI subcommands for deployconf.

Provides command-line interface for:
- Chain listing (chains)
- Network resolution (resolve)
- Deterministic deployment setup (factory)
- Explorer verification config (explorers)
- Deployer account (account)
- Startup validation (check)
"""

import argparse
import json
import sys
from decimal import Decimal

from pydantic import ValidationError

from deployconf.config import DeploySettings
from deployconf.exceptions import ConfigurationError
from deployconf.observability.logging import configure_logging
from deployconf.resolver import NetworkResolver


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="deployconf",
        description="Multi-chain deployment configuration resolver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--json",
        action="store_true",
        help="Output in JSON format",
    )
    parser.add_argument(
        "--log-level",
        metavar="LEVEL",
        help="Override DEPLOY_LOG_LEVEL",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("chains", help="List supported chains")

    resolve_parser = subparsers.add_parser("resolve", help="Resolve a network configuration")
    resolve_parser.add_argument("network", type=str, help="Network name or chain id")
    resolve_parser.add_argument("--rpc-url", help="Use this RPC URL instead of the resolved one")
    resolve_parser.add_argument(
        "--no-verify",
        action="store_true",
        help="Skip explorer verification settings",
    )
    resolve_parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Print secrets instead of redacting them",
    )

    factory_parser = subparsers.add_parser(
        "factory", help="Show the deterministic deployment factory for a network"
    )
    factory_parser.add_argument("network", type=str, help="Network name or chain id")

    explorers_parser = subparsers.add_parser(
        "explorers", help="Show the explorer verification plugin config"
    )
    explorers_parser.add_argument(
        "--show-secrets",
        action="store_true",
        help="Print API keys instead of redacting them",
    )

    subparsers.add_parser("account", help="Show the deployer address")
    subparsers.add_parser("check", help="Validate the configuration and exit")

    return parser


class CLIContext:
    """Shared context for CLI commands."""

    def __init__(self, settings: DeploySettings, json_output: bool = False):
        self.settings = settings
        self.json_output = json_output
        self._resolver: NetworkResolver | None = None

    @property
    def resolver(self) -> NetworkResolver:
        """Get resolver (lazy loaded, validates configuration on first use)."""
        if self._resolver is None:
            self._resolver = NetworkResolver.from_settings(self.settings)
        return self._resolver

    def output(self, data: dict) -> None:
        """Output data in the appropriate format."""
        if self.json_output:

            def decimal_default(obj):
                if isinstance(obj, Decimal):
                    return str(obj)
                raise TypeError(f"Object of type {type(obj)} is not JSON serializable")

            print(json.dumps(data, default=decimal_default, indent=2))
        else:
            self._print_formatted(data)

    def _print_formatted(self, data: dict, indent: int = 0) -> None:
        """Print data in human-readable format."""
        prefix = "  " * indent
        for key, value in data.items():
            if isinstance(value, dict):
                print(f"{prefix}{key}:")
                self._print_formatted(value, indent + 1)
            elif isinstance(value, list) and value and isinstance(value[0], dict):
                print(f"{prefix}{key}:")
                for item in value:
                    self._print_formatted(item, indent + 1)
            else:
                print(f"{prefix}{key}: {value}")

    def fail(self, error: Exception) -> int:
        """Report a configuration failure and return the exit code."""
        if self.json_output:
            self.output({"error": str(error)})
        else:
            print(f"Configuration error: {error}", file=sys.stderr)
        return 1


def cmd_chains(ctx: CLIContext) -> int:
    """List supported chains."""
    try:
        resolver = ctx.resolver
    except ConfigurationError as e:
        return ctx.fail(e)

    chains = {}
    for record in resolver.registry.all_chains():
        chains[record.name] = {
            "chain_id": int(record.chain_id),
            "managed_provider": resolver.endpoints.supports_managed_provider(record.chain_id),
            "explorer": resolver.explorers.resolve(record.chain_id) is not None,
        }
    ctx.output({"chains": chains})
    return 0


def cmd_resolve(
    ctx: CLIContext,
    network: str,
    rpc_url: str | None = None,
    verify: bool = True,
    show_secrets: bool = False,
) -> int:
    """Resolve and print a network configuration."""
    try:
        config = ctx.resolver.resolve(network, verify=verify, rpc_url=rpc_url)
    except ConfigurationError as e:
        return ctx.fail(e)

    ctx.output(config.to_dict(reveal_secrets=show_secrets))
    return 0


def cmd_factory(ctx: CLIContext, network: str) -> int:
    """Show the deterministic deployment setup for a network."""
    try:
        resolver = ctx.resolver
        if not resolver.deterministic:
            return ctx.fail(
                ConfigurationError(
                    "Deterministic deployment is disabled. Set CUSTOM_DETERMINISTIC_DEPLOYMENT=true"
                )
            )
        record = resolver.registry.parse(network)
        deployment = resolver.deterministic_deployment(network)
    except ConfigurationError as e:
        return ctx.fail(e)

    if deployment is None:
        ctx.output(
            {
                "network": record.name,
                "chain_id": int(record.chain_id),
                "deterministic": False,
                "message": "No singleton factory record; deploying without a fixed address",
            }
        )
        return 0

    ctx.output(
        {
            "network": record.name,
            "chain_id": int(record.chain_id),
            "deterministic": True,
            **deployment.to_dict(),
            "funding_ether": deployment.funding_ether,
        }
    )
    return 0


def cmd_explorers(ctx: CLIContext, show_secrets: bool = False) -> int:
    """Show the explorer verification plugin configuration."""
    try:
        resolver = ctx.resolver
    except ConfigurationError as e:
        return ctx.fail(e)

    ctx.output(resolver.explorers.plugin_config(resolver.registry, reveal_secrets=show_secrets))
    return 0


def cmd_account(ctx: CLIContext) -> int:
    """Show the deployer address."""
    try:
        accounts = ctx.resolver.accounts
        address = accounts.deployer_account().address
    except ValueError as e:
        # ConfigurationError, or a key or mnemonic eth_account rejects
        return ctx.fail(e)

    ctx.output(
        {
            "deployer": address,
            "source": "private_key" if accounts.private_keys else "mnemonic",
            "default_mnemonic": accounts.uses_default_mnemonic,
        }
    )
    return 0


def cmd_check(ctx: CLIContext) -> int:
    """Validate the configuration."""
    try:
        resolver = ctx.resolver
    except ConfigurationError as e:
        return ctx.fail(e)

    ctx.output(
        {
            "status": "ok",
            "chains": len(resolver.registry),
            "deterministic": resolver.deterministic,
        }
    )
    return 0


def run_cli(args: argparse.Namespace) -> int:
    """Execute CLI command based on parsed arguments.

    Returns
    -------
    int
        Exit code: 0 for success, 1 for error, -1 signals the caller to
        show help (no command specified).
    """
    try:
        settings = DeploySettings()
    except ValidationError as e:
        if args.json:
            print(json.dumps({"error": f"Configuration error: {e}"}))
        else:
            print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    try:
        configure_logging(
            level=args.log_level or settings.log_level,
            log_format=settings.log_format.value,
        )
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    ctx = CLIContext(settings, json_output=args.json)

    if args.command == "chains":
        return cmd_chains(ctx)
    elif args.command == "resolve":
        return cmd_resolve(
            ctx,
            args.network,
            rpc_url=args.rpc_url,
            verify=not args.no_verify,
            show_secrets=args.show_secrets,
        )
    elif args.command == "factory":
        return cmd_factory(ctx, args.network)
    elif args.command == "explorers":
        return cmd_explorers(ctx, show_secrets=args.show_secrets)
    elif args.command == "account":
        return cmd_account(ctx)
    elif args.command == "check":
        return cmd_check(ctx)
    else:
        return -1
