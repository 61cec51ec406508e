#!/usr/bin/env python3
"""
namecloud - Command Line Interface

Main entry point for the namecloud CLI.
"""

import argparse
import copy
import logging
import sys
from typing import Dict, List, Optional

import yaml

from ..core.context import bootstrap
from ..core.point import PointWorkflow
from ..core.transfer import TransferWorkflow
from ..exceptions import ConfigError, NamecloudError

logger = logging.getLogger(__name__)

# flag name -> (config section, config key, help)
CREDENTIAL_FLAGS = {
    "namecheap.api-user": ("namecheap", "api_user", "Namecheap API User"),
    "namecheap.api-token": ("namecheap", "api_token", "Namecheap API Token"),
    "namecheap.username": ("namecheap", "username", "Namecheap Username"),
    "cloudflare.api-key": ("cloudflare", "api_key", "Cloudflare API Key"),
    "cloudflare.email": ("cloudflare", "email", "Cloudflare Email"),
    "cloudflare.account-id": ("cloudflare", "account_id", "Cloudflare Account ID"),
}


def parse_bool_flag(value: str) -> bool:
    """Accept true/false style values for boolean flags."""
    normalized = str(value).strip().lower()
    if normalized in ("1", "true", "t", "yes", "y"):
        return True
    if normalized in ("0", "false", "f", "no", "n"):
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean, got '{value}'")


def _flag_dest(flag: str) -> str:
    return flag.replace(".", "_").replace("-", "_")


def build_parser() -> argparse.ArgumentParser:
    shared = argparse.ArgumentParser(add_help=False)
    shared.add_argument(
        "--config",
        "-c",
        default="configs/config.yaml",
        help="Configuration file path (default: configs/config.yaml)",
    )
    shared.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )
    for flag, (_, _, help_text) in CREDENTIAL_FLAGS.items():
        shared.add_argument(f"--{flag}", dest=_flag_dest(flag), help=help_text)

    parser = argparse.ArgumentParser(
        prog="namecloud",
        description=(
            "namecloud is a little utility to point all your Namecheap domains to "
            "Cloudflare nameservers and optionally, transfer them."
        ),
    )
    subparsers = parser.add_subparsers(dest="command")

    point = subparsers.add_parser(
        "point",
        parents=[shared],
        help="point will configure your Namecheap domain(s) for use with Cloudflare",
        description=(
            "point creates a Cloudflare zone for your Namecheap domain(s) (if required) "
            "and sets the nameservers of the domain(s) to Cloudflare nameservers."
        ),
    )
    point.add_argument(
        "--dry-run",
        action="store_true",
        help="Show which zones would be created without making changes",
    )

    transfer = subparsers.add_parser(
        "transfer",
        parents=[shared],
        help=(
            "transfer will complete most of the process of transferring a domain "
            "to Cloudflare Registrar."
        ),
        description=(
            "transfer will unlock your Namecheap domain, wait for you to provide an "
            "auth code and begin the transfer to Cloudflare Registrar."
        ),
    )
    transfer.add_argument("domain", nargs="?", help="Domain name to transfer")
    transfer.add_argument(
        "--cloudflare.contact-id",
        dest="contact_id",
        default="",
        help="Contact ID to use for domain WHOIS",
    )
    transfer.add_argument(
        "--cloudflare.years",
        dest="years",
        type=int,
        default=1,
        help="Number of years to register domain for (default: 1)",
    )
    for flag, dest, help_text in (
        ("--cloudflare.privacy", "privacy", "Whether WHOIS privacy should be enabled"),
        ("--cloudflare.auto-renew", "auto_renew", "Whether auto renewal should be enabled"),
        ("--cloudflare.import", "import_dns", "Whether existing DNS records should be imported"),
    ):
        transfer.add_argument(
            flag,
            dest=dest,
            type=parse_bool_flag,
            nargs="?",
            const=True,
            default=True,
            metavar="BOOL",
            help=f"{help_text} (default: true)",
        )

    return parser


def main(argv: Optional[List[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        config = load_config(args.config)
        apply_cli_overrides(config, args)
        config_logger(config, verbose=args.verbose)

        with bootstrap(config) as context:
            if args.command == "point":
                PointWorkflow(context).run(dry_run=args.dry_run)
            elif args.command == "transfer":
                TransferWorkflow(context).run(
                    args.domain,
                    contact_id=args.contact_id,
                    years=args.years,
                    privacy=args.privacy,
                    auto_renew=args.auto_renew,
                    import_dns=args.import_dns,
                )

    except NamecloudError as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}")
        if args.verbose:
            import traceback

            traceback.print_exc()
        sys.exit(1)

    sys.exit(0)


def load_config(config_path: str) -> Dict:
    """Load configuration from YAML file."""
    try:
        with open(config_path, "r") as f:
            config = yaml.safe_load(f) or {}
        logger.info(f"Configuration loaded from {config_path}")
    except FileNotFoundError:
        logger.warning(f"Config file {config_path} not found, using defaults")
        return get_default_config()
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing config file {config_path}: {e}") from e

    if not isinstance(config, dict):
        raise ConfigError(f"Config file {config_path} must be a YAML mapping")

    defaults = get_default_config()
    for section, values in defaults.items():
        merged = dict(values)
        merged.update(config.get(section) or {})
        config[section] = merged
    return config


def get_default_config() -> Dict:
    """Return default configuration."""
    return copy.deepcopy(
        {
            "namecheap": {"client_ip": "127.0.0.1", "sandbox": False},
            "cloudflare": {},
            "logging": {"level": "INFO"},
        }
    )


def apply_cli_overrides(config: Dict, args: argparse.Namespace) -> Dict:
    """Overlay credential flags given on the command line onto the config."""
    for flag, (section, key, _) in CREDENTIAL_FLAGS.items():
        value = getattr(args, _flag_dest(flag), None)
        if value:
            config.setdefault(section, {})[key] = value
    return config


def config_logger(config: Dict, verbose: bool = False):
    """Configure logging."""
    logging_config = config.get("logging") or {}
    log_level = "DEBUG" if verbose else logging_config.get("level", "INFO")

    handlers = [logging.StreamHandler(sys.stdout)]
    log_file = logging_config.get("file")
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=handlers,
    )


if __name__ == "__main__":
    main()
