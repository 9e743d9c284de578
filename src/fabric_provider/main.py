#!/usr/bin/env python3
"""
Fabric Provider.
"""

import argparse
import logging

from fabric_provider.factories.management_factory import ProviderManagementFactory
from fabric_provider.operations.operation_interfaces import ProviderParams
from fabric_provider.static.log_setup import setup_logging

OPERATIONS = ("validate", "token")

# ---------------------------------------------------------------------------- #
# ---------------------------------------------------------------------------- #
# ---------------------------------------------------------------------------- #


def parse_config(argv: list[str] | None = None) -> tuple[ProviderParams, str]:
    """
    Parse command line arguments.

    Returns:
        tuple[ProviderParams, str]: The parsed provider parameters and the operation to run.
    """
    parser = argparse.ArgumentParser(description="Fabric provider core.")
    parser.add_argument("--config-file-absolute-path", type=str, required=True, help="Absolute path to the configuration file.")
    parser.add_argument("--operation", type=str, choices=OPERATIONS, default="validate", help="The operation to execute.")
    parser.add_argument("--log-to-file", action="store_true", help="Also write logs to a timestamped file.")
    args = parser.parse_args(argv)

    log_filename = setup_logging(log_to_file=args.log_to_file)
    if log_filename:
        logging.info(f"Writing logs to: {log_filename}")
    logging.info(f"Config file absolute path: {args.config_file_absolute_path}")
    logging.info(f"Operation: {args.operation}")

    provider_params = ProviderParams(args.config_file_absolute_path)
    if provider_params.validate():
        logging.info("Configuration validation passed")
    else:
        logging.error("Configuration validation failed")
        error_message = "Invalid configuration parameters."
        raise ValueError(error_message)

    logging.debug(f"Resolved configuration:\n{provider_params.to_pretty_json()}")
    return provider_params, args.operation


def main(argv: list[str] | None = None) -> None:
    """
    Synchronous entry point for the CLI.
    """
    provider_params, operation = parse_config(argv)

    if operation == "token":
        token = ProviderManagementFactory(provider_params).create_token_store().ensure_valid_token()
        logging.info(f"Access token is valid until {token.expires_on}")

    logging.info("Fabric provider operation complete.")


if __name__ == "__main__":
    main()
