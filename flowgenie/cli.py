"""CLI tool for local development.

Usage:
    python -m flowgenie.cli actions
    python -m flowgenie.cli token <user_id> <email> [flow_address]
"""

import json
import sys

from flowgenie.config import settings
from flowgenie.errors import ConfigError
from flowgenie.services.auth import create_access_token
from flowgenie.services.flow_actions import ActionRegistry
from flowgenie.services.flow_client import FlowClient


def show_actions():
    """Print the registered Flow actions and their parameter schemas."""
    registry = ActionRegistry(FlowClient(
        access_node=settings.flow_access_node, network=settings.flow_network, mock_mode=True
    ))
    for action in registry.catalog():
        print(f"{action['id']:<16} {action['name']}")
        print(f"{'':<16} {action['description']}")
        print(f"{'':<16} parameters: {json.dumps(action['parameters'])}")


def mint_token(args: list[str]):
    """Mint a bearer token for an existing user id."""
    if len(args) < 2:
        print("Usage: python -m flowgenie.cli token <user_id> <email> [flow_address]")
        sys.exit(1)

    user_id, email = args[0], args[1]
    flow_address = args[2] if len(args) > 2 else None
    try:
        token = create_access_token(settings, user_id=user_id, email=email, flow_address=flow_address)
    except ConfigError as e:
        print(f"{e.message}. Set it in the environment or .env first.")
        sys.exit(1)

    print(token)


def main():
    if len(sys.argv) < 2:
        print("Usage: python -m flowgenie.cli <command>")
        print("Commands: actions, token")
        sys.exit(1)

    command = sys.argv[1]
    if command == "actions":
        show_actions()
    elif command == "token":
        mint_token(sys.argv[2:])
    else:
        print(f"Unknown command: {command}")
        sys.exit(1)


if __name__ == "__main__":
    main()
