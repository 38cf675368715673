"""maci-deploy: deploy the MACI contracts to an Ethereum network.

Usage:
    maci-deploy -o contractAddresses.json
    maci-deploy -o contractAddresses.json -s 0x... -p 0x...
    maci-deploy -o contractAddresses.json --resume
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from .config import get_rpc_url, load_deployment_config
from .deployer import JsonRpcDeployer
from .exceptions import DeploymentError, DeploymentFailedError
from .orchestrator import run_deployment
from .storage import AddressStore
from .types import DeploymentOverrides

logger = logging.getLogger(__name__)

DEFAULT_ARTIFACTS = Path("compiled")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="maci-deploy",
        description="Deploy all contracts to an Ethereum network of your choice",
    )
    parser.add_argument(
        "-o", "--output", required=True, type=Path,
        help="The filepath to save the addresses of the deployed contracts",
    )
    parser.add_argument(
        "-s", "--signUpToken", dest="sign_up_token",
        help="The address of the signup token (e.g. POAP)",
    )
    parser.add_argument(
        "-p", "--initialVoiceCreditProxy", dest="initial_voice_credit_proxy",
        help="The address of the contract which provides the initial voice credit balance",
    )
    parser.add_argument(
        "-c", "--config", type=Path,
        help="JSON file with tree depths, batch sizes, durations and coordinator key",
    )
    parser.add_argument("--rpc-url", help="JSON-RPC endpoint (default: $MACI_RPC_URL)")
    parser.add_argument(
        "--artifacts", type=Path, default=DEFAULT_ARTIFACTS,
        help="Directory of compiled contract artifacts",
    )
    parser.add_argument(
        "--from", dest="sender",
        help="Node-managed account to deploy from (default: first account)",
    )
    parser.add_argument(
        "--resume", action="store_true",
        help="Reuse addresses already recorded in the output file",
    )
    parser.add_argument(
        "--force", action="store_true",
        help="Overwrite an existing backup of the output file",
    )
    parser.add_argument("-q", "--quiet", action="store_true", help="Only log warnings and errors")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(message)s",
    )

    try:
        config = load_deployment_config(args.config)
        rpc_url = get_rpc_url(args.rpc_url)
        deployer = JsonRpcDeployer(rpc_url, args.artifacts, sender=args.sender)
        logger.info("Using %s", rpc_url)

        manifest = run_deployment(
            config,
            DeploymentOverrides(
                sign_up_token=args.sign_up_token,
                initial_voice_credit_proxy=args.initial_voice_credit_proxy,
            ),
            deployer,
            store=AddressStore(args.output),
            resume=args.resume,
            force=args.force,
        )
    except DeploymentFailedError as e:
        print(f"Failed: {e}", file=sys.stderr)
        print(json.dumps(e.manifest.addresses(), indent=2), file=sys.stderr)
        return 1
    except DeploymentError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Failed: {e}", file=sys.stderr)
        return 1

    print(json.dumps(manifest.addresses(), indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
