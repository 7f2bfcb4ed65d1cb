"""
CLI commands for tlogwatch.

Commands:
    tlogwatch update      Check the log against the trusted state and advance it
    tlogwatch status      Show the trusted state
    tlogwatch reset       Forget the trusted state (next update bootstraps)

Exit codes:
    0  run succeeded (bootstrapped, unchanged, or extended and saved)
    1  run aborted (network, response, key, signature or state-file error)
    2  append-only violation detected (fork, rewrite or rollback)
    3  head verified but the new state could not be saved
"""

from __future__ import annotations

import json
import sys
from typing import Any, Dict

from tlogwatch.utils.json import json_dumps

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_VIOLATION = 2
EXIT_PERSIST_FAILED = 3


def cmd_update(args) -> int:
    """Run one incremental consistency check."""
    from tlogwatch.core.monitor import TreeMonitor
    from tlogwatch.protocol.enums import UpdateStatus
    from tlogwatch.protocol.errors import InvalidKey
    from tlogwatch.security.head import SignedHeadVerifier
    from tlogwatch.state.store import StateStore
    from tlogwatch.transport.http import HTTPLogClient

    settings = _settings(args)
    public_key_file = args.public_key or settings.public_key_file

    try:
        if public_key_file:
            head_verifier = SignedHeadVerifier.from_pem_file(str(public_key_file))
        else:
            head_verifier = SignedHeadVerifier()
    except InvalidKey as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ABORTED

    try:
        client = HTTPLogClient(
            args.server or settings.server_url,
            timeout=args.timeout if args.timeout is not None else settings.timeout,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ABORTED
    store = StateStore(args.state_file or settings.state_file)

    try:
        result = TreeMonitor(client, store, head_verifier).update()
    finally:
        client.close()

    _print_output(result.to_dict(), args.output, "update")

    if result.status == UpdateStatus.VIOLATION:
        return EXIT_VIOLATION
    if result.status == UpdateStatus.ABORTED:
        return EXIT_ABORTED
    if not result.ok:
        return EXIT_PERSIST_FAILED
    return EXIT_OK


def cmd_status(args) -> int:
    """Show the trusted state."""
    from tlogwatch.protocol.errors import StateStoreError
    from tlogwatch.state.store import StateStore

    settings = _settings(args)
    store = StateStore(args.state_file or settings.state_file)

    try:
        state = store.load()
    except StateStoreError as e:
        print(f"State error: {e}", file=sys.stderr)
        return EXIT_ABORTED

    status = {
        "stateFile": str(store.path),
        "bootstrapped": state is not None,
        "size": state.size if state else None,
        "rootHash": state.root_hex if state else None,
    }
    _print_output(status, args.output, "status")
    return EXIT_OK


def cmd_reset(args) -> int:
    """Delete the trusted state."""
    from tlogwatch.protocol.errors import StateStoreError
    from tlogwatch.state.store import StateStore

    if not args.yes:
        print("Refusing to forget trusted state without --yes", file=sys.stderr)
        return EXIT_ABORTED

    settings = _settings(args)
    store = StateStore(args.state_file or settings.state_file)

    try:
        removed = store.clear()
    except StateStoreError as e:
        print(f"State error: {e}", file=sys.stderr)
        return EXIT_ABORTED

    if removed:
        print(f"Removed {store.path}")
    else:
        print(f"No state at {store.path}")
    return EXIT_OK


def _settings(args):
    from tlogwatch.core.settings import get_settings

    return getattr(args, "settings", None) or get_settings()


def _print_output(data: Dict[str, Any], fmt: str, context: str = "") -> None:
    """Print output in requested format."""
    if fmt == "json":
        print(json.dumps(data, indent=2))
    elif fmt == "jsonl":
        print(json_dumps(data))
    elif context == "update":
        old = data.get("oldState") or {}
        new = data.get("newState") or {}
        print(f"Status:             {data.get('status')}")
        print(f"Phases:             {' -> '.join(data.get('phases', []))}")
        print(f"Trusted size:       {old.get('size', '-')}")
        print(f"Log size:           {new.get('size', '-')}")
        print(f"Log root:           {new.get('rootHash', '-')}")
        print(f"Persisted:          {'yes' if data.get('persisted') else 'no'}")
        err = data.get("error")
        if err:
            print(f"Error:              [{err['code']}] {err['message']}")
    elif context == "status":
        if not data.get("bootstrapped"):
            print(f"No trusted state at {data.get('stateFile')}")
            return
        print(f"State file:         {data.get('stateFile')}")
        print(f"Tree size:          {data.get('size')}")
        print(f"Root hash:          {data.get('rootHash')}")
    else:
        print(json.dumps(data, indent=2))
