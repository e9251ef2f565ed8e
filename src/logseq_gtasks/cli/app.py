"""CLI app entrypoint and error mapping."""

from __future__ import annotations

import sys

from logseq_gtasks import (
    AuthorizationExpired,
    ConfigError,
    LocalStoreError,
    MalformedRecordError,
    SyncError,
    TransportError,
)


def main(argv: list[str] | None = None) -> int:
    import logseq_gtasks.cli as cli

    parser = cli.build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        cli.logging.basicConfig(level=cli.logging.DEBUG, format="%(name)s %(message)s", stream=sys.stderr)

    try:
        if args.command == "sync":
            cli.asyncio.run(cli._run_sync(args))
        elif args.auth_command == "receive":
            cli._run_receive(args)
        else:
            cli.asyncio.run(cli._run_refresh(args))
        return 0
    except ConfigError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 3
    except AuthorizationExpired as exc:
        print(f"error: {exc}", file=sys.stderr)
        print("Re-authenticate with `logseq-gtasks auth receive` to continue syncing.", file=sys.stderr)
        return 6
    except (TransportError, LocalStoreError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 4
    except (SyncError, MalformedRecordError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 5
    except Exception as exc:  # pragma: no cover - defensive fallback
        print(f"error: {exc}", file=sys.stderr)
        return 1


__all__ = ["main"]
