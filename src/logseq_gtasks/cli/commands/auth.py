"""Credential commands: store a received token pair, or refresh the access token."""

from __future__ import annotations

import argparse

from logseq_gtasks import TokenSet


def format_token_summary(tokens: TokenSet, *, path: str) -> str:
    refresh = "stored" if tokens.refresh_token else "missing"
    return f"Credentials written to {path} (refresh token: {refresh})"


def run_receive(args: argparse.Namespace) -> TokenSet:
    import logseq_gtasks.cli as cli

    config = cli.load_config(args.config)
    payload: dict[str, str] = {"access_token": args.access_token}
    if args.refresh_token:
        payload["refresh_token"] = args.refresh_token
    tokens = cli.TaskSync(config).receive_tokens(payload)
    print(format_token_summary(tokens, path=str(config.token_path)))
    return tokens


async def run_refresh(args: argparse.Namespace) -> TokenSet:
    import logseq_gtasks.cli as cli

    config = cli.load_config(args.config)
    tokens = await cli.TaskSync(config).refresh_tokens()
    print(format_token_summary(tokens, path=str(config.token_path)))
    return tokens


__all__ = ["format_token_summary", "run_receive", "run_refresh"]
