"""CLI entry point for inboxdash."""

import argparse
import logging

import inboxdash.io.logging_setup
from inboxdash.app.api import DemoClient
from inboxdash.app.config import build_config
from inboxdash.app.grants import JsonGrantStore
from inboxdash.tui.app import InboxDashApp
from inboxdash.tui.view_registry import VIEW_SPECS

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="inboxdash",
        description="Terminal dashboard for mail, calendar, contacts and webhooks",
    )
    parser.add_argument(
        "--view",
        type=str,
        default=None,
        choices=[spec.name for spec in VIEW_SPECS],
        help="View to open at startup (default: dashboard)",
    )
    parser.add_argument("--theme", type=str, default=None, help="Textual theme name")
    parser.add_argument(
        "--refresh",
        type=float,
        default=None,
        help="Auto-refresh interval in seconds, 0 disables (default: 30)",
    )
    parser.add_argument("--grant", type=str, default=None, help="Grant id to start with")
    parser.add_argument(
        "--no-palette",
        action="store_true",
        help="Use the plain ':' command prompt instead of the autocomplete palette",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Run without a grant store; grant switching is disabled",
    )
    return parser


def _resolve_grant(client, config):
    """Fill in email/provider for the configured grant, or pick the first one."""
    grants = client.list_grants()
    for grant in grants:
        if grant.id == config.grant_id:
            return config.with_grant(grant.id, grant.email, grant.provider)
    if config.grant_id:
        logger.warning("grant %s not found, using %s", config.grant_id,
                       grants[0].id if grants else "none")
    if grants:
        return config.with_grant(grants[0].id, grants[0].email, grants[0].provider)
    return config


def main(argv=None):
    args = build_parser().parse_args(argv)

    # [LAW:single-enforcer] Runtime logger configuration is centralized in io.logging_setup.
    log_target = inboxdash.io.logging_setup.configure()
    logger.info("logging configured level=%s file=%s", log_target.level_name, log_target.file_path)

    client = DemoClient()
    grant_store = None if args.demo else JsonGrantStore()
    config = build_config(
        client,
        grant_store,
        overrides={
            "initial_view": args.view,
            "theme": args.theme,
            "refresh_interval": args.refresh,
            "grant_id": args.grant,
            "command_palette": False if args.no_palette else None,
        },
    )
    config = _resolve_grant(client, config)

    app = InboxDashApp(config)
    try:
        app.run()
    finally:
        logger.info("inboxdash exited")
