"""Command-line entry point for workspace-gate.

Usage:
    workspace-gate authorize --domain calendar
    workspace-gate policy --domain docs
    workspace-gate check-calendar --operation delete --self me@example.com --attendee bob@example.com
    workspace-gate check-sheet --id SPREADSHEET_ID --write
    workspace-gate check-doc --id DOC_ID --parent FOLDER_ID
    workspace-gate check-folder --id FOLDER_ID

Environment:
    GOOGLE_OAUTH_CREDENTIALS  OAuth client credentials.json (required for authorize/check-doc)
    GOOGLE_OAUTH_TOKENS       Token file (default: ~/.config/google-<domain>-mcp/tokens.json)
    GOOGLE_MCP_CONFIG         Optional policy file
"""

import argparse
import asyncio
import json
import sys

from dotenv import load_dotenv

from .adapters.drive import DriveFolderGraph
from .core.config import Settings
from .core.context import DOMAIN_SCOPES, POLICY_LOADERS, build_domain_context, load_policy
from .logging_config import setup_logging
from .permissions import calendar, docs, sheets
from .permissions.decision import AccessDecision
from .utils.errors import (
    AuthenticationError,
    CredentialsUnreadableError,
    WorkspaceGateError,
)

EXIT_ALLOWED = 0
EXIT_ERROR = 1
EXIT_DENIED = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="workspace-gate",
        description="Credential lifecycle and access control for Google Workspace agents",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    authorize = subparsers.add_parser("authorize", help="Authorize (or validate) a domain's session")
    authorize.add_argument("--domain", choices=sorted(DOMAIN_SCOPES), required=True)

    policy = subparsers.add_parser("policy", help="Print the effective policy for a domain")
    policy.add_argument("--domain", choices=sorted(POLICY_LOADERS), required=True)

    check_calendar = subparsers.add_parser("check-calendar", help="Check a calendar operation")
    check_calendar.add_argument(
        "--operation", choices=[op.value for op in calendar.OperationType], required=True
    )
    check_calendar.add_argument("--self", dest="self_email", required=True)
    check_calendar.add_argument("--attendee", dest="attendees", action="append", default=[])

    check_sheet = subparsers.add_parser("check-sheet", help="Check spreadsheet access")
    check_sheet.add_argument("--id", dest="resource_id", required=True)
    check_sheet.add_argument("--write", action="store_true", help="Check write access")

    check_doc = subparsers.add_parser("check-doc", help="Check document access")
    check_doc.add_argument("--id", dest="resource_id", required=True)
    check_doc.add_argument(
        "--parent",
        dest="parents",
        action="append",
        default=[],
        help="Direct parent folder id; nested folders are resolved through Drive",
    )

    check_folder = subparsers.add_parser("check-folder", help="Check folder access")
    check_folder.add_argument("--id", dest="resource_id", required=True)

    return parser


def _report(decision: AccessDecision) -> int:
    if decision.allowed:
        print("allow")
        return EXIT_ALLOWED
    print(f"deny: {decision.reason}")
    return EXIT_DENIED


async def _authorize(settings: Settings, domain: str) -> int:
    context = build_domain_context(settings, domain)
    await context.provider.get()
    print(f"Authentication complete. Tokens: {settings.tokens_path_for(domain)}")
    return EXIT_ALLOWED


def _policy(settings: Settings, domain: str) -> int:
    policy = load_policy(settings, domain)
    if policy is None:
        print(json.dumps({"domain": domain, "policy": "unrestricted"}, indent=2))
    else:
        print(json.dumps({"domain": domain, "policy": policy.model_dump(mode="json", by_alias=True)}, indent=2))
    return EXIT_ALLOWED


def _check_calendar(settings: Settings, args: argparse.Namespace) -> int:
    policy = calendar.load_permission_config(settings.google_mcp_config)
    result = calendar.check_permission(policy, args.operation, args.attendees, args.self_email)
    if result.allowed:
        print(f"allow ({result.condition.value})")
        return EXIT_ALLOWED
    print(f"deny: {calendar.deny_message(args.operation, result.condition)}")
    return EXIT_DENIED


async def _check_doc(settings: Settings, args: argparse.Namespace) -> int:
    policy = docs.load_permission_config(settings.google_mcp_config)
    direct = docs.check_document_access(policy, args.resource_id)
    if direct.allowed or not args.parents:
        return _report(direct)

    context = build_domain_context(settings, "docs")
    graph = DriveFolderGraph(await context.provider.get())
    decision = await docs.check_document_in_tree(
        policy, graph.hierarchy(), args.resource_id, args.parents
    )
    return _report(decision)


async def run(args: argparse.Namespace, settings: Settings) -> int:
    if args.command == "authorize":
        return await _authorize(settings, args.domain)
    if args.command == "policy":
        return _policy(settings, args.domain)
    if args.command == "check-calendar":
        return _check_calendar(settings, args)
    if args.command == "check-sheet":
        policy = sheets.load_permission_config(settings.google_mcp_config)
        return _report(sheets.check_access(policy, args.resource_id, args.write))
    if args.command == "check-doc":
        return await _check_doc(settings, args)
    if args.command == "check-folder":
        policy = docs.load_permission_config(settings.google_mcp_config)
        return _report(docs.check_folder_access(policy, args.resource_id))
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    load_dotenv()
    settings = Settings()
    setup_logging(level=settings.log_level, log_file=settings.log_file)

    try:
        return asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        print("\nAuthorization cancelled", file=sys.stderr)
        return EXIT_ERROR
    except CredentialsUnreadableError as e:
        print(f"Error: {e}", file=sys.stderr)
        print(f"Hint: {e.hint}", file=sys.stderr)
        return EXIT_ERROR
    except AuthenticationError as e:
        print(f"Authentication failed: {e}", file=sys.stderr)
        print("Run 'workspace-gate authorize --domain <domain>' to retry.", file=sys.stderr)
        return EXIT_ERROR
    except WorkspaceGateError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
