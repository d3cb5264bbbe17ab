"""Main CLI entry point for the amoCRM client."""

import argparse
import json
import logging
import sys

from amocrm.client import AmoCRM, random_state
from amocrm.core import (
    AmoCRMError,
    AuthMode,
    ClientConfig,
    ConfigError,
    FileTokenStorage,
    TransportError,
    load_client_config,
    save_client_config,
)

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def fail(message: str):
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def build_client() -> AmoCRM:
    """Create a client from the saved configuration and file token storage."""
    try:
        config = load_client_config()
    except ConfigError:
        fail("Client is not configured. Run 'amocrm configure' first.")
    return AmoCRM.from_config(config, storage=FileTokenStorage())


def authorized_client() -> AmoCRM:
    """Create a client and install the stored token."""
    client = build_client()
    try:
        client.load_token_and_authorize()
    except AmoCRMError as e:
        client.close()
        fail(f"{e}. Run 'amocrm login --code <code>' first.")
    return client


def print_json(data):
    print(json.dumps(data, indent=2, ensure_ascii=False))


def cmd_configure(args):
    """Handle the configure command."""
    try:
        config = ClientConfig(
            client_id=args.client_id,
            client_secret=args.client_secret,
            redirect_url=args.redirect_url,
            domain=args.domain or "",
        )
        if args.api_host:
            config.set_api_host(args.api_host)

        path = save_client_config(config)
    except AmoCRMError as e:
        fail(str(e))

    print(f"Configuration saved to: {path}")


def cmd_authorize_url(args):
    """Handle the authorize-url command."""
    client = build_client()
    state = args.state or random_state()
    try:
        url = client.authorize_url(state, AuthMode(args.mode))
    except AmoCRMError as e:
        fail(str(e))
    finally:
        client.close()

    print(url)
    if not args.state:
        print(f"State: {state}", file=sys.stderr)


def cmd_login(args):
    """Handle the login command - exchange an authorization code."""
    client = build_client()
    try:
        if args.domain:
            client.set_domain(args.domain)
            save_client_config(client.config)

        if args.force:
            client.new_token_and_authorize(args.code)
        else:
            client.load_token_or_authorize(args.code)
    except AmoCRMError as e:
        fail(f"Login failed: {e}")
    finally:
        client.close()

    print("✓ Authorized")


def cmd_refresh(args):
    """Handle the refresh command."""
    client = authorized_client()
    try:
        token = client.refresh_token()
    except AmoCRMError as e:
        fail(f"Refresh failed: {e}")
    finally:
        client.close()

    print(f"✓ Token refreshed, expires at {token.expires_at.isoformat()}")


def cmd_leads_list(args):
    """Handle the leads list command."""
    client = authorized_client()
    try:
        leads = client.leads().list(page=args.page)
    except TransportError as e:
        fail(f"API error (HTTP {e.status_code}): {e}")
    except AmoCRMError as e:
        fail(str(e))
    finally:
        client.close()

    print_json([lead.to_dict() for lead in leads])


def cmd_leads_get(args):
    """Handle the leads get command."""
    client = authorized_client()
    try:
        lead = client.leads().get_one(args.id, with_=args.with_ or "")
    except AmoCRMError as e:
        fail(str(e))
    finally:
        client.close()

    print_json(lead.to_dict())


def cmd_pipelines(args):
    """Handle the pipelines command."""
    client = authorized_client()
    try:
        pipelines = client.pipelines().list()
    except AmoCRMError as e:
        fail(str(e))
    finally:
        client.close()

    print_json([pipeline.to_dict() for pipeline in pipelines])


def cmd_account(args):
    """Handle the account command."""
    client = authorized_client()
    try:
        account = client.accounts().current(with_=args.with_ or "")
    except AmoCRMError as e:
        fail(str(e))
    finally:
        client.close()

    print_json(account.to_dict())


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amocrm",
        description="amoCRM API client",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable verbose logging")

    subparsers = parser.add_subparsers(dest="command", help="Command to execute")

    configure_parser = subparsers.add_parser("configure", help="Save integration credentials")
    configure_parser.add_argument("--client-id", required=True, help="Integration ID")
    configure_parser.add_argument("--client-secret", required=True, help="Integration secret key")
    configure_parser.add_argument("--redirect-url", required=True, help="Registered redirect URI")
    configure_parser.add_argument("--api-host", help="API host (default: amocrm.ru)")
    configure_parser.add_argument("--domain", help="Account subdomain (e.g., 'example')")
    configure_parser.set_defaults(func=cmd_configure)

    url_parser = subparsers.add_parser("authorize-url", help="Print the consent page URL")
    url_parser.add_argument(
        "--mode",
        choices=[mode.value for mode in AuthMode],
        default=AuthMode.POST_MESSAGE.value,
        help="Consent page mode",
    )
    url_parser.add_argument("--state", help="State value (random if omitted)")
    url_parser.set_defaults(func=cmd_authorize_url)

    login_parser = subparsers.add_parser("login", help="Exchange an authorization code for a token")
    login_parser.add_argument("--code", required=True, help="Authorization code from the redirect")
    login_parser.add_argument("--domain", help="Account subdomain from the redirect")
    login_parser.add_argument(
        "--force",
        action="store_true",
        help="Always exchange the code, ignoring a stored token",
    )
    login_parser.set_defaults(func=cmd_login)

    refresh_parser = subparsers.add_parser("refresh", help="Refresh the stored token")
    refresh_parser.set_defaults(func=cmd_refresh)

    leads_parser = subparsers.add_parser("leads", help="Inspect leads")
    leads_sub = leads_parser.add_subparsers(dest="leads_command", required=True)

    leads_list_parser = leads_sub.add_parser("list", help="List one page of leads")
    leads_list_parser.add_argument("--page", type=int, default=1, help="Page number")
    leads_list_parser.set_defaults(func=cmd_leads_list)

    leads_get_parser = leads_sub.add_parser("get", help="Show a single lead")
    leads_get_parser.add_argument("--id", type=int, required=True, help="Lead ID")
    leads_get_parser.add_argument("--with", dest="with_", help="Related data, e.g. 'contacts'")
    leads_get_parser.set_defaults(func=cmd_leads_get)

    pipelines_parser = subparsers.add_parser("pipelines", help="List lead pipelines")
    pipelines_parser.set_defaults(func=cmd_pipelines)

    account_parser = subparsers.add_parser("account", help="Show the current account")
    account_parser.add_argument("--with", dest="with_", help="Extra data, e.g. 'amojo_id'")
    account_parser.set_defaults(func=cmd_account)

    return parser


def main(argv=None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(args.verbose)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    args.func(args)


if __name__ == "__main__":
    main()
