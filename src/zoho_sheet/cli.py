"""CLI for zoho-sheet - credential setup and quick inspection.

Usage:
    zoho-sheet init                        # Show setup instructions
    zoho-sheet status                      # Show credential status
    zoho-sheet login                       # Device-code OAuth login
    zoho-sheet workbooks                   # List workbooks
    zoho-sheet sheets <workbook_id>        # List worksheets
    zoho-sheet tables <resource_id>        # List tables
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
import webbrowser


def cmd_init() -> int:
    """Show where credentials go and how to obtain them."""
    from zoho_sheet.config import ENV_FILE, REPO_ROOT

    print("=" * 60)
    print("ZOHO-SHEET SETUP")
    print("=" * 60)
    print()
    print(f"Repository: {REPO_ROOT}")
    print()
    print("1. Create a client at https://api-console.zoho.com/")
    print("   (choose 'Non-browser Applications' for the device flow)")
    print()
    print("2. Add the client credentials to .env:")
    print()
    print(f"  cat > {ENV_FILE} << 'EOF'")
    print("  ZOHO_CLIENT_ID=1000.XXXXXXXX")
    print("  ZOHO_CLIENT_SECRET=...")
    print("  ZOHO_DATA_CENTER=com")
    print("  EOF")
    print()
    print("3. Run 'zoho-sheet login' and store the printed ZOHO_REFRESH_TOKEN")
    print()

    if ENV_FILE.exists():
        print(".env exists")

    return 0


def cmd_status() -> int:
    """Show status of the configured credentials."""
    from zoho_sheet.config import get_credential_status

    status = get_credential_status()
    zoho = status["zoho"]

    print("=" * 60)
    print("ZOHO-SHEET CREDENTIAL STATUS")
    print("=" * 60)
    print()
    print(f"Repository: {status['repo_root']}")
    print(f".env:       {'[x]' if status['env_file'] else '[ ]'}")
    print()
    print(f"  Client ID:     {'[x]' if zoho['client_id'] else '[ ]'}")
    print(f"  Client secret: {'[x]' if zoho['client_secret'] else '[ ]'}")
    print(f"  Refresh token: {'[x]' if zoho['refresh_token'] else '[ ]'}")
    print(f"  Device code:   {'[x]' if zoho['device_code'] else '[ ]'}")
    print(f"  Data center:   {zoho['data_center']}")
    print()

    return 0


async def _start_login(config):
    """Return a pending device authorization, or None if already authorized."""
    from zoho_sheet.auth import ZohoOAuth

    auth = ZohoOAuth(config)
    try:
        if auth.get_refresh_token():
            await auth.get_access_token()
            return None
        return await auth.begin_device_authorization()
    finally:
        await auth.aclose()


async def _finish_login(config) -> str | None:
    from zoho_sheet.auth import ZohoOAuth

    auth = ZohoOAuth(config)
    try:
        await auth.get_access_token()
        return auth.get_refresh_token()
    finally:
        await auth.aclose()


def login(no_browser: bool = False) -> int:
    """Interactive device-code login.

    The approval prompt runs between two event loops so that no network
    client is held open while waiting on the user.
    """
    import httpx

    from zoho_sheet.config import load_config
    from zoho_sheet.exceptions import ZohoSheetError

    print("=" * 60)
    print("ZOHO-SHEET LOGIN")
    print("=" * 60)

    try:
        config = load_config()
        device = asyncio.run(_start_login(config))
        if device is None:
            print("\nAlready authorized, refresh token is valid")
            return 0

        print(f"\nUser code:        {device.user_code}")
        print(f"Verification URL: {device.verification_url}")
        print(f"Code expires in:  {device.expires_in}s\n")

        if not no_browser:
            webbrowser.open(device.verification_url)

        input("Approve the device in your browser, then press Enter: ")

        config.device_code = device.device_code
        refresh_token = asyncio.run(_finish_login(config))
    except (ZohoSheetError, httpx.HTTPError) as e:
        print(f"\nError: {e}")
        print("Run 'zoho-sheet init' for setup instructions")
        return 1

    print("\nAuthorized! Add this line to .env:\n")
    print(f"ZOHO_REFRESH_TOKEN={refresh_token}")
    return 0


async def _workbooks(count: int) -> int:
    from zoho_sheet.sheets import SheetClient

    async with SheetClient.from_env() as client:
        workbooks = await client.list_workbooks(count=count)

    for wb in workbooks:
        print(f"{wb.name} ({wb.id}) - Created by {wb.created_by}")
    print(f"\n{len(workbooks)} workbook(s)")
    return 0


async def _sheets(workbook_id: str) -> int:
    from zoho_sheet.sheets import SheetClient

    async with SheetClient.from_env() as client:
        sheets = await client.list_sheets(workbook_id)

    for sheet in sheets:
        print(f"{sheet.name} ({sheet.id})")
    return 0


async def _tables(resource_id: str) -> int:
    from zoho_sheet.sheets import SheetClient

    async with SheetClient.from_env() as client:
        tables = await client.list_tables(resource_id)

    if not tables:
        print("No tables found")
    for table in tables:
        print(
            f"{table.table_name} (#{table.table_id}) "
            f"R{table.start_row}C{table.start_column}:R{table.end_row}C{table.end_column}"
        )
    return 0


def run_command(coro) -> int:
    """Run an async command, turning SDK and transport errors into exit code 1."""
    import httpx

    from zoho_sheet.exceptions import ZohoSheetError

    try:
        return asyncio.run(coro)
    except (ZohoSheetError, httpx.HTTPError) as e:
        print(f"Error: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="zoho-sheet",
        description="Zoho Sheet API credential setup and inspection",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    subparsers.add_parser("init", help="Show setup instructions")
    subparsers.add_parser("status", help="Show credential status")

    login_parser = subparsers.add_parser("login", help="Device-code OAuth login")
    login_parser.add_argument(
        "--no-browser",
        action="store_true",
        help="Don't open browser automatically",
    )

    workbooks_parser = subparsers.add_parser("workbooks", help="List workbooks")
    workbooks_parser.add_argument(
        "--count", type=int, default=50, help="Maximum workbooks (default: 50)"
    )

    sheets_parser = subparsers.add_parser("sheets", help="List worksheets of a workbook")
    sheets_parser.add_argument("workbook_id", help="Workbook resource ID")

    tables_parser = subparsers.add_parser("tables", help="List tables of a workbook")
    tables_parser.add_argument("resource_id", help="Workbook resource ID")

    args = parser.parse_args(argv if argv is not None else sys.argv[1:])

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "init":
        return cmd_init()

    if args.command == "status":
        return cmd_status()

    if args.command == "login":
        return login(args.no_browser)

    if args.command == "workbooks":
        return run_command(_workbooks(args.count))

    if args.command == "sheets":
        return run_command(_sheets(args.workbook_id))

    if args.command == "tables":
        return run_command(_tables(args.resource_id))

    return 0


if __name__ == "__main__":
    sys.exit(main())
