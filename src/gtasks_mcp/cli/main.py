"""Command-line interface for gtasks-mcp."""

import asyncio
import sys
from pathlib import Path

import click

from gtasks_mcp.__version__ import __version__


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Google Tasks MCP Server - Connect MCP clients to Google Tasks.

    Tools: search, list, create, update, delete, clear.
    Resources: one gtasks:///<taskId> resource per task.
    """
    pass


@main.command()
@click.option("--client-id", envvar="GOOGLE_CLIENT_ID", help="Google OAuth client ID")
@click.option("--client-secret", envvar="GOOGLE_CLIENT_SECRET", help="Google OAuth client secret")
@click.option(
    "--client-secrets-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Client secrets JSON downloaded from Google Cloud (e.g. gcp-oauth.keys.json)",
)
def setup(
    client_id: str | None, client_secret: str | None, client_secrets_file: Path | None
) -> None:
    """Run the Google OAuth flow once and store the resulting token.

    This will:
    1. Open browser for OAuth2 consent flow
    2. Store the refresh token at ./.gtasks-mcp/tokens.json
    """
    from gtasks_mcp.auth import OAuthManager
    from gtasks_mcp.auth.oauth_manager import load_client_secrets

    manager = OAuthManager()

    if manager.has_valid_tokens():
        click.echo("✓ Already authenticated!")
        click.echo(f"Token stored at: {manager.token_path}")
        click.echo("")

        if not click.confirm("Re-authenticate?"):
            return

    if client_secrets_file is not None:
        try:
            client_id, client_secret = load_client_secrets(client_secrets_file)
        except ValueError as e:
            click.echo(f"❌ Error: {e}")
            sys.exit(1)

    if not client_id or not client_secret:
        click.echo("❌ Error: OAuth client credentials required")
        click.echo("")
        click.echo("Set environment variables:")
        click.echo("  export GOOGLE_CLIENT_ID='your-client-id'")
        click.echo("  export GOOGLE_CLIENT_SECRET='your-client-secret'")
        click.echo("")
        click.echo("Or pass as options:")
        click.echo("  gtasks-mcp setup --client-id=... --client-secret=...")
        click.echo("  gtasks-mcp setup --client-secrets-file=gcp-oauth.keys.json")
        sys.exit(1)

    click.echo("Starting OAuth authentication flow...")
    click.echo("Browser will open for Google consent...")
    click.echo("")

    try:
        asyncio.run(manager.authenticate(client_id=client_id, client_secret=client_secret))
        click.echo("✓ Authentication successful!")
        click.echo(f"Token stored at: {manager.token_path}")
        click.echo("")
        click.echo("Credentials saved. You can now run 'gtasks-mcp mcp'.")
    except Exception as e:
        click.echo(f"❌ Authentication failed: {e}")
        sys.exit(1)


@main.command()
def mcp() -> None:
    """Start the stdio MCP server.

    Credentials are resolved on the first request, from GOOGLE_CLIENT_ID,
    GOOGLE_CLIENT_SECRET and GOOGLE_REFRESH_TOKEN or from the token file
    written by 'gtasks-mcp setup'. Runs until the client disconnects.
    """
    from gtasks_mcp.server import main as server_main

    try:
        click.echo("Starting Google Tasks MCP server...", err=True)
        server_main()
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)
    except Exception as e:
        click.echo(f"❌ Server error: {e}", err=True)
        sys.exit(1)


@main.command()
def logout() -> None:
    """Delete the stored token so the next run must authenticate again.

    Credentials supplied through environment variables are not affected.
    """
    from gtasks_mcp.auth import OAuthManager

    manager = OAuthManager()

    if manager.logout():
        click.echo(f"✓ Removed token from {manager.token_path}")
    else:
        click.echo("No stored token to remove.")


@main.command()
def doctor() -> None:
    """Check installation and authentication status."""
    from gtasks_mcp.auth import EnvironmentCredentials, OAuthManager, TokenStatus

    click.echo("Google Tasks MCP Status:")
    click.echo("")

    click.echo("Dependencies:")
    try:
        import google.auth  # noqa: F401
        import google_auth_oauthlib  # noqa: F401
        import mcp  # noqa: F401

        click.echo("  ✓ google-auth installed")
        click.echo("  ✓ google-auth-oauthlib installed")
        click.echo("  ✓ mcp installed")
    except ImportError as e:
        click.echo(f"  ❌ Missing dependency: {e}")
        sys.exit(1)

    click.echo("")
    click.echo("Authentication:")

    if EnvironmentCredentials.from_env().is_complete():
        click.echo("  ✓ Using GOOGLE_CLIENT_ID / GOOGLE_CLIENT_SECRET / GOOGLE_REFRESH_TOKEN")
        click.echo("")
        click.echo("✓ Ready to use!")
        return

    manager = OAuthManager()
    status, stored = manager.get_status()
    click.echo(f"  Token file: {manager.token_path}")

    if status == TokenStatus.MISSING:
        click.echo("  ❌ Not authenticated")
        click.echo("")
        click.echo("Run 'gtasks-mcp setup' to authenticate.")
        sys.exit(1)
    elif status == TokenStatus.INVALID:
        click.echo("  ❌ Token file corrupted")
        click.echo("")
        click.echo("Run 'gtasks-mcp setup' to re-authenticate.")
        sys.exit(1)
    elif status == TokenStatus.EXPIRED:
        click.echo("  ⚠️  Token expired (will refresh automatically on use)")
    elif status == TokenStatus.VALID:
        click.echo("  ✓ Authenticated")
        if stored:
            click.echo(
                f"  Token expires: {stored.token.expires_at.strftime('%Y-%m-%d %H:%M:%S UTC')}"
            )

    click.echo("")
    click.echo("✓ Ready to use!")


if __name__ == "__main__":
    main()
