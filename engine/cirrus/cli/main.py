# Cirrus CLI — main entry point
"""cirrus CLI — key-store application credentials and Azure SQL servers from the terminal."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import click
from azure.core.exceptions import HttpResponseError

from ..config import settings
from ..errors import CirrusError


def _tenant(tenant: Optional[str]) -> str:
    tenant = tenant or settings.tenant_id
    if not tenant:
        raise click.UsageError("No tenant given. Pass --tenant or set CIRRUS_TENANT_ID.")
    return tenant


def _credential_provider(tenant_id: str):
    from ..auth import ClientSecretTokenAcquirer, KeyStoreApplicationCredentialProvider, create_key_store

    return KeyStoreApplicationCredentialProvider(
        tenant_id,
        key_store=create_key_store(),
        token_acquirer=ClientSecretTokenAcquirer(tenant_id, authority=settings.authority_host),
    )


def _sql_adapter():
    """Adapter authenticated with the configured client, or DefaultAzureCredential."""
    from ..auth import ApplicationTokenCredential
    from ..providers.azure.sql_server import build_sql_server_adapter

    if not settings.subscription_id:
        raise click.UsageError("No subscription given. Set CIRRUS_SUBSCRIPTION_ID.")
    if settings.client_id:
        credential = ApplicationTokenCredential(_credential_provider(_tenant(None)), settings.client_id)
    else:
        from azure.identity import DefaultAzureCredential

        credential = DefaultAzureCredential()
    return build_sql_server_adapter(credential, settings.subscription_id)


def _fail(e: Exception) -> None:
    from ..common import die

    if isinstance(e, HttpResponseError):
        die(f"Remote operation failed: {e.message}")
    die(str(e))


@click.group()
@click.version_option(version=settings.app_version, prog_name="cirrus")
@click.option("--log-file/--no-log-file", default=False, help="Write a debug log under local/logs")
def cli(log_file: bool):
    """Cirrus — key-store application credentials and Azure SQL servers."""
    logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s %(message)s")
    if log_file:
        from ..common import init_logging, print_info

        print_info(f"Logging to {init_logging()}")


# ---------------------------------------------------------------------------
# Auth commands
# ---------------------------------------------------------------------------


@cli.group()
def auth():
    """Acquire tokens with secrets from the key store."""
    pass


@auth.command("token")
@click.option("--client-id", default=None, help="Application (client) ID; defaults to CIRRUS_CLIENT_ID")
@click.option("--audience", required=True, help="Resource the token is for, e.g. https://management.azure.com")
@click.option("--tenant", default=None, help="Tenant ID; defaults to CIRRUS_TENANT_ID")
def auth_token(client_id: Optional[str], audience: str, tenant: Optional[str]):
    """Acquire an access token for an application."""
    from ..common import print_detail, print_success

    client_id = client_id or settings.client_id
    if not client_id:
        raise click.UsageError("No client id given. Pass --client-id or set CIRRUS_CLIENT_ID.")

    provider = _credential_provider(_tenant(tenant))
    try:
        token = asyncio.run(provider.authenticate(client_id, audience))
    except CirrusError as e:
        _fail(e)
        return

    expires = datetime.fromtimestamp(token.expires_on, tz=timezone.utc)
    print_success(f"Token acquired for {client_id}")
    print_detail(f"Expires: {expires.isoformat()}")
    print_detail(f"Token:   {token.token[:16]}…")


# ---------------------------------------------------------------------------
# Key store commands
# ---------------------------------------------------------------------------


@cli.group()
def keys():
    """Manage service principal secrets in the configured key store."""
    pass


def _writable_store():
    from ..auth import create_key_store
    from ..common import die, print_warning

    store = create_key_store()
    if not hasattr(store, "add_key"):
        die(f"Key store '{settings.key_store}' is read-only")
    if settings.key_store == "memory":
        print_warning("The memory key store does not outlive this command")
    return store


@keys.command("set")
@click.option("--client-id", required=True, help="Application (client) ID")
@click.option("--tenant", default=None, help="Tenant ID; defaults to CIRRUS_TENANT_ID")
def keys_set(client_id: str, tenant: Optional[str]):
    """Store the secret for an application (prompted, never echoed)."""
    from ..common import die, print_success, prompt_password

    tenant_id = _tenant(tenant)
    store = _writable_store()
    secret = prompt_password(f"Secret for {client_id}")
    if not secret:
        die("Empty secret — nothing stored")
    store.add_key(client_id, tenant_id, secret)
    print_success(f"Secret stored for {client_id} in tenant {tenant_id}")


@keys.command("delete")
@click.option("--client-id", required=True, help="Application (client) ID")
@click.option("--tenant", default=None, help="Tenant ID; defaults to CIRRUS_TENANT_ID")
def keys_delete(client_id: str, tenant: Optional[str]):
    """Delete the secret for an application."""
    from ..common import print_success, print_warning

    tenant_id = _tenant(tenant)
    if _writable_store().delete_key(client_id, tenant_id):
        print_success(f"Secret deleted for {client_id}")
    else:
        print_warning(f"No secret stored for {client_id}")


# ---------------------------------------------------------------------------
# SQL server commands
# ---------------------------------------------------------------------------


@cli.group("sql-server")
def sql_server():
    """Manage Azure SQL logical servers."""
    pass


def _print_servers(servers) -> None:
    from rich.table import Table

    from ..common import console

    if not servers:
        console.print("[dim]No servers found.[/dim]")
        return
    table = Table(title="SQL Servers")
    table.add_column("Resource group", style="cyan")
    table.add_column("Name")
    table.add_column("Location")
    table.add_column("Version")
    table.add_column("Admin")
    for s in servers:
        table.add_row(
            s.resource_group_name, s.server_name, s.location,
            s.server_version or "", s.sql_admin_user_name or "",
        )
    console.print(table)


@sql_server.command("get")
@click.argument("resource_group")
@click.argument("server_name")
@click.option("--retries", type=click.IntRange(min=1), default=1, show_default=True,
              help="Attempts for transient failures")
def sql_server_get(resource_group: str, server_name: str, retries: int):
    """Show one server."""
    from ..services.resilience import retry

    adapter = _sql_adapter()
    try:
        server = retry(max_attempts=retries)(adapter.get_server)(resource_group, server_name)
    except (CirrusError, HttpResponseError) as e:
        _fail(e)
        return
    _print_servers([server])


@sql_server.command("list")
@click.argument("resource_group")
@click.option("--retries", type=click.IntRange(min=1), default=1, show_default=True,
              help="Attempts for transient failures")
def sql_server_list(resource_group: str, retries: int):
    """List servers in a resource group."""
    from ..services.resilience import retry

    adapter = _sql_adapter()
    try:
        servers = retry(max_attempts=retries)(adapter.list_servers)(resource_group)
    except (CirrusError, HttpResponseError) as e:
        _fail(e)
        return
    _print_servers(servers)


@sql_server.command("upsert")
@click.argument("resource_group")
@click.argument("server_name")
@click.option("--location", required=True, help="Azure region, e.g. westeurope")
@click.option("--version", "server_version", default="12.0", show_default=True, help="Server version")
@click.option("--admin-user", required=True, help="SQL administrator login")
@click.option("--admin-password", prompt=True, hide_input=True, confirmation_prompt=True,
              help="SQL administrator password (prompted if omitted)")
def sql_server_upsert(
    resource_group: str,
    server_name: str,
    location: str,
    server_version: str,
    admin_user: str,
    admin_password: str,
):
    """Create a server, or update it if it exists."""
    from pydantic import SecretStr

    from ..common import print_success
    from ..providers.azure.sql_server import SqlServerModel

    model = SqlServerModel(
        resource_group_name=resource_group,
        server_name=server_name,
        location=location,
        server_version=server_version,
        sql_admin_user_name=admin_user,
        sql_admin_password=SecretStr(admin_password),
    )
    try:
        server = _sql_adapter().upsert_server(model)
    except (CirrusError, HttpResponseError) as e:
        _fail(e)
        return
    print_success(f"Server '{server.server_name}' ready ({server.fully_qualified_domain_name or server.location})")


@sql_server.command("remove")
@click.argument("resource_group")
@click.argument("server_name")
@click.option("--yes", is_flag=True, help="Skip confirmation")
def sql_server_remove(resource_group: str, server_name: str, yes: bool):
    """Delete a server (returns once the delete is accepted)."""
    from ..common import print_success

    if not yes:
        click.confirm(f"Delete SQL server {resource_group}/{server_name}?", abort=True)
    try:
        _sql_adapter().remove_server(resource_group, server_name)
    except (CirrusError, HttpResponseError) as e:
        _fail(e)
        return
    print_success(f"Delete requested for {server_name}")


if __name__ == "__main__":
    cli()
