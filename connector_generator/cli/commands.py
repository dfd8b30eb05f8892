"""Command line interface: generate, probe and discover."""
import logging

import click
from colorama import Fore, Style, init

from connector_generator.config import GeneratorSettings
from connector_generator.introspection.connectivity_prober import ConnectivityProber
from connector_generator.introspection.endpoint_discoverer import EndpointDiscoverer
from connector_generator.introspection.http_session import create_session
from connector_generator.orchestrator import ConnectorPipeline
from connector_generator.schema.models import ApiConfiguration, AuthenticationType

# Initialize colorama
init(autoreset=True)

AUTH_CHOICES = [t.value for t in AuthenticationType]


def print_banner():
    """Print application banner."""
    click.echo(f"{Fore.CYAN}{'=' * 44}")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}API Connector Generator{Fore.CYAN}              ║")
    click.echo(f"{Fore.CYAN}║   {Fore.WHITE}Discover, infer, generate{Fore.CYAN}            ║")
    click.echo(f"{Fore.CYAN}{'=' * 44}{Style.RESET_ALL}")
    click.echo()


def auth_options(func):
    """Shared authentication options."""
    options = [
        click.option("--auth", "auth_type", type=click.Choice(AUTH_CHOICES), default="none",
                     help="Authentication used while probing"),
        click.option("--api-key", help="API key value"),
        click.option("--api-key-header", default="X-API-Key", show_default=True),
        click.option("--token", "bearer_token", help="Bearer token"),
        click.option("--username", help="Basic auth username"),
        click.option("--password", help="Basic auth password"),
        click.option("--client-id", help="OAuth2 client id"),
        click.option("--client-secret", help="OAuth2 client secret"),
        click.option("--token-endpoint", help="OAuth2 token endpoint"),
        click.option("--scope", help="OAuth2 scope"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def build_configuration(base_url: str, **kwargs) -> ApiConfiguration:
    """Build an ApiConfiguration from CLI values (None means "not given")."""
    values = {k: v for k, v in kwargs.items() if v is not None}
    values["auth_type"] = AuthenticationType(values.get("auth_type", "none"))
    return ApiConfiguration(base_url=base_url, **values)


def prompt_missing(config: ApiConfiguration) -> ApiConfiguration:
    """Ask for the values an interactive run still lacks."""
    if not config.base_url:
        config.base_url = click.prompt("API Base URL")
    config.api_name = click.prompt("API name", default=config.api_name or "", show_default=bool(config.api_name))

    if config.auth_type == AuthenticationType.NONE:
        choice = click.prompt("Authentication", type=click.Choice(AUTH_CHOICES), default="none")
        config.auth_type = AuthenticationType(choice)

    if config.auth_type == AuthenticationType.API_KEY and not config.api_key:
        config.api_key = click.prompt("API key", hide_input=True)
    elif config.auth_type == AuthenticationType.BEARER_TOKEN and not config.bearer_token:
        config.bearer_token = click.prompt("Bearer token", hide_input=True)
    elif config.auth_type == AuthenticationType.BASIC_AUTH:
        config.username = config.username or click.prompt("Username")
        config.password = config.password or click.prompt("Password", hide_input=True)
    elif config.auth_type == AuthenticationType.OAUTH2:
        config.client_id = config.client_id or click.prompt("Client id")
        config.client_secret = config.client_secret or click.prompt("Client secret", hide_input=True)
        config.token_endpoint = config.token_endpoint or click.prompt("Token endpoint")

    config.generate_models = click.confirm("Generate models?", default=config.generate_models)
    config.generate_contract = click.confirm("Generate contract?", default=config.generate_contract)
    config.generate_client = click.confirm("Generate client?", default=config.generate_client)
    config.generate_registration = click.confirm(
        "Generate registration?", default=config.generate_registration
    )
    return config


@click.group()
@click.version_option(version="1.0.0")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx, verbose):
    """API Connector Generator - build typed clients for unknown REST APIs."""
    settings = GeneratorSettings.from_env()
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.WARNING)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    ctx.obj = settings


@cli.command()
@click.argument("base_url", required=False)
@click.option("--name", "api_name", help="API name (defaults to the host name)")
@click.option("--package", "package_name", help="Generated package name")
@click.option("--output", "output_path", type=click.Path(file_okay=False), help="Output directory")
@click.option("--no-models", is_flag=True, help="Skip model generation")
@click.option("--no-contract", is_flag=True, help="Skip contract generation")
@click.option("--no-client", is_flag=True, help="Skip client generation")
@click.option("--no-registration", is_flag=True, help="Skip registration generation")
@click.option("--mutable-models", is_flag=True, help="Do not freeze generated models")
@click.option("--report", "write_report", is_flag=True, help="Also write discovery.json")
@click.option("--interactive", is_flag=True, help="Prompt for missing values")
@auth_options
@click.pass_obj
def generate(settings, base_url, no_models, no_contract, no_client, no_registration,
             mutable_models, write_report, interactive, **kwargs):
    """Discover an API and generate a client connector."""
    print_banner()

    config = build_configuration(base_url or "", **kwargs)
    config.generate_models = not no_models
    config.generate_contract = not no_contract
    config.generate_client = not no_client
    config.generate_registration = not no_registration
    config.use_frozen_models = not mutable_models

    if interactive:
        prompt_missing(config)
    elif not config.base_url:
        raise click.UsageError("BASE_URL is required unless --interactive is given")

    click.echo(f"{Fore.CYAN}Analyzing {config.base_url}...")
    try:
        report = ConnectorPipeline(settings).run(config, write_report=write_report)
    except (ValueError, RuntimeError) as e:
        raise click.ClickException(str(e))

    if report.connectivity and not report.connectivity.is_success:
        click.echo(f"{Fore.YELLOW}⚠️  API not reachable: {report.connectivity.error_message}")

    click.echo(f"{Fore.GREEN}✅ Connector generated!")
    click.echo(f"{Fore.GREEN}   Endpoints: {report.endpoints_found}")
    click.echo(f"{Fore.GREEN}   Schemas: {report.schemas_inferred}")
    click.echo(f"{Fore.GREEN}   Files: {report.files_written}")
    click.echo(f"{Fore.GREEN}   Output: {report.output_path}")


@cli.command()
@click.argument("base_url")
@click.option("--check-auth", is_flag=True, help="Also check that credentials are accepted")
@auth_options
@click.pass_obj
def probe(settings, base_url, check_auth, **kwargs):
    """Check that an API is reachable."""
    config = build_configuration(base_url, **kwargs)
    session = create_session(config, settings)
    try:
        prober = ConnectivityProber(session, settings.timeout)
        result = prober.test_connectivity(base_url)
        if result.is_success:
            click.echo(f"{Fore.GREEN}✅ Reachable ({result.status_code})")
        else:
            click.echo(f"{Fore.RED}❌ Unreachable: {result.error_message}")

        if check_auth:
            auth = prober.test_authentication(base_url)
            if auth.is_success:
                click.echo(f"{Fore.GREEN}✅ Credentials accepted ({auth.status_code})")
            else:
                detail = auth.error_message or f"status {auth.status_code}"
                click.echo(f"{Fore.RED}❌ Credentials rejected: {detail}")
                result = auth
    finally:
        session.close()

    if not result.is_success:
        click.get_current_context().exit(1)


@cli.command()
@click.argument("base_url")
@auth_options
@click.pass_obj
def discover(settings, base_url, **kwargs):
    """List the endpoints discovered for an API."""
    config = build_configuration(base_url, **kwargs)
    session = create_session(config, settings)
    try:
        endpoints = EndpointDiscoverer(session, settings.timeout).discover(config)
    finally:
        session.close()

    if not endpoints:
        click.echo(f"{Fore.YELLOW}No endpoints found")
        return

    click.echo(f"{Fore.CYAN}Found {len(endpoints)} endpoints:")
    for endpoint in endpoints:
        description = f" - {endpoint.description}" if endpoint.description else ""
        click.echo(f"  {Fore.GREEN}{endpoint.method:<7}{Style.RESET_ALL}{endpoint.path}{description}")
