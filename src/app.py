import logging
import signal
import sys
from http import HTTPStatus
from typing import Optional

import coloredlogs
import typer
import uvicorn
from fastapi import Response

from auth import ApiKeyAuthWireguardManagerAPI, AuthProvider, WireguardManagerAPI
from interfaces.users import user_router
from models.exceptions import ConfigurationException
from registry import ClientRegistry
from registry.params import load_server_parameters
from server_manager import KeyBackend, key_generator_factory
from server_manager.wireguard import WgQuickDaemonSync
from settings import Settings

ROUTERS = [user_router]

log = logging.getLogger(__name__)
coloredlogs.install()

typer_app = typer.Typer()


def setup_app_routes(app: WireguardManagerAPI) -> None:
    for router in ROUTERS:
        app.include_router(router)

    # Add any root level routes here
    app.add_api_route("/", health, methods=["GET"], tags=["wg-api"])
    app.add_api_route("/health", health, methods=["GET"], tags=["wg-api"])


def health() -> Response:
    return Response(status_code=HTTPStatus.OK)


def exit_application():
    log.info("Shutting down the application")
    sys.exit(0)


def signal_handler(signal_num, _frame):
    log.info("Got signal " + str(signal_num) + ", exiting now")
    exit_application()


@typer_app.command()
def main(
    api_host: Optional[str] = typer.Option(None, "--api-host", help="Uvicorn hostname. Defaults to API_HOST."),
    api_port: Optional[int] = typer.Option(None, "--api-port", help="Uvicorn port. Defaults to API_PORT."),
    config_file: Optional[str] = typer.Option(
        None, "--config-file", help="The wireguard server config file. Defaults to WG_CONFIG_FILE."
    ),
    params_file: Optional[str] = typer.Option(
        None, "--params-file", help="The wireguard params file. Defaults to WG_PARAMS_FILE."
    ),
    clients_dir: Optional[str] = typer.Option(
        None, "--clients-dir", help="The directory of client config files. Defaults to WIREGUARD_CLIENTS."
    ),
    command_timeout: Optional[float] = typer.Option(
        None, "--command-timeout", help="Seconds before a wg / wg-quick command is abandoned. Defaults to COMMAND_TIMEOUT."
    ),
    auth_provider: Optional[AuthProvider] = typer.Option(
        None,
        "--auth",
        help="The authentication provider to use.  Defaults to api-key if API_TOKEN is set, none otherwise.",
    ),
    key_backend: KeyBackend = typer.Option(
        KeyBackend.WG, "--key-backend", help="Generate client keys with the wg tool, or natively in-process."
    ),
    ssl_keyfile: str = typer.Option(None, "--ssl-keyfile", help="Path to your private key file for SSL"),
    ssl_certfile: str = typer.Option(None, "--ssl-certfile", help="Path to your SSL certificate file"),
):
    """
    Serve the WireGuard client API.
    """
    signal.signal(signal.SIGTERM, signal_handler)
    signal.signal(signal.SIGHUP, signal_handler)
    signal.signal(signal.SIGABRT, signal_handler)
    signal.signal(signal.SIGQUIT, signal_handler)
    signal.signal(signal.SIGINT, signal_handler)

    settings = Settings()
    api_host = api_host or settings.API_HOST
    api_port = api_port or settings.API_PORT
    config_file = config_file or settings.WG_CONFIG_FILE
    params_file = params_file or settings.WG_PARAMS_FILE
    clients_dir = clients_dir or settings.WIREGUARD_CLIENTS
    command_timeout = command_timeout or settings.COMMAND_TIMEOUT

    logging.basicConfig(level=settings.LOG_LEVEL, stream=sys.stdout)
    coloredlogs.install(level=settings.LOG_LEVEL)

    log.info("Starting WireGuard API server...")
    log.info("WireGuard config file: %s", config_file)
    log.info("WireGuard params file: %s", params_file)
    log.info("WireGuard clients directory: %s", clients_dir)

    try:
        server_params = load_server_parameters(params_file)
    except ConfigurationException as ex:
        log.error("Failed to load WireGuard parameters: %s", ex)
        sys.exit(1)

    if auth_provider is None:
        auth_provider = AuthProvider.API_KEY if settings.API_TOKEN else AuthProvider.NONE

    match auth_provider:
        case AuthProvider.API_KEY:
            print("Using API key authentication.")
            if not settings.API_TOKEN:
                print("ERROR: API_TOKEN is required when using API key authentication.")
                sys.exit(1)
            app = ApiKeyAuthWireguardManagerAPI(api_token=settings.API_TOKEN)
        case AuthProvider.NONE:
            print("No authentication configured.")
            app = WireguardManagerAPI()
        case _:
            raise ValueError(f"Unsupported auth provider: {auth_provider}")
    setup_app_routes(app)

    client_registry = ClientRegistry(
        server_params=server_params,
        config_file=config_file,
        clients_dir=clients_dir,
        key_generator=key_generator_factory(key_backend, timeout=command_timeout),
        daemon_sync=WgQuickDaemonSync(timeout=command_timeout),
    )

    for _router in ROUTERS:
        _router.client_registry = client_registry

    try:
        log.info("WireGuard API server running on port %s", api_port)
        uvicorn.run(
            app,
            host=api_host,
            port=api_port,
            log_config=None,
            ssl_keyfile=ssl_keyfile,  # Path to your private key file
            ssl_certfile=ssl_certfile,  # Path to your certificate file
        )
    except SystemExit as ex:
        msg = "Service FAILED DURING STARTUP"
        log.exception(f"{msg}: {ex}")
        raise RuntimeError(msg) from ex
    finally:
        exit_application()


if __name__ == "__main__":
    typer_app()
