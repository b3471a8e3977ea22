import logging
from http import HTTPStatus

from fastapi import HTTPException, Request

from interfaces.custom_router import WgAPIRouter
from models.clients import AddClientRequestModel, APIResponseModel, DeleteClientRequestModel
from models.exceptions import ErrorKind, RegistryException

log = logging.getLogger(__name__)
user_router = WgAPIRouter()

ERROR_STATUS = {
    ErrorKind.VALIDATION: HTTPStatus.BAD_REQUEST,
    ErrorKind.CONFLICT: HTTPStatus.CONFLICT,
    ErrorKind.NOT_FOUND: HTTPStatus.NOT_FOUND,
    ErrorKind.POOL_EXHAUSTED: HTTPStatus.INTERNAL_SERVER_ERROR,
    ErrorKind.IO: HTTPStatus.INTERNAL_SERVER_ERROR,
    ErrorKind.EXTERNAL_TOOL: HTTPStatus.INTERNAL_SERVER_ERROR,
    ErrorKind.CONFIGURATION: HTTPStatus.INTERNAL_SERVER_ERROR,
}


def to_http_exception(ex: RegistryException) -> HTTPException:
    status_code = ERROR_STATUS.get(ex.kind, HTTPStatus.INTERNAL_SERVER_ERROR)
    if status_code == HTTPStatus.INTERNAL_SERVER_ERROR:
        log.error("Request failed with %s: %s", ex.kind.value, ex)
    return HTTPException(status_code=status_code, detail=str(ex))


@user_router.get(
    "/api/users", tags=["users"], response_model=APIResponseModel, response_model_exclude_none=True
)
def list_users(request: Request) -> APIResponseModel:
    """Returns a list of all configured WireGuard clients."""
    log.info("Received request from user '%s' at IP %s", request.state.user, request.client.host)
    client_registry = user_router.client_registry
    try:
        clients = client_registry.list_clients()
    except RegistryException as ex:
        raise to_http_exception(ex)
    return APIResponseModel(success=True, data=clients)


@user_router.post(
    "/api/users/add", tags=["users"], response_model=APIResponseModel, response_model_exclude_none=True
)
def add_user(request: Request, client: AddClientRequestModel) -> APIResponseModel:
    """Creates a new WireGuard client configuration.  Addresses that are not provided are auto-assigned."""
    client_registry = user_router.client_registry
    try:
        record = client_registry.add_client(client.name, ipv4=client.ipv4, ipv6=client.ipv6)
    except RegistryException as ex:
        raise to_http_exception(ex)
    log.info("User '%s' added client %s", request.state.user, client.name)
    return APIResponseModel(success=True, message="Client added successfully", data=record)


@user_router.post(
    "/api/users/delete", tags=["users"], response_model=APIResponseModel, response_model_exclude_none=True
)
def delete_user(request: Request, client: DeleteClientRequestModel) -> APIResponseModel:
    """Removes a WireGuard client configuration."""
    client_registry = user_router.client_registry
    try:
        client_registry.delete_client(client.name)
    except RegistryException as ex:
        raise to_http_exception(ex)
    log.info("User '%s' deleted client %s", request.state.user, client.name)
    return APIResponseModel(success=True, message="Client deleted successfully")


@user_router.post(
    "/api/users/delete-all", tags=["users"], response_model=APIResponseModel, response_model_exclude_none=True
)
def delete_all_users(request: Request) -> APIResponseModel:
    """Removes all WireGuard client configurations."""
    client_registry = user_router.client_registry
    try:
        result = client_registry.delete_all_clients()
    except RegistryException as ex:
        raise to_http_exception(ex)
    log.info("User '%s' deleted all %d clients", request.state.user, result.deleted_count)
    return APIResponseModel(success=True, message="Successfully deleted all clients", data=result)
