from http import HTTPStatus

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from models.clients import APIResponseModel


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=APIResponseModel(success=False, message=message).model_dump(exclude_none=True),
        headers=headers,
    )


class WireguardManagerAPI(FastAPI):

    def __init__(self, **kwargs):
        """
        Instantiate the FastAPI app, passing in any kwargs to the
        FastAPI constructor.
        """
        if "dependencies" in kwargs:
            dependencies = kwargs.pop("dependencies")
            dependencies.append(Depends(self._set_user_state))
        else:
            dependencies = [Depends(self._set_user_state)]

        super().__init__(
            openapi_url="/spec",
            title="WireGuard API",
            description="API for managing WireGuard VPN users",
            dependencies=dependencies,
            **kwargs
        )
        self.add_exception_handler(StarletteHTTPException, self._http_exception_handler)
        self.add_exception_handler(RequestValidationError, self._validation_exception_handler)

    def _set_user_state(self, request: Request):
        """Set the user state to unauthenticated if not already set."""
        if not hasattr(request.state, "user"):
            request.state.user = "unauthenticated"

    @staticmethod
    async def _http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        """Errors use the same envelope as successful responses."""
        return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

    @staticmethod
    async def _validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return error_response(HTTPStatus.BAD_REQUEST, "Invalid request payload")
