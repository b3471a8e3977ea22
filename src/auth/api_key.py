import logging
import secrets
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import APIKeyHeader

from auth.unauthenticated import WireguardManagerAPI

log = logging.getLogger(__name__)

API_KEY_HEADER = "key"
UNAUTHENTICATED_PATHS = {"/", "/health"}


class ApiKeyAuthWireguardManagerAPI(WireguardManagerAPI):
    """
    Static API token authentication for Wireguard API.  Every request must carry the token in the `key` header.
    """

    def __init__(self, api_token: str):
        if not api_token:
            raise ValueError("An API token is required when using API key authentication.")
        api_key_scheme = APIKeyHeader(name=API_KEY_HEADER, auto_error=False)

        async def verify_api_key(request: Request, token: Optional[str] = Depends(api_key_scheme)):
            if request.url.path in UNAUTHENTICATED_PATHS:
                return
            if not token:
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing API token")
            if not secrets.compare_digest(token.encode("utf8"), api_token.encode("utf8")):
                log.warning("Rejected request to %s with an invalid API token", request.url.path)
                raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid API token")
            # Pass in the user information in the request state for use in endpoints
            request.state.user = "api-key"

        super().__init__(dependencies=[Depends(verify_api_key)])
