from __future__ import annotations
import typing
from typing import Optional

from fastapi import APIRouter

if typing.TYPE_CHECKING:
    from registry import ClientRegistry


class WgAPIRouter(APIRouter):
    """
    An extension to the base FastAPI router, that carries the ClientRegistry the endpoints act on.  It is expected
    that app startup assigns client_registry before the first request is served.
    """

    def __init__(self):
        super().__init__()
        self._client_registry: Optional[ClientRegistry] = None

    @property
    def client_registry(self) -> ClientRegistry:
        if self._client_registry is None:
            raise RuntimeError("client_registry has not been configured on the router, set it at startup")
        return self._client_registry

    @client_registry.setter
    def client_registry(self, value: Optional[ClientRegistry]) -> None:
        self._client_registry = value
