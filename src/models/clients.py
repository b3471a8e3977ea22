from typing import Any, Optional

from pydantic import BaseModel, Field


# -----------------------------------------------------------
# API Request Models
class AddClientRequestModel(BaseModel):
    name: str = Field(
        ...,
        description="Client name (alphanumeric, underscore, dash only; max 15 chars)",
        examples=["client1"],
    )
    ipv4: Optional[str] = Field(
        None,
        description="The IPv4 address of the client.  If not provided, the next available IP on the VPN will be used.",
        examples=["10.8.0.2"],
    )
    ipv6: Optional[str] = Field(
        None,
        description="The IPv6 address of the client.  If not provided and the server has IPv6 enabled, the next "
        "available IP on the VPN will be used.",
        examples=["fd42:42:42::2"],
    )


class DeleteClientRequestModel(BaseModel):
    name: str = Field(..., description="Client name to delete", examples=["client1"])


# -----------------------------------------------------------
# Response Models
class ClientRecordModel(BaseModel):
    name: str = Field(..., description="Client name")
    ipv4: Optional[str] = Field(None, description="IPv4 address assigned to the client")
    ipv6: Optional[str] = Field(None, description="IPv6 address assigned to the client")
    config: Optional[str] = Field(None, description="WireGuard configuration file content for the client")


class DeleteAllResultModel(BaseModel):
    deleted_count: int = Field(..., description="The number of clients that were deleted.")
    clients: list[ClientRecordModel] = Field(..., description="The clients that were deleted.")
    files_deleted: list[str] = Field(..., description="The client bundle files that were removed.")


class APIResponseModel(BaseModel):
    success: bool = Field(..., description="Indicates if the operation was successful")
    message: Optional[str] = Field(None, description="Human-readable message about the operation")
    data: Optional[Any] = Field(None, description="Optional data returned from the operation")
