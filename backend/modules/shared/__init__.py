"""Shared DTOs and type definitions used across routes.

Only lightweight, common data models should live here. Do not place
SDK-specific logic or session state in this package.
"""

from .dto import (
    PeerInfo,
    MessageInfo,
    PermissionInfo,
    SessionStatus,
    SetupRequest,
    SetupResponse,
    ChangeRoleRequest,
    MuteRequest,
    UIEvent,
)

__all__ = [
    "PeerInfo",
    "MessageInfo",
    "PermissionInfo",
    "SessionStatus",
    "SetupRequest",
    "SetupResponse",
    "ChangeRoleRequest",
    "MuteRequest",
    "UIEvent",
]
