"""Administrator API endpoints.

GET /admin/users/pending, PATCH /admin/users/{userId}/approve.
Every route requires a bearer token whose identity is currently an admin.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends

from saintshub_api.core.dependencies import SessionDep, get_mailer, require_admin
from saintshub_api.lib.mailer import Mailer
from saintshub_api.schemas.auth import ApprovalResponse, UserListEnvelope, UserResponse
from saintshub_api.services import auth_service, notification_service

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/users/pending", response_model=UserListEnvelope)
async def list_pending_users(session: SessionDep) -> UserListEnvelope:
    """Pastors and IT members awaiting approval."""
    users = await auth_service.list_pending_users(session)
    return UserListEnvelope(results=len(users), users=[UserResponse.model_validate(user) for user in users])


@router.patch("/users/{user_id}/approve", response_model=ApprovalResponse)
async def approve_user(
    user_id: uuid.UUID,
    session: SessionDep,
    mailer: Annotated[Mailer, Depends(get_mailer)],
) -> ApprovalResponse:
    user = await auth_service.approve_user(session, user_id)
    await notification_service.notify_approval(mailer, user)
    return ApprovalResponse(
        message=f"User {user.first_name} {user.last_name} approved as admin.",
        user=UserResponse.model_validate(user),
    )
