"""Church dashboard API endpoints.

POST/GET /dashboard/churches, GET /dashboard/public/churches,
GET/PATCH/DELETE /dashboard/churches/{id}, and
DELETE /dashboard/churches/{churchId}/{collection}/{index} for removing
one element from a nested collection.
"""

import uuid

from fastapi import APIRouter, Response, status

from saintshub_api.core.dependencies import IdentityDep, SessionDep
from saintshub_api.schemas.church import (
    ChurchCreate,
    ChurchDetailResponse,
    ChurchResponse,
    ChurchUpdate,
    PublicChurchResponse,
)
from saintshub_api.schemas.common import MessageResponse
from saintshub_api.services import church_service
from saintshub_api.services.nested_collection_service import (
    ACCESSORS,
    SEGMENT_COLLECTIONS,
    CollectionSegment,
    remove_nested_item,
)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.post("/churches", response_model=ChurchResponse, status_code=status.HTTP_201_CREATED)
async def create_church(identity: IdentityDep, body: ChurchCreate, session: SessionDep) -> ChurchResponse:
    church = await church_service.create_church(session, identity.id, body)
    return ChurchResponse.model_validate(church)


@router.get("/churches", response_model=list[ChurchResponse])
async def list_churches(identity: IdentityDep, session: SessionDep) -> list[ChurchResponse]:
    churches = await church_service.list_churches(session)
    return [ChurchResponse.model_validate(church) for church in churches]


@router.get("/public/churches", response_model=list[PublicChurchResponse])
async def list_public_churches(session: SessionDep) -> list[PublicChurchResponse]:
    """Directory of church ids and names, open to everyone."""
    rows = await church_service.list_public_churches(session)
    return [PublicChurchResponse(id=row.id, name=row.name) for row in rows]


@router.get("/churches/{church_id}", response_model=ChurchDetailResponse)
async def get_church(church_id: uuid.UUID, identity: IdentityDep, session: SessionDep) -> ChurchDetailResponse:
    church = await church_service.get_church(session, church_id, with_owner=True)
    return ChurchDetailResponse.model_validate(church)


@router.patch("/churches/{church_id}", response_model=ChurchResponse)
async def update_church(
    church_id: uuid.UUID,
    identity: IdentityDep,
    body: ChurchUpdate,
    session: SessionDep,
) -> ChurchResponse:
    """Partial overlay; supplied fields replace stored ones wholesale."""
    church = await church_service.update_church(session, church_id, body)
    return ChurchResponse.model_validate(church)


@router.delete("/churches/{church_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_church(church_id: uuid.UUID, identity: IdentityDep, session: SessionDep) -> Response:
    await church_service.delete_church(session, church_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/churches/{church_id}/{collection}/{index}", response_model=MessageResponse)
async def delete_nested_item(
    church_id: uuid.UUID,
    collection: CollectionSegment,
    index: str,
    identity: IdentityDep,
    session: SessionDep,
) -> MessageResponse:
    """Remove the element at ``index``; later elements shift down by one."""
    target = SEGMENT_COLLECTIONS[collection]
    await remove_nested_item(session, church_id, target, index)
    return MessageResponse(message=f"{ACCESSORS[target].label} deleted successfully.")
