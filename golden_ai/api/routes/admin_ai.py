"""
AI Profile Admin Routes

REST endpoints for managing provider profiles stored in the CMS settings.
Authentication is handled by the CMS in front of this service.

Routes:
- GET    /profiles                 - List profiles (keys masked)
- POST   /profiles                 - Create a profile
- PATCH  /profiles/{id}            - Update a profile
- DELETE /profiles/{id}            - Delete a profile
- POST   /profiles/{id}/activate   - Make a profile the active one
- GET    /status                   - Resolved AI configuration summary
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel

from golden_ai.api.deps import get_ai_gateway, get_profile_service
from golden_ai.api.middleware import add_profile_to_wide_event
from golden_ai.core.models import APIResponse
from golden_ai.services.ai.gateway import AIGateway
from golden_ai.services.ai.profiles import AIProfileService

logger = structlog.get_logger()

router = APIRouter()


# ============================================================================
# Request Models
# ============================================================================

class ProfileCreate(BaseModel):
    """Request to create a new AI provider profile."""
    name: str
    base_url: str = "https://openrouter.ai/api/v1"
    model: str
    api_key: str = ""
    description: str = ""


class ProfileUpdate(BaseModel):
    """Request to update an AI provider profile. Blank api_key keeps the stored key."""
    name: str | None = None
    base_url: str | None = None
    model: str | None = None
    api_key: str | None = None
    description: str | None = None


# ============================================================================
# Profile CRUD Endpoints
# ============================================================================

@router.get("/profiles")
async def list_profiles(
    service: Annotated[AIProfileService, Depends(get_profile_service)],
) -> APIResponse:
    listing = await service.list_profiles()
    return APIResponse(
        success=True,
        data={**listing, "total": len(listing["profiles"])},
    )


@router.post("/profiles")
async def create_profile(
    request: ProfileCreate,
    service: Annotated[AIProfileService, Depends(get_profile_service)],
) -> APIResponse:
    profile = await service.create_profile(
        name=request.name,
        base_url=request.base_url,
        model=request.model,
        api_key=request.api_key,
        description=request.description,
    )
    add_profile_to_wide_event(profile.id, "create")

    return APIResponse(
        success=True,
        message=f"Created AI profile: {profile.name}",
        data={"id": profile.id},
    )


@router.patch("/profiles/{profile_id}")
async def update_profile(
    profile_id: str,
    request: ProfileUpdate,
    service: Annotated[AIProfileService, Depends(get_profile_service)],
) -> APIResponse:
    profile = await service.update_profile(profile_id, **request.model_dump(exclude_unset=True))
    add_profile_to_wide_event(profile_id, "update")
    return APIResponse(success=True, message=f"Updated AI profile: {profile.name}")


@router.delete("/profiles/{profile_id}")
async def delete_profile(
    profile_id: str,
    service: Annotated[AIProfileService, Depends(get_profile_service)],
) -> APIResponse:
    await service.delete_profile(profile_id)
    add_profile_to_wide_event(profile_id, "delete")
    return APIResponse(success=True, message="AI profile deleted")


@router.post("/profiles/{profile_id}/activate")
async def activate_profile(
    profile_id: str,
    service: Annotated[AIProfileService, Depends(get_profile_service)],
) -> APIResponse:
    profile = await service.activate_profile(profile_id)
    add_profile_to_wide_event(profile_id, "activate")
    return APIResponse(success=True, message=f"Active AI profile: {profile.name}")


# ============================================================================
# Status Endpoint
# ============================================================================

@router.get("/status")
async def get_status(
    gateway: Annotated[AIGateway, Depends(get_ai_gateway)],
) -> APIResponse:
    """Configuration the gateway would use right now (without the key)."""
    config = await gateway.get_config()
    return APIResponse(
        success=True,
        data={
            "ai_enabled": bool(config.api_key),
            "profile_name": config.profile_name,
            "base_url": config.base_url,
            "primary_model": config.primary_model,
            "fallback_models": list(config.fallback_models),
            "company_name": config.company_info.name,
        },
    )
