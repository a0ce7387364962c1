from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from appointly.api.deps import get_current_user, get_session
from appointly.api.schemas.scheduling import CreateRuleRequest, RuleListResponse
from appointly.models.availability import AvailabilityRuleCreate, AvailabilityRulePublic
from appointly.models.user import User
from appointly.services.availability_service import delete_rule, insert_rule, list_rules_by_owner

router = APIRouter(prefix="/availability", tags=["availability"])


@router.post("", response_model=AvailabilityRulePublic, status_code=status.HTTP_201_CREATED)
async def create_availability_rule(
    body: CreateRuleRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> AvailabilityRulePublic:
    rule = await insert_rule(
        session,
        current_user.id,
        AvailabilityRuleCreate(**body.model_dump()),
    )
    return AvailabilityRulePublic.model_validate(rule, from_attributes=True)


@router.get("", response_model=RuleListResponse)
async def list_availability_rules(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> RuleListResponse:
    rules = await list_rules_by_owner(session, current_user.id)
    return RuleListResponse(
        availability=[AvailabilityRulePublic.model_validate(r, from_attributes=True) for r in rules],
        count=len(rules),
    )


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_availability_rule(
    rule_id: int,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
) -> None:
    await delete_rule(session, current_user.id, rule_id)
