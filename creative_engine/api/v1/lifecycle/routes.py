"""Lifecycle API endpoints."""

import logging

from fastapi import APIRouter, HTTPException, Query, status

from creative_engine.api.v1.dependencies import LifecycleManagerDep
from creative_engine.api.v1.lifecycle.constants import (
    CREATIVE_NOT_FOUND_DETAIL,
    DEFAULT_ACTION_LIMIT,
    MAX_ACTION_LIMIT,
)
from creative_engine.core.exceptions import CreativeNotFoundError, InvalidActionError
from creative_engine.schemas.lifecycle import (
    ActionCreate,
    ActionCreatedResponse,
    ActionFeedItemResponse,
    ActionFeedResponse,
    ActionRecommendationListResponse,
    ActionRecommendationRequest,
    ActionRecommendationResponse,
    CreativeHistoryResponse,
    LearningConfigResponse,
    LearningConfigUpdate,
)
from creative_engine.services.analysis.features import extract_features
from creative_engine.services.lifecycle.types import ActionType, DecisionSource

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/actions",
    response_model=ActionCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def log_action(
    request: ActionCreate,
    lifecycle: LifecycleManagerDep,
) -> ActionCreatedResponse:
    """Log a tested/scaled/paused decision on a creative."""
    try:
        action_id = await lifecycle.log_action(request.to_input())
    except CreativeNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=CREATIVE_NOT_FOUND_DETAIL,
        ) from exc
    except InvalidActionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.message,
        ) from exc

    return ActionCreatedResponse(
        action_id=action_id,
        creative_id=request.creative_id,
        type=request.type,
        reason_short=request.reason_short,
    )


@router.get("/actions", response_model=ActionFeedResponse)
async def list_actions(
    lifecycle: LifecycleManagerDep,
    limit: int = Query(DEFAULT_ACTION_LIMIT, ge=1, le=MAX_ACTION_LIMIT),
    type: ActionType | None = Query(None),
    creative_id: str | None = Query(None),
    decided_by: DecisionSource | None = Query(None),
) -> ActionFeedResponse:
    """List the newest actions across all creatives."""
    items = await lifecycle.get_recent_actions(
        limit,
        action_type=type,
        creative_id=creative_id,
        decided_by=decided_by,
    )
    return ActionFeedResponse(
        items=[ActionFeedItemResponse.from_item(item) for item in items],
        total=len(items),
        filters={"type": type, "creative_id": creative_id, "decided_by": decided_by},
    )


@router.get("/creatives/{creative_id}", response_model=CreativeHistoryResponse)
async def get_creative_history(
    creative_id: str,
    lifecycle: LifecycleManagerDep,
) -> CreativeHistoryResponse:
    """Get a creative with its decisions and newest metric snapshots."""
    try:
        history = await lifecycle.get_creative_history(creative_id)
    except CreativeNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=CREATIVE_NOT_FOUND_DETAIL,
        ) from exc
    return CreativeHistoryResponse.from_history(history)


@router.get("/config/{account_id}", response_model=LearningConfigResponse)
async def get_learning_config(
    account_id: str,
    lifecycle: LifecycleManagerDep,
) -> LearningConfigResponse:
    """Get an account's learning config, creating defaults on first access."""
    return LearningConfigResponse.from_record(await lifecycle.get_learning_config(account_id))


@router.patch("/config/{account_id}", response_model=LearningConfigResponse)
async def update_learning_config(
    account_id: str,
    request: LearningConfigUpdate,
    lifecycle: LifecycleManagerDep,
) -> LearningConfigResponse:
    """Partially update an account's learning config."""
    updates = request.model_dump(exclude_unset=True, exclude_none=True)
    config = await lifecycle.update_learning_config(account_id, updates)
    return LearningConfigResponse.from_record(config)


@router.post("/recommendations", response_model=ActionRecommendationListResponse)
async def recommend_actions(
    request: ActionRecommendationRequest,
    lifecycle: LifecycleManagerDep,
) -> ActionRecommendationListResponse:
    """Recommend scale/pause/test per creative, optionally executing confident ones."""
    creatives = [creative.to_record() for creative in request.creatives]
    for creative in creatives:
        creative.features = extract_features(creative)
    recommendations = await lifecycle.generate_action_recommendations(creatives, request.account_id)

    items: list[ActionRecommendationResponse] = []
    executed = 0
    for recommendation in recommendations:
        action_id = None
        if request.execute_automated and recommendation.auto_execute:
            try:
                action_id = await lifecycle.execute_automated_action(recommendation)
            except CreativeNotFoundError:
                logger.warning(
                    "Skipping automated action for unknown creative",
                    extra={"creative_id": recommendation.creative.id},
                )
            else:
                executed += 1
        items.append(ActionRecommendationResponse.from_recommendation(recommendation, action_id))

    return ActionRecommendationListResponse(
        account_id=request.account_id,
        items=items,
        executed=executed,
    )
