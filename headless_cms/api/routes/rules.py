from typing import Any

from fastapi import APIRouter, Depends

from headless_cms.api.deps import get_rule_registries
from headless_cms.api.schemas import ParameterSpecResponse, RuleTypeResponse
from headless_cms.components.rules import RuleRegistries, RuleRegistry, RuleTypeInfo

router = APIRouter()


def _to_response(info: RuleTypeInfo) -> RuleTypeResponse:
    return RuleTypeResponse(
        type=info.type,
        kind=info.kind,
        capability=info.capability,
        description=info.description,
        parameters=[
            ParameterSpecResponse(
                name=p.name,
                kind=p.kind,
                required=p.required,
                default=p.default,
                description=p.description,
            )
            for p in info.parameters
        ],
    )


def _describe(registry: RuleRegistry[Any]) -> list[RuleTypeResponse]:
    return [_to_response(info) for info in registry.describe()]


@router.get("/validation", response_model=list[RuleTypeResponse])
def list_validation_rules(
    registries: RuleRegistries = Depends(get_rule_registries),
) -> list[RuleTypeResponse]:
    """Registered validation rule types and their parameters."""
    return _describe(registries.validation)


@router.get("/transformation", response_model=list[RuleTypeResponse])
def list_transformation_rules(
    registries: RuleRegistries = Depends(get_rule_registries),
) -> list[RuleTypeResponse]:
    """Registered transformation rule types and their parameters."""
    return _describe(registries.transformation)
