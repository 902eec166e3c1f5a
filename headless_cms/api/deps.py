from fastapi import Depends, Request

from headless_cms.adapters.authorization import AllowAllAuthorization
from headless_cms.adapters.clock import SystemClock
from headless_cms.adapters.sqlite.repos import SQLiteContentItemRepo, SQLiteContentTypeRepo
from headless_cms.components.content_types.ports import AuthorizationPort
from headless_cms.components.rules import RuleRegistries, get_registries
from headless_cms.settings.models import Settings


# --- Settings ---
def get_settings(request: Request) -> Settings:
    return request.app.state.settings


# --- Rules ---
def get_rule_registries() -> RuleRegistries:
    return get_registries()


# --- Repos ---
def get_content_type_repo(
    settings: Settings = Depends(get_settings),
    registries: RuleRegistries = Depends(get_rule_registries),
) -> SQLiteContentTypeRepo:
    return SQLiteContentTypeRepo(settings.database.path, registries)


def get_content_item_repo(settings: Settings = Depends(get_settings)) -> SQLiteContentItemRepo:
    return SQLiteContentItemRepo(settings.database.path)


# --- Ports ---
def get_authorization() -> AuthorizationPort:
    return AllowAllAuthorization()


def get_clock() -> SystemClock:
    return SystemClock()
