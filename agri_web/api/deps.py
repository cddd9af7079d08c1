from typing import Iterator

import httpx
from fastapi import Depends, Request

from agri_web.core.config import Settings, get_settings
from agri_web.core.errors import AccessDenied, LoginRequired
from agri_web.schemas import Role
from agri_web.services.api_client import AgriApi
from agri_web.services.session import SessionPrincipal, current_principal, read_token_cookie


def get_http_client(cfg: Settings = Depends(get_settings)) -> Iterator[httpx.Client]:
    with httpx.Client(base_url=cfg.API_BASE_URL, timeout=5.0) as client:
        yield client


def get_api(
    request: Request,
    client: httpx.Client = Depends(get_http_client),
    cfg: Settings = Depends(get_settings),
) -> AgriApi:
    return AgriApi(client, token=read_token_cookie(request, cfg))


def require_login(request: Request) -> SessionPrincipal:
    principal = current_principal(request)
    if principal is None:
        raise LoginRequired()
    return principal


def require_role(*allowed: Role):
    def _checker(principal: SessionPrincipal = Depends(require_login)) -> SessionPrincipal:
        if not principal.has_role(*allowed):
            raise AccessDenied()
        return principal
    return _checker


require_employee = require_role(Role.EMPLOYEE)
require_farmer = require_role(Role.FARMER)
