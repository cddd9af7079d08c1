import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from agri_web.api.deps import get_api, require_employee
from agri_web.api.forms import form_data, merge_api_errors, validate_form
from agri_web.api.templating import render
from agri_web.core.config import Settings, get_settings
from agri_web.core.errors import ApiError, ApiForbidden, ApiUnauthorized
from agri_web.schemas import FarmerRegisterForm, LoginForm
from agri_web.services.api_client import AgriApi
from agri_web.services.session import (
    LoginFailed,
    SessionState,
    authenticate,
    clear_session,
    establish_session,
    flash,
    landing_path,
    session_state,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/login")
def login_page(request: Request):
    return render(request, "account/login.html", form={})


@router.post("/login")
def login(
    request: Request,
    data: Dict[str, str] = Depends(form_data),
    api: AgriApi = Depends(get_api),
    cfg: Settings = Depends(get_settings),
):
    form, errors = validate_form(LoginForm, data)
    if form is None:
        logger.warning("Login form invalid: %s", list(errors))
        return render(request, "account/login.html", status_code=400, form=data, errors=errors)

    logger.info("Session %s -> %s for %s", session_state(request).value, SessionState.AUTHENTICATING.value, form.email)
    try:
        principal = authenticate(api, str(form.email), form.password)
    except LoginFailed as exc:
        # stays anonymous; the API's reason is shown on the form
        return render(request, "account/login.html", status_code=400, form=data, errors={"": [exc.message]})

    response = RedirectResponse(landing_path(principal), status_code=303)
    establish_session(request, response, principal, cfg)
    logger.info("Session %s for %s", session_state(request).value, form.email)
    return response


@router.post("/logout")
def logout(request: Request, cfg: Settings = Depends(get_settings)):
    response = RedirectResponse("/", status_code=303)
    clear_session(request, response, cfg)
    logger.info("User logged out successfully.")
    return response


@router.get("/access-denied")
def access_denied(request: Request):
    return render(request, "account/access_denied.html", status_code=403)


@router.get("/register-farmer", dependencies=[Depends(require_employee)])
def register_farmer_page(request: Request):
    return render(request, "account/register_farmer.html", form={})


@router.post("/register-farmer", dependencies=[Depends(require_employee)])
def register_farmer(
    request: Request,
    data: Dict[str, str] = Depends(form_data),
    api: AgriApi = Depends(get_api),
):
    logger.info("Farmer registration attempt for email: %s", data.get("email_address"))
    form, errors = validate_form(FarmerRegisterForm, data)
    if form is None:
        return render(request, "account/register_farmer.html", status_code=400, form=data, errors=errors)

    try:
        api.register_farmer(form.model_dump(mode="json"))
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        if exc.status_code == 400:
            logger.warning("Farmer registration rejected for %s", form.email_address)
            errors = merge_api_errors(errors, exc.field_errors())
        else:
            logger.error("Unexpected API error during farmer registration: %s", exc.status_code)
            errors = {"": ["An unexpected error occurred while processing your request."]}
        return render(request, "account/register_farmer.html", status_code=400, form=data, errors=errors)

    flash(request, "Farmer registered successfully.")
    return RedirectResponse("/farmers", status_code=303)
