import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from agri_web.api.deps import get_api, require_employee
from agri_web.api.forms import form_data, merge_api_errors, validate_form
from agri_web.api.templating import render
from agri_web.core.errors import ApiError, ApiForbidden, ApiUnauthorized
from agri_web.schemas import FarmerUpdateForm
from agri_web.services.api_client import AgriApi
from agri_web.services.session import flash

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_employee)])


def _missing(request: Request, exc: ApiError) -> RedirectResponse:
    flash(request, exc.message(), "error")
    return RedirectResponse("/farmers", status_code=303)


@router.get("")
def list_farmers(request: Request, api: AgriApi = Depends(get_api)):
    return render(request, "farmers/list.html", farmers=api.farmers())


@router.get("/{farmer_id}")
def farmer_details(farmer_id: str, request: Request, api: AgriApi = Depends(get_api)):
    try:
        farmer = api.farmer(farmer_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        return _missing(request, exc)
    return render(request, "farmers/details.html", farmer=farmer)


@router.get("/{farmer_id}/edit")
def edit_farmer_page(farmer_id: str, request: Request, api: AgriApi = Depends(get_api)):
    try:
        farmer = api.farmer(farmer_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        return _missing(request, exc)
    form = {
        "email_address": farmer.email,
        "full_name": farmer.full_name or "",
        "address": farmer.address or "",
        "phone_number": farmer.phone_number or "",
    }
    return render(request, "farmers/edit.html", farmer_id=farmer_id, form=form)


@router.post("/{farmer_id}/edit")
def edit_farmer(
    farmer_id: str,
    request: Request,
    data: Dict[str, str] = Depends(form_data),
    api: AgriApi = Depends(get_api),
):
    form, errors = validate_form(FarmerUpdateForm, data)
    if form is None:
        return render(request, "farmers/edit.html", status_code=400, farmer_id=farmer_id, form=data, errors=errors)
    try:
        api.update_farmer(farmer_id, form.model_dump(mode="json"))
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        if exc.status_code == 404:
            return _missing(request, exc)
        logger.warning("Farmer %s update rejected: %s", farmer_id, exc.status_code)
        errors = merge_api_errors(errors, exc.field_errors())
        return render(request, "farmers/edit.html", status_code=400, farmer_id=farmer_id, form=data, errors=errors)
    flash(request, "Farmer updated successfully.")
    return RedirectResponse(f"/farmers/{farmer_id}", status_code=303)


@router.post("/{farmer_id}/delete")
def delete_farmer(farmer_id: str, request: Request, api: AgriApi = Depends(get_api)):
    try:
        api.delete_farmer(farmer_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        return _missing(request, exc)
    logger.info("Farmer %s deleted", farmer_id)
    flash(request, "Farmer deleted successfully.")
    return RedirectResponse("/farmers", status_code=303)
