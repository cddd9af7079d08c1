import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from agri_web.api.deps import get_api, require_employee, require_login
from agri_web.api.forms import form_data, merge_api_errors, validate_form
from agri_web.api.templating import render
from agri_web.core.errors import ApiError, ApiForbidden, ApiUnauthorized
from agri_web.schemas import CategoryForm
from agri_web.services.api_client import AgriApi
from agri_web.services.session import flash

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_login)])


@router.get("")
def list_categories(request: Request, api: AgriApi = Depends(get_api)):
    return render(request, "categories/list.html", categories=api.categories())


@router.get("/create")
def create_category_page(request: Request):
    return render(request, "categories/create.html", form={})


@router.post("/create")
def create_category(
    request: Request,
    data: Dict[str, str] = Depends(form_data),
    api: AgriApi = Depends(get_api),
):
    form, errors = validate_form(CategoryForm, data)
    if form is not None:
        try:
            created = api.create_category(form.name)
        except (ApiUnauthorized, ApiForbidden):
            raise
        except ApiError as exc:
            logger.warning("Category create rejected: %s", exc.message())
            errors = merge_api_errors(errors, exc.field_errors())
        else:
            flash(request, f"Category {created.name} created successfully.")
            return RedirectResponse("/categories", status_code=303)
    return render(request, "categories/create.html", status_code=400, form=data, errors=errors)


@router.get("/{category_id}")
def category_details(category_id: str, request: Request, api: AgriApi = Depends(get_api)):
    try:
        category = api.category(category_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        flash(request, exc.message(), "error")
        return RedirectResponse("/categories", status_code=303)
    return render(request, "categories/details.html", category=category)


@router.post("/{category_id}/delete", dependencies=[Depends(require_employee)])
def delete_category(category_id: str, request: Request, api: AgriApi = Depends(get_api)):
    try:
        api.delete_category(category_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        # categories that still hold products are refused by the API
        flash(request, exc.message(), "error")
    else:
        flash(request, "Category deleted successfully.")
    return RedirectResponse("/categories", status_code=303)
