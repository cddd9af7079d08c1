import logging
from datetime import date, datetime, time
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from agri_web.api.deps import get_api, require_employee, require_farmer, require_login
from agri_web.api.forms import form_data, merge_api_errors, validate_form
from agri_web.api.templating import render
from agri_web.core.errors import ApiError, ApiForbidden, ApiUnauthorized
from agri_web.schemas import ProductDto, ProductForm, Role
from agri_web.services.api_client import AgriApi
from agri_web.services.session import SessionPrincipal, flash

logger = logging.getLogger(__name__)

router = APIRouter()

SORT_KEYS = {
    "name_asc": (lambda p: p.name.lower(), False),
    "name_desc": (lambda p: p.name.lower(), True),
    "date_asc": (lambda p: p.production_date, False),
    "date_desc": (lambda p: p.production_date, True),
}


def _parse_day(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        logger.warning("Ignoring bad date filter %r", value)
        return None


def filter_products(
    products: List[ProductDto],
    category_id: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sort_by: Optional[str] = None,
) -> List[ProductDto]:
    """Apply the list page filters: category, production date range (inclusive) and sort order."""
    start, end = _parse_day(start_date), _parse_day(end_date)
    result = [
        p for p in products
        if (not category_id or p.category_id == category_id)
        and (start is None or p.production_date.date() >= start)
        and (end is None or p.production_date.date() <= end)
    ]
    if sort_by in SORT_KEYS:
        key, reverse = SORT_KEYS[sort_by]
        result.sort(key=key, reverse=reverse)
    return result


def product_payload(form: ProductForm) -> Dict[str, str]:
    data = form.model_dump(mode="json")
    data["production_date"] = datetime.combine(form.production_date, time()).isoformat()
    return data


def _list_page(request: Request, api: AgriApi, products: List[ProductDto], title: str,
               category: Optional[str], start_date: Optional[str], end_date: Optional[str],
               sort_by: Optional[str]):
    filters = {
        "category": category or "",
        "start_date": start_date or "",
        "end_date": end_date or "",
        "sort_by": sort_by or "",
    }
    return render(
        request,
        "products/list.html",
        title=title,
        products=filter_products(products, category, start_date, end_date, sort_by),
        categories=api.categories(),
        filters=filters,
    )


def _back_to_list(principal: SessionPrincipal) -> str:
    return "/products/mine" if principal.role == Role.FARMER else "/products"


def _missing(request: Request, principal: SessionPrincipal, exc: ApiError) -> RedirectResponse:
    flash(request, exc.message(), "error")
    return RedirectResponse(_back_to_list(principal), status_code=303)


@router.get("")
def list_products(
    request: Request,
    category: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sort_by: Optional[str] = None,
    principal: SessionPrincipal = Depends(require_login),
    api: AgriApi = Depends(get_api),
):
    return _list_page(request, api, api.products(), "All products", category, start_date, end_date, sort_by)


@router.get("/mine")
def my_products(
    request: Request,
    category: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sort_by: Optional[str] = None,
    principal: SessionPrincipal = Depends(require_farmer),
    api: AgriApi = Depends(get_api),
):
    products = api.products_by_farmer(principal.user_id)
    return _list_page(request, api, products, "My products", category, start_date, end_date, sort_by)


@router.get("/farmer/{farmer_id}")
def farmer_products(
    farmer_id: str,
    request: Request,
    category: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sort_by: Optional[str] = None,
    principal: SessionPrincipal = Depends(require_employee),
    api: AgriApi = Depends(get_api),
):
    try:
        products = api.products_by_farmer(farmer_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        return _missing(request, principal, exc)
    return _list_page(request, api, products, "Farmer products", category, start_date, end_date, sort_by)


@router.get("/category/{category_id}")
def category_products(
    category_id: str,
    request: Request,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    sort_by: Optional[str] = None,
    principal: SessionPrincipal = Depends(require_employee),
    api: AgriApi = Depends(get_api),
):
    try:
        products = api.products_by_category(category_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        return _missing(request, principal, exc)
    return _list_page(request, api, products, "Category products", category_id, start_date, end_date, sort_by)


@router.get("/create")
def create_product_page(
    request: Request,
    principal: SessionPrincipal = Depends(require_farmer),
    api: AgriApi = Depends(get_api),
):
    return render(request, "products/form.html", action="/products/create", form={},
                  categories=api.categories())


@router.post("/create")
def create_product(
    request: Request,
    data: Dict[str, str] = Depends(form_data),
    principal: SessionPrincipal = Depends(require_farmer),
    api: AgriApi = Depends(get_api),
):
    form, errors = validate_form(ProductForm, data)
    if form is not None:
        try:
            created = api.create_product(product_payload(form))
        except (ApiUnauthorized, ApiForbidden):
            raise
        except ApiError as exc:
            logger.warning("Product create rejected: %s", exc.status_code)
            errors = merge_api_errors(errors, exc.field_errors())
        else:
            logger.info("Product %s created by %s", created.id, principal.subject)
            flash(request, "Product created successfully.")
            return RedirectResponse(f"/products/{created.id}", status_code=303)
    return render(request, "products/form.html", status_code=400, action="/products/create",
                  form=data, errors=errors, categories=api.categories())


@router.get("/{product_id}")
def product_details(
    product_id: str,
    request: Request,
    principal: SessionPrincipal = Depends(require_login),
    api: AgriApi = Depends(get_api),
):
    try:
        product = api.product(product_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        return _missing(request, principal, exc)
    return render(request, "products/details.html", product=product)


@router.get("/{product_id}/edit")
def edit_product_page(
    product_id: str,
    request: Request,
    principal: SessionPrincipal = Depends(require_login),
    api: AgriApi = Depends(get_api),
):
    try:
        product = api.product(product_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        return _missing(request, principal, exc)
    form = {
        "name": product.name,
        "description": product.description,
        "price": str(product.price),
        "quantity": str(product.quantity),
        "production_date": product.production_date.date().isoformat(),
        "category_id": product.category_id,
    }
    return render(request, "products/form.html", action=f"/products/{product_id}/edit", form=form,
                  categories=api.categories())


@router.post("/{product_id}/edit")
def edit_product(
    product_id: str,
    request: Request,
    data: Dict[str, str] = Depends(form_data),
    principal: SessionPrincipal = Depends(require_login),
    api: AgriApi = Depends(get_api),
):
    form, errors = validate_form(ProductForm, data)
    if form is not None:
        try:
            api.update_product(product_id, product_payload(form))
        except (ApiUnauthorized, ApiForbidden):
            raise
        except ApiError as exc:
            errors = merge_api_errors(errors, exc.field_errors())
        else:
            flash(request, "Product updated successfully.")
            return RedirectResponse(f"/products/{product_id}", status_code=303)
    return render(request, "products/form.html", status_code=400, action=f"/products/{product_id}/edit",
                  form=data, errors=errors, categories=api.categories())


@router.post("/{product_id}/delete")
def delete_product(
    product_id: str,
    request: Request,
    principal: SessionPrincipal = Depends(require_login),
    api: AgriApi = Depends(get_api),
):
    try:
        api.delete_product(product_id)
    except (ApiUnauthorized, ApiForbidden):
        raise
    except ApiError as exc:
        return _missing(request, principal, exc)
    flash(request, "Product deleted successfully.")
    return RedirectResponse(_back_to_list(principal), status_code=303)
