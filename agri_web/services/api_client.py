import logging
from typing import Any, Dict, List, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from agri_web.core.errors import ApiError, ApiForbidden, ApiUnauthorized
from agri_web.schemas import CategoryDto, FarmerDto, LoginResult, ProductDto

logger = logging.getLogger(__name__)

M = TypeVar('M', bound=BaseModel)


def bearer_headers(token: Optional[str]) -> Dict[str, str]:
    if token and token.strip():
        return {'Authorization': f'Bearer {token.strip()}'}
    return {}


class AgriApi:
    """Typed calls to the Agri-Energy API.

    The bearer token (read from the ``AuthToken`` cookie by the caller) is
    sent on every request when present. Without it the request goes out
    anonymously and the API answers 401, surfaced here as ``ApiUnauthorized``.
    """

    def __init__(self, client: httpx.Client, token: Optional[str] = None):
        self.client = client
        self.headers = bearer_headers(token)

    # --- plumbing ---

    def _send(self, method: str, url: str, json: Any = None) -> httpx.Response:
        try:
            resp = self.client.request(method, url, json=json, headers=self.headers)
        except httpx.RequestError as exc:
            logger.error("%s %s failed: %s", method, url, exc)
            raise ApiError(503, 'API unavailable') from exc
        if resp.status_code == 401:
            raise ApiUnauthorized(resp.status_code, resp.text)
        if resp.status_code == 403:
            raise ApiForbidden(resp.status_code, resp.text)
        if resp.is_error:
            logger.warning("%s %s -> %s", method, url, resp.status_code)
            raise ApiError(resp.status_code, resp.text)
        return resp

    def _one(self, model: Type[M], method: str, url: str, json: Any = None) -> M:
        resp = self._send(method, url, json=json)
        try:
            return model.model_validate(resp.json())
        except (ValueError, ValidationError) as exc:
            logger.error("Unexpected %s payload from %s %s: %s", model.__name__, method, url, exc)
            raise ApiError(502, 'Invalid response from server.') from exc

    def _many(self, model: Type[M], url: str) -> List[M]:
        try:
            resp = self._send('GET', url)
        except ApiError as exc:
            # a 404 on a list endpoint means nothing to list
            if exc.status_code == 404:
                return []
            raise
        try:
            return TypeAdapter(List[model]).validate_python(resp.json())
        except (ValueError, ValidationError) as exc:
            logger.error("Unexpected %s list from GET %s: %s", model.__name__, url, exc)
            raise ApiError(502, 'Invalid response from server.') from exc

    # --- auth ---

    def login(self, email: str, password: str) -> LoginResult:
        return self._one(LoginResult, 'POST', '/api/auth/login', json={'email': email, 'password': password})

    def register_farmer(self, data: Dict[str, Any]) -> None:
        self._send('POST', '/api/auth/register/farmer', json=data)

    # --- farmers ---

    def farmers(self) -> List[FarmerDto]:
        return self._many(FarmerDto, '/api/FarmerAccount/farmer/all')

    def farmer(self, farmer_id: str) -> FarmerDto:
        return self._one(FarmerDto, 'GET', f'/api/FarmerAccount/farmer/{farmer_id}')

    def update_farmer(self, farmer_id: str, data: Dict[str, Any]) -> FarmerDto:
        return self._one(FarmerDto, 'PUT', f'/api/FarmerAccount/farmer/{farmer_id}', json=data)

    def delete_farmer(self, farmer_id: str) -> None:
        self._send('DELETE', f'/api/FarmerAccount/farmer/{farmer_id}')

    # --- products ---

    def products(self) -> List[ProductDto]:
        return self._many(ProductDto, '/api/Product/all')

    def products_by_farmer(self, farmer_id: str) -> List[ProductDto]:
        return self._many(ProductDto, f'/api/Product/farmer/{farmer_id}')

    def products_by_category(self, category_id: str) -> List[ProductDto]:
        return self._many(ProductDto, f'/api/Product/category/{category_id}')

    def product(self, product_id: str) -> ProductDto:
        return self._one(ProductDto, 'GET', f'/api/Product/{product_id}')

    def create_product(self, data: Dict[str, Any]) -> ProductDto:
        return self._one(ProductDto, 'POST', '/api/Product', json=data)

    def update_product(self, product_id: str, data: Dict[str, Any]) -> ProductDto:
        return self._one(ProductDto, 'PUT', f'/api/Product/{product_id}', json=data)

    def delete_product(self, product_id: str) -> None:
        self._send('DELETE', f'/api/Product/{product_id}')

    # --- categories ---

    def categories(self) -> List[CategoryDto]:
        return self._many(CategoryDto, '/api/categories/all')

    def category(self, category_id: str) -> CategoryDto:
        return self._one(CategoryDto, 'GET', f'/api/categories/{category_id}')

    def create_category(self, name: str) -> CategoryDto:
        return self._one(CategoryDto, 'POST', '/api/categories', json={'name': name})

    def delete_category(self, category_id: str) -> None:
        self._send('DELETE', f'/api/categories/{category_id}')
