from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from fastapi import Request
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

# sent exactly as typed
RAW_FIELDS = {"password"}


async def form_data(request: Request) -> Dict[str, str]:
    form = await request.form()
    return {k: v for k, v in form.items() if isinstance(v, str)}


def validate_form(model: Type[M], data: Dict[str, Any]) -> Tuple[Optional[M], Dict[str, List[str]]]:
    """Return the parsed form, or ``None`` and ``{field: [messages]}``."""
    cleaned = {}
    for k, v in data.items():
        if k not in RAW_FIELDS and isinstance(v, str):
            v = v.strip()
        # blank inputs count as missing so "required" messages show up
        if k in RAW_FIELDS or v != "":
            cleaned[k] = v
    try:
        return model.model_validate(cleaned), {}
    except ValidationError as exc:
        errors: Dict[str, List[str]] = {}
        for err in exc.errors():
            field = ".".join(str(p) for p in err.get("loc", ())) or ""
            msg = str(err.get("msg", "Invalid value")).removeprefix("Value error, ")
            errors.setdefault(field, []).append(msg)
        return None, errors


def merge_api_errors(errors: Dict[str, List[str]], api_errors: Dict[str, List[str]]) -> Dict[str, List[str]]:
    for field, messages in api_errors.items():
        errors.setdefault(field, []).extend(messages)
    return errors
