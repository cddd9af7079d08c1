from fastapi import APIRouter, Depends, Request

from agri_web.api.deps import require_employee, require_farmer
from agri_web.api.templating import render
from agri_web.services.session import SessionPrincipal

router = APIRouter()


@router.get("/")
def index(request: Request):
    return render(request, "index.html")


@router.get("/home/employee")
def employee_home(request: Request, principal: SessionPrincipal = Depends(require_employee)):
    return render(request, "home_employee.html")


@router.get("/home/farmer")
def farmer_home(request: Request, principal: SessionPrincipal = Depends(require_farmer)):
    return render(request, "home_farmer.html")
