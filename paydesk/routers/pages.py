from fastapi import APIRouter, Depends, Request

from paydesk.models.account import Account
from paydesk.schemas.account import AccountOut
from paydesk.templating import render
from paydesk.utils.auth import get_current_account, require_account

router = APIRouter(tags=["Pages"])


@router.get("/")
def index(request: Request, account=Depends(get_current_account)):
    return render(request, "index.html", account=account)


@router.get("/dashboard")
def dashboard(request: Request, account: Account = Depends(require_account)):
    return render(request, "dashboard.html", account=AccountOut.model_validate(account))


@router.get("/health")
def health():
    return {"status": "ok"}
