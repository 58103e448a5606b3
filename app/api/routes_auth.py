from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from app.api.dependencies import get_current_user
from app.core.errors import AuthError
from app.core.models import User
from app.services import auth_service

router = APIRouter(prefix="/api", tags=["auth"])


class SignupRequest(BaseModel):
    email: str
    name: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(req: SignupRequest):
    errors = auth_service.validate_signup(req.email, req.name, req.password)
    if errors:
        raise HTTPException(status_code=422, detail=", ".join(errors))
    try:
        user, token = auth_service.signup(req.email, req.name, req.password)
    except AuthError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"user": user.model_dump(mode="json"), "token": token}


@router.post("/login")
async def login(req: LoginRequest):
    try:
        user, token = auth_service.login(req.email, req.password)
    except AuthError as e:
        raise HTTPException(status_code=401, detail=str(e))
    return {"user": user.model_dump(mode="json"), "token": token}


@router.delete("/logout")
async def logout(user: User = Depends(get_current_user)):
    auth_service.logout(user)
    return {"success": True}


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"user": user.model_dump(mode="json")}
