from fastapi import APIRouter, Depends

from ..dependencies import get_current_user, get_document_store
from ..domain.ports.documents import DocumentStore
from ..models.user import User
from ..schemas.auth import TokenResponse, UserLogin
from ..schemas.user import UserRead
from ..services.auth_service import login_user

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(
    payload: UserLogin,
    store: DocumentStore = Depends(get_document_store),
) -> TokenResponse:
    access_token = await login_user(store, payload.email, payload.password)
    return TokenResponse(access_token=access_token)


@router.get("/me", response_model=UserRead)
async def me(user: User = Depends(get_current_user)) -> UserRead:
    return UserRead.model_validate(user)
