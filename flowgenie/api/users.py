"""User API: registration, login and profile management."""

from fastapi import APIRouter, Depends, HTTPException, status

from flowgenie.api.deps import CurrentUser, get_current_user, get_settings, get_user_store
from flowgenie.config import Settings
from flowgenie.errors import AuthError, ConfigError
from flowgenie.models.user import User
from flowgenie.schemas.user import LoginRequest, PasswordChange, ProfileUpdate, RegisterRequest, UserRead
from flowgenie.services.auth import create_access_token, verify_password
from flowgenie.services.user_store import UserStore

router = APIRouter(prefix="/api/users", tags=["users"])


def _issue_token(settings: Settings, user: User) -> str:
    return create_access_token(settings, user_id=user.id, email=user.email, flow_address=user.flow_address)


def _load_user(users: UserStore, user_id: str) -> User:
    user = users.get(user_id)
    if user is None:
        raise HTTPException(status_code=404, detail="User not found")
    return user


@router.post("/register", status_code=201)
def register(
    body: RegisterRequest,
    settings: Settings = Depends(get_settings),
    users: UserStore = Depends(get_user_store),
):
    if not settings.jwt_secret:
        raise ConfigError("FG_JWT_SECRET not configured")
    if users.find_by_email(body.email):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="User already exists")

    user = users.create(body.email, body.password, body.flow_address)
    return {"success": True, "user": UserRead.from_user(user), "token": _issue_token(settings, user)}


@router.post("/login")
def login(
    body: LoginRequest,
    settings: Settings = Depends(get_settings),
    users: UserStore = Depends(get_user_store),
):
    user = users.authenticate(body.email, body.password)
    if user is None:
        raise AuthError("Invalid credentials")
    return {"success": True, "user": UserRead.from_user(user), "token": _issue_token(settings, user)}


@router.get("/profile")
def get_profile(
    current: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    return {"success": True, "user": UserRead.from_user(_load_user(users, current.id))}


@router.put("/profile")
def update_profile(
    body: ProfileUpdate,
    current: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    _load_user(users, current.id)

    fields = {}
    if body.email:
        existing = users.find_by_email(body.email)
        if existing and existing.id != current.id:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already in use")
        fields["email"] = body.email
    if "flow_address" in body.model_fields_set:
        fields["flow_address"] = body.flow_address

    user = users.update(current.id, **fields)
    return {"success": True, "user": UserRead.from_user(user)}


@router.put("/password")
def change_password(
    body: PasswordChange,
    current: CurrentUser = Depends(get_current_user),
    users: UserStore = Depends(get_user_store),
):
    user = _load_user(users, current.id)
    if not verify_password(body.current_password, user.hashed_password):
        raise AuthError("Current password is incorrect")
    users.set_password(user.id, body.new_password)
    return {"success": True, "message": "Password updated successfully"}
