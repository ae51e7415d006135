import uuid
from typing import Annotated
from fastapi import APIRouter, Depends, Request, Response, status

from chirpy.auth import schemas, dependencies
from chirpy.auth.service import SessionAuthenticator
from chirpy.core.responses import StandardResponse

router = APIRouter()

Authenticator = Annotated[SessionAuthenticator, Depends(dependencies.get_authenticator)]


@router.post("/users", status_code=status.HTTP_201_CREATED, response_model=StandardResponse[schemas.UserResponse])
async def register(
    user_in: schemas.UserCreate,
    authenticator: Authenticator,
):
    user = await authenticator.register(user_in.email, user_in.password)
    return StandardResponse(data=user, message="User registered successfully")

@router.put("/users", response_model=StandardResponse[schemas.UserResponse])
async def update_credentials(
    credentials: schemas.UserCredentialsUpdate,
    user_id: Annotated[uuid.UUID, Depends(dependencies.get_current_user_id)],
    authenticator: Authenticator,
):
    user = await authenticator.update_credentials(user_id, credentials.email, credentials.password)
    return StandardResponse(data=user, message="Credentials updated successfully")

@router.post("/login", response_model=StandardResponse[schemas.LoginResponse])
async def login(
    login_data: schemas.LoginRequest,
    authenticator: Authenticator,
):
    result = await authenticator.login(login_data.email, login_data.password)
    return StandardResponse(
        data=schemas.LoginResponse(
            **result.user.model_dump(),
            token=result.access_token,
            refresh_token=result.refresh_token,
        ),
        message="Login Successful"
    )

@router.post("/refresh", response_model=StandardResponse[schemas.AccessTokenResponse])
async def refresh_token(
    request: Request,
    authenticator: Authenticator,
):
    token = await authenticator.refresh_access_token(request.headers)
    return StandardResponse(data=schemas.AccessTokenResponse(token=token), message="Token Refreshed")

@router.post("/revoke", status_code=status.HTTP_204_NO_CONTENT)
async def revoke_token(
    request: Request,
    authenticator: Authenticator,
):
    await authenticator.revoke_refresh_token(request.headers)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
