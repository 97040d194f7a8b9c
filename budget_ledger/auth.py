from datetime import datetime, timezone
from functools import lru_cache
import logging
from typing import Any
from uuid import UUID
import os

from cognito_jwt_verifier import AsyncCognitoJwtVerifier
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2AuthorizationCodeBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from budget_ledger import db
from budget_ledger.models import User
from budget_ledger.tables import UsersTable

logger = logging.getLogger(__name__)

ISSUER = os.environ.get("COGNITO_ISSUER", "")

oauth2_scheme = OAuth2AuthorizationCodeBearer(
    authorizationUrl=f"{ISSUER}/oauth2/authorize",
    tokenUrl=f"{ISSUER}/oauth2/token",
)


@lru_cache(maxsize=1)
def get_verifier() -> AsyncCognitoJwtVerifier:
    issuer = os.environ.get("COGNITO_ISSUER")
    if not issuer:
        raise RuntimeError("COGNITO_ISSUER must be set to verify access tokens.")
    client_ids = [
        client_id.strip()
        for client_id in os.environ.get("COGNITO_CLIENT_IDS", "").split(",")
        if client_id.strip()
    ]
    return AsyncCognitoJwtVerifier(issuer, client_ids=client_ids)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_token_claims(token: str = Depends(oauth2_scheme)) -> dict[str, Any]:
    verifier = get_verifier()
    try:
        return await verifier.verify_access_token(token)
    except Exception as exc:
        logger.warning("Rejected access token: %s", exc)
        raise _unauthorized(str(exc)) from exc


async def get_or_create_current_user(
    claims: dict[str, Any] = Depends(get_token_claims),
    session: AsyncSession = Depends(db.get_session),
) -> User:
    email = claims.get("email")
    if not email:
        raise _unauthorized("Token missing email claim.")

    normalized_email = email.strip().lower()
    cognito_sub = claims.get("sub")
    if not cognito_sub:
        raise _unauthorized("Token missing sub claim.")
    try:
        cognito_user_id = UUID(cognito_sub)
    except ValueError as exc:
        raise _unauthorized("Token has invalid sub claim.") from exc

    result = await session.execute(
        select(UsersTable).where(UsersTable.id == cognito_user_id)
    )
    user = result.scalar_one_or_none()
    now = datetime.now(timezone.utc)
    if user is None:
        user = UsersTable(
            id=cognito_user_id,
            email=normalized_email,
            created_at=now,
            last_seen_at=now,
        )
        session.add(user)
        logger.info("Registering user %s", cognito_user_id)
    else:
        user.last_seen_at = now

    await session.flush()
    await session.refresh(user)
    return User(
        id=user.id,
        email=user.email,
        created_at=user.created_at,
        last_seen_at=user.last_seen_at,
    )
