from fastapi import Header, HTTPException, status


def get_organization_id(x_organization_id: int = Header(...)) -> int:
    """
    FastAPI dependency that extracts the organization id of the caller.

    Authentication happens upstream; the gateway forwards the resolved
    organization in the ``X-Organization-Id`` header. The id is then passed
    explicitly through service and CRUD layers.
    """
    if x_organization_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid organization id"
        )
    return x_organization_id


def get_actor_id(x_user_id: int = Header(...)) -> int:
    """Id of the user performing the request, recorded as creator/updater."""
    return x_user_id


def get_content_token(authorization: str = Header(...)) -> str:
    """
    Bearer token forwarded to the content API on behalf of the caller.

    Raises:
        HTTPException 401: If the Authorization header is not a bearer token
    """
    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return authorization.replace("Bearer ", "", 1)
