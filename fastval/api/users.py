from fastapi import APIRouter, Depends, status

from fastval.api.pipe import Validated
from fastval.schemas.users import CreateUser, ListUsersQuery, UserPath

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", status_code=status.HTTP_201_CREATED)
def create_user(payload: dict = Depends(Validated(CreateUser))):
    # password fields never leave the service
    return {k: v for k, v in payload.items() if not k.startswith("password")}


@router.get("")
def list_users(query: dict = Depends(Validated(ListUsersQuery, source="query"))):
    return {
        "items": [],
        "limit": query.get("limit", 20),
        "offset": query.get("offset", 0),
        "search": query.get("search"),
    }


@router.get("/{user_id}")
def get_user(user_id: str, params: dict = Depends(Validated(UserPath, source="param"))):
    return {"id": params["user_id"]}
