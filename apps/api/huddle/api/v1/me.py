from fastapi import APIRouter

from huddle.api.errors import http_error_from_service
from huddle.api.v1.auth import UserOut
from huddle.auth.deps import CurrentIdentity, DBSession
from huddle.services.exceptions import ServiceError
from huddle.services.lookups import get_user

router = APIRouter(prefix="/me", tags=["me"])


@router.get("", response_model=UserOut)
def me(identity: CurrentIdentity, db: DBSession):
    try:
        user = get_user(db, identity.user_id)
    except ServiceError as err:
        raise http_error_from_service(err) from err
    return UserOut.model_validate(user)
