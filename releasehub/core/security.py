import logging
import secrets

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials

from releasehub.core.config import AppSettings

basic_auth = HTTPBasic(realm="releasehub")


def get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def admin_access(
    request: Request,
    credentials: HTTPBasicCredentials = Depends(basic_auth),
) -> str:
    app_settings = get_settings(request)
    expected_user = app_settings.ADMIN_USERNAME.encode("utf-8")
    expected_password = app_settings.ADMIN_PASSWORD.encode("utf-8")
    user_ok = secrets.compare_digest(credentials.username.encode("utf-8"), expected_user)
    password_ok = secrets.compare_digest(credentials.password.encode("utf-8"), expected_password)
    # an unset password never authenticates
    if not (user_ok and password_ok and expected_password):
        logging.warning("[auth] rejected admin credentials for user=%s", credentials.username)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": 'Basic realm="releasehub"'},
        )
    return credentials.username
