# elite_cards/routes/auth.py
"""
Shopify OAuth install and session endpoints.

GET /api/auth/shopify handles both legs of the handshake on one route: without
a `code` it redirects to Shopify, with a `code` it completes the install.
/api/auth/install and /api/auth/callback are the same flow split over two
routes.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from elite_cards.core.exceptions import AuthenticationError
from elite_cards.core.security import (
    OAUTH_STATE_COOKIE_NAME,
    clear_session_cookie,
    set_oauth_state_cookie,
    set_session_cookie,
)
from elite_cards.dependencies import get_auth_service, get_optional_session
from elite_cards.schemas.session import SessionClaims
from elite_cards.services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

COMBINED_CALLBACK_PATH = "/api/auth/shopify"
CALLBACK_PATH = "/api/auth/callback"


def _install_redirect(auth_service: AuthService, shop: Optional[str], callback_path: str) -> RedirectResponse:
    install = auth_service.begin_install(shop, callback_path)

    response = RedirectResponse(url=install.url, status_code=302)
    set_oauth_state_cookie(response, install.state)
    return response


async def _complete_install(request: Request, auth_service: AuthService) -> RedirectResponse:
    expected_state = request.cookies.get(OAUTH_STATE_COOKIE_NAME)
    try:
        result = await auth_service.complete_install(dict(request.query_params), expected_state=expected_state)
    except AuthenticationError as e:
        logger.error(f"Shopify OAuth failed: {e}")
        return RedirectResponse(url=auth_service.error_redirect_url, status_code=302)
    except Exception as e:
        logger.exception(f"Unexpected error completing Shopify OAuth: {e}")
        return RedirectResponse(url=auth_service.error_redirect_url, status_code=302)

    response = RedirectResponse(url=result.redirect_url, status_code=302)
    set_session_cookie(response, result.session_token)
    response.delete_cookie(OAUTH_STATE_COOKIE_NAME, path="/")
    return response


@router.get("/shopify")
async def shopify_oauth(
    request: Request,
    shop: Optional[str] = None,
    code: Optional[str] = None,
    auth_service: AuthService = Depends(get_auth_service)
):
    """Start the install when no code is present, otherwise complete it."""
    if not code:
        return _install_redirect(auth_service, shop, COMBINED_CALLBACK_PATH)
    return await _complete_install(request, auth_service)


@router.get("/install")
async def install(shop: Optional[str] = None, auth_service: AuthService = Depends(get_auth_service)):
    return _install_redirect(auth_service, shop, CALLBACK_PATH)


@router.get("/callback")
async def callback(request: Request, auth_service: AuthService = Depends(get_auth_service)):
    return await _complete_install(request, auth_service)


@router.get("/session")
async def get_session_info(session: Optional[SessionClaims] = Depends(get_optional_session)):
    if session is None:
        return {"session": None}
    return {"session": session.model_dump(by_alias=True, mode="json")}


@router.post("/logout")
async def logout():
    response = JSONResponse({"success": True})
    clear_session_cookie(response)
    return response
