"""
Google OAuth Routes
One-time authorization of the clinic Google account used for Meet links
"""

import json
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ..errors import ProviderError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["google-auth"])


def _google_adapter(request: Request):
    adapter = getattr(request.app.state, "meeting_adapter", None)
    if adapter is None or not hasattr(adapter, "authorization_url"):
        raise HTTPException(status_code=400, detail="Google Meet provider is not enabled")
    return adapter


@router.get("/auth")
async def start_google_oauth(request: Request):
    """Redirect to Google's consent screen"""
    adapter = _google_adapter(request)
    try:
        auth_url = adapter.authorization_url()
    except ProviderError as e:
        raise HTTPException(status_code=500, detail=e.message) from e

    logger.info("🔐 Google OAuth initiated")
    return RedirectResponse(auth_url)


@router.get("/oauth2callback", response_class=HTMLResponse)
async def google_oauth_callback(request: Request, code: Optional[str] = None):
    """Exchange the code and install the tokens on the running adapter"""
    adapter = _google_adapter(request)
    if not code:
        raise HTTPException(status_code=400, detail="No authorization code provided")

    try:
        tokens = await adapter.exchange_code(code)
    except ProviderError as e:
        logger.error(f"❌ Google OAuth callback error: {e.message}")
        raise HTTPException(status_code=400, detail="Failed to exchange authorization code") from e

    # Printed so it can be copied into GOOGLE_TOKEN for the next restart
    logger.info(f"🔑 GOOGLE_TOKEN={json.dumps(tokens)}")

    return HTMLResponse(
        "<p>Autenticación completada. Ya puedes cerrar esta ventana y volver a la aplicación.</p>"
    )
