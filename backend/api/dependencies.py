from fastapi import HTTPException, Request

from backend.srs.session import SessionController


def get_controller(request: Request) -> SessionController:
    """Return the app's session controller (created in the lifespan)."""
    controller = getattr(request.app.state, "controller", None)
    if controller is None:
        raise HTTPException(status_code=503, detail="Quiz engine is not ready")
    return controller
