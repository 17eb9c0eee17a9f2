#src/Controller/deps.py

"""
Shared FastAPI dependencies.

- get_current_user: admin caller identified by the X-Account-ID header
- get_owned_device: device lookup with ownership check and audit logging
- get_session_device: device request authenticated by session id + hash
- get_remote_ip: client address, honouring reverse proxy headers
"""

from typing import Optional
from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from src.Core.exceptions import NoSessionException
from src.Core.log_ws import audit
from src.DB.database import get_db
from src.Models.device import Device
from src.Models.user import User
from src.Repositories import device as device_repo
from src.Repositories import session as session_repo
from src.Repositories import user as user_repo
from src.Schemas.ra import SessionDevice


ALLOWED_ROLES = {"user", "admin"}


def get_remote_ip(request: Request) -> Optional[str]:
    forwarded = (request.headers.get("X-Forwarded-For") or "").strip()
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = (request.headers.get("X-Real-IP") or "").strip()
    if real_ip:
        return real_ip
    if request.client and request.client.host:
        return request.client.host
    return None


def get_current_user(
    x_account_id: Optional[str] = Header(None, alias="X-Account-ID"),
    db: Session = Depends(get_db)
) -> User:
    """
    Resolve the calling admin account.

    Raises:
        401: Header missing or unknown account
        403: Account role may not manage devices
    """
    if not x_account_id or not x_account_id.strip().isdigit():
        raise HTTPException(status_code=401, detail="Missing or invalid X-Account-ID")

    user = user_repo.get_user_by_id(db, int(x_account_id))
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown account")
    if user.role not in ALLOWED_ROLES:
        raise HTTPException(status_code=403, detail="Insufficient role")
    return user


def get_owned_device(
    device_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
) -> Device:
    """
    Load a device the caller owns.

    Raises:
        404: Device does not exist
        403: Device belongs to another user
    Both cases are written to the audit log.
    """
    device = device_repo.get_device_by_id(db, device_id)
    if device is None:
        audit(
            f"User #{user.id} {user.username} ({get_remote_ip(request)}) "
            f"tried to access missing device {device_id}",
            "error"
        )
        raise HTTPException(status_code=404, detail=f"Device '{device_id}' not found")

    if device.user_id != user.id:
        audit(
            f"User #{user.id} {user.username} ({get_remote_ip(request)}) "
            f"tried to access foreign device {device_id}",
            "error"
        )
        raise HTTPException(status_code=403, detail="Access to this device is not allowed")

    return device


def get_session_device(
    x_session_id: Optional[str] = Header(None, alias="X-Session-Id"),
    x_session_hash: Optional[str] = Header(None, alias="X-Session-Hash"),
    db: Session = Depends(get_db)
) -> SessionDevice:
    """
    Authenticate a device request.

    Raises:
        401: Headers missing, session unknown, bad hash or expired session
    """
    if not x_session_id or not x_session_id.strip().isdigit() or not x_session_hash:
        raise HTTPException(status_code=401, detail="Missing session headers")

    try:
        return session_repo.check_session(db, int(x_session_id), x_session_hash)
    except NoSessionException as e:
        print(f"[SESSION] Rejected session {x_session_id}: {e.reason}")
        raise HTTPException(status_code=401, detail=e.reason)
