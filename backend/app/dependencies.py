from fastapi import Header, HTTPException

from app.identity import Identity, Role


async def get_identity(
    x_user_id: str | None = Header(None),
    x_user_role: str | None = Header(None),
) -> Identity:
    # The gateway verifies the token and forwards the caller; we only parse it.
    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(status_code=401, detail="Missing user identity")
    try:
        role = Role((x_user_role or "").strip().upper())
    except ValueError:
        raise HTTPException(status_code=401, detail="Unknown user role") from None
    return Identity(user_id=user_id, role=role)
