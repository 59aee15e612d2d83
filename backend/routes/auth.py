from fastapi import APIRouter, HTTPException, Depends, Request
from pydantic import BaseModel
from datetime import datetime, timezone, timedelta
from database import db
from utils.auth import verify_password, create_access_token, get_current_user
from utils.error_codes import ErrorCode, create_error_response

router = APIRouter(prefix="/api/auth", tags=["auth"])

# تتبع محاولات تسجيل الدخول
login_attempts = {}  # {ip: {"count": int, "last_attempt": datetime, "blocked_until": datetime}}
MAX_LOGIN_ATTEMPTS = 5
BLOCK_DURATION_MINUTES = 15


def check_rate_limit(request: Request) -> bool:
    client_ip = request.client.host if request.client else "unknown"
    now = datetime.now(timezone.utc)

    if client_ip in login_attempts:
        data = login_attempts[client_ip]

        if data.get("blocked_until") and now < data["blocked_until"]:
            remaining = int((data["blocked_until"] - now).total_seconds() // 60)
            raise HTTPException(
                status_code=429,
                detail={
                    "error": "TOO_MANY_ATTEMPTS",
                    "message_ar": f"تم حظرك مؤقتاً. حاول بعد {remaining} دقيقة",
                    "message_en": f"Too many attempts. Try again in {remaining} minutes"
                }
            )

        if (now - data["last_attempt"]).total_seconds() > 300:
            login_attempts[client_ip] = {"count": 0, "last_attempt": now}

    return True


def record_failed_attempt(request: Request):
    client_ip = request.client.host if request.client else "unknown"
    now = datetime.now(timezone.utc)

    if client_ip not in login_attempts:
        login_attempts[client_ip] = {"count": 0, "last_attempt": now}

    login_attempts[client_ip]["count"] += 1
    login_attempts[client_ip]["last_attempt"] = now

    if login_attempts[client_ip]["count"] >= MAX_LOGIN_ATTEMPTS:
        login_attempts[client_ip]["blocked_until"] = now + timedelta(minutes=BLOCK_DURATION_MINUTES)


def clear_failed_attempts(request: Request):
    client_ip = request.client.host if request.client else "unknown"
    login_attempts.pop(client_ip, None)


class LoginRequest(BaseModel):
    username: str
    password: str


@router.post("/login")
async def login(req: LoginRequest, request: Request):
    check_rate_limit(request)

    user = await db.users.find_one({"username": req.username}, {"_id": 0})
    if not user or not verify_password(req.password, user.get("password_hash") or ""):
        record_failed_attempt(request)
        raise HTTPException(status_code=401, detail=create_error_response(ErrorCode.AUTH_INVALID_CREDENTIALS))
    if not user.get("is_active", True):
        raise HTTPException(status_code=403, detail=create_error_response(ErrorCode.AUTH_ACCOUNT_DISABLED))

    clear_failed_attempts(request)
    token = create_access_token({
        "user_id": user["id"],
        "role": user["role"],
        "username": user["username"],
        "full_name": user.get("full_name", ""),
    }, role=user["role"])

    return {
        "token": token,
        "user": {
            "id": user["id"],
            "username": user["username"],
            "full_name": user.get("full_name", ""),
            "role": user["role"],
        }
    }


@router.get("/me")
async def me(user=Depends(get_current_user)):
    return {
        "id": user.get("user_id"),
        "username": user.get("username"),
        "full_name": user.get("full_name"),
        "role": user.get("role"),
    }
