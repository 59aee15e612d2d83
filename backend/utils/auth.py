from fastapi import HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from passlib.context import CryptContext
from datetime import datetime, timezone, timedelta
import os

from utils.error_codes import ErrorCode, create_error_response

SECRET_KEY = os.environ.get('JWT_SECRET', 'vcc-registry-dev-secret')
ALGORITHM = "HS256"

# مدة الجلسة حسب الدور (بالساعات)
TOKEN_EXPIRE_HOURS = {
    "admin": 12,
    "operator": 8,
}
DEFAULT_TOKEN_EXPIRE = 4

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
security = HTTPBearer()


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def create_access_token(data: dict, role: str = "operator") -> str:
    """إنشاء توكن مع مدة صلاحية حسب الدور"""
    to_encode = data.copy()
    expire_hours = TOKEN_EXPIRE_HOURS.get(role, DEFAULT_TOKEN_EXPIRE)
    to_encode["exp"] = datetime.now(timezone.utc) + timedelta(hours=expire_hours)
    to_encode["iat"] = datetime.now(timezone.utc)
    to_encode["jti"] = os.urandom(16).hex()
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(security)):
    """التحقق من التوكن وحالة الحساب"""
    try:
        payload = jwt.decode(credentials.credentials, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError:
        raise HTTPException(status_code=401, detail=create_error_response(ErrorCode.AUTH_TOKEN_INVALID))

    from database import db
    user_id = payload.get("user_id")
    if user_id:
        user = await db.users.find_one({"id": user_id}, {"is_active": 1})
        if user and not user.get("is_active", True):
            raise HTTPException(status_code=401, detail=create_error_response(ErrorCode.AUTH_ACCOUNT_DISABLED))

    return payload


def require_roles(*roles):
    async def checker(user=Depends(get_current_user)):
        if user.get('role') not in roles:
            raise HTTPException(status_code=403, detail="Access denied for your role")
        return user
    return checker
