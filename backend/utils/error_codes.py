# Error Codes System for the VCC registry
# نظام رموز الأخطاء

from datetime import datetime, timezone
import uuid

class ErrorCode:
    """نظام رموز الأخطاء الموحد"""

    # Authentication Errors (1xxx)
    AUTH_INVALID_CREDENTIALS = ("E1001", "Invalid username or password", "اسم المستخدم أو كلمة المرور غير صحيحة")
    AUTH_TOKEN_INVALID = ("E1003", "Invalid or corrupted token", "رمز الجلسة غير صالح")
    AUTH_ACCOUNT_DISABLED = ("E1005", "Account is disabled", "الحساب معطل")

    # Vehicle Errors (2xxx)
    VEHICLE_NOT_FOUND = ("E2001", "Vehicle not found", "المركبة غير موجودة")
    VEHICLE_DUPLICATE_VCC = ("E2002", "VCC number already exists", "رقم شهادة المطابقة موجود مسبقاً")

    # Certificate Errors (3xxx)
    CERTIFICATE_GENERATION_FAILED = ("E3001", "Certificate could not be generated", "تعذر إنشاء الشهادة")
    CERTIFICATE_PREVIEW_UNAVAILABLE = ("E3002", "No preview available", "المعاينة غير متاحة")


def create_error_response(error_code: tuple, details: str = None, details_ar: str = None):
    """
    إنشاء استجابة خطأ موحدة

    Args:
        error_code: tuple من (code, message_en, message_ar)
        details: تفاصيل إضافية بالإنجليزية
        details_ar: تفاصيل إضافية بالعربية

    Returns:
        dict: استجابة الخطأ الموحدة
    """
    code, msg_en, msg_ar = error_code

    # معرف فريد للخطأ
    error_id = f"{code}-{datetime.now(timezone.utc).strftime('%Y%m%d%H%M%S')}-{uuid.uuid4().hex[:6].upper()}"

    return {
        "error": True,
        "error_code": code,
        "error_id": error_id,
        "message": msg_en,
        "message_ar": msg_ar,
        "details": details,
        "details_ar": details_ar,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "support_message": f"If this error persists, contact support with reference: {error_id}",
        "support_message_ar": f"إذا استمر هذا الخطأ، تواصل مع الدعم مع الرقم المرجعي: {error_id}"
    }
