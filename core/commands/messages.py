"""
OrderDesk Command Layer — Localized Messages
=============================================
User-facing messages for every ReasonCode, in English and Arabic.

The locale is an explicit option (OrderDeskOptions.locale); unknown
locales fall back to English.
"""

from __future__ import annotations

from typing import Dict

from core.commands.rejection import ReasonCode

DEFAULT_LOCALE = "en"

_CATALOGUES: Dict[str, Dict[str, str]] = {
    "en": {
        ReasonCode.INVALID_ID: "A valid {entity} id is required.",
        ReasonCode.CLIENT_REQUIRED: "A client is required.",
        ReasonCode.NAME_REQUIRED: "Name is required.",
        ReasonCode.ITEMS_REQUIRED: "At least one item is required.",
        ReasonCode.INVALID_QUANTITY: "Item {index}: quantity must be greater than zero.",
        ReasonCode.INVALID_UNIT_PRICE: "Item {index}: unit price must be greater than zero.",
        ReasonCode.ITEM_NAME_REQUIRED: "Item {index}: a product name is required.",
        ReasonCode.INVALID_PRICE: "Price must not be negative.",
        ReasonCode.INVALID_DISCOUNT: "Discount must be between 0 and 100 percent.",
        ReasonCode.INVALID_TAX: "Tax must be between 0 and 100 percent.",
        ReasonCode.INVALID_ORDER_STATUS: "Unknown order status '{status}'.",
        ReasonCode.INVALID_INVOICE_STATUS: "Unknown invoice status '{status}'.",
        ReasonCode.ORDER_COMPLETED: "Completed orders cannot be canceled.",
        ReasonCode.INVALID_PAYMENT_AMOUNT: "Payment amount must be greater than zero.",
        ReasonCode.INVALID_PAYMENT_METHOD: "Unknown payment method '{method}'.",
        ReasonCode.INVALID_DEBT_ADJUSTMENT: "Debt adjustment must not be zero.",
        ReasonCode.CLIENT_HAS_ACTIVE_ORDERS: (
            "This client still has active orders. Cancel them before deleting the client."
        ),
        ReasonCode.PRODUCT_IN_USE: (
            "This product is used by active orders and cannot be deleted."
        ),
        ReasonCode.CLIENT_STILL_REFERENCED: (
            "This client is still referenced by invoices or other records."
        ),
    },
    "ar": {
        ReasonCode.INVALID_ID: "معرّف {entity} غير صالح.",
        ReasonCode.CLIENT_REQUIRED: "يجب اختيار عميل.",
        ReasonCode.NAME_REQUIRED: "الاسم مطلوب.",
        ReasonCode.ITEMS_REQUIRED: "يجب إضافة عنصر واحد على الأقل.",
        ReasonCode.INVALID_QUANTITY: "العنصر {index}: يجب أن تكون الكمية أكبر من صفر.",
        ReasonCode.INVALID_UNIT_PRICE: "العنصر {index}: يجب أن يكون سعر الوحدة أكبر من صفر.",
        ReasonCode.ITEM_NAME_REQUIRED: "العنصر {index}: اسم المنتج مطلوب.",
        ReasonCode.INVALID_PRICE: "لا يمكن أن يكون السعر سالباً.",
        ReasonCode.INVALID_DISCOUNT: "يجب أن تكون نسبة الخصم بين 0 و 100.",
        ReasonCode.INVALID_TAX: "يجب أن تكون نسبة الضريبة بين 0 و 100.",
        ReasonCode.INVALID_ORDER_STATUS: "حالة الطلب '{status}' غير معروفة.",
        ReasonCode.INVALID_INVOICE_STATUS: "حالة الفاتورة '{status}' غير معروفة.",
        ReasonCode.ORDER_COMPLETED: "لا يمكن إلغاء طلب مكتمل.",
        ReasonCode.INVALID_PAYMENT_AMOUNT: "يجب أن يكون مبلغ الدفع أكبر من صفر.",
        ReasonCode.INVALID_PAYMENT_METHOD: "طريقة الدفع '{method}' غير معروفة.",
        ReasonCode.INVALID_DEBT_ADJUSTMENT: "يجب ألا يكون تعديل الدين صفراً.",
        ReasonCode.CLIENT_HAS_ACTIVE_ORDERS: (
            "لدى هذا العميل طلبات نشطة. قم بإلغائها قبل حذف العميل."
        ),
        ReasonCode.PRODUCT_IN_USE: "هذا المنتج مستخدم في طلبات نشطة ولا يمكن حذفه.",
        ReasonCode.CLIENT_STILL_REFERENCED: "هذا العميل مرتبط بفواتير أو سجلات أخرى.",
    },
}


def supported_locales() -> tuple[str, ...]:
    return tuple(sorted(_CATALOGUES))


def message_for(code: str, locale: str = DEFAULT_LOCALE, **params) -> str:
    """Render the message for a rejection code in the given locale."""
    catalogue = _CATALOGUES.get(locale) or _CATALOGUES[DEFAULT_LOCALE]
    template = catalogue.get(code) or _CATALOGUES[DEFAULT_LOCALE].get(code)
    if template is None:
        return code
    return template.format(**params)
