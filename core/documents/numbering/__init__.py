from core.documents.numbering.engine import next_document_number
from core.documents.numbering.models import (
    INVOICE_NUMBERING,
    ORDER_NUMBERING,
    NumberingPolicy,
)

__all__ = [
    "INVOICE_NUMBERING",
    "ORDER_NUMBERING",
    "NumberingPolicy",
    "next_document_number",
]
