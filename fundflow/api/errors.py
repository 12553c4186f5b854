"""Map domain exceptions to HTTP responses with localized messages"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from fundflow.domain.exceptions import (
    DomainException,
    InsufficientFundsError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

MESSAGES = {
    "en": {
        "validation_error": "The request contains invalid values.",
        "invalid_amount": "Amount must be greater than zero.",
        "amount_out_of_range": "Amount is larger than the supported maximum.",
        "invalid_percentage": "Percentages must be between 0 and 100.",
        "invalid_transfer": "Choose a valid source and destination fund.",
        "same_fund": "Source and destination fund must be different.",
        "insufficient_funds": "Insufficient funds for this operation.",
        "not_found": "The requested record was not found.",
        "persistence_error": "Something went wrong. Please try again.",
        "domain_error": "Something went wrong. Please try again.",
    },
    "tr": {
        "validation_error": "İstek geçersiz değerler içeriyor.",
        "invalid_amount": "Tutar sıfırdan büyük olmalıdır.",
        "amount_out_of_range": "Tutar desteklenen üst sınırı aşıyor.",
        "invalid_percentage": "Yüzdeler 0 ile 100 arasında olmalıdır.",
        "invalid_transfer": "Geçerli bir kaynak ve hedef fon seçin.",
        "same_fund": "Kaynak ve hedef fon farklı olmalıdır.",
        "insufficient_funds": "Bu işlem için yetersiz bakiye.",
        "not_found": "İstenen kayıt bulunamadı.",
        "persistence_error": "Bir hata oluştu. Lütfen tekrar deneyin.",
        "domain_error": "Bir hata oluştu. Lütfen tekrar deneyin.",
    },
}


def language_for(request: Request) -> str:
    """Turkish for any tr* Accept-Language, English otherwise"""
    header = request.headers.get("accept-language", "")
    return "tr" if header.strip().lower().startswith("tr") else "en"


def localized_message(code: str, language: str) -> str:
    messages = MESSAGES.get(language, MESSAGES["en"])
    return messages.get(code, messages["domain_error"])


def status_for(exc: DomainException) -> int:
    if isinstance(exc, ValidationError):
        return 422
    if isinstance(exc, InsufficientFundsError):
        return 409
    if isinstance(exc, NotFoundError):
        return 404
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_for(exc)
    request_id = getattr(request.state, "request_id", "unknown")
    if status_code >= 500:
        logger.error(f"Unhandled domain error: {exc}", extra={"request_id": request_id, "code": exc.code})
        code = exc.code if exc.code == "persistence_error" else "domain_error"
    else:
        logger.warning(f"Request rejected: {exc}", extra={"request_id": request_id, "code": exc.code, "context": exc.context})
        code = exc.code

    return JSONResponse(
        status_code=status_code,
        content={"detail": localized_message(code, language_for(request)), "code": code},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
