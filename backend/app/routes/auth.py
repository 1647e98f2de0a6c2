from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from app.schemas.auth import MessageResponse, VerificationCodeRequest, VerificationCodeSubmission
from app.services.verification_service import VerificationResult, VerificationService, get_verification_service

router = APIRouter(prefix="/auth", tags=["auth"])

_FAILURES = {
    VerificationResult.NOT_FOUND: (
        status.HTTP_404_NOT_FOUND,
        "No verification code found for this email. Please request a new code.",
    ),
    VerificationResult.EXPIRED: (
        status.HTTP_410_GONE,
        "Verification code has expired. Please request a new code.",
    ),
    VerificationResult.MISMATCH: (status.HTTP_401_UNAUTHORIZED, "Invalid verification code"),
}


@router.post("/verification-code", response_model=MessageResponse)
async def send_verification_code(
    payload: VerificationCodeRequest,
    verification_service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    if not verification_service.email_service.is_configured():
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Email configuration not set up")

    issued = await verification_service.issue(payload.email)
    if not issued.delivered:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to send verification code")
    return MessageResponse(message="Verification code sent successfully")


@router.put("/verification-code", response_model=MessageResponse)
def verify_code(
    payload: VerificationCodeSubmission,
    verification_service: VerificationService = Depends(get_verification_service),
) -> MessageResponse:
    result = verification_service.validate(payload.email, payload.code)
    if result is not VerificationResult.OK:
        status_code, detail = _FAILURES[result]
        raise HTTPException(status_code=status_code, detail=detail)
    return MessageResponse(message="Verification code is valid")
