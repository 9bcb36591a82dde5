from __future__ import annotations

import json
import logging
from typing import Any, Optional

from openai import OpenAI
from pydantic import BaseModel, Field, ValidationError as PydanticValidationError

from stockcount.config import Settings
from stockcount.errors import ValidationServiceError

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "You are an AI assistant that validates inventory data entries."

USER_PROMPT = """
Analyze the following inventory data and determine if it is valid.
Identify any potential errors or inconsistencies in the data.

{payload}

Respond with a JSON object of the form {{"isValid": boolean, "errors": [string]}}.
Be concise and specific in your error messages.
"""


class ValidationRequest(BaseModel):
    code: str
    description: str
    physical_count: int = Field(alias="physicalCount")
    system_count: int = Field(alias="systemCount")
    branch: str

    model_config = {"populate_by_name": True}


class ValidationResult(BaseModel):
    is_valid: bool = Field(alias="isValid")
    errors: list[str] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


def local_checks(request: ValidationRequest) -> list[str]:
    errors = []
    if not request.code.strip():
        errors.append("Product code is required.")
    if not request.description.strip():
        errors.append("Product description is required.")
    if request.physical_count < 0:
        errors.append("Physical count cannot be negative.")
    if request.system_count < 0:
        errors.append("System count cannot be negative.")
    if not request.branch.strip():
        errors.append("Branch is required.")
    return errors


def build_client(settings: Settings) -> Optional[OpenAI]:
    if not settings.ai_enabled:
        return None
    return OpenAI(
        api_key=settings.openai_api_key,
        timeout=settings.ai_timeout_seconds,
        max_retries=1,
    )


def validate_inventory_data(
    request: ValidationRequest,
    settings: Settings,
    client: Any = None,
) -> ValidationResult:
    """
    Check one inventory entry before it is admitted.

    Local boundary checks run first; the LLM is only asked when they pass and
    a client is available. Failures of the remote call raise
    ValidationServiceError with the underlying message.
    """
    errors = local_checks(request)
    if errors:
        return ValidationResult(is_valid=False, errors=errors)

    client = client or build_client(settings)
    if client is None:
        logger.warning("OPENAI_API_KEY not configured - AI validation skipped")
        return ValidationResult(is_valid=True, errors=[])

    payload = json.dumps(request.model_dump(by_alias=True), indent=2, ensure_ascii=False)
    try:
        response = client.chat.completions.create(
            model=settings.ai_model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": USER_PROMPT.format(payload=payload)},
            ],
            response_format={"type": "json_object"},
            temperature=0,
        )
        content = response.choices[0].message.content or ""
        result = ValidationResult.model_validate_json(content)
    except PydanticValidationError as e:
        logger.error("AI validation returned an unexpected payload: %s", e)
        raise ValidationServiceError(f"Unexpected validation response: {e}") from e
    except Exception as e:
        logger.error("AI validation failed: %s", e)
        raise ValidationServiceError(f"Failed to validate inventory data: {e}") from e

    logger.info("AI validation for %s: valid=%s errors=%d", request.code, result.is_valid, len(result.errors))
    return result
