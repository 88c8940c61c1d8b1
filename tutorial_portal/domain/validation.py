"""Schema every release submission must satisfy, single or bulk."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

CPF_MIN_LENGTH = 11
CNPJ_MIN_LENGTH = 14

# Column widths of tutorial_releases
DOCUMENT_MAX_LENGTH = 32
ROLE_MAX_LENGTH = 128
TEXT_MAX_LENGTH = 255


class ReleaseSubmission(BaseModel):
    """Client and company data plus the tutorials to grant."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    client_name: str = Field(
        ..., min_length=1, max_length=TEXT_MAX_LENGTH, description="Client full name"
    )
    client_cpf: str = Field(
        ..., max_length=DOCUMENT_MAX_LENGTH, description="Client CPF (11 digits)"
    )
    client_email: EmailStr = Field(..., description="Client email address")
    client_phone: str | None = Field(
        None, max_length=DOCUMENT_MAX_LENGTH, description="Client phone"
    )
    company_name: str = Field(
        ..., min_length=1, max_length=TEXT_MAX_LENGTH, description="Company name"
    )
    company_document: str = Field(
        ..., max_length=DOCUMENT_MAX_LENGTH, description="Company CNPJ (14 digits)"
    )
    company_role: str = Field(
        ..., min_length=1, max_length=ROLE_MAX_LENGTH, description="Client role at the company"
    )
    tutorial_ids: list[str] = Field(..., description="Tutorials to grant, at least one")

    @field_validator("client_cpf")
    @classmethod
    def _check_cpf(cls, value: str) -> str:
        if len(value) < CPF_MIN_LENGTH:
            raise PydanticCustomError("cpf_invalid", "CPF deve ter pelo menos 11 caracteres")
        return value

    @field_validator("company_document")
    @classmethod
    def _check_cnpj(cls, value: str) -> str:
        if len(value) < CNPJ_MIN_LENGTH:
            raise PydanticCustomError("cnpj_required", "CNPJ é obrigatório")
        return value

    @field_validator("client_phone")
    @classmethod
    def _blank_phone_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("tutorial_ids")
    @classmethod
    def _check_tutorials(cls, value: list[str]) -> list[str]:
        cleaned = [item.strip() for item in value if item and item.strip()]
        if not cleaned:
            raise PydanticCustomError("tutorials_required", "Selecione pelo menos um tutorial")
        # Keep first occurrence order
        return list(dict.fromkeys(cleaned))
