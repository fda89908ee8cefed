"""Configuration management for the AulaGuard service.

This module defines the Pydantic settings and data models used throughout
the application. It handles environment variable loading and the structured
payloads accepted by the API.
"""

from pydantic import BaseModel
from typing import Dict, Any, List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Global application settings loaded from environment variables.

    Attributes:
        PROJECT_NAME (str): The name of the application.
        POLICY_PATH (str): Path to the YAML sanitization policy.
        LOG_LEVEL (str): Root logging level for the API process.
    """
    PROJECT_NAME: str = "AulaGuard"

    POLICY_PATH: str = "aulaguard.yaml"
    LOG_LEVEL: str = "INFO"

    # This allows loading from a .env file automatically
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore"
    )

class SanitizeRequest(BaseModel):
    """A rich-text fragment to sanitize. A null `html` is treated as empty."""
    html: Optional[str] = None

class TextRequest(BaseModel):
    """A plain-text field to strip of markup."""
    text: Optional[str] = None

class PayloadRequest(BaseModel):
    """A record whose rich-text fields must be sanitized.

    Attributes:
        payload (Dict[str, Any]): The record, possibly nested.
        fields (Optional[List[str]]): Keys holding rich text. When None,
            every string value is sanitized.
    """
    payload: Dict[str, Any]
    fields: Optional[List[str]] = None

# --- Document models ---
# Only the fields read by the document placeholders are modelled.

class Tutor(BaseModel):
    full_name: Optional[str] = None
    nif: Optional[str] = None

class StudentInfo(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    tutors: List[Tutor] = []

class AcademyProfile(BaseModel):
    public_name: Optional[str] = None
    contact_email: Optional[str] = None
    sepa_creditor_name: Optional[str] = None
    address: Optional[str] = None
    postal_code: Optional[str] = None
    population: Optional[str] = None
    nif: Optional[str] = None

class DocumentSection(BaseModel):
    """One section of an academy document (terms, data protection, authorization)."""
    title: Optional[str] = None
    text: Optional[str] = None

class RenderedSection(BaseModel):
    """A section ready for a markup sink: escaped title, sanitized body."""
    title: str
    html: str

class DocumentRequest(BaseModel):
    """Represents a document rendering request.

    Attributes:
        academy (AcademyProfile): Source of the ACADEMY_* placeholders.
        student (Optional[StudentInfo]): Source of the STUDENT_* and TUTOR_*
            placeholders. Those render empty when omitted.
        sections (List[DocumentSection]): Sections to render, in order.
    """
    academy: AcademyProfile
    student: Optional[StudentInfo] = None
    sections: List[DocumentSection]

settings = Settings()
