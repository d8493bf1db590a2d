"""Pydantic schemas for API request and response validation."""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..webhook.models import SurveyWebhookConfig


# ============================================================================
# Common/Shared Schemas
# ============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error message")
    detail: Optional[Union[str, List[Dict[str, Any]]]] = Field(
        None, description="Additional error details, or the list of validation errors"
    )


class HealthResponse(BaseModel):
    """Service health."""

    status: str
    version: str
    database: str
    host_backend: str


# ============================================================================
# Event Schemas
# ============================================================================

class SurveyCompletedRequest(BaseModel):
    """Survey completion notification raised by the survey host."""

    survey_id: int = Field(..., ge=1, description="Survey that was completed")
    response_id: int = Field(..., ge=1, description="The finalized response")


# ============================================================================
# Settings Schemas
# ============================================================================

class GlobalSettings(BaseModel):
    """Global plugin settings, used when a survey does not override them."""

    default_url: str = Field("", description="Webhook URL used when a survey has none")
    default_auth_token: str = Field("", description="API token used when a survey has none")
    debug: bool = Field(False, description="Render a debug report after each dispatch")


class GlobalSettingsUpdate(BaseModel):
    """Partial update of the global settings; omitted fields are kept."""

    default_url: Optional[str] = None
    default_auth_token: Optional[str] = None
    debug: Optional[bool] = None


class SurveySettings(BaseModel):
    """Webhook settings of a single survey."""

    survey_id: int
    enabled: bool = False
    webhook_urls: str = Field("", description="One webhook URL per line")
    auth_token: str = Field("", description="Overrides the default API token")


class SurveySettingsUpdate(BaseModel):
    """Partial update of a survey's settings; omitted fields are kept."""

    enabled: Optional[bool] = None
    webhook_urls: Optional[Union[str, List[str]]] = Field(
        None, description="One URL per line, or a list of URLs"
    )
    auth_token: Optional[str] = None

    @field_validator("webhook_urls")
    @classmethod
    def join_url_list(cls, v):
        """Store URL lists in the same one-per-line form the settings form uses."""
        if isinstance(v, list):
            return "\n".join(v)
        return v


class EffectiveWebhookConfig(SurveyWebhookConfig):
    """Configuration a dispatch for this survey would use right now."""

    survey_id: int
