"""
Pydantic schemas for webhook events.

This module contains:
- Event: the top-level event delivered by the platform
- EventData: the object the event is about, plus changed attributes
- EventRequest: the API request that caused the event, if any

Models are frozen; unknown fields are kept so newer platform fields do not
break parsing.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventData(BaseModel):
    """
    Payload of an event.

    `object` is the resource the event describes (a charge, an invoice, ...),
    kept as a plain mapping because its shape depends on the event type.
    """
    object: Optional[Dict[str, Any]] = Field(
        None,
        description="Resource the event is about"
    )
    previous_attributes: Optional[Dict[str, Any]] = Field(
        None,
        description="Previous values of changed attributes (*.updated events)"
    )

    model_config = ConfigDict(frozen=True, extra="allow")


class EventRequest(BaseModel):
    """API request that triggered the event."""
    id: Optional[str] = Field(None, description="Request identifier")
    idempotency_key: Optional[str] = Field(
        None,
        description="Idempotency key sent with the request"
    )

    model_config = ConfigDict(frozen=True, extra="allow")


class Event(BaseModel):
    """
    Webhook event.

    Validates:
    - id: non-empty string
    - type: non-empty discriminator such as "charge.succeeded"
    - api_version: optional, compared against the expected version on demand
    """
    id: str = Field(..., min_length=1, description="Unique event identifier")
    object: str = Field(default="event", description="Object type, always 'event'")
    type: str = Field(..., min_length=1, description="Event type")
    api_version: Optional[str] = Field(
        None,
        description="API version used to render `data`"
    )
    data: EventData = Field(
        default_factory=EventData,
        description="Object the event is about"
    )
    account: Optional[str] = Field(None, description="Connected account, if any")
    created: Optional[int] = Field(None, description="Creation time (Unix seconds)")
    livemode: Optional[bool] = Field(None, description="Live or test mode")
    pending_webhooks: Optional[int] = Field(
        None,
        ge=0,
        description="Webhook deliveries not yet acknowledged"
    )
    request: Optional[EventRequest] = Field(
        None,
        description="API request that caused the event"
    )

    model_config = ConfigDict(
        frozen=True,
        extra="allow",
        json_schema_extra={
            "examples": [
                {
                    "id": "evt_1",
                    "object": "event",
                    "type": "charge.succeeded",
                    "api_version": "2020-08-27",
                    "created": 1600000000,
                    "livemode": False,
                    "data": {"object": {"id": "ch_1", "object": "charge"}},
                }
            ]
        },
    )
