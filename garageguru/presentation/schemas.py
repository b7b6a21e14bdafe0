"""
Request schemas

Pydantic models for every JSON payload the API accepts. Payloads are
validated here, before any manager runs, so a malformed request never
reaches the store.
"""

from decimal import Decimal
from typing import Annotated, List, Optional
from flask import request
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from garageguru.exceptions import PayloadValidationError

# Non-negative amount with at most two decimal places, as stored in Numeric(10, 2)
Money = Annotated[Decimal, Field(ge=0, max_digits=10, decimal_places=2)]


class RegisterRequest(BaseModel):
    email: str = Field(..., min_length=3, max_length=254, pattern=r'^[^@\s]+@[^@\s]+$')
    password: str = Field(..., min_length=6)
    activation_code: str = Field(..., min_length=1)
    name: Optional[str] = None
    garage_name: Optional[str] = None
    owner_name: Optional[str] = None
    phone: Optional[str] = None


class LoginRequest(BaseModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class GarageUpdate(BaseModel):
    model_config = ConfigDict(extra='forbid')

    name: Optional[str] = Field(None, min_length=1)
    owner_name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = Field(None, pattern=r'^[^@\s]+@[^@\s]+$')
    logo: Optional[str] = None


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, max_length=32)
    bike_number: str = Field(..., min_length=1, max_length=32)


class SparePartCreate(BaseModel):
    name: str = Field(..., min_length=1)
    part_number: str = Field(..., min_length=1, max_length=100)
    price: Money
    quantity: Optional[int] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    barcode: Optional[str] = Field(None, max_length=128)


class SparePartUpdate(BaseModel):
    model_config = ConfigDict(extra='forbid')

    name: Optional[str] = Field(None, min_length=1)
    part_number: Optional[str] = Field(None, min_length=1, max_length=100)
    price: Optional[Money] = None
    quantity: Optional[int] = None
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    barcode: Optional[str] = Field(None, max_length=128)


class JobCardLine(BaseModel):
    part_id: str = Field(..., min_length=1)
    quantity: int = Field(..., gt=0)
    # Only used when the part does not resolve in the garage
    name: Optional[str] = None
    unit_price: Optional[Money] = None


class JobCardCreate(BaseModel):
    customer_name: str = Field(..., min_length=1)
    phone: str = Field(..., min_length=1, max_length=32)
    bike_number: str = Field(..., min_length=1, max_length=32)
    complaint: str = Field(..., min_length=1)
    spare_parts: List[JobCardLine] = Field(default_factory=list)
    service_charge: Money = Decimal('0')


class JobCardUpdate(BaseModel):
    # status is deliberately absent: only invoice issuance completes a job
    model_config = ConfigDict(extra='forbid')

    complaint: Optional[str] = Field(None, min_length=1)
    customer_name: Optional[str] = Field(None, min_length=1)
    spare_parts: Optional[List[JobCardLine]] = None
    service_charge: Optional[Money] = None


class InvoiceCreate(BaseModel):
    job_card_id: str = Field(..., min_length=1)
    service_charge: Optional[Money] = None
    pdf_url: Optional[str] = None
    invoice_number: Optional[str] = Field(None, min_length=1, max_length=64)
    whatsapp_sent: bool = False


class InvoiceDeliveryUpdate(BaseModel):
    model_config = ConfigDict(extra='forbid')

    pdf_url: Optional[str] = None
    whatsapp_sent: Optional[bool] = None


def parse_payload(schema):
    """
    Validate the request's JSON body against ``schema``.

    Raises:
        PayloadValidationError: body missing, not an object, or schema violation
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise PayloadValidationError("Request body must be a JSON object")
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        errors = [
            {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
            for err in e.errors()
        ]
        raise PayloadValidationError("Request payload failed validation", errors=errors)


def patch_from(model, nullable=()) -> dict:
    """
    Only the fields the client actually sent, for partial updates.

    An explicit null clears a field only when it is listed in ``nullable``;
    otherwise it is treated as absent.
    """
    return {
        key: value
        for key, value in model.model_dump(exclude_unset=True).items()
        if value is not None or key in nullable
    }
