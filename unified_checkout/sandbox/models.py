from typing import Any, Dict, List, Union
from pydantic import BaseModel, Field

# module unified_checkout.sandbox.models
class CaptureContextRequest(BaseModel):
    allowedCardNetworks: List[str] = Field(default_factory=list)
    allowedPaymentTypes: List[str] = Field(default_factory=list)
    amount: str
    currency: str
    country: str = ""
    locale: str = ""
    clientVersion: str = ""
    targetOrigins: List[str] = Field(default_factory=list)


class ChargeRequest(BaseModel):
    transientToken: Union[str, Dict[str, Any]]
    amount: str
    currency: str
