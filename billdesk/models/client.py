from __future__ import annotations
from typing import Optional

from pydantic import EmailStr

from .common import CamelModel


class ClientDetails(CamelModel):
    company_name: str = ""
    contact_name: str = ""
    email: str = ""
    phone: str = ""
    address_line1: str = ""
    address_line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""
    gstin: str = ""  # tax registration


class ClientProfile(CamelModel):
    """Directory entry. Read-only reference data."""
    id: str
    company_name: str
    contact_name: str = ""
    email: EmailStr
    phone: str = ""
    address_line1: str
    address_line2: Optional[str] = None
    city: str
    state: str
    postal_code: str
    country: str
    gstin: Optional[str] = None

    def to_details(self) -> ClientDetails:
        return ClientDetails(
            company_name=self.company_name,
            contact_name=self.contact_name,
            email=str(self.email),
            phone=self.phone,
            address_line1=self.address_line1,
            address_line2=self.address_line2 or "",
            city=self.city,
            state=self.state,
            postal_code=self.postal_code,
            country=self.country,
            gstin=self.gstin or "",
        )
