from __future__ import annotations

from pydantic import BaseModel, Field


class OrganizationAddress(BaseModel):
    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""


class OrganizationContact(BaseModel):
    email: str = ""
    phone: str = ""
    website: str = ""


class Organization(BaseModel):
    display_name: str = "Aurora Digital Solutions"
    tagline: str = ""
    tax_registration: str = ""
    address: OrganizationAddress = Field(default_factory=OrganizationAddress)
    contact: OrganizationContact = Field(default_factory=OrganizationContact)
