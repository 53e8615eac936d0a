from typing import Optional

from pydantic import BaseModel


class CompanySettingsUpdate(BaseModel):
    company_title: str
    company_slogan: str = ""


class WhatsAppSettingsUpdate(BaseModel):
    whatsapp_number: str
    whatsapp_notifications: bool = True


class PublicSettings(BaseModel):
    company_title: str
    company_slogan: str
    logo_url: str
    favicon_url: Optional[str] = None
