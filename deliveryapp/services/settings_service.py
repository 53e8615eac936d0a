import logging
import time
from typing import Dict, Iterable, Optional

from deliveryapp.store.errors import StorageUploadError

logger = logging.getLogger(__name__)

COMPANY_TITLE_KEY = "company_title"
COMPANY_SLOGAN_KEY = "company_slogan"
LOGO_URL_KEY = "logo_url"
FAVICON_URL_KEY = "favicon_url"
WHATSAPP_NUMBER_KEY = "whatsapp_number"
WHATSAPP_NOTIFICATIONS_KEY = "whatsapp_notifications"

COMPANY_DEFAULTS = {
    COMPANY_TITLE_KEY: "Delivery App",
    COMPANY_SLOGAN_KEY: "O melhor da cidade",
    LOGO_URL_KEY: "",
}


def get_setting(store, key: str, default: Optional[str] = None) -> Optional[str]:
    row = store.maybe_single("settings", key=key)
    if row is None or row.value is None:
        return default
    return row.value


def get_settings(store, keys: Iterable[str]) -> Dict[str, str]:
    rows = store.select("settings", in_={"key": list(keys)})
    return {row.key: row.value for row in rows if row.value is not None}


def save_setting(store, key: str, value: str):
    return store.upsert("settings", {"key": key, "value": value}, on_conflict="key")[0]


# -------------------------
# COMPANY
# -------------------------

def get_company_settings(store) -> dict:
    values = get_settings(store, COMPANY_DEFAULTS)
    # blank values fall back to the defaults, same as missing ones
    return {key: values.get(key) or default for key, default in COMPANY_DEFAULTS.items()}


def save_company_settings(store, company_title: str, company_slogan: str):
    with store.transaction():
        save_setting(store, COMPANY_TITLE_KEY, company_title.strip())
        save_setting(store, COMPANY_SLOGAN_KEY, company_slogan.strip())
    logger.info("Company settings updated")


def get_public_settings(store) -> dict:
    public = get_company_settings(store)
    public[FAVICON_URL_KEY] = get_setting(store, FAVICON_URL_KEY)
    return public


# -------------------------
# WHATSAPP
# -------------------------

def get_whatsapp_settings(store) -> dict:
    values = get_settings(store, [WHATSAPP_NUMBER_KEY, WHATSAPP_NOTIFICATIONS_KEY])
    return {
        WHATSAPP_NUMBER_KEY: values.get(WHATSAPP_NUMBER_KEY, ""),
        # stored as text; anything but "false" counts as enabled
        WHATSAPP_NOTIFICATIONS_KEY: values.get(WHATSAPP_NOTIFICATIONS_KEY, "true") != "false",
    }


def save_whatsapp_settings(store, whatsapp_number: str, notifications: bool):
    with store.transaction():
        save_setting(store, WHATSAPP_NUMBER_KEY, whatsapp_number.strip())
        save_setting(store, WHATSAPP_NOTIFICATIONS_KEY, "true" if notifications else "false")
    logger.info("WhatsApp settings updated")


def whatsapp_notifications_enabled(store) -> bool:
    return get_whatsapp_settings(store)[WHATSAPP_NOTIFICATIONS_KEY]


# -------------------------
# BRANDING IMAGES
# -------------------------

def _extension(filename: Optional[str], fallback: str) -> str:
    if filename and "." in filename:
        return filename.rsplit(".", 1)[-1].lower()
    return fallback


def _upload_branding(store, blobs, key: str, prefix: str, data: bytes,
                     filename: Optional[str], content_type: Optional[str], fallback_ext: str) -> str:
    path = f"{prefix}-{int(time.time() * 1000)}.{_extension(filename, fallback_ext)}"

    if not blobs.upload(path, data, content_type=content_type, overwrite=True):
        raise StorageUploadError(path)

    url = blobs.get_public_url(path)
    save_setting(store, key, url)
    logger.info(f"{key} set to {path}")
    return url


def upload_logo(store, blobs, data: bytes, filename: Optional[str] = None,
                content_type: Optional[str] = None) -> str:
    return _upload_branding(store, blobs, LOGO_URL_KEY, "logo", data, filename, content_type, "png")


def upload_favicon(store, blobs, data: bytes, filename: Optional[str] = None,
                   content_type: Optional[str] = None) -> str:
    return _upload_branding(store, blobs, FAVICON_URL_KEY, "favicon", data, filename, content_type, "ico")
