from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from deliveryapp.dependencies.admin import require_admin
from deliveryapp.dependencies.context import get_blob_store, get_store
from deliveryapp.notifications.popup import popup
from deliveryapp.schemas.settings_schemas import CompanySettingsUpdate, WhatsAppSettingsUpdate
from deliveryapp.services import settings_service
from deliveryapp.store.errors import StorageUploadError, StoreError

router = APIRouter()


# -------------------------
# COMPANY
# -------------------------

@router.get("/company")
def get_company_settings(admin=Depends(require_admin), store=Depends(get_store)):
    try:
        return settings_service.get_company_settings(store)
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar as configurações.")


@router.put("/company")
def update_company_settings(data: CompanySettingsUpdate,
                            admin=Depends(require_admin), store=Depends(get_store)):
    if not data.company_title.strip():
        raise HTTPException(400, "Informe o nome da empresa")

    try:
        settings_service.save_company_settings(store, data.company_title, data.company_slogan)
    except StoreError:
        raise HTTPException(500, "Não foi possível salvar as configurações.")

    return {
        **settings_service.get_company_settings(store),
        **popup("As informações da empresa foram atualizadas", title="Configurações salvas!"),
    }


# -------------------------
# WHATSAPP
# -------------------------

@router.get("/whatsapp")
def get_whatsapp_settings(admin=Depends(require_admin), store=Depends(get_store)):
    try:
        return settings_service.get_whatsapp_settings(store)
    except StoreError:
        raise HTTPException(503, "Não foi possível carregar as configurações.")


@router.put("/whatsapp")
def update_whatsapp_settings(data: WhatsAppSettingsUpdate,
                             admin=Depends(require_admin), store=Depends(get_store)):
    try:
        settings_service.save_whatsapp_settings(store, data.whatsapp_number, data.whatsapp_notifications)
    except StoreError:
        raise HTTPException(500, "Não foi possível salvar as configurações.")

    return {
        **settings_service.get_whatsapp_settings(store),
        **popup("As configurações do WhatsApp foram atualizadas", title="Configurações salvas!"),
    }


# -------------------------
# LOGO / FAVICON
# -------------------------

@router.post("/logo")
def upload_logo(file: UploadFile = File(...), admin=Depends(require_admin),
                store=Depends(get_store), blobs=Depends(get_blob_store)):
    try:
        url = settings_service.upload_logo(store, blobs, file.file.read(), file.filename, file.content_type)
    except (StorageUploadError, StoreError):
        raise HTTPException(502, "Não foi possível salvar o logo")

    return {"logo_url": url, **popup("O logo da loja foi atualizado com sucesso", title="Logo atualizado!")}


@router.post("/favicon")
def upload_favicon(file: UploadFile = File(...), admin=Depends(require_admin),
                   store=Depends(get_store), blobs=Depends(get_blob_store)):
    try:
        url = settings_service.upload_favicon(store, blobs, file.file.read(), file.filename, file.content_type)
    except (StorageUploadError, StoreError):
        raise HTTPException(502, "Não foi possível salvar o favicon")

    return {"favicon_url": url, **popup("O favicon foi atualizado com sucesso", title="Favicon atualizado!")}
