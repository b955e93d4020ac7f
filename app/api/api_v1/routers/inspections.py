from fastapi import APIRouter, Depends, status

from app.core.logging import get_logger
from app.gateway import GatewayClient, get_gateway
from app.schemas.inspection import (
    AnswerRequest,
    BackRequest,
    FarmSelectionRequest,
    InspectorDetailsRequest,
    SubmitRequest,
    WizardRead,
)
from app.services.wizard import WizardRegistry, get_wizard_registry

router = APIRouter(prefix="/inspections/wizard", tags=["inspections"])
logger = get_logger(module="inspections")


# ---------- POST /inspections/wizard ----------

@router.post("/", response_model=WizardRead, status_code=status.HTTP_201_CREATED)
def open_wizard(
    gateway: GatewayClient = Depends(get_gateway),
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    wizard = registry.create()
    wizard.load_farms(gateway)
    logger.info(
        "Asistente de inspección abierto",
        wizard_id=wizard.wizard_id,
        farms=len(wizard.farms),
    )
    return wizard.snapshot()


@router.get("/{wizard_id}", response_model=WizardRead)
def get_wizard(
    wizard_id: str,
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    return registry.get(wizard_id).snapshot()


@router.delete("/{wizard_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_wizard(
    wizard_id: str,
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    registry.discard(wizard_id)
    logger.info("Asistente de inspección cerrado", wizard_id=wizard_id)


# ---------- paso 1 ----------

@router.post("/{wizard_id}/farm", response_model=WizardRead)
def select_farm(
    wizard_id: str,
    payload: FarmSelectionRequest,
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    wizard = registry.get(wizard_id)
    wizard.select_farm(payload.farm_id)
    return wizard.snapshot()


@router.post("/{wizard_id}/start", response_model=WizardRead)
def start_inspection(
    wizard_id: str,
    gateway: GatewayClient = Depends(get_gateway),
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    wizard = registry.get(wizard_id)
    wizard.start_inspection(gateway)
    return wizard.snapshot()


# ---------- paso 2 ----------

@router.post("/{wizard_id}/inspector", response_model=WizardRead)
def save_inspector(
    wizard_id: str,
    payload: InspectorDetailsRequest,
    gateway: GatewayClient = Depends(get_gateway),
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    wizard = registry.get(wizard_id)
    wizard.save_inspector(gateway, payload.inspector_name, payload.inspection_date)
    return wizard.snapshot()


# ---------- paso 3 ----------

@router.put("/{wizard_id}/answers/{checklist_id}", response_model=WizardRead)
def set_answer(
    wizard_id: str,
    checklist_id: str,
    payload: AnswerRequest,
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    wizard = registry.get(wizard_id)
    wizard.set_answer(checklist_id, payload.answer)
    return wizard.snapshot()


@router.post("/{wizard_id}/submit", response_model=WizardRead)
def submit_checklist(
    wizard_id: str,
    payload: SubmitRequest,
    gateway: GatewayClient = Depends(get_gateway),
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    wizard = registry.get(wizard_id)
    wizard.submit(gateway, confirm_unanswered=payload.confirm_unanswered)
    return wizard.snapshot()


# ---------- navegación ----------

@router.post("/{wizard_id}/back", response_model=WizardRead)
def go_back(
    wizard_id: str,
    payload: BackRequest,
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    wizard = registry.get(wizard_id)
    wizard.back(payload.step)
    return wizard.snapshot()


@router.post("/{wizard_id}/reset", response_model=WizardRead)
def reset_wizard(
    wizard_id: str,
    registry: WizardRegistry = Depends(get_wizard_registry),
):
    wizard = registry.get(wizard_id)
    wizard.reset()
    return wizard.snapshot()
