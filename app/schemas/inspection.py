from datetime import date
from enum import Enum
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.schemas.base import GatewayModel


class WizardStep(str, Enum):
    FARM_SELECTION = "farm_selection"
    INSPECTOR_DETAILS = "inspector_details"
    CHECKLIST = "checklist"
    SUMMARY = "summary"


class FarmOption(GatewayModel):
    id: str
    name: str
    location: Optional[str] = None
    owner: Optional[str] = None


class ChecklistItemRead(GatewayModel):
    id: str
    question: str = Field(
        default="Unknown question",
        validation_alias=AliasChoices("question", "title"),
    )
    answer: Optional[bool] = None


class ChecklistAnswer(GatewayModel):
    checklist_id: str
    answer: bool


# ---------- entrada ----------

class FarmSelectionRequest(BaseModel):
    farm_id: str = Field(min_length=1)


class InspectorDetailsRequest(BaseModel):
    inspector_name: str = Field(min_length=1)
    inspection_date: date

    model_config = ConfigDict(str_strip_whitespace=True)


class AnswerRequest(BaseModel):
    answer: bool


class SubmitRequest(BaseModel):
    # True = el usuario confirmó enviar con preguntas sin responder
    confirm_unanswered: bool = False


class BackRequest(BaseModel):
    step: WizardStep


# ---------- salida ----------

class WizardRead(BaseModel):
    wizard_id: str
    step: WizardStep
    farms: List[FarmOption] = []
    selected_farm: Optional[FarmOption] = None
    inspection_id: Optional[str] = None
    inspector_name: str = ""
    inspection_date: Optional[date] = None
    checklist: List[ChecklistItemRead] = []
    unanswered: int = 0
    answers_submitted: bool = False
    busy: bool = False
    message: Optional[str] = None
