"""
Asistente de inspección: FarmSelection → InspectorDetails → Checklist → Summary.

Cada paso es una dataclass inmutable que solo lleva los datos que existen
seguro en ese paso; p.ej. Checklist no se puede construir sin id de
inspección, así que nunca se pide un checklist sin él.

Todo el estado autoritativo vive en la API remota; aquí solo guardamos lo
necesario para ir y volver entre pasos sin duplicar inspecciones.
"""
import threading
import uuid
from collections import OrderedDict
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, ClassVar, Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from pydantic import ValidationError

from app.core.config import settings
from app.core.errors import (
    DashboardError,
    FormValidationError,
    GatewayResponseError,
    GatewayTransportError,
    InspectionIdMissingError,
    NotFoundError,
    UnansweredItemsError,
    WizardBusyError,
    WizardStepError,
    WizardStepFailedError,
)
from app.core.logging import get_logger
from app.gateway import FARM, GatewayClient
from app.schemas.inspection import (
    ChecklistAnswer,
    ChecklistItemRead,
    FarmOption,
    WizardRead,
    WizardStep,
)

logger = get_logger(module="inspection_wizard")

STEP_ORDER = (
    WizardStep.FARM_SELECTION,
    WizardStep.INSPECTOR_DETAILS,
    WizardStep.CHECKLIST,
    WizardStep.SUMMARY,
)

# Mensajes visibles para el usuario
MSG_FARMS_FAILED = "Failed to load farms."
MSG_CREATE_FAILED = "Failed to initiate inspection — try again."
MSG_ID_MISSING = "Inspection could not be created, so the checklist cannot be loaded. Try again."
MSG_PATCH_FAILED = "Failed to save inspector details (saved locally)."
MSG_CHECKLIST_FAILED = "Failed to load checklist. You can try again."
MSG_ANSWERS_FAILED = "Failed to submit answers."
MSG_COMPLETE_FAILED = "Answers saved but failed to complete inspection."
MSG_NETWORK_FAILED = "Network error while submitting answers."
MSG_SUBMITTED = "Inspection submitted successfully."


# ---------- estados ----------

@dataclass(frozen=True)
class FarmSelection:
    step: ClassVar[WizardStep] = WizardStep.FARM_SELECTION

    farm: Optional[FarmOption] = None


@dataclass(frozen=True)
class InspectorDetails:
    step: ClassVar[WizardStep] = WizardStep.INSPECTOR_DETAILS

    farm: FarmOption
    # None si el POST de creación falló; se reintenta al guardar el inspector
    inspection_id: Optional[str] = None
    inspector_name: str = ""
    inspection_date: Optional[date] = None


@dataclass(frozen=True)
class Checklist:
    step: ClassVar[WizardStep] = WizardStep.CHECKLIST

    farm: FarmOption
    inspection_id: str
    inspector_name: str
    inspection_date: date
    items: Tuple[ChecklistItemRead, ...] = ()
    # Las respuestas ya se aceptaron y solo falta el "complete"
    answers_submitted: bool = False

    @property
    def unanswered(self) -> int:
        return sum(1 for item in self.items if item.answer is None)

    def answers(self) -> List[ChecklistAnswer]:
        # Sin responder = "No"
        return [
            ChecklistAnswer(checklist_id=item.id, answer=bool(item.answer))
            for item in self.items
        ]


@dataclass(frozen=True)
class Summary:
    step: ClassVar[WizardStep] = WizardStep.SUMMARY

    farm: FarmOption
    inspection_id: str
    inspector_name: str
    inspection_date: date
    items: Tuple[ChecklistItemRead, ...] = ()


WizardState = Union[FarmSelection, InspectorDetails, Checklist, Summary]

S = TypeVar("S", FarmSelection, InspectorDetails, Checklist, Summary)


def _payload(answers: List[ChecklistAnswer]) -> List[Dict[str, Any]]:
    return [a.model_dump(by_alias=True) for a in answers]


class InspectionWizard:
    def __init__(self, wizard_id: Optional[str] = None) -> None:
        self.wizard_id = wizard_id or uuid.uuid4().hex
        self.farms: List[FarmOption] = []
        self.state: WizardState = FarmSelection()
        self.message: Optional[str] = None

        # Lo que sobrevive a "Back": inspecciones ya creadas por granja,
        # datos del inspector y respuestas por (inspección, pregunta).
        self._inspections: Dict[str, str] = {}
        self._inspector: Tuple[str, Optional[date]] = ("", None)
        self._answers: Dict[Tuple[str, str], bool] = {}

        self._in_flight = threading.Lock()
        self.logger = logger.bind(wizard_id=self.wizard_id)

    # ---------- helpers internos ----------

    @property
    def step(self) -> WizardStep:
        return self.state.step

    @property
    def busy(self) -> bool:
        return self._in_flight.locked()

    @contextmanager
    def _exclusive(self, action: str) -> Iterator[None]:
        # Equivale al botón deshabilitado mientras hay una petición en curso
        if not self._in_flight.acquire(blocking=False):
            self.logger.warning("Acción descartada: ya hay una petición en curso", action=action)
            raise WizardBusyError("A request for this inspection is already in progress.")
        try:
            yield
        finally:
            self._in_flight.release()

    def _require(self, state_type: Type[S], action: str) -> S:
        if not isinstance(self.state, state_type):
            raise WizardStepError(f"Cannot {action} from step '{self.step.value}'.")
        return self.state

    def _fail(self, exc: DashboardError, message: str, **context: Any) -> WizardStepFailedError:
        self.message = message
        self.logger.error(
            message,
            code=exc.code,
            detail=exc.message,
            **context,
        )
        return WizardStepFailedError(message, extra={"cause": exc.code})

    def _create_inspection(self, gateway: GatewayClient, farm: FarmOption) -> Optional[str]:
        try:
            inspection_id = gateway.create_inspection(farm.id)
        except DashboardError as exc:
            self.logger.error(
                "No se pudo crear la inspección",
                farm_id=farm.id,
                code=exc.code,
                detail=exc.message,
            )
            return None

        self._inspections[farm.id] = inspection_id
        self.logger.info("Inspección creada", farm_id=farm.id, inspection_id=inspection_id)
        return inspection_id

    # ---------- paso 1: granja ----------

    def load_farms(self, gateway: GatewayClient) -> List[FarmOption]:
        with self._exclusive("load_farms"):
            try:
                raw = gateway.list_resource(FARM)
                self.farms = [FarmOption.model_validate(item) for item in raw]
            except ValidationError:
                self.farms = []
                self.message = MSG_FARMS_FAILED
                self.logger.error("Granjas con formato inesperado")
            except DashboardError as exc:
                self.farms = []
                self.message = MSG_FARMS_FAILED
                self.logger.error("Error cargando granjas", code=exc.code, detail=exc.message)
            else:
                self.logger.info("Granjas cargadas", count=len(self.farms))
        return self.farms

    def select_farm(self, farm_id: str) -> WizardState:
        with self._exclusive("select_farm"):
            self._require(FarmSelection, "select a farm")
            farm = next((f for f in self.farms if f.id == farm_id), None)
            if farm is None:
                raise NotFoundError(f"Farm {farm_id} is not available for inspection.")
            self.state = FarmSelection(farm=farm)
            self.message = None
        return self.state

    def start_inspection(self, gateway: GatewayClient) -> WizardState:
        with self._exclusive("start_inspection"):
            state = self._require(FarmSelection, "start an inspection")
            if state.farm is None:
                raise WizardStepError("No farm selected.")

            farm = state.farm
            self.message = None
            inspection_id = self._inspections.get(farm.id)
            if inspection_id is not None:
                self.logger.info(
                    "Reutilizando inspección ya creada",
                    farm_id=farm.id,
                    inspection_id=inspection_id,
                )
            else:
                inspection_id = self._create_inspection(gateway, farm)
                if inspection_id is None:
                    # Se avanza igualmente para no perder lo que se vaya rellenando
                    self.message = MSG_CREATE_FAILED

            name, inspection_date = self._inspector
            self.state = InspectorDetails(
                farm=farm,
                inspection_id=inspection_id,
                inspector_name=name,
                inspection_date=inspection_date,
            )
        return self.state

    # ---------- paso 2: inspector ----------

    def save_inspector(
        self,
        gateway: GatewayClient,
        inspector_name: str,
        inspection_date: Optional[date],
    ) -> WizardState:
        with self._exclusive("save_inspector"):
            state = self._require(InspectorDetails, "save inspector details")
            name = (inspector_name or "").strip()
            if not name or inspection_date is None:
                raise FormValidationError("Inspector name and inspection date are required.")

            self.message = None
            self._inspector = (name, inspection_date)
            state = replace(state, inspector_name=name, inspection_date=inspection_date)
            self.state = state

            inspection_id = state.inspection_id
            if inspection_id is None:
                inspection_id = self._create_inspection(gateway, state.farm)
                if inspection_id is None:
                    self.message = MSG_ID_MISSING
                    raise InspectionIdMissingError(MSG_ID_MISSING)
                state = replace(state, inspection_id=inspection_id)
                self.state = state

            notice = None
            try:
                gateway.update_inspection(
                    inspection_id,
                    {"inspectorName": name, "date": inspection_date.isoformat()},
                )
            except DashboardError as exc:
                # No bloquea: los datos siguen en el asistente
                notice = MSG_PATCH_FAILED
                self.logger.warning(
                    "No se pudieron guardar los datos del inspector",
                    inspection_id=inspection_id,
                    code=exc.code,
                    detail=exc.message,
                )

            try:
                raw = gateway.fetch_checklist(inspection_id)
                items = tuple(ChecklistItemRead.model_validate(item) for item in raw)
            except ValidationError as exc:
                raise self._fail(
                    GatewayResponseError("Unexpected checklist from server."),
                    MSG_CHECKLIST_FAILED,
                    inspection_id=inspection_id,
                ) from exc
            except DashboardError as exc:
                raise self._fail(exc, MSG_CHECKLIST_FAILED, inspection_id=inspection_id) from exc

            items = tuple(
                item.model_copy(update={"answer": self._answers[(inspection_id, item.id)]})
                if (inspection_id, item.id) in self._answers else item
                for item in items
            )
            self.state = Checklist(
                farm=state.farm,
                inspection_id=inspection_id,
                inspector_name=name,
                inspection_date=inspection_date,
                items=items,
            )
            self.message = notice
            self.logger.info(
                "Checklist cargado",
                inspection_id=inspection_id,
                items=len(items),
            )
        return self.state

    # ---------- paso 3: checklist ----------

    def set_answer(self, checklist_id: str, answer: bool) -> WizardState:
        with self._exclusive("set_answer"):
            state = self._require(Checklist, "answer the checklist")
            if not any(item.id == checklist_id for item in state.items):
                raise NotFoundError(f"Checklist item {checklist_id} not found.")

            self._answers[(state.inspection_id, checklist_id)] = answer
            items = tuple(
                item.model_copy(update={"answer": answer}) if item.id == checklist_id else item
                for item in state.items
            )
            # Si cambian las respuestas hay que volver a enviarlas
            self.state = replace(state, items=items, answers_submitted=False)
        return self.state

    def submit(self, gateway: GatewayClient, confirm_unanswered: bool = False) -> WizardState:
        with self._exclusive("submit"):
            state = self._require(Checklist, "submit the checklist")
            if state.unanswered and not confirm_unanswered:
                error = UnansweredItemsError(state.unanswered)
                self.message = error.message
                raise error

            self.message = None
            answers = _payload(state.answers())

            if not state.answers_submitted:
                try:
                    gateway.submit_answers(answers)
                except GatewayTransportError as exc:
                    raise self._fail(exc, MSG_NETWORK_FAILED, inspection_id=state.inspection_id) from exc
                except DashboardError as exc:
                    raise self._fail(exc, MSG_ANSWERS_FAILED, inspection_id=state.inspection_id) from exc
                state = replace(state, answers_submitted=True)
                self.state = state

            try:
                gateway.complete_inspection(state.inspection_id, answers)
            except GatewayTransportError as exc:
                raise self._fail(exc, MSG_NETWORK_FAILED, inspection_id=state.inspection_id) from exc
            except DashboardError as exc:
                raise self._fail(exc, MSG_COMPLETE_FAILED, inspection_id=state.inspection_id) from exc

            self.state = Summary(
                farm=state.farm,
                inspection_id=state.inspection_id,
                inspector_name=state.inspector_name,
                inspection_date=state.inspection_date,
                items=tuple(
                    item.model_copy(update={"answer": bool(item.answer)}) for item in state.items
                ),
            )
            self.message = MSG_SUBMITTED
            self.logger.info(
                "Inspección completada",
                inspection_id=state.inspection_id,
                farm_id=state.farm.id,
                answers=len(answers),
            )
        return self.state

    # ---------- navegación ----------

    def back(self, step: WizardStep) -> WizardState:
        """Vuelve a un paso anterior. No lanza ninguna petición."""
        with self._exclusive("back"):
            state = self.state
            if isinstance(state, Summary):
                raise WizardStepError("The inspection is already complete; start a new one.")
            if STEP_ORDER.index(step) >= STEP_ORDER.index(state.step):
                raise WizardStepError(
                    f"Cannot go back from '{state.step.value}' to '{step.value}'."
                )

            if step == WizardStep.FARM_SELECTION:
                self.state = FarmSelection(farm=state.farm)
            else:
                # Solo se llega aquí desde Checklist
                self.state = InspectorDetails(
                    farm=state.farm,
                    inspection_id=state.inspection_id,
                    inspector_name=state.inspector_name,
                    inspection_date=state.inspection_date,
                )
            self.message = None
        return self.state

    def reset(self) -> WizardState:
        with self._exclusive("reset"):
            self.state = FarmSelection()
            self.message = None
            self._inspections.clear()
            self._inspector = ("", None)
            self._answers.clear()
            self.logger.info("Asistente reiniciado")
        return self.state

    # ---------- salida ----------

    def snapshot(self) -> WizardRead:
        state = self.state
        data: Dict[str, Any] = {
            "wizard_id": self.wizard_id,
            "step": state.step,
            "farms": self.farms,
            "busy": self.busy,
            "message": self.message,
        }
        if isinstance(state, FarmSelection):
            data["selected_farm"] = state.farm
        else:
            data.update(
                selected_farm=state.farm,
                inspection_id=state.inspection_id,
                inspector_name=state.inspector_name,
                inspection_date=state.inspection_date,
            )
        if isinstance(state, (Checklist, Summary)):
            data["checklist"] = list(state.items)
            data["unanswered"] = sum(1 for item in state.items if item.answer is None)
        data["answers_submitted"] = isinstance(state, Summary) or (
            isinstance(state, Checklist) and state.answers_submitted
        )
        return WizardRead(**data)


class WizardRegistry:
    """
    Sesiones del asistente en memoria, una por pestaña del frontend.
    Si se supera el máximo se descarta la más antigua.
    """

    def __init__(self, max_sessions: int = 200) -> None:
        self.max_sessions = max_sessions
        self._wizards: "OrderedDict[str, InspectionWizard]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._wizards)

    def create(self) -> InspectionWizard:
        wizard = InspectionWizard()
        with self._lock:
            self._wizards[wizard.wizard_id] = wizard
            while len(self._wizards) > self.max_sessions:
                evicted, _ = self._wizards.popitem(last=False)
                logger.info("Sesión de asistente descartada por límite", wizard_id=evicted)
        return wizard

    def get(self, wizard_id: str) -> InspectionWizard:
        with self._lock:
            wizard = self._wizards.get(wizard_id)
        if wizard is None:
            raise NotFoundError("Inspection wizard not found.")
        return wizard

    def discard(self, wizard_id: str) -> None:
        with self._lock:
            removed = self._wizards.pop(wizard_id, None)
        if removed is None:
            raise NotFoundError("Inspection wizard not found.")


wizards = WizardRegistry(max_sessions=settings.WIZARD_MAX_SESSIONS)


def get_wizard_registry() -> WizardRegistry:
    return wizards
