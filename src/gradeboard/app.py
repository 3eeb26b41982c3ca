import logging
from typing import Any, Dict, List, Optional, Union

from fastapi import Depends, FastAPI, Header, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from gradeboard.config.settings import settings
from gradeboard.core.records import RecordError, Result, parse_results
from gradeboard.services.report_service import ReportService, ReportServiceError
from gradeboard.services.results_api import ResultsApiError
from gradeboard.state.session_state import ROLES, Viewer


logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="Gradeboard API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class ScorePayload(BaseModel):
    subjectId: int = Field(ge=1)
    ca: float = 0
    exam: float = 0
    total: Optional[float] = None


class ResultPayload(BaseModel):
    id: Union[int, str]
    studentId: Union[int, str]
    sessionId: int = 1
    termId: int = Field(ge=1)
    scores: List[ScorePayload] = Field(default_factory=list)


class StudentPayload(BaseModel):
    name: str
    regNo: str
    class_name: str = Field(alias="class")


def get_report_service() -> ReportService:
    return ReportService.from_settings()


def _viewer(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
    x_student_id: Optional[str] = Header(default=None),
) -> Viewer:
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing x-user-id header")
    role = (x_user_role or "").strip().lower()
    return Viewer(user_id=x_user_id, role=role if role in ROLES else None, student_id=x_student_id)


def _required_teacher(viewer: Viewer = Depends(_viewer)) -> Viewer:
    if not viewer.is_teacher:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Teacher role required")
    return viewer


def _store_error(exc: ResultsApiError) -> HTTPException:
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    logger.error("Results store request failed: %s", exc)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


def _to_result(payload: ResultPayload) -> Result:
    try:
        return Result.from_dict(payload.model_dump(exclude_none=True))
    except RecordError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.post("/analytics")
def analytics(
    payload: List[Dict[str, Any]],
    service: ReportService = Depends(get_report_service),
) -> Dict:
    try:
        results = parse_results(payload)
    except RecordError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    return service.analytics(results)


@app.get("/dashboard")
def dashboard(
    viewer: Viewer = Depends(_required_teacher),
    service: ReportService = Depends(get_report_service),
) -> Dict:
    try:
        return service.teacher_dashboard()
    except ResultsApiError as exc:
        raise _store_error(exc) from exc


@app.get("/students/{student_id}/results")
def student_results(
    student_id: str,
    term_id: Optional[int] = None,
    viewer: Viewer = Depends(_viewer),
    service: ReportService = Depends(get_report_service),
) -> Dict:
    if not viewer.can_view_student(student_id):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not allowed to view this student")
    try:
        return service.student_sheet(student_id, term_id)
    except ResultsApiError as exc:
        raise _store_error(exc) from exc


@app.get("/students/{student_id}/results/new")
def new_result(
    student_id: str,
    term_id: int = 1,
    session_id: int = 1,
    viewer: Viewer = Depends(_required_teacher),
    service: ReportService = Depends(get_report_service),
) -> Dict:
    try:
        return service.new_result(student_id, term_id, session_id).to_dict()
    except ResultsApiError as exc:
        raise _store_error(exc) from exc


@app.get("/students")
def list_students(
    q: Optional[str] = None,
    viewer: Viewer = Depends(_required_teacher),
    service: ReportService = Depends(get_report_service),
) -> List[Dict]:
    try:
        return service.list_students(q)
    except ResultsApiError as exc:
        raise _store_error(exc) from exc


@app.post("/students")
def create_student(
    payload: StudentPayload,
    viewer: Viewer = Depends(_required_teacher),
    service: ReportService = Depends(get_report_service),
) -> Dict:
    try:
        return service.create_student(payload.name, payload.regNo, payload.class_name)
    except ReportServiceError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ResultsApiError as exc:
        raise _store_error(exc) from exc


@app.delete("/students/{student_id}")
def delete_student(
    student_id: str,
    viewer: Viewer = Depends(_required_teacher),
    service: ReportService = Depends(get_report_service),
) -> Dict:
    try:
        removed = service.delete_student(student_id)
    except ResultsApiError as exc:
        raise _store_error(exc) from exc
    return {"status": "deleted", "results_deleted": removed}


@app.post("/results")
def save_result(
    payload: ResultPayload,
    viewer: Viewer = Depends(_required_teacher),
    service: ReportService = Depends(get_report_service),
) -> Dict:
    result = _to_result(payload)
    try:
        return service.save_result(result).to_dict()
    except ResultsApiError as exc:
        raise _store_error(exc) from exc


@app.delete("/results/{result_id}")
def delete_result(
    result_id: str,
    viewer: Viewer = Depends(_required_teacher),
    service: ReportService = Depends(get_report_service),
) -> Dict[str, str]:
    try:
        service.delete_result(result_id)
    except ResultsApiError as exc:
        raise _store_error(exc) from exc
    return {"status": "deleted"}
