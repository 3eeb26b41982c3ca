import logging
from typing import Any, Dict, List, Optional, Union

import requests
from requests import RequestException

from gradeboard.config.settings import settings
from gradeboard.core.records import RecordError, Result, parse_results


logger = logging.getLogger(__name__)

RecordId = Union[int, str]


class ResultsApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ResultsApiClient:
    """Thin client for the REST store holding students, sessions and results."""

    def __init__(self, base_url: str, timeout: float = 15, session: Optional[requests.Session] = None) -> None:
        if not base_url:
            raise ResultsApiError("Missing RESULTS_API_URL in environment")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    @classmethod
    def from_settings(cls) -> "ResultsApiClient":
        return cls(settings.results_api_url, settings.results_api_timeout)

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self._request("GET", path, params=params)

    def post(self, path: str, payload: Dict[str, Any]) -> Any:
        return self._request("POST", path, payload=payload)

    def patch(self, path: str, payload: Dict[str, Any]) -> Any:
        return self._request("PATCH", path, payload=payload)

    def delete(self, path: str) -> Any:
        return self._request("DELETE", path)

    def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}/{path.lstrip('/')}"
        logger.debug("%s %s", method, url)
        try:
            res = self.session.request(method, url, json=payload, params=params, timeout=self.timeout)
        except RequestException as exc:
            logger.warning("%s %s failed: %s", method, url, exc)
            raise ResultsApiError("RESULTS_API_UNAVAILABLE") from exc

        if res.status_code >= 400:
            logger.warning("%s %s returned %s", method, url, res.status_code)
            raise ResultsApiError(f"{method} {path} failed with status {res.status_code}", res.status_code)

        if not res.content:
            return None
        try:
            return res.json()
        except ValueError as exc:
            raise ResultsApiError(f"{method} {path} returned a non-JSON body", res.status_code) from exc

    def _as_list(self, data: Any, path: str) -> List[Dict[str, Any]]:
        if data is None:
            return []
        if not isinstance(data, list):
            raise ResultsApiError(f"GET {path} did not return an array")
        return data

    def _as_result(self, data: Any, path: str) -> Result:
        try:
            return Result.from_dict(data)
        except RecordError as exc:
            raise ResultsApiError(f"{path} returned a malformed result: {exc}") from exc

    def list_results(self, student_id: Optional[RecordId] = None) -> List[Result]:
        params = {"studentId": student_id} if student_id is not None else None
        data = self._as_list(self.get("/results", params=params), "/results")
        try:
            return parse_results(data)
        except RecordError as exc:
            raise ResultsApiError(f"/results returned a malformed result: {exc}") from exc

    def get_result(self, result_id: RecordId) -> Result:
        path = f"/results/{result_id}"
        return self._as_result(self.get(path), path)

    def create_result(self, result: Result) -> Result:
        created = self.post("/results", result.to_dict())
        return self._as_result(created, "/results") if created else result

    def update_result(self, result: Result) -> Result:
        path = f"/results/{result.id}"
        updated = self.patch(path, result.to_dict())
        return self._as_result(updated, path) if updated else result

    def delete_result(self, result_id: RecordId) -> None:
        self.delete(f"/results/{result_id}")

    def list_students(self) -> List[Dict[str, Any]]:
        return self._as_list(self.get("/students"), "/students")

    def get_student(self, student_id: RecordId) -> Dict[str, Any]:
        data = self.get(f"/students/{student_id}")
        if not isinstance(data, dict):
            raise ResultsApiError(f"Student {student_id} not found", 404)
        return data

    def create_student(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        return self.post("/students", payload) or dict(payload)

    def delete_student(self, student_id: RecordId) -> None:
        self.delete(f"/students/{student_id}")

    def list_teachers(self) -> List[Dict[str, Any]]:
        return self._as_list(self.get("/teachers"), "/teachers")

    def list_sessions(self) -> List[Dict[str, Any]]:
        return self._as_list(self.get("/sessions"), "/sessions")

    def list_subjects(self) -> List[Any]:
        return self._as_list(self.get("/subjects"), "/subjects")
