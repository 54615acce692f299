import logging
from typing import Any, Dict, Optional

import requests

from scriptboard.core.config import settings
from scriptboard.core.errors import PersistenceError, StaleSnapshotError
from scriptboard.editor.session import Identity
from scriptboard.schemas.script_data import ScriptData, ScriptSnapshot

logger = logging.getLogger(__name__)


class ScriptDataClient:
    """
    HTTP client for /projects/{id}/script-data.

    Every call sends the full snapshot; nothing here merges or diffs.
    Transport errors and non-2xx responses become PersistenceError.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        identity: Optional[Identity] = None,
        *,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.identity = identity
        self.timeout = settings.HTTP_TIMEOUT_SECONDS if timeout is None else timeout
        self._http = session or requests.Session()

    def _url(self, project_id: int) -> str:
        return f"{self.base_url}/projects/{project_id}/script-data"

    def _headers(self) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.identity is not None:
            headers["X-User"] = self.identity.display_name
        return headers

    def _request(self, method: str, url: str, payload: Optional[Dict[str, Any]] = None) -> requests.Response:
        try:
            return self._http.request(
                method,
                url,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise PersistenceError(f"{method} {url} failed: {e}") from e

    @staticmethod
    def _detail(resp: requests.Response) -> str:
        try:
            body = resp.json()
        except ValueError:
            return resp.text or getattr(resp, "reason", "") or ""
        if isinstance(body, dict) and "detail" in body:
            detail = body["detail"]
            return detail["message"] if isinstance(detail, dict) and "message" in detail else str(detail)
        return str(body)

    def get_snapshot(self, project_id: int) -> Optional[ScriptData]:
        resp = self._request("GET", self._url(project_id))
        if resp.status_code == 404:
            return None
        if resp.status_code != 200:
            raise PersistenceError(f"{resp.status_code}: {self._detail(resp)}", resp.status_code)
        return ScriptData.model_validate(resp.json())

    def create_snapshot(self, project_id: int, snapshot: ScriptSnapshot) -> ScriptData:
        resp = self._request("POST", self._url(project_id), snapshot.model_dump(by_alias=True))
        if resp.status_code != 201:
            raise PersistenceError(f"{resp.status_code}: {self._detail(resp)}", resp.status_code)
        return ScriptData.model_validate(resp.json())

    def save_snapshot(self, project_id: int, snapshot: ScriptSnapshot) -> ScriptData:
        resp = self._request("PUT", self._url(project_id), snapshot.model_dump(by_alias=True))

        if resp.status_code == 409:
            stored_version = None
            try:
                body = resp.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and isinstance(body.get("detail"), dict):
                stored_version = body["detail"].get("storedVersion")
            raise StaleSnapshotError(self._detail(resp), stored_version=stored_version)

        if resp.status_code != 200:
            raise PersistenceError(f"{resp.status_code}: {self._detail(resp)}", resp.status_code)

        return ScriptData.model_validate(resp.json())
