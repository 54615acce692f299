import logging
from typing import Literal, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from scriptboard.api.dependencies import get_channel, get_db, get_identity
from scriptboard import models, schemas
from scriptboard.core.errors import NothingToAssembleError
from scriptboard.editor import assembler
from scriptboard.schemas.realtime import ScriptDataEvent
from scriptboard.services.realtime import RealtimeChannel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/projects/{project_id}/script-data", tags=["script-data"])


def _get_project(db: Session, project_id: int) -> models.Project:
    project = db.query(models.Project).filter(models.Project.id == project_id).first()
    if not project:
        raise HTTPException(status_code=404, detail="Project not found")
    return project


def _get_script_data(db: Session, project_id: int) -> Optional[models.ScriptData]:
    return (
        db.query(models.ScriptData)
        .filter(models.ScriptData.project_id == project_id)
        .first()
    )


def _apply_snapshot(record: models.ScriptData, snapshot: schemas.ScriptSnapshot) -> None:
    data = snapshot.model_dump(by_alias=True)
    record.script_content = data["scriptContent"]
    record.final_content = data["finalContent"]
    record.correlations = data["correlations"]
    record.spreadsheet_data = data["spreadsheetData"]
    record.version = snapshot.version


def _to_schema_script_data(r: models.ScriptData) -> schemas.ScriptData:
    return schemas.ScriptData(
        id=r.id,
        project_id=r.project_id,
        script_content=r.script_content,
        final_content=r.final_content or "",
        correlations=r.correlations or [],
        spreadsheet_data=r.spreadsheet_data or [],
        version=r.version,
        created_by=r.created_by,
        updated_by=r.updated_by,
        created_at=r.created_at,
        updated_at=r.updated_at,
    )


def _announce(background: BackgroundTasks, channel: RealtimeChannel, r: models.ScriptData) -> None:
    event = ScriptDataEvent(project_id=r.project_id, version=r.version, updated_by=r.updated_by)
    background.add_task(channel.publish, event)


@router.get("", response_model=schemas.ScriptData)
def get_script_data(project_id: int, db: Session = Depends(get_db)):
    _get_project(db, project_id)
    record = _get_script_data(db, project_id)
    if not record:
        raise HTTPException(status_code=404, detail="Script data not found")
    return _to_schema_script_data(record)


@router.post("", response_model=schemas.ScriptData, status_code=status.HTTP_201_CREATED)
def create_script_data(
    project_id: int,
    snapshot: schemas.ScriptSnapshot,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    identity: Optional[str] = Depends(get_identity),
    channel: RealtimeChannel = Depends(get_channel),
):
    _get_project(db, project_id)
    if _get_script_data(db, project_id):
        raise HTTPException(status_code=409, detail="Script data already exists for this project")

    record = models.ScriptData(project_id=project_id, created_by=identity, updated_by=identity)
    _apply_snapshot(record, snapshot)
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.info("script data created for project %s (v%s) by %s", project_id, record.version, identity)
    _announce(background, channel, record)
    return _to_schema_script_data(record)


@router.put("", response_model=schemas.ScriptData)
def update_script_data(
    project_id: int,
    snapshot: schemas.ScriptSnapshot,
    background: BackgroundTasks,
    db: Session = Depends(get_db),
    identity: Optional[str] = Depends(get_identity),
    channel: RealtimeChannel = Depends(get_channel),
):
    _get_project(db, project_id)
    record = _get_script_data(db, project_id)
    if not record:
        raise HTTPException(status_code=404, detail="Script data not found")

    # full replace, guarded only by the version sequence
    if snapshot.version <= record.version:
        raise HTTPException(
            status_code=409,
            detail={
                "message": f"Snapshot v{snapshot.version} is not newer than stored v{record.version}",
                "storedVersion": record.version,
            },
        )

    _apply_snapshot(record, snapshot)
    record.updated_by = identity
    db.add(record)
    db.commit()
    db.refresh(record)

    logger.debug("script data for project %s saved at v%s", project_id, record.version)
    _announce(background, channel, record)
    return _to_schema_script_data(record)


@router.post("/assemble", response_model=schemas.AssembleResponse)
def assemble_script_data(
    project_id: int,
    mode: Literal["script", "final"] = Query("script"),
    db: Session = Depends(get_db),
):
    """Render the stored correlations without touching the stored documents."""
    _get_project(db, project_id)
    record = _get_script_data(db, project_id)
    if not record:
        raise HTTPException(status_code=404, detail="Script data not found")

    stored = _to_schema_script_data(record)
    render = assembler.assemble_script if mode == "script" else assembler.assemble_final

    try:
        content = render(stored.correlations, stored.spreadsheet_data)
    except NothingToAssembleError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return schemas.AssembleResponse(
        project_id=project_id,
        mode=mode,
        content=content,
        groups=assembler.count_groups(stored.correlations),
    )
