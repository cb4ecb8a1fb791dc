"""FastAPI web application for timeblocks."""

import logging
import os
import threading
from contextlib import ExitStack, asynccontextmanager, contextmanager
from typing import Dict, List, Optional, Tuple

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from timeblocks.database.database import get_db, init_db
from timeblocks.database.scheduled_block_repository import ScheduledBlockRepository
from timeblocks.database.template_repository import BlockTemplateRepository
from timeblocks.engine.grid import GridConfig
from timeblocks.engine.layout import BlockLayout, hour_markers
from timeblocks.engine.planner import DropEvent, WeekPlanner
from timeblocks.engine.results import Rejected, RejectionReason, is_rejected
from timeblocks.models.block_template import BlockTemplate
from timeblocks.models.scheduled_block import ScheduledBlock, Weekday, WEEKDAYS
from timeblocks.models.template_factory import create_template

load_dotenv()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if os.getenv("INIT_DB_ON_STARTUP", "True").lower() == "true":
        init_db()
    yield


# Initialize FastAPI app
app = FastAPI(
    title="timeblocks API",
    description="Place, resize, move and reorder activity blocks on a weekly grid",
    version="0.1.0",
    lifespan=lifespan,
)


# Request models
class CreateTemplateRequest(BaseModel):
    """Request to add a template to the palette."""
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None


class PlaceRequest(BaseModel):
    """Drop of a template onto the grid."""
    template_id: str
    day: Weekday
    start_time: float


class MoveRequest(BaseModel):
    """Drag of a scheduled block to another slot."""
    day: Weekday
    start_time: float


class ResizeRequest(BaseModel):
    """New duration for a scheduled block."""
    duration: float


class ReorderRequest(BaseModel):
    """Every block id of the day, in the new order."""
    block_ids: List[str]


# Response models
class DayScheduleResponse(BaseModel):
    """Blocks of one day with their rendering geometry."""
    day: Weekday
    blocks: List[ScheduledBlock]
    layouts: List[BlockLayout]


class WeekScheduleResponse(BaseModel):
    """All seven days plus the hour lines of the grid."""
    days: List[DayScheduleResponse]
    hour_markers: List[Tuple[float, str]]


class DeleteTemplateResponse(BaseModel):
    """Result of deleting a template."""
    template_id: str
    deleted_blocks: int


class RemoveBlockResponse(BaseModel):
    """Result of removing a scheduled block."""
    block_id: str
    removed: bool


_REJECTION_STATUS: Dict[str, int] = {
    RejectionReason.OVERLAP.value: 409,
    RejectionReason.INVALID_REORDER.value: 400,
    RejectionReason.NOT_FOUND.value: 404,
}


def get_grid() -> GridConfig:
    """Grid configuration (dependency, overridable in tests)."""
    return GridConfig.from_env()


# Mutations of one day are serialized within this process.
_DAY_LOCKS: Dict[str, threading.Lock] = {day: threading.Lock() for day in WEEKDAYS}


@contextmanager
def _days_locked(*days: str):
    """Hold the locks of the given days, always acquired in week order."""
    ordered = sorted({Weekday(day).value for day in days}, key=WEEKDAYS.index)
    with ExitStack() as stack:
        for day in ordered:
            stack.enter_context(_DAY_LOCKS[day])
        yield


@contextmanager
def _block_days_locked(db: Session, block_id: str, *days: str):
    """Hold the locks of a block's current day and of `days`.

    Retries when the block was moved to another day while waiting.
    """
    repo = ScheduledBlockRepository(db)
    while True:
        db.expire_all()
        block = repo.get_by_id(block_id)
        held = days + ((block.day,) if block is not None else ())
        with _days_locked(*held):
            db.expire_all()
            current = repo.get_by_id(block_id)
            if current is None or current.day in held:
                yield
                return


def _planner(db: Session, grid: GridConfig) -> WeekPlanner:
    # Reload committed state.
    db.expire_all()
    templates = {t.id: t for t in BlockTemplateRepository(db).get_all()}
    blocks = {b.id: b for b in ScheduledBlockRepository(db).get_all()}
    return WeekPlanner(blocks, templates, grid)


def _raise_rejected(outcome: Rejected) -> None:
    reason = RejectionReason(outcome.reason)
    logger.info(f"Rejected request ({reason.value}): {outcome.detail}")
    messages = {
        RejectionReason.OVERLAP: "Cannot place or resize here: the slot overlaps another block",
        RejectionReason.INVALID_REORDER: f"Invalid reorder: {outcome.detail}",
        RejectionReason.NOT_FOUND: outcome.detail or "Not found",
    }
    raise HTTPException(status_code=_REJECTION_STATUS[reason.value], detail=messages[reason])


def _day_response(planner: WeekPlanner, day: str) -> DayScheduleResponse:
    blocks = planner.renderable_blocks(day)
    return DayScheduleResponse(day=day, blocks=blocks, layouts=[planner.layout(b) for b in blocks])


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy", "version": "0.1.0"}


@app.get("/templates", response_model=List[BlockTemplate])
def list_templates(db: Session = Depends(get_db)):
    """List the palette's block templates."""
    return BlockTemplateRepository(db).get_all()


@app.post("/templates", response_model=BlockTemplate, status_code=201)
def create_block_template(request: CreateTemplateRequest, db: Session = Depends(get_db)):
    """Add a block template to the palette."""
    try:
        template = create_template(request.name, request.description, request.color)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
    return BlockTemplateRepository(db).create(template)


@app.delete("/templates/{template_id}", response_model=DeleteTemplateResponse)
def delete_block_template(template_id: str, db: Session = Depends(get_db)):
    """Delete a template and every block placed from it."""
    removed = BlockTemplateRepository(db).delete(template_id)
    if removed is None:
        raise HTTPException(status_code=404, detail=f"Unknown block template {template_id}")
    return DeleteTemplateResponse(template_id=template_id, deleted_blocks=removed)


@app.get("/schedule", response_model=WeekScheduleResponse)
def view_week(db: Session = Depends(get_db), grid: GridConfig = Depends(get_grid)):
    """View the whole week."""
    planner = _planner(db, grid)
    return WeekScheduleResponse(
        days=[_day_response(planner, day) for day in WEEKDAYS],
        hour_markers=hour_markers(grid),
    )


@app.get("/schedule/{day}", response_model=DayScheduleResponse)
def view_day(day: Weekday, db: Session = Depends(get_db), grid: GridConfig = Depends(get_grid)):
    """View one day."""
    return _day_response(_planner(db, grid), day.value)


@app.post("/schedule/place", response_model=ScheduledBlock, status_code=201)
def place_block(request: PlaceRequest, db: Session = Depends(get_db), grid: GridConfig = Depends(get_grid)):
    """Place a template on the grid."""
    with _days_locked(request.day.value):
        outcome = _planner(db, grid).place(request.template_id, request.day.value, request.start_time)
        if is_rejected(outcome):
            _raise_rejected(outcome)
        return ScheduledBlockRepository(db).create(outcome)


@app.post("/schedule/drop", response_model=ScheduledBlock)
def drop(event: DropEvent, db: Session = Depends(get_db), grid: GridConfig = Depends(get_grid)):
    """Apply a resolved drop gesture (palette template or scheduled block)."""
    repo = ScheduledBlockRepository(db)
    if event.template_id is not None:
        with _days_locked(event.day):
            outcome = _planner(db, grid).handle_drop(event)
            if is_rejected(outcome):
                _raise_rejected(outcome)
            return repo.create(outcome)
    with _block_days_locked(db, event.block_id, event.day):
        outcome = _planner(db, grid).handle_drop(event)
        if is_rejected(outcome):
            _raise_rejected(outcome)
        return repo.update(outcome)


@app.post("/schedule/{block_id}/move", response_model=ScheduledBlock)
def move_block(
    block_id: str, request: MoveRequest, db: Session = Depends(get_db), grid: GridConfig = Depends(get_grid)
):
    """Move a scheduled block to another day and/or time."""
    with _block_days_locked(db, block_id, request.day.value):
        outcome = _planner(db, grid).move(block_id, request.day.value, request.start_time)
        if is_rejected(outcome):
            _raise_rejected(outcome)
        return ScheduledBlockRepository(db).update(outcome)


@app.patch("/schedule/{block_id}/resize", response_model=ScheduledBlock)
def resize_block(
    block_id: str, request: ResizeRequest, db: Session = Depends(get_db), grid: GridConfig = Depends(get_grid)
):
    """Change a scheduled block's duration."""
    with _block_days_locked(db, block_id):
        outcome = _planner(db, grid).resize(block_id, request.duration)
        if is_rejected(outcome):
            _raise_rejected(outcome)
        return ScheduledBlockRepository(db).update(outcome)


@app.post("/schedule/{day}/reorder", response_model=DayScheduleResponse)
def reorder_day(
    day: Weekday, request: ReorderRequest, db: Session = Depends(get_db), grid: GridConfig = Depends(get_grid)
):
    """Repack a day's blocks contiguously in a new order."""
    with _days_locked(day.value):
        planner = _planner(db, grid)
        outcome = planner.reorder(day.value, request.block_ids)
        if is_rejected(outcome):
            _raise_rejected(outcome)
        ScheduledBlockRepository(db).update_batch(outcome)
        return _day_response(planner, day.value)


@app.delete("/schedule/{block_id}", response_model=RemoveBlockResponse)
def remove_block(block_id: str, db: Session = Depends(get_db)):
    """Remove a scheduled block (no-op for unknown ids)."""
    removed = ScheduledBlockRepository(db).delete(block_id)
    return RemoveBlockResponse(block_id=block_id, removed=removed)


@app.get("/schedule/{block_id}/layout", response_model=BlockLayout)
def block_layout(block_id: str, db: Session = Depends(get_db), grid: GridConfig = Depends(get_grid)):
    """Rendering geometry of one scheduled block."""
    planner = _planner(db, grid)
    block = planner.blocks.get(block_id)
    if block is None:
        raise HTTPException(status_code=404, detail=f"Unknown scheduled block {block_id}")
    return planner.layout(block)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
