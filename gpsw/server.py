# gpsw/server.py
"""
FastAPI server for the gpsw CLI.
"""

from fastapi import FastAPI, Request
from starlette.responses import JSONResponse

from gpsw.analysis.dispatcher import Dispatcher
from gpsw.storage.board import TrackerBoard
from gpsw.utils.log import get_logger
from gpsw.utils.validate import BoundsInput, FilterState, FilteredTrackerRow, LatestEvent, TrackerRow

logger = get_logger(__name__)


def _filter_state(dispatcher: Dispatcher, board: TrackerBoard) -> FilterState:
    bounds = dispatcher.filter.sample_bounds()
    return FilterState(**bounds._asdict(), label=board.filter_label)


def create_app(dispatcher: Dispatcher, board: TrackerBoard) -> FastAPI:
    """
    Build a FastAPI instance bound to a running dispatcher and its board.
    """
    app = FastAPI()
    app.state.dispatcher = dispatcher
    app.state.board = board

    @app.get("/api/status", response_class=JSONResponse)
    async def status() -> JSONResponse:
        return JSONResponse(status_code=200, content={"status": "ok"})

    @app.get("/api/trackers", response_model=list[TrackerRow])
    async def get_trackers(request: Request):
        return request.app.state.board.trackers()

    @app.get("/api/filtered", response_model=list[FilteredTrackerRow])
    async def get_filtered(request: Request):
        """
        In-range trackers with their distance over the current window.
        """
        return request.app.state.board.filtered()

    @app.get("/api/event", response_model=LatestEvent)
    async def get_event(request: Request):
        return request.app.state.board.latest_event()

    @app.get("/api/filter", response_model=FilterState)
    async def get_filter(request: Request):
        return _filter_state(request.app.state.dispatcher, request.app.state.board)

    @app.post("/api/filter/bounds", response_model=FilterState)
    async def set_bounds(request: Request, bounds: BoundsInput):
        """
        Apply raw bound edits; unparsable text clears the bound.
        """
        disp = request.app.state.dispatcher
        for name, text in bounds.model_dump(exclude_unset=True).items():
            disp.filter.set_from_text(name, text)
        return _filter_state(disp, request.app.state.board)

    @app.post("/api/filter/commit", response_model=FilterState)
    async def commit_filter(request: Request):
        disp = request.app.state.dispatcher
        label = disp.commit()
        if label is None:
            logger.warning("Commit produced no label; keeping the previous one")
        return _filter_state(disp, request.app.state.board)

    return app
