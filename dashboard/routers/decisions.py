from fastapi import APIRouter, HTTPException, Depends, Request

from decision_log import DecisionLogViewer, StatusFilter
from dashboard.schemas import DecisionPageResponse, FiltersRequest, SubjectRequest

router = APIRouter(prefix="/decisions", tags=["Decision Log"])


def get_viewer(request: Request) -> DecisionLogViewer:
    return request.app.state.viewer


@router.get("", response_model=DecisionPageResponse)
async def get_current_page(viewer: DecisionLogViewer = Depends(get_viewer)):
    """
    Get the current page of decision cycles, newest first.
    """
    return DecisionPageResponse.from_page(viewer.page())


@router.put("/subject", response_model=DecisionPageResponse)
async def set_subject(body: SubjectRequest, viewer: DecisionLogViewer = Depends(get_viewer)):
    """
    Switch the trader being viewed and load its decisions.
    """
    page = await viewer.set_subject(body.trader_id)
    return DecisionPageResponse.from_page(page)


@router.put("/filters", response_model=DecisionPageResponse)
async def set_filters(body: FiltersRequest, viewer: DecisionLogViewer = Depends(get_viewer)):
    """
    Update search term and/or status filter. Resets to page 1.
    """
    if body.status_filter is not None:
        try:
            status_filter = StatusFilter.parse(body.status_filter)
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        viewer.set_status_filter(status_filter)

    if body.search_term is not None:
        viewer.set_search_term(body.search_term)

    return DecisionPageResponse.from_page(viewer.page())


@router.put("/page/{page}", response_model=DecisionPageResponse)
async def go_to_page(page: int, viewer: DecisionLogViewer = Depends(get_viewer)):
    """
    Jump to a page; out-of-range pages are clamped.
    """
    return DecisionPageResponse.from_page(viewer.go_to_page(page))


@router.post("/page/next", response_model=DecisionPageResponse)
async def next_page(viewer: DecisionLogViewer = Depends(get_viewer)):
    return DecisionPageResponse.from_page(viewer.next_page())


@router.post("/page/previous", response_model=DecisionPageResponse)
async def previous_page(viewer: DecisionLogViewer = Depends(get_viewer)):
    return DecisionPageResponse.from_page(viewer.previous_page())


@router.post("/refresh", response_model=DecisionPageResponse)
async def refresh(force: bool = False, viewer: DecisionLogViewer = Depends(get_viewer)):
    """
    Refresh now. Requests inside the de-duplication window reuse
    the cached result unless force=true.
    """
    page = await viewer.refresh(force=force)
    return DecisionPageResponse.from_page(page)
