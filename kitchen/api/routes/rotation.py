from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query

from kitchen.api.dependencies import get_repository
from kitchen.domain.errors import ValidationError
from kitchen.infra.Repository import KitchenRepository
from kitchen.logic.optimization.optimizer import FocusFlags, OptimizationEngine
from kitchen.logic.reporting.analysis import AnalysisEngine
from kitchen.logic.rotation.auto_fill import auto_fill
from kitchen.logic.rotation.grid import RotationGrid
from kitchen.logic.rotation.templates import (
    add_location, create_template, ensure_default_template, remove_location,
)
from kitchen.logic.shopping.list_builder import build_shopping_list
from kitchen.logic.weeks.week_mapper import normalize_iso_week
from kitchen.utilities.constants import DATE_FORMAT
from kitchen.utilities.validators import (
    AutoFillInput, ClearSlotsInput, LocationInput, OptimizeRequest, ShoppingListRequest,
    SlotUpdateInput, SwapBatchInput, SwapInput, TemplateInput,
)

router = APIRouter(prefix="/api/rotation", tags=["rotation"])


# -------------------- Templates --------------------
@router.get("/templates")
def list_templates(repo: KitchenRepository = Depends(get_repository)):
    return {"templates": [t.to_dict() for t in repo.list_templates()]}


@router.post("/templates", status_code=201)
def new_template(data: TemplateInput, repo: KitchenRepository = Depends(get_repository)):
    return create_template(repo, data.name, data.week_count, data.locations).to_dict()


@router.post("/templates/default")
def default_template(repo: KitchenRepository = Depends(get_repository)):
    """Return the active template, creating the configured default on first use."""
    return ensure_default_template(repo).to_dict()


@router.get("/templates/{template_id}")
def template_overview(template_id: int, repo: KitchenRepository = Depends(get_repository)):
    return RotationGrid(repo).overview(template_id)


@router.post("/templates/{template_id}/locations")
def new_location(template_id: int, data: LocationInput, repo: KitchenRepository = Depends(get_repository)):
    return add_location(repo, template_id, data.location).to_dict()


@router.delete("/templates/{template_id}/locations/{location}")
def drop_location(template_id: int, location: str, repo: KitchenRepository = Depends(get_repository)):
    return remove_location(repo, template_id, location).to_dict()


# -------------------- Calendar projection --------------------
@router.get("/templates/{template_id}/week")
def render_week(template_id: int, year: Optional[int] = Query(default=None),
                week: Optional[int] = Query(default=None),
                repo: KitchenRepository = Depends(get_repository)):
    """Menu entries for a calendar week (defaults to the current ISO week)."""
    if week is None or year is None:
        iso = date.today().isocalendar()
        year, week = iso[0], iso[1]
    entries = RotationGrid(repo).render_week(template_id, year, week)
    year, week = normalize_iso_week(year, week)
    return {"year": year, "week": week, "entries": [e.to_dict() for e in entries], "count": len(entries)}


@router.get("/templates/{template_id}/day/{day}")
def render_day(template_id: int, day: str, repo: KitchenRepository = Depends(get_repository)):
    try:
        d = datetime.strptime(day, DATE_FORMAT).date()
    except ValueError:
        raise ValidationError(f"date must be YYYY-MM-DD, got {day!r}")
    return {"date": day, "entries": [e.to_dict() for e in RotationGrid(repo).render_date(template_id, d)]}


# -------------------- Slots --------------------
@router.get("/templates/{template_id}/slots")
def list_slots(template_id: int, week_nr: Optional[int] = Query(default=None),
               repo: KitchenRepository = Depends(get_repository)):
    grid = RotationGrid(repo)
    grid.template(template_id)
    return {"slots": [s.to_dict() for s in grid.slots(template_id, week_nr)]}


@router.get("/templates/{template_id}/slots/{week_nr}/{day_of_week}/{meal}/{course}/{location}")
def get_slot(template_id: int, week_nr: int, day_of_week: int, meal: str, course: str, location: str,
             repo: KitchenRepository = Depends(get_repository)):
    grid = RotationGrid(repo)
    key = grid.make_key(template_id, week_nr, day_of_week, meal, course, location)
    return grid.get_slot(key).to_dict()


@router.put("/templates/{template_id}/slots")
def put_slot(template_id: int, data: SlotUpdateInput, repo: KitchenRepository = Depends(get_repository)):
    grid = RotationGrid(repo)
    key = grid.make_key(template_id, data.week_nr, data.day_of_week, data.meal, data.course, data.location)
    return grid.set_slot(key, data.recipe_id, data.portions).to_dict()


@router.post("/templates/{template_id}/clear")
def clear_slots(template_id: int, data: ClearSlotsInput, repo: KitchenRepository = Depends(get_repository)):
    cleared = RotationGrid(repo).clear(template_id, data.scope, data.week_nr, data.day_of_week)
    return {"status": "ok", "cleared": cleared}


@router.post("/templates/{template_id}/auto-fill")
def auto_fill_slots(template_id: int, data: AutoFillInput, repo: KitchenRepository = Depends(get_repository)):
    result = auto_fill(repo, template_id, overwrite=data.overwrite)
    return {"status": "ok", **result.to_dict()}


# -------------------- Analysis & optimization --------------------
@router.get("/templates/{template_id}/analysis")
def analysis(template_id: int, repo: KitchenRepository = Depends(get_repository)):
    return AnalysisEngine(repo).analyze(template_id).to_dict()


@router.post("/templates/{template_id}/optimize")
def optimize(template_id: int, data: OptimizeRequest, repo: KitchenRepository = Depends(get_repository)):
    """Proposal only; nothing is written until swaps are applied."""
    focus = FocusFlags(variety=data.variety, seasonality=data.seasonality, cost=data.cost)
    suggestions = [s.to_swap() for s in data.suggestions] if data.suggestions is not None else None
    return OptimizationEngine(repo).propose(template_id, focus, suggestions).to_dict()


@router.post("/templates/{template_id}/apply")
def apply_swap(template_id: int, data: SwapInput, repo: KitchenRepository = Depends(get_repository)):
    slot = OptimizationEngine(repo).apply(template_id, data.to_swap())
    return {"status": "ok", "slot": slot.to_dict()}


@router.post("/templates/{template_id}/apply-batch")
def apply_swaps(template_id: int, data: SwapBatchInput, repo: KitchenRepository = Depends(get_repository)):
    result = OptimizationEngine(repo).apply_many(template_id, [s.to_swap() for s in data.swaps])
    result["status"] = "ok" if not result["failed"] else "partial"
    return result


# -------------------- Shopping list --------------------
@router.post("/templates/{template_id}/shopping-list")
def shopping_list(template_id: int, data: ShoppingListRequest, repo: KitchenRepository = Depends(get_repository)):
    guests = {
        (g.date, g.meal, g.location): g.guests
        for g in data.guest_counts
    }
    return build_shopping_list(repo, template_id, data.year, data.week, guests)
