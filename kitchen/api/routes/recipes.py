from fastapi import APIRouter, Depends, Query

from kitchen.api.dependencies import get_repository
from kitchen.domain.errors import NotFoundError
from kitchen.infra.Repository import KitchenRepository
from kitchen.logic.composition.graph import CompositionGraph
from kitchen.logic.scaling.engine import ScalingEngine
from kitchen.utilities.validators import ScalePreviewRequest, ScaleRequest, SubRecipeLinkInput

router = APIRouter(prefix="/api/recipes", tags=["recipes"])


def _recipe(repo: KitchenRepository, recipe_id: int):
    recipe = repo.get_recipe(recipe_id)
    if recipe is None:
        raise NotFoundError(f"Recipe {recipe_id} not found")
    return recipe


@router.get("")
def list_recipes(repo: KitchenRepository = Depends(get_repository)):
    recipes = sorted(repo.list_recipes(), key=lambda r: r.name.lower())
    return {"recipes": [r.to_dict() for r in recipes], "count": len(recipes)}


@router.post("/scale/preview")
def scale_preview(data: ScalePreviewRequest):
    """Scale one ingredient before it is saved to a recipe."""
    return ScalingEngine().preview(data.name, data.quantity, data.unit,
                                   data.from_portions, data.to_portions).to_dict()


@router.get("/{recipe_id}")
def recipe_detail(recipe_id: int, repo: KitchenRepository = Depends(get_repository)):
    recipe = _recipe(repo, recipe_id)
    data = recipe.to_dict()
    data["sub_recipes"] = [link.to_dict() for link in repo.get_sub_recipe_links(recipe_id)]
    return data


@router.post("/{recipe_id}/scale")
def scale_recipe(recipe_id: int, data: ScaleRequest, repo: KitchenRepository = Depends(get_repository)):
    recipe = _recipe(repo, recipe_id)
    scaled = ScalingEngine().scale_recipe(recipe, data.target_portions)
    return {
        "recipe_id": recipe.id,
        "from_portions": recipe.portions,
        "to_portions": data.target_portions,
        "ingredients": [s.to_dict() for s in scaled],
    }


@router.post("/{recipe_id}/sub-recipes", status_code=201)
def add_sub_recipe(recipe_id: int, data: SubRecipeLinkInput, repo: KitchenRepository = Depends(get_repository)):
    link = CompositionGraph(repo).link(recipe_id, data.child_recipe_id, data.portion_multiplier)
    return link.to_dict()


@router.get("/{recipe_id}/ingredients")
def resolved_ingredients(recipe_id: int, portion_multiplier: float = Query(default=1.0, gt=0),
                         repo: KitchenRepository = Depends(get_repository)):
    """Ingredients with sub-recipes flattened in."""
    _recipe(repo, recipe_id)
    resolved = CompositionGraph(repo).resolve_ingredients(recipe_id, portion_multiplier)
    return {"recipe_id": recipe_id, "ingredients": [i.to_dict() for i in resolved]}
