"""Rotation template lifecycle: default template, adding and removing locations."""
from __future__ import annotations
import logging
from typing import Iterable, Optional

from kitchen.domain.errors import NotFoundError, ValidationError
from kitchen.domain.Rotation import RotationTemplate
from kitchen.infra.Repository import KitchenRepository
from kitchen.utilities.config import ROTATION_LOCATIONS, ROTATION_WEEK_COUNT

logger = logging.getLogger(__name__)

__all__ = ["create_template", "ensure_default_template", "add_location", "remove_location"]


def create_template(repository: KitchenRepository, name: str, week_count: int,
                    locations: Iterable[str]) -> RotationTemplate:
    locations = [loc.strip() for loc in locations if loc and loc.strip()]
    if not isinstance(week_count, int) or week_count < 1:
        raise ValidationError(f"week_count must be a positive integer, got {week_count!r}")
    if not locations:
        raise ValidationError("a rotation template needs at least one location")
    template = repository.save_template(RotationTemplate(0, name, week_count, locations))
    logger.info("Created rotation template %s", template)
    return template


def ensure_default_template(repository: KitchenRepository, name: str = "Standard Rotation",
                            week_count: Optional[int] = None) -> RotationTemplate:
    """Return the active template, creating one from configuration if none exists."""
    for template in repository.list_templates():
        if template.is_active:
            return template
    return create_template(repository, name, week_count or ROTATION_WEEK_COUNT, ROTATION_LOCATIONS)


def _load(repository: KitchenRepository, template_id: int) -> RotationTemplate:
    template = repository.get_template(template_id)
    if template is None:
        raise NotFoundError(f"Rotation template {template_id} not found")
    return template


def add_location(repository: KitchenRepository, template_id: int, location: str) -> RotationTemplate:
    template = _load(repository, template_id)
    location = (location or "").strip()
    if not location:
        raise ValidationError("location must not be empty")
    if location not in template.locations:
        template.locations = sorted(set(template.locations) | {location})
        repository.save_template(template)
        logger.info("Added location %s to template %s", location, template_id)
    return template


def remove_location(repository: KitchenRepository, template_id: int, location: str) -> RotationTemplate:
    """Drop a location; refused while any of its slots still holds a recipe."""
    template = _load(repository, template_id)
    if location not in template.locations:
        raise ValidationError(f"location {location!r} is not active in template {template_id}")
    if len(template.locations) == 1:
        raise ValidationError("a rotation template needs at least one location")
    slots = [s for s in repository.list_slots(template_id) if s.key.location == location]
    if any(s.is_filled for s in slots):
        raise ValidationError(f"location {location!r} still has filled slots")
    for slot in slots:
        repository.delete_slot(slot.key)
    template.locations = [loc for loc in template.locations if loc != location]
    repository.save_template(template)
    logger.info("Removed location %s from template %s", location, template_id)
    return template
