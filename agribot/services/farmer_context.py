"""Farmer context: the read-only snapshot of a farm profile used to personalize replies.

Also holds `FarmerProfileStore`, the in-process context provider. Profiles are
stored in the shape of the farm-management user document (`farmDetails`,
`stats`) and turned into a fresh `FarmerContext` per request.
"""

from __future__ import annotations

import copy
import threading
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

STAT_FIELDS = ("totalQueries", "diseasesDetected", "treatmentsApplied", "successfulHarvests")


def _as_count(value: Any) -> int:
    """Coerce a stats value to a non-negative int; anything unusable becomes 0."""
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        number = value
    else:
        try:
            number = int(value)
        except ValueError:
            # "3.0" and similar numeric strings
            try:
                number = int(float(value))
            except (ValueError, OverflowError):
                return 0
        except (TypeError, OverflowError):
            return 0
    return number if number > 0 else 0


def _as_text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


class FarmerContext(BaseModel):
    """Immutable per-request farm snapshot. Every field is optional."""

    # Accepts snake_case names and the camelCase keys used by stored profiles.
    model_config = ConfigDict(frozen=True, extra="ignore", alias_generator=to_camel, populate_by_name=True)

    crop_type: Optional[str] = None
    location_city: Optional[str] = None
    irrigation_type: Optional[str] = None
    soil_type: Optional[str] = None
    diseases_detected: int = 0
    treatments_applied: int = 0

    @field_validator("crop_type", "location_city", "irrigation_type", "soil_type", mode="before")
    @classmethod
    def _clean_text(cls, value: Any) -> Optional[str]:
        return _as_text(value)

    @field_validator("diseases_detected", "treatments_applied", mode="before")
    @classmethod
    def _clean_count(cls, value: Any) -> int:
        return _as_count(value)

    @classmethod
    def from_profile(cls, profile: Optional[Mapping[str, Any]]) -> "FarmerContext":
        """Build a context from a stored profile; missing branches give defaults."""
        profile = profile if isinstance(profile, Mapping) else {}
        farm = profile.get("farmDetails")
        farm = farm if isinstance(farm, Mapping) else {}
        stats = profile.get("stats")
        stats = stats if isinstance(stats, Mapping) else {}

        crop_type = None
        crops = farm.get("cropTypes")
        if isinstance(crops, (list, tuple)) and crops and isinstance(crops[0], Mapping):
            crop_type = crops[0].get("name")

        location = farm.get("location")
        city = location.get("city") if isinstance(location, Mapping) else None

        return cls(
            crop_type=crop_type,
            location_city=city,
            irrigation_type=farm.get("irrigationType"),
            soil_type=farm.get("soilType"),
            diseases_detected=stats.get("diseasesDetected"),
            treatments_applied=stats.get("treatmentsApplied"),
        )


class FarmerProfileStore:
    """Thread-safe in-memory profile store acting as the context provider."""

    def __init__(self, profiles: Optional[Mapping[str, Mapping[str, Any]]] = None) -> None:
        self._lock = threading.Lock()
        self._profiles: Dict[str, Dict[str, Any]] = {}
        for user_id, profile in (profiles or {}).items():
            self.save_profile(user_id, profile)

    def save_profile(self, user_id: str, profile: Mapping[str, Any]) -> None:
        with self._lock:
            self._profiles[user_id] = copy.deepcopy(dict(profile))

    def get_profile(self, user_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            profile = self._profiles.get(user_id)
            return copy.deepcopy(profile) if profile is not None else None

    def get_farmer_context(self, user_id: str) -> FarmerContext:
        """Never raises: an unknown user gets the all-defaults context."""
        return FarmerContext.from_profile(self.get_profile(user_id))

    def increment_stat(self, user_id: str, name: str, amount: int = 1) -> int:
        if name not in STAT_FIELDS:
            raise ValueError(f"Unknown stat: {name}")
        with self._lock:
            profile = self._profiles.setdefault(user_id, {})
            stats = profile.get("stats")
            if not isinstance(stats, dict):
                stats = {}
                profile["stats"] = stats
            stats[name] = _as_count(stats.get(name)) + amount
            return stats[name]


__all__ = ["FarmerContext", "FarmerProfileStore", "STAT_FIELDS"]
