"""Input coercion shared by the generators.

Callers may pass models, plain dicts (as decoded from a request body), or bare
team ids. Everything is validated here once so the algorithms can trust their
inputs.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from tourney.errors import InsufficientTeamsError, InvalidConfigurationError
from tourney.models.fixture import Fixture
from tourney.models.team import BYE_ID, Team, Venue

M = TypeVar("M", bound=BaseModel)

_fixture_adapter: TypeAdapter[Fixture] = TypeAdapter(Fixture)


def coerce_model(model_cls: type[M], value: M | Mapping[str, Any] | None) -> M:
    """Return ``value`` as a ``model_cls`` instance, defaults when ``None``."""
    if isinstance(value, model_cls):
        return value
    try:
        if value is None:
            return model_cls()
        return model_cls.model_validate(value)
    except ValidationError as exc:
        raise InvalidConfigurationError(
            f"invalid {model_cls.__name__}: {_summarize(exc)}"
        ) from exc


def coerce_team(value: Team | Mapping[str, Any] | str) -> Team:
    if isinstance(value, Team):
        return value
    if isinstance(value, str):
        return Team(id=value, name=value)
    try:
        return Team.model_validate(value)
    except ValidationError as exc:
        raise InvalidConfigurationError(f"invalid team: {_summarize(exc)}") from exc


def coerce_teams(
    teams: Iterable[Team | Mapping[str, Any] | str],
    minimum: int = 2,
) -> list[Team]:
    """Validate a team list: real teams only, unique ids, at least ``minimum``."""
    result = [coerce_team(t) for t in teams]
    seen: set[str] = set()
    for team in result:
        if team.id == BYE_ID:
            raise InvalidConfigurationError(f"team id {BYE_ID!r} is reserved")
        if team.id in seen:
            raise InvalidConfigurationError(f"duplicate team id {team.id!r}")
        seen.add(team.id)
    if len(result) < minimum:
        raise InsufficientTeamsError(
            f"at least {minimum} teams are required, got {len(result)}"
        )
    return result


def coerce_venues(venues: Iterable[Venue | Mapping[str, Any]] | None) -> list[Venue]:
    result: list[Venue] = []
    for v in venues or ():
        if isinstance(v, Venue):
            result.append(v)
            continue
        try:
            result.append(Venue.model_validate(v))
        except ValidationError as exc:
            raise InvalidConfigurationError(f"invalid venue: {_summarize(exc)}") from exc
    return result


def coerce_fixtures(fixtures: Iterable[Fixture | Mapping[str, Any]]) -> list[Fixture]:
    """Accept fixture models or dicts; dicts without ``kind`` are round-robin fixtures."""
    result: list[Fixture] = []
    for f in fixtures:
        if isinstance(f, Mapping):
            data = dict(f)
            data.setdefault("kind", "round_robin")
            try:
                f = _fixture_adapter.validate_python(data)
            except ValidationError as exc:
                msg = f"invalid fixture {data.get('id', '?')!r}: {_summarize(exc)}"
                raise InvalidConfigurationError(msg) from exc
        result.append(f)
    return result


def check_legs(legs: int) -> int:
    if isinstance(legs, bool) or not isinstance(legs, int) or legs not in (1, 2):
        raise InvalidConfigurationError(f"legs must be 1 or 2, got {legs!r}")
    return legs


def _summarize(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "value"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)
