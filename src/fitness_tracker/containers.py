"""Dependency container wiring for the client."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from functools import partial

from supabase import Client, create_client

from fitness_tracker.adapters.functions_client import HttpxFunctionsClient
from fitness_tracker.adapters.supabase_auth_gateway import SupabaseAuthGateway
from fitness_tracker.adapters.supabase_goals_repository import SupabaseGoalsRepository
from fitness_tracker.adapters.supabase_workout_repository import (
    SupabaseWorkoutRepository,
)
from fitness_tracker.app_logging import configure_logging
from fitness_tracker.config import Settings
from fitness_tracker.domain.errors import ConfigurationError
from fitness_tracker.domain.meals import Product
from fitness_tracker.services.cache import LruCache
from fitness_tracker.services.dashboard import DashboardService
from fitness_tracker.services.diary import DiaryService
from fitness_tracker.services.fitness_api import FitnessApi
from fitness_tracker.services.goals import GoalsService
from fitness_tracker.services.progress import ProgressService
from fitness_tracker.services.search import SupersedingSearch, food_search
from fitness_tracker.services.session import SessionProvider
from fitness_tracker.services.workouts import LastWorkoutResolver


@dataclass
class AppContainer:
    """Holds client-wide dependencies."""

    settings: Settings
    supabase_client: Client
    session: SessionProvider
    functions_client: HttpxFunctionsClient
    api: FitnessApi
    goals_service: GoalsService
    diary_service: DiaryService
    last_workout: LastWorkoutResolver
    dashboard_service: DashboardService
    progress_service: ProgressService
    new_food_search: Callable[[], SupersedingSearch[Product]]
    close_resources: Callable[[], Awaitable[None]]


def build_container(
    settings: Settings | None = None, supabase_client: Client | None = None
) -> AppContainer:
    """Create the default dependency container and load the stored session."""
    resolved_settings = settings or Settings()
    configure_logging(resolved_settings.log_level)
    if supabase_client is None:
        try:
            supabase_client = create_client(
                resolved_settings.supabase_url, resolved_settings.supabase_anon_key
            )
        except Exception as exc:  # noqa: BLE001
            raise ConfigurationError(f"Cannot create Supabase client: {exc}") from exc

    session = SessionProvider(SupabaseAuthGateway(supabase_client))
    session.init()
    functions_client = HttpxFunctionsClient.create(
        base_url=resolved_settings.functions_base_url,
        anon_key=resolved_settings.supabase_anon_key,
        session=session,
        default_timeout=resolved_settings.request_timeout_seconds,
    )
    api = FitnessApi(
        client=functions_client,
        food_cache=LruCache(resolved_settings.food_search_cache_size),
        lookup_timeout=resolved_settings.lookup_timeout_seconds,
    )
    goals_service = GoalsService(
        repository=SupabaseGoalsRepository(supabase_client),
        current_user_id=session.user_id,
    )
    last_workout = LastWorkoutResolver(
        api=api, history=SupabaseWorkoutRepository(supabase_client)
    )
    dashboard_service = DashboardService(
        api=api,
        goals=goals_service,
        last_workout=last_workout,
        default_weight_kg=resolved_settings.default_body_weight_kg,
    )

    async def close_resources() -> None:
        session.close()
        await functions_client.close()

    return AppContainer(
        settings=resolved_settings,
        supabase_client=supabase_client,
        session=session,
        functions_client=functions_client,
        api=api,
        goals_service=goals_service,
        diary_service=DiaryService(api),
        last_workout=last_workout,
        dashboard_service=dashboard_service,
        progress_service=ProgressService(api),
        new_food_search=partial(
            food_search, api, resolved_settings.search_debounce_seconds
        ),
        close_resources=close_resources,
    )
