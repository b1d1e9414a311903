from helpdesk.core.config import Settings
from helpdesk.models.schemas.health import HealthResponse
from helpdesk.repositories.health_repository import HealthRepository


class HealthService:
    def __init__(self, repository: HealthRepository, settings: Settings) -> None:
        self.repository = repository
        self.settings = settings

    def get_health(self) -> HealthResponse:
        database = self.repository.check_connection(self.settings.database_url)
        # An unmigrated schema cannot serve ticket queries.
        healthy = database.connected and database.revision is not None
        return HealthResponse(
            status="ok" if healthy else "degraded",
            environment=self.settings.app_env,
            database=database,
        )
