"""Pipelines repository."""

from amocrm.core.endpoints import PIPELINES
from .base import Repository
from .models import Pipeline


class Pipelines(Repository):

    def list(self) -> list[Pipeline]:
        """List lead pipelines with their statuses."""
        data = self.api.request(PIPELINES, "GET")
        return [Pipeline.from_dict(item) for item in self.embedded(data, "pipelines")]
