"""Entry point building a FastAPI app over one or more repositories."""
from fastapi import FastAPI

from recordstore.core.logging import configure_logging
from recordstore.repositories.repository import Repository
from recordstore.routers.records import build_router


def create_app(*repositories: Repository, title: str = "Record Store API") -> FastAPI:
    """Build the app; wrap it in a zero-argument function for uvicorn --factory."""
    configure_logging()
    app = FastAPI(title=title)
    app.state.repositories = {repo.objects_name: repo for repo in repositories}
    for repo in repositories:
        app.include_router(build_router(repo))
    return app
