"""HTTP layer: routes, page rendering and the application factory."""

from carrots.web.app import build_release_service, create_app

__all__ = ["build_release_service", "create_app"]
